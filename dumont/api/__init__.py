"""Dumont HTTP API layer.

This package provides the Falcon Asynchronous Server Gateway Interface
(ASGI) application exposing the registry over JSON.

Usage
-----
Create and run the application::

    from dumont.api import AppDependencies, create_app

    app = create_app()                                  # health-only mode
    app = create_app(AppDependencies(registry=service))  # full mode
"""

from dumont.api.app import AppDependencies, create_app

__all__ = ["AppDependencies", "create_app"]
