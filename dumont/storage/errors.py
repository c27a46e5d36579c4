"""Translation of driver failures into the registry error taxonomy."""

from __future__ import annotations

import contextlib
import typing as typ

from sqlalchemy.exc import SQLAlchemyError

from dumont.errors import BackendError
from dumont.logging import get_logger, log_exception

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = get_logger(__name__)


@contextlib.contextmanager
def backend_errors(operation: str) -> cabc.Iterator[None]:
    """Log and re-raise any ``SQLAlchemyError`` as :class:`BackendError`.

    Errors the caller already translated (``NotFoundError``,
    ``AlreadyExistsError``) pass through untouched.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        log_exception(logger, f"Storage operation {operation} failed", exc)
        raise BackendError(operation) from exc


__all__ = ["backend_errors"]
