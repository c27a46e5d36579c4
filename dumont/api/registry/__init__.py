"""Registry API resources."""
