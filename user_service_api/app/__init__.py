"""
Application package initializer.

This package contains the main entrypoint for the API and its layers:
``api`` (HTTP routes), ``services`` (business rules), ``repositories``
(storage), ``models`` (domain objects), ``schemas`` (request and
response bodies) and ``core`` (configuration, logging, tracing, errors
and the database).  Calls only go downward through these layers.
"""

from .main import app  # noqa: F401
