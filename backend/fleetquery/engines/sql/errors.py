"""
Errors raised by QueryBuilder.

Driver errors (connect, cursor, execute) propagate unchanged; these cover
what the builder itself rejects.
"""

import logging
from enum import Enum

_log = logging.getLogger(__name__)


class QueryError(Exception):
    """Base class for QueryBuilder errors."""

    pass


class BindError(QueryError, ValueError):
    """A value was rejected for a placeholder, or placeholders were left unbound."""

    pass


class FieldMappingError(QueryError, ValueError):
    """A single field failed to bind or materialize under the strict policy."""

    pass


class MaterializeError(QueryError, ValueError):
    """The target type could not be instantiated for a result row."""

    pass


class QueryClosedError(QueryError, RuntimeError):
    """The builder was used after its terminal call or close()."""

    pass


class FieldErrorPolicy(str, Enum):
    """What to do when one field fails: log and skip it, or raise."""

    LENIENT = "lenient"
    STRICT = "strict"


def report_field_error(policy: FieldErrorPolicy, message: str, error: Exception) -> None:
    """Raise FieldMappingError (strict) or log a warning and let the caller skip the field."""
    if policy == FieldErrorPolicy.STRICT:
        raise FieldMappingError(f"{message}: {error}") from error
    _log.warning("%s; field skipped", message, exc_info=error)
