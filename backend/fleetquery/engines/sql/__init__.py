"""
Named-placeholder SQL: template parser, parameter binder, result materializer.

Exports: QueryBuilder, parse_template, FieldErrorPolicy and the QueryBuilder errors.
"""

from fleetquery.engines.sql.errors import (
    BindError,
    FieldErrorPolicy,
    FieldMappingError,
    MaterializeError,
    QueryClosedError,
    QueryError,
)
from fleetquery.engines.sql.parser import ParsedTemplate, parse_template
from fleetquery.engines.sql.query_builder import QueryBuilder

__all__ = [
    "QueryBuilder",
    "ParsedTemplate",
    "parse_template",
    "FieldErrorPolicy",
    "QueryError",
    "BindError",
    "FieldMappingError",
    "MaterializeError",
    "QueryClosedError",
]
