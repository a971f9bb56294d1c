"""
Engines: SQL (named-placeholder QueryBuilder).
"""

from fleetquery.engines.sql import FieldErrorPolicy, QueryBuilder, parse_template

__all__ = [
    "QueryBuilder",
    "FieldErrorPolicy",
    "parse_template",
]
