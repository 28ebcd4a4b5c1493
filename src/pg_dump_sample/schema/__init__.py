"""Live schema introspection.

Usage:
    from pg_dump_sample.schema import SchemaIntrospector
"""

from pg_dump_sample.schema.introspector import SchemaIntrospector

__all__ = ["SchemaIntrospector"]
