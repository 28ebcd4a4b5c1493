"""Dump document rendering.

Usage:
    from pg_dump_sample.dump import make_dump, DumpSummary, QueryTemplate
"""

from pg_dump_sample.dump.template import QueryTemplate
from pg_dump_sample.dump.writer import DumpSummary, DumpWriter, make_dump

__all__ = [
    "make_dump",
    "DumpWriter",
    "DumpSummary",
    "QueryTemplate",
]
