"""
SQL naming helpers for the relational query layer.

Builds quoted identifiers and SQL Server table/alias/column reference strings
so queries never hand-assemble ``[database].table`` fragments.
"""

from .core.identifier import qualify_table, quote_identifier
from .core.table import TableDescriptor, make_table

__all__ = [
    "quote_identifier",
    "qualify_table",
    "TableDescriptor",
    "make_table",
]
