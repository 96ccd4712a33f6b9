"""Core SQL utilities package."""

from .identifier import qualify_table, quote_identifier
from .table import TableDescriptor, make_table

__all__ = [
    "quote_identifier",
    "qualify_table",
    "TableDescriptor",
    "make_table",
]
