"""
SQL identifier handling utilities.

Quotes and qualifies identifiers (database, schema, table names) for the
dialects the query layer talks to.
"""

from typing import Literal, Optional

Dialect = Literal["postgresql", "mysql", "mssql"]

_DELIMITERS = {
    "postgresql": ('"', '"'),
    "mysql": ("`", "`"),
    "mssql": ("[", "]"),
}


def quote_identifier(name: str, dialect: Dialect = "mssql") -> str:
    """
    Quote a SQL identifier.

    The closing delimiter is escaped by doubling it, which is the rule for
    all supported dialects.

    Args:
        name: The identifier to quote
        dialect: Database dialect ("mssql", "postgresql", "mysql")

    Returns:
        Properly quoted identifier

    Examples:
        >>> quote_identifier("billing")
        '[billing]'
        >>> quote_identifier("odd]name")
        '[odd]]name]'
        >>> quote_identifier("orders", dialect="postgresql")
        '"orders"'
        >>> quote_identifier("orders", dialect="mysql")
        '`orders`'
    """
    try:
        opening, closing = _DELIMITERS[dialect]
    except KeyError:
        raise ValueError(f"Unsupported SQL dialect: {dialect!r}") from None
    escaped = name.replace(closing, closing * 2)
    return f"{opening}{escaped}{closing}"


def qualify_table(
    table: str, schema: Optional[str] = None, dialect: Dialect = "mssql"
) -> str:
    """
    Create a fully qualified table name with an optional, quoted prefix.

    Only the qualifier is quoted; the table name is emitted verbatim so
    callers can pass ``schema.table`` pairs such as ``dbo.orders``.

    Examples:
        >>> qualify_table("orders", schema="billing")
        '[billing].orders'
        >>> qualify_table("orders")
        'orders'
    """
    if schema:
        return f"{quote_identifier(schema, dialect)}.{table}"
    return table
