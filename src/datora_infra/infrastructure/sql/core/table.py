"""
Table descriptor builder for SQL Server queries.

Turns a table name and its column list into the string fragments a query
needs: the database-qualified table, the aliased FROM fragment and a lookup
of fully qualified column references keyed by upper-cased column name.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

from datora_infra.utils.logging import get_logger

from .identifier import qualify_table

logger = get_logger(__name__)


@dataclass(frozen=True)
class TableDescriptor:
    """
    Immutable naming bundle for one table.

    Attributes:
        table: Qualified table, e.g. ``[billing].orders``
        alias: FROM fragment, e.g. ``[billing].orders as [ORDERS]``
        columns: ``{"ID": "[billing].orders.id", ...}`` (read-only)
        raw_columns: Column names exactly as given
    """

    table: str
    alias: str
    columns: Mapping[str, str] = field(default_factory=dict)
    raw_columns: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", MappingProxyType(dict(self.columns)))

    def column(self, name: str) -> str:
        """Return the qualified reference for ``name`` (any case)."""
        return self.columns[name.upper()]


class TableFactory:
    """
    Builds :class:`TableDescriptor` objects for one database.

    Example:
        >>> tables = TableFactory("billing", table_prefix="tb_")
        >>> orders = tables("tb_orders", ["id", "total"])
        >>> orders.alias
        '[billing].tb_orders as [ORDERS]'
        >>> orders.columns["TOTAL"]
        '[billing].tb_orders.total'
    """

    def __init__(self, database: str, table_prefix: Optional[str] = None):
        if not database:
            raise ValueError("database name cannot be empty")
        self.database = database
        self.table_prefix = table_prefix or ""

    def default_alias(self, table: str) -> str:
        """Table name with the first occurrence of the prefix removed, upper-cased."""
        if self.table_prefix:
            table = table.replace(self.table_prefix, "", 1)
        return table.upper()

    def __call__(
        self,
        table: str,
        columns: Iterable[str],
        alias: Optional[str] = None,
    ) -> TableDescriptor:
        if not table:
            raise ValueError("table name cannot be empty")

        qualified = qualify_table(table, self.database, dialect="mssql")
        alias_name = alias if alias is not None else self.default_alias(table)

        raw_columns = tuple(columns)
        mapped: dict[str, str] = {}
        sources: dict[str, str] = {}
        for column in raw_columns:
            key = str(column).upper()
            if key in mapped:
                # Later column wins; the collision is reported, not resolved.
                logger.warning(
                    "sql.table.column_collision",
                    table=qualified,
                    key=key,
                    kept=column,
                    dropped=sources[key],
                )
            mapped[key] = f"{qualified}.{column}"
            sources[key] = column

        return TableDescriptor(
            table=qualified,
            alias=f"{qualified} as [{alias_name}]",
            columns=mapped,
            raw_columns=raw_columns,
        )


def make_table(database: str, table_prefix: Optional[str] = None) -> TableFactory:
    """
    Create a table descriptor builder bound to ``database``.

    Args:
        database: Database name, bracket-quoted in every reference
        table_prefix: Prefix stripped from table names when deriving aliases

    Returns:
        Callable ``(table, columns, alias=None) -> TableDescriptor``
    """
    return TableFactory(database, table_prefix)
