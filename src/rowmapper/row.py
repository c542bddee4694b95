"""
Row sources and row sinks.

A row source is anything a database driver hands back for one result row:
a dict (psycopg ``dict_row``), a ``sqlite3.Row``, a namedtuple, a
``pandas.Series`` or a plain object with attributes. ``RowAdapter`` gives
all of them the same read-by-column-name interface and tells an absent
column apart from a column holding NULL.

``RowValues`` is the row sink: an ordered mapping of column name to a
DB-compatible value, ready to be bound as query parameters.
"""
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

import pandas as pd
from rowmapper.exceptions import ColumnNotFoundError

__all__ = ['RowAdapter', 'RowValues', 'iter_rows']


class RowAdapter:
    """Simple row adapter giving name-based access to a database row."""

    __slots__ = ('row',)

    def __init__(self, row: Any):
        self.row = row

    @classmethod
    def wrap(cls, row: Any) -> 'RowAdapter':
        """Return `row` unchanged if it is already adapted."""
        if isinstance(row, cls):
            return row
        return cls(row)

    def keys(self) -> list[str]:
        """Column names available in the row."""
        # sqlite3.Row, dict, Mapping
        if hasattr(self.row, 'keys') and callable(self.row.keys):
            return list(self.row.keys())
        # Namedtuple
        if hasattr(self.row, '_fields'):
            return list(self.row._fields)
        if isinstance(self.row, pd.Series):
            return list(self.row.index)
        if hasattr(self.row, '__dict__'):
            return list(vars(self.row))
        return []

    def has_column(self, column: str) -> bool:
        if isinstance(self.row, Mapping | pd.Series):
            return column in self.row
        return column in self.keys()

    def get_value(self, column: str) -> Any:
        """Get the raw value stored under `column`.

        A column holding NULL returns None; a column missing from the row
        raises ColumnNotFoundError.
        """
        if isinstance(self.row, Mapping | pd.Series):
            try:
                return self.row[column]
            except KeyError:
                raise ColumnNotFoundError(column) from None
        if hasattr(self.row, 'keys') and callable(self.row.keys):
            # sqlite3.Row raises IndexError for unknown names
            if column not in self.row.keys():
                raise ColumnNotFoundError(column)
            return self.row[column]
        if hasattr(self.row, '_fields') or hasattr(self.row, '__dict__'):
            try:
                return getattr(self.row, column)
            except AttributeError:
                raise ColumnNotFoundError(column) from None
        raise ColumnNotFoundError(column)

    def to_dict(self) -> dict[str, Any]:
        """Convert row to dictionary."""
        return {key: self.get_value(key) for key in self.keys()}

    def __repr__(self) -> str:
        return f'RowAdapter({self.row!r})'


class RowValues(dict):
    """Named values destined for one database row.

    Insertion order follows the order in which fields were written, which is
    the record plan's writable column order.
    """

    def put(self, column: str, value: Any) -> None:
        self[column] = value

    def put_null(self, column: str) -> None:
        self[column] = None

    def columns(self) -> list[str]:
        return list(self.keys())

    def to_params(self, columns: Iterable[str] | None = None) -> tuple:
        """Return values as a tuple of query parameters in column order.
        """
        if columns is None:
            return tuple(self.values())
        return tuple(self[column] for column in columns)


def iter_rows(rows: Any) -> Iterator[Any]:
    """Iterate over every row of a result set from the first to the last.

    Accepts any iterable of rows (a DB-API cursor, a list of dicts) and
    pandas DataFrames. None is an empty result set.
    """
    if rows is None:
        return iter(())
    if isinstance(rows, pd.DataFrame):
        return iter(rows.to_dict('records'))
    return iter(rows)
