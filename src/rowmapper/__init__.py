"""
Lightweight mapping between Python records and database rows.

Declare a record once as a dataclass (or an annotated class) and convert
instances to and from rows:

- Module functions: rowmapper.from_row(row, User), using a shared default
  mapper
- RowMapper methods: mapper.from_row(row, User), for mappers built with
  custom type adapters or options

The module functions are facades over `get_default_mapper()`.
"""
__version__ = '0.1.0'

import threading
from typing import Any

from rowmapper.adapters import DEFAULT_TYPE_ADAPTERS, TEMPORAL_TYPE_ADAPTERS
from rowmapper.adapters import OptionalTypeAdapter, ScalarTypeAdapter
from rowmapper.adapters import TypeAdapter, TypeAdapterRegistry
from rowmapper.adapters import create_simple_adapter
from rowmapper.exceptions import ColumnNotFoundError, CyclicEmbeddingError
from rowmapper.exceptions import DuplicateColumnError, FieldAccessError
from rowmapper.exceptions import RowMapperError, TypeConversionError
from rowmapper.exceptions import UnsupportedTypeError
from rowmapper.naming import default_column_name
from rowmapper.options import MapperOptions
from rowmapper.orm import RowMapper
from rowmapper.plan import RecordPlan
from rowmapper.row import RowAdapter, RowValues
from rowmapper.schema import Column, Embedded, Ignore, column, embedded, ignored

_default_mapper: RowMapper | None = None
_default_mapper_lock = threading.Lock()


def get_default_mapper() -> RowMapper:
    """Get the shared mapper with default options and type adapters.
    """
    global _default_mapper
    if _default_mapper is None:
        with _default_mapper_lock:
            if _default_mapper is None:
                _default_mapper = RowMapper()
    return _default_mapper


def from_row(row: Any, target: Any) -> Any:
    """Create a record of class `target` from the row, or fill the instance `target`.
    """
    return get_default_mapper().from_row(row, target)


def to_values(instance: Any) -> RowValues:
    """Serialize a record into named row values.
    """
    return get_default_mapper().to_values(instance)


def list_from_rows(rows: Any, cls: type) -> list[Any]:
    """Convert every row of a result set into a record of `cls`.
    """
    return get_default_mapper().list_from_rows(rows, cls)


def get_projection(cls: type) -> list[str]:
    """Columns needed to create a record of `cls` from a row.
    """
    return get_default_mapper().get_projection(cls)


__all__ = [
    'RowMapper',
    'MapperOptions',
    'RecordPlan',
    'RowAdapter',
    'RowValues',
    'get_default_mapper',
    'from_row',
    'to_values',
    'list_from_rows',
    'get_projection',
    'default_column_name',
    'TypeAdapter',
    'ScalarTypeAdapter',
    'OptionalTypeAdapter',
    'TypeAdapterRegistry',
    'DEFAULT_TYPE_ADAPTERS',
    'TEMPORAL_TYPE_ADAPTERS',
    'create_simple_adapter',
    'Column',
    'Embedded',
    'Ignore',
    'column',
    'embedded',
    'ignored',
    'RowMapperError',
    'UnsupportedTypeError',
    'DuplicateColumnError',
    'ColumnNotFoundError',
    'TypeConversionError',
    'CyclicEmbeddingError',
    'FieldAccessError',
]
