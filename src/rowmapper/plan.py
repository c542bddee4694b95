"""
Record plans: the compiled conversion strategy for one record type.

A plan is built once per record type from its field adapters. It fixes the
projection (columns read) and writable columns (columns written) at
construction, and records duplicated writable columns so that every write
through the plan fails while reads keep working.
"""
import logging
from collections import Counter
from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from rowmapper.exceptions import DuplicateColumnError
from rowmapper.fields import EmbeddedFieldInitializer, FieldAdapter
from rowmapper.row import RowAdapter, RowValues
from rowmapper.schema import new_instance

logger = logging.getLogger(__name__)

__all__ = ['RecordPlan', 'find_duplicates']

T = TypeVar('T')


def find_duplicates(columns: Sequence[str]) -> list[str]:
    """Names occurring more than once in `columns`, each listed once in first-seen order."""
    return [name for name, count in Counter(columns).items() if count > 1]


class RecordPlan(Generic[T]):
    """Conversion plan between instances of `record_type` and rows.

    Plans are immutable after construction and safe to share between threads.
    """

    def __init__(self, record_type: type[T], field_adapters: Sequence[FieldAdapter],
                 initializers: Sequence[EmbeddedFieldInitializer] = ()) -> None:
        self.record_type = record_type
        self._field_adapters = tuple(field_adapters)
        self._initializers = tuple(initializers)

        projection = []
        writable = []
        for adapter in self._field_adapters:
            projection.extend(adapter.column_names())
            writable.extend(adapter.writable_column_names())
        self._projection = tuple(projection)
        self._writable_columns = tuple(writable)
        self._writable_duplicates = tuple(find_duplicates(self._writable_columns))

        if self._writable_duplicates:
            logger.warning(f'{record_type.__name__} has duplicate writable columns '
                           f'{list(self._writable_duplicates)}; writes will fail')

    @property
    def field_adapters(self) -> tuple[FieldAdapter, ...]:
        return self._field_adapters

    @property
    def writable_duplicates(self) -> list[str]:
        return list(self._writable_duplicates)

    def create_instance(self) -> T:
        """Allocate a default instance with every embedded record allocated."""
        instance = new_instance(self.record_type)
        for initializer in self._initializers:
            initializer.init_embedded_field(instance)
        return instance

    def populate(self, row: Any, instance: T) -> T:
        """Fill `instance` from `row` and return it.

        Fields are set in declaration order; a failure leaves the fields
        already set with their new values.
        """
        row = RowAdapter.wrap(row)
        for adapter in self._field_adapters:
            adapter.populate_from_row(row, instance)
        return instance

    def serialize(self, instance: T, values: RowValues | None = None) -> RowValues:
        """Write every field of `instance` into `values` and return it."""
        if self._writable_duplicates:
            raise DuplicateColumnError(self._writable_duplicates)
        if values is None:
            values = self.create_values()
        for adapter in self._field_adapters:
            adapter.write_to_values(instance, values)
        return values

    def create_values(self) -> RowValues:
        return RowValues()

    def projection(self) -> list[str]:
        return list(self._projection)

    def writable_columns(self) -> list[str]:
        return list(self._writable_columns)

    def __repr__(self) -> str:
        return f'RecordPlan({self.record_type.__name__}, columns={list(self._projection)})'
