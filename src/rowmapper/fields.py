"""
Field adapters: move one field's value between a record and a row.

`ColumnFieldAdapter` binds a scalar field to one column and one type
adapter. `EmbeddedFieldAdapter` stores an embedded record inline by
delegating to that record's own plan; its columns are the embedded plan's
columns, unprefixed.
"""
from typing import TYPE_CHECKING, Any

from rowmapper.adapters.type_adapters import TypeAdapter
from rowmapper.exceptions import UnsupportedTypeError
from rowmapper.row import RowAdapter, RowValues
from rowmapper.schema import FieldDescriptor, get_value, set_value

if TYPE_CHECKING:
    from rowmapper.plan import RecordPlan

__all__ = [
    'FieldAdapter',
    'ColumnFieldAdapter',
    'EmbeddedFieldAdapter',
    'EmbeddedFieldInitializer',
]


class FieldAdapter:
    """Base class for field adapters.
    """

    def __init__(self, descriptor: FieldDescriptor) -> None:
        self.descriptor = descriptor

    def column_names(self) -> list[str]:
        """Columns read when populating this field."""
        raise NotImplementedError('Subclasses must implement column_names method')

    def writable_column_names(self) -> list[str]:
        """Columns produced when serializing this field."""
        raise NotImplementedError('Subclasses must implement writable_column_names method')

    def populate_from_row(self, row: RowAdapter, instance: Any) -> None:
        raise NotImplementedError('Subclasses must implement populate_from_row method')

    def write_to_values(self, instance: Any, values: RowValues) -> None:
        self.put_value(get_value(self.descriptor, instance), values)

    def put_value(self, field_value: Any, values: RowValues) -> None:
        raise NotImplementedError('Subclasses must implement put_value method')

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({self.descriptor.name!r} -> {self.column_names()})'


class ColumnFieldAdapter(FieldAdapter):
    """Scalar field stored in a single column."""

    def __init__(self, descriptor: FieldDescriptor, type_adapter: TypeAdapter | None,
                 column_name: str) -> None:
        super().__init__(descriptor)
        if type_adapter is None:
            raise UnsupportedTypeError(
                f'No type adapter registered for field {descriptor.owner.__name__}.{descriptor.name} '
                f'of type {descriptor.declared_type!r}')
        self.type_adapter = type_adapter
        self.column_name = column_name
        self._column_names = (column_name,)

    def column_names(self) -> list[str]:
        return list(self._column_names)

    def writable_column_names(self) -> list[str]:
        return self.column_names()

    def populate_from_row(self, row: RowAdapter, instance: Any) -> None:
        set_value(self.descriptor, instance, self.type_adapter.read(row, self.column_name))

    def put_value(self, field_value: Any, values: RowValues) -> None:
        self.type_adapter.write(values, self.column_name, field_value)


class EmbeddedFieldAdapter(FieldAdapter):
    """Embedded record whose columns are stored inline in the parent row.

    An embedded field holding None is written as NULL in every column of
    the embedded record.
    """

    def __init__(self, descriptor: FieldDescriptor, plan: 'RecordPlan') -> None:
        super().__init__(descriptor)
        self.plan = plan

    def column_names(self) -> list[str]:
        return self.plan.projection()

    def writable_column_names(self) -> list[str]:
        return self.plan.writable_columns()

    def populate_from_row(self, row: RowAdapter, instance: Any) -> None:
        target = get_value(self.descriptor, instance)
        if target is None:
            # instance was not built by create_instance
            target = self.plan.create_instance()
            set_value(self.descriptor, instance, target)
        self.plan.populate(row, target)

    def put_value(self, field_value: Any, values: RowValues) -> None:
        if field_value is None:
            for column in self.plan.writable_columns():
                values.put_null(column)
            return
        self.plan.serialize(field_value, values)


class EmbeddedFieldInitializer:
    """Assigns a fresh embedded record to its field on a new instance."""

    def __init__(self, descriptor: FieldDescriptor, plan: 'RecordPlan') -> None:
        self.descriptor = descriptor
        self.plan = plan

    def init_embedded_field(self, instance: Any) -> None:
        set_value(self.descriptor, instance, self.plan.create_instance())
