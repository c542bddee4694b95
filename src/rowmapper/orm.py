"""
Row mapping facade.

`RowMapper` is the main entry point. Construct one with ``RowMapper()`` when
the default type adapters are enough, or with ``RowMapper.Builder()`` to add
adapters for custom field types::

    mapper = (RowMapper.Builder()
              .register_type_adapter(Money, MoneyAdapter(), nullable=True)
              .build())

    user = mapper.from_row(row, User)
    values = mapper.to_values(user)
    users = mapper.list_from_rows(cursor, User)

Plans are built lazily on first use of a record type and cached for the
lifetime of the mapper.
"""
import logging
from collections.abc import Callable, Iterable, Iterator
from typing import Any, TypeVar

import pandas as pd
from rowmapper.adapters.registry import DEFAULT_TYPE_ADAPTERS, TEMPORAL_TYPE_ADAPTERS
from rowmapper.adapters.registry import RegistryBuilder, TypeAdapterRegistry
from rowmapper.adapters.registry import nullable_of
from rowmapper.adapters.type_adapters import TypeAdapter
from rowmapper.cache import PlanCache
from rowmapper.exceptions import CyclicEmbeddingError, UnsupportedTypeError
from rowmapper.fields import ColumnFieldAdapter, EmbeddedFieldAdapter
from rowmapper.fields import EmbeddedFieldInitializer
from rowmapper.frame import frame_to_records, records_to_frame
from rowmapper.options import MapperOptions, mapper_options
from rowmapper.plan import RecordPlan
from rowmapper.row import RowAdapter, RowValues, iter_rows
from rowmapper.schema import FieldDescriptor, fields_of

logger = logging.getLogger(__name__)

__all__ = ['RowMapper', 'ColumnFunctionBuilder']

T = TypeVar('T')


class ColumnFunctionBuilder:
    """Builds functions reading a single column of a row as a given type.

    Get instances with `RowMapper.get_column`.
    """

    def __init__(self, registry: TypeAdapterRegistry, column_name: str) -> None:
        self._registry = registry
        self.column_name = column_name

    def as_type(self, tp: Any) -> Callable[[Any], Any]:
        """Return a function converting the column of a row into `tp`.

        Raises UnsupportedTypeError right away if no type adapter is
        registered for `tp`.
        """
        adapter = self._registry.lookup(tp)
        if adapter is None:
            raise UnsupportedTypeError(f'No type adapter registered for {tp!r}')
        column_name = self.column_name

        def read_column(row: Any) -> Any:
            return adapter.read(RowAdapter.wrap(row), column_name)

        read_column.__name__ = f'read_{column_name}'
        return read_column


class RowMapper:
    """Converts records to and from database rows.
    """

    def __init__(self, options: MapperOptions | dict | None = None,
                 registry: TypeAdapterRegistry | None = None) -> None:
        self.options = mapper_options(options)
        self._registry = DEFAULT_TYPE_ADAPTERS if registry is None else registry
        self._naming = self.options.naming_function
        self._plans = PlanCache()

    @property
    def registry(self) -> TypeAdapterRegistry:
        return self._registry

    # Reading

    def from_row(self, row: Any, target: type[T] | T) -> T:
        """Create or fill a record from the row.

        Args:
            row: A row positioned at the data to read (dict, sqlite3.Row,
                namedtuple, pandas.Series)
            target: The record class to create, or an existing instance to
                fill in place

        Returns
            The populated record; the same object when an instance is given
        """
        if isinstance(target, type):
            plan = self.plan_for(target)
            return plan.populate(row, plan.create_instance())
        return self.plan_for(type(target)).populate(row, target)

    def iter_from_rows(self, rows: Any, cls: type[T]) -> Iterator[T]:
        """Lazily create one record per row of a result set."""
        plan = None
        for row in iter_rows(rows):
            if plan is None:
                plan = self.plan_for(cls)
            yield plan.populate(row, plan.create_instance())

    def list_from_rows(self, rows: Any, cls: type[T]) -> list[T]:
        """Convert a whole result set into a list of records.

        `rows` may be a DB-API cursor, any iterable of rows or a DataFrame;
        None or an empty result set gives an empty list. A cursor is read to
        the end but not closed.
        """
        if isinstance(rows, pd.DataFrame):
            return frame_to_records(self.plan_for(cls), rows)
        return list(self.iter_from_rows(rows, cls))

    def function_for(self, cls: type[T]) -> Callable[[Any], T]:
        """Return a function converting a row into a new record of `cls`."""
        plan = self.plan_for(cls)

        def from_row(row: Any) -> T:
            return plan.populate(row, plan.create_instance())

        return from_row

    def get_column(self, column_name: str) -> ColumnFunctionBuilder:
        """Start building a single-column reader, see `ColumnFunctionBuilder.as_type`."""
        if not column_name:
            raise ValueError('column_name must not be empty')
        return ColumnFunctionBuilder(self._registry, column_name)

    def column_reader(self, column_name: str, tp: Any) -> Callable[[Any], Any]:
        return self.get_column(column_name).as_type(tp)

    # Writing

    def to_values(self, instance: Any) -> RowValues:
        """Serialize a record into named row values."""
        plan = self.plan_for(type(instance))
        return plan.serialize(instance, plan.create_values())

    def to_frame(self, instances: Iterable[Any], cls: type | None = None) -> pd.DataFrame:
        """Serialize records into a DataFrame.

        `cls` is required when `instances` may be empty; otherwise it is
        taken from the first record.
        """
        instances = list(instances)
        if cls is None:
            if not instances:
                raise ValueError('cls is required to build a frame from no records')
            cls = type(instances[0])
        return records_to_frame(self.plan_for(cls), instances)

    # Plans

    def get_projection(self, cls: type) -> list[str]:
        """Columns needed to create a record of `cls` from a row."""
        return self.plan_for(cls).projection()

    def get_writable_columns(self, cls: type) -> list[str]:
        """Columns produced when serializing a record of `cls`."""
        return self.plan_for(cls).writable_columns()

    def plan_for(self, cls: type[T]) -> RecordPlan[T]:
        """Get the cached plan for `cls`, building it on first use."""
        return self._resolve_plan(cls, ())

    def _resolve_plan(self, cls: type, building: tuple[type, ...]) -> RecordPlan:
        cached = self._plans.get(cls)
        if cached is not None:
            return cached
        if cls in building:
            chain = ' -> '.join(klass.__name__ for klass in (*building, cls))
            raise CyclicEmbeddingError(f'Cyclic embedding: {chain}')
        return self._plans.put(cls, self._build_plan(cls, (*building, cls)))

    def _column_name(self, descriptor: FieldDescriptor) -> str:
        return descriptor.column or self._naming(descriptor.name)

    def _build_plan(self, cls: type, building: tuple[type, ...]) -> RecordPlan:
        field_adapters = []
        initializers = []

        for descriptor in fields_of(cls):
            if descriptor.is_ignored:
                continue

            if descriptor.is_embedded:
                embedded_type = nullable_of(descriptor.declared_type)
                if not isinstance(embedded_type, type):
                    raise UnsupportedTypeError(
                        f'Embedded field {cls.__name__}.{descriptor.name} must be declared '
                        f'as a record class, got {descriptor.declared_type!r}')
                plan = self._resolve_plan(embedded_type, building)
                field_adapters.append(EmbeddedFieldAdapter(descriptor, plan))
                initializers.append(EmbeddedFieldInitializer(descriptor, plan))
                continue

            type_adapter = self._registry.lookup(descriptor.declared_type)
            if type_adapter is None and not self.options.strict_types:
                logger.warning(f'Skipping field {cls.__name__}.{descriptor.name}: '
                               f'no type adapter for {descriptor.declared_type!r}')
                continue
            field_adapters.append(
                ColumnFieldAdapter(descriptor, type_adapter, self._column_name(descriptor)))

        logger.debug(f'Built plan for {cls.__name__} with {len(field_adapters)} field adapters')
        return RecordPlan(cls, field_adapters, initializers)

    def __repr__(self) -> str:
        return (f'RowMapper(column_naming={self.options.column_naming!r}, '
                f'types={len(self._registry)}, plans={len(self._plans)})')

    class Builder:
        """Builds a RowMapper with custom type adapters and options.

        `build` has no side effects on the builder and may be called many
        times; each mapper gets its own registry snapshot.
        """

        def __init__(self, options: MapperOptions | dict | None = None, **kwargs: Any) -> None:
            if isinstance(options, MapperOptions):
                options = options.copy()
            self._options = mapper_options(options, **kwargs)
            self._registry = RegistryBuilder()

        def register_type_adapter(self, tp: Any, adapter: TypeAdapter,
                                  nullable: bool = False) -> 'RowMapper.Builder':
            """Use `adapter` for fields declared as `tp`.

            With `nullable`, fields declared as ``tp | None`` are handled too,
            reading NULL as None.
            """
            self._registry.register(tp, adapter, nullable=nullable)
            return self

        def register_temporal_adapters(self) -> 'RowMapper.Builder':
            """Support date, datetime and time fields stored as ISO 8601 text."""
            self._registry.update(TEMPORAL_TYPE_ADAPTERS)
            return self

        def with_options(self, **kwargs: Any) -> 'RowMapper.Builder':
            self._options = mapper_options(self._options.copy(), **kwargs)
            return self

        def build(self) -> 'RowMapper':
            return RowMapper(self._options, self._registry.build())
