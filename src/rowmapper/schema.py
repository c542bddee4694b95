"""
Record schemas: field descriptors and field markers.

Record types are dataclasses or plain classes with annotated attributes.
Their persistable fields are discovered once per type and described by
immutable `FieldDescriptor` objects. Per-field markers are declared either
through dataclass field helpers::

    @dataclass
    class User:
        id: int
        name: str = column('USER_NAME', default='')
        address: Address = embedded(default_factory=Address)
        cache: dict = ignored(default_factory=dict)

or through ``typing.Annotated``::

    class User:
        id: int
        address: Annotated[Address, Embedded]
        cache: Annotated[dict, Ignore]

``ClassVar`` attributes (shared by all instances) and ``InitVar`` pseudo
fields (never stored on the instance) are not fields.
"""
import dataclasses
import inspect
import logging
from functools import lru_cache
from typing import Annotated, Any, ClassVar, get_args, get_origin
from typing import get_type_hints

from rowmapper.exceptions import FieldAccessError

logger = logging.getLogger(__name__)

__all__ = [
    'FieldDescriptor',
    'Ignore',
    'Embedded',
    'Column',
    'ignored',
    'embedded',
    'column',
    'fields_of',
    'new_instance',
    'get_value',
    'set_value',
]

METADATA_KEY = 'rowmapper'
MISSING = dataclasses.MISSING


class Ignore:
    """Marker: the field is not persisted."""


class Embedded:
    """Marker: the field holds a record whose columns are stored inline."""


class Column:
    """Marker: the field is stored under an explicit column name."""

    def __init__(self, name: str) -> None:
        if not name:
            raise ValueError('Column name must not be empty')
        self.name = name

    def __repr__(self) -> str:
        return f'Column({self.name!r})'

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Column) and other.name == self.name

    def __hash__(self) -> int:
        return hash((Column, self.name))


def _marked_field(markers: dict, kwargs: dict) -> Any:
    metadata = dict(kwargs.pop('metadata', None) or {})
    metadata[METADATA_KEY] = markers
    return dataclasses.field(metadata=metadata, **kwargs)


def ignored(**kwargs: Any) -> Any:
    """Dataclass field that is not persisted. Accepts `dataclasses.field` arguments."""
    return _marked_field({'ignore': True}, kwargs)


def embedded(**kwargs: Any) -> Any:
    """Dataclass field holding an embedded record. Accepts `dataclasses.field` arguments."""
    return _marked_field({'embedded': True}, kwargs)


def column(name: str, **kwargs: Any) -> Any:
    """Dataclass field stored under the column `name`. Accepts `dataclasses.field` arguments."""
    if not name:
        raise ValueError('Column name must not be empty')
    return _marked_field({'column': name}, kwargs)


@dataclasses.dataclass(frozen=True)
class FieldDescriptor:
    """One persistable field of a record type, independent of any instance.
    """
    name: str
    declared_type: Any
    owner: type
    is_ignored: bool = False
    is_embedded: bool = False
    column: str | None = None

    def __repr__(self) -> str:
        return f'FieldDescriptor({self.owner.__name__}.{self.name})'


def _is_class_var(hint: Any) -> bool:
    return hint is ClassVar or get_origin(hint) is ClassVar


def _is_init_var(hint: Any) -> bool:
    return isinstance(hint, dataclasses.InitVar) or hint is dataclasses.InitVar


def _annotation_markers(hint: Any) -> tuple[Any, dict]:
    """Split an Annotated hint into the bare type and its rowmapper markers."""
    markers = {}
    while get_origin(hint) is Annotated:
        hint, *extras = get_args(hint)
        for extra in extras:
            if extra is Ignore or isinstance(extra, Ignore):
                markers['ignore'] = True
            elif extra is Embedded or isinstance(extra, Embedded):
                markers['embedded'] = True
            elif isinstance(extra, Column):
                markers['column'] = extra.name
    return hint, markers


def _descriptor(cls: type, name: str, hint: Any,
                metadata: dict | None = None) -> FieldDescriptor:
    declared_type, markers = _annotation_markers(hint)
    markers.update((metadata or {}).get(METADATA_KEY, {}))
    return FieldDescriptor(
        name=name,
        declared_type=declared_type,
        owner=cls,
        is_ignored=bool(markers.get('ignore', False)),
        is_embedded=bool(markers.get('embedded', False)),
        column=markers.get('column'))


def _own_fields(klass: type, hints: dict) -> list[tuple[str, Any, Any]]:
    """Fields declared by `klass` itself as (name, hint, metadata) entries.

    A dataclass contributes its dataclass fields, any other class its own
    annotations.
    """
    if '__dataclass_fields__' in vars(klass):
        return [(f.name, hints.get(f.name, f.type), f.metadata)
                for f in dataclasses.fields(klass)]
    return [(name, hints[name], None)
            for name in inspect.get_annotations(klass)
            if name in hints
            and not _is_class_var(hints[name]) and not _is_init_var(hints[name])]


@lru_cache(maxsize=None)
def fields_of(cls: type) -> tuple[FieldDescriptor, ...]:
    """Enumerate the fields of a record type, inherited fields first.

    Ignored fields are included and flagged; class variables and init-only
    variables are excluded.
    """
    if not isinstance(cls, type):
        raise TypeError(f'Expected a record class, got {cls!r}')
    try:
        hints = get_type_hints(cls, include_extras=True)
    except NameError as e:
        raise TypeError(f'Cannot resolve annotations of {cls.__name__}: {e}') from e

    # base classes first; a redeclared field keeps its first position
    found = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, hint, metadata in _own_fields(klass, hints):
            found[name] = _descriptor(cls, name, hint, metadata)
    descriptors = tuple(found.values())

    logger.debug(f'Found {len(descriptors)} fields on {cls.__name__}')
    return descriptors


def new_instance(cls: type) -> Any:
    """Allocate a default instance of a record type.

    Dataclasses whose fields all have defaults, and plain classes, are
    built by calling the class with no arguments. Other dataclasses are
    allocated without running ``__init__``: fields with a default get it,
    the rest are set to None.
    """
    if not dataclasses.is_dataclass(cls):
        return cls()

    dc_fields = dataclasses.fields(cls)
    if all(not f.init or f.default is not MISSING or f.default_factory is not MISSING
           for f in dc_fields):
        return cls()

    instance = cls.__new__(cls)
    for f in dc_fields:
        if f.default_factory is not MISSING:
            value = f.default_factory()
        elif f.default is not MISSING:
            value = f.default
        else:
            value = None
        object.__setattr__(instance, f.name, value)
    return instance


def get_value(descriptor: FieldDescriptor, instance: Any) -> Any:
    """Read a field from a record instance."""
    try:
        return getattr(instance, descriptor.name)
    except AttributeError as e:
        raise FieldAccessError(
            f'Cannot read field {descriptor.name!r} of {type(instance).__name__}: {e}') from e


def set_value(descriptor: FieldDescriptor, instance: Any, value: Any) -> None:
    """Write a field of a record instance, frozen dataclasses included."""
    try:
        object.__setattr__(instance, descriptor.name, value)
    except (AttributeError, TypeError) as e:
        raise FieldAccessError(
            f'Cannot write field {descriptor.name!r} of {type(instance).__name__}: {e}') from e
