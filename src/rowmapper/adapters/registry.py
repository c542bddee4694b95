"""
Type adapter registry.

Maps declared field types to type adapters. The default table covers the
supported scalar kinds in both non-nullable and nullable (``X | None``)
form and is a process-wide constant; registries handed to a mapper are
immutable snapshots produced by `RegistryBuilder`.
"""
import logging
import types
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Annotated, Any, Optional, Union, get_args, get_origin

import numpy as np
from rowmapper.adapters.type_adapters import BooleanAdapter, BytesAdapter
from rowmapper.adapters.type_adapters import DateAdapter, DateTimeAdapter
from rowmapper.adapters.type_adapters import FloatAdapter, IntegerAdapter
from rowmapper.adapters.type_adapters import OptionalTypeAdapter
from rowmapper.adapters.type_adapters import StringAdapter, TimeAdapter
from rowmapper.adapters.type_adapters import TypeAdapter

logger = logging.getLogger(__name__)

__all__ = [
    'TypeAdapterRegistry',
    'RegistryBuilder',
    'DEFAULT_TYPE_ADAPTERS',
    'TEMPORAL_TYPE_ADAPTERS',
    'canonical_type',
    'is_nullable',
    'nullable_of',
]

NoneType = type(None)


def _strip_annotated(tp: Any) -> Any:
    while get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    return tp


def canonical_type(tp: Any) -> Any:
    """Normalize a declared type into a registry key.

    ``Annotated`` metadata is dropped and ``X | None``, ``Union[X, None]``
    and ``Optional[X]`` all become ``Optional[X]``.
    """
    tp = _strip_annotated(tp)
    if get_origin(tp) in {Union, types.UnionType}:
        args = tuple(canonical_type(arg) for arg in get_args(tp))
        rest = tuple(arg for arg in args if arg is not NoneType)
        if len(rest) == len(args):
            return Union[args]
        if len(rest) == 1:
            return Optional[rest[0]]
        return Optional[Union[rest]]
    return tp


def is_nullable(tp: Any) -> bool:
    """Check if a declared type accepts None."""
    tp = canonical_type(tp)
    return get_origin(tp) is Union and NoneType in get_args(tp)


def nullable_of(tp: Any) -> Any:
    """Return the non-None part of a nullable type, or the type itself."""
    tp = canonical_type(tp)
    if not is_nullable(tp):
        return tp
    rest = tuple(arg for arg in get_args(tp) if arg is not NoneType)
    return rest[0] if len(rest) == 1 else Union[rest]


class TypeAdapterRegistry(Mapping):
    """Immutable mapping of declared type to type adapter.

    Types match exactly; an adapter registered for a class is not used for
    its subclasses.
    """

    def __init__(self, adapters: Mapping[Any, TypeAdapter] | None = None) -> None:
        self._adapters = MappingProxyType(
            {canonical_type(tp): adapter for tp, adapter in (adapters or {}).items()})

    def lookup(self, tp: Any) -> TypeAdapter | None:
        """Get the adapter for a declared type, or None if not registered."""
        return self._adapters.get(canonical_type(tp))

    def supports(self, tp: Any) -> bool:
        return canonical_type(tp) in self._adapters

    def __getitem__(self, tp: Any) -> TypeAdapter:
        return self._adapters[canonical_type(tp)]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._adapters)

    def __len__(self) -> int:
        return len(self._adapters)

    def __repr__(self) -> str:
        return f'TypeAdapterRegistry({len(self)} types)'


def _with_nullable(adapters: dict[Any, TypeAdapter]) -> dict[Any, TypeAdapter]:
    """Add the nullable form of every adapter in `adapters`."""
    result = dict(adapters)
    for tp, adapter in adapters.items():
        result[Optional[tp]] = OptionalTypeAdapter(adapter)
    return result


DEFAULT_TYPE_ADAPTERS = TypeAdapterRegistry(_with_nullable({
    np.int16: IntegerAdapter(np.int16),
    np.int32: IntegerAdapter(np.int32),
    int: IntegerAdapter(int),
    np.int64: IntegerAdapter(np.int64),
    bool: BooleanAdapter(),
    np.float32: FloatAdapter(np.float32),
    float: FloatAdapter(float),
    np.float64: FloatAdapter(np.float64),
    str: StringAdapter(),
    bytes: BytesAdapter(),
}))

TEMPORAL_TYPE_ADAPTERS = TypeAdapterRegistry(_with_nullable({
    DateAdapter().python_type: DateAdapter(),
    DateTimeAdapter().python_type: DateTimeAdapter(),
    TimeAdapter().python_type: TimeAdapter(),
}))


class RegistryBuilder:
    """Copy-on-write builder for type adapter registries.

    Starts from a base registry (the default table unless given) and layers
    registrations on top. `build` returns a new snapshot each time; later
    registrations never reach a snapshot already built.
    """

    def __init__(self, base: Mapping[Any, TypeAdapter] | None = None) -> None:
        self._adapters = dict(DEFAULT_TYPE_ADAPTERS if base is None else base)

    def register(self, tp: Any, adapter: TypeAdapter,
                 nullable: bool = False) -> 'RegistryBuilder':
        """Register `adapter` for fields declared as `tp`.

        With `nullable`, ``tp | None`` is also registered, wrapped in an
        OptionalTypeAdapter.
        """
        if not isinstance(adapter, TypeAdapter):
            raise TypeError(f'Expected a TypeAdapter for {tp!r}, got {type(adapter).__name__}')
        key = canonical_type(tp)
        if key in self._adapters:
            logger.debug(f'Replacing type adapter for {key!r} with {adapter!r}')
        self._adapters[key] = adapter
        if nullable:
            self._adapters[Optional[key]] = OptionalTypeAdapter(adapter)
        return self

    def update(self, adapters: Mapping[Any, TypeAdapter]) -> 'RegistryBuilder':
        for tp, adapter in adapters.items():
            self.register(tp, adapter)
        return self

    def build(self) -> TypeAdapterRegistry:
        return TypeAdapterRegistry(self._adapters)
