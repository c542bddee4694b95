"""
Type adapters: per-type conversion between row values and field values.

A type adapter knows how to read one value of its Python type from a named
column of a row and how to write such a value into a row sink. Adapters are
stateless and shared by every plan that references them.
"""
import datetime
from collections.abc import Callable
from typing import Any

import dateutil.parser
import numpy as np
import pandas as pd
from rowmapper.exceptions import TypeConversionError

__all__ = [
    'TypeAdapter',
    'ScalarTypeAdapter',
    'IntegerAdapter',
    'FloatAdapter',
    'BooleanAdapter',
    'StringAdapter',
    'BytesAdapter',
    'OptionalTypeAdapter',
    'DateAdapter',
    'DateTimeAdapter',
    'TimeAdapter',
    'create_simple_adapter',
    'is_null',
]

_CONVERSION_ERRORS = (TypeError, ValueError, ArithmeticError)


def is_null(value: Any) -> bool:
    """Check if a raw value represents SQL NULL.

    None, NaN, NaT and pandas.NA are all treated as NULL, the same values
    pandas produces for missing data.
    """
    if value is None:
        return True
    if isinstance(value, str | bytes):
        return False
    return bool(pd.api.types.is_scalar(value) and pd.isna(value))


def _to_native(value: Any) -> Any:
    """Unbox NumPy scalars into the equivalent Python value."""
    if isinstance(value, np.generic):
        return value.item()
    return value


class TypeAdapter:
    """Base class for type adapters.

    Subclasses implement `read` and `write`. The row passed to `read` is a
    `rowmapper.row.RowAdapter`; the values passed to `write` is a
    `rowmapper.row.RowValues`.
    """

    python_type: Any = object

    def read(self, row, column: str) -> Any:
        """Read the value stored under `column` in `row`."""
        raise NotImplementedError('Subclasses must implement read method')

    def write(self, values, column: str, value: Any) -> None:
        """Write `value` under `column` in `values`."""
        raise NotImplementedError('Subclasses must implement write method')

    def __repr__(self) -> str:
        name = getattr(self.python_type, '__name__', repr(self.python_type))
        return f'{self.__class__.__name__}({name})'


class ScalarTypeAdapter(TypeAdapter):
    """Adapter for one scalar type, converting with `from_db` and `to_db`.

    Conversion failures, including a NULL read into a non-nullable field,
    raise TypeConversionError.
    """

    def __init__(self, python_type: type) -> None:
        self.python_type = python_type

    def from_db(self, value: Any) -> Any:
        return self.python_type(value)

    def to_db(self, value: Any) -> Any:
        return _to_native(value)

    def read(self, row, column: str) -> Any:
        value = row.get_value(column)
        if value is None:
            raise TypeConversionError(f'NULL in non-nullable column {column!r}')
        try:
            return self.from_db(value)
        except _CONVERSION_ERRORS as e:
            raise TypeConversionError(
                f'Cannot read column {column!r} value {value!r} as {self.python_type.__name__}: {e}'
            ) from e

    def write(self, values, column: str, value: Any) -> None:
        try:
            converted = self.to_db(value)
        except _CONVERSION_ERRORS as e:
            raise TypeConversionError(
                f'Cannot write {value!r} as {self.python_type.__name__} to column {column!r}: {e}'
            ) from e
        values.put(column, converted)


class IntegerAdapter(ScalarTypeAdapter):
    """Integers of any width: int, numpy.int16, numpy.int32, numpy.int64."""

    def __init__(self, python_type: type = int) -> None:
        super().__init__(python_type)

    def from_db(self, value: Any) -> Any:
        return self.python_type(int(value))

    def to_db(self, value: Any) -> int:
        return int(value)


class FloatAdapter(ScalarTypeAdapter):
    """Floats: float, numpy.float32, numpy.float64."""

    def __init__(self, python_type: type = float) -> None:
        super().__init__(python_type)

    def from_db(self, value: Any) -> Any:
        return self.python_type(float(value))

    def to_db(self, value: Any) -> float:
        return float(value)


class BooleanAdapter(ScalarTypeAdapter):
    """Booleans, stored as integers by backends without a boolean type."""

    def __init__(self) -> None:
        super().__init__(bool)

    def from_db(self, value: Any) -> bool:
        return bool(int(value))

    def to_db(self, value: Any) -> bool:
        return bool(value)


class StringAdapter(ScalarTypeAdapter):
    """UTF-8 text."""

    def __init__(self) -> None:
        super().__init__(str)

    def from_db(self, value: Any) -> str:
        if isinstance(value, bytes | bytearray | memoryview):
            return bytes(value).decode('utf-8')
        return str(value)

    def to_db(self, value: Any) -> str:
        return str(value)


class BytesAdapter(ScalarTypeAdapter):
    """Raw byte sequences (BLOB, bytea)."""

    def __init__(self) -> None:
        super().__init__(bytes)

    def from_db(self, value: Any) -> bytes:
        if isinstance(value, str):
            return value.encode('utf-8')
        return bytes(value)

    def to_db(self, value: Any) -> bytes:
        return bytes(value)


class OptionalTypeAdapter(TypeAdapter):
    """Null-tolerant wrapper around another adapter.

    A NULL column reads as None and None writes an explicit NULL; the wrapped
    adapter is not consulted in either case. NULL includes the missing-value
    markers NaN, NaT and pandas.NA, so a float field holding NaN is written
    as NaN but reads back as None.
    """

    def __init__(self, delegate: TypeAdapter) -> None:
        self.delegate = delegate
        self.python_type = delegate.python_type

    def read(self, row, column: str) -> Any:
        if is_null(row.get_value(column)):
            return None
        return self.delegate.read(row, column)

    def write(self, values, column: str, value: Any) -> None:
        if value is None:
            values.put_null(column)
        else:
            self.delegate.write(values, column, value)

    def __repr__(self) -> str:
        return f'OptionalTypeAdapter({self.delegate!r})'


# Temporal adapters - stored as ISO 8601 text by backends without native types

def _as_text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode()
    return str(value)


class DateAdapter(ScalarTypeAdapter):
    """Dates, read from date objects or ISO 8601 text."""

    def __init__(self) -> None:
        super().__init__(datetime.date)

    def from_db(self, value: Any) -> datetime.date:
        if isinstance(value, datetime.datetime):
            return value.date()
        if isinstance(value, datetime.date):
            return value
        return dateutil.parser.isoparse(_as_text(value)).date()

    def to_db(self, value: datetime.date) -> str:
        return value.isoformat()


class DateTimeAdapter(ScalarTypeAdapter):
    """Datetimes, read from datetime objects or ISO 8601 text."""

    def __init__(self) -> None:
        super().__init__(datetime.datetime)

    def from_db(self, value: Any) -> datetime.datetime:
        if isinstance(value, pd.Timestamp):
            return value.to_pydatetime()
        if isinstance(value, datetime.datetime):
            return value
        return dateutil.parser.isoparse(_as_text(value))

    def to_db(self, value: datetime.datetime) -> str:
        return value.isoformat()


class TimeAdapter(ScalarTypeAdapter):
    """Times of day, read from time objects or ISO 8601 text."""

    def __init__(self) -> None:
        super().__init__(datetime.time)

    def from_db(self, value: Any) -> datetime.time:
        if isinstance(value, datetime.time):
            return value
        return dateutil.parser.isoparser().parse_isotime(_as_text(value))

    def to_db(self, value: datetime.time) -> str:
        return value.isoformat()


def create_simple_adapter(name: str, python_type: type,
                          reader: Callable[[Any], Any],
                          writer: Callable[[Any], Any] | None = None) -> TypeAdapter:
    """Factory function for creating simple type adapters.

    Args:
        name: Adapter name (used for the class name)
        python_type: Python type this adapter produces
        reader: Converts a raw, non-NULL column value into `python_type`
        writer: Converts a field value into a DB-compatible value; values
            are written unchanged when omitted

    Returns
        A TypeAdapter instance
    """
    class SimpleAdapter(ScalarTypeAdapter):
        def __init__(self):
            super().__init__(python_type=python_type)

        def from_db(self, value: Any) -> Any:
            return reader(value)

        def to_db(self, value: Any) -> Any:
            if writer is None:
                return _to_native(value)
            return writer(value)

    SimpleAdapter.__name__ = f'{name}Adapter'
    SimpleAdapter.__qualname__ = f'{name}Adapter'
    return SimpleAdapter()
