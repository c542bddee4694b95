"""
Mapper-specific exception classes.
"""


class RowMapperError(Exception):
    """Base class for all rowmapper errors.
    """


class UnsupportedTypeError(RowMapperError, TypeError):
    """No type adapter is registered for a field's declared type.

    Raised while a plan is being built, never while rows are processed.
    """


class CyclicEmbeddingError(RowMapperError, TypeError):
    """A record type embeds itself, directly or through other embedded types.
    """


class DuplicateColumnError(RowMapperError, ValueError):
    """Two or more fields of one record claim the same writable column.
    """

    def __init__(self, columns: list[str]) -> None:
        self.columns = list(columns)
        super().__init__(f'Duplicate columns definitions: {", ".join(self.columns)}')


class ColumnNotFoundError(RowMapperError, KeyError):
    """A required column is absent from the row.
    """

    def __init__(self, column: str) -> None:
        self.column = column
        super().__init__(column)

    def __str__(self) -> str:
        return f'Column not found in row: {self.column!r}'


class TypeConversionError(RowMapperError, ValueError):
    """Error converting a value between Python and its row representation.
    """


class FieldAccessError(AssertionError):
    """A field could not be read from or written to a record instance.

    Fields are resolved by the mapper itself, so this indicates a logic error
    in the record definition rather than a recoverable condition.
    """
