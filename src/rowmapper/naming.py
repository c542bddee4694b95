"""
Column naming conventions.

Field names are written in camel or snake case in Python code while column
names follow the upper-snake-case convention (``mDbName`` -> ``M_DB_NAME``).
"""

__all__ = [
    'default_column_name',
    'upper_column_name',
    'verbatim_column_name',
    'get_naming_function',
    'available_namings',
]


def default_column_name(field_name: str) -> str:
    """Convert a camel-cased identifier into an upper-snake-case column name.

    An underscore is inserted before an upper-case letter that follows a
    lower-case letter, or that ends a run of capitals and starts a new word
    (``ABCd`` -> ``AB_CD``). Characters other than letters and digits are
    dropped unless they come first.

    >>> default_column_name('mDbName')
    'M_DB_NAME'
    >>> default_column_name('ID')
    'ID'
    """
    out = []
    last = len(field_name) - 1

    for i, c in enumerate(field_name):
        prev_char = field_name[i - 1] if i > 0 else ''
        next_char = field_name[i + 1] if i < last else ''

        if i == 0 or c.islower() or c.isdigit():
            out.append(c.upper())
        elif c.isupper():
            if prev_char.isalnum():
                if prev_char.islower() or next_char.islower():
                    out.append('_')
            out.append(c)

    return ''.join(out)


def upper_column_name(field_name: str) -> str:
    """Upper-case a snake_case field name, keeping its underscores."""
    return field_name.upper()


def verbatim_column_name(field_name: str) -> str:
    """Use the field name as the column name, unchanged."""
    return field_name


_NAMING_FUNCTIONS = {
    'upper_snake': default_column_name,
    'upper': upper_column_name,
    'verbatim': verbatim_column_name,
}


def get_naming_function(name: str):
    """Get the naming function registered under `name`."""
    if name not in _NAMING_FUNCTIONS:
        available = list(_NAMING_FUNCTIONS)
        raise ValueError(f'Unsupported column naming: {name}. Available: {available}')
    return _NAMING_FUNCTIONS[name]


def available_namings() -> list[str]:
    """Return list of registered naming convention names."""
    return list(_NAMING_FUNCTIONS)
