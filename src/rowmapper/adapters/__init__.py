"""
Type adapters package.

This package provides the following components:

- type_adapters: Type adapter classes converting single column values
- registry: The type adapter registry, its builder and the default tables

Conversion principles:
1. Row -> record: a type adapter reads one named column and converts the raw
   driver value into the field's declared type
2. Record -> row: a type adapter converts the field value into a native,
   DB-compatible value and puts it into the row sink
3. Nullable declared types (``X | None``) use the adapter for ``X`` wrapped in
   OptionalTypeAdapter, so NULL handling never reaches the wrapped adapter
"""
from rowmapper.adapters.registry import *
from rowmapper.adapters.type_adapters import *
