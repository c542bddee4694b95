from dataclasses import asdict, dataclass
from typing import Any

from libb import ConfigOptions, load_options
from rowmapper.naming import available_namings, get_naming_function

__all__ = ['MapperOptions', 'mapper_options']


@dataclass
class MapperOptions(ConfigOptions):
    """Options

    supported column namings: `upper_snake`, `upper`, `verbatim`

    - column_naming: How field names become column names (default: upper_snake)
    - strict_types: Fail plan construction when a field has no type adapter;
      when False such fields are skipped with a warning (default: True)
    """
    column_naming: str = 'upper_snake'
    strict_types: bool = True

    def __post_init__(self):
        if self.column_naming not in available_namings():
            available = available_namings()
            raise ValueError(f'column_naming must be one of: {available}')
        if not isinstance(self.strict_types, bool):
            raise ValueError('strict_types must be a bool')
        return self

    @property
    def naming_function(self):
        return get_naming_function(self.column_naming)

    def copy(self) -> 'MapperOptions':
        return MapperOptions(**asdict(self))


@load_options(cls=MapperOptions)
def mapper_options(options: MapperOptions | dict[str, Any] | str | None = None,
                   config: Any | None = None, **kw: Any) -> MapperOptions:
    """Resolve mapper options

    Args:
        options: Can be:
                - MapperOptions object
                - Name of a setting in `config`
                - Dictionary of options
                - Options specified as keyword arguments
        config: Configuration object (for loading from config files)
        **kw: Additional keyword arguments to override options

    Returns
        MapperOptions instance
    """
    return options
