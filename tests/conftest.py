import pathlib
import site

import pytest
from rowmapper import RowMapper

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)


@pytest.fixture
def mapper():
    """Fresh mapper with default options, so plan caches never leak between tests."""
    return RowMapper()


pytest_plugins = [
    'tests.fixtures.records',
    'tests.fixtures.sqlite',
]
