import pytest
from dbrows.provider import clear_provider_cache


@pytest.fixture(autouse=True)
def clear_provider_instances():
    """Resolve providers afresh in every test so class patches apply."""
    clear_provider_cache()
    yield
    clear_provider_cache()


pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.sqlite',
]
