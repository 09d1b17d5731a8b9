"""
Provider lookup by display name.
"""
from functools import lru_cache

from dbrows.exceptions import ProviderNotFound
from dbrows.provider.base import _PROVIDER_REGISTRY
from dbrows.provider.base import ProviderFactory as ProviderFactory
from dbrows.provider.base import register_provider as register_provider
from dbrows.provider.postgres import PostgresProvider as PostgresProvider
from dbrows.provider.sqlite import SQLiteProvider as SQLiteProvider
from dbrows.provider.sqlserver import SQLServerProvider as SQLServerProvider


@lru_cache(maxsize=8)
def _get_provider(provider_name: str) -> ProviderFactory:
    """Get cached provider instance for a display name."""
    if provider_name not in _PROVIDER_REGISTRY:
        raise ProviderNotFound(provider_name, get_available_providers())
    return _PROVIDER_REGISTRY[provider_name]()


def resolve_provider(provider_name: str) -> ProviderFactory:
    """Get the provider registered under an exact, case-sensitive display name.

    Raises ProviderNotFound listing every registered name otherwise.
    """
    return _get_provider(provider_name)


def get_available_providers() -> list[str]:
    """Return registered display names in registration order."""
    return list(_PROVIDER_REGISTRY.keys())


def is_supported_provider(provider_name: str) -> bool:
    """Check if a display name is registered."""
    return provider_name in _PROVIDER_REGISTRY


def clear_provider_cache() -> None:
    """Forget cached provider instances (after re-registering a name)."""
    _get_provider.cache_clear()
