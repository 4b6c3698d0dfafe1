"""Dependency providers for the process-scoped components."""

from fastapi import Request

from cardregistry.cache import RegistryCache


def get_registry_cache(request: Request) -> RegistryCache:
    """The cache is built once by the app lifespan and shared by all requests."""
    return request.app.state.cache
