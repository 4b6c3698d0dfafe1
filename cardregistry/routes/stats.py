"""Routes for cache statistics"""

from fastapi import APIRouter, Depends

from cardregistry.cache import RegistryCache
from cardregistry.dependencies.services import get_registry_cache

router = APIRouter(prefix="/stats", tags=["Stats"])


@router.get("", response_model=dict[str, int])
def get_statistics(cache: RegistryCache = Depends(get_registry_cache)):
    return cache.get_statistics()
