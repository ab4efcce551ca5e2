"""
Admin Search API Routes

JSON endpoints behind the admin search page: querying a collection,
word suggestions, and keeping the index in sync with edits.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query, Response

from ....api.dependencies import get_search_service
from ..models import IndexStats, SearchableEntity, SearchOptions, SearchResult
from ..services import SearchIndexService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["admin-search"])


@router.get("", response_model=List[IndexStats])
async def list_collections(service: SearchIndexService = Depends(get_search_service)):
    """List registered collections and their sizes."""
    return service.entity_types()


@router.post("/{entity_type}", response_model=SearchResult)
async def search_collection(
    entity_type: str,
    options: SearchOptions,
    service: SearchIndexService = Depends(get_search_service),
):
    """
    Search one collection.

    Unknown collections return an empty result rather than 404.
    """
    return service.search(entity_type, options)


@router.get("/{entity_type}/suggestions")
async def search_suggestions(
    entity_type: str,
    q: str = Query("", max_length=200, description="Partial word"),
    limit: int = Query(5, ge=1, le=50),
    service: SearchIndexService = Depends(get_search_service),
):
    """Suggest indexed words containing the partial query."""
    return {
        "query": q,
        "suggestions": service.get_search_suggestions(entity_type, q, limit),
    }


@router.put("/{entity_type}/index", response_model=SearchableEntity)
async def upsert_entity(
    entity_type: str,
    entity: SearchableEntity,
    service: SearchIndexService = Depends(get_search_service),
):
    """Add or replace an entity in a collection."""
    service.add_to_index(entity_type, entity)
    logger.info(f"Indexed {entity_type}/{entity.id}")
    return entity


@router.delete("/{entity_type}/index/{entity_id}", status_code=204)
async def remove_entity(
    entity_type: str,
    entity_id: str,
    service: SearchIndexService = Depends(get_search_service),
):
    """Remove an entity from a collection."""
    service.remove_from_index(entity_type, entity_id)
    logger.info(f"Removed {entity_type}/{entity_id} from index")
    return Response(status_code=204)


__all__ = ["router"]
