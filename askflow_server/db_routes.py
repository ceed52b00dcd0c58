"""API routes for saving, listing and deleting prompt/response pairs."""

from fastapi import APIRouter, HTTPException

from askflow.models.saved_query import (
    DeleteQueryResult,
    SavedQuery,
    SaveQueryRequest,
    SaveQueryResult,
)
from askflow.utils.identifiers import generate_query_id, is_valid_query_id, utc_timestamp
from askflow_server.query_db import MAX_LIST_LIMIT, delete_query, get_query, insert_query, list_queries

router = APIRouter()


@router.post("/save", response_model=SaveQueryResult)
def save_query(request: SaveQueryRequest) -> SaveQueryResult:
    """Persist a prompt/response pair.

    The server stamps its own timestamp; a client-sent one is ignored so
    ordering only depends on server time.
    """
    if not request.prompt.strip() or not request.response.strip():
        raise HTTPException(status_code=400, detail="Prompt and response are required")

    query = SavedQuery(
        id=generate_query_id(),
        prompt=request.prompt,
        response=request.response,
        timestamp=utc_timestamp(),
    )
    insert_query(query)
    return SaveQueryResult(id=query.id)


@router.get("/queries")
def list_saved_queries(limit: int = MAX_LIST_LIMIT) -> list[SavedQuery]:
    """List saved queries, newest first (at most 100)."""
    return list_queries(limit=limit)


@router.get("/queries/{query_id}")
def get_saved_query(query_id: str) -> SavedQuery:
    if not is_valid_query_id(query_id):
        raise HTTPException(status_code=400, detail=f"Invalid query id: {query_id}")
    query = get_query(query_id)
    if not query:
        raise HTTPException(status_code=404, detail=f"Query not found: {query_id}")
    return query


@router.delete("/queries/{query_id}", response_model=DeleteQueryResult)
def delete_saved_query(query_id: str) -> DeleteQueryResult:
    if not is_valid_query_id(query_id):
        raise HTTPException(status_code=400, detail=f"Invalid query id: {query_id}")
    if not delete_query(query_id):
        raise HTTPException(status_code=404, detail=f"Query not found: {query_id}")
    return DeleteQueryResult(id=query_id)
