"""
HTTP routes for the tracker API.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from tracker.auth import (
    authenticate,
    hash_password,
    is_hashed,
    issue_token,
    public_profile,
    verify_password,
)
from tracker.config import Settings
from tracker.dependencies import get_app_settings, get_store
from tracker.query import (
    ListQuery,
    QueryError,
    apply_filters,
    apply_slice,
    apply_sort,
    embed_children,
    expand_parent,
    parse_query,
    plural,
)
from tracker.schemas import (
    HealthResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
)
from tracker.store import DocumentStore, RecordNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(responses={401: {"model": MessageResponse}})
health_router = APIRouter()


@health_router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc))


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={500: {"model": MessageResponse}},
)
def login(
    payload: LoginRequest,
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    """
    Exchange a username/password pair for a signed token.

    Unknown users and wrong passwords get the same answer.
    """
    try:
        user = authenticate(
            store.find_all("users"), payload.username, payload.password
        )
        if user is None:
            return JSONResponse(
                status_code=401, content={"message": "Invalid credentials"}
            )
        token = issue_token(user, settings)
    except Exception:
        logger.exception("Login error")
        return JSONResponse(
            status_code=500, content={"message": "Server error during login"}
        )
    return LoginResponse(token=token, user=public_profile(user))


@router.get("/db")
def database(store: DocumentStore = Depends(get_store)):
    return store.snapshot()


def _parse(request: Request) -> ListQuery:
    try:
        return parse_query(request.query_params.multi_items())
    except QueryError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _attach_relations(
    store: DocumentStore, collection: str, records: list[dict], query: ListQuery
) -> None:
    for child in query.embed:
        if not store.has_collection(child):
            continue
        children = store.find_all(child)
        for record in records:
            embed_children(record, collection, child, children)
    for parent in query.expand:
        parent_collection = plural(parent)
        if not store.has_collection(parent_collection):
            continue
        parents = store.find_all(parent_collection)
        for record in records:
            expand_parent(record, parent, parents)


def _prepare(
    store: DocumentStore, collection: str, payload: dict, item_id: str | None = None
) -> dict:
    if collection != "users":
        return payload
    password = payload.get("password")
    if not isinstance(password, str) or is_hashed(password):
        return payload
    # An unchanged password keeps its stored hash so repeated writes match.
    current = store.get(collection, item_id) if item_id is not None else None
    stored = (current or {}).get("password")
    if is_hashed(stored) and verify_password(password, stored):
        return {**payload, "password": stored}
    return {**payload, "password": hash_password(password)}


@router.get("/{collection}")
def list_records(
    collection: str,
    request: Request,
    response: Response,
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    records = store.find_all(collection)
    query = _parse(request)
    try:
        records = apply_sort(apply_filters(records, query), query)
    except QueryError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if query.is_sliced:
        response.headers["X-Total-Count"] = str(len(records))
        records = apply_slice(records, query, settings.default_page_size)
    _attach_relations(store, collection, records, query)
    return records


@router.get("/{collection}/{item_id}")
def get_record(
    collection: str,
    item_id: str,
    request: Request,
    store: DocumentStore = Depends(get_store),
):
    record = store.get(collection, item_id)
    if record is None:
        raise RecordNotFoundError(collection, item_id)
    _attach_relations(store, collection, [record], _parse(request))
    return record


@router.post("/{collection}", status_code=201)
def create_record(
    collection: str,
    payload: dict = Body(...),
    store: DocumentStore = Depends(get_store),
):
    return store.insert(collection, _prepare(store, collection, payload))


@router.put("/{collection}/{item_id}")
def replace_record(
    collection: str,
    item_id: str,
    payload: dict = Body(...),
    store: DocumentStore = Depends(get_store),
):
    return store.replace(
        collection, item_id, _prepare(store, collection, payload, item_id)
    )


@router.patch("/{collection}/{item_id}")
def update_record(
    collection: str,
    item_id: str,
    payload: dict = Body(...),
    store: DocumentStore = Depends(get_store),
):
    return store.merge(
        collection, item_id, _prepare(store, collection, payload, item_id)
    )


@router.delete("/{collection}/{item_id}")
def delete_record(
    collection: str,
    item_id: str,
    store: DocumentStore = Depends(get_store),
):
    store.delete(collection, item_id)
    return {}
