"""Generic REST surface over the collection service."""
from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Body, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from edu_service.api.deps import CurrentPrincipal, StoreDep
from edu_service.api.v1.schemas.common import BulkRequest
from edu_service.application.dto.envelope import Envelope
from edu_service.application.dto.query import BulkOperation, QueryOptions
from edu_service.config import settings
from edu_service.domain.value_objects.enums import SortOrder
from edu_service.services import collection_service

router = APIRouter(prefix="/api", tags=["collections"])

_RESERVED_PARAMS = frozenset({"search", "sort_by", "sort_order", "page", "limit"})


def envelope_response(envelope: Envelope, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    if not envelope.success:
        status_code = status.HTTP_404_NOT_FOUND
    return JSONResponse(status_code=status_code, content=jsonable_encoder(envelope.to_json_dict()))


def _filter_values(raw: str) -> list[Any]:
    # "?grade=5" matches both the string "5" and the number 5
    try:
        decoded = json.loads(raw)
    except ValueError:
        return [raw]
    if isinstance(decoded, (dict, list)) or decoded == raw:
        return [raw]
    return [raw, decoded]


def _filters_from(request: Request) -> dict[str, list[Any]]:
    filters: dict[str, list[Any]] = {}
    for key, raw in request.query_params.multi_items():
        if key in _RESERVED_PARAMS:
            continue
        filters.setdefault(key, []).extend(_filter_values(raw))
    return filters


@router.get("/{collection}")
async def list_records(
    collection: str,
    request: Request,
    store: StoreDep,
    _principal: CurrentPrincipal,
    search: str | None = Query(None),
    sort_by: str | None = Query(None),
    sort_order: SortOrder = Query(SortOrder.ASC),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
) -> JSONResponse:
    options = QueryOptions(
        filters=_filters_from(request),
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return envelope_response(collection_service.find_many(collection, options, store))


@router.post("/{collection}")
async def create_record(
    collection: str,
    store: StoreDep,
    _principal: CurrentPrincipal,
    fields: dict[str, Any] = Body(...),
) -> JSONResponse:
    return envelope_response(
        collection_service.create(collection, fields, store),
        status_code=status.HTTP_201_CREATED,
    )


@router.post("/{collection}/bulk")
async def bulk_records(
    collection: str,
    body: BulkRequest,
    store: StoreDep,
    _principal: CurrentPrincipal,
) -> JSONResponse:
    operation = BulkOperation(ids=body.ids, operation=body.operation, data=body.data)
    return envelope_response(collection_service.bulk_operation(collection, operation, store))


@router.get("/{collection}/{record_id}")
async def get_record(
    collection: str,
    record_id: str,
    store: StoreDep,
    _principal: CurrentPrincipal,
) -> JSONResponse:
    return envelope_response(collection_service.find_by_id(collection, record_id, store))


@router.patch("/{collection}/{record_id}")
async def update_record(
    collection: str,
    record_id: str,
    store: StoreDep,
    _principal: CurrentPrincipal,
    fields: dict[str, Any] = Body(...),
) -> JSONResponse:
    return envelope_response(collection_service.update(collection, record_id, fields, store))


@router.delete("/{collection}/{record_id}")
async def delete_record(
    collection: str,
    record_id: str,
    store: StoreDep,
    _principal: CurrentPrincipal,
) -> JSONResponse:
    return envelope_response(collection_service.delete(collection, record_id, store))
