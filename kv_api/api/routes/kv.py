from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool

from kv_api.core.admission import enforce_admission
from kv_api.core.request_body import read_json_object
from kv_api.schemas.kv import (
    KeyValueItem,
    KeyValueListResponse,
    KeyValueResponse,
    MessageResponse,
    ValueResponse,
)
from kv_api.services.kv_service import KeyValueService

router = APIRouter(tags=["KV"], dependencies=[Depends(enforce_admission)])

# GET /kv is mounted only when bulk listing is enabled in settings
listing_router = APIRouter(tags=["KV"], dependencies=[Depends(enforce_admission)])


def get_kv_service(request: Request) -> KeyValueService:
    """Return the key-value service owned by the running app."""
    return request.app.state.kv_service


KVService = Annotated[KeyValueService, Depends(get_kv_service)]

# Store calls never run on the event loop; sqlite I/O blocks


@router.post(
    "/kv",
    response_model=KeyValueResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_value(request: Request, service: KVService) -> KeyValueResponse:
    """Create a record from ``{"key": ..., "value": ...}``.

    Returns 400 when key and/or value are missing, 409 when the key exists.
    """
    payload = await read_json_object(request)
    record = await run_in_threadpool(service.create, payload.get("key"), payload.get("value"))
    return KeyValueResponse(key=record.key, value=record.value)


@router.put("/kv/{key}", response_model=KeyValueResponse)
async def update_value(key: str, request: Request, service: KVService) -> KeyValueResponse:
    """Replace the value stored under ``key`` with ``{"value": ...}``.

    Returns 400 when value is missing, 404 when the key does not exist.
    """
    payload = await read_json_object(request)
    record = await run_in_threadpool(service.update, key, payload.get("value"))
    return KeyValueResponse(key=record.key, value=record.value)


@router.get("/kv/{key}", response_model=ValueResponse)
async def get_value(key: str, service: KVService) -> ValueResponse:
    return ValueResponse(value=await run_in_threadpool(service.get, key))


@router.delete("/kv/{key}", response_model=MessageResponse)
async def delete_value(key: str, service: KVService) -> MessageResponse:
    await run_in_threadpool(service.delete, key)
    return MessageResponse()


@listing_router.get("/kv", response_model=KeyValueListResponse)
async def list_values(service: KVService) -> KeyValueListResponse:
    """Return every stored record, ordered by key ascending (no pagination)."""
    records = await run_in_threadpool(service.list)
    data = [KeyValueItem(key=record.key, value=record.value) for record in records]
    return KeyValueListResponse(data=data)
