from typing import Any, Dict
from fastapi import APIRouter, Body, Depends
from workhours.dependencies import current_request_id, failure, get_store
from workhours.models import ApiResponse
from workhours.storage import (
    StateStore,
    clear_form_state,
    has_saved_state,
    load_form_state,
    save_form_state,
)

router = APIRouter(tags=["state"])


@router.get("/state")
async def get_state(
    store: StateStore = Depends(get_store),
    req_id: str = Depends(current_request_id),
):
    """Saved form state, or defaults for the current billing period."""
    state = load_form_state(store)
    return ApiResponse.success(
        data={"saved": has_saved_state(store), "state": state.model_dump(by_alias=True)},
        request_id=req_id,
    )


@router.put("/state")
async def put_state(
    partial: Dict[str, Any] = Body(...),
    store: StateStore = Depends(get_store),
    req_id: str = Depends(current_request_id),
):
    """Merge the given fields into the saved form state."""
    try:
        state = save_form_state(store, partial)
    except Exception as e:
        return failure(e, req_id)
    return ApiResponse.success(data={"state": state.model_dump(by_alias=True)}, request_id=req_id)


@router.delete("/state")
async def delete_state(
    store: StateStore = Depends(get_store),
    req_id: str = Depends(current_request_id),
):
    clear_form_state(store)
    return ApiResponse.success(data={"cleared": True}, request_id=req_id)
