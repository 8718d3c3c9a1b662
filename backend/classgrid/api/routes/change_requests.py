from fastapi import APIRouter, Depends, Query, status

from classgrid.api.deps import get_store
from classgrid.models.change_request import ChangeRequest, ChangeRequestStatus
from classgrid.schemas.change_request import (
    ChangeOutcome,
    ChangePreviewRequest,
    ChangeRequestCreate,
    ChangeRequestReview,
    ChangeReviewResult,
)
from classgrid.services.change_requests import apply_change_request
from classgrid.services.store import TimetableStore

router = APIRouter()


@router.get("/", response_model=list[ChangeRequest])
def list_change_requests(
    status_filter: ChangeRequestStatus | None = Query(default=None, alias="status"),
    faculty_id: str | None = Query(default=None),
    store: TimetableStore = Depends(get_store),
) -> list[ChangeRequest]:
    return store.list_change_requests(status=status_filter, faculty_id=faculty_id)


@router.post("/", response_model=ChangeRequest, status_code=status.HTTP_201_CREATED)
def submit_change_request(
    payload: ChangeRequestCreate,
    store: TimetableStore = Depends(get_store),
) -> ChangeRequest:
    return store.submit_change_request(payload)


@router.post("/preview", response_model=ChangeOutcome)
def preview_change_request(payload: ChangePreviewRequest, store: TimetableStore = Depends(get_store)):
    return apply_change_request(
        payload.assignments,
        payload.request,
        granularity_minutes=store.settings.slot_granularity_minutes,
    )


@router.get("/{request_id}", response_model=ChangeRequest)
def get_change_request(request_id: str, store: TimetableStore = Depends(get_store)) -> ChangeRequest:
    return store.get_change_request(request_id)


@router.post("/{request_id}/review", response_model=ChangeReviewResult)
def review_change_request(
    request_id: str,
    payload: ChangeRequestReview,
    store: TimetableStore = Depends(get_store),
) -> ChangeReviewResult:
    return store.review_change_request(
        request_id,
        payload.decision,
        note=payload.note,
        override=payload.override,
    )
