from fastapi import APIRouter, Depends

from classgrid.api.deps import get_optimizer, get_store
from classgrid.core.exceptions import OptimizerUnavailableError
from classgrid.schemas.timetable import GenerateRequest, GenerateResponse
from classgrid.services.conflict_service import detect_conflicts
from classgrid.services.optimizer import OptimizerClient, OptimizerStatus
from classgrid.services.store import TimetableStore

router = APIRouter()


@router.post("/generate", response_model=GenerateResponse)
async def generate_schedule(
    payload: GenerateRequest,
    store: TimetableStore = Depends(get_store),
    optimizer: OptimizerClient = Depends(get_optimizer),
) -> GenerateResponse:
    snapshot = store.snapshot()
    outcome = await optimizer.generate(snapshot)
    if outcome.status != OptimizerStatus.succeeded:
        raise OptimizerUnavailableError(
            outcome.message,
            details={"status": outcome.status.value, "elapsed_seconds": outcome.elapsed_seconds},
        )

    report = detect_conflicts(
        outcome.assignments,
        faculty_ids=[item.id for item in snapshot.faculty],
        room_ids=[item.id for item in snapshot.rooms],
        granularity_minutes=store.settings.slot_granularity_minutes,
        orphan_policy="flag",
    )
    committed = False
    if payload.commit:
        store.replace_assignments(outcome.assignments)
        committed = True
    return GenerateResponse(
        status=outcome.status.value,
        message=outcome.message,
        elapsed_seconds=outcome.elapsed_seconds,
        committed=committed,
        report=report,
    )
