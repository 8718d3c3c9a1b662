from __future__ import annotations

import logging
from collections.abc import Iterable

from classgrid.core.exceptions import InvalidTransitionError
from classgrid.models.assignment import Assignment
from classgrid.models.change_request import ChangeRequest, ChangeRequestKind
from classgrid.schemas.change_request import AppliedOutcome, ChangeOutcome, NotFoundOutcome, RejectedOutcome
from classgrid.services.conflict_service import DIMENSIONS, ORPHAN, ConflictService

logger = logging.getLogger(__name__)

_DIMENSION_ORDER = [dimension.name for dimension in DIMENSIONS] + [ORPHAN]


def relocate(assignment: Assignment, request: ChangeRequest) -> Assignment:
    target = request.target
    return assignment.model_copy(
        update={
            "day": target.day or assignment.day,
            "time_slot": target.time_slot or assignment.time_slot,
            "room_id": target.room_id or assignment.room_id,
        }
    )


def apply_change_request(
    assignments: Iterable[Assignment],
    request: ChangeRequest,
    **options,
) -> ChangeOutcome:
    """Apply a swap or cancel to a copy of ``assignments``.

    The resulting set is always re-checked. A swap that leaves the moved
    assignment colliding with anything it did not already collide with is
    rejected, citing the ids it would collide with. ``options`` are passed
    through to :class:`ConflictService`.
    """
    if request.is_terminal:
        raise InvalidTransitionError(request.id, request.status.value, "applied")

    current = list(assignments)
    position = next((index for index, item in enumerate(current) if item.id == request.assignment_id), None)
    if position is None:
        logger.info("Change request %s targets missing assignment %s", request.id, request.assignment_id)
        return NotFoundOutcome(request_id=request.id, assignment_id=request.assignment_id)

    if request.kind == ChangeRequestKind.cancel:
        remaining = current[:position] + current[position + 1:]
        report = ConflictService(remaining, **options).detect_conflicts()
        return AppliedOutcome(request_id=request.id, report=report)

    before = ConflictService(current, **options).conflict_pairs(request.assignment_id)
    original = current[position]
    moved = relocate(original, request)
    candidate = current[:position] + [moved] + current[position + 1:]
    service = ConflictService(candidate, **options)
    report = service.detect_conflicts()
    introduced = service.conflict_pairs(request.assignment_id) - before

    if not introduced:
        return AppliedOutcome(request_id=request.id, report=report)

    partner_ids = {partner for name, partner in introduced if name != ORPHAN}
    conflicting_ids = [item.id for item in candidate if item.id in partner_ids]
    dimensions = [name for name in _DIMENSION_ORDER if any(found == name for found, _ in introduced)]
    if conflicting_ids:
        reason = (
            f"Moving assignment {moved.id} to {moved.day} {moved.time_slot} in room {moved.room_id} "
            f"conflicts with {', '.join(conflicting_ids)} ({', '.join(dimensions)})"
        )
    else:
        reason = f"Moving assignment {moved.id} leaves it with an orphaned reference"
    logger.warning("Change request %s rejected: %s", request.id, reason)
    return RejectedOutcome(
        request_id=request.id,
        conflicting_ids=conflicting_ids,
        dimensions=dimensions,
        reason=reason,
        report=report,
    )
