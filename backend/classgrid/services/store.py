from __future__ import annotations

import logging
from threading import Lock
from typing import Literal

from pydantic import ValidationError

from classgrid.core.config import Settings, get_settings
from classgrid.core.exceptions import (
    ChangeRequestRejectedError,
    DataIntegrityError,
    DuplicateResourceError,
    ReferenceInUseError,
    ResourceNotFoundError,
    SchedulerError,
)
from classgrid.models.assignment import Assignment
from classgrid.models.change_request import ChangeRequest, ChangeRequestKind, ChangeRequestStatus
from classgrid.models.faculty import Faculty
from classgrid.models.room import Room
from classgrid.schemas.change_request import (
    AppliedOutcome,
    ChangeRequestCreate,
    ChangeReviewResult,
    NotFoundOutcome,
    RejectedOutcome,
)
from classgrid.schemas.conflict import ConflictReport
from classgrid.schemas.faculty import FacultyOut, FacultyUpdate
from classgrid.schemas.room import RoomUpdate
from classgrid.schemas.timegrid import parse_time_slot
from classgrid.schemas.timetable import AssignmentUpdate, TimetableSnapshot
from classgrid.schemas.workload import FacultyLoadSummary, LoadReport
from classgrid.services.change_requests import apply_change_request
from classgrid.services.conflict_service import ORPHAN, ConflictService
from classgrid.services.workload import compute_faculty_load, summarize_faculty_loads

logger = logging.getLogger(__name__)


def _strip_derived(assignment: Assignment) -> Assignment:
    return assignment.model_copy(update={"status": None, "conflict_reason": None, "conflicts_with": []})


def _merge(model_cls, current, data: dict):
    try:
        return model_cls.model_validate({**current.model_dump(), **data})
    except ValidationError as exc:
        raise SchedulerError(
            f"Invalid {model_cls.__name__.lower()} update",
            details={"errors": exc.errors(include_url=False, include_context=False, include_input=False)},
        ) from exc


class TimetableStore:
    """Single in-memory source of truth for reference data and the schedule.

    Every write holds one lock, so an "apply change and recompute" step is
    never observed half done. Reads hand out copies; derived fields
    (assignment status, faculty load) are computed per call and never kept.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._lock = Lock()
        self._rooms: dict[str, Room] = {}
        self._faculty: dict[str, Faculty] = {}
        self._assignments: dict[str, Assignment] = {}
        self._requests: dict[str, ChangeRequest] = {}
        self.reoptimization_requested = False

    @property
    def settings(self) -> Settings:
        return self._settings

    def _engine_options(self) -> dict:
        return {
            "faculty_ids": self._faculty.keys(),
            "room_ids": self._rooms.keys(),
            "granularity_minutes": self._settings.slot_granularity_minutes,
            "orphan_policy": self._settings.orphan_policy,
        }

    # Rooms

    def list_rooms(self, *, search: str | None = None) -> list[Room]:
        """Rooms whose name or type contains ``search``, case-insensitively."""
        with self._lock:
            rooms = list(self._rooms.values())
        if search:
            needle = search.strip().lower()
            rooms = [room for room in rooms if needle in room.name.lower() or needle in room.type.value.lower()]
        return rooms

    def get_room(self, room_id: str) -> Room:
        with self._lock:
            room = self._rooms.get(room_id)
        if room is None:
            raise ResourceNotFoundError("Room", room_id)
        return room

    def _ensure_unique_room_name(self, name: str, exclude_id: str | None = None) -> None:
        for room in self._rooms.values():
            if room.id != exclude_id and room.name.lower() == name.lower():
                raise DuplicateResourceError("Room", "name", name)

    def create_room(self, room: Room) -> Room:
        with self._lock:
            if room.id in self._rooms:
                raise DuplicateResourceError("Room", "id", room.id)
            self._ensure_unique_room_name(room.name)
            self._rooms[room.id] = room
        logger.info("Room %s (%s) created", room.id, room.name)
        return room

    def update_room(self, room_id: str, payload: RoomUpdate) -> Room:
        data = payload.model_dump(exclude_unset=True)
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                raise ResourceNotFoundError("Room", room_id)
            if data.get("name"):
                self._ensure_unique_room_name(data["name"], exclude_id=room_id)
            updated = _merge(Room, room, data)
            self._rooms[room_id] = updated
        return updated

    def delete_room(self, room_id: str) -> list[str]:
        """Delete a room; returns ids of assignments removed by a cascade."""
        with self._lock:
            if room_id not in self._rooms:
                raise ResourceNotFoundError("Room", room_id)
            removed = self._release_references("Room", room_id, lambda item: item.room_id == room_id)
            self._release_swap_targets(room_id)
            del self._rooms[room_id]
        logger.info("Room %s deleted", room_id)
        return removed

    # Faculty

    def list_faculty(self, *, search: str | None = None) -> list[Faculty]:
        with self._lock:
            faculty = list(self._faculty.values())
        if search:
            needle = search.strip().lower()
            faculty = [
                member
                for member in faculty
                if needle in member.name.lower()
                or needle in (member.email or "").lower()
                or needle in member.department.lower()
            ]
        return faculty

    def get_faculty(self, faculty_id: str) -> Faculty:
        with self._lock:
            faculty = self._faculty.get(faculty_id)
        if faculty is None:
            raise ResourceNotFoundError("Faculty", faculty_id)
        return faculty

    def create_faculty(self, faculty: Faculty) -> Faculty:
        with self._lock:
            if faculty.id in self._faculty:
                raise DuplicateResourceError("Faculty", "id", faculty.id)
            self._faculty[faculty.id] = faculty
        logger.info("Faculty %s (%s) created", faculty.id, faculty.name)
        return faculty

    def update_faculty(self, faculty_id: str, payload: FacultyUpdate) -> Faculty:
        data = payload.model_dump(exclude_unset=True)
        with self._lock:
            faculty = self._faculty.get(faculty_id)
            if faculty is None:
                raise ResourceNotFoundError("Faculty", faculty_id)
            updated = _merge(Faculty, faculty, data)
            self._faculty[faculty_id] = updated
        return updated

    def delete_faculty(self, faculty_id: str) -> list[str]:
        with self._lock:
            if faculty_id not in self._faculty:
                raise ResourceNotFoundError("Faculty", faculty_id)
            removed = self._release_references("Faculty", faculty_id, lambda item: item.faculty_id == faculty_id)
            del self._faculty[faculty_id]
        logger.info("Faculty %s deleted", faculty_id)
        return removed

    def faculty_out(self, faculty: Faculty) -> FacultyOut:
        report = self.faculty_load(faculty.id)
        return FacultyOut(**faculty.model_dump(), current_load=report.current_load, overloaded=report.overloaded)

    def _release_references(self, resource_type: str, resource_id: str, matches) -> list[str]:
        referencing = [item.id for item in self._assignments.values() if matches(item)]
        if not referencing:
            return []
        if self._settings.reference_delete_policy == "reject":
            raise ReferenceInUseError(resource_type, resource_id, referencing)

        for assignment_id in referencing:
            del self._assignments[assignment_id]
        dropped = [
            request_id
            for request_id, request in self._requests.items()
            if request.assignment_id in referencing and request.status == ChangeRequestStatus.pending
        ]
        for request_id in dropped:
            del self._requests[request_id]
        logger.info(
            "Cascade delete of %s %s removed %d assignment(s) and %d pending request(s)",
            resource_type,
            resource_id,
            len(referencing),
            len(dropped),
        )
        return referencing

    def _release_swap_targets(self, room_id: str) -> None:
        targeting = [
            request.id
            for request in self._requests.values()
            if request.status == ChangeRequestStatus.pending
            and request.target is not None
            and request.target.room_id == room_id
        ]
        if not targeting:
            return
        if self._settings.reference_delete_policy == "reject":
            raise ReferenceInUseError("Room", room_id, [], request_ids=targeting)

        for request_id in targeting:
            del self._requests[request_id]
        logger.info("Deleting room %s dropped %d pending swap request(s)", room_id, len(targeting))

    # Assignments

    def _validate_assignment(self, assignment: Assignment) -> Assignment:
        missing: list[str] = []
        if assignment.faculty_id not in self._faculty:
            missing.append(f"faculty {assignment.faculty_id}")
        if assignment.room_id not in self._rooms:
            missing.append(f"room {assignment.room_id}")
        if missing:
            raise DataIntegrityError(
                f"Assignment {assignment.id} references unknown {', '.join(missing)}",
                details={"assignment_id": assignment.id, "missing": missing},
            )
        if assignment.day not in self._settings.weekdays:
            raise DataIntegrityError(
                f"{assignment.day} is not a teaching day",
                details={"assignment_id": assignment.id, "day": assignment.day},
            )
        try:
            assignment.slot.cells(self._settings.slot_granularity_minutes)
        except ValueError as exc:
            raise DataIntegrityError(str(exc), details={"assignment_id": assignment.id}) from exc
        return _strip_derived(assignment)

    def list_assignments(self) -> list[Assignment]:
        with self._lock:
            return list(self._assignments.values())

    def get_assignment(self, assignment_id: str) -> Assignment:
        with self._lock:
            assignment = self._assignments.get(assignment_id)
        if assignment is None:
            raise ResourceNotFoundError("Assignment", assignment_id)
        return assignment

    def create_assignment(self, assignment: Assignment) -> Assignment:
        with self._lock:
            if assignment.id in self._assignments:
                raise DuplicateResourceError("Assignment", "id", assignment.id)
            stored = self._validate_assignment(assignment)
            self._assignments[stored.id] = stored
        logger.info("Assignment %s scheduled on %s %s", stored.id, stored.day, stored.time_slot)
        return stored

    def update_assignment(self, assignment_id: str, payload: AssignmentUpdate) -> Assignment:
        data = payload.model_dump(exclude_unset=True)
        with self._lock:
            current = self._assignments.get(assignment_id)
            if current is None:
                raise ResourceNotFoundError("Assignment", assignment_id)
            candidate = _merge(Assignment, current, data)
            stored = self._validate_assignment(candidate)
            self._assignments[assignment_id] = stored
        return stored

    def delete_assignment(self, assignment_id: str) -> None:
        with self._lock:
            if assignment_id not in self._assignments:
                raise ResourceNotFoundError("Assignment", assignment_id)
            del self._assignments[assignment_id]
        logger.info("Assignment %s deleted", assignment_id)

    def replace_assignments(self, candidate: list[Assignment]) -> list[Assignment]:
        with self._lock:
            stored: dict[str, Assignment] = {}
            for assignment in candidate:
                if assignment.id in stored:
                    raise DataIntegrityError(
                        f"Duplicate assignment id {assignment.id}",
                        details={"assignment_id": assignment.id},
                    )
                stored[assignment.id] = self._validate_assignment(assignment)
            self._assignments = stored
            self.reoptimization_requested = False
        logger.info("Schedule replaced with %d assignment(s)", len(stored))
        return list(stored.values())

    # Derived views

    def snapshot(self) -> TimetableSnapshot:
        with self._lock:
            return TimetableSnapshot(
                weekdays=list(self._settings.weekdays),
                time_slots=list(self._settings.time_slots),
                rooms=list(self._rooms.values()),
                faculty=list(self._faculty.values()),
                assignments=list(self._assignments.values()),
            )

    def conflict_report(self) -> ConflictReport:
        with self._lock:
            service = ConflictService(list(self._assignments.values()), **self._engine_options())
            return service.detect_conflicts()

    def annotated_assignments(self) -> list[Assignment]:
        return self.conflict_report().assignments

    def faculty_load(self, faculty_id: str) -> LoadReport:
        with self._lock:
            faculty = self._faculty.get(faculty_id)
            if faculty is None:
                raise ResourceNotFoundError("Faculty", faculty_id)
            return compute_faculty_load(faculty, list(self._assignments.values()))

    def load_summary(self) -> FacultyLoadSummary:
        with self._lock:
            pending = sum(1 for item in self._requests.values() if item.status == ChangeRequestStatus.pending)
            return summarize_faculty_loads(
                list(self._faculty.values()),
                list(self._assignments.values()),
                pending_requests=pending,
            )

    # Change requests

    def list_change_requests(
        self,
        *,
        status: ChangeRequestStatus | None = None,
        faculty_id: str | None = None,
    ) -> list[ChangeRequest]:
        with self._lock:
            requests = list(self._requests.values())
        if status is not None:
            requests = [item for item in requests if item.status == status]
        if faculty_id is not None:
            requests = [item for item in requests if item.faculty_id == faculty_id]
        return requests

    def get_change_request(self, request_id: str) -> ChangeRequest:
        with self._lock:
            request = self._requests.get(request_id)
        if request is None:
            raise ResourceNotFoundError("ChangeRequest", request_id)
        return request

    def submit_change_request(self, payload: ChangeRequestCreate) -> ChangeRequest:
        try:
            request = ChangeRequest(**payload.model_dump())
        except ValidationError as exc:
            raise SchedulerError(
                "Invalid change request",
                details={"errors": exc.errors(include_url=False, include_context=False, include_input=False)},
            ) from exc

        with self._lock:
            assignment = self._assignments.get(request.assignment_id)
            if assignment is None:
                raise ResourceNotFoundError("Assignment", request.assignment_id)
            if request.faculty_id != assignment.faculty_id:
                raise SchedulerError(
                    "Faculty can only request changes to their own assignments",
                    details={"faculty_id": request.faculty_id, "assignment_id": assignment.id},
                )
            if request.kind == ChangeRequestKind.swap:
                target = request.target
                if target.room_id is not None and target.room_id not in self._rooms:
                    raise DataIntegrityError(
                        f"Swap target references unknown room {target.room_id}",
                        details={"room_id": target.room_id},
                    )
                if target.day is not None and target.day not in self._settings.weekdays:
                    raise DataIntegrityError(f"{target.day} is not a teaching day", details={"day": target.day})
                if target.time_slot is not None:
                    try:
                        parse_time_slot(target.time_slot).cells(self._settings.slot_granularity_minutes)
                    except ValueError as exc:
                        raise DataIntegrityError(str(exc), details={"time_slot": target.time_slot}) from exc
            self._requests[request.id] = request
        logger.info("Change request %s (%s) submitted for assignment %s", request.id, request.kind.value, request.assignment_id)
        return request

    def review_change_request(
        self,
        request_id: str,
        decision: Literal["approve", "reject"],
        *,
        note: str | None = None,
        override: bool = False,
    ) -> ChangeReviewResult:
        with self._lock:
            request = self._requests.get(request_id)
            if request is None:
                raise ResourceNotFoundError("ChangeRequest", request_id)

            if decision == "reject":
                reviewed = request.reject(note)
                self._requests[request_id] = reviewed
                logger.info("Change request %s rejected by reviewer", request_id)
                return ChangeReviewResult(request=reviewed)

            outcome = apply_change_request(list(self._assignments.values()), request, **self._engine_options())
            if isinstance(outcome, NotFoundOutcome):
                raise ResourceNotFoundError("Assignment", outcome.assignment_id)
            if isinstance(outcome, RejectedOutcome):
                # Overrides accept clashes, never references to missing rooms or faculty.
                if ORPHAN in outcome.dimensions:
                    raise DataIntegrityError(
                        f"Change request {request_id} points at a room or faculty that no longer exists",
                        details={"request_id": request_id, "reason": outcome.reason},
                    )
                if not override:
                    raise ChangeRequestRejectedError(request_id, outcome.conflicting_ids, outcome.reason)

            committed = {item.id: self._validate_assignment(item) for item in outcome.report.assignments}
            reviewed = request.approve(note)
            self._assignments = committed
            self._requests[request_id] = reviewed
            self.reoptimization_requested = True

        overridden = not isinstance(outcome, AppliedOutcome)
        logger.info(
            "Change request %s approved%s; re-optimization requested",
            request_id,
            " with conflicts overridden" if overridden else "",
        )
        return ChangeReviewResult(request=reviewed, report=outcome.report, overridden=overridden)

    def clear(self) -> None:
        with self._lock:
            self._rooms.clear()
            self._faculty.clear()
            self._assignments.clear()
            self._requests.clear()
            self.reoptimization_requested = False
