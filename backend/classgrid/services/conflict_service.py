from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from typing import NamedTuple

from classgrid.core.config import get_settings
from classgrid.core.exceptions import DataIntegrityError
from classgrid.models.assignment import Assignment, AssignmentStatus
from classgrid.schemas.conflict import ConflictDetail, ConflictReport, ResolutionAction
from classgrid.schemas.timegrid import format_minutes

logger = logging.getLogger(__name__)


class Dimension(NamedTuple):
    name: str
    attribute: str
    conflict_type: str
    label: str


# Reason strings are built in this order.
DIMENSIONS = (
    Dimension("room", "room_id", "room_conflict", "Room"),
    Dimension("faculty", "faculty_id", "faculty_conflict", "Faculty"),
    Dimension("batch", "batch", "batch_conflict", "Batch"),
)
ORPHAN = "orphan"


class ConflictService:
    """Hard-constraint checks over one consistent snapshot of assignments.

    Every assignment is expanded into the grid cells its time slot covers and
    bucketed by (day, cell, resource) for each dimension, so a single pass per
    dimension finds every double booking. For the hourly reference grid a
    cell is exactly one time slot.
    """

    def __init__(
        self,
        assignments: Iterable[Assignment],
        *,
        faculty_ids: Iterable[str] | None = None,
        room_ids: Iterable[str] | None = None,
        granularity_minutes: int | None = None,
        orphan_policy: str | None = None,
    ):
        settings = get_settings()
        self.assignments: list[Assignment] = list(assignments)
        self.faculty_ids = None if faculty_ids is None else set(faculty_ids)
        self.room_ids = None if room_ids is None else set(room_ids)
        self.granularity = granularity_minutes or settings.slot_granularity_minutes
        self.orphan_policy = orphan_policy or settings.orphan_policy

        self._reasons: dict[int, list[tuple[int, str]]] = defaultdict(list)
        self._pairs: dict[int, set[tuple[str, int]]] = defaultdict(set)
        self._details: list[tuple[tuple, ConflictDetail]] = []
        self._analyzed = False

    def _check_unique_ids(self) -> None:
        seen: set[str] = set()
        duplicates: list[str] = []
        for assignment in self.assignments:
            if assignment.id in seen and assignment.id not in duplicates:
                duplicates.append(assignment.id)
            seen.add(assignment.id)
        if duplicates:
            raise DataIntegrityError(
                f"Duplicate assignment id(s): {', '.join(duplicates)}",
                details={"assignment_ids": duplicates},
            )

    def _cells(self, assignment: Assignment) -> range:
        try:
            return assignment.slot.cells(self.granularity)
        except ValueError as exc:
            raise DataIntegrityError(str(exc), details={"assignment_id": assignment.id}) from exc

    def _check_references(self) -> None:
        orphans: list[dict] = []
        for index, assignment in enumerate(self.assignments):
            missing: list[tuple[str, str]] = []
            if self.room_ids is not None and assignment.room_id not in self.room_ids:
                missing.append(("room", assignment.room_id))
            if self.faculty_ids is not None and assignment.faculty_id not in self.faculty_ids:
                missing.append(("faculty", assignment.faculty_id))
            for kind, ref in missing:
                orphans.append({"assignment_id": assignment.id, "reference": kind, "id": ref})
                self._reasons[index].append((len(DIMENSIONS), f"Orphaned reference ({kind} {ref})"))
                self._pairs[index].add((ORPHAN, index))
                detail = ConflictDetail(
                    id=f"orphan-{kind}-{assignment.id}",
                    conflict_type="orphaned_reference",
                    description=f"Assignment {assignment.id} references unknown {kind} {ref}",
                    severity="hard",
                    day=assignment.day,
                    time_slot=assignment.time_slot,
                    affected_assignments=[assignment.id],
                )
                self._details.append(((len(DIMENSIONS), index, kind), detail))

        if orphans and self.orphan_policy == "fail":
            raise DataIntegrityError(
                f"{len(orphans)} orphaned reference(s) in assignment set",
                details={"orphans": orphans},
            )

    def _scan_dimension(self, order: int, dimension: Dimension) -> None:
        buckets: dict[tuple[str, int, str], list[int]] = defaultdict(list)
        for index, assignment in enumerate(self.assignments):
            value = getattr(assignment, dimension.attribute)
            for cell in self._cells(assignment):
                buckets[(assignment.day, cell, value)].append(index)

        # Overlapping multi-cell slots hit several buckets with the same members.
        groups: dict[tuple[str, tuple[int, ...]], tuple[str, int, int]] = {}
        for (day, cell, value), members in buckets.items():
            if len(members) < 2:
                continue
            key = (value, tuple(members))
            if key in groups:
                first_day, first_cell, last_cell = groups[key]
                groups[key] = (first_day, min(first_cell, cell), max(last_cell, cell))
            else:
                groups[key] = (day, cell, cell)

        for (value, members), (day, first_cell, last_cell) in groups.items():
            for index in members:
                reason = f"{dimension.label} double-booked ({value})"
                if (order, reason) not in self._reasons[index]:
                    self._reasons[index].append((order, reason))
                for other in members:
                    if other != index:
                        self._pairs[index].add((dimension.name, other))

            ids = [self.assignments[index].id for index in members]
            span = f"{format_minutes(first_cell * self.granularity)}-{format_minutes((last_cell + 1) * self.granularity)}"
            detail = ConflictDetail(
                id=f"{dimension.name}-{'-'.join(ids)}",
                conflict_type=dimension.conflict_type,
                description=f"{dimension.label} overlap for {value} on {day} {span}: {', '.join(ids)}",
                severity="hard",
                day=day,
                time_slot=span,
                affected_assignments=ids,
            )
            self._details.append(((order, members[0], first_cell, value), detail))

    def analyze(self) -> "ConflictService":
        if self._analyzed:
            return self
        self._check_unique_ids()
        self._check_references()
        for order, dimension in enumerate(DIMENSIONS):
            self._scan_dimension(order, dimension)
        self._analyzed = True
        logger.debug(
            "Checked %d assignment(s): %d conflict group(s)",
            len(self.assignments),
            len(self._details),
        )
        return self

    def annotate(self) -> list[Assignment]:
        self.analyze()
        annotated: list[Assignment] = []
        for index, assignment in enumerate(self.assignments):
            reasons = self._reasons.get(index)
            if reasons:
                partners = sorted({other for _, other in self._pairs[index] if other != index})
                update = {
                    "status": AssignmentStatus.conflict,
                    "conflict_reason": "; ".join(reason for _, reason in sorted(reasons, key=lambda item: item[0])),
                    "conflicts_with": [self.assignments[other].id for other in partners],
                }
            else:
                update = {
                    "status": AssignmentStatus(assignment.approval.value),
                    "conflict_reason": None,
                    "conflicts_with": [],
                }
            annotated.append(assignment.model_copy(update=update))
        return annotated

    def conflict_pairs(self, assignment_id: str) -> set[tuple[str, str]]:
        """(dimension, partner id) pairs for one assignment; orphans pair with themselves."""
        self.analyze()
        for index, assignment in enumerate(self.assignments):
            if assignment.id == assignment_id:
                return {(name, self.assignments[other].id) for name, other in self._pairs.get(index, set())}
        return set()

    def detect_conflicts(self) -> ConflictReport:
        annotated = self.annotate()
        details = [detail for _, detail in sorted(self._details, key=lambda item: item[0])]
        resolutions: list[ResolutionAction] = []
        for detail in details:
            resolutions.extend(self.generate_resolutions(detail))
        return ConflictReport(assignments=annotated, conflicts=details, suggested_resolutions=resolutions)

    def generate_resolutions(self, conflict: ConflictDetail) -> list[ResolutionAction]:
        target = conflict.affected_assignments[-1]
        if conflict.conflict_type == "room_conflict":
            return [
                ResolutionAction(
                    action_type="change_room",
                    description="Find a free room for the same slot",
                    target_assignment_id=target,
                )
            ]
        if conflict.conflict_type in ("faculty_conflict", "batch_conflict"):
            return [
                ResolutionAction(
                    action_type="move_slot",
                    description="Move to a different time slot",
                    target_assignment_id=target,
                )
            ]
        if conflict.conflict_type == "orphaned_reference":
            return [
                ResolutionAction(
                    action_type="change_room" if conflict.id.startswith("orphan-room") else "change_faculty",
                    description="Point the assignment at an existing resource",
                    target_assignment_id=target,
                )
            ]
        return []


def compute_conflicts(assignments: Iterable[Assignment], **options) -> list[Assignment]:
    """Return ``assignments`` in input order with status, reason and partners recomputed."""
    return ConflictService(assignments, **options).annotate()


def detect_conflicts(assignments: Iterable[Assignment], **options) -> ConflictReport:
    return ConflictService(assignments, **options).detect_conflicts()
