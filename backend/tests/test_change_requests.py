import pytest
from pydantic import ValidationError

from classgrid.core.exceptions import InvalidTransitionError
from classgrid.models.assignment import Assignment, AssignmentStatus
from classgrid.models.change_request import ChangeRequest, ChangeRequestKind, ChangeRequestStatus, ChangeTarget
from classgrid.schemas.change_request import AppliedOutcome, NotFoundOutcome, RejectedOutcome
from classgrid.services.change_requests import apply_change_request


def slot(id, *, day="Monday", time_slot="10:00-11:00", room="LH-101", faculty="smith", batch="CS-A"):
    return Assignment(
        id=id,
        subject="Data Structures",
        faculty_id=faculty,
        room_id=room,
        batch=batch,
        day=day,
        time_slot=time_slot,
    )


def swap(assignment_id, **target):
    return ChangeRequest(
        id=f"req-{assignment_id}",
        faculty_id="smith",
        assignment_id=assignment_id,
        kind=ChangeRequestKind.swap,
        target=ChangeTarget(**target),
        reason="Medical appointment on Monday morning",
    )


def cancel(assignment_id):
    return ChangeRequest(
        id=f"req-{assignment_id}",
        faculty_id="smith",
        assignment_id=assignment_id,
        kind=ChangeRequestKind.cancel,
        reason="Emergency faculty meeting at the same time",
    )


@pytest.fixture
def schedule():
    return [
        slot("1", day="Monday", time_slot="10:00-11:00", room="LH-101", faculty="smith", batch="CS-A"),
        slot("2", day="Tuesday", time_slot="11:00-12:00", room="LH-102", faculty="brown", batch="CS-C"),
        slot("3", day="Monday", time_slot="10:00-11:00", room="LAB-CS-01", faculty="johnson", batch="CS-A"),
    ]


def test_cancel_removes_exactly_one_and_recomputes(schedule):
    before = {item.id: item.status for item in schedule}
    assert before == {"1": None, "2": None, "3": None}

    outcome = apply_change_request(schedule, cancel("1"))

    assert isinstance(outcome, AppliedOutcome)
    assert [item.id for item in outcome.assignments] == ["2", "3"]
    # "3" shared batch CS-A with "1"; with "1" gone it is clean again.
    assert all(item.status == AssignmentStatus.pending for item in outcome.assignments)
    assert len(schedule) == 3


def test_swap_into_occupied_room_is_rejected(schedule):
    outcome = apply_change_request(schedule, swap("1", day="Tuesday", time_slot="11:00-12:00", room_id="LH-102"))

    assert isinstance(outcome, RejectedOutcome)
    assert outcome.conflicting_ids == ["2"]
    assert outcome.dimensions == ["room"]
    assert "conflicts with 2" in outcome.reason


def test_swap_to_free_slot_is_applied(schedule):
    outcome = apply_change_request(schedule, swap("1", day="Wednesday", time_slot="9:00-10:00"))

    assert isinstance(outcome, AppliedOutcome)
    moved = next(item for item in outcome.assignments if item.id == "1")
    assert (moved.day, moved.time_slot, moved.room_id) == ("Wednesday", "9:00-10:00", "LH-101")
    assert all(item.status == AssignmentStatus.pending for item in outcome.assignments)
    # Input is never mutated.
    assert schedule[0].day == "Monday"


def test_swap_keeping_an_existing_conflict_is_not_a_new_conflict(schedule):
    # "1" and "3" already share batch CS-A; changing only the room keeps that, nothing new.
    outcome = apply_change_request(schedule, swap("1", room_id="SR-205"))

    assert isinstance(outcome, AppliedOutcome)
    moved = next(item for item in outcome.assignments if item.id == "1")
    assert moved.room_id == "SR-205"
    assert moved.status == AssignmentStatus.conflict


def test_swap_citing_several_dimensions(schedule):
    schedule.append(slot("4", day="Friday", time_slot="9:00-10:00", room="SR-205", faculty="smith", batch="CS-B"))

    outcome = apply_change_request(schedule, swap("4", day="Tuesday", time_slot="11:00-12:00", room_id="LH-102"))

    assert isinstance(outcome, RejectedOutcome)
    assert outcome.conflicting_ids == ["2"]
    assert outcome.dimensions == ["room"]

    outcome = apply_change_request(schedule, swap("4", day="Monday", time_slot="10:00-11:00", room_id="LAB-CS-01"))

    assert isinstance(outcome, RejectedOutcome)
    assert outcome.conflicting_ids == ["1", "3"]
    assert outcome.dimensions == ["room", "faculty"]


def test_swap_to_unknown_room_is_rejected_when_flagging_orphans(schedule):
    outcome = apply_change_request(
        schedule,
        swap("1", room_id="GHOST"),
        room_ids={"LH-101", "LH-102", "LAB-CS-01"},
        faculty_ids={"smith", "brown", "johnson"},
        orphan_policy="flag",
    )

    assert isinstance(outcome, RejectedOutcome)
    assert outcome.conflicting_ids == []
    assert outcome.dimensions == ["orphan"]


def test_missing_assignment_is_not_found(schedule):
    outcome = apply_change_request(schedule, cancel("99"))

    assert isinstance(outcome, NotFoundOutcome)
    assert outcome.assignment_id == "99"


def test_terminal_request_cannot_be_applied(schedule):
    request = cancel("1").approve()

    with pytest.raises(InvalidTransitionError):
        apply_change_request(schedule, request)


def test_state_machine_is_pending_to_terminal_only():
    request = cancel("1")
    assert request.status == ChangeRequestStatus.pending

    approved = request.approve("ok")
    assert approved.status == ChangeRequestStatus.approved
    assert approved.reviewed_at is not None
    assert request.status == ChangeRequestStatus.pending

    rejected = request.reject()
    assert rejected.status == ChangeRequestStatus.rejected

    with pytest.raises(InvalidTransitionError):
        approved.reject()
    with pytest.raises(InvalidTransitionError):
        rejected.approve()


def test_swap_requires_a_target():
    with pytest.raises(ValidationError):
        ChangeRequest(
            faculty_id="smith",
            assignment_id="1",
            kind=ChangeRequestKind.swap,
            reason="Need to move this lecture please",
        )


def test_cancel_rejects_a_target():
    with pytest.raises(ValidationError):
        ChangeRequest(
            faculty_id="smith",
            assignment_id="1",
            kind=ChangeRequestKind.cancel,
            target=ChangeTarget(day="Friday"),
            reason="Need to cancel this lecture please",
        )
