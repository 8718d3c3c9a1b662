import pytest

from classgrid.core.exceptions import DataIntegrityError
from classgrid.models.assignment import ApprovalStatus, Assignment, AssignmentStatus
from classgrid.services.conflict_service import ConflictService, compute_conflicts, detect_conflicts


def slot(id, *, day="Monday", time_slot="10:00-11:00", room="LH-101", faculty="smith", batch="CS-A", **extra):
    return Assignment(
        id=id,
        subject=extra.pop("subject", "Data Structures"),
        faculty_id=faculty,
        room_id=room,
        batch=batch,
        day=day,
        time_slot=time_slot,
        **extra,
    )


def by_id(assignments):
    return {item.id: item for item in assignments}


def test_room_and_faculty_double_booking_scenario():
    # A and B share LH-101; A and C share Dr. Smith.
    a = slot("A", room="LH-101", faculty="smith", batch="CS-A")
    b = slot("B", room="LH-101", faculty="brown", batch="CS-C")
    c = slot("C", room="SR-205", faculty="smith", batch="CS-B")

    result = by_id(compute_conflicts([a, b, c]))

    assert result["A"].status == AssignmentStatus.conflict
    assert result["A"].conflict_reason == "Room double-booked (LH-101); Faculty double-booked (smith)"
    assert result["A"].conflicts_with == ["B", "C"]
    assert result["B"].status == AssignmentStatus.conflict
    assert result["B"].conflict_reason == "Room double-booked (LH-101)"
    assert result["B"].conflicts_with == ["A"]
    assert result["C"].status == AssignmentStatus.conflict
    assert result["C"].conflict_reason == "Faculty double-booked (smith)"
    assert result["C"].conflicts_with == ["A"]


def test_room_pair_leaves_other_assignments_untouched():
    assignments = [
        slot("1", room="LH-101", faculty="smith", batch="CS-A", approval=ApprovalStatus.approved),
        slot("2", room="LH-101", faculty="brown", batch="CS-B"),
        slot("3", room="LAB-CS-01", faculty="johnson", batch="CS-C", approval=ApprovalStatus.approved),
        slot("4", time_slot="11:00-12:00", room="LH-101", faculty="smith", batch="CS-A"),
    ]

    result = by_id(compute_conflicts(assignments))

    assert result["1"].status == AssignmentStatus.conflict
    assert result["2"].status == AssignmentStatus.conflict
    assert result["3"].status == AssignmentStatus.approved
    assert result["3"].conflict_reason is None
    assert result["4"].status == AssignmentStatus.pending
    assert result["4"].conflicts_with == []


def test_output_keeps_input_order():
    assignments = [slot(str(n), time_slot=f"{8 + n}:00-{9 + n}:00") for n in range(5)]
    assert [item.id for item in compute_conflicts(reversed(assignments))] == ["4", "3", "2", "1", "0"]


def test_compute_conflicts_is_idempotent():
    assignments = [
        slot("A"),
        slot("B", faculty="brown", batch="CS-C"),
        slot("C", room="SR-205", batch="CS-B"),
        slot("D", day="Tuesday", approval=ApprovalStatus.approved),
    ]

    first = compute_conflicts(assignments)
    second = compute_conflicts(first)

    assert [item.model_dump_json() for item in first] == [item.model_dump_json() for item in second]


def test_input_status_is_ignored():
    stale = slot("A", status=AssignmentStatus.conflict, conflict_reason="Room double-booked", conflicts_with=["Z"])

    [result] = compute_conflicts([stale])

    assert result.status == AssignmentStatus.pending
    assert result.conflict_reason is None
    assert result.conflicts_with == []


def test_conflict_overrides_administrative_approval():
    a = slot("A", approval=ApprovalStatus.approved)
    b = slot("B", room="SR-205", faculty="brown", approval=ApprovalStatus.approved)

    result = by_id(compute_conflicts([a, b]))

    assert result["A"].status == AssignmentStatus.conflict
    assert result["A"].conflict_reason == "Batch double-booked (CS-A)"


def test_reason_order_is_room_then_faculty_then_batch():
    # Same room, faculty and batch: every dimension is violated.
    result = compute_conflicts([slot("A"), slot("B")])

    assert result[0].conflict_reason == (
        "Room double-booked (LH-101); Faculty double-booked (smith); Batch double-booked (CS-A)"
    )
    assert result[0].conflict_reason == result[1].conflict_reason


def test_same_slot_on_different_days_does_not_conflict():
    result = compute_conflicts([slot("A", day="Monday"), slot("B", day="Tuesday")])
    assert all(item.status == AssignmentStatus.pending for item in result)


def test_equivalent_slot_labels_collide():
    result = compute_conflicts([slot("A", time_slot="09:00-10:00"), slot("B", time_slot="9:00-10:00", room="SR-205", faculty="brown")])
    assert result[0].time_slot == "9:00-10:00"
    assert result[0].status == AssignmentStatus.conflict


def test_variable_length_slot_overlaps_hourly_slot():
    lab = slot("LAB", time_slot="9:00-11:00", room="LAB-CS-01", faculty="brown", batch="CS-B")
    lecture = slot("LEC", time_slot="10:00-11:00", room="LAB-CS-01", faculty="johnson", batch="CS-C")
    before = slot("EARLY", time_slot="8:00-9:00", room="LAB-CS-01", faculty="johnson", batch="CS-C")

    result = by_id(compute_conflicts([lab, lecture, before]))

    assert result["LAB"].status == AssignmentStatus.conflict
    assert result["LAB"].conflicts_with == ["LEC"]
    assert result["LEC"].conflict_reason == "Room double-booked (LAB-CS-01)"
    assert result["EARLY"].status == AssignmentStatus.pending


def test_multi_cell_overlap_reports_one_group():
    a = slot("A", time_slot="9:00-11:00", faculty="smith", batch="CS-A")
    b = slot("B", time_slot="9:00-11:00", faculty="brown", batch="CS-B")

    report = detect_conflicts([a, b])

    assert len(report.conflicts) == 1
    assert report.conflicts[0].time_slot == "9:00-11:00"
    assert report.conflicts[0].affected_assignments == ["A", "B"]


def test_misaligned_slot_is_rejected_on_hourly_grid():
    with pytest.raises(DataIntegrityError):
        compute_conflicts([slot("A", time_slot="9:30-10:30")])


def test_finer_granularity_accepts_half_hours():
    a = slot("A", time_slot="9:30-10:30")
    b = slot("B", time_slot="9:00-9:30", faculty="brown", batch="CS-B")

    result = compute_conflicts([a, b], granularity_minutes=30)

    assert all(item.status == AssignmentStatus.pending for item in result)


def test_duplicate_ids_are_a_data_integrity_error():
    with pytest.raises(DataIntegrityError) as excinfo:
        compute_conflicts([slot("A"), slot("A", day="Tuesday")])
    assert excinfo.value.details == {"assignment_ids": ["A"]}


def test_orphaned_reference_fails_fast_by_default():
    with pytest.raises(DataIntegrityError) as excinfo:
        compute_conflicts([slot("A", room="GHOST")], room_ids={"LH-101"}, faculty_ids={"smith"})
    assert excinfo.value.details["orphans"] == [{"assignment_id": "A", "reference": "room", "id": "GHOST"}]


def test_orphaned_reference_can_be_flagged():
    assignments = [slot("A", room="GHOST"), slot("B", room="LH-101", faculty="brown", batch="CS-B", day="Friday")]

    result = by_id(compute_conflicts(assignments, room_ids={"LH-101"}, faculty_ids={"smith", "brown"}, orphan_policy="flag"))

    assert result["A"].status == AssignmentStatus.conflict
    assert result["A"].conflict_reason == "Orphaned reference (room GHOST)"
    assert result["A"].conflicts_with == []
    assert result["B"].status == AssignmentStatus.pending


def test_detect_conflicts_report_and_resolutions():
    a = slot("A")
    b = slot("B", faculty="brown", batch="CS-C")
    c = slot("C", room="SR-205", batch="CS-B")

    report = detect_conflicts([a, b, c])

    assert [item.conflict_type for item in report.conflicts] == ["room_conflict", "faculty_conflict"]
    assert report.conflicts[0].affected_assignments == ["A", "B"]
    assert report.conflicts[0].severity == "hard"
    assert "Room overlap for LH-101 on Monday 10:00-11:00" in report.conflicts[0].description
    assert [item.action_type for item in report.suggested_resolutions] == ["change_room", "move_slot"]
    assert report.conflicting_ids == ["A", "B", "C"]


def test_no_conflicts():
    assignments = [
        slot("s1", time_slot="9:00-10:00"),
        slot("s2", time_slot="10:00-11:00"),
    ]
    report = ConflictService(assignments).detect_conflicts()

    assert report.conflicts == []
    assert report.suggested_resolutions == []
