from classgrid.models.assignment import ApprovalStatus, Assignment, AssignmentStatus  # noqa: F401
from classgrid.models.change_request import (  # noqa: F401
    ChangeRequest,
    ChangeRequestKind,
    ChangeRequestStatus,
    ChangeTarget,
)
from classgrid.models.faculty import Faculty, FacultyStatus  # noqa: F401
from classgrid.models.room import Room, RoomType  # noqa: F401
