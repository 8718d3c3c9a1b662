from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from classgrid.models.assignment import Assignment
from classgrid.models.change_request import ChangeRequest, ChangeRequestKind, ChangeTarget
from classgrid.schemas.conflict import ConflictReport


class ChangeRequestCreate(BaseModel):
    faculty_id: str = Field(min_length=1, max_length=36)
    assignment_id: str = Field(min_length=1, max_length=36)
    kind: ChangeRequestKind
    target: ChangeTarget | None = None
    reason: str = Field(min_length=10, max_length=500)


class ChangeRequestReview(BaseModel):
    decision: Literal["approve", "reject"]
    note: str | None = Field(default=None, max_length=1000)
    override: bool = False


class AppliedOutcome(BaseModel):
    outcome: Literal["applied"] = "applied"
    request_id: str
    report: ConflictReport

    @property
    def assignments(self) -> list[Assignment]:
        return self.report.assignments


class RejectedOutcome(BaseModel):
    outcome: Literal["rejected"] = "rejected"
    request_id: str
    conflicting_ids: list[str]
    dimensions: list[str]
    reason: str
    report: ConflictReport


class NotFoundOutcome(BaseModel):
    outcome: Literal["not_found"] = "not_found"
    request_id: str
    assignment_id: str


ChangeOutcome = Annotated[
    Union[AppliedOutcome, RejectedOutcome, NotFoundOutcome],
    Field(discriminator="outcome"),
]


class ChangePreviewRequest(BaseModel):
    assignments: list[Assignment]
    request: ChangeRequest


class ChangeReviewResult(BaseModel):
    request: ChangeRequest
    report: ConflictReport | None = None
    overridden: bool = False
