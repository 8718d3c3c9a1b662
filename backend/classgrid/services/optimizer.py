from __future__ import annotations

import logging
import time
from enum import Enum

import anyio
import httpx
from pydantic import BaseModel, Field, ValidationError

from classgrid.core.config import Settings, get_settings
from classgrid.core.exceptions import ConfigurationError
from classgrid.models.assignment import Assignment
from classgrid.schemas.timetable import TimetableSnapshot

logger = logging.getLogger(__name__)


class OptimizerStatus(str, Enum):
    succeeded = "succeeded"
    failed = "failed"
    timed_out = "timed_out"


class OptimizerOutcome(BaseModel):
    status: OptimizerStatus
    assignments: list[Assignment] = Field(default_factory=list)
    message: str
    elapsed_seconds: float


class OptimizerClient:
    """Client for the external schedule generator.

    The generator receives the current snapshot as JSON and answers with
    ``{"assignments": [...]}``. Its candidate is only a proposal: callers run
    it through the conflict engine before committing anything.
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._url = url or settings.optimizer_url
        self._timeout = timeout_seconds or settings.optimizer_timeout_seconds
        self._transport = transport

    def _outcome(self, status: OptimizerStatus, message: str, started: float, assignments=None) -> OptimizerOutcome:
        elapsed = round(time.perf_counter() - started, 3)
        if status == OptimizerStatus.succeeded:
            logger.info("Optimizer returned %d assignment(s) in %.3fs", len(assignments or []), elapsed)
        else:
            logger.warning("Optimizer %s after %.3fs: %s", status.value, elapsed, message)
        return OptimizerOutcome(status=status, assignments=assignments or [], message=message, elapsed_seconds=elapsed)

    async def generate(self, snapshot: TimetableSnapshot) -> OptimizerOutcome:
        if not self._url:
            raise ConfigurationError("Optimizer URL is not configured")

        started = time.perf_counter()
        try:
            with anyio.fail_after(self._timeout):
                async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                    response = await client.post(self._url, json=snapshot.model_dump(mode="json"))
        except (TimeoutError, httpx.TimeoutException):
            return self._outcome(
                OptimizerStatus.timed_out,
                f"Optimizer did not answer within {self._timeout:g} second(s)",
                started,
            )
        except httpx.HTTPError as exc:
            return self._outcome(OptimizerStatus.failed, f"Optimizer request failed: {exc}", started)

        if response.status_code >= 400:
            return self._outcome(
                OptimizerStatus.failed,
                f"Optimizer responded with HTTP {response.status_code}",
                started,
            )

        try:
            payload = response.json()
            items = payload["assignments"]
            assignments = [Assignment.model_validate(item) for item in items]
        except (ValueError, KeyError, TypeError, ValidationError) as exc:
            return self._outcome(OptimizerStatus.failed, f"Malformed optimizer response: {exc}", started)

        return self._outcome(
            OptimizerStatus.succeeded,
            f"Optimizer proposed {len(assignments)} assignment(s)",
            started,
            assignments,
        )
