from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from app.core.config import Settings, get_settings
from app.core.exceptions import ConfigurationError, GenerationServiceError
from app.schemas.grouping import CourseGroup
from app.schemas.timetable import CoursePayload, VenuePayload
from app.schemas.validation import ValidationResult

logger = logging.getLogger(__name__)


class RemoteScheduleClient:
    """Delegates slot assignment to an external generation service.

    The service receives the generation request and answers with
    ``{"success", "schedule", "conflicts"}``. Its records are untrusted: the
    caller must pass ``schedule`` through the conformance filter.
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str | None = None,
        timeout_seconds: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise ConfigurationError("Remote generation service URL is not configured")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> "RemoteScheduleClient":
        settings = settings or get_settings()
        return cls(
            base_url=settings.generation_service_url or "",
            api_key=settings.generation_service_api_key,
            timeout_seconds=settings.generation_service_timeout_seconds,
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def generate(
        self,
        courses: Sequence[CoursePayload],
        venues: Sequence[VenuePayload],
        course_groups: Sequence[CourseGroup] | None = None,
        validation: ValidationResult | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "courses": [course.model_dump(mode="json", by_alias=True) for course in courses],
            "venues": [venue.model_dump(mode="json", by_alias=True) for venue in venues],
        }
        if course_groups is not None:
            payload["courseGroups"] = [group.model_dump(mode="json", by_alias=True) for group in course_groups]
        if validation is not None:
            payload["validationResult"] = validation.model_dump(mode="json", by_alias=True)

        try:
            with httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout_seconds,
                transport=self.transport,
            ) as client:
                response = client.post("/generate-schedule", json=payload, headers=self._headers())
        except httpx.HTTPError as exc:
            logger.exception("Remote generation request failed")
            raise GenerationServiceError(f"Remote generation service unreachable: {exc}") from exc

        if response.status_code >= 400:
            logger.warning("Remote generation service returned status=%s", response.status_code)
            raise GenerationServiceError(
                f"Remote generation service returned HTTP {response.status_code}",
                details={"status_code": response.status_code},
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise GenerationServiceError("Remote generation service returned malformed JSON") from exc

        if not isinstance(body, dict) or not isinstance(body.get("schedule", []), list):
            raise GenerationServiceError("Remote generation service returned an unexpected response shape")
        if not isinstance(body.get("conflicts", []), list):
            raise GenerationServiceError("Remote generation service returned an unexpected response shape")

        logger.info(
            "Remote generation returned | success=%s items=%s conflicts=%s",
            body.get("success"),
            len(body.get("schedule") or []),
            len(body.get("conflicts") or []),
        )
        return body
