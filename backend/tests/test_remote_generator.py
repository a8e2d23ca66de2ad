import json

import httpx
import pytest

from app.core.config import Settings
from app.core.exceptions import ConfigurationError, GenerationServiceError
from app.schemas.generator import SchedulingPolicy
from app.schemas.validation import ValidationResult
from app.services.generation_service import generate_enhanced_schedule
from app.services.remote_generator import RemoteScheduleClient


def scheduled(course, venue, day="Monday", start="8:00", end="10:00"):
    return {
        **course.model_dump(mode="json", by_alias=True),
        "venue": venue.model_dump(mode="json", by_alias=True),
        "timeSlot": {"day": day, "startTime": start, "endTime": end},
    }


def client_for(handler) -> RemoteScheduleClient:
    return RemoteScheduleClient(
        base_url="http://generator.test",
        api_key="secret",
        transport=httpx.MockTransport(handler),
    )


def test_missing_url_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        RemoteScheduleClient(base_url="")
    with pytest.raises(ConfigurationError):
        RemoteScheduleClient.from_settings(Settings(generation_service_url=None))


def test_generate_posts_request_and_returns_body(make_course, make_venue):
    course = make_course()
    venue = make_venue()
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "schedule": [scheduled(course, venue)], "conflicts": []})

    body = client_for(handler).generate([course], [venue])

    assert seen["path"] == "/generate-schedule"
    assert seen["auth"] == "Bearer secret"
    assert seen["body"]["courses"][0]["classSize"] == course.class_size
    assert seen["body"]["venues"][0]["id"] == venue.id
    assert len(body["schedule"]) == 1


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "boom"}),
        httpx.Response(200, content=b"not json"),
        httpx.Response(200, json=["unexpected"]),
        httpx.Response(200, json={"schedule": "nope"}),
    ],
)
def test_bad_responses_raise_generation_service_error(make_course, make_venue, response):
    client = client_for(lambda request: response)

    with pytest.raises(GenerationServiceError):
        client.generate([make_course()], [make_venue()])


def test_unreachable_service_raises_generation_service_error(make_course, make_venue):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GenerationServiceError):
        client_for(handler).generate([make_course()], [make_venue()])


def test_remote_output_is_conformed(make_course, make_venue):
    venue = make_venue(capacity=50)
    annex = make_venue(capacity=50)
    placed = make_course(id="ok", lecturer="Dr. A", class_size=30)
    repeated = make_course(id="twice", lecturer="Dr. B", class_size=30)
    late = make_course(id="late", lecturer="Dr. C", class_size=30)
    clash = make_course(id="clash", lecturer="Dr. A", class_size=30)
    missing = make_course(id="missing", lecturer="Dr. D", class_size=30)
    stranger = make_course(id="stranger", lecturer="Dr. E", class_size=30)

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "success": True,
                "schedule": [
                    scheduled(placed, venue),
                    scheduled(repeated, venue, day="Tuesday"),
                    scheduled(repeated, venue, day="Wednesday"),
                    scheduled(late, venue, day="Thursday", start="16:00", end="18:00"),
                    scheduled(clash, annex, start="9:00", end="11:00"),
                    scheduled(stranger, venue, day="Friday"),
                    {"id": "broken"},
                ],
                "conflicts": [],
            },
        )

    result = generate_enhanced_schedule(
        [placed, repeated, late, clash, missing],
        [venue, annex],
        enable_fallbacks=False,
        policy=SchedulingPolicy(),
        remote_client=client_for(handler),
    )

    assert sorted(item.id for item in result.schedule) == ["ok", "twice"]
    reasons = [conflict.reason for conflict in result.conflicts]
    assert any("Duplicate placement" in reason for reason in reasons)
    assert any("outside business hours" in reason for reason in reasons)
    assert any("unknown course" in reason for reason in reasons)
    assert any(reason.startswith("Malformed schedule item") for reason in reasons)
    assert any("double-books the lecturer" in reason for reason in reasons)
    assert any(reason == "Course CSC305 was not returned by the remote generation service" for reason in reasons)
    assert result.status == "partial"
    assert result.summary.total_courses == 5
    assert result.summary.scheduled_courses == 2


def test_remote_failure_becomes_failed_result(make_course, make_venue):
    client = client_for(lambda request: httpx.Response(503, json={}))

    result = generate_enhanced_schedule(
        [make_course()],
        [make_venue()],
        policy=SchedulingPolicy(),
        remote_client=client,
    )

    assert result.status == "failed"
    assert result.conflicts[0].conflict_type == "system-error"
    assert result.conflicts[0].reason == "Remote generation service returned HTTP 503"


def test_remote_cannot_rewrite_courses_or_invent_venues(make_course, make_venue):
    hall = make_venue(capacity=50)
    big = make_course(id="big", lecturer="Dr. F", class_size=200)
    roaming = make_course(id="roaming", lecturer="Dr. G", class_size=40)

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "success": True,
                "schedule": [
                    {**scheduled(big, hall), "classSize": 10},
                    scheduled(roaming, make_venue(capacity=60), day="Tuesday"),
                ],
                "conflicts": [],
            },
        )

    result = generate_enhanced_schedule(
        [big, roaming],
        [hall],
        enable_fallbacks=False,
        validation_result=ValidationResult(is_valid=True),
        policy=SchedulingPolicy(),
        remote_client=client_for(handler),
    )

    assert result.schedule == []
    by_course = {conflict.course.id: conflict for conflict in result.conflicts if conflict.course is not None}
    assert by_course["big"].reason == f"Placement of {big.code} altered course fields: class_size"
    assert by_course["big"].course.class_size == 200
    assert by_course["roaming"].reason.startswith(f"Placement of {roaming.code} uses unknown venue")
    assert result.status == "failed"
