"""
Tests for the application endpoints.
"""
import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from app import database
from app.config import Settings
from app.main import create_app


def test_apply_to_job(client, job, application_payload):
    """A successful application starts PENDING and is linked from the job."""
    response = client.post(f"/jobs/{job['id']}/apply", json=application_payload)
    assert response.status_code == 200
    application = response.json()
    assert application["status"] == "PENDING"
    assert application["jobId"] == job["id"]
    assert application["updatedAt"] is None
    assert application["applicantName"] == "Jane"

    updated_job = client.get(f"/jobs/{job['id']}").json()
    assert updated_job["applicants"] == [application["id"]]


def test_apply_twice_is_a_conflict(client, job, application_payload):
    first = client.post(f"/jobs/{job['id']}/apply", json=application_payload)
    assert first.status_code == 200

    second = client.post(f"/jobs/{job['id']}/apply", json=application_payload)
    assert second.status_code == 400
    assert "already applied" in second.json()["error"]

    assert len(client.get(f"/jobs/{job['id']}").json()["applicants"]) == 1


def test_same_email_can_apply_to_different_jobs(client, job_payload, application_payload):
    first_job = client.post("/jobs", json=job_payload).json()
    second_job = client.post("/jobs", json=job_payload).json()

    assert client.post(f"/jobs/{first_job['id']}/apply", json=application_payload).status_code == 200
    assert client.post(f"/jobs/{second_job['id']}/apply", json=application_payload).status_code == 200


@pytest.mark.parametrize("status", ["CLOSED", "DRAFT"])
def test_apply_to_inactive_job(client, job, application_payload, status):
    client.put(f"/jobs/{job['id']}", json={"status": status})

    response = client.post(f"/jobs/{job['id']}/apply", json=application_payload)
    assert response.status_code == 400
    assert "no longer accepting applications" in response.json()["error"]


def test_apply_to_missing_job(client, application_payload):
    response = client.post("/jobs/nope/apply", json=application_payload)
    assert response.status_code == 404


@pytest.mark.parametrize("field", ["applicantName", "email", "resumeUrl"])
def test_apply_requires_fields(client, job, application_payload, field):
    application_payload[field] = ""
    response = client.post(f"/jobs/{job['id']}/apply", json=application_payload)
    assert response.status_code == 400
    assert "errors" in response.json()


def test_apply_rejects_bad_email(client, job, application_payload):
    application_payload["email"] = "jane at x dot com"
    response = client.post(f"/jobs/{job['id']}/apply", json=application_payload)
    assert response.status_code == 400


def test_apply_without_optional_fields(client, job, application_payload):
    del application_payload["phone"]
    del application_payload["coverLetter"]
    response = client.post(f"/jobs/{job['id']}/apply", json=application_payload)
    assert response.status_code == 200
    assert response.json()["phone"] == ""
    assert response.json()["coverLetter"] == ""


def test_get_application(client, job, application_payload):
    created = client.post(f"/jobs/{job['id']}/apply", json=application_payload).json()

    response = client.get(f"/applications/{created['id']}")
    assert response.status_code == 200
    assert response.json() == created


def test_get_missing_application(client):
    response = client.get("/applications/nope")
    assert response.status_code == 404
    assert response.json() == {"error": "Application with id=nope not found"}


def test_list_applications_for_job(client, job_payload, application_payload):
    job = client.post("/jobs", json=job_payload).json()
    other = client.post("/jobs", json=job_payload).json()

    ids = set()
    for email in ["a@x.com", "b@x.com"]:
        payload = dict(application_payload, email=email)
        ids.add(client.post(f"/jobs/{job['id']}/apply", json=payload).json()["id"])
    client.post(f"/jobs/{other['id']}/apply", json=application_payload)

    response = client.get(f"/jobs/{job['id']}/applications")
    assert response.status_code == 200
    assert {app["id"] for app in response.json()} == ids
    assert all(app["jobId"] == job["id"] for app in response.json())


def test_list_applications_for_job_without_any(client, job):
    response = client.get(f"/jobs/{job['id']}/applications")
    assert response.status_code == 200
    assert response.json() == []


def test_list_applications_for_missing_job(client):
    response = client.get("/jobs/nope/applications")
    assert response.status_code == 404


# ===========================
# STATUS UPDATES
# ===========================

def test_update_application_status(client, job, application_payload):
    created = client.post(f"/jobs/{job['id']}/apply", json=application_payload).json()

    response = client.put(f"/applications/{created['id']}/status", json={"status": "SHORTLISTED"})
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "SHORTLISTED"
    assert data["updatedAt"] is not None

    assert client.get(f"/applications/{created['id']}").json()["status"] == "SHORTLISTED"


def test_status_transitions_are_unconstrained(client, job, application_payload):
    created = client.post(f"/jobs/{job['id']}/apply", json=application_payload).json()
    url = f"/applications/{created['id']}/status"

    for status in ["REJECTED", "PENDING", "REVIEWED"]:
        assert client.put(url, json={"status": status}).json()["status"] == status


def test_update_status_accepts_any_string_by_default(client, job, application_payload):
    created = client.post(f"/jobs/{job['id']}/apply", json=application_payload).json()

    response = client.put(f"/applications/{created['id']}/status", json={"status": "ON_HOLD"})
    assert response.status_code == 200
    assert response.json()["status"] == "ON_HOLD"


def test_update_status_requires_status(client, job, application_payload):
    created = client.post(f"/jobs/{job['id']}/apply", json=application_payload).json()

    response = client.put(f"/applications/{created['id']}/status", json={})
    assert response.status_code == 400


def test_update_status_of_missing_application(client):
    response = client.put("/applications/nope/status", json={"status": "REVIEWED"})
    assert response.status_code == 404


def test_strict_mode_rejects_unknown_status(job_payload, application_payload):
    settings = Settings(rate_limit_requests=0, strict_application_status=True)
    app = create_app(settings, client=AsyncMongoMockClient())

    with TestClient(app) as client:
        job = client.post("/jobs", json=job_payload).json()
        created = client.post(f"/jobs/{job['id']}/apply", json=application_payload).json()
        url = f"/applications/{created['id']}/status"

        response = client.put(url, json={"status": "ON_HOLD"})
        assert response.status_code == 400
        assert "Must be one of" in response.json()["error"]

        assert client.put(url, json={"status": "REVIEWED"}).status_code == 200


# ===========================
# LOOKUPS COME BEFORE BODY CHECKS
# ===========================

def test_apply_to_missing_job_with_invalid_body(client):
    response = client.post("/jobs/nope/apply", json={})
    assert response.status_code == 404


def test_apply_to_closed_job_with_invalid_body(client, job):
    client.put(f"/jobs/{job['id']}", json={"status": "CLOSED"})

    response = client.post(f"/jobs/{job['id']}/apply", json={"email": "bad"})
    assert response.status_code == 400
    assert "no longer accepting applications" in response.json()["error"]


def test_update_status_of_missing_application_with_invalid_body(client):
    response = client.put("/applications/nope/status", json={})
    assert response.status_code == 404


@pytest.mark.parametrize("email", ["a@b..c", "<x>@y.z", "jane@"])
def test_apply_rejects_malformed_email(client, job, application_payload, email):
    application_payload["email"] = email
    response = client.post(f"/jobs/{job['id']}/apply", json=application_payload)
    assert response.status_code == 400
    assert [err["field"] for err in response.json()["errors"]] == ["email"]


# ===========================
# CONCURRENT APPLIES
# ===========================

@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def async_client():
    settings = Settings(rate_limit_requests=0)
    app = create_app(settings)
    await database.connect_to_mongo(app, settings, AsyncMongoMockClient())
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.mark.anyio
async def test_parallel_applies_all_linked_to_job(async_client, job_payload, application_payload):
    job = (await async_client.post("/jobs", json=job_payload)).json()

    responses = await asyncio.gather(*[
        async_client.post(f"/jobs/{job['id']}/apply", json=dict(application_payload, email=f"c{i}@x.com"))
        for i in range(5)
    ])
    assert [r.status_code for r in responses] == [200] * 5

    applicants = (await async_client.get(f"/jobs/{job['id']}")).json()["applicants"]
    assert sorted(applicants) == sorted(r.json()["id"] for r in responses)


@pytest.mark.anyio
async def test_parallel_duplicate_applies_accept_one(async_client, job_payload, application_payload):
    job = (await async_client.post("/jobs", json=job_payload)).json()

    responses = await asyncio.gather(*[
        async_client.post(f"/jobs/{job['id']}/apply", json=application_payload)
        for _ in range(5)
    ])
    assert sorted(r.status_code for r in responses) == [200, 400, 400, 400, 400]

    listed = (await async_client.get(f"/jobs/{job['id']}/applications")).json()
    assert len(listed) == 1
