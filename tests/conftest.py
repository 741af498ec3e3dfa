"""
Shared fixtures: an app wired to an in-memory MongoDB.
"""
import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from app.config import Settings
from app.main import create_app


@pytest.fixture
def settings():
    return Settings(database_name="jobboard_test", rate_limit_requests=0)


@pytest.fixture
def client(settings):
    app = create_app(settings, client=AsyncMongoMockClient())
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def job_payload():
    return {
        "title": "Engineer",
        "company": "Acme",
        "location": "Remote",
        "description": "Build things",
        "requirements": ["TS"],
        "salary": {"min": 1000, "max": 2000, "currency": "USD"},
        "employmentType": "FULL_TIME",
        "category": "Eng",
        "contactEmail": "a@b.com",
    }


@pytest.fixture
def application_payload():
    return {
        "applicantName": "Jane",
        "email": "jane@x.com",
        "phone": "123",
        "resumeUrl": "http://r.com/r.pdf",
        "coverLetter": "Hi",
    }


@pytest.fixture
def job(client, job_payload):
    response = client.post("/jobs", json=job_payload)
    assert response.status_code == 200
    return response.json()
