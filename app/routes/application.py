# ========================================
# app/routes/application.py
# ========================================

import asyncio
import logging
import uuid

from fastapi import APIRouter, Body, Depends
from typing import Any, List

from app.config import Settings
from app.database import (
    OrderedStore,
    get_application_store,
    get_job_store,
    get_settings,
    get_write_lock,
)
from app.routes.job import load_job
from app.schemas.application import (
    APPLICATION_STATUSES,
    ApplicationCreate,
    ApplicationResponse,
    ApplicationStatusUpdate,
)
from app.schemas.base import parse_body
from app.utils.errors import Conflict, InvalidState, NotFound, ValidationError
from app.utils.timestamps import utc_now

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Applications"])


async def load_application(application_id: str, applications: OrderedStore) -> dict:
    application = await applications.get(application_id)
    if application is None:
        raise NotFound(f"Application with id={application_id} not found")
    return application


# ✅ 1. APPLY FOR JOB
@router.post("/jobs/{job_id}/apply", response_model=ApplicationResponse)
async def apply_job(
    job_id: str,
    payload: Any = Body(None, description="applicantName, email, phone, resumeUrl, coverLetter"),
    jobs: OrderedStore = Depends(get_job_store),
    applications: OrderedStore = Depends(get_application_store),
    lock: asyncio.Lock = Depends(get_write_lock),
):
    """Submit an application to an ACTIVE job. One application per email per job."""

    async with lock:
        job = await load_job(job_id, jobs)

        # Check if job is accepting applications
        if job.get("status") != "ACTIVE":
            raise InvalidState(
                f"This job posting is no longer accepting applications. Status: {job.get('status')}"
            )

        application = parse_body(ApplicationCreate, payload)

        # Check for duplicate application
        for existing in await applications.values():
            if existing.get("jobId") == job_id and existing.get("email") == application.email:
                raise Conflict(f"{application.email} has already applied to job {job_id}")

        application_data = application.model_dump(by_alias=True)
        application_data["id"] = str(uuid.uuid4())
        application_data["jobId"] = job_id
        application_data["status"] = "PENDING"
        application_data["createdAt"] = utc_now()
        application_data["updatedAt"] = None

        saved = await applications.insert(application_data["id"], application_data)

        job["applicants"] = [*job.get("applicants", []), saved["id"]]
        await jobs.insert(job_id, job)

    logger.info("Application %s submitted to job %s", saved["id"], job_id)
    return saved


# ✅ 2. GET APPLICATION DETAILS
@router.get("/applications/{application_id}", response_model=ApplicationResponse)
async def get_application_details(
    application_id: str,
    applications: OrderedStore = Depends(get_application_store),
):
    return await load_application(application_id, applications)


# ✅ 3. GET APPLICATIONS FOR A JOB
@router.get("/jobs/{job_id}/applications", response_model=List[ApplicationResponse])
async def get_job_applications(
    job_id: str,
    jobs: OrderedStore = Depends(get_job_store),
    applications: OrderedStore = Depends(get_application_store),
):
    """All applications submitted to a job, in storage order."""

    await load_job(job_id, jobs)

    return [app for app in await applications.values() if app.get("jobId") == job_id]


# ✅ 4. UPDATE APPLICATION STATUS
@router.put("/applications/{application_id}/status", response_model=ApplicationResponse)
async def update_application_status(
    application_id: str,
    payload: Any = Body(None, description='{"status": "..."}'),
    applications: OrderedStore = Depends(get_application_store),
    settings: Settings = Depends(get_settings),
    lock: asyncio.Lock = Depends(get_write_lock),
):
    """Set an application's status. Any transition is allowed."""

    async with lock:
        application = await load_application(application_id, applications)
        status_update = parse_body(ApplicationStatusUpdate, payload)

        if settings.strict_application_status and status_update.status not in APPLICATION_STATUSES:
            raise ValidationError(
                f"Invalid status '{status_update.status}'. Must be one of: {', '.join(APPLICATION_STATUSES)}"
            )

        previous = application.get("status")
        application["status"] = status_update.status
        application["updatedAt"] = utc_now()

        saved = await applications.insert(application_id, application)

    logger.info("Application %s status changed: %s -> %s", application_id, previous, saved["status"])
    return saved
