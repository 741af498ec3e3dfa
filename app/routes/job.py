# ========================================
# app/routes/job.py
# ========================================

import asyncio
import logging
import uuid

from fastapi import APIRouter, Body, Depends, Query
from typing import Any, List, Optional

from app.database import OrderedStore, get_job_store, get_write_lock
from app.schemas.base import parse_body
from app.schemas.job import JobCreate, JobResponse, JobUpdate
from app.utils.errors import NotFound
from app.utils.timestamps import utc_now

logger = logging.getLogger(__name__)

router = APIRouter()


async def load_job(job_id: str, jobs: OrderedStore) -> dict:
    job = await jobs.get(job_id)
    if job is None:
        raise NotFound(f"Job with id={job_id} not found")
    return job


def matches(job: dict, category: Optional[str], employment_type: Optional[str], status: Optional[str]) -> bool:
    if category and str(job.get("category", "")).casefold() != category.casefold():
        return False
    if employment_type and job.get("employmentType") != employment_type:
        return False
    if status and job.get("status") != status:
        return False
    return True


# ✅ 1. POST A JOB
@router.post("/jobs", response_model=JobResponse)
async def create_job(
    job: JobCreate,
    jobs: OrderedStore = Depends(get_job_store),
    lock: asyncio.Lock = Depends(get_write_lock),
):
    """Create a new job posting. New posts start ACTIVE with no applicants."""

    new_job = job.model_dump(by_alias=True)
    new_job["id"] = str(uuid.uuid4())
    new_job["createdAt"] = utc_now()
    new_job["updatedAt"] = None
    new_job["status"] = "ACTIVE"
    new_job["applicants"] = []

    async with lock:
        saved = await jobs.insert(new_job["id"], new_job)
    logger.info("Job %s created: %s at %s", saved["id"], saved["title"], saved["company"])

    return saved


# ✅ 2. GET ALL JOBS WITH FILTERS
@router.get("/jobs", response_model=List[JobResponse])
async def get_all_jobs(
    category: Optional[str] = Query(None, description="Filter by category (case-insensitive)"),
    employment_type: Optional[str] = Query(
        None, alias="employmentType", description="FULL_TIME, PART_TIME, CONTRACT or INTERNSHIP"
    ),
    status: Optional[str] = Query(None, description="ACTIVE, CLOSED or DRAFT"),
    jobs: OrderedStore = Depends(get_job_store),
):
    """List job posts. Filters combine with AND; an omitted filter matches everything."""

    return [
        job for job in await jobs.values()
        if matches(job, category, employment_type, status)
    ]


# ✅ 3. GET SINGLE JOB
@router.get("/jobs/{job_id}", response_model=JobResponse)
async def get_job_details(job_id: str, jobs: OrderedStore = Depends(get_job_store)):
    return await load_job(job_id, jobs)


# ✅ 4. UPDATE/EDIT JOB
@router.put("/jobs/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: str,
    payload: Any = Body(None, description="Any of title, description, requirements, salary, status"),
    jobs: OrderedStore = Depends(get_job_store),
    lock: asyncio.Lock = Depends(get_write_lock),
):
    """Update title, description, requirements, salary or status. Other fields are kept."""

    async with lock:
        job = await load_job(job_id, jobs)
        job_update = parse_body(JobUpdate, payload)

        update_data = job_update.model_dump(by_alias=True, exclude_unset=True)
        job.update(update_data)
        job["updatedAt"] = utc_now()

        saved = await jobs.insert(job_id, job)

    logger.info("Job %s updated: %s", job_id, ", ".join(sorted(update_data)) or "no fields")
    return saved


# ✅ 5. DELETE JOB
@router.delete("/jobs/{job_id}", response_model=JobResponse)
async def delete_job(
    job_id: str,
    jobs: OrderedStore = Depends(get_job_store),
    lock: asyncio.Lock = Depends(get_write_lock),
):
    """Delete a job posting and return what was removed."""

    async with lock:
        removed = await jobs.remove(job_id)
    if removed is None:
        raise NotFound(f"Job with id={job_id} not found")

    logger.info("Job %s deleted", job_id)
    return removed
