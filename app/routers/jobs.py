"""Job endpoints.

Public:
    GET  /api/v1/jobs                  -- active jobs, newest first, filterable
    GET  /api/v1/jobs/locations        -- active job counts per location
    GET  /api/v1/jobs/structured-data  -- schema.org JSON-LD for the listing

Admin/owner (bearer session):
    POST  /api/v1/jobs                 -- create a job (+100 points)
    PATCH /api/v1/jobs/{job_id}        -- edit a job (+200 points on deactivation)

Mutation bodies are read as raw JSON and handed to the job service
unvalidated; the service authenticates and authorizes the caller before it
looks at the body.  The service talks to Supabase synchronously, so it runs
in the threadpool, as do the plain ``def`` read endpoints.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from starlette.concurrency import run_in_threadpool

from app.core.auth import Caller
from app.dependencies import get_caller, get_job_service
from app.models.job import Job, JobMutationResponse, LocationCount, PublicJob
from app.services.jobs import JobService
from app.services.listings import list_jobs, location_counts
from app.services.seo import generate_job_posting_schema

logger = logging.getLogger(__name__)

router = APIRouter()


async def _json_body(request: Request) -> Any:
    """Decoded JSON body, or ``None`` when it is empty or not JSON."""
    try:
        return await request.json()
    except ValueError:
        return None


@router.get("", response_model=list[PublicJob])
def get_jobs(
    company: str | None = Query(default=None, description="Exact company name (case-insensitive)"),
    location: str | None = Query(default=None, description="Text contained in the location"),
    include_inactive: bool = Query(default=False),
) -> list[PublicJob]:
    return list_jobs(company=company, location=location, include_inactive=include_inactive)


@router.get("/locations", response_model=list[LocationCount])
def get_locations() -> list[LocationCount]:
    return location_counts()


@router.get("/structured-data")
def get_structured_data() -> list[dict[str, Any]]:
    """JSON-LD array: the website entry followed by one JobPosting per active job."""
    jobs = [Job.model_validate(job.model_dump()) for job in list_jobs()]
    return generate_job_posting_schema(jobs)


@router.post("", status_code=201, response_model=JobMutationResponse)
async def create_job(
    request: Request,
    caller: Caller | None = Depends(get_caller),
    service: JobService = Depends(get_job_service),
) -> JobMutationResponse:
    payload = await _json_body(request)
    created = await run_in_threadpool(service.create_job, caller, payload)
    return JobMutationResponse(job=created)


@router.patch("/{job_id}", response_model=JobMutationResponse)
async def update_job(
    job_id: str,
    request: Request,
    caller: Caller | None = Depends(get_caller),
    service: JobService = Depends(get_job_service),
) -> JobMutationResponse:
    payload = await _json_body(request)
    updated = await run_in_threadpool(service.update_job, caller, job_id, payload)
    return JobMutationResponse(job=updated)
