"""schema.org JSON-LD for the public job listing.

The board links out to employers' postings, so each ``JobPosting`` carries
what we know and points at the original URL.
"""

from __future__ import annotations

from typing import Any

from app.core.config import settings
from app.core.constants import JOB_ADDRESS_COUNTRY, SITE_DESCRIPTION, SITE_NAME
from app.models.job import Job


def website_schema() -> dict[str, Any]:
    return {
        "@context": "https://schema.org",
        "@type": "WebSite",
        "name": SITE_NAME,
        "url": settings.SITE_URL,
        "description": SITE_DESCRIPTION,
    }


def job_posting_schema(job: Job) -> dict[str, Any]:
    return {
        "@context": "https://schema.org",
        "@type": "JobPosting",
        "title": job.title,
        "description": f"{job.title} position at {job.company} in {job.location}",
        "datePosted": job.submitted_on.date().isoformat(),
        "hiringOrganization": {"@type": "Organization", "name": job.company},
        "jobLocation": {
            "@type": "Place",
            "address": {
                "@type": "PostalAddress",
                "addressLocality": job.location,
                "addressCountry": JOB_ADDRESS_COUNTRY,
            },
        },
        "url": job.url,
    }


def generate_job_posting_schema(jobs: list[Job]) -> list[dict[str, Any]]:
    """Website entry followed by one ``JobPosting`` per active job."""
    return [website_schema(), *(job_posting_schema(job) for job in jobs if job.is_active)]
