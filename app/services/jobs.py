"""Job mutation service: the only write path for job listings.

Create and update both run the same sequence:

1. authenticate  -- a session must be present
2. authorize     -- the caller's profile role must be allowed to manage jobs
3. validate      -- typed intake, every bad field reported at once
4. persist       -- insert/update under the caller's row-level security
5. points        -- best effort, through the service-role client
6. analytics     -- best effort
7. revalidate    -- best effort, stale listing pages

Steps 1-4 raise a typed ``AppException`` and stop; nothing after the
failing step runs.  Steps 5-7 log failures and never undo step 4.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager
from datetime import datetime, timezone
from typing import Any

from supabase import Client

from app.core.auth import Caller, can_manage_jobs
from app.core.constants import (
    EVENT_JOB_ADDED,
    EVENT_JOB_UPDATED,
    JOB_EDITABLE_FIELDS,
    JOB_LISTING_PATHS,
    POINTS_JOB_CREATED,
    POINTS_JOB_DEACTIVATED,
)
from app.core.exceptions import (
    PersistenceError,
    Unauthenticated,
    Unauthorized,
    ValidationError,
)
from app.core.urls import clean
from app.db.supabase import get_supabase, user_client
from app.models.job import (
    Job,
    JobChanges,
    JobCreated,
    JobInput,
    JobRecord,
    JobUpdateInput,
)
from app.models.profile import Profile
from app.services import points
from app.services.analytics import AnalyticsSink
from app.services.revalidation import Revalidator

logger = logging.getLogger(__name__)


@contextmanager
def client_for_caller(caller: Caller) -> Iterator[Client]:
    """Data-store client that acts as *caller* (row-level security applies)."""
    if caller.access_token:
        with user_client(caller.access_token) as client:
            yield client
    else:
        yield get_supabase()


def load_manager_profile(db: Client, caller: Caller) -> Profile:
    """Load *caller*'s profile and require a job-managing role.

    Raises ``Unauthorized`` when the profile is missing, unreadable, or its
    role is not allowed to manage jobs.
    """
    try:
        result = (
            db.table("profiles")
            .select("user_role, email, full_name")
            .eq("id", caller.user_id)
            .limit(1)
            .execute()
        )
    except Exception as exc:
        logger.error(
            "profile_lookup_failed",
            extra={"user_id": caller.user_id, "error_message": str(exc)},
        )
        raise Unauthorized() from exc

    if not result.data:
        logger.warning("profile_missing", extra={"user_id": caller.user_id})
        raise Unauthorized()

    row = result.data[0]
    if not can_manage_jobs(row.get("user_role")):
        logger.warning(
            "job_mutation_forbidden",
            extra={"user_id": caller.user_id, "role": row.get("user_role")},
        )
        raise Unauthorized()
    return Profile.model_validate(row)


def deactivation_points(was_active: bool, is_active: bool) -> int:
    """Points for an update: only an active -> inactive transition earns any."""
    if was_active and not is_active:
        return POINTS_JOB_DEACTIVATED
    return 0


class JobService:
    """Authorized create/update of jobs with their advisory side effects."""

    def __init__(
        self,
        analytics: AnalyticsSink,
        revalidator: Revalidator,
        client_factory: Callable[[Caller], AbstractContextManager[Client]] = client_for_caller,
    ) -> None:
        self._analytics = analytics
        self._revalidator = revalidator
        self._client_factory = client_factory

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def create_job(
        self,
        caller: Caller | None,
        payload: Any,
    ) -> JobCreated:
        """Create a job and award the creation points."""
        caller = self._authenticate(caller)
        with self._client_factory(caller) as db:
            return self._create(db, caller, payload)

    def update_job(
        self,
        caller: Caller | None,
        job_id: Any,
        payload: Any,
    ) -> JobCreated:
        """Update every editable field of a job.

        Deactivating a previously active job earns the deactivation points;
        any other change earns none.
        """
        caller = self._authenticate(caller)
        with self._client_factory(caller) as db:
            return self._update(db, caller, job_id, payload)

    # ------------------------------------------------------------------
    # Steps, run with the caller's client open
    # ------------------------------------------------------------------

    def _create(self, db: Client, caller: Caller, payload: Any) -> JobCreated:
        profile = load_manager_profile(db, caller)
        data = JobInput.parse(payload)

        record = JobRecord(
            title=data.title,
            company=data.company,
            location=data.location,
            url=clean(data.url),
            is_active=True,
            submitted_on=datetime.now(timezone.utc),
            created_by=caller.user_id,
        )
        try:
            result = db.table("jobs").insert(record.model_dump(mode="json")).execute()
        except Exception as exc:
            logger.error(
                "job_insert_failed",
                extra={"user_id": caller.user_id, "error_message": str(exc)},
            )
            raise PersistenceError() from exc
        if not result.data:
            logger.error("job_insert_returned_no_row", extra={"user_id": caller.user_id})
            raise PersistenceError()

        row = result.data[0]
        job_id = int(row["id"])
        logger.info(
            "job_created",
            extra={"job_id": job_id, "user_id": caller.user_id, "url": record.url},
        )

        new_total = self._award(caller.user_id, POINTS_JOB_CREATED)

        self._capture(
            caller,
            EVENT_JOB_ADDED,
            {
                "job_id": job_id,
                "job_title": record.title,
                "company": record.company,
                "location": record.location,
                "short_code": row.get("short_code"),
                "points_awarded": POINTS_JOB_CREATED,
                "new_points_total": new_total,
                **_user_properties(caller, profile),
            },
        )
        self._revalidate()

        return JobCreated(id=job_id, title=record.title)

    def _update(self, db: Client, caller: Caller, job_id: Any, payload: Any) -> JobCreated:
        profile = load_manager_profile(db, caller)
        data, job_id = self._parse_update(job_id, payload)

        prior = self._load_job(db, job_id)

        changes = JobChanges(
            title=data.title,
            company=data.company,
            location=data.location,
            url=clean(data.url),
            is_active=data.is_active,
            updated_at=datetime.now(timezone.utc),
            updated_by=caller.user_id,
        )
        try:
            result = (
                db.table("jobs")
                .update(changes.model_dump(mode="json"))
                .eq("id", job_id)
                .execute()
            )
        except Exception as exc:
            logger.error(
                "job_update_failed",
                extra={"job_id": job_id, "user_id": caller.user_id, "error_message": str(exc)},
            )
            raise PersistenceError() from exc
        if not result.data:
            # Row-level security filters the row out rather than raising.
            logger.error("job_update_matched_no_row", extra={"job_id": job_id})
            raise PersistenceError()

        changed = {
            f"{field}_changed": getattr(prior, field) != getattr(changes, field)
            for field in JOB_EDITABLE_FIELDS
        }
        was_deactivated = prior.is_active and not changes.is_active
        points_awarded = deactivation_points(prior.is_active, changes.is_active)
        new_total = self._award(caller.user_id, points_awarded) if points_awarded else None

        logger.info(
            "job_updated",
            extra={
                "job_id": job_id,
                "user_id": caller.user_id,
                "was_deactivated": was_deactivated,
            },
        )

        self._capture(
            caller,
            EVENT_JOB_UPDATED,
            {
                "job_id": job_id,
                "job_title": changes.title,
                "company": changes.company,
                "location": changes.location,
                "short_code": prior.short_code,
                "is_active": changes.is_active,
                "was_deactivated": was_deactivated,
                **changed,
                "points_awarded": points_awarded,
                "new_points_total": new_total,
                **_user_properties(caller, profile),
            },
        )
        self._revalidate()

        return JobCreated(id=job_id, title=changes.title)

    # ------------------------------------------------------------------
    # Hard-fail steps
    # ------------------------------------------------------------------

    @staticmethod
    def _authenticate(caller: Caller | None) -> Caller:
        if caller is None or not caller.user_id:
            raise Unauthenticated()
        return caller

    @staticmethod
    def _parse_update(
        job_id: Any,
        payload: Any,
    ) -> tuple[JobUpdateInput, int]:
        """Validate the id and the form together so every bad field is reported."""
        fields: list[str] = []
        parsed_id = _positive_int(job_id)
        if parsed_id is None:
            fields.append("id")

        data: JobUpdateInput | None = None
        try:
            data = JobUpdateInput.parse(payload)
        except ValidationError as exc:
            fields.extend(exc.fields)

        if fields or data is None or parsed_id is None:
            raise ValidationError(fields)
        return data, parsed_id

    @staticmethod
    def _load_job(db: Client, job_id: int) -> Job:
        try:
            result = (
                db.table("jobs")
                .select("*")
                .eq("id", job_id)
                .limit(1)
                .execute()
            )
        except Exception as exc:
            logger.error(
                "job_lookup_failed",
                extra={"job_id": job_id, "error_message": str(exc)},
            )
            raise PersistenceError() from exc

        if not result.data:
            raise ValidationError(["id"], message=f"Job {job_id} not found")
        return Job.model_validate(result.data[0])

    # ------------------------------------------------------------------
    # Soft-fail steps
    # ------------------------------------------------------------------

    @staticmethod
    def _award(user_id: str, amount: int) -> int | None:
        try:
            return points.award_points(user_id, amount)
        except Exception as exc:
            logger.error(
                "points_award_failed",
                extra={"user_id": user_id, "amount": amount, "error_message": str(exc)},
            )
            return None

    def _capture(self, caller: Caller, event: str, properties: dict[str, Any]) -> None:
        try:
            self._analytics.capture(caller.user_id, event, properties)
        except Exception as exc:
            logger.warning(
                "analytics_capture_failed",
                extra={"event_name": event, "error_message": str(exc)},
            )

    def _revalidate(self) -> None:
        try:
            self._revalidator.revalidate(JOB_LISTING_PATHS)
        except Exception as exc:
            logger.warning(
                "revalidation_failed",
                extra={"paths": list(JOB_LISTING_PATHS), "error_message": str(exc)},
            )


def _positive_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and value.strip().isascii() and value.strip().isdecimal():
        parsed = int(value.strip())
        return parsed if parsed > 0 else None
    return None


def _user_properties(caller: Caller, profile: Profile) -> dict[str, Any]:
    return {
        "user_id": caller.user_id,
        "user_email": profile.email or caller.email,
        "user_name": profile.full_name,
        "user_role": profile.user_role.value,
    }
