"""Points ledger: best-effort score increments through the service-role client.

Points are an incentive, not a balance anyone reconciles.  A failed award is
logged and reported as ``None``; it never fails the job mutation that
triggered it.
"""

from __future__ import annotations

import logging
from typing import Any

from supabase import Client

from app.db.supabase import get_supabase_admin

logger = logging.getLogger(__name__)

ADD_POINTS_RPC = "add_points"


def _coerce_total(data: Any) -> int | None:
    """The RPC returns the new total, possibly wrapped in a list or row."""
    if isinstance(data, list):
        data = data[0] if data else None
    if isinstance(data, dict):
        data = data.get(ADD_POINTS_RPC, data.get("points"))
    if isinstance(data, bool):
        return None
    if isinstance(data, (int, float)):
        return int(data)
    if isinstance(data, str) and data.strip().lstrip("-").isdigit():
        return int(data)
    return None


def award_points(
    user_id: str,
    amount: int,
    client: Client | None = None,
) -> int | None:
    """Atomically add *amount* points to *user_id*'s profile.

    *amount* must be positive; there is no path for taking points away.
    Returns the new total when the backend reports it, ``None`` otherwise
    (including on any failure, which is logged and swallowed).
    """
    if amount <= 0:
        raise ValueError(f"Points amount must be positive, got {amount}")

    try:
        admin = client or get_supabase_admin()
        result = admin.rpc(
            ADD_POINTS_RPC,
            {"target_user_id": user_id, "points_to_add": amount},
        ).execute()
    except Exception as exc:
        logger.error(
            "points_award_failed",
            extra={
                "user_id": user_id,
                "amount": amount,
                "error_message": str(exc),
            },
        )
        return None

    new_total = _coerce_total(result.data)
    if new_total is None:
        logger.warning(
            "points_award_no_total",
            extra={"user_id": user_id, "amount": amount},
        )
    else:
        logger.info(
            "points_awarded",
            extra={"user_id": user_id, "amount": amount, "new_total": new_total},
        )
    return new_total
