"""Short-link redirects.

GET /j/{code} sends the reader to the job's stored URL with the attribution
parameter added.  Unknown codes go to the board home page, never an error.
"""

import logging

from fastapi import APIRouter
from starlette.responses import RedirectResponse

from app.core.urls import with_attribution
from app.services.listings import resolve_short_code

logger = logging.getLogger(__name__)

router = APIRouter()

HOME_PATH = "/"


@router.get("/j/{code}", include_in_schema=False)
async def follow_short_link(code: str) -> RedirectResponse:
    url = resolve_short_code(code)
    if url is None:
        logger.info("short_link_unknown", extra={"short_code": code})
        return RedirectResponse(HOME_PATH, status_code=307)
    return RedirectResponse(with_attribution(url), status_code=307)
