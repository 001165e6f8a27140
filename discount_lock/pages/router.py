import logging
from functools import lru_cache

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from discount_lock.pages import content

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Pages"])


@lru_cache(maxsize=None)
def _cached(page: str) -> str:
    renderers = {
        "home": content.render_home_page,
        "privacy": content.render_privacy_page,
        "terms": content.render_terms_page,
    }
    return renderers[page]()


@router.get("/", response_class=HTMLResponse)
@router.get("/api", response_class=HTMLResponse)
@router.get("/api/index", response_class=HTMLResponse)
async def app_home():
    logger.debug("App home requested")
    return HTMLResponse(_cached("home"))


@router.get("/privacy", response_class=HTMLResponse)
async def privacy_policy():
    return HTMLResponse(_cached("privacy"))


@router.get("/terms", response_class=HTMLResponse)
async def terms_of_service():
    return HTMLResponse(_cached("terms"))
