"""Version and landing page endpoints."""

from importlib.metadata import PackageNotFoundError, version

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from onboard.api.dependencies import SessionDep
from onboard.api.models import APIResponse, VersionResponse
from onboard.api.pages import index_page

APP_NAME = "technical-onboarding"

try:
    VERSION = version(APP_NAME)
except PackageNotFoundError:
    # Running from a source checkout that was never installed
    VERSION = "0.0.0"

router = APIRouter(tags=["meta"])


@router.get("/version", response_model=APIResponse[VersionResponse])
def get_version() -> APIResponse[VersionResponse]:
    """Application version, usable as a readiness check."""
    return APIResponse(data=VersionResponse(name=APP_NAME, version=VERSION))


@router.get("/", response_class=HTMLResponse)
def index(session: SessionDep) -> HTMLResponse:
    username = session.username if session is not None and session.authenticated else None
    return HTMLResponse(index_page(username))
