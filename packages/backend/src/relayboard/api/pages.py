"""HTML pages — the login form and the dashboard.

Learn: /login is exempt from the gateway so anyone can reach the form;
a caller who already holds a valid session is bounced to the dashboard
instead. / is session-only, so the gateway redirects strangers to /login
before this handler ever runs.
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import FileResponse, RedirectResponse

from relayboard.api.deps import get_gateway, get_settings
from relayboard.auth.gateway import AuthGateway
from relayboard.config import Settings

router = APIRouter(include_in_schema=False)


def _page(settings: Settings, name: str) -> FileResponse:
    path = settings.static_dir / name
    if not path.is_file():
        raise HTTPException(status_code=404, detail="Not Found")
    return FileResponse(path, media_type="text/html")


@router.get("/login")
@router.get("/login.html")
async def login_page(
    request: Request,
    gateway: AuthGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
):
    if gateway.has_valid_session(request):
        return RedirectResponse("/", status_code=302)
    return _page(settings, "login.html")


@router.get("/")
async def dashboard_page(settings: Settings = Depends(get_settings)):
    return _page(settings, "index.html")
