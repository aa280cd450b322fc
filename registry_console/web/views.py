"""Console views.

Each view is a JSON document. Forms live for exactly one request: they are
mounted (when the view shows selectors), driven, and disposed before the
response is sent, which cancels anything still in flight.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Iterable, TypeVar

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from registry_console.core.exceptions import ProviderAbsent, UserRejected, WalletError
from registry_console.core.schemas.forms import (
    CredentialsInput,
    LandInput,
    OwnerInput,
    TransferInput,
)
from registry_console.core.utils.logging_config import set_correlation_id
from registry_console.web.context import ConsoleContext
from registry_console.web.forms import (
    LoginForm,
    RegisterAccountForm,
    RegisterLandForm,
    RegisterOwnerForm,
    RegistryForm,
    TransferOwnershipForm,
    ViewRecordForm,
)
from registry_console.web.routing import View, resolve_route

logger = logging.getLogger(__name__)

router = APIRouter()

F = TypeVar("F", bound=RegistryForm)

DASHBOARD_TABS = [
    {"id": "register-owner", "label": "Register Owner", "path": "/dashboard/register-owner"},
    {"id": "register-land", "label": "Register Land", "path": "/dashboard/register-land"},
    {"id": "transfer", "label": "Transfer Ownership", "path": "/dashboard/transfer"},
    {"id": "records", "label": "View Records", "path": "/dashboard/records"},
]

WALLET_ERROR_STATUS = {
    UserRejected: status.HTTP_409_CONFLICT,
    ProviderAbsent: status.HTTP_424_FAILED_DEPENDENCY,
}


def get_console(request: Request) -> ConsoleContext:
    return request.app.state.console


class RouteGuardMiddleware(BaseHTTPMiddleware):
    """Redirect every request the session state does not permit.

    Paths in ``exempt_paths`` bypass the guard.
    """

    def __init__(self, app, exempt_paths: Iterable[str] = ("/health",)):
        super().__init__(app)
        self.exempt_paths = frozenset(exempt_paths)

    async def dispatch(self, request: Request, call_next):
        set_correlation_id(request.headers.get("X-Correlation-ID") or str(uuid.uuid4()))

        if request.url.path in self.exempt_paths:
            return await call_next(request)

        console: ConsoleContext = request.app.state.console
        decision = resolve_route(console.session.state, request.url.path)
        # Permitted but non-canonical paths (trailing slash) also redirect
        if decision.redirected or decision.destination != request.url.path:
            url = decision.destination
            # Same view under its normal path keeps its query
            if not decision.redirected and request.url.query:
                url = f"{url}?{request.url.query}"
            logger.debug(f"Redirecting {decision.requested} to {url}")
            return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)

        return await call_next(request)


@asynccontextmanager
async def form_lifetime(form: F, mount: bool = False) -> AsyncIterator[F]:
    """Own ``form`` for the duration of a request."""
    try:
        if mount:
            await form.mount()
        yield form
    finally:
        form.dispose()


def form_response(form: RegistryForm) -> JSONResponse:
    status_code = status.HTTP_400_BAD_REQUEST if form.message.is_error else status.HTTP_200_OK
    return JSONResponse(content=form.to_dict(), status_code=status_code)


def wallet_state(console: ConsoleContext) -> Dict[str, Any]:
    connection = console.wallet.connection
    return {
        "connected": connection.connected,
        "address": connection.address,
        "short_address": connection.short_address,
        "provider_available": console.wallet.provider_available,
    }


# Authentication views


@router.get("/login")
async def login_view(console: ConsoleContext = Depends(get_console)):
    return LoginForm(console.api, console.session).to_dict()


@router.post("/login")
async def login(body: CredentialsInput, console: ConsoleContext = Depends(get_console)):
    async with form_lifetime(LoginForm(console.api, console.session)) as form:
        form.update(**body.values())
        await form.submit()
        return form_response(form)


@router.get("/register")
async def register_view(console: ConsoleContext = Depends(get_console)):
    return RegisterAccountForm(console.api).to_dict()


@router.post("/register")
async def register(body: CredentialsInput, console: ConsoleContext = Depends(get_console)):
    async with form_lifetime(RegisterAccountForm(console.api)) as form:
        form.update(**body.values())
        await form.submit()
        return form_response(form)


# Dashboard


@router.get("/dashboard")
async def dashboard(console: ConsoleContext = Depends(get_console)):
    session = console.session.session
    claims = session.claims
    return {
        "user": session.user,
        "email": claims.email if claims else None,
        "expires_at": session.expires_at.isoformat() if session.expires_at else None,
        "wallet": wallet_state(console),
        "tabs": DASHBOARD_TABS,
    }


@router.post("/dashboard/logout")
async def logout(console: ConsoleContext = Depends(get_console)):
    console.session.logout()
    return RedirectResponse(url=View.LOGIN.value, status_code=status.HTTP_303_SEE_OTHER)


@router.post("/dashboard/register-owner")
async def register_owner(body: OwnerInput, console: ConsoleContext = Depends(get_console)):
    async with form_lifetime(RegisterOwnerForm(console.api)) as form:
        form.update(**body.values())
        await form.submit()
        return form_response(form)


@router.get("/dashboard/register-land")
async def register_land_view(console: ConsoleContext = Depends(get_console)):
    async with form_lifetime(RegisterLandForm(console.api), mount=True) as form:
        return form.to_dict()


@router.post("/dashboard/register-land")
async def register_land(body: LandInput, console: ConsoleContext = Depends(get_console)):
    async with form_lifetime(RegisterLandForm(console.api)) as form:
        form.update(**body.values())
        await form.submit()
        return form_response(form)


@router.get("/dashboard/transfer")
async def transfer_view(console: ConsoleContext = Depends(get_console)):
    async with form_lifetime(TransferOwnershipForm(console.api), mount=True) as form:
        return form.to_dict()


@router.post("/dashboard/transfer")
async def transfer(body: TransferInput, console: ConsoleContext = Depends(get_console)):
    async with form_lifetime(TransferOwnershipForm(console.api)) as form:
        form.update(**body.values())
        await form.submit()
        return form_response(form)


@router.get("/dashboard/records")
async def records_view(console: ConsoleContext = Depends(get_console)):
    async with form_lifetime(ViewRecordForm(console.api), mount=True) as form:
        return form.to_dict()


@router.get("/dashboard/records/search")
async def search_record(land_id: str = "", console: ConsoleContext = Depends(get_console)):
    async with form_lifetime(ViewRecordForm(console.api)) as form:
        await form.search(land_id)
        return form_response(form)


# Wallet widget


@router.post("/dashboard/wallet/connect")
async def connect_wallet(console: ConsoleContext = Depends(get_console)):
    try:
        await console.wallet.connect()
    except WalletError as e:
        status_code = WALLET_ERROR_STATUS.get(type(e), status.HTTP_502_BAD_GATEWAY)
        return JSONResponse(
            content={"alert": e.message, "wallet": wallet_state(console)},
            status_code=status_code,
        )
    return {"wallet": wallet_state(console)}


@router.post("/dashboard/wallet/disconnect")
async def disconnect_wallet(console: ConsoleContext = Depends(get_console)):
    console.wallet.disconnect()
    return {"wallet": wallet_state(console)}
