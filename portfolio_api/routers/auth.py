from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from portfolio_api.domain.errors import InvalidCredentialsError
from portfolio_api.routers.deps import current_account_id, get_services
from portfolio_api.routers.serializers import account_dict
from portfolio_api.schemas import LoginRequest, RegisterRequest
from portfolio_api.services.identity_service import INVALID_CREDENTIALS
from portfolio_api.services.session_service import SESSION_COOKIE_NAME

router = APIRouter(prefix="/auth", tags=["auth"])


def _signed_in(request: Request, account, status_code: int = 200) -> JSONResponse:
    services = get_services(request)
    token = services.sessions.issue(account.id)
    response = JSONResponse(account_dict(account), status_code=status_code)
    services.sessions.set_cookie(response, token)
    return response


@router.post("/register")
def register(body: RegisterRequest, request: Request):
    services = get_services(request)
    account = services.identity.register(
        body.email,
        body.password,
        first_name=body.first_name,
        last_name=body.last_name,
        username=body.username,
    )
    return _signed_in(request, account, status_code=201)


@router.post("/login")
def login(body: LoginRequest, request: Request):
    account = get_services(request).identity.resolve_credential_login(body.email, body.password)
    if account is None:
        raise InvalidCredentialsError(INVALID_CREDENTIALS)
    return _signed_in(request, account)


@router.post("/logout")
def logout(request: Request):
    services = get_services(request)
    services.sessions.revoke(request.cookies.get(SESSION_COOKIE_NAME))
    response = JSONResponse({"ok": True})
    services.sessions.clear_cookie(response)
    return response


@router.get("/me")
def me(request: Request, account_id: str = Depends(current_account_id)):
    account = get_services(request).identity.get_account(account_id)
    if account is None:
        raise InvalidCredentialsError(INVALID_CREDENTIALS)
    return account_dict(account)
