"""Request-scoped dependencies shared by the routers."""
from __future__ import annotations

from fastapi import HTTPException, Request


def get_services(request: Request):
    services = getattr(getattr(request.app, "state", None), "services", None)
    if not services:
        raise RuntimeError("Services not configured")
    return services


def current_account_id(request: Request) -> str:
    account_id = get_services(request).sessions.current_account_id(request)
    if not account_id:
        raise HTTPException(401, "Authentication required")
    return account_id
