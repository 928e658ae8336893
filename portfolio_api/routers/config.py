from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from portfolio_api.routers.deps import current_account_id, get_services
from portfolio_api.routers.serializers import config_dict
from portfolio_api.schemas import ConfigPatch

router = APIRouter(prefix="/config", tags=["config"])


@router.get("")
def get_config(request: Request, account_id: str = Depends(current_account_id)):
    return config_dict(get_services(request).configs.ensure(account_id))


@router.patch("")
def update_config(body: ConfigPatch, request: Request, account_id: str = Depends(current_account_id)):
    patch = body.model_dump(exclude_unset=True)
    if body.section_order is not None:
        patch["section_order"] = [item.model_dump(by_alias=True, exclude_none=True) for item in body.section_order]
    return config_dict(get_services(request).configs.update(account_id, patch))
