from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from portfolio_api.routers.deps import current_account_id, get_services
from portfolio_api.routers.serializers import account_dict, experience_dict, section_dict, skill_dict
from portfolio_api.schemas import ProfilePatch, SlugRequest, VisibilityRequest

router = APIRouter(tags=["profile"])


@router.patch("/profile")
def update_profile(body: ProfilePatch, request: Request, account_id: str = Depends(current_account_id)):
    account = get_services(request).profiles.update_profile(account_id, body.model_dump(exclude_unset=True))
    return account_dict(account)


@router.put("/profile/visibility")
def set_visibility(body: VisibilityRequest, request: Request, account_id: str = Depends(current_account_id)):
    return account_dict(get_services(request).profiles.set_visibility(account_id, body.is_public))


@router.put("/profile/slug")
def change_slug(body: SlugRequest, request: Request, account_id: str = Depends(current_account_id)):
    return account_dict(get_services(request).profiles.change_portfolio_slug(account_id, body.slug))


@router.get("/portfolios/{slug}")
def public_portfolio(slug: str, request: Request):
    portfolio = get_services(request).profiles.get_public_portfolio(slug)
    return {
        "account": account_dict(portfolio.account, public=True),
        "sections": [section_dict(section) for section in portfolio.sections],
        "experiences": [experience_dict(item) for item in portfolio.experiences],
        "skills": [skill_dict(item) for item in portfolio.skills],
    }
