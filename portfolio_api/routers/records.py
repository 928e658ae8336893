from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from portfolio_api.routers.deps import current_account_id, get_services
from portfolio_api.routers.serializers import experience_dict, skill_dict
from portfolio_api.schemas import ExperienceCreate, ExperiencePatch, SkillCreate, SkillPatch

router = APIRouter(tags=["records"])


@router.get("/experiences")
def list_experiences(request: Request, account_id: str = Depends(current_account_id)):
    return [experience_dict(item) for item in get_services(request).records.list_experiences(account_id)]


@router.post("/experiences", status_code=201)
def create_experience(body: ExperienceCreate, request: Request, account_id: str = Depends(current_account_id)):
    return experience_dict(get_services(request).records.create_experience(account_id, body.model_dump()))


@router.patch("/experiences/{experience_id}")
def update_experience(
    experience_id: str,
    body: ExperiencePatch,
    request: Request,
    account_id: str = Depends(current_account_id),
):
    item = get_services(request).records.update_experience(
        experience_id, account_id, body.model_dump(exclude_unset=True)
    )
    return experience_dict(item)


@router.delete("/experiences/{experience_id}")
def delete_experience(experience_id: str, request: Request, account_id: str = Depends(current_account_id)):
    get_services(request).records.delete_experience(experience_id, account_id)
    return {"deleted": experience_id}


@router.get("/skills")
def list_skills(request: Request, account_id: str = Depends(current_account_id)):
    return [skill_dict(item) for item in get_services(request).records.list_skills(account_id)]


@router.post("/skills", status_code=201)
def create_skill(body: SkillCreate, request: Request, account_id: str = Depends(current_account_id)):
    return skill_dict(get_services(request).records.create_skill(account_id, body.model_dump()))


@router.patch("/skills/{skill_id}")
def update_skill(skill_id: str, body: SkillPatch, request: Request, account_id: str = Depends(current_account_id)):
    item = get_services(request).records.update_skill(skill_id, account_id, body.model_dump(exclude_unset=True))
    return skill_dict(item)


@router.delete("/skills/{skill_id}")
def delete_skill(skill_id: str, request: Request, account_id: str = Depends(current_account_id)):
    get_services(request).records.delete_skill(skill_id, account_id)
    return {"deleted": skill_id}
