from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from portfolio_api.routers.deps import current_account_id, get_services
from portfolio_api.routers.serializers import section_dict
from portfolio_api.schemas import CopyTemplateRequest, ReorderRequest, SectionCreate, SectionPatch

router = APIRouter(prefix="/sections", tags=["sections"])


@router.get("")
def list_sections(request: Request, account_id: str = Depends(current_account_id)):
    return [section_dict(section) for section in get_services(request).sections.list(account_id)]


@router.post("", status_code=201)
def create_section(body: SectionCreate, request: Request, account_id: str = Depends(current_account_id)):
    section = get_services(request).sections.create(account_id, body.model_dump(exclude_unset=True))
    return section_dict(section)


@router.get("/templates")
def template_types(request: Request, account_id: str = Depends(current_account_id)):
    return {"types": get_services(request).sections.template_types(account_id)}


@router.post("/copy-template", status_code=201)
def copy_template(body: CopyTemplateRequest, request: Request, account_id: str = Depends(current_account_id)):
    section = get_services(request).sections.copy_template(
        account_id, body.template_type, body.title, body.description
    )
    return section_dict(section)


@router.post("/reorder")
def reorder_sections(body: ReorderRequest, request: Request, account_id: str = Depends(current_account_id)):
    items = [(item.id, item.order) for item in body.items]
    return [section_dict(section) for section in get_services(request).sections.reorder(account_id, items)]


@router.get("/{section_id}")
def get_section(section_id: str, request: Request, account_id: str = Depends(current_account_id)):
    return section_dict(get_services(request).sections.get(section_id, account_id))


@router.patch("/{section_id}")
def update_section(
    section_id: str,
    body: SectionPatch,
    request: Request,
    account_id: str = Depends(current_account_id),
):
    section = get_services(request).sections.update(section_id, account_id, body.model_dump(exclude_unset=True))
    return section_dict(section)


@router.delete("/{section_id}")
def delete_section(section_id: str, request: Request, account_id: str = Depends(current_account_id)):
    section = get_services(request).sections.delete(section_id, account_id)
    return {"deleted": section.id}


@router.post("/{section_id}/entries", status_code=201)
def add_entry(
    section_id: str,
    request: Request,
    entry: dict[str, Any] = Body(...),
    account_id: str = Depends(current_account_id),
):
    return section_dict(get_services(request).sections.add_entry(section_id, account_id, entry))


@router.patch("/{section_id}/entries/{entry_id}")
def update_entry(
    section_id: str,
    entry_id: str,
    request: Request,
    patch: dict[str, Any] = Body(...),
    account_id: str = Depends(current_account_id),
):
    return section_dict(get_services(request).sections.update_entry(section_id, account_id, entry_id, patch))


@router.delete("/{section_id}/entries/{entry_id}")
def remove_entry(section_id: str, entry_id: str, request: Request, account_id: str = Depends(current_account_id)):
    return section_dict(get_services(request).sections.remove_entry(section_id, account_id, entry_id))
