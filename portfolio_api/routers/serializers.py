"""Entity -> JSON dict helpers shared by the routers."""
from __future__ import annotations

from datetime import datetime

from portfolio_api.db.models import Account, ContentSection, Experience, PortfolioConfig, Skill


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def account_dict(entity: Account, *, public: bool = False) -> dict:
    data = {
        "id": entity.id,
        "username": entity.username,
        "firstName": entity.first_name,
        "lastName": entity.last_name,
        "bio": entity.bio,
        "location": entity.location,
        "linkedinUrl": entity.linkedin_url,
        "githubUrl": entity.github_url,
        "websiteUrl": entity.website_url,
        "avatarUrl": entity.avatar_url,
        "portfolioSlug": entity.portfolio_slug,
        "isPublic": bool(entity.is_public),
    }
    if not public:
        data.update({"email": entity.email, "phone": entity.phone, "createdAt": _iso(entity.created_at)})
    return data


def section_dict(entity: ContentSection) -> dict:
    return {
        "id": entity.id,
        "userId": entity.user_id,
        "title": entity.title,
        "slug": entity.slug,
        "type": entity.type,
        "description": entity.description,
        "isPublic": bool(entity.is_public),
        "order": entity.order,
        "layout": entity.layout,
        "content": entity.content or {},
        "createdAt": _iso(entity.created_at),
        "updatedAt": _iso(entity.updated_at),
    }


def config_dict(entity: PortfolioConfig) -> dict:
    return {
        "id": entity.id,
        "userId": entity.user_id,
        "sectionOrder": entity.section_order or [],
        "layoutType": entity.layout_type,
        "theme": entity.theme,
        "primaryColor": entity.primary_color,
        "fontFamily": entity.font_family,
        "spacing": entity.spacing,
        "showProfileImage": entity.show_profile_image,
        "showSocialLinks": entity.show_social_links,
        "showContactInfo": entity.show_contact_info,
        "customCSS": entity.custom_css,
        "animationsEnabled": entity.animations_enabled,
    }


def experience_dict(entity: Experience) -> dict:
    return {
        "id": entity.id,
        "title": entity.title,
        "companyName": entity.company_name,
        "description": entity.description,
        "startDate": _iso(entity.start_date),
        "endDate": _iso(entity.end_date),
        "isCurrent": bool(entity.is_current),
        "location": entity.location,
    }


def skill_dict(entity: Skill) -> dict:
    return {
        "id": entity.id,
        "name": entity.name,
        "description": entity.description,
        "category": entity.category,
        "proficiency": entity.proficiency,
        "yearsOfExperience": entity.years_of_experience,
    }
