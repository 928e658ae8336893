"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import select, update, delete, func
from sqlalchemy.exc import IntegrityError

from portfolio_api.core.security import new_token
from portfolio_api.db.models import (
    Account,
    Credential,
    PortfolioConfig,
    ContentSection,
    Experience,
    Skill,
    UserSession,
)
from portfolio_api.db.session import Database
from portfolio_api.domain.errors import ConfigurationMissingError


class SQLRepository:
    """CRUD helpers wrapping a Database session factory.

    Every method opens and closes its own session. Unique-constraint
    violations surface as ``sqlalchemy.exc.IntegrityError`` after rollback so
    services can decide whether a race means "already exists".
    """

    def __init__(self, database: Database | None):
        if database is None:
            raise ConfigurationMissingError("SQLRepository requires a Database")
        self.database = database

    def _session(self):
        return self.database.session()

    # -------------------------- accounts --------------------------
    def get_account(self, account_id: str) -> Optional[Account]:
        with self._session() as session:
            return session.get(Account, account_id)

    def get_account_by_email(self, email: str) -> Optional[Account]:
        with self._session() as session:
            stmt = select(Account).where(Account.email == (email or "").strip().lower())
            return session.execute(stmt).scalar_one_or_none()

    def get_account_by_portfolio_slug(self, slug: str) -> Optional[Account]:
        with self._session() as session:
            stmt = select(Account).where(Account.portfolio_slug == slug)
            return session.execute(stmt).scalar_one_or_none()

    def handle_taken(self, candidate: str) -> bool:
        """True when ``candidate`` is used as a username or a portfolio slug."""
        with self._session() as session:
            stmt = (
                select(Account.id)
                .where((Account.username == candidate) | (Account.portfolio_slug == candidate))
                .limit(1)
            )
            return session.execute(stmt).first() is not None

    def portfolio_slug_exists(self, slug: str, exclude_account_id: str | None = None) -> bool:
        with self._session() as session:
            stmt = select(Account.id).where(Account.portfolio_slug == slug)
            if exclude_account_id:
                stmt = stmt.where(Account.id != exclude_account_id)
            return session.execute(stmt.limit(1)).first() is not None

    def create_account(
        self,
        *,
        username: str,
        email: str,
        first_name: str,
        last_name: str,
        provider: str,
        provider_subject_id: str,
        credential_type: str,
        password_hash: str | None = None,
    ) -> Account:
        """Insert the account and its first credential in one transaction."""
        account = Account(
            username=username,
            email=email.strip().lower(),
            first_name=first_name or "",
            last_name=last_name or "",
            portfolio_slug=username,
            is_public=False,
        )
        with self._session() as session:
            try:
                session.add(account)
                session.flush()
                session.add(
                    Credential(
                        user_id=account.id,
                        type=credential_type,
                        provider=provider,
                        provider_subject_id=provider_subject_id,
                        password_hash=password_hash,
                    )
                )
                session.commit()
            except IntegrityError:
                session.rollback()
                raise
            session.refresh(account)
            return account

    def update_account(self, account_id: str, values: dict) -> Optional[Account]:
        with self._session() as session:
            account = session.get(Account, account_id)
            if not account:
                return None
            for key, value in values.items():
                setattr(account, key, value)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                raise
            session.refresh(account)
            return account

    def count_accounts(self) -> int:
        with self._session() as session:
            return int(session.execute(select(func.count(Account.id))).scalar_one())

    # -------------------------- credentials --------------------------
    def get_credential(self, provider: str, provider_subject_id: str) -> Optional[Credential]:
        with self._session() as session:
            stmt = select(Credential).where(
                Credential.provider == provider,
                Credential.provider_subject_id == provider_subject_id,
            )
            return session.execute(stmt).scalar_one_or_none()

    def get_provider_credential(self, user_id: str, provider: str) -> Optional[Credential]:
        with self._session() as session:
            stmt = (
                select(Credential)
                .where(Credential.user_id == user_id, Credential.provider == provider)
                .order_by(Credential.created_at)
            )
            return session.execute(stmt).scalars().first()

    def list_credentials(self, user_id: str) -> list[Credential]:
        with self._session() as session:
            stmt = select(Credential).where(Credential.user_id == user_id).order_by(Credential.created_at)
            return list(session.execute(stmt).scalars().all())

    def create_credential(
        self,
        user_id: str,
        *,
        provider: str,
        provider_subject_id: str,
        credential_type: str,
        password_hash: str | None = None,
    ) -> Credential:
        entity = Credential(
            user_id=user_id,
            type=credential_type,
            provider=provider,
            provider_subject_id=provider_subject_id,
            password_hash=password_hash,
        )
        with self._session() as session:
            session.add(entity)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                raise
            session.refresh(entity)
            return entity

    def update_credential_password(self, credential_id: str, password_hash: str) -> None:
        with self._session() as session:
            stmt = update(Credential).where(Credential.id == credential_id).values(password_hash=password_hash)
            session.execute(stmt)
            session.commit()

    def count_credentials(self, user_id: str | None = None) -> int:
        with self._session() as session:
            stmt = select(func.count(Credential.id))
            if user_id:
                stmt = stmt.where(Credential.user_id == user_id)
            return int(session.execute(stmt).scalar_one())

    # -------------------------- configuration --------------------------
    def get_config(self, user_id: str) -> Optional[PortfolioConfig]:
        with self._session() as session:
            stmt = select(PortfolioConfig).where(PortfolioConfig.user_id == user_id)
            return session.execute(stmt).scalar_one_or_none()

    def create_config(self, user_id: str, values: dict) -> PortfolioConfig:
        entity = PortfolioConfig(user_id=user_id, **values)
        with self._session() as session:
            session.add(entity)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                raise
            session.refresh(entity)
            return entity

    def update_config(self, user_id: str, values: dict) -> Optional[PortfolioConfig]:
        with self._session() as session:
            stmt = select(PortfolioConfig).where(PortfolioConfig.user_id == user_id)
            entity = session.execute(stmt).scalar_one_or_none()
            if not entity:
                return None
            for key, value in values.items():
                setattr(entity, key, value)
            session.commit()
            session.refresh(entity)
            return entity

    def count_configs(self, user_id: str) -> int:
        with self._session() as session:
            stmt = select(func.count(PortfolioConfig.id)).where(PortfolioConfig.user_id == user_id)
            return int(session.execute(stmt).scalar_one())

    # -------------------------- content sections --------------------------
    def get_section(self, section_id: str) -> Optional[ContentSection]:
        with self._session() as session:
            return session.get(ContentSection, section_id)

    def list_sections(self, user_id: str, *, public_only: bool = False) -> list[ContentSection]:
        with self._session() as session:
            stmt = select(ContentSection).where(ContentSection.user_id == user_id)
            if public_only:
                stmt = stmt.where(ContentSection.is_public.is_(True))
            stmt = stmt.order_by(ContentSection.order, ContentSection.created_at)
            return list(session.execute(stmt).scalars().all())

    def section_slug_exists(self, user_id: str, slug: str, exclude_section_id: str | None = None) -> bool:
        with self._session() as session:
            stmt = select(ContentSection.id).where(ContentSection.user_id == user_id, ContentSection.slug == slug)
            if exclude_section_id:
                stmt = stmt.where(ContentSection.id != exclude_section_id)
            return session.execute(stmt.limit(1)).first() is not None

    def max_section_order(self, user_id: str) -> Optional[int]:
        with self._session() as session:
            stmt = select(func.max(ContentSection.order)).where(ContentSection.user_id == user_id)
            return session.execute(stmt).scalar_one_or_none()

    def create_section(self, user_id: str, values: dict) -> ContentSection:
        entity = ContentSection(user_id=user_id, **values)
        with self._session() as session:
            session.add(entity)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                raise
            session.refresh(entity)
            return entity

    def update_owned_section(self, section_id: str, owner_id: str, values: dict) -> Optional[ContentSection]:
        """Apply ``values`` when the section still belongs to ``owner_id``; None otherwise."""
        with self._session() as session:
            entity = session.get(ContentSection, section_id)
            if not entity or entity.user_id != owner_id:
                return None
            for key, value in values.items():
                setattr(entity, key, value)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                raise
            session.refresh(entity)
            return entity

    def delete_owned_section(self, section_id: str, owner_id: str) -> bool:
        with self._session() as session:
            stmt = delete(ContentSection).where(ContentSection.id == section_id, ContentSection.user_id == owner_id)
            result = session.execute(stmt)
            session.commit()
            return (result.rowcount or 0) > 0

    def reorder_owned_sections(self, owner_id: str, orders: dict[str, int]) -> bool:
        """Write every order in one transaction, or none of them.

        Each write is conditional on ownership; when fewer rows match than ids
        were requested the transaction is rolled back and False is returned.
        """
        if not orders:
            return True
        now = datetime.now(timezone.utc)
        with self._session() as session:
            matched = 0
            # Row locks are always taken in id order.
            for section_id, order in sorted(orders.items()):
                stmt = (
                    update(ContentSection)
                    .where(ContentSection.id == section_id, ContentSection.user_id == owner_id)
                    .values(order=order, updated_at=now)
                )
                matched += session.execute(stmt).rowcount or 0
            if matched < len(orders):
                session.rollback()
                return False
            session.commit()
            return True

    def find_template(self, template_type: str, template_owner_id: str) -> Optional[ContentSection]:
        """Oldest public section of ``template_type`` owned by the template account."""
        with self._session() as session:
            stmt = (
                select(ContentSection)
                .where(
                    ContentSection.type == template_type,
                    ContentSection.user_id == template_owner_id,
                    ContentSection.is_public.is_(True),
                )
                .order_by(ContentSection.created_at, ContentSection.id)
                .limit(1)
            )
            return session.execute(stmt).scalars().first()

    def list_template_types(self, template_owner_id: str) -> list[str]:
        with self._session() as session:
            stmt = (
                select(ContentSection.type)
                .where(ContentSection.user_id == template_owner_id, ContentSection.is_public.is_(True))
                .distinct()
                .order_by(ContentSection.type)
            )
            return list(session.execute(stmt).scalars().all())

    # -------------------------- experiences & skills --------------------------
    def _get(self, model, record_id: str):
        with self._session() as session:
            return session.get(model, record_id)

    def _list_for_user(self, model, user_id: str, order_by: Iterable) -> list:
        with self._session() as session:
            stmt = select(model).where(model.user_id == user_id).order_by(*order_by)
            return list(session.execute(stmt).scalars().all())

    def _create(self, model, user_id: str, values: dict):
        entity = model(user_id=user_id, **values)
        with self._session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def _update(self, model, record_id: str, values: dict):
        with self._session() as session:
            entity = session.get(model, record_id)
            if not entity:
                return None
            for key, value in values.items():
                setattr(entity, key, value)
            session.commit()
            session.refresh(entity)
            return entity

    def _delete(self, model, record_id: str) -> None:
        with self._session() as session:
            session.execute(delete(model).where(model.id == record_id))
            session.commit()

    def get_experience(self, experience_id: str) -> Optional[Experience]:
        return self._get(Experience, experience_id)

    def list_experiences(self, user_id: str) -> list[Experience]:
        return self._list_for_user(Experience, user_id, (Experience.start_date.desc(), Experience.id))

    def create_experience(self, user_id: str, values: dict) -> Experience:
        return self._create(Experience, user_id, values)

    def update_experience(self, experience_id: str, values: dict) -> Optional[Experience]:
        return self._update(Experience, experience_id, values)

    def delete_experience(self, experience_id: str) -> None:
        self._delete(Experience, experience_id)

    def get_skill(self, skill_id: str) -> Optional[Skill]:
        return self._get(Skill, skill_id)

    def list_skills(self, user_id: str) -> list[Skill]:
        return self._list_for_user(Skill, user_id, (Skill.category, Skill.name))

    def create_skill(self, user_id: str, values: dict) -> Skill:
        return self._create(Skill, user_id, values)

    def update_skill(self, skill_id: str, values: dict) -> Optional[Skill]:
        return self._update(Skill, skill_id, values)

    def delete_skill(self, skill_id: str) -> None:
        self._delete(Skill, skill_id)

    # -------------------------- sessions --------------------------
    def create_user_session(self, user_id: str, expires_at: datetime) -> str:
        token = new_token()
        with self._session() as session:
            session.add(UserSession(token=token, user_id=user_id, expires_at=expires_at))
            session.commit()
        return token

    def get_user_session(self, token: str) -> Optional[UserSession]:
        with self._session() as session:
            return session.get(UserSession, token)

    def delete_user_session(self, token: str) -> None:
        with self._session() as session:
            session.execute(delete(UserSession).where(UserSession.token == token))
            session.commit()
