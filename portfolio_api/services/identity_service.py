"""
Identity resolution: map local logins and provider assertions to accounts.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from portfolio_api.core.security import hash_password, needs_rehash, verify_password
from portfolio_api.db.models import Account
from portfolio_api.domain.errors import (
    AccountExistsError,
    InvalidCredentialsError,
    RegistrationError,
)
from portfolio_api.domain.slugs import email_local_part
from portfolio_api.repositories.sql_repository import SQLRepository
from portfolio_api.schemas import (
    LOCAL_PROVIDER,
    PasswordCredential,
    ProviderAssertion,
    parse_credential,
)
from portfolio_api.services.allocator import IdentifierAllocator
from portfolio_api.services.config_service import ConfigurationService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
MIN_PASSWORD_LENGTH = 8
OAUTH_TYPE = "oauth"


class IdentityService:
    """Resolves credentials to exactly one account, creating or linking as needed."""

    def __init__(
        self,
        repository: SQLRepository,
        allocator: IdentifierAllocator,
        provisioner: ConfigurationService,
    ):
        self.repository = repository
        self.allocator = allocator
        self.provisioner = provisioner

    # -------------------------------------- helpers --------------------------------------
    def get_account(self, account_id: str) -> Optional[Account]:
        return self.repository.get_account(account_id)

    def _provision_defaults(self, account: Account) -> None:
        # Account creation must not fail because the default configuration could not be stored.
        try:
            self.provisioner.ensure(account.id)
        except SQLAlchemyError:
            logger.exception("Default configuration provisioning failed", extra={"account_id": account.id})

    def _create_account(
        self,
        *,
        seed: str,
        email: str,
        first_name: str,
        last_name: str,
        provider: str,
        provider_subject_id: str,
        credential_type: str,
        password_hash: str | None = None,
    ) -> Account:
        def insert(username: str) -> Account:
            return self.repository.create_account(
                username=username,
                email=email,
                first_name=first_name,
                last_name=last_name,
                provider=provider,
                provider_subject_id=provider_subject_id,
                credential_type=credential_type,
                password_hash=password_hash,
            )

        account = self.allocator.allocate_and_insert(seed, self.repository.handle_taken, insert)
        logger.info("Created account %s", account.username, extra={"account_id": account.id, "provider": provider})
        self._provision_defaults(account)
        return account

    # -------------------------------------- resolution --------------------------------------
    def resolve(self, credential: Any) -> Account:
        """Resolve a password credential or a provider assertion to one account.

        Raises MalformedCredentialError before any lookup when the payload is
        invalid, and InvalidCredentialsError for any failed password login.
        """
        parsed = parse_credential(credential)
        if isinstance(parsed, PasswordCredential):
            return self._resolve_password(parsed)
        return self._resolve_assertion(parsed)

    def resolve_credential_login(self, email: str, password: str) -> Optional[Account]:
        try:
            return self.resolve({"provider": LOCAL_PROVIDER, "email": email, "password": password})
        except InvalidCredentialsError:
            return None

    def resolve_oauth_login(
        self,
        provider: str,
        subject_id: str,
        email: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> Account:
        return self.resolve(
            {
                "provider": provider,
                "provider_subject_id": subject_id,
                "email": email,
                "first_name": first_name,
                "last_name": last_name,
            }
        )

    def _resolve_password(self, credential: PasswordCredential) -> Account:
        account = self.repository.get_account_by_email(credential.email)
        stored = None
        local = None
        if account:
            local = self.repository.get_provider_credential(account.id, LOCAL_PROVIDER)
            stored = local.password_hash if local else None
        # verify_password does the same amount of work when there is no hash to check.
        if not verify_password(credential.password, stored) or account is None or local is None:
            raise InvalidCredentialsError(INVALID_CREDENTIALS)
        if needs_rehash(stored):
            self.repository.update_credential_password(local.id, hash_password(credential.password))
        return account

    def _match_existing(self, assertion: ProviderAssertion) -> Optional[Account]:
        linked = self.repository.get_credential(assertion.provider, assertion.provider_subject_id)
        if linked:
            return self.repository.get_account(linked.user_id)
        account = self.repository.get_account_by_email(assertion.email)
        if not account:
            return None
        try:
            self.repository.create_credential(
                account.id,
                provider=assertion.provider,
                provider_subject_id=assertion.provider_subject_id,
                credential_type=OAUTH_TYPE,
            )
        except IntegrityError:
            # Someone linked the same subject concurrently; trust the stored row.
            linked = self.repository.get_credential(assertion.provider, assertion.provider_subject_id)
            if linked is None:
                raise
            return self.repository.get_account(linked.user_id)
        logger.info(
            "Linked provider to existing account",
            extra={"account_id": account.id, "provider": assertion.provider},
        )
        return account

    def _resolve_assertion(self, assertion: ProviderAssertion) -> Account:
        for attempt in (1, 2):
            existing = self._match_existing(assertion)
            if existing:
                return existing
            try:
                return self._create_account(
                    seed=email_local_part(assertion.email),
                    email=assertion.email,
                    first_name=(assertion.first_name or "").strip(),
                    last_name=(assertion.last_name or "").strip(),
                    provider=assertion.provider,
                    provider_subject_id=assertion.provider_subject_id,
                    credential_type=OAUTH_TYPE,
                )
            except IntegrityError:
                if attempt == 2:
                    raise
                logger.info(
                    "Concurrent account creation detected, resolving again",
                    extra={"provider": assertion.provider, "attempt": attempt},
                )
        raise AssertionError("unreachable")

    # -------------------------------------- registration --------------------------------------
    def register(
        self,
        email: str,
        password: str,
        first_name: str = "",
        last_name: str = "",
        username: str | None = None,
    ) -> Account:
        """Create an account with a local password credential."""
        raw_email = (email or "").strip().lower()
        local, _, domain = raw_email.partition("@")
        if not local or not domain:
            raise RegistrationError("A valid email is required")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise RegistrationError(f"Password too short. Use at least {MIN_PASSWORD_LENGTH} characters")
        if self.repository.get_account_by_email(raw_email):
            raise AccountExistsError("An account with this email already exists")
        try:
            return self._create_account(
                seed=(username or "").strip() or local,
                email=raw_email,
                first_name=(first_name or "").strip(),
                last_name=(last_name or "").strip(),
                provider=LOCAL_PROVIDER,
                provider_subject_id=raw_email,
                credential_type=LOCAL_PROVIDER,
                password_hash=hash_password(password),
            )
        except IntegrityError as exc:
            raise AccountExistsError("An account with this email already exists") from exc
