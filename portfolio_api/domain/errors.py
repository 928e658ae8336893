"""Typed errors raised by the identity and content services.

Routers do not catch these one by one: the exception handler registered in
``portfolio_api.routers.errors`` turns any ``PortfolioError`` into a JSON
response using ``code`` and ``http_status``.
"""

from __future__ import annotations


class PortfolioError(Exception):
    """Base class for every business-level failure."""

    code = "portfolio_error"
    http_status = 400

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__

    def to_response(self) -> dict:
        return {"error": {"code": self.code, "message": self.message}}


class InvalidCredentialsError(PortfolioError):
    """Wrong password, unknown account or missing hash (indistinguishable)."""

    code = "invalid_credentials"
    http_status = 401


class MalformedCredentialError(PortfolioError):
    code = "malformed_credential"
    http_status = 400


class NotFoundError(PortfolioError):
    code = "not_found"
    http_status = 404


class OwnershipDeniedError(PortfolioError):
    """The targeted record is absent or belongs to someone else."""

    code = "ownership_denied"
    http_status = 403


class ConfigurationMissingError(PortfolioError):
    """The persistence handle was never initialised (bootstrap error)."""

    code = "configuration_missing"
    http_status = 500


class AllocationExhaustedError(PortfolioError):
    code = "allocation_exhausted"
    http_status = 409


class SlugUnavailableError(PortfolioError):
    code = "slug_unavailable"
    http_status = 409


class InvalidSlugError(PortfolioError):
    code = "invalid_slug"
    http_status = 400


class RegistrationError(PortfolioError):
    code = "registration_error"
    http_status = 400


class AccountExistsError(PortfolioError):
    code = "account_exists"
    http_status = 409


class InvalidContentError(PortfolioError):
    code = "invalid_content"
    http_status = 400
