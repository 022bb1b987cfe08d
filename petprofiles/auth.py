"""
auth.py: API key authentication.

Credential checks are pluggable: anything implementing CredentialValidator
can be returned from get_credential_validator() without touching the routes.
The shipped variant is a single shared secret compared against one header.

Usage on a router:
    router = APIRouter(dependencies=[Depends(require_api_key)])
"""
import logging
import secrets
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional, Protocol

from fastapi import Depends, HTTPException, Request, status

from petprofiles.config import Settings, settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """Identity attached to an authenticated request."""

    name: str
    role: str


# Every caller holding the shared secret is the same principal.
API_USER = Principal(name="API User", role="ApiUser")


class CredentialValidator(Protocol):
    def authenticate(self, headers: Mapping[str, str]) -> Optional[Principal]:
        """Return the caller's principal, or None to reject the request."""
        ...


class SharedSecretValidator:
    """Accepts requests whose header exactly equals the configured secret."""

    def __init__(self, secret: str, header_name: str = "X-API-Key") -> None:
        self.secret = secret
        self.header_name = header_name

    @classmethod
    def from_settings(cls, config: Settings) -> "SharedSecretValidator":
        return cls(secret=config.api_key, header_name=config.api_key_header)

    def authenticate(self, headers: Mapping[str, str]) -> Optional[Principal]:
        presented = headers.get(self.header_name)
        if presented is None:
            logger.warning("API key header %s not found", self.header_name)
            return None
        if not presented or not self.secret:
            logger.warning("Invalid API key")
            return None
        if not secrets.compare_digest(presented.encode(), self.secret.encode()):
            logger.warning("Invalid API key")
            return None
        return API_USER


def get_credential_validator() -> CredentialValidator:
    """FastAPI dependency; override in tests or to swap the strategy."""
    return SharedSecretValidator.from_settings(settings)


async def require_api_key(
    request: Request,
    validator: CredentialValidator = Depends(get_credential_validator),
) -> Principal:
    """
    Router-level guard. Rejects with 401 before any handler runs.
    The response never says whether the header was missing or wrong.
    """
    principal = validator.authenticate(request.headers)
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )
    request.state.principal = principal
    return principal
