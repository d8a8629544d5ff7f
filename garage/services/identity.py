"""
Fournisseur d'identite / Identity provider.

Valide un jeton d'identite Google et renvoie l'identite externe.
Validates a Google ID token and returns the external identity.
"""

import logging
from dataclasses import dataclass

import httpx

from garage.config import settings
from garage.errors import IdentityError

log = logging.getLogger(__name__)


@dataclass
class IdentityClaims:
    external_id: str
    email: str
    display_name: str
    photo_url: str | None = None


class GoogleIdentityProvider:
    """Verification via l'endpoint tokeninfo / Verification through the tokeninfo endpoint."""

    def __init__(
        self,
        client_id: str | None = None,
        tokeninfo_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.client_id = client_id if client_id is not None else settings.GOOGLE_CLIENT_ID
        self.tokeninfo_url = tokeninfo_url or settings.GOOGLE_TOKENINFO_URL
        self.transport = transport

    async def sign_in(self, id_token: str) -> IdentityClaims:
        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.get(
                    self.tokeninfo_url,
                    params={"id_token": id_token},
                    timeout=settings.IDENTITY_TIMEOUT_SECONDS,
                )
        except httpx.HTTPError as exc:
            log.warning("Identity provider unreachable: %s", exc)
            raise IdentityError("Identity provider unavailable") from exc

        if response.status_code != 200:
            raise IdentityError("Invalid identity token")

        claims = response.json()
        if self.client_id and claims.get("aud") != self.client_id:
            log.warning("Identity token issued for another audience: %s", claims.get("aud"))
            raise IdentityError("Invalid identity token")
        if not claims.get("sub"):
            raise IdentityError("Invalid identity token")

        return IdentityClaims(
            external_id=claims["sub"],
            email=claims.get("email", ""),
            display_name=claims.get("name", ""),
            photo_url=claims.get("picture"),
        )


def get_identity_provider() -> GoogleIdentityProvider:
    """Dependance FastAPI / FastAPI dependency."""
    return GoogleIdentityProvider()
