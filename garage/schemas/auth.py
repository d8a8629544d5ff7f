"""
Schémas d'authentification / Authentication schemas.
Connexion via fournisseur d'identité, tokens, refresh.
"""

from pydantic import BaseModel, Field

from garage.schemas.user import UserProfileRead


class SignInRequest(BaseModel):
    """Jeton d'identité du fournisseur / Identity provider token."""
    id_token: str = Field(min_length=1, max_length=4096)


class TokenResponse(BaseModel):
    """Réponse avec tokens / Token response."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class SignInResponse(TokenResponse):
    profile: UserProfileRead
    created: bool
    allowed: bool


class RefreshRequest(BaseModel):
    """Requête de rafraîchissement / Refresh request."""
    refresh_token: str
