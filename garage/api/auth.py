"""
Routes d'authentification / Authentication routes.
Connexion via fournisseur d'identité, refresh token, session courante.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from garage.config import settings
from garage.database import get_db
from garage.models.user import UserProfile
from garage.rate_limit import limiter
from garage.schemas.auth import RefreshRequest, SignInRequest, SignInResponse, TokenResponse
from garage.schemas.user import SessionRead, UserProfileRead
from garage.services.auth_gate import SessionContext, ensure_profile, is_allowed
from garage.services.identity import GoogleIdentityProvider, get_identity_provider
from garage.utils.auth import create_access_token, create_refresh_token, decode_subject
from garage.api.deps import get_session_context

router = APIRouter()


@router.post("/sign-in", response_model=SignInResponse)
@limiter.limit(settings.RATE_LIMIT_SIGN_IN)
async def sign_in(
    request: Request,
    data: SignInRequest,
    db: AsyncSession = Depends(get_db),
    provider: GoogleIdentityProvider = Depends(get_identity_provider),
):
    """Connexion, profil créé à la première visite / Sign in, profile created on first visit."""
    claims = await provider.sign_in(data.id_token)
    profile, created = await ensure_profile(db, claims)
    return SignInResponse(
        access_token=create_access_token(profile.id),
        refresh_token=create_refresh_token(profile.id),
        profile=UserProfileRead.model_validate(profile),
        created=created,
        allowed=is_allowed(profile),
    )


@router.post("/refresh", response_model=TokenResponse)
async def refresh(data: RefreshRequest, db: AsyncSession = Depends(get_db)):
    """Rafraîchir les tokens / Refresh tokens."""
    profile_id = decode_subject(data.refresh_token, "refresh")
    if profile_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")

    profile = await db.get(UserProfile, profile_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Profile not found")

    return TokenResponse(
        access_token=create_access_token(profile.id),
        refresh_token=create_refresh_token(profile.id),
    )


@router.get("/me", response_model=SessionRead)
async def me(session: SessionContext = Depends(get_session_context)):
    """Session courante, même non vérifiée / Current session, even when unverified."""
    return SessionRead(profile=UserProfileRead.model_validate(session.profile), allowed=session.allowed)
