"""
Dépendances d'authentification et d'autorisation / Authentication and authorization dependencies.
Injectées dans les routes via Depends().
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from garage.database import get_db
from garage.models.user import UserProfile
from garage.services.auth_gate import SessionContext
from garage.services.ledger import LedgerService
from garage.utils.auth import decode_subject

security = HTTPBearer()


async def get_session_context(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> SessionContext:
    """Extraire le profil depuis le JWT / Extract the profile from the JWT.

    Les profils non vérifiés passent ici : la vue 'en attente' en a besoin.
    Unverified profiles pass here: the pending-verification view needs them.
    """
    profile_id = decode_subject(credentials.credentials, "access")
    if profile_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")

    profile = await db.get(UserProfile, profile_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Profile not found")

    return SessionContext(profile=profile)


async def require_verified(session: SessionContext = Depends(get_session_context)) -> SessionContext:
    """Bloquer les profils non vérifiés / Block unverified profiles."""
    if not session.allowed:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account pending verification")
    return session


def get_ledger(db: AsyncSession = Depends(get_db)) -> LedgerService:
    return LedgerService(db)
