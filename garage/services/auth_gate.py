"""
Portail d'acces / Access gate.

Creation idempotente du profil a la premiere connexion, et decision d'acces :
seul un profil existant et verifie passe.
Idempotent profile creation on first sign-in, and the access decision: only an
existing, verified profile gets through.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from garage.errors import NotFoundError
from garage.models.user import UserProfile
from garage.services.identity import IdentityClaims

log = logging.getLogger(__name__)


async def get_profile(db: AsyncSession, external_id: str) -> UserProfile | None:
    result = await db.execute(select(UserProfile).where(UserProfile.external_id == external_id))
    return result.scalar_one_or_none()


async def ensure_profile(db: AsyncSession, claims: IdentityClaims) -> tuple[UserProfile, bool]:
    """Creer le profil s'il n'existe pas ; ne jamais ecraser un profil existant.

    Create the profile if missing; never overwrite an existing one.
    Returns (profile, created).
    """
    profile = await get_profile(db, claims.external_id)
    if profile is not None:
        return profile, False

    profile = UserProfile(
        external_id=claims.external_id,
        email=claims.email,
        display_name=claims.display_name,
        photo_url=claims.photo_url,
        verified=False,
    )
    try:
        async with db.begin_nested():
            db.add(profile)
    except IntegrityError:
        # Creation concurrente : l'autre requete a gagne / Concurrent sign-in won the insert
        profile = await get_profile(db, claims.external_id)
        return profile, False

    await db.refresh(profile)
    log.info("Profile %s created for %s (pending verification)", profile.id, profile.email)
    return profile, True


def is_allowed(profile: UserProfile | None) -> bool:
    """Acces seulement si le profil existe et est verifie / Access only for a verified profile."""
    return profile is not None and bool(profile.verified)


@dataclass
class SessionContext:
    """Session courante, construite par requete et passee explicitement.

    Current session, built per request and passed explicitly to whoever needs it.
    """
    profile: UserProfile

    @property
    def allowed(self) -> bool:
        return is_allowed(self.profile)

    @property
    def profile_id(self) -> int:
        return self.profile.id


async def verify_profile(db: AsyncSession, identifier: str, verified: bool = True) -> UserProfile:
    """Action d'administration hors bande / Out-of-band administrative action.

    identifier = external_id ou email. Utilise par scripts/verify_user.py uniquement.
    """
    result = await db.execute(
        select(UserProfile).where(
            or_(UserProfile.external_id == identifier, UserProfile.email == identifier)
        )
    )
    profile = result.scalars().first()
    if profile is None:
        raise NotFoundError(f"No profile for {identifier}")
    profile.verified = verified
    await db.flush()
    await db.refresh(profile)
    log.info("Profile %s verified=%s", profile.id, verified)
    return profile
