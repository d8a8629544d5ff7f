"""
Utilitaires d'authentification / Authentication utilities.
Gestion des tokens JWT emis apres connexion via le fournisseur d'identite.
JWT management for tokens issued after signing in through the identity provider.
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from garage.config import settings


def create_access_token(profile_id: int) -> str:
    """Créer un access token JWT / Create a JWT access token."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": str(profile_id), "type": "access", "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_refresh_token(profile_id: int) -> str:
    """Créer un refresh token JWT / Create a JWT refresh token."""
    expire = datetime.now(timezone.utc) + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    payload = {"sub": str(profile_id), "type": "refresh", "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict | None:
    """Décoder un token JWT / Decode a JWT token. Returns None if invalid."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


def decode_subject(token: str, token_type: str) -> int | None:
    """Identifiant du profil si le token est valide et du bon type / Profile id of a valid token of that type."""
    payload = decode_token(token)
    if payload is None or payload.get("type") != token_type:
        return None
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        return None
