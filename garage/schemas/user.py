"""Schémas profil utilisateur / User profile schemas."""

from datetime import datetime

from pydantic import BaseModel


class UserProfileRead(BaseModel):
    id: int
    external_id: str
    email: str
    display_name: str
    photo_url: str | None = None
    verified: bool
    created_at: datetime
    updated_at: datetime
    model_config = {"from_attributes": True}


class SessionRead(BaseModel):
    """Profil + decision d'acces (vue 'en attente' si refuse) / Profile + gate decision."""
    profile: UserProfileRead
    allowed: bool
