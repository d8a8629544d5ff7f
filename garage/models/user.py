"""
Modele profil utilisateur / User profile model.
Un profil par identite externe (Google), cree a la premiere connexion.
One profile per external identity, created on first sign-in.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from garage.database import Base


class UserProfile(Base):
    """Profil de l'application / Application profile."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    external_id: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(150), nullable=False)
    display_name: Mapped[str] = mapped_column(String(150), nullable=False, default="")
    photo_url: Mapped[str | None] = mapped_column(String(500))
    # Bascule uniquement par scripts/verify_user.py / Flipped only by scripts/verify_user.py
    verified: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<UserProfile {self.email}>"
