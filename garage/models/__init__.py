"""
Modeles SQLAlchemy / SQLAlchemy models.
Importer tous les modeles ici pour que create_all les detecte.
Import all models here so create_all can detect them.
"""

from garage.models.motor import Motor, MotorStatus, PayerTag
from garage.models.restore_cost import RestoreCost
from garage.models.inventory import InventoryItem
from garage.models.user import UserProfile

__all__ = [
    "Motor",
    "MotorStatus",
    "PayerTag",
    "RestoreCost",
    "InventoryItem",
    "UserProfile",
]
