# amee_layer/schemas.py
import enum
from typing import Optional

from pydantic import BaseModel


class ProfileItem(BaseModel):
    uid: str
    name: Optional[str] = None
    total_amount: float = 0.0


class DeleteOutcome(str, enum.Enum):
    DELETED = "deleted"
    # local row removed, AMEE did not confirm the delete
    REMOTE_UNCONFIRMED = "remote_unconfirmed"


class DeleteResult(BaseModel):
    outcome: DeleteOutcome
    profile_item_path: Optional[str] = None
    error: Optional[str] = None

    @property
    def confirmed(self) -> bool:
        return self.outcome == DeleteOutcome.DELETED


class UnitOut(BaseModel):
    key: str
    name: str
    amee_api_unit: str


class CacheRefreshOut(BaseModel):
    model: str
    updated: int
