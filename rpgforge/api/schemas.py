from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AmountRequest(BaseModel):
    amount: int


class ItemChangeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    item_id: str = Field(alias="itemId", min_length=1)
    quantity: int = 1


class WarnRequest(BaseModel):
    reason: str = "Admin warn"


class QuestProgressRequest(BaseModel):
    amount: int = 1
