from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class ItemErrorOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    item_id: str
    message: str
    title: Optional[str] = None
