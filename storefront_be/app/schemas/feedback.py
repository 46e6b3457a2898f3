from datetime import datetime
from pydantic import BaseModel
from typing import Optional


class FeedbackIn(BaseModel):
    # All optional so missing fields surface as a 400 with a readable message
    productId: Optional[str] = None
    feedback: Optional[str] = None
    rate: Optional[int] = None


class FeedbackUser(BaseModel):
    id: str
    name: str


class FeedbackOut(BaseModel):
    id: str
    productId: str
    userId: FeedbackUser
    feedback: str
    rate: int
    createdAt: datetime
