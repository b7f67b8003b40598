from typing import Literal, Optional

from pydantic import BaseModel


class ReviewCreated(BaseModel):
    event: Literal["review:created"] = "review:created"
    review_id: str
    restaurant_id: str
    author_id: str
    author_name: str
    rating: int
    title: Optional[str] = None
    content: str


class ReviewChanged(BaseModel):
    event: Literal["review:changed"] = "review:changed"
    review_id: str
    restaurant_id: str
    change: Literal["updated", "deleted", "hidden"]


class ReportSubmitted(BaseModel):
    event: Literal["report:submitted"] = "report:submitted"
    report_id: str
    reporter_id: str
    report_type: str
    target_id: str
    reason: str


class ModerationApplied(BaseModel):
    event: Literal["moderation:applied"] = "moderation:applied"
    action_id: str
    action: str
    target_id: str
    target_type: str
    hidden_content: bool = False
