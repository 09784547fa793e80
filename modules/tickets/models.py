from pydantic import Field, field_validator
from core.models.base import MongoModel
from typing import Optional, Literal
from datetime import datetime


TICKET_CATEGORIES = {
    "Event": ("🎉", "Create a ticket for event-related inquiries"),
    "Reward": ("🎁", "Questions about rewards and prizes"),
    "Code": ("🔑", "Issues with codes or redemption"),
    "Support": ("❓", "General support and assistance"),
}


class Ticket(MongoModel):
    user_id: int = Field(..., description="Discord ID of the ticket owner")
    guild_id: int = Field(..., description="Discord ID of the guild")
    channel_id: Optional[int] = Field(None, description="Discord Channel ID")
    status: Literal['open', 'closed'] = Field(default='open')
    category: str = Field(default="Support")

    closed_at: Optional[datetime] = None
    closed_by: Optional[int] = None

    @field_validator('category')
    def validate_category(cls, v):
        if v not in TICKET_CATEGORIES:
            raise ValueError('Invalid ticket category')
        return v
