"""
Chatbot request / response schemas.
"""

from pydantic import Field

from hallbook.schemas.base import BaseSchema


class ChatbotRequest(BaseSchema):
    message: str = Field(..., min_length=1, max_length=2000)
    profile_id: str


class ChatbotResponse(BaseSchema):
    reply: str
