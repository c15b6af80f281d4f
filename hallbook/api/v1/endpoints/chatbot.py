"""
Chatbot endpoint.
"""

from fastapi import APIRouter, Depends

from hallbook.api import deps
from hallbook.schemas.chatbot import ChatbotRequest, ChatbotResponse
from hallbook.services.chatbot.chatbot_service import ChatbotService

router = APIRouter(prefix="/chatbot")


@router.post("", response_model=ChatbotResponse)
def chat(payload: ChatbotRequest, service: ChatbotService = Depends(deps.get_chatbot_service)):
    """Answer a free-text message; unknown profiles simply have no roles."""
    ctx = service.context_for(payload.profile_id, payload.message)
    return service.route_chatbot_message(ctx).to_dict()
