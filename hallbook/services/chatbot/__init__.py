"""
Chatbot: intent detection, entity resolution and message routing.
"""

from hallbook.services.chatbot.chatbot_service import ChatbotService
from hallbook.services.chatbot.entities import extract_entities, extract_time_window
from hallbook.services.chatbot.intent import detect_intent
from hallbook.services.chatbot.resolvers import EntityResolver, match_hall
from hallbook.services.chatbot.types import ChatContext, ChatReply, Intent

__all__ = [
    "ChatbotService",
    "ChatContext",
    "ChatReply",
    "EntityResolver",
    "Intent",
    "detect_intent",
    "extract_entities",
    "extract_time_window",
    "match_hall",
]
