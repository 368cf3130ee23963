"""Service facades grouping the OpenRouter endpoints."""

from .auth import AuthService
from .chat import ChatRequestBuilder, ChatService
from .credits import CreditsService
from .generation import GenerationService
from .keys import KeysService
from .models import ModelsService

__all__ = [
    "AuthService",
    "ChatRequestBuilder",
    "ChatService",
    "CreditsService",
    "GenerationService",
    "KeysService",
    "ModelsService",
]
