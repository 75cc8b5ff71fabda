# backend/ai_service.py
from openai import AsyncOpenAI
from typing import Optional, Any
import logging

from errors import ValidationError, ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

BASE_PROMPT = """You are a helpful assistant for Worksy, a platform that connects customers with tradesmen, contractors, and handymen.
Help users find the right services for their needs. Be friendly, professional, and provide helpful suggestions."""

CONTEXT_PROMPTS = {
    "service_search": " Focus on helping users describe their home improvement or repair needs and suggest appropriate service categories.",
    "booking_help": " Help users with booking questions, scheduling, and service-related inquiries.",
}

SUGGEST_PROMPT = """You are a service recommendation assistant for Worksy. Based on the user's description of their problem or need, suggest the most appropriate service categories and provide helpful guidance.

Available service categories:
- Plumbing (pipes, leaks, toilets, sinks, water heaters)
- Electrical (wiring, outlets, lighting, electrical repairs)
- HVAC (heating, cooling, ventilation, air conditioning)
- Carpentry (woodwork, furniture, repairs, installations)
- Painting (interior, exterior, touch-ups, color consultation)
- Flooring (installation, repair, cleaning, refinishing)
- Roofing (repairs, installation, maintenance, gutters)
- Landscaping (lawn care, gardening, tree services, outdoor maintenance)
- Cleaning (house cleaning, deep cleaning, move-in/out cleaning)
- General Handyman (small repairs, assembly, maintenance tasks)

Provide suggestions in this format:
1. Primary service category
2. Secondary categories (if applicable)
3. Brief explanation of why these services are needed
4. Any additional tips or considerations"""

CHAT_FALLBACK = "Sorry, I could not process your request."
SUGGEST_FALLBACK = "Unable to provide suggestions at this time."


class AIService:
    """
    Stateless wrapper around the OpenAI chat completions API.
    Every call sends only the system prompt and the current user message.
    """

    def __init__(self, api_key: Optional[str] = None, model: str = "gpt-4o-mini", client: Any = None):
        self.model = model
        if client is not None:
            self.client = client
        elif api_key:
            self.client = AsyncOpenAI(api_key=api_key)
        else:
            logger.warning("OpenAI API key not found. Assistant endpoints will return a configuration error.")
            self.client = None

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def system_prompt(self, context: str = "general") -> str:
        return BASE_PROMPT + CONTEXT_PROMPTS.get(context, "")

    def check_request(self, text: Optional[str], missing_message: str):
        """Raise before any external call if the text is empty or no key is set"""
        if not text or not text.strip():
            raise ValidationError(missing_message)
        if not self.client:
            raise ConfigurationError("OpenAI API key not configured")

    async def chat(self, message: Optional[str], context: str = "general") -> str:
        """
        Answer a single user message.

        Args:
            message: The user's message
            context: general, service_search or booking_help

        Returns:
            The model's reply, or a fixed fallback when the reply is empty
        """
        self.check_request(message, "Message is required")

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self.system_prompt(context)},
                    {"role": "user", "content": message}
                ],
                max_tokens=500,
                temperature=0.7
            )
            return self._first_choice(response) or CHAT_FALLBACK
        except Exception as e:
            logger.error(f"Error with AI chat: {e}")
            raise UpstreamError("Failed to process AI request") from e

    async def suggest_services(self, description: Optional[str], location: str = "") -> str:
        """
        Suggest service categories for a free-text description of a problem
        """
        self.check_request(description, "Description is required")

        user_content = f'User\'s description: "{description}"'
        if location:
            user_content += f"\nLocation: {location}"

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SUGGEST_PROMPT},
                    {"role": "user", "content": user_content}
                ],
                max_tokens=400,
                temperature=0.7
            )
            return self._first_choice(response) or SUGGEST_FALLBACK
        except Exception as e:
            logger.error(f"Error with AI suggestions: {e}")
            raise UpstreamError("Failed to generate suggestions") from e

    @staticmethod
    def _first_choice(response) -> Optional[str]:
        if not response.choices:
            return None
        return response.choices[0].message.content
