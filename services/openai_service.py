import json
import logging
from typing import List, Optional

from openai import AsyncOpenAI
from pydantic import ValidationError

from config import OPENAI_API_KEY, OPENAI_MODEL
from models.suggestions import DaySuggestion

logger = logging.getLogger(__name__)

_client: Optional[AsyncOpenAI] = None


def get_client() -> AsyncOpenAI:
    """Shared client, created on first use so the app starts without a key."""
    global _client
    if _client is None:
        _client = AsyncOpenAI(api_key=OPENAI_API_KEY)
    return _client


class OpenAIService:
    SYSTEM_INSTRUCTIONS = """You are a travel planning API that MUST return responses in this exact JSON format. Your response must be valid JSON only - no other text or content is allowed.

Required format:
{
  "days": [
    {
      "day": "number, 1-based day of the trip (required)",
      "activities": [
        {
          "title": "string (required)",
          "description": "string (1-2 sentences, required)",
          "location": "string (required)",
          "estimatedCost": "number (required, NEVER use currency symbols, just the numeric value)",
          "timeOfDay": "one of Morning, Afternoon, Evening (required)"
        }
      ]
    }
  ]
}

STRICT REQUIREMENTS:
1. Response MUST be valid JSON and ONLY JSON
2. Include exactly one entry in "days" for EACH day of the trip, numbered from 1
3. Include 2 to 4 activities per day
4. ALL fields marked (required) MUST be present and non-empty
5. estimatedCost must be a numeric value with no currency symbols, 0 for free activities
6. NEVER include additional fields, explanatory text or comments
7. NEVER use null values
"""

    @staticmethod
    def build_prompt(destination: str, day_count: int, interests: str) -> str:
        return (
            f"Create a {day_count}-day travel itinerary for {destination}.\n"
            f"Interests: {interests or 'General sightseeing, food, and culture'}.\n"
        )

    @staticmethod
    def validate_response_structure(data: dict) -> bool:
        """Check the reply has a list of days, each with a list of activities."""
        days = data.get("days") if isinstance(data, dict) else None
        if not isinstance(days, list):
            return False
        for day in days:
            if not isinstance(day, dict) or "day" not in day:
                return False
            if not isinstance(day.get("activities"), list):
                return False
            for activity in day["activities"]:
                if not isinstance(activity, dict) or not activity.get("title"):
                    return False
        return True

    @staticmethod
    def parse_itinerary_response(response_text: str) -> List[DaySuggestion]:
        """Parse the JSON reply into day suggestions; raises ValueError when malformed."""
        try:
            data = json.loads(response_text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Reply is not valid JSON: {e}") from e

        if not OpenAIService.validate_response_structure(data):
            raise ValueError("Reply does not match the itinerary format")

        try:
            return [DaySuggestion.model_validate(day) for day in data["days"]]
        except ValidationError as e:
            raise ValueError(f"Reply has invalid fields: {e}") from e

    @staticmethod
    async def generate_itinerary(destination: str, day_count: int, interests: str) -> List[DaySuggestion]:
        """Ask the model for day-by-day activity suggestions."""
        if not OPENAI_API_KEY:
            logger.warning("No OpenAI API key configured, returning no suggestions")
            return []

        response = await get_client().chat.completions.create(
            model=OPENAI_MODEL,
            messages=[
                {"role": "system", "content": OpenAIService.SYSTEM_INSTRUCTIONS},
                {"role": "user", "content": OpenAIService.build_prompt(destination, day_count, interests)},
            ],
            temperature=0.7,
            response_format={"type": "json_object"},
        )

        if not response.choices or not response.choices[0].message.content:
            raise ValueError("No response generated from OpenAI")

        return OpenAIService.parse_itinerary_response(response.choices[0].message.content)
