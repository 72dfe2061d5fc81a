import asyncio
import json

import pytest

import services.openai_service as openai_service
from services.openai_service import OpenAIService

VALID_REPLY = {
    "days": [
        {"day": 1, "activities": [
            {"title": "Shrine visit", "description": "Early walk", "location": "Meiji Jingu",
             "estimatedCost": 0, "timeOfDay": "Morning"},
        ]},
        {"day": 2, "activities": []},
    ]
}


def test_parse_valid_reply():
    suggestions = OpenAIService.parse_itinerary_response(json.dumps(VALID_REPLY))

    assert [s.day for s in suggestions] == [1, 2]
    shrine = suggestions[0].activities[0]
    assert shrine.title == "Shrine visit"
    assert shrine.time_of_day == "Morning"
    assert shrine.estimated_cost == 0


@pytest.mark.parametrize("reply", [
    "not json",
    json.dumps([1, 2, 3]),
    json.dumps({"itinerary": []}),
    json.dumps({"days": [{"activities": []}]}),
    json.dumps({"days": [{"day": 1, "activities": [{"description": "no title"}]}]}),
    json.dumps({"days": [{"day": "first", "activities": []}]}),
])
def test_parse_rejects_malformed_reply(reply):
    with pytest.raises(ValueError):
        OpenAIService.parse_itinerary_response(reply)


def test_prompt_mentions_trip_details():
    prompt = OpenAIService.build_prompt("Japan", 3, "Food, History")

    assert "3-day" in prompt
    assert "Japan" in prompt
    assert "Food, History" in prompt


def test_prompt_default_interests():
    assert "General sightseeing" in OpenAIService.build_prompt("Japan", 3, "")


def test_generate_without_api_key_returns_nothing(monkeypatch):
    monkeypatch.setattr(openai_service, "OPENAI_API_KEY", "")

    assert asyncio.run(OpenAIService.generate_itinerary("Japan", 3, "Food")) == []


def test_no_client_is_built_without_api_key(monkeypatch):
    monkeypatch.setattr(openai_service, "_client", None)
    monkeypatch.setattr(openai_service, "OPENAI_API_KEY", "")

    assert asyncio.run(OpenAIService.generate_itinerary("Japan", 3, "Food")) == []
    assert openai_service._client is None


def test_client_is_created_once(monkeypatch):
    monkeypatch.setattr(openai_service, "_client", None)
    monkeypatch.setattr(openai_service, "OPENAI_API_KEY", "sk-test")

    first = openai_service.get_client()

    assert openai_service.get_client() is first
