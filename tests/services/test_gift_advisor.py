import json
from unittest.mock import AsyncMock

import pytest

from app.services.gift_advisor import GiftAdvisor
from app.services.llm.interface import LLMResponse, LLMUnavailable
from recommendations.models import GiftRequest, GiftSuggestion


@pytest.fixture
def mock_llm_client():
    return AsyncMock()


@pytest.fixture
def advisor(mock_llm_client, catalog, affiliate, ruleset):
    return GiftAdvisor(mock_llm_client, catalog, affiliate, ruleset, model="test-model")


def _suggestions_json(count=3):
    return json.dumps(
        {
            "suggestions": [
                {
                    "title": f"Idea {i}",
                    "description": "Thoughtful",
                    "category": "Hobbies",
                    "estimatedPrice": "$20-40",
                    "reasoning": "Fits the interests",
                    "searchTerm": "coffee grinder" if i == 0 else f"idea {i}",
                    "affiliateHint": "Amazon",
                }
                for i in range(count)
            ]
        }
    )


@pytest.mark.asyncio
async def test_ai_suggestions_are_parsed(advisor, mock_llm_client):
    mock_llm_client.generate_text.return_value = LLMResponse(content=_suggestions_json(4), model="test-model")
    request = GiftRequest(recipient="Mom", occasion="birthday", interests=["coffee"], age=52, budget=50)

    suggestions = await advisor.generate_smart_gift_suggestions(request)

    assert [s.title for s in suggestions] == ["Idea 0", "Idea 1", "Idea 2"]
    assert all(s.id.startswith("ai_gift_") for s in suggestions)
    assert suggestions[0].estimated_price == "$20-40"

    kwargs = mock_llm_client.generate_text.call_args.kwargs
    assert kwargs["json_mode"] is True
    assert kwargs["temperature"] == 0.7
    prompt = kwargs["messages"][0].content
    assert "Mom" in prompt
    assert "52 years old (adult)" in prompt
    assert "Under $50" in prompt


@pytest.mark.asyncio
async def test_rejected_llm_falls_back_to_three_catalog_gifts(advisor, mock_llm_client, catalog):
    mock_llm_client.generate_text.side_effect = LLMUnavailable("HTTP 401")
    request = GiftRequest(recipient="Alex", occasion="birthday", interests=["coffee"])

    suggestions = await advisor.generate_smart_gift_suggestions(request)

    allowed_titles = {e.title for e in catalog.lookup_by_tag("coffee") + catalog.lookup_by_tag("gift")}
    assert len(suggestions) == 3
    assert {s.title for s in suggestions} <= allowed_titles
    assert all(s.id.startswith("fallback_") for s in suggestions)
    assert all(s.affiliate_url and "/dp/" in s.affiliate_url for s in suggestions)


@pytest.mark.asyncio
async def test_malformed_json_falls_back(advisor, mock_llm_client):
    mock_llm_client.generate_text.return_value = LLMResponse(content="Sorry, I cannot help with that.")

    suggestions = await advisor.generate_smart_gift_suggestions(
        GiftRequest(recipient="Kim", occasion="wedding", interests=[])
    )

    assert len(suggestions) == 3
    assert all(s.id.startswith("fallback_") for s in suggestions)


@pytest.mark.asyncio
async def test_wrong_shape_falls_back(advisor, mock_llm_client):
    mock_llm_client.generate_text.return_value = LLMResponse(content='{"suggestions": [{"price": 10}]}')

    suggestions = await advisor.generate_smart_gift_suggestions(
        GiftRequest(recipient="Kim", occasion="wedding", interests=["art"])
    )

    assert len(suggestions) == 3
    assert all(s.id.startswith("fallback_") for s in suggestions)


@pytest.mark.asyncio
async def test_missing_client_uses_fallback(catalog, affiliate, ruleset):
    advisor = GiftAdvisor(None, catalog, affiliate, ruleset)

    suggestions = await advisor.recommend(GiftRequest(recipient="Jo", occasion="christmas", interests=["reading"]))

    assert len(suggestions) == 3
    assert suggestions[0].source == "Amazon"


def test_enrich_uses_catalog_match(advisor, catalog):
    suggestion = GiftSuggestion(id="s1", title="Grinder", search_term="coffee grinder")

    enriched = advisor.enrich(suggestion)

    keurig = catalog.lookup_by_tag("coffee")[0]
    assert enriched.price == keurig.price
    assert enriched.image_url == keurig.image_url
    assert enriched.affiliate_url == keurig.affiliate_link


def test_enrich_without_catalog_match_builds_partner_link(advisor):
    suggestion = GiftSuggestion(
        id="s2",
        title="Dinner for two",
        search_term="Le Bernardin",
        affiliate_hint="OpenTable",
        estimated_price="$150",
    )

    enriched = advisor.enrich(suggestion)

    assert enriched.affiliate_url == "https://www.opentable.com/s/?term=Le+Bernardin&ref=otp"
    assert enriched.price == "$150"
    assert enriched.source == "OpenTable"
