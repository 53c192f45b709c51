import pytest

from recommendations.age_segment import get_age_segment
from recommendations.intent import analyze_gift_intent, context_to_search_intent
from recommendations.models import GiftContext


def test_gaming_nephew_birthday(ruleset):
    context = analyze_gift_intent("gaming gift for nephew birthday", ruleset)

    assert context.recipient_relationship == "nephew"
    assert context.occasion == "birthday"
    assert context.interests == ["gaming"]
    assert context.age is None
    assert context.budget is None


def test_niece_reading_christmas_with_age(ruleset):
    context = analyze_gift_intent("13 year old niece who loves reading for christmas", ruleset)

    assert context.recipient_relationship == "niece"
    assert context.age == 13
    assert context.occasion == "christmas"
    assert context.interests == ["reading"]


def test_defaults_when_nothing_matches(ruleset):
    context = analyze_gift_intent("something nice", ruleset)

    assert context.recipient_relationship == "friend"
    assert context.occasion == "birthday"
    assert context.interests == []


# Keywords only match at the start of a word: "son" is not found in "person" or "grandson".
@pytest.mark.parametrize(
    "message, relationship",
    [
        ("a present for a person who likes music", "friend"),
        ("something for my grandson", "friend"),
        ("a gift for my girlfriend", "girlfriend"),
        ("a gift for my son", "son"),
    ],
)
def test_keywords_match_at_word_start(ruleset, message, relationship):
    context = analyze_gift_intent(message, ruleset)

    assert context.recipient_relationship == relationship


def test_interest_matches_at_word_start(ruleset):
    context = analyze_gift_intent("a present for a person who likes music", ruleset)

    assert context.interests == ["music"]


@pytest.mark.parametrize(
    "query, budget",
    [
        ("headphones under $50 for my brother", 50.0),
        ("makeup below 30", 30.0),
        ("a $25 gift for my sister", 25.0),
    ],
)
def test_budget_is_extracted(ruleset, query, budget):
    assert analyze_gift_intent(query, ruleset).budget == budget


def test_age_bucket_names_never_become_interests(ruleset):
    ruleset = {**ruleset, "interests_map": {**ruleset["interests_map"], "teen": ["teen"], "child": ["kid"]}}

    context = analyze_gift_intent("gift for a teen kid who loves art", ruleset)

    assert "teen" not in context.interests
    assert "child" not in context.interests
    assert "adult" not in context.interests
    assert context.interests == ["art"]


def test_context_to_search_intent_uses_interest_keywords(ruleset):
    context = GiftContext(interests=["gaming", "beauty"])

    intent = context_to_search_intent(context, ruleset)

    assert intent.category == "gaming"
    assert intent.keywords == ["gaming", "video games", "beauty", "makeup", "skincare"]


def test_context_without_interests_is_general(ruleset):
    intent = context_to_search_intent(GiftContext(), ruleset)

    assert intent.category == "general"
    assert intent.keywords == []


@pytest.mark.parametrize("age, segment", [(None, "adult"), (8, "child"), (13, "teen"), (40, "adult")])
def test_age_segment(ruleset, age, segment):
    assert get_age_segment(age, ruleset) == segment
