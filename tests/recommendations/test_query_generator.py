from recommendations.models import GiftContext
from recommendations.query_generator import build_smart_search_queries


def test_gaming_nephew_queries_use_interest_keywords(ruleset):
    context = GiftContext(recipient_relationship="nephew", occasion="birthday", interests=["gaming"])

    queries = build_smart_search_queries(context, ruleset)

    assert queries == [
        "gaming gift for nephew",
        "gaming birthday gift",
        "video games gift for nephew",
        "video games birthday gift",
    ]


def test_no_interests_falls_back_to_occasion_queries(ruleset):
    context = GiftContext(recipient_relationship="mother", occasion="anniversary")

    queries = build_smart_search_queries(context, ruleset)

    assert 1 <= len(queries) <= 2
    assert queries == ["anniversary gift for mother", "mother anniversary gift ideas"]


def test_queries_are_capped_at_five(ruleset):
    context = GiftContext(interests=["gaming", "beauty", "tech"], budget=50)

    queries = build_smart_search_queries(context, ruleset)

    assert len(queries) == 5
    assert queries[2] == "gaming under 50"


def test_duplicate_queries_are_dropped_in_order():
    ruleset = {
        "limits": {"max_queries_total": 5, "keywords_per_interest": 2},
        "interests_map": {"books": ["Books", "books"]},
    }
    context = GiftContext(recipient_relationship="friend", occasion="birthday", interests=["books"])

    queries = build_smart_search_queries(context, ruleset)

    assert queries == ["books gift for friend", "books birthday gift"]
    assert len(queries) == len(set(queries))


def test_custom_limit_is_respected(ruleset):
    ruleset = {**ruleset, "limits": {"max_queries_total": 2, "keywords_per_interest": 2}}
    context = GiftContext(interests=["reading"])

    assert len(build_smart_search_queries(context, ruleset)) == 2
