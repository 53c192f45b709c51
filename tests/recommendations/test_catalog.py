import pytest

from integrations.affiliates import (
    AffiliateConfig,
    affiliate_url_for_hint,
    amazon_product_url,
    amazon_search_url,
    expedia_url,
    opentable_url,
)
from integrations.amazon.catalog import load_catalog
from integrations.amazon.models import parse_price
from integrations.amazon.search import search_real_amazon_products


def test_makeup_query_returns_makeup_shelf_in_order(catalog):
    products = search_real_amazon_products("makeup", [], catalog=catalog)

    assert len(products) == 5
    assert products[0].title == "e.l.f. Pure Skin Super Serum Starter Kit"
    assert [p.id for p in products] == [p.id for p in catalog.lookup_by_tag("makeup")]


def test_results_are_unique_and_capped(catalog):
    products = search_real_amazon_products(
        "makeup book coffee gift",
        ["beauty", "reading", "coffee", "board games", "outdoors", "jewelry"],
        catalog=catalog,
    )

    ids = [p.id for p in products]
    assert len(ids) <= 5
    assert len(ids) == len(set(ids))


def test_interest_triggers_without_query_match(catalog):
    products = catalog.search("something for my friend", ["outdoors"])

    assert [p.id for p in products] == [p.id for p in catalog.lookup_by_tag("outdoors")]


def test_unknown_query_returns_nothing(catalog):
    assert catalog.search("quantum physics", []) == []


def test_entries_carry_affiliate_links(catalog, affiliate):
    entry = catalog.lookup_by_tag("coffee")[0]

    assert entry.id == "B08KEURIG123"
    assert entry.affiliate_link == amazon_product_url("B08KEURIG123", affiliate)
    assert "tag=test-20" in entry.affiliate_link
    assert entry.source == "Amazon"


def test_entries_serialize_with_camel_case(catalog):
    data = catalog.lookup_by_tag("gift")[0].model_dump(by_alias=True)

    assert {"imageUrl", "reviewCount", "isPrimeEligible", "affiliateLink"} <= set(data)


def test_load_catalog_missing_file(tmp_path):
    with pytest.raises(ValueError):
        load_catalog(tmp_path / "missing.yaml")


def test_load_catalog_rejects_missing_categories(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text("version: v1\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_catalog(path)


@pytest.mark.parametrize("raw, value", [("$24.99", 24.99), ("$1,299.00", 1299.0), ("N/A", None), ("", None)])
def test_parse_price(raw, value):
    assert parse_price(raw) == value


def test_affiliate_urls():
    config = AffiliateConfig()

    assert amazon_product_url("B000TEST", config) == (
        "https://www.amazon.com/dp/B000TEST?tag=ocassia-20&linkCode=as2&camp=1789&creative=9325"
    )
    assert amazon_search_url("coffee mug", config) == "https://www.amazon.com/s?k=coffee+mug&tag=ocassia-20"
    assert opentable_url("Chez Nous", config) == "https://www.opentable.com/s/?term=Chez+Nous&ref=ocassia"
    assert expedia_url("Paris", config) == "https://www.expedia.com/Hotel-Search?destination=Paris&SEMCID=ocassia"


@pytest.mark.parametrize(
    "hint, prefix",
    [
        ("OpenTable", "https://www.opentable.com/"),
        ("Expedia", "https://www.expedia.com/"),
        ("Amazon/Target", "https://www.amazon.com/s?"),
        (None, "https://www.amazon.com/s?"),
    ],
)
def test_affiliate_url_for_hint(hint, prefix):
    assert affiliate_url_for_hint(hint, "dinner", AffiliateConfig()).startswith(prefix)


def test_search_defaults_to_bundled_catalog():
    products = search_real_amazon_products("coffee")

    assert [p.id for p in products] == ["B08KEURIG123", "B07STARBUCKS"]
    assert "tag=ocassia-20" in products[0].affiliate_link
