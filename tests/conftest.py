from pathlib import Path

import pytest

from integrations.affiliates import AffiliateConfig
from integrations.amazon.catalog import load_catalog
from recommendations.query_rules_loader import load_ruleset

ROOT = Path(__file__).resolve().parents[1]
RULESET_PATH = ROOT / "config" / "gift_rules.yaml"
CATALOG_PATH = ROOT / "config" / "amazon_catalog.yaml"


@pytest.fixture
def ruleset():
    return load_ruleset(RULESET_PATH)


@pytest.fixture
def affiliate():
    return AffiliateConfig(amazon_associate_id="test-20", opentable_partner_id="otp", expedia_partner_id="exp")


@pytest.fixture
def catalog(affiliate):
    return load_catalog(CATALOG_PATH, affiliate)
