from app.services.recommendation import get_recommendation_pipeline


def test_search_products_returns_scored_candidates(client):
    response = client.get("/api/search/products", params={"query": "makeup for my niece"})

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 5
    assert data[0]["title"] == "e.l.f. Pure Skin Super Serum Starter Kit"
    assert {"id", "relevanceScore", "matchReason", "aiRanked", "affiliateLink", "imageUrl"} <= set(data[0])
    assert all(25 <= item["relevanceScore"] <= 100 for item in data)


def test_search_products_requires_query(client):
    response = client.get("/api/search/products")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "bad_request"


def test_search_products_rejects_blank_query(client):
    response = client.get("/api/search/products", params={"query": "   "})

    assert response.status_code == 400


def test_amazon_search_returns_raw_catalog_hits(client):
    response = client.get("/api/affiliate/amazon/search", params={"query": "makeup"})

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 5
    assert data[0]["title"] == "e.l.f. Pure Skin Super Serum Starter Kit"
    assert "relevanceScore" not in data[0]


def test_amazon_search_with_interests(client):
    response = client.get("/api/affiliate/amazon/search", params={"query": "present", "interests": "outdoors, coffee"})

    assert response.status_code == 200
    assert len(response.json()) == 4


def test_unexpected_error_returns_500_with_details(app, client):
    class BrokenPipeline:
        async def search_products(self, query):
            raise RuntimeError("catalog exploded")

    app.dependency_overrides[get_recommendation_pipeline] = lambda: BrokenPipeline()

    response = client.get("/api/search/products", params={"query": "coffee"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"]["code"] == "internal_error"
    assert body["error"]["fields"]["details"] == "catalog exploded"
