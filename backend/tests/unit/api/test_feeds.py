"""
Feeds API Tests

Test Naming Convention (BDD):
- test_<behavior>_<expected_result>
"""
from podbridge.models import FeedSubscription

FEED_URL = "https://example.com/feed.xml"


class TestImportFeeds:
    """Test POST /api/v1/feeds/import"""

    def test_import_success(self, client, user_headers, api_fetcher, my_show_feed, test_session):
        """Given: A reachable feed
        When: POST /feeds/import
        Then: 200 with a success result, and the subscription belongs to the caller
        """
        api_fetcher.feeds[FEED_URL] = my_show_feed

        response = client.post("/api/v1/feeds/import", json={"urls": [FEED_URL]}, headers=user_headers)

        assert response.status_code == 200
        results = response.json()["results"]
        assert results == [{
            "url": FEED_URL,
            "status": "success",
            "title": "My Show",
            "message": None,
            "new_post_count": 2,
        }]
        assert test_session.query(FeedSubscription).one().user_id == "alice"

    def test_mixed_outcomes(self, client, user_headers, api_fetcher, my_show_feed):
        api_fetcher.feeds[FEED_URL] = my_show_feed

        response = client.post(
            "/api/v1/feeds/import",
            json={"urls": [FEED_URL, "https://missing.example.com/feed", FEED_URL]},
            headers=user_headers,
        )

        assert [r["status"] for r in response.json()["results"]] == ["success", "failed", "skipped"]

    def test_missing_identity_401(self, client):
        response = client.post("/api/v1/feeds/import", json={"urls": [FEED_URL]})

        assert response.status_code == 401

    def test_blank_urls_422(self, client, user_headers):
        response = client.post("/api/v1/feeds/import", json={"urls": ["", "  "]}, headers=user_headers)

        assert response.status_code == 422


class TestImportOpml:
    """Test POST /api/v1/feeds/import-opml"""

    def test_import_opml(self, client, user_headers, api_fetcher, my_show_feed):
        api_fetcher.feeds[FEED_URL] = my_show_feed
        opml = f'<opml version="2.0"><body><outline type="rss" text="Mine" xmlUrl="{FEED_URL}"/></body></opml>'

        response = client.post("/api/v1/feeds/import-opml", json={"opml": opml}, headers=user_headers)

        assert response.status_code == 200
        assert response.json()["results"][0]["status"] == "success"

    def test_malformed_opml_400(self, client, user_headers):
        response = client.post("/api/v1/feeds/import-opml", json={"opml": "<opml>"}, headers=user_headers)

        assert response.status_code == 400

    def test_opml_without_feeds_400(self, client, user_headers):
        response = client.post("/api/v1/feeds/import-opml", json={"opml": "<opml><body/></opml>"}, headers=user_headers)

        assert response.status_code == 400


class TestSubscriptions:
    """Test GET /api/v1/feeds and DELETE /api/v1/feeds/{id}"""

    def test_list_own_feeds(self, client, user_headers, make_subscription):
        make_subscription(FEED_URL, user_id="alice")
        make_subscription("https://other.example.com/feed", user_id="bob")

        response = client.get("/api/v1/feeds", headers=user_headers)

        assert response.status_code == 200
        assert [f["feed_url"] for f in response.json()] == [FEED_URL]

    def test_delete_own_feed(self, client, user_headers, make_subscription, test_session):
        subscription = make_subscription(FEED_URL, user_id="alice")

        response = client.delete(f"/api/v1/feeds/{subscription.id}", headers=user_headers)

        assert response.status_code == 204
        assert test_session.query(FeedSubscription).count() == 0

    def test_delete_other_users_feed_404(self, client, user_headers, make_subscription):
        subscription = make_subscription(FEED_URL, user_id="bob")

        response = client.delete(f"/api/v1/feeds/{subscription.id}", headers=user_headers)

        assert response.status_code == 404
