"""
Tests for the catalog service and the services API
"""

import pytest
from unittest.mock import patch
from fastapi import HTTPException
from subbill.config import settings
from subbill.modules.services.schemas import ServiceResponse, ServiceUpdate, ServiceCreate
from subbill.modules.services.service import CatalogService, slugify, clean_filename, filter_services
from tests.conftest import make_service, USER, ADMIN


@pytest.fixture
def catalog(fake_supabase, popular_cache):
    return CatalogService(fake_supabase, popular_cache)


class TestHelpers:

    def test_slugify(self):
        assert slugify("ChatGPT Plus") == "chatgpt-plus"
        assert slugify("Disney+") == "disney"

    def test_slugify_fallback_for_symbols_only(self):
        assert slugify("+++").startswith("service-")

    def test_clean_filename(self):
        assert clean_filename("my photo (1).png") == "my_photo__1_.png"

    def test_filter_services_matches_title_category_and_subcategory(self):
        services = [
            ServiceResponse(**make_service(id="1", title="Netflix", category="media", subcategory="streaming")),
            ServiceResponse(**make_service(id="2", title="Claude Pro", category="ai", subcategory="generative")),
        ]
        assert [s.id for s in filter_services(services, "NETFLIX")] == ["1"]
        assert [s.id for s in filter_services(services, "ai")] == ["2"]
        assert [s.id for s in filter_services(services, "stream")] == ["1"]
        assert len(filter_services(services, "  ")) == 2


class TestPopularAndSearch:

    def test_popular_uses_rpc_and_writes_cache(self, catalog, fake_supabase, popular_cache):
        fake_supabase.rpc_results["get_popular_services"] = [make_service()]
        popular = catalog.get_popular_services(5)
        assert popular.from_cache is False
        assert [s.slug for s in popular.services] == ["netflix"]
        assert fake_supabase.rpc_calls == [("get_popular_services", {"limit_count": 5})]
        assert popular_cache.load()[0]["slug"] == "netflix"

    def test_popular_falls_back_to_cache(self, catalog, fake_supabase, popular_cache):
        popular_cache.save([make_service(slug="cached")])
        fake_supabase.rpc_errors["get_popular_services"] = Exception("network down")
        popular = catalog.get_popular_services()
        assert popular.from_cache is True
        assert [s.slug for s in popular.services] == ["cached"]

    def test_popular_failure_without_cache(self, catalog, fake_supabase):
        fake_supabase.rpc_errors["get_popular_services"] = Exception("network down")
        popular = catalog.get_popular_services()
        assert popular.from_cache is True
        assert popular.services == []

    def test_search_without_matches(self, catalog, fake_supabase):
        fake_supabase.rpc_results["get_popular_services"] = [make_service()]
        result = catalog.search_services("spotify")
        assert result.empty is True
        assert result.results == []
        assert result.message == 'No services match "spotify".'

    def test_search_with_matches(self, catalog, fake_supabase):
        fake_supabase.rpc_results["get_popular_services"] = [make_service()]
        result = catalog.search_services("net")
        assert result.empty is False
        assert result.message is None


class TestLookups:

    def test_get_service_by_slug_missing(self, catalog, fake_supabase):
        fake_supabase.set_table("services", [])
        assert catalog.get_service_by_slug("nope") is None

    def test_get_service_by_slug_error_is_missing(self, catalog, fake_supabase):
        fake_supabase.table_errors["services"] = Exception("boom")
        assert catalog.get_service_by_slug("netflix") is None

    def test_get_service_by_id_not_found(self, catalog, fake_supabase):
        fake_supabase.set_table("services", None)
        with pytest.raises(HTTPException) as exc_info:
            catalog.get_service_by_id("missing")
        assert exc_info.value.status_code == 404

    def test_related_falls_back_to_category(self, catalog, fake_supabase):
        fake_supabase.set_table("services", [], [make_service(id="svc-2", slug="disney", subcategory="music")])
        service = ServiceResponse(**make_service())
        related = catalog.get_related_services(service)
        assert [s.id for s in related] == ["svc-2"]
        assert len(fake_supabase.queries) == 2

    def test_related_errors_give_empty_list(self, catalog, fake_supabase):
        fake_supabase.table_errors["services"] = Exception("boom")
        assert catalog.get_related_services(ServiceResponse(**make_service())) == []


class TestCountersAndReactions:

    def test_increment_views(self, catalog, fake_supabase):
        assert catalog.increment_service_views("svc-1") is True
        assert fake_supabase.rpc_calls == [("increment_service_views", {"service_id": "svc-1"})]

    def test_increment_views_failure(self, catalog, fake_supabase):
        fake_supabase.rpc_errors["increment_service_views"] = Exception("boom")
        assert catalog.increment_service_views("svc-1") is False

    def test_user_rating_from_list(self, catalog, fake_supabase):
        fake_supabase.rpc_results["get_user_rating"] = [{"liked": True, "disliked": False, "rating": 4.0, "is_logged_in": True}]
        rating = catalog.get_user_rating("svc-1")
        assert rating.liked is True
        assert rating.rating == 4.0

    def test_user_rating_failure_is_anonymous(self, catalog, fake_supabase):
        fake_supabase.rpc_errors["get_user_rating"] = Exception("boom")
        assert catalog.get_user_rating("svc-1").is_logged_in is False

    def test_like_sends_value(self, catalog, fake_supabase):
        fake_supabase.rpc_results["toggle_service_like"] = True
        assert catalog.like_service("svc-1", False) is True
        assert fake_supabase.rpc_calls == [("toggle_service_like", {"service_id": "svc-1", "like_value": False})]

    def test_like_login_required(self, catalog, fake_supabase):
        fake_supabase.rpc_errors["toggle_service_like"] = Exception("Login required")
        assert catalog.like_service("svc-1") is False

    @pytest.mark.parametrize("rating", [0, 0.4, 5.5, -1])
    def test_rating_out_of_range_makes_no_call(self, catalog, fake_supabase, rating):
        assert catalog.rate_service("svc-1", rating) is False
        assert fake_supabase.rpc_calls == []

    def test_rating_in_range(self, catalog, fake_supabase):
        fake_supabase.rpc_results["rate_service"] = True
        assert catalog.rate_service("svc-1", 0.5) is True
        assert fake_supabase.rpc_calls == [("rate_service", {"service_id": "svc-1", "rating_value": 0.5})]


class TestAdminWrites:

    def test_edit_with_malformed_features_makes_no_call(self, catalog, fake_supabase):
        with pytest.raises(HTTPException) as exc_info:
            catalog.edit_service("svc-1", ServiceUpdate(title="New", features="not json"))
        assert exc_info.value.status_code == 400
        assert fake_supabase.queries == []
        assert fake_supabase.rpc_calls == []
        fake_supabase.storage.from_.assert_not_called()

    def test_edit_parses_features_text(self, catalog, fake_supabase):
        fake_supabase.set_table("services", [make_service(title="New")])
        updated = catalog.edit_service("svc-1", ServiceUpdate(title="New", features='["A", "B"]'))
        assert updated.title == "New"
        ((table, (updates,)),) = fake_supabase.calls_to("update")
        assert table == "services"
        assert updates["features"] == ["A", "B"]
        assert updates["title"] == "New"
        assert "updated_at" in updates

    def test_update_missing_service(self, catalog, fake_supabase):
        fake_supabase.set_table("services", [])
        with pytest.raises(HTTPException) as exc_info:
            catalog.toggle_service_active("missing", False)
        assert exc_info.value.status_code == 404

    def test_create_service_builds_slug_and_trims_features(self, catalog, fake_supabase):
        fake_supabase.set_table("services", [make_service(id="new", title="Claude Pro", slug="claude-pro")])
        catalog.create_service(ServiceCreate(title="Claude Pro", category="ai", features=[" Projects ", ""]))
        ((_, (row,)),) = fake_supabase.calls_to("insert")
        assert row["slug"] == "claude-pro"
        assert row["features"] == ["Projects"]

    def test_create_duplicate_slug(self, catalog, fake_supabase):
        fake_supabase.table_errors["services"] = Exception("duplicate key value violates unique constraint")
        with pytest.raises(HTTPException) as exc_info:
            catalog.create_service(ServiceCreate(title="Netflix", category="media"))
        assert exc_info.value.status_code == 400

    def test_upload_image_to_supabase_storage(self, catalog, fake_supabase):
        bucket = fake_supabase.storage.from_.return_value
        bucket.get_public_url.return_value = "https://cdn.example.com/thumbnails/x.png"
        url = catalog.upload_image(b"png", "my photo.png", "image/png", folder="thumbnails")
        assert url == "https://cdn.example.com/thumbnails/x.png"
        fake_supabase.storage.from_.assert_called_with("service-images")
        path, content = bucket.upload.call_args.args[:2]
        assert path.startswith("thumbnails/")
        assert path.endswith("_my_photo.png")
        assert content == b"png"

    def test_upload_image_to_s3_when_configured(self, fake_supabase, popular_cache):
        with patch.object(settings, "aws_access_key_id", "key"), \
                patch.object(settings, "aws_secret_access_key", "secret"), \
                patch.object(settings, "s3_bucket_name", "subbill-images"), \
                patch.object(settings, "aws_region", "us-east-1"), \
                patch("subbill.modules.services.s3_storage.boto3") as mock_boto3:
            catalog = CatalogService(fake_supabase, popular_cache)
            url = catalog.upload_image(b"png", "logo.png", "image/png", folder="images")
        assert url.startswith("https://subbill-images.s3.us-east-1.amazonaws.com/images/")
        assert url.endswith("_logo.png")
        put_kwargs = mock_boto3.client.return_value.put_object.call_args.kwargs
        assert put_kwargs["ContentType"] == "image/png"
        fake_supabase.storage.from_.assert_not_called()

    def test_upload_image_rejects_unknown_folder(self, catalog):
        with pytest.raises(HTTPException) as exc_info:
            catalog.upload_image(b"png", "a.png", folder="avatars")
        assert exc_info.value.status_code == 400

    def test_upload_image_invalid_url(self, catalog, fake_supabase):
        fake_supabase.storage.from_.return_value.get_public_url.return_value = ""
        with pytest.raises(HTTPException) as exc_info:
            catalog.upload_image(b"png", "a.png")
        assert exc_info.value.status_code == 500


class TestServiceRoutes:

    def test_search_endpoint(self, client, fake_supabase):
        fake_supabase.rpc_results["get_popular_services"] = [make_service()]
        response = client.get("/api/v1/services/search?q=zzz")
        assert response.status_code == 200
        assert response.json()["empty"] is True

    def test_inactive_service_hidden_from_users(self, client, fake_supabase, login_as):
        fake_supabase.set_table("services", [make_service(is_active=False)])
        login_as(USER)
        assert client.get("/api/v1/services/slug/netflix").status_code == 404

    def test_inactive_service_visible_to_admins(self, client, fake_supabase, login_as):
        fake_supabase.set_table("services", [make_service(is_active=False)])
        login_as(ADMIN)
        response = client.get("/api/v1/services/slug/netflix")
        assert response.status_code == 200
        assert response.json()["is_active"] is False

    def test_like_requires_login(self, client, fake_supabase):
        response = client.post("/api/v1/services/svc-1/like")
        assert response.status_code == 401
        assert fake_supabase.rpc_calls == []

    def test_like_replaces_dislike(self, client, fake_supabase, login_as):
        login_as(USER)
        fake_supabase.set_table("services", make_service(likes=3, dislikes=2))
        fake_supabase.rpc_results["get_user_rating"] = {"liked": False, "disliked": True, "is_logged_in": True}
        fake_supabase.rpc_results["toggle_service_like"] = True
        response = client.post("/api/v1/services/svc-1/like")
        assert response.status_code == 200
        assert response.json() == {"liked": True, "disliked": False, "likes": 4, "dislikes": 1, "rating": None}
        assert ("toggle_service_like", {"service_id": "svc-1", "like_value": True}) in fake_supabase.rpc_calls

    def test_like_failure_keeps_state(self, client, fake_supabase, login_as):
        login_as(USER)
        fake_supabase.set_table("services", make_service())
        fake_supabase.rpc_errors["toggle_service_like"] = Exception("boom")
        response = client.post("/api/v1/services/svc-1/like")
        assert response.status_code == 400
        assert response.json()["detail"] == "Something went wrong. Please try again."

    def test_rate_out_of_range(self, client, fake_supabase, login_as):
        login_as(USER)
        response = client.post("/api/v1/services/svc-1/rate", json={"rating": 6})
        assert response.status_code == 400
        assert fake_supabase.rpc_calls == []

    def test_edit_requires_admin(self, client, login_as):
        login_as(USER)
        response = client.put("/api/v1/services/svc-1", json={"title": "x"})
        assert response.status_code == 403

    def test_upload_rejects_non_images(self, client, login_as):
        login_as(ADMIN)
        response = client.post(
            "/api/v1/services/images",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 400
