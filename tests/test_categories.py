"""
Tests for the category catalog and its API
"""

from subbill.config.categories import (
    get_category, get_subcategory_options, get_subcategory_label, list_categories
)
from tests.conftest import make_service


class TestCategoryLookup:

    def test_three_categories(self):
        assert [c["slug"] for c in list_categories()] == ["ai", "productivity", "media"]

    def test_lookup_is_case_insensitive(self):
        assert get_category("MEDIA")["slug"] == "media"

    def test_unknown_and_blank(self):
        assert get_category("unknown") is None
        assert get_category("") is None
        assert get_category(None) is None

    def test_subcategory_options(self):
        values = [o["value"] for o in get_subcategory_options("ai")]
        assert values == ["generative", "coding", "chatbot"]
        assert get_subcategory_options("unknown") == []

    def test_subcategory_label(self):
        assert get_subcategory_label("media", "music") == "Music"


class TestCategoryRoutes:

    def test_list_categories(self, client):
        response = client.get("/api/v1/categories")
        assert response.status_code == 200
        assert len(response.json()) == 3

    def test_category_with_services(self, client, fake_supabase):
        fake_supabase.set_table("services", [make_service()])
        response = client.get("/api/v1/categories/media?subcategory=streaming")
        assert response.status_code == 200
        data = response.json()
        assert data["selected_subcategory"] == "streaming"
        assert data["services"][0]["slug"] == "netflix"
        assert ("services", ("subcategory", "streaming")) in fake_supabase.calls_to("eq")

    def test_unknown_category(self, client):
        response = client.get("/api/v1/categories/unknown")
        assert response.status_code == 404
        assert response.json()["detail"] == "Category not found"
