"""
Category catalog
Defines the top-level service categories shown on the home page, the category
listing routes and the admin content form. Also holds the sample services used
by the seed script.
"""

from typing import Dict, List, Optional, Any

CATEGORIES = {
    "ai": {
        "slug": "ai",
        "title": "AI",
        "description": "Generative AI, coding assistants, chatbots and other AI subscriptions",
        "subcategories": [
            {"value": "generative", "label": "Generative AI"},
            {"value": "coding", "label": "Coding assistant"},
            {"value": "chatbot", "label": "Chatbot"},
        ],
    },
    "productivity": {
        "slug": "productivity",
        "title": "Productivity",
        "description": "Education, data analysis and business tools that make work faster",
        "subcategories": [
            {"value": "education", "label": "Education"},
            {"value": "data-analysis", "label": "Data analysis"},
            {"value": "business", "label": "Business productivity"},
        ],
    },
    "media": {
        "slug": "media",
        "title": "Video & Audio",
        "description": "Streaming, audiobooks, music and other media subscriptions",
        "subcategories": [
            {"value": "streaming", "label": "Streaming"},
            {"value": "audiobook", "label": "Audiobooks"},
            {"value": "music", "label": "Music"},
        ],
    },
}

# Used by scripts/seed_services.py
SAMPLE_SERVICES = [
    {"title": "ChatGPT Plus", "category": "ai", "subcategory": "generative", "price": "$20/month", "website": "https://chat.openai.com"},
    {"title": "Claude Pro", "category": "ai", "subcategory": "generative", "price": "$20/month", "website": "https://claude.ai"},
    {"title": "GitHub Copilot", "category": "ai", "subcategory": "coding", "price": "$10/month", "website": "https://github.com/features/copilot"},
    {"title": "Intercom Fin", "category": "ai", "subcategory": "chatbot", "price": "$0.99/resolution", "website": "https://www.intercom.com/fin"},
    {"title": "Notion AI", "category": "productivity", "subcategory": "business", "price": "$10/month", "website": "https://www.notion.so/product/ai"},
    {"title": "Microsoft Copilot", "category": "productivity", "subcategory": "business", "price": "$30/month", "website": "https://copilot.microsoft.com"},
    {"title": "Fireflies.ai", "category": "productivity", "subcategory": "data-analysis", "price": "$10/month", "website": "https://fireflies.ai"},
    {"title": "Netflix", "category": "media", "subcategory": "streaming", "price": "$15.49/month", "website": "https://www.netflix.com"},
    {"title": "Disney+", "category": "media", "subcategory": "streaming", "price": "$7.99/month", "website": "https://www.disneyplus.com"},
    {"title": "Spotify", "category": "media", "subcategory": "music", "price": "$10.99/month", "website": "https://www.spotify.com"},
    {"title": "Audible", "category": "media", "subcategory": "audiobook", "price": "$14.95/month", "website": "https://www.audible.com"},
]


def list_categories() -> List[Dict[str, Any]]:
    return list(CATEGORIES.values())


def get_category(slug: Optional[str]) -> Optional[Dict[str, Any]]:
    """Return the category for a slug, or None for unknown/blank slugs."""
    if not slug:
        return None
    return CATEGORIES.get(slug.strip().lower())


def get_subcategory_options(category: Optional[str]) -> List[Dict[str, str]]:
    cat = get_category(category)
    return cat["subcategories"] if cat else []


def get_subcategory_label(category: str, subcategory: Optional[str]) -> str:
    for option in get_subcategory_options(category):
        if option["value"] == subcategory:
            return option["label"]
    return subcategory or ""
