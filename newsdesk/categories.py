"""Fixed category catalogue used by articles and category browsing."""

CATEGORIES: list[dict[str, str]] = [
    {"id": "politics", "name": "Politics", "emoji": "🏛️"},
    {"id": "world", "name": "World", "emoji": "🌐"},
    {"id": "national", "name": "National", "emoji": "🇮🇳"},
    {"id": "business", "name": "Business", "emoji": "💼"},
    {"id": "finance", "name": "Finance", "emoji": "📈"},
    {"id": "education", "name": "Education", "emoji": "🧠"},
    {"id": "technology", "name": "Technology", "emoji": "💻"},
    {"id": "science", "name": "Science", "emoji": "🔬"},
    {"id": "health", "name": "Health", "emoji": "🚑"},
    {"id": "entertainment", "name": "Entertainment", "emoji": "🎭"},
    {"id": "gaming", "name": "Gaming", "emoji": "🕹️"},
    {"id": "art", "name": "Art", "emoji": "🎨"},
    {"id": "law", "name": "Law", "emoji": "⚖️"},
    {"id": "lifestyle", "name": "Lifestyle", "emoji": "🧘"},
    {"id": "food", "name": "Food", "emoji": "👨‍🍳"},
    {"id": "travel", "name": "Travel", "emoji": "✈️"},
    {"id": "books", "name": "Books", "emoji": "📚"},
    {"id": "children", "name": "Children", "emoji": "🧒"},
    {"id": "real-estate", "name": "Real Estate", "emoji": "🏠"},
    {"id": "environment", "name": "Environment", "emoji": "🔋"},
    {"id": "opinion", "name": "Opinion", "emoji": "🎯"},
    {"id": "elections", "name": "Elections", "emoji": "🗳️"},
    {"id": "local", "name": "Local", "emoji": "🧵"},
    {"id": "interviews", "name": "Interviews", "emoji": "🎙️"},
    {"id": "explainers", "name": "Explainers", "emoji": "💡"},
    {"id": "events", "name": "Events", "emoji": "📅"},
]

CATEGORY_NAMES: frozenset[str] = frozenset(c["name"] for c in CATEGORIES)

_NAME_BY_ID: dict[str, str] = {c["id"]: c["name"] for c in CATEGORIES}


def category_name(category_id: str) -> str | None:
    """Map a URL id such as ``real-estate`` to its stored name (``Real Estate``)."""
    return _NAME_BY_ID.get(category_id.strip().lower())
