"""Shaping of the loosely-typed services.features column."""
import json
import logging
from typing import Any, Union, List, Dict

logger = logging.getLogger(__name__)

FEATURES_FORMAT_ERROR = 'Features must be valid JSON, for example ["Feature 1", "Feature 2"].'

Features = Union[List[Any], Dict[str, Any]]


def parse_features(raw: Any) -> Features:
    """
    Parse features as entered in the admin edit form.
    Raises ValueError with a user-facing message when the text is not a JSON array or object.
    """
    if isinstance(raw, (list, dict)):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        raise ValueError(FEATURES_FORMAT_ERROR)
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        raise ValueError(FEATURES_FORMAT_ERROR)
    if not isinstance(parsed, (list, dict)):
        raise ValueError(FEATURES_FORMAT_ERROR)
    return parsed


def normalize_features(value: Any) -> Features:
    """Stored features for display. Unreadable values show as no features."""
    if value is None:
        return []
    try:
        return parse_features(value)
    except ValueError:
        logger.warning("Ignoring unreadable features value: %r", value)
        return []


def features_to_text(value: Any) -> str:
    """Text for the edit form's features textarea"""
    if isinstance(value, str):
        return value
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False)
    return "[]"
