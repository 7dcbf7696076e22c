from __future__ import annotations

from typing import Any, Mapping

# filter key -> (record field, exact match)
COMMENT_FILTER_FIELDS: dict[str, tuple[str, bool]] = {
    "post_id": ("postId", True),
    "id": ("id", True),
    "name": ("name", False),
    "email": ("email", False),
    "body": ("body", False),
}

POST_FILTER_FIELDS: dict[str, tuple[str, bool]] = {
    "post_title": ("post_title", False),
    "post_body": ("post_body", False),
}

RECOGNIZED_FILTER_KEYS = frozenset(COMMENT_FILTER_FIELDS) | frozenset(POST_FILTER_FIELDS)


def _exact_form(value: Any) -> str:
    """Canonical text for exact matching: 1, 1.0, "1" and " 1.0" all read as "1"."""
    if isinstance(value, bool):
        return str(value)
    text = str(value).strip()
    try:
        number = float(text)
    except ValueError:
        return text
    if number.is_integer():
        return str(int(number))
    return text


def evaluate_field(
    filters: Mapping[str, Any], key: str, value: Any, exact: bool = False
) -> tuple[bool, bool]:
    """Evaluate one filter key against a record value.

    Returns (evaluated, passed). A key missing from `filters`, or set to None,
    is not evaluated.
    """
    term = filters.get(key)
    if term is None:
        return False, False

    if exact:
        return True, _exact_form(value) == _exact_form(term)

    return True, str(term).lower() in str(value).lower()


def matches(record: Mapping[str, Any], filters: Mapping[str, Any]) -> bool:
    """Check a comment-shaped (has postId) or post-shaped record against filters."""

    if not filters:
        return True

    fields = COMMENT_FILTER_FIELDS if "postId" in record else POST_FILTER_FIELDS
    for key, (field_name, exact) in fields.items():
        evaluated, passed = evaluate_field(filters, key, record.get(field_name, ""), exact)
        if evaluated and not passed:
            return False
    return True
