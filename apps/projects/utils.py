"""
Helpers for normalizing project input and keeping slugs unique.
"""
import math
import re
import time
from typing import Any

from sqlalchemy.orm import Session

from apps.projects.models import Project, PROJECT_STATUSES

SLUG_SEPARATORS = re.compile(r"[^a-z0-9]+")
LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def slugify(title: str) -> str:
    """Lowercase, collapse non-alphanumeric runs to '-', strip edge hyphens."""
    return SLUG_SEPARATORS.sub("-", title.lower()).strip("-")


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def parse_order(value: Any) -> int:
    """
    Coerce a sort key to a non-negative integer.

    Accepts ints, floats (truncated) and strings with a leading integer
    ("12", " 7px"). Anything else, and negative values, become 0.
    """
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if not math.isfinite(value):
            return 0
        number = int(value)
    else:
        match = LEADING_INT.match(str(value))
        if not match:
            return 0
        number = int(match.group(1))
    return max(number, 0)


def normalize_status(value: Any) -> str:
    if isinstance(value, str) and value in PROJECT_STATUSES:
        return value
    return "DRAFT"


def clean_text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def optional_text(value: Any):
    text = clean_text(value)
    return text or None


def string_list(value: Any, strip: bool = False) -> list[str]:
    if not isinstance(value, list):
        return []
    items = [str(item) for item in value if item is not None]
    if strip:
        items = [item.strip() for item in items]
    return items


def slug_taken(db: Session, slug: str, exclude_id: str = None) -> bool:
    query = db.query(Project.id).filter(Project.slug == slug)
    if exclude_id:
        query = query.filter(Project.id != exclude_id)
    return query.first() is not None


def unique_slug(db: Session, base: str) -> str:
    """
    Return ``base`` if free, else ``base-<base36 milliseconds>``.

    The millisecond stamp is bumped until the candidate is free, so two
    projects created in the same millisecond still get distinct slugs.
    """
    if not slug_taken(db, base):
        return base

    stamp = int(time.time() * 1000)
    while True:
        candidate = f"{base}-{to_base36(stamp)}"
        if not slug_taken(db, candidate):
            return candidate
        stamp += 1


def removed_images(project: Project, thumbnail: str, images: list[str]) -> list[str]:
    """
    Image URLs the project references now but will not after the update.

    A URL that only moves between thumbnail and gallery is still referenced
    and is not returned.
    """
    kept = {thumbnail, *images}
    return [url for url in project.image_urls() if url not in kept]
