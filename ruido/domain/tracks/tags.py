"""Tag normalization, license vocabulary and idempotent tag upserts."""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional

from ruido.database.db_manager import LICENSES, Tag, db

logger = logging.getLogger(__name__)

LICENSE_LABELS = {
    "cc_by": "CC-BY",
    "cc_by_sa": "CC-BY-SA",
    "cc0": "CC0",
    "custom": "Custom",
}

_INVALID_TAG_CHARS = re.compile(r"[^a-z0-9\-_]")


def normalize_tag(raw: Optional[str]) -> str:
    """``" Kick "`` -> ``"kick"``; anything outside ``[a-z0-9-_]`` becomes ``-``."""
    if raw is None:
        return ""
    return _INVALID_TAG_CHARS.sub("-", raw.strip().lower())


def normalize_tags(values: Iterable[str]) -> List[str]:
    unique: List[str] = []
    for raw in values:
        normalized = normalize_tag(raw)
        if normalized and normalized not in unique:
            unique.append(normalized)
    return unique


def is_license_allowed(value: Optional[str]) -> bool:
    return value in LICENSES


def upsert_tags(names: Iterable[str], session=None) -> List[Tag]:
    """Return a Tag per normalized name, creating the missing ones.

    A concurrent writer creating the same name surfaces as ``IntegrityError``
    on flush; callers roll back and retry, at which point the tag is found.
    """
    session = session if session is not None else db.session
    wanted = normalize_tags(names)
    if not wanted:
        return []

    existing = {tag.name: tag for tag in session.query(Tag).filter(Tag.name.in_(wanted)).all()}
    missing = [name for name in wanted if name not in existing]
    for name in missing:
        tag = Tag(name=name)
        session.add(tag)
        existing[name] = tag
    if missing:
        session.flush()
        logger.debug("Created tags: %s", ", ".join(missing))
    return [existing[name] for name in wanted]


__all__ = [
    "LICENSES",
    "LICENSE_LABELS",
    "normalize_tag",
    "normalize_tags",
    "is_license_allowed",
    "upsert_tags",
]
