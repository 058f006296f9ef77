from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from ..core.io import read_json, write_json
from .models import ExistingData, build_document, dedup_key

logger = logging.getLogger(__name__)


def load_existing(path: Path) -> ExistingData:
    """Read a previously written snapshot.

    A missing file is an empty dataset. So is anything unreadable or not
    shaped like a snapshot; the run then starts fresh instead of failing.
    """
    if not path.exists():
        return ExistingData()

    try:
        document = read_json(path)
        if not isinstance(document, dict):
            raise ValueError("top-level value is not an object")
        items = document.get("data") or []
        if not isinstance(items, list):
            raise ValueError("'data' is not a list")
        ids = {dedup_key(item.get("id")) for item in items if isinstance(item, dict)}
    except (OSError, ValueError, TypeError) as exc:
        logger.warning("Error reading %s, starting fresh (%s)", path.name, exc)
        return ExistingData()

    return ExistingData(items=list(items), ids=ids)


def save_document(items: list[dict[str, Any]], path: Path) -> bool:
    """Overwrite ``path`` with a snapshot of ``items``.

    The write goes straight to the target file, so an interrupted write can
    leave it truncated; the next run then treats it as unreadable.
    """
    document = build_document(items)
    try:
        write_json(path, document)
    except (OSError, TypeError, ValueError) as exc:
        logger.error("Save error for %s: %s", path.name, exc)
        return False
    return True
