from __future__ import annotations

import logging
from time import sleep
from typing import Any, Optional

from ..core.config import APISource
from .fetcher import CatalogFetcher, FetchError
from .models import Item, SourceResult, dedup_key

logger = logging.getLogger(__name__)


def has_next_page(cursor: Any) -> bool:
    return isinstance(cursor, str) and cursor.strip() != ""


def fetch_from_source(
    source: APISource,
    seen_ids: set[Any],
    fetcher: CatalogFetcher,
    *,
    page_delay_sec: float = 1.0,
) -> SourceResult:
    """Walk every page of ``source`` and collect items whose id is not in ``seen_ids``.

    ``seen_ids`` is updated in place so later sources writing to the same
    file skip what this one found. A page that still fails after the
    fetcher's retries ends the walk; items gathered so far are kept.
    """
    result = SourceResult()
    cursor: Optional[str] = None

    try:
        while True:
            result.pages += 1
            logger.info("%s - Page %d", source.name, result.pages)

            response = fetcher.fetch(source.base_url, cursor)
            payload = response if isinstance(response, dict) else {}

            records = payload.get("data")
            if isinstance(records, list):
                for record in records:
                    if not isinstance(record, dict):
                        continue
                    item_id = record.get("id")
                    if isinstance(item_id, (list, dict)):
                        logger.debug("skip record with unhashable id: %r", item_id)
                        continue
                    key = dedup_key(item_id)
                    if key in seen_ids:
                        result.duplicates += 1
                        continue
                    seen_ids.add(key)
                    result.items.append(Item.from_record(record))
                    result.new_items += 1

            cursor = payload.get("nextPageCursor")
            if page_delay_sec > 0:
                sleep(page_delay_sec)
            if not has_next_page(cursor):
                break
    except FetchError as exc:
        result.error = str(exc)
        logger.error("Error in %s: %s", source.name, exc)

    return result
