from __future__ import annotations

import logging
import time
from typing import Any, Iterable

import requests

from ..core.config import APISource, Config
from .fetcher import CatalogFetcher
from .models import FileResult, RunReport
from .paginator import fetch_from_source
from .store import load_existing, save_document

LOGGER = logging.getLogger(__name__)


def group_by_output(sources: Iterable[APISource]) -> dict[str, list[APISource]]:
    groups: dict[str, list[APISource]] = {}
    for source in sources:
        groups.setdefault(source.output_file, []).append(source)
    return groups


def process_group(
    cfg: Config,
    output_file: str,
    sources: list[APISource],
    fetcher: CatalogFetcher,
) -> FileResult:
    LOGGER.info("Processing %s...", output_file)
    path = cfg.output_path(output_file)

    existing = load_existing(path)
    merged: list[dict[str, Any]] = list(existing.items)
    new_items = 0
    duplicates = 0

    for source in sources:
        result = fetch_from_source(
            source,
            existing.ids,
            fetcher,
            page_delay_sec=cfg.fetch.page_delay_sec,
        )
        merged.extend(item.to_record() for item in result.items)
        new_items += result.new_items
        duplicates += result.duplicates
        LOGGER.info(
            "%s - New: %d, Duplicates: %d",
            source.name,
            result.new_items,
            result.duplicates,
        )

    success = save_document(merged, path)
    LOGGER.info("%s - Total: %d, New: %d", output_file, len(merged), new_items)

    return FileResult(
        output_file=output_file,
        success=success,
        total_items=len(merged),
        new_items=new_items,
        duplicates=duplicates,
    )


def run(cfg: Config, fetcher: CatalogFetcher | None = None) -> RunReport:
    started = time.monotonic()
    LOGGER.info("Starting combined update...")

    owns_fetcher = fetcher is None
    if fetcher is None:
        fetcher = CatalogFetcher(requests.Session(), cfg.fetch)

    results: list[FileResult] = []
    try:
        for output_file, sources in group_by_output(cfg.sources).items():
            results.append(process_group(cfg, output_file, sources, fetcher))
    finally:
        if owns_fetcher:
            fetcher.close()

    duration = time.monotonic() - started
    LOGGER.info("All updates complete - Duration: %.2fs", duration)
    return RunReport(results=results, duration_sec=duration)


def report_summary(report: RunReport) -> bool:
    for result in report.results:
        if not result.success:
            LOGGER.error("Failed to save %s", result.output_file)
        else:
            LOGGER.info(
                "✓ %s: %d items (%d new)",
                result.output_file,
                result.total_items,
                result.new_items,
            )
    return report.all_success
