#!/usr/bin/env python3
"""Rewrite rows that still use legacy column spellings in the configured backend."""

import asyncio

from rich.console import Console
from rich.table import Table

from visitation.config import get_settings
from visitation.services.migration import normalize_legacy_columns
from visitation.services.registry import build_services
from visitation.utils.logging import setup_logging


async def run() -> dict[str, int]:
    """Normalize every table and return rewritten row counts."""
    settings = get_settings()
    services = build_services(settings)
    try:
        return await normalize_legacy_columns(services.client, services.tables, settings.write_revision)
    finally:
        await services.client.aclose()


def main():
    """Main entry point for the migration script."""
    setup_logging()
    counts = asyncio.run(run())

    table = Table(title="Rows normalized")
    table.add_column("Table")
    table.add_column("Rows", justify="right")
    for name, count in counts.items():
        table.add_row(name, str(count))
    Console().print(table)


if __name__ == "__main__":
    main()
