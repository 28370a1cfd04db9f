"""One-shot rewrite of rows still using legacy column spellings."""

from collections.abc import Mapping

from visitation.clients.persistence import PersistenceClient
from visitation.mapping.columns import EntityKind, SchemaRevision, legacy_columns
from visitation.utils.logging import get_logger

logger = get_logger(__name__)


async def normalize_legacy_columns(
    client: PersistenceClient,
    tables: Mapping[EntityKind, str],
    revision: SchemaRevision = SchemaRevision.CURRENT,
) -> dict[str, int]:
    """Move values out of legacy columns into the ``revision`` spelling.

    Each row holding a value under a legacy column gets it copied into the
    target column (unless the target already has one) and the legacy column
    nulled. Rows are rewritten one at a time by id; a failure part way leaves
    the remaining rows readable through the dual-read path.

    Args:
        client: Remote table client
        tables: Table name for each entity kind
        revision: Spelling to migrate to

    Returns:
        Number of rewritten rows per table
    """
    rewritten: dict[str, int] = {}
    for kind, table in tables.items():
        renames = legacy_columns(kind, revision)
        count = 0
        for row in await client.select(table):
            patch = {}
            for legacy, target in renames.items():
                if row.get(legacy) is None:
                    continue
                if row.get(target) is None:
                    patch[target] = row[legacy]
                patch[legacy] = None
            if not patch:
                continue
            await client.update(table, patch, {"id": row["id"]})
            count += 1
        rewritten[table] = count
        logger.info(f"Normalized {count} row(s) in {table} to the {revision} schema")
    return rewritten
