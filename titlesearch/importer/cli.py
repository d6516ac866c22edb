"""Import d'un tableau HTML de titres dans PostgreSQL."""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from titlesearch.config import settings
from titlesearch.db.postgres_connector import PostgresConnector
from titlesearch.db.queries import SongRepository
from titlesearch.importer.parser import (
    SONG_ROW_CELLS,
    EventHeader,
    ImportFormatError,
    find_table_rows,
    parse_song_row,
    parse_subheader,
    parse_version,
)
from titlesearch.logger import logger


async def import_table(
        repository: SongRepository,
        html: str,
        default_version: Optional[str] = None) -> int:
    """
    Insère versions, titres et charts d'un tableau HTML.

    Returns:
        Nombre de titres insérés
    """
    rows = find_table_rows(html)
    await repository.ensure_schema()

    version_id = None
    if default_version:
        version_id = await repository.insert_version(parse_version(default_version))
    event = None
    inserted = 0

    for cells in rows:
        if len(cells) == 1:
            header = parse_subheader(cells)
            if isinstance(header, EventHeader):
                event = header.name
                continue
            version_id = await repository.insert_version(header)
            logger.info("version inserted: {name} ({id})", name=header.name, id=version_id)
            event = None
        elif len(cells) == SONG_ROW_CELLS:
            if version_id is None:
                raise ImportFormatError("version unset")
            song, diffs = parse_song_row(cells)
            song_id = await repository.insert_song(version_id, event, song)
            await repository.insert_diffs(song_id, diffs)
            inserted += 1
            logger.info(
                "song inserted: {title} ({id}), {count} diffs",
                title=song.title, id=song_id, count=len(diffs)
            )

    return inserted


async def run(database_url: str, table_html: Path, default_version: Optional[str]) -> int:
    html = table_html.read_text(encoding="utf-8")
    connector = PostgresConnector(database_url, max_size=settings.DATABASE_POOL_SIZE)
    await connector.connect()
    try:
        return await import_table(SongRepository(connector), html, default_version)
    finally:
        await connector.close()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Parses a wiki-style song table and imports it into PostgreSQL"
    )
    parser.add_argument("table_html", type=Path, help="HTML file containing the song table")
    parser.add_argument(
        "--db",
        type=str,
        default=settings.DATABASE_URL,
        help="PostgreSQL connection string"
    )
    parser.add_argument(
        "-v", "--default-version",
        type=str,
        default=None,
        help="Version applied to songs listed before the first version header"
    )

    args = parser.parse_args(argv)

    if not args.table_html.exists():
        print(f"Error: File not found: {args.table_html}")
        return 1

    try:
        count = asyncio.run(run(args.db, args.table_html, args.default_version))
    except ImportFormatError as e:
        print(f"Error: {e}")
        return 1

    print(f"\n✓ Import complete: {count} songs")
    return 0


if __name__ == "__main__":
    sys.exit(main())
