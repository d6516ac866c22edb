"""Requêtes SQL du catalogue de titres."""
import asyncio
from typing import Any, Dict, List, Optional, Tuple

from titlesearch.models import Diff, Song, Version

PostgresConnector = Any

SCHEMA_STATEMENTS = (
    """CREATE TABLE IF NOT EXISTS versions (
        id BIGSERIAL PRIMARY KEY,
        name TEXT NOT NULL,
        number INTEGER NOT NULL,
        abbrev TEXT NOT NULL
    )""",
    """CREATE TABLE IF NOT EXISTS songs (
        id BIGSERIAL PRIMARY KEY,
        version_id BIGINT NOT NULL REFERENCES versions (id),
        genre TEXT NOT NULL,
        title TEXT NOT NULL,
        artist TEXT NOT NULL,
        min_bpm INTEGER,
        max_bpm INTEGER NOT NULL,
        unlock_info TEXT
    )""",
    """CREATE TABLE IF NOT EXISTS diffs (
        song_id BIGINT NOT NULL REFERENCES songs (id),
        play_side TEXT NOT NULL,
        difficulty TEXT NOT NULL,
        level INTEGER NOT NULL,
        cn_type TEXT,
        bss_type TEXT
    )""",
)

SONG_COLUMNS = """
    songs.id AS id,
    songs.version_id AS version_id,
    songs.genre AS genre,
    songs.title AS title,
    songs.artist AS artist,
    songs.min_bpm AS min_bpm,
    songs.max_bpm AS max_bpm,
    songs.unlock_info AS unlock_info
"""

DIFF_COLUMNS = """
    diffs.song_id AS song_id,
    diffs.play_side AS play_side,
    diffs.difficulty AS difficulty,
    diffs.level AS level,
    diffs.cn_type AS note_type,
    diffs.bss_type AS scratch_type
"""


class SongRepository:
    """Accès lecture/écriture aux tables ``versions``, ``songs`` et ``diffs``."""

    def __init__(self, db_connector: PostgresConnector):
        self.db = db_connector

    # -----------------------------------------------------------------
    # Lecture
    # -----------------------------------------------------------------
    async def fetch_title_pairs(self) -> List[Tuple[int, str]]:
        """Toutes les paires (id, titre), triées par id croissant."""
        rows = await self.db.execute_query(
            "SELECT songs.id AS id, songs.title AS title FROM songs ORDER BY songs.id"
        )
        return [(int(row['id']), row['title']) for row in rows]

    async def fetch_songs_with_versions(
            self,
            song_ids: List[int]) -> List[Tuple[Song, Version]]:
        """
        Titres et leur version pour une liste d'ids.

        L'ordre et le nombre de lignes ne suivent pas forcément ``song_ids``.
        """
        if not song_ids:
            return []

        rows = await self.db.execute_query(
            f"""SELECT {SONG_COLUMNS},
                versions.name AS version_name,
                versions.abbrev AS version_abbrev,
                versions.number AS version_number
            FROM songs
            INNER JOIN versions ON songs.version_id = versions.id
            WHERE songs.id = ANY($1)""",
            list(song_ids)
        )
        pairs = []
        for row in rows:
            version = Version(
                id=row['version_id'],
                name=row['version_name'],
                abbrev=row['version_abbrev'],
                number=row.get('version_number'),
            )
            pairs.append((self._song_from_row(row), version))
        return pairs

    async def fetch_song(self, song_id: int) -> Optional[Song]:
        row = await self.db.fetch_one(
            f"SELECT {SONG_COLUMNS} FROM songs WHERE songs.id = $1",
            song_id
        )
        return self._song_from_row(row) if row is not None else None

    async def fetch_diffs(self, song_ids: List[int]) -> List[Diff]:
        """Charts de tous les titres demandés."""
        if not song_ids:
            return []

        rows = await self.db.execute_query(
            f"SELECT {DIFF_COLUMNS} FROM diffs WHERE diffs.song_id = ANY($1)",
            list(song_ids)
        )
        return [Diff(**row) for row in rows]

    async def fetch_song_details(self, song_id: int) -> Tuple[Optional[Song], List[Diff]]:
        """Titre et charts en parallèle."""
        song, diffs = await asyncio.gather(
            self.fetch_song(song_id),
            self.fetch_diffs([song_id]),
        )
        return song, diffs

    @staticmethod
    def _song_from_row(row: Dict[str, Any]) -> Song:
        return Song(
            id=row['id'],
            version_id=row['version_id'],
            genre=row['genre'],
            title=row['title'],
            artist=row['artist'],
            min_bpm=row['min_bpm'],
            max_bpm=row['max_bpm'],
            unlock_info=row['unlock_info'],
        )

    # -----------------------------------------------------------------
    # Écriture (import)
    # -----------------------------------------------------------------
    async def ensure_schema(self) -> None:
        for statement in SCHEMA_STATEMENTS:
            await self.db.execute(statement)

    async def insert_version(self, version: Version) -> int:
        return await self.db.fetch_value(
            """INSERT INTO versions (name, number, abbrev)
            VALUES ($1, $2, $3)
            RETURNING id""",
            version.name, version.number, version.abbrev
        )

    async def insert_song(self, version_id: int, event: Optional[str], song: Song) -> int:
        return await self.db.fetch_value(
            """INSERT INTO songs (version_id, genre, title, artist, min_bpm, max_bpm, unlock_info)
            VALUES ($1, $2, $3, $4, $5, $6, $7)
            RETURNING id""",
            version_id, song.genre, song.title, song.artist,
            song.min_bpm, song.max_bpm, event
        )

    async def insert_diffs(self, song_id: int, diffs: List[Diff]) -> None:
        if not diffs:
            return
        await self.db.execute_many(
            """INSERT INTO diffs (song_id, play_side, difficulty, level, cn_type, bss_type)
            VALUES ($1, $2, $3, $4, $5, $6)""",
            [
                (
                    song_id,
                    diff.play_side.value,
                    diff.difficulty.value,
                    diff.level,
                    diff.note_type.value if diff.note_type else None,
                    diff.scratch_type.value if diff.scratch_type else None,
                )
                for diff in diffs
            ]
        )
