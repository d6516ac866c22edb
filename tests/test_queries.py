# tests/test_queries.py
import pytest

from titlesearch.db.queries import SCHEMA_STATEMENTS, SongRepository
from titlesearch.models import Diff, Difficulty, NoteType, PlaySide, Song, Version

SONG_ROW = {
    'id': 1, 'version_id': 10, 'genre': 'TRANCE', 'title': 'Zenith', 'artist': 'dj TAKA',
    'min_bpm': None, 'max_bpm': 150, 'unlock_info': None,
}


@pytest.mark.asyncio
class TestSongRepository:
    """Requêtes SQL avec un connecteur mocké."""

    async def test_fetch_title_pairs(self, mock_db_connector):
        mock_db_connector.execute_query.return_value = [{'id': 1, 'title': 'a'}, {'id': 2, 'title': 'b'}]
        repo = SongRepository(mock_db_connector)

        assert await repo.fetch_title_pairs() == [(1, 'a'), (2, 'b')]
        sql = mock_db_connector.execute_query.await_args.args[0]
        assert "ORDER BY songs.id" in sql

    async def test_empty_id_lists_skip_database(self, mock_db_connector):
        repo = SongRepository(mock_db_connector)

        assert await repo.fetch_songs_with_versions([]) == []
        assert await repo.fetch_diffs([]) == []
        mock_db_connector.execute_query.assert_not_called()

    async def test_fetch_songs_with_versions(self, mock_db_connector):
        mock_db_connector.execute_query.return_value = [{
            **SONG_ROW,
            'version_name': 'beatmania IIDX 11 IIDX RED',
            'version_abbrev': 'IIDX RED',
            'version_number': 11,
        }]
        repo = SongRepository(mock_db_connector)

        [(song, version)] = await repo.fetch_songs_with_versions([1])

        assert song.title == 'Zenith'
        assert version == Version(id=10, name='beatmania IIDX 11 IIDX RED', abbrev='IIDX RED', number=11)
        assert mock_db_connector.execute_query.await_args.args[1] == [1]

    async def test_fetch_song_missing(self, mock_db_connector):
        repo = SongRepository(mock_db_connector)
        assert await repo.fetch_song(3) is None

    async def test_fetch_song_details(self, mock_db_connector):
        mock_db_connector.fetch_one.return_value = SONG_ROW
        mock_db_connector.execute_query.return_value = [{
            'song_id': 1, 'play_side': 'SP', 'difficulty': 'HYPER', 'level': 7,
            'note_type': 'CN', 'scratch_type': None,
        }]
        repo = SongRepository(mock_db_connector)

        song, diffs = await repo.fetch_song_details(1)

        assert song == Song(**SONG_ROW)
        assert diffs[0].difficulty == Difficulty.HYPER
        assert diffs[0].note_type == NoteType.CHARGE

    async def test_ensure_schema(self, mock_db_connector):
        await SongRepository(mock_db_connector).ensure_schema()
        assert mock_db_connector.execute.await_count == len(SCHEMA_STATEMENTS)

    async def test_insert_diffs_serializes_enums(self, mock_db_connector):
        repo = SongRepository(mock_db_connector)
        await repo.insert_diffs(7, [
            Diff(play_side=PlaySide.DOUBLE, difficulty=Difficulty.ANOTHER, level=10, note_type=NoteType.HELL_CHARGE),
        ])

        rows = mock_db_connector.execute_many.await_args.args[1]
        assert rows == [(7, 'DP', 'ANOTHER', 10, 'HCN', None)]

    async def test_insert_diffs_nothing_to_do(self, mock_db_connector):
        await SongRepository(mock_db_connector).insert_diffs(7, [])
        mock_db_connector.execute_many.assert_not_called()

    async def test_insert_song_returns_id(self, mock_db_connector):
        mock_db_connector.fetch_value.return_value = 42
        repo = SongRepository(mock_db_connector)
        song = Song(genre='G', title='T', artist='A', max_bpm=150)

        assert await repo.insert_song(10, "event", song) == 42
        assert mock_db_connector.fetch_value.await_args.args[1:] == (10, 'G', 'T', 'A', None, 150, 'event')
