# tests/conftest.py
import pytest
import pytest_asyncio
from unittest.mock import MagicMock, AsyncMock

from titlesearch.models import Diff, Song, Version

# --- Mocks des clients de bas niveau ---

@pytest.fixture
def mock_db_connector():
    """Fixture pour un mock du connecteur PostgreSQL."""
    db_conn = MagicMock()
    db_conn.execute_query = AsyncMock(return_value=[])
    db_conn.fetch_one = AsyncMock(return_value=None)
    db_conn.fetch_value = AsyncMock(return_value=1)
    db_conn.execute = AsyncMock()
    db_conn.execute_many = AsyncMock()
    return db_conn

@pytest.fixture
def mock_cache_manager():
    """Fixture pour un mock du gestionnaire de cache Redis."""
    cache = MagicMock()
    cache.get = AsyncMock(return_value=None)  # Par défaut, le cache est toujours vide (miss)
    cache.set = AsyncMock()
    return cache

# --- Données d'exemple ---

@pytest.fixture
def title_pairs():
    """Catalogue (id, titre) trié par id."""
    return [
        (1, "Zenith"),
        (2, "Apple"),
        (3, "ZEИITH"),
        (4, "5.1.1."),
    ]

@pytest.fixture
def songs_by_id():
    version = Version(id=10, name="beatmania IIDX 11 IIDX RED", abbrev="IIDX RED", number=11)
    songs = {
        1: Song(id=1, version_id=10, genre="TRANCE", title="Zenith", artist="dj TAKA",
                min_bpm=120, max_bpm=180),
        2: Song(id=2, version_id=10, genre="POP", title="Apple", artist="Orchard", max_bpm=150),
        3: Song(id=3, version_id=10, genre="HARD", title="ZEИITH", artist="L.E.D.", max_bpm=200),
        4: Song(id=4, version_id=10, genre="PIANO", title="5.1.1.", artist="dj nagureo", max_bpm=96),
    }
    return {song_id: (song, version) for song_id, song in songs.items()}

@pytest.fixture
def mock_repository(title_pairs, songs_by_id):
    """Fixture pour un mock du SongRepository (renvoie les lignes demandées, ordre inversé)."""
    repo = MagicMock()
    repo.fetch_title_pairs = AsyncMock(return_value=title_pairs)

    async def fetch_songs_with_versions(ids):
        return [songs_by_id[i] for i in reversed(ids) if i in songs_by_id]

    repo.fetch_songs_with_versions = AsyncMock(side_effect=fetch_songs_with_versions)
    repo.fetch_diffs = AsyncMock(return_value=[
        Diff(song_id=1, play_side="SP", difficulty="HYPER", level=7),
        Diff(song_id=1, play_side="SP", difficulty="NORMAL", level=4),
        Diff(song_id=1, play_side="DP", difficulty="ANOTHER", level=10, note_type="CN"),
        Diff(song_id=2, play_side="SP", difficulty="ANOTHER", level=9),
    ])
    repo.fetch_song_details = AsyncMock(return_value=(None, []))
    return repo

# --- Service ---

@pytest_asyncio.fixture
async def loaded_service(mock_repository, mock_cache_manager):
    """SearchService réel, dépendances mockées, catalogue chargé."""
    from titlesearch.search.search_service import SearchService

    service = SearchService(repository=mock_repository)
    service.cache = mock_cache_manager
    await service.load_catalog()
    return service
