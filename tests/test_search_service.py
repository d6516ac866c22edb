# tests/test_search_service.py
import json
from unittest.mock import patch

import pytest

from titlesearch.config import settings
from titlesearch.models import Song, SongSummary
from titlesearch.search.errors import InvalidTokenError, NoCandidatesError, SongNotFoundError
from titlesearch.search.search_service import SearchService
from .test_utils import print_test_name, print_test_result


@pytest.mark.asyncio
class TestSearch:
    """Recherche top-K et cache."""

    async def test_cache_miss_ranks_and_sets(self, loaded_service):
        test_name = "test_cache_miss_ranks_and_sets"
        print_test_name(test_name)
        try:
            results = await loaded_service.search("zenith", 2)

            # Ordre du classement conservé malgré l'ordre inverse renvoyé par la base
            assert [r.id for r in results] == [1, 3]
            assert results[0].version_abbrev == "IIDX RED"
            loaded_service.repository.fetch_songs_with_versions.assert_awaited_once_with([1, 3])
            loaded_service.cache.get.assert_awaited_once_with("search:reference:2:zenith")
            loaded_service.cache.set.assert_awaited_once()
            print_test_result(test_name, passed=True)
        except Exception as e:
            print_test_result(test_name, passed=False)
            raise e

    async def test_cache_hit_skips_database(self, loaded_service):
        test_name = "test_cache_hit_skips_database"
        print_test_name(test_name)
        try:
            cached = [SongSummary(id=9, version_abbrev="X", genre="G", title="T", artist="A").model_dump()]
            loaded_service.cache.get.return_value = json.dumps(cached)

            results = await loaded_service.search("anything", 5)

            assert results[0].id == 9
            loaded_service.repository.fetch_songs_with_versions.assert_not_called()
            loaded_service.cache.set.assert_not_called()
            print_test_result(test_name, passed=True)
        except Exception as e:
            print_test_result(test_name, passed=False)
            raise e

    async def test_cache_key_depends_on_cost_profile(self, mock_repository, mock_cache_manager):
        service = SearchService(repository=mock_repository, cost_profile="no_leet")
        service.cache = mock_cache_manager
        await service.load_catalog()

        await service.search("zenith", 2)

        # Un classement calculé avec un autre profil ne doit jamais être resservi
        mock_cache_manager.get.assert_awaited_once_with("search:no_leet:2:zenith")

    async def test_missing_rows_are_skipped(self, loaded_service):
        loaded_service.repository.fetch_songs_with_versions.side_effect = None
        loaded_service.repository.fetch_songs_with_versions.return_value = []

        assert await loaded_service.search("zenith", 3) == []

    async def test_empty_catalog(self, mock_repository, mock_cache_manager):
        mock_repository.fetch_title_pairs.return_value = []
        service = SearchService(repository=mock_repository)
        service.cache = mock_cache_manager
        await service.load_catalog()

        assert await service.search("zenith") == []
        assert len(service.catalog) == 0


@pytest.mark.asyncio
class TestShow:

    async def test_show_found(self, loaded_service, songs_by_id):
        song, _ = songs_by_id[1]
        loaded_service.repository.fetch_song_details.return_value = (song, [])

        response = await loaded_service.show(1)

        assert response.song.title == "Zenith"
        assert response.diffs == []

    async def test_show_not_found(self, loaded_service):
        with pytest.raises(SongNotFoundError, match="song id 42"):
            await loaded_service.show(42)


@pytest.mark.asyncio
class TestWebhook:
    """Webhook sortant Mattermost : une pièce jointe par ligne."""

    async def test_enqueue_builds_attachments_in_line_order(self, loaded_service):
        test_name = "test_enqueue_builds_attachments_in_line_order"
        print_test_name(test_name)
        try:
            with patch.object(settings, "MATTERMOST_TOKEN", "secret"):
                result = await loaded_service.enqueue("secret", "zenith\n\n  apple  \n")

            assert result.username == settings.WEBHOOK_USERNAME
            assert [a.title for a in result.attachments] == ["Zenith / dj TAKA", "Apple / Orchard"]

            zenith = result.attachments[0]
            assert zenith.footer == "beatmania IIDX 11 IIDX RED"
            fields = {f.title: f.value for f in zenith.fields}
            assert fields["SP Levels"] == ":diff-n: :level-4: / :diff-h: :level-7:"
            assert fields["DP Levels"] == ":diff-a: :level-10:"
            assert fields["BPM"] == "120 - 180"

            apple_fields = {f.title: f.value for f in result.attachments[1].fields}
            assert apple_fields["BPM"] == "150"
            assert apple_fields["DP Levels"] == ""
            print_test_result(test_name, passed=True)
        except Exception as e:
            print_test_result(test_name, passed=False)
            raise e

    async def test_repeated_lines_give_repeated_attachments(self, loaded_service):
        with patch.object(settings, "MATTERMOST_TOKEN", "secret"):
            result = await loaded_service.enqueue("secret", "zenith\nZenith")

        assert len(result.attachments) == 2
        loaded_service.repository.fetch_diffs.assert_awaited_once_with([1])

    async def test_ignored_prefix(self, loaded_service):
        with patch.object(settings, "MATTERMOST_TOKEN", "secret"):
            assert await loaded_service.enqueue("secret", "// just chatting") is None
        loaded_service.repository.fetch_songs_with_versions.assert_not_called()

    async def test_invalid_token(self, loaded_service):
        with patch.object(settings, "MATTERMOST_TOKEN", "secret"):
            with pytest.raises(InvalidTokenError):
                await loaded_service.enqueue("wrong", "zenith")

    async def test_unset_token_rejects_everything(self, loaded_service):
        with patch.object(settings, "MATTERMOST_TOKEN", ""):
            with pytest.raises(InvalidTokenError):
                await loaded_service.enqueue("", "zenith")

    async def test_empty_catalog_has_no_candidates(self, mock_repository):
        mock_repository.fetch_title_pairs.return_value = []
        service = SearchService(repository=mock_repository)
        await service.load_catalog()

        with patch.object(settings, "MATTERMOST_TOKEN", "secret"):
            with pytest.raises(NoCandidatesError):
                await service.enqueue("secret", "zenith")

    async def test_bpm_without_range(self):
        song = Song(genre="G", title="T", artist="A", max_bpm=150)
        assert SearchService._format_bpm(song) == "150"
