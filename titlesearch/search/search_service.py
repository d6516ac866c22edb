"""Module contenant le service de recherche principal."""
# titlesearch/search/search_service.py
import asyncio
import hmac
import json
import time
from typing import Any, Dict, List, Optional

import psutil

from titlesearch.cache import cache_manager
from titlesearch.config import settings
from titlesearch.db.queries import SongRepository
from titlesearch.logger import logger
from titlesearch.models import (
    DIFFICULTY_ORDER,
    AttachmentSongField,
    AttachmentSongInfo,
    Diff,
    MattermostEnqueueResult,
    PlaySide,
    Song,
    SongSummary,
    SongsShowResponse,
)
from titlesearch.scoring.costs import get_cost_model
from titlesearch.scoring.distance import WeightedDistance
from titlesearch.search.catalog import Catalog
from titlesearch.search.errors import InvalidTokenError, NoCandidatesError, SongNotFoundError
from titlesearch.search.selector import RetrievalSelector


class SearchService:
    """Service de recherche : catalogue en mémoire + enrichissement PostgreSQL."""

    def __init__(self, repository: SongRepository, cost_profile: str = settings.COST_PROFILE):
        self.repository = repository
        self.cost_profile = cost_profile
        self.distance = WeightedDistance(get_cost_model(cost_profile))
        self.selector = RetrievalSelector(Catalog(), self.distance)
        self.cache = cache_manager

    @property
    def catalog(self) -> Catalog:
        return self.selector.catalog

    async def load_catalog(self) -> Catalog:
        """Charge le catalogue une fois pour toute la durée du processus."""
        pairs = await self.repository.fetch_title_pairs()
        catalog = Catalog.from_pairs(pairs)
        self.selector = RetrievalSelector(catalog, self.distance)
        logger.info("Catalog loaded: {count} titles", count=len(catalog))
        return catalog

    # -----------------------------------------------------------------
    # GET /songs/search
    # -----------------------------------------------------------------
    async def search(self, query: str, limit: int = settings.CANDIDATES_COUNT) -> List[SongSummary]:
        """
        Recherche les titres les plus proches de ``query``.

        Args:
            query: Texte libre saisi
            limit: Nombre de résultats (k du top-K)

        Returns:
            Résumés des titres, le plus proche en premier
        """
        cache_key = f"search:{self.cost_profile}:{limit}:{query}"
        cached = await self.cache.get(cache_key)
        if cached:
            logger.info("Cache HIT for key: {key}", key=cache_key)
            return [SongSummary(**item) for item in json.loads(cached)]

        logger.info("Cache MISS for key: {key}", key=cache_key)
        start_time = time.time()

        candidate_ids = self.selector.top_k(query, limit)
        rows = await self.repository.fetch_songs_with_versions(candidate_ids)
        by_id = {song.id: (song, version) for song, version in rows}

        results = []
        for cid in candidate_ids:
            if cid not in by_id:
                continue
            song, version = by_id[cid]
            results.append(SongSummary(
                id=song.id,
                version_abbrev=version.abbrev,
                genre=song.genre,
                title=song.title,
                artist=song.artist,
            ))

        duration = time.time() - start_time
        memory_mb = psutil.Process().memory_info().rss / 1024 / 1024
        logger.info(
            "Search (query: '{query}', k: {k}) : Durée = {duration:.4f}s | RAM = {memory:.2f} Mo",
            query=query, k=limit, duration=duration, memory=memory_mb
        )

        await self.cache.set(
            cache_key,
            json.dumps([r.model_dump() for r in results], ensure_ascii=False),
            expire=settings.CACHE_TTL
        )
        return results

    # -----------------------------------------------------------------
    # GET /songs/show
    # -----------------------------------------------------------------
    async def show(self, song_id: int) -> SongsShowResponse:
        song, diffs = await self.repository.fetch_song_details(song_id)
        if song is None:
            raise SongNotFoundError(song_id)
        return SongsShowResponse(song=song, diffs=diffs)

    # -----------------------------------------------------------------
    # POST /mattermost/enqueue
    # -----------------------------------------------------------------
    def verify_token(self, token: str) -> None:
        """Compare le jeton reçu au jeton configuré (temps constant)."""
        expected = settings.MATTERMOST_TOKEN
        if not expected or not hmac.compare_digest(expected.encode(), token.encode()):
            logger.warning("Invalid token arrived")
            raise InvalidTokenError()

    def resolve_lines(self, text: str) -> List[int]:
        """Meilleur candidat pour chaque ligne non vide du message."""
        song_ids = []
        for line in text.split('\n'):
            query = line.strip()
            if not query:
                continue
            best = self.selector.best_match(query)
            if best is None:
                raise NoCandidatesError()
            song_ids.append(best)
        return song_ids

    async def enqueue(self, token: str, text: str) -> Optional[MattermostEnqueueResult]:
        """
        Traite un message du webhook sortant : une pièce jointe par ligne.

        Returns:
            None si le message commence par le préfixe ignoré
        """
        self.verify_token(token)
        prefix = settings.WEBHOOK_IGNORE_PREFIX
        if prefix and text.startswith(prefix):
            return None

        song_ids = self.resolve_lines(text)
        unique_ids = list(dict.fromkeys(song_ids))

        song_version_pairs, all_diffs = await asyncio.gather(
            self.repository.fetch_songs_with_versions(unique_ids),
            self.repository.fetch_diffs(unique_ids),
        )
        by_id = {song.id: (song, version) for song, version in song_version_pairs}

        attachments = []
        for song_id in song_ids:
            if song_id not in by_id:
                logger.warning("Song {song_id} matched but missing from database", song_id=song_id)
                continue
            song, version = by_id[song_id]
            song_diffs = [d for d in all_diffs if d.song_id == song_id]
            attachments.append(self._build_attachment(song, version.name, song_diffs))

        return MattermostEnqueueResult(
            username=settings.WEBHOOK_USERNAME,
            attachments=attachments,
        )

    @staticmethod
    def _format_levels(diffs: List[Diff], play_side: PlaySide) -> str:
        side_diffs = sorted(
            (d for d in diffs if d.play_side == play_side),
            key=lambda d: DIFFICULTY_ORDER[d.difficulty]
        )
        return " / ".join(
            f"{settings.DIFFICULTY_EMOJIS.get(d.difficulty.value, d.difficulty.value)} :level-{d.level}:"
            for d in side_diffs
        )

    @staticmethod
    def _format_bpm(song: Song) -> str:
        if song.min_bpm is not None:
            return f"{song.min_bpm} - {song.max_bpm}"
        return str(song.max_bpm)

    def _build_attachment(self, song: Song, version_name: str, diffs: List[Diff]) -> AttachmentSongInfo:
        return AttachmentSongInfo(
            title=f"{song.title} / {song.artist}",
            footer=version_name,
            fields=[
                AttachmentSongField(short=True, title="SP Levels",
                                    value=self._format_levels(diffs, PlaySide.SINGLE)),
                AttachmentSongField(short=True, title="DP Levels",
                                    value=self._format_levels(diffs, PlaySide.DOUBLE)),
                AttachmentSongField(short=True, title="BPM", value=self._format_bpm(song)),
            ],
        )

    async def stats(self) -> Dict[str, Any]:
        """Statistiques simples exposées par /health."""
        return {"catalog_size": len(self.catalog), "cost_profile": self.cost_profile}
