"""Modèles Pydantic pour les enregistrements, requêtes et réponses."""
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class PlaySide(str, Enum):
    """Côté de jeu."""
    SINGLE = "SP"
    DOUBLE = "DP"


class Difficulty(str, Enum):
    """Difficultés, dans l'ordre d'affichage."""
    BEGINNER = "BEGINNER"
    NORMAL = "NORMAL"
    HYPER = "HYPER"
    ANOTHER = "ANOTHER"
    LEGGENDARIA = "LEGGENDARIA"


DIFFICULTY_ORDER = {d: i for i, d in enumerate(Difficulty)}


class NoteType(str, Enum):
    CHARGE = "CN"
    HELL_CHARGE = "HCN"


class ScratchType(str, Enum):
    BACK = "BSS"
    HELL_BACK = "HBSS"
    MULTI = "MSS"


class Version(BaseModel): # pylint: disable=too-few-public-methods
    """Version de jeu."""
    id: Optional[int] = None
    name: str
    abbrev: str
    number: Optional[int] = None


class Song(BaseModel): # pylint: disable=too-few-public-methods
    """Titre complet."""
    id: Optional[int] = None
    version_id: Optional[int] = None
    genre: str
    title: str
    artist: str
    min_bpm: Optional[int] = None
    max_bpm: int
    unlock_info: Optional[str] = None


class Diff(BaseModel): # pylint: disable=too-few-public-methods
    """Chart d'un titre pour un côté et une difficulté."""
    song_id: Optional[int] = None
    play_side: PlaySide
    difficulty: Difficulty
    level: int
    note_type: Optional[NoteType] = None
    scratch_type: Optional[ScratchType] = None


class SongSummary(BaseModel): # pylint: disable=too-few-public-methods
    """Ligne de résultat de recherche."""
    id: int
    version_abbrev: str
    genre: str
    title: str
    artist: str


class SongsShowResponse(BaseModel): # pylint: disable=too-few-public-methods
    """Réponse de GET /songs/show."""
    song: Song
    diffs: List[Diff]


class AttachmentSongField(BaseModel): # pylint: disable=too-few-public-methods
    short: bool
    title: str
    value: str


class AttachmentSongInfo(BaseModel): # pylint: disable=too-few-public-methods
    title: str
    footer: str
    fields: List[AttachmentSongField] = Field(default_factory=list)


class MattermostEnqueueResult(BaseModel): # pylint: disable=too-few-public-methods
    """Réponse au webhook sortant Mattermost."""
    username: str
    attachments: List[AttachmentSongInfo] = Field(default_factory=list)


class ErrorResult(BaseModel): # pylint: disable=too-few-public-methods
    reason: str
