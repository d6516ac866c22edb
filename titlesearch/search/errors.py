"""Exceptions du service de recherche."""


class TitleSearchError(Exception):
    """Exception de base du service."""


class SongNotFoundError(TitleSearchError):
    """Titre absent de la base."""
    def __init__(self, song_id: int):
        super().__init__(f"song id {song_id}")
        self.song_id = song_id


class NoCandidatesError(TitleSearchError):
    """Le catalogue est vide : aucun meilleur candidat possible."""
    def __init__(self):
        super().__init__("no candidates available")


class InvalidTokenError(TitleSearchError):
    """Jeton de webhook refusé."""
    def __init__(self):
        super().__init__("unauthorized webhook token")
