"""Parsing d'un tableau HTML de titres (format wiki)."""
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from bs4 import BeautifulSoup
from bs4.element import Tag

from titlesearch.models import Diff, Difficulty, NoteType, PlaySide, ScratchType, Song, Version

SONG_ROW_CELLS = 13
VERSION_PREFIX_LENGTH = len("beatmania IIDX ")
VERSION_LINK_MARKS = ('▲', '▼', '△')

# SPB SPN SPH SPA SPL | DPN DPH DPA DPL
DIFF_COLUMNS: Tuple[Tuple[PlaySide, Difficulty], ...] = (
    (PlaySide.SINGLE, Difficulty.BEGINNER),
    (PlaySide.SINGLE, Difficulty.NORMAL),
    (PlaySide.SINGLE, Difficulty.HYPER),
    (PlaySide.SINGLE, Difficulty.ANOTHER),
    (PlaySide.SINGLE, Difficulty.LEGGENDARIA),
    (PlaySide.DOUBLE, Difficulty.NORMAL),
    (PlaySide.DOUBLE, Difficulty.HYPER),
    (PlaySide.DOUBLE, Difficulty.ANOTHER),
    (PlaySide.DOUBLE, Difficulty.LEGGENDARIA),
)

NOTE_TAGS = {
    '[CN]': NoteType.CHARGE,
    '[HCN]': NoteType.HELL_CHARGE,
}
SCRATCH_TAGS = {
    '[BSS]': ScratchType.BACK,
    '[HBSS]': ScratchType.HELL_BACK,
    '[MSS]': ScratchType.MULTI,
}


class ImportFormatError(ValueError):
    """Ligne ou en-tête du tableau mal formé."""


@dataclass
class EventHeader:
    """En-tête d'événement : information de déblocage des titres suivants."""
    name: str


Subheader = Union[Version, EventHeader]


def _texts(cell: Tag) -> List[str]:
    return [str(s) for s in cell.find_all(string=True)]


def _first_text(cell: Tag) -> str:
    texts = _texts(cell)
    return texts[0].strip() if texts else ""


def find_table_rows(html: str) -> List[List[Tag]]:
    """Cellules ``td`` de chaque ligne du premier ``table tbody``."""
    soup = BeautifulSoup(html, "html.parser")
    tbody = soup.select_one("table tbody")
    if tbody is None:
        raise ImportFormatError("no tbody found")
    return [tr.find_all("td") for tr in tbody.find_all("tr")]


def parse_diff_cell(play_side: PlaySide, difficulty: Difficulty, cell: Tag) -> Optional[Diff]:
    """Chart d'une cellule, None si la cellule vaut « - »."""
    texts = [t.strip() for t in _texts(cell)]
    if "-" in texts:
        return None

    level = 0
    note_type = None
    scratch_type = None
    for text in texts:
        if not text:
            continue
        if text in NOTE_TAGS:
            note_type = NOTE_TAGS[text]
        elif text in SCRATCH_TAGS:
            scratch_type = SCRATCH_TAGS[text]
        elif '[' in text:
            continue
        else:
            try:
                level = int(text)
            except ValueError:
                level = 0

    return Diff(
        play_side=play_side,
        difficulty=difficulty,
        level=level,
        note_type=note_type,
        scratch_type=scratch_type,
    )


def parse_bpm(text: str) -> Tuple[Optional[int], int]:
    """« ※ » : tempo indéterminé ; « a-b » : plage ; « b » : tempo fixe."""
    parts = text.split('-')
    if len(parts) == 1 and parts[0] == '※':
        return None, 0
    try:
        if len(parts) >= 2:
            return int(parts[0]), int(parts[1])
        return None, int(parts[0])
    except ValueError as e:
        raise ImportFormatError(f"invalid bpm: {text!r}") from e


def parse_song_row(cells: Sequence[Tag]) -> Tuple[Song, List[Diff]]:
    """Titre et charts d'une ligne de 13 cellules."""
    if len(cells) != SONG_ROW_CELLS:
        raise ImportFormatError("malformed row")

    diffs = []
    for (play_side, difficulty), cell in zip(DIFF_COLUMNS, cells):
        diff = parse_diff_cell(play_side, difficulty, cell)
        if diff is not None:
            diffs.append(diff)

    min_bpm, max_bpm = parse_bpm(_first_text(cells[9]))
    song = Song(
        genre=_first_text(cells[10]),
        title="".join(_texts(cells[11])).strip(),
        artist=_first_text(cells[12]),
        min_bpm=min_bpm,
        max_bpm=max_bpm,
    )
    return song, diffs


def parse_version(version_str: str) -> Version:
    """
    Interprète un nom de version.

    - « beatmania IIDX » : 1st style
    - « ... substream » : substream
    - « beatmania IIDX 2nd style » ... « 10th style »
    - « beatmania IIDX 11 IIDX RED » et suivantes : numéro puis nom
    """
    if version_str == "beatmania IIDX":
        abbrev, number = "1st style", 1
    elif "substream" in version_str:
        abbrev, number = "substream", 1
    elif " style" in version_str:
        abbrev = version_str[VERSION_PREFIX_LENGTH:]
        number_end = next(
            (abbrev.find(s) for s in ("nd", "rd", "th") if s in abbrev),
            None
        )
        if number_end is None:
            raise ImportFormatError("2nd~10th style parse error")
        try:
            number = int(abbrev[:number_end].strip())
        except ValueError as e:
            raise ImportFormatError("2nd~10th style parse error") from e
    else:
        number_and_name = version_str[VERSION_PREFIX_LENGTH:].strip()
        number_end = number_and_name.find(' ')
        if number_end < 0:
            raise ImportFormatError(f"RED~ parse error: {version_str!r}")
        abbrev = number_and_name[number_end:].strip()
        try:
            number = int(number_and_name[:number_end].strip())
        except ValueError as e:
            raise ImportFormatError("RED~ parse error") from e

    return Version(name=version_str, abbrev=abbrev, number=number)


def parse_subheader(cells: Sequence[Tag]) -> Subheader:
    """En-tête de version (contient un lien « △ ») ou d'événement."""
    all_text = "".join(_texts(cells[0]))
    if not all_text.strip():
        raise ImportFormatError("invalid subheader text")

    if '△' in all_text:
        link_position = min(all_text.find(m) for m in VERSION_LINK_MARKS if m in all_text)
        return parse_version(all_text[:link_position].strip())
    return EventHeader(name=all_text.strip())
