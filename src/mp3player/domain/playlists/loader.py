"""
Structured playlist documents.

Reads JSON playlist files and validates the strict document shape:

    {
      "base_path": "/music",
      "tracks": [
        {"file": "a.mp3", "start_position": "00:02:20", "rank": 1, "playback_duration": ""}
      ],
      "repeat": false,
      "volume": 1.0
    }
"""

import json
from pathlib import Path
from typing import Any, Optional

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from mp3player.domain.exceptions import FormatError, PlaylistIOError
from mp3player.utils.parsers import parse_optional_time

from .models import Playlist, Track


class TrackEntry(BaseModel):
    file: str
    start_position: str = ""
    rank: Optional[int] = None
    playback_duration: str = ""

    model_config = {"strict": True, "frozen": True}


class PlaylistDocument(BaseModel):
    base_path: str
    tracks: list[TrackEntry]
    repeat: bool
    volume: float = Field(ge=0)  # 1.0 = 100%

    model_config = {"strict": True, "frozen": True}


def load_playlist_document(playlist_file: str) -> Any:
    """
    Read and parse a JSON playlist file.

    Args:
        playlist_file: Path to the playlist file

    Returns:
        Parsed JSON value (any shape)

    Raises:
        PlaylistIOError: If the file is missing or unreadable
        FormatError: If the file is not valid JSON
    """
    path = Path(playlist_file)
    logger.debug(f"Loading playlist document: {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise FormatError(f"Playlist is not UTF-8 text: path -> {playlist_file!r}, e -> {e}") from e
    except OSError as e:
        raise PlaylistIOError(playlist_file, e) from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise FormatError(f"Playlist is not valid JSON: path -> {playlist_file!r}, e -> {e}") from e


def parse_structured_document(document: Any) -> Optional[PlaylistDocument]:
    """Validate a parsed document against the structured shape.

    An object with a ``tracks`` key is taken to be a structured playlist and
    must validate; anything else is left to the generic walk.

    Returns:
        The validated document, or None when the document is not structured

    Raises:
        FormatError: If a structured playlist has missing or mistyped fields
    """
    try:
        return PlaylistDocument.model_validate(document)
    except ValidationError as e:
        if isinstance(document, dict) and "tracks" in document:
            raise FormatError(f"Invalid structured playlist ({e.error_count()} errors): {e}") from e
        logger.debug(f"Document is not a structured playlist ({e.error_count()} errors)")
        return None


def playlist_from_structured(document: PlaylistDocument) -> Playlist:
    """Convert a validated structured document into a Playlist.

    Empty ``start_position`` means zero, empty or zero ``playback_duration``
    means the rest of the stream.

    Raises:
        ParseError: If any time string is malformed
    """
    tracks = []
    for entry in document.tracks:
        take = parse_optional_time(entry.playback_duration)
        tracks.append(
            Track(
                file=entry.file,
                start_position=parse_optional_time(entry.start_position),
                take=take or None,
                rank=entry.rank,
            )
        )

    return Playlist(
        tracks=tuple(tracks),
        base_path=document.base_path,
        repeat=document.repeat,
        volume=document.volume,
    )
