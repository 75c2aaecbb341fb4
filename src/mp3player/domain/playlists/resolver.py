"""
Playlist resolution.

Turns CLI inputs or a playlist document into a resolved Playlist.

Resolution order for documents:
1. Structured document (an object with ``tracks``; must validate strictly)
2. Generic key-name walk, when it finds at least one file
3. Flat parameters supplied alongside the document

Errors abort resolution; no partial playlist is ever returned.
"""

from typing import Any, List, Optional, Sequence, Union

from loguru import logger

from mp3player.domain.exceptions import ContractError, FormatError, ParseError
from mp3player.utils.parsers import parse_optional_time, parse_seconds

from .loader import load_playlist_document, parse_structured_document, playlist_from_structured
from .models import Playlist, PlayRequest, Track, TrackOverride
from .walker import walk_document

RawValue = Union[str, int, float]


def _check_length(name: str, values: Sequence[Any], file_count: int) -> None:
    """Fail fast when a supplied positional vector does not cover every file."""
    if values and len(values) < file_count:
        raise ContractError(
            f"{name} has {len(values)} entries but {file_count} files were given"
        )
    if len(values) > file_count:
        logger.warning(
            f"{name} has {len(values)} entries for {file_count} files; extra entries ignored"
        )


def _parse_skip(value: RawValue) -> float:
    if isinstance(value, bool):
        raise ParseError(repr(value), "expected seconds")
    if isinstance(value, (int, float)):
        if value < 0:
            raise ParseError(repr(value), "negative duration")
        return float(value)
    return parse_seconds(value)


def build_overrides(
    file_count: int,
    positions: Sequence[RawValue] = (),
    skips: Sequence[RawValue] = (),
    takes: Sequence[RawValue] = (),
) -> List[TrackOverride]:
    """
    Fold index-correlated CLI vectors into one override per file.

    Args:
        file_count: Number of files the vectors must cover
        positions: Seek positions (time strings or seconds), optional
        skips: Skip seconds, optional
        takes: Take windows (time strings or seconds), optional

    Returns:
        One TrackOverride per file

    Raises:
        ContractError: If a non-empty vector is shorter than the file list
        ParseError: If an entry is not a valid time or number
    """
    _check_length("positions", positions, file_count)
    _check_length("skips", skips, file_count)
    _check_length("takes", takes, file_count)

    overrides = []
    for i in range(file_count):
        seek = parse_optional_time(positions[i]) if positions else 0.0
        skip = _parse_skip(skips[i]) if skips else 0.0
        take = parse_optional_time(takes[i]) if takes else 0.0
        overrides.append(TrackOverride(seek=seek, skip=skip, take=take or None))
    return overrides


def resolve_flat(
    files: Sequence[str],
    positions: Sequence[RawValue] = (),
    skips: Sequence[RawValue] = (),
    takes: Sequence[RawValue] = (),
    repeat: bool = False,
    volume: Optional[float] = None,
    base_path: Optional[str] = None,
) -> Playlist:
    """Resolve flat, positionally correlated parameters into a Playlist."""
    if not files:
        raise ContractError("No files to play")
    if volume is not None and volume < 0:
        raise ContractError(f"Volume must not be negative: volume -> {volume}")

    overrides = build_overrides(len(files), positions, skips, takes)
    tracks = tuple(
        Track(file=file, start_position=o.seek, skip=o.skip, take=o.take)
        for file, o in zip(files, overrides)
    )

    return Playlist(
        tracks=tracks,
        base_path=base_path or "",
        repeat=repeat,
        volume=1.0 if volume is None else volume,
    )


def resolve_document(document: Any, flat: Optional[PlayRequest] = None) -> Playlist:
    """
    Resolve a parsed playlist document.

    ``flat`` is for library callers that combine a document with their own
    parameters; ``resolve_playlist`` never passes files alongside a playlist
    file, so from the command line the fallback yields nothing.

    Args:
        document: Parsed JSON value
        flat: Flat parameters to fall back on when the document yields no files

    Returns:
        Resolved playlist

    Raises:
        FormatError: If a structured playlist is invalid, or neither the
            document nor the flat parameters yield tracks
    """
    structured = parse_structured_document(document)
    if structured is not None:
        playlist = playlist_from_structured(structured)
        logger.info(f"Resolved structured playlist: {len(playlist.tracks)} tracks")
        return playlist

    found = walk_document(document)
    if found.has_files:
        # Generic result replaces every flat value wholesale
        logger.info(f"Resolved generic playlist document: {len(found.files)} files")
        return resolve_flat(
            files=found.files,
            positions=found.positions,
            takes=found.takes,
            repeat=bool(found.repeat),
            volume=found.volume,
            base_path=found.base_path,
        )

    if flat is not None and flat.files:
        logger.info("Playlist document has no files; using command-line files")
        return _resolve_request_flat(flat)

    raise FormatError("Playlist document does not match the playlist format and contains no 'file' entries")


def _resolve_request_flat(request: PlayRequest) -> Playlist:
    return resolve_flat(
        files=request.files,
        positions=request.positions,
        skips=request.skips,
        takes=request.takes,
        repeat=request.repeat,
        volume=request.volume,
        base_path=request.base_path,
    )


def resolve_playlist(request: PlayRequest) -> Playlist:
    """
    Resolve a play request into a Playlist.

    Args:
        request: Inputs collected from the command line

    Returns:
        Resolved playlist with tracks in play order

    Raises:
        ContractError: Both or neither of files / playlist file, or short vectors
        PlaylistIOError: Playlist file missing or unreadable
        FormatError: Playlist file malformed
        ParseError: Malformed time value
    """
    if request.playlist_file and request.files:
        raise ContractError("A playlist file cannot be combined with file arguments")

    if request.playlist_file:
        document = load_playlist_document(request.playlist_file)
        return resolve_document(document, request)

    if not request.files:
        raise ContractError("Nothing to play: give audio files or a playlist file")

    playlist = _resolve_request_flat(request)
    logger.info(f"Resolved {len(playlist.tracks)} tracks from command-line arguments")
    return playlist
