"""Playlist domain - resolving CLI inputs and playlist documents.

This domain handles:
- Structured JSON playlist documents
- Generic key-name extraction from loosely structured documents
- Flat, index-correlated command-line parameters
"""

from .loader import (
    PlaylistDocument,
    TrackEntry,
    load_playlist_document,
    parse_structured_document,
    playlist_from_structured,
)
from .models import Playlist, PlayRequest, Track, TrackOverride
from .resolver import build_overrides, resolve_document, resolve_flat, resolve_playlist
from .walker import DocumentAccumulator, walk_document

__all__ = [
    # Models
    "Playlist",
    "PlayRequest",
    "Track",
    "TrackOverride",
    # Structured documents
    "PlaylistDocument",
    "TrackEntry",
    "load_playlist_document",
    "parse_structured_document",
    "playlist_from_structured",
    # Generic documents
    "DocumentAccumulator",
    "walk_document",
    # Resolution
    "build_overrides",
    "resolve_document",
    "resolve_flat",
    "resolve_playlist",
]
