"""
Playlist domain models.

Contains the resolved, immutable data structures handed from the resolver to
the playback scheduler.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Track:
    """One playable unit of a playlist.

    All durations are in seconds. ``take`` of ``None`` means "play the rest
    of the stream"; the scheduler resolves it from decoder metadata.
    """

    file: str  # Raw path fragment, joined with the playlist base path at play time
    start_position: float = 0.0
    skip: float = 0.0  # Extra trim after seeking (flat parameters only)
    take: Optional[float] = None
    rank: Optional[int] = None  # Display hint, never used for ordering


@dataclass(frozen=True)
class TrackOverride:
    """Per-file seek/skip/take values normalised from CLI vectors."""

    seek: float = 0.0
    skip: float = 0.0
    take: Optional[float] = None


@dataclass(frozen=True)
class Playlist:
    """Resolved, ordered collection of tracks plus session-wide settings.

    Track order defines sink creation order and breaks ties when choosing
    the primary sink.
    """

    tracks: Tuple[Track, ...]
    base_path: str = ""
    repeat: bool = False
    volume: float = 1.0  # Linear gain, 1.0 = 100%

    def track_path(self, track: Track) -> str:
        """Join the base path with a track's file (absolute files win)."""
        if not self.base_path:
            return track.file
        return os.path.join(self.base_path, track.file)

    def sorted_by_rank(self) -> List[Track]:
        """Tracks ordered by rank for display; unranked tracks keep list order at the end."""
        ranked = [t for t in self.tracks if t.rank is not None]
        unranked = [t for t in self.tracks if t.rank is None]
        return sorted(ranked, key=lambda t: t.rank) + unranked


@dataclass
class PlayRequest:
    """Raw playback inputs as collected from the command line.

    Exactly one of ``files`` or ``playlist_file`` may be supplied. The
    positional vectors are correlated with ``files`` by index.
    """

    files: List[str] = field(default_factory=list)
    playlist_file: Optional[str] = None
    base_path: Optional[str] = None
    positions: List[str] = field(default_factory=list)
    skips: List[str] = field(default_factory=list)
    takes: List[str] = field(default_factory=list)
    repeat: bool = False
    volume: Optional[float] = None
