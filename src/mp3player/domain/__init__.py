"""Domain layer for mp3player.

- playlists: resolving command-line inputs and playlist documents
- playback: scheduling resolved tracks onto output sinks
"""
