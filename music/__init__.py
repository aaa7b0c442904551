"""
music — third-party catalog client used by the music search routes.
"""

from music.jamendo import JamendoClient, to_track

__all__ = ["JamendoClient", "to_track"]
