"""
Jamendo catalog client: track search and lookup.

"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

JAMENDO_BASE_URL = "https://api.jamendo.com/v3.0"
_TRACK_INCLUDE = "musicinfo+stats+licenses"


def to_track(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Reduce a Jamendo track record to the fields the player uses."""
    return {
        "id": raw.get("id"),
        "name": raw.get("name"),
        "artist": raw.get("artist_name"),
        "duration": raw.get("duration"),
        "audio": raw.get("audio"),
        "audiodownload": raw.get("audiodownload"),
        "image": raw.get("image") or raw.get("album_image"),
        "album": raw.get("album_name"),
    }


class JamendoClient:
    """
    Thin async wrapper over ``GET /tracks/``.

    Parameters
    ----------
    client_id : str
        Jamendo API client id.
    base_url : str
        API root, without the ``/tracks/`` suffix.
    timeout : float
        Per-request timeout in seconds.
    transport : httpx.AsyncBaseTransport, optional
        Injected transport (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        client_id: str,
        base_url: str = JAMENDO_BASE_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = client_id
        self.tracks_url = base_url.rstrip("/") + "/tracks/"
        self.timeout = timeout
        self._transport = transport

    async def _get_tracks(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        query = {"client_id": self.client_id, "format": "json", **params}
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            resp = await client.get(self.tracks_url, params=query)
            resp.raise_for_status()
            data = resp.json()
        if not isinstance(data, dict):
            raise ValueError("unexpected Jamendo response shape")
        results = data.get("results") or []
        if not isinstance(results, list) or not all(isinstance(r, dict) for r in results):
            raise ValueError("unexpected Jamendo results shape")
        return results

    async def search(self, query: str, limit: int = 10) -> List[Dict[str, Any]]:
        results = await self._get_tracks({
            "limit": limit,
            "search": query,
            "include": _TRACK_INCLUDE,
            "groupby": "artist_id",
        })
        logger.debug("Jamendo search %r returned %d tracks", query, len(results))
        return [to_track(r) for r in results]

    async def get_track(self, track_id: str) -> Optional[Dict[str, Any]]:
        """Return the track, or ``None`` if Jamendo has no such id."""
        results = await self._get_tracks({"id": track_id, "include": _TRACK_INCLUDE})
        if not results:
            return None
        return to_track(results[0])
