"""Spotify Web API implementation of the playback capability."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from .auth import AuthError, SpotifyAuth
from .controller import NoActiveDeviceError, PlaybackError, PlaybackState


log = logging.getLogger(__name__)

API_BASE_URL = "https://api.spotify.com/v1"


class SpotifyController:
    """Controls the user's active Spotify device."""

    def __init__(
        self,
        auth: SpotifyAuth,
        *,
        base_url: str = API_BASE_URL,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._auth = auth
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        _retried: bool = False,
    ) -> httpx.Response:
        """Authenticated request.  401 refreshes the token and retries once."""
        try:
            token = await self._auth.get_access_token()
        except AuthError as exc:
            raise PlaybackError(str(exc)) from exc
        if not token:
            raise PlaybackError("Not logged in to Spotify")

        client = await self._get_client()
        try:
            response = await client.request(
                method,
                path,
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.RequestError as exc:
            raise PlaybackError(f"{method} {path} failed: {exc}") from exc

        if response.status_code == 401 and not _retried:
            log.info("Spotify token rejected, refreshing")
            try:
                await self._auth.refresh_access_token()
            except AuthError as exc:
                raise PlaybackError(str(exc)) from exc
            return await self.request(method, path, params=params, _retried=True)
        if response.status_code == 404:
            raise NoActiveDeviceError("No active device found")
        if response.is_error:
            log.warning("%s %s -> HTTP %d", method, path, response.status_code)
            raise PlaybackError(f"{method} {path} failed: HTTP {response.status_code}")
        return response

    # ── capability ────────────────────────────────────────────────────

    async def get_state(self) -> Optional[PlaybackState]:
        response = await self.request("GET", "/me/player")
        if response.status_code == 204 or not response.content:
            return None
        data = response.json()
        device = data.get("device") or {}
        item = data.get("item") or {}
        artists = item.get("artists") or [{}]
        return PlaybackState(
            is_playing=bool(data.get("is_playing")),
            volume_percent=device.get("volume_percent"),
            device_name=device.get("name"),
            track_name=item.get("name"),
            artist_name=artists[0].get("name"),
        )

    async def set_volume(self, percent: int) -> None:
        volume = max(0, min(100, int(percent)))
        await self.request("PUT", "/me/player/volume", params={"volume_percent": volume})

    async def play(self) -> None:
        await self.request("PUT", "/me/player/play")

    async def pause(self) -> None:
        await self.request("PUT", "/me/player/pause")
