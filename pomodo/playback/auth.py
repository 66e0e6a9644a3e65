"""Spotify login with PKCE (Proof Key for Code Exchange).

No client secret is involved.  The flow is:

    auth = SpotifyAuth(client_id, redirect_uri)
    url = auth.begin_login()            # open in the browser
    await auth.complete_login(callback)  # the URL Spotify redirected to

Tokens are kept in a small JSON file next to the settings.
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
import secrets
import string
import time
from pathlib import Path
from typing import Any, Optional
from urllib.parse import parse_qs, urlencode, urlparse

import httpx

from ..settings import APP_SUPPORT_DIR


log = logging.getLogger(__name__)

AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
TOKEN_URL = "https://accounts.spotify.com/api/token"
SCOPES = "user-read-playback-state user-modify-playback-state"
TOKEN_PATH = APP_SUPPORT_DIR / "spotify_tokens.json"

EXPIRY_MARGIN_SECONDS = 5 * 60
_STATE_ALPHABET = string.ascii_letters + string.digits


class AuthError(Exception):
    """The login or token refresh could not be completed."""


# ── PKCE helpers ──────────────────────────────────────────────────────────


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def generate_code_verifier() -> str:
    return _b64url(secrets.token_bytes(64))


def generate_code_challenge(verifier: str) -> str:
    return _b64url(hashlib.sha256(verifier.encode("ascii")).digest())


def generate_state(length: int = 16) -> str:
    return "".join(secrets.choice(_STATE_ALPHABET) for _ in range(length))


# ── auth ──────────────────────────────────────────────────────────────────


class SpotifyAuth:
    """Holds the Spotify tokens and knows how to obtain and refresh them."""

    def __init__(
        self,
        client_id: str,
        redirect_uri: str,
        *,
        token_path: Path | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock=time.time,
    ) -> None:
        self.client_id = client_id
        self.redirect_uri = redirect_uri
        self._token_path = token_path or TOKEN_PATH
        self._transport = transport
        self._clock = clock

        self._code_verifier: Optional[str] = None
        self._state: Optional[str] = None
        self._tokens: dict[str, Any] = self._load_tokens()

    # ── login ─────────────────────────────────────────────────────────

    def begin_login(self) -> str:
        """Return the authorization URL and remember verifier + state."""
        self._code_verifier = generate_code_verifier()
        self._state = generate_state()
        params = {
            "client_id": self.client_id,
            "response_type": "code",
            "redirect_uri": self.redirect_uri,
            "scope": SCOPES,
            "code_challenge_method": "S256",
            "code_challenge": generate_code_challenge(self._code_verifier),
            "state": self._state,
        }
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    async def complete_login(self, callback_url: str) -> None:
        """Exchange the code carried by *callback_url* for tokens."""
        query = parse_qs(urlparse(callback_url).query)
        if "error" in query:
            raise AuthError(f"Authorization denied: {query['error'][0]}")
        if self._code_verifier is None or self._state is None:
            raise AuthError("No login in progress")
        if query.get("state", [None])[0] != self._state:
            raise AuthError("State mismatch in authorization callback")
        code = query.get("code", [None])[0]
        if not code:
            raise AuthError("Authorization callback carried no code")

        data = await self._token_request({
            "client_id": self.client_id,
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.redirect_uri,
            "code_verifier": self._code_verifier,
        })
        self._code_verifier = None
        self._state = None
        self._store(data)
        log.info("Spotify login complete")

    def is_logged_in(self) -> bool:
        return bool(self._tokens.get("access_token"))

    def logout(self) -> None:
        self._tokens = {}
        if self._token_path.exists():
            self._token_path.unlink()
        log.info("Spotify tokens cleared")

    # ── tokens ────────────────────────────────────────────────────────

    async def get_access_token(self) -> Optional[str]:
        """A usable access token, refreshed if close to expiry."""
        token = self._tokens.get("access_token")
        expires_at = self._tokens.get("expires_at")
        if not token or expires_at is None:
            return None
        if self._clock() >= expires_at - EXPIRY_MARGIN_SECONDS:
            log.info("Spotify token expiring, refreshing")
            return await self.refresh_access_token()
        return token

    async def refresh_access_token(self) -> str:
        refresh_token = self._tokens.get("refresh_token")
        if not refresh_token:
            raise AuthError("No refresh token available")
        data = await self._token_request({
            "client_id": self.client_id,
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        })
        # Spotify may or may not rotate the refresh token.
        data.setdefault("refresh_token", refresh_token)
        self._store(data)
        return data["access_token"]

    # ── internal ──────────────────────────────────────────────────────

    async def _token_request(self, form: dict[str, str]) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=10) as client:
                response = await client.post(TOKEN_URL, data=form)
        except httpx.RequestError as exc:
            raise AuthError(f"Token request failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError:
            data = {}
        if response.is_error or "access_token" not in data:
            detail = data.get("error_description") or data.get("error") or response.status_code
            raise AuthError(f"Token endpoint rejected request: {detail}")
        return data

    def _store(self, data: dict[str, Any]) -> None:
        self._tokens = {
            "access_token": data["access_token"],
            "refresh_token": data.get("refresh_token"),
            "expires_at": self._clock() + int(data.get("expires_in", 3600)),
        }
        self._token_path.parent.mkdir(parents=True, exist_ok=True)
        self._token_path.write_text(json.dumps(self._tokens, indent=2) + "\n", encoding="utf-8")

    def _load_tokens(self) -> dict[str, Any]:
        if not self._token_path.exists():
            return {}
        try:
            return json.loads(self._token_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            log.warning("Ignoring unreadable token file %s: %s", self._token_path, exc)
            return {}
