"""qBittorrent Web API v2 client using httpx.

Holds the session cookie and heals it transparently: a request rejected
with HTTP 403 clears the cookie, logs in again and is retried once.
Every failure surfaces as a None result so the scheduler simply tries
again on its next cycle.
"""

import logging
import re
from pathlib import Path
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from torrent_bridge.lib.config import QBittorrentConfig
from torrent_bridge.lib.exceptions import TransportError
from torrent_bridge.models.credential import (
    CredentialEvent,
    SessionCredential,
    transition,
)
from torrent_bridge.models.torrent import Torrent

logger = logging.getLogger(__name__)

_SID_COOKIE = re.compile(r"SID=([^;\s]+)", re.IGNORECASE)


class QBittorrentClient:
    """
    Authenticated session client for the download daemon.

    Example:
        >>> client = QBittorrentClient(get_qbittorrent_config())
        >>> client.add_magnet("magnet:?xt=urn:btih:...", "/mnt/disk1/movies")
    """

    LOGIN_ENDPOINT = "/api/v2/auth/login"
    ADD_ENDPOINT = "/api/v2/torrents/add"
    INFO_ENDPOINT = "/api/v2/torrents/info"
    DELETE_ENDPOINT = "/api/v2/torrents/delete"
    PAUSE_ENDPOINT = "/api/v2/torrents/pause"

    SUCCESS_CODES = (200, 201)
    REJECTED_CODE = 403

    def __init__(
        self,
        config: QBittorrentConfig,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            config: Daemon URL, credentials and timeout
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self._base_url = config.url.rstrip("/")
        self._username = config.username
        self._password = config.password
        self._timeout = config.timeout
        self._transport = transport
        self.credential = SessionCredential.unauthenticated()
        self.login_count = 0

    @property
    def service_name(self) -> str:
        return "qbittorrent"

    # ------------------------------------------------------------------
    # Session handling
    # ------------------------------------------------------------------

    def login(self) -> bool:
        """
        Authenticate and store the SID cookie.

        Returns:
            True if a session token was obtained
        """
        self.login_count += 1
        try:
            response = self._send(
                "POST",
                self.LOGIN_ENDPOINT,
                data={"username": self._username, "password": self._password},
            )
        except TransportError as e:
            logger.warning(f"qBittorrent login failed: {e.message}")
            self.credential = transition(self.credential, CredentialEvent.LOGIN_FAILED)
            return False

        token = self._extract_sid(response)
        if not token:
            logger.error(f"qBittorrent login rejected (HTTP {response.status_code})")
            self.credential = transition(self.credential, CredentialEvent.LOGIN_FAILED)
            return False

        self.credential = transition(self.credential, CredentialEvent.LOGIN_SUCCEEDED, token)
        logger.debug("Authenticated with qBittorrent")
        return True

    @staticmethod
    def _extract_sid(response: httpx.Response) -> Optional[str]:
        for header in response.headers.get_list("set-cookie"):
            match = _SID_COOKIE.search(header)
            if match:
                return match.group(1)
        return None

    def call(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        is_write: bool = False,
        is_multipart: bool = False,
    ) -> Any:
        """
        Call a Web API endpoint with the current session.

        Args:
            endpoint: Path such as /api/v2/torrents/info
            params: Query parameters for reads, form fields for writes.
                For multipart writes, Path values are uploaded as files.
            is_write: POST instead of GET
            is_multipart: Send the write as multipart/form-data

        Returns:
            Parsed JSON body, the raw text body when it is not JSON,
            or None on any failure
        """
        params = params or {}

        # One retry, and only after the daemon rejected the session
        for attempt in range(2):
            if not self.credential.is_authenticated and not self.login():
                return None

            try:
                response = self._request(endpoint, params, is_write, is_multipart)
            except TransportError as e:
                logger.warning(f"qBittorrent request {endpoint} failed: {e.message}")
                return None

            if response.status_code == self.REJECTED_CODE:
                self.credential = transition(self.credential, CredentialEvent.REJECTED)
                if attempt == 0:
                    logger.info(f"qBittorrent session rejected on {endpoint}, re-authenticating")
                    continue
                logger.warning(f"qBittorrent rejected {endpoint} again after re-authentication")
                return None

            if response.status_code not in self.SUCCESS_CODES:
                logger.warning(f"qBittorrent {endpoint} returned HTTP {response.status_code}")
                return None

            return self._parse_body(response)

        return None

    def _request(
        self,
        endpoint: str,
        params: dict[str, Any],
        is_write: bool,
        is_multipart: bool,
    ) -> httpx.Response:
        headers = {"Cookie": f"SID={self.credential.token}"}

        if not is_write:
            return self._send("GET", endpoint, headers=headers, params=params)

        if is_multipart:
            data = {key: value for key, value in params.items() if not isinstance(value, Path)}
            files = {
                key: (value.name, value.read_bytes(), "application/x-bittorrent")
                for key, value in params.items()
                if isinstance(value, Path)
            }
            return self._send("POST", endpoint, headers=headers, data=data, files=files)

        return self._send("POST", endpoint, headers=headers, data=params)

    def _send(self, method: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        url = f"{self._base_url}{endpoint}"
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                return client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise TransportError(
                f"Request timed out after {self._timeout}s",
                service=self.service_name,
                original_error=e,
            )
        except httpx.HTTPError as e:
            raise TransportError(
                f"Network error: {str(e)}",
                service=self.service_name,
                original_error=e,
            )

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text

    # ------------------------------------------------------------------
    # Job API
    # ------------------------------------------------------------------

    def add_magnet(self, uri: str, save_path: str) -> Any:
        """Submit a magnet link. Returns None on failure."""
        return self.call(self.ADD_ENDPOINT, {"urls": uri, "savepath": save_path}, is_write=True)

    def add_torrent_file(self, torrent_path: Path, save_path: str) -> Any:
        """Upload a .torrent file. Returns None on failure."""
        return self.call(
            self.ADD_ENDPOINT,
            {"torrents": torrent_path, "savepath": save_path},
            is_write=True,
            is_multipart=True,
        )

    def list_torrents(self, torrent_filter: str = "all") -> Optional[list[Torrent]]:
        """
        List jobs matching a qBittorrent filter (all, downloading, completed, ...).

        Returns:
            Validated jobs, or None if the daemon could not be queried
        """
        result = self.call(self.INFO_ENDPOINT, {"filter": torrent_filter})
        if not isinstance(result, list):
            if result is not None:
                logger.warning(f"Unexpected torrents/info payload: {str(result)[:200]}")
            return None

        torrents = []
        for entry in result:
            try:
                torrents.append(Torrent.model_validate(entry))
            except ValidationError as e:
                logger.warning(f"Skipping malformed torrent entry: {e}")
        return torrents

    def remove(self, torrent_hash: str) -> Any:
        """Remove a job, keeping its downloaded files."""
        return self.call(
            self.DELETE_ENDPOINT,
            {"hashes": torrent_hash, "deleteFiles": "false"},
            is_write=True,
        )

    def pause(self, torrent_hash: str) -> Any:
        return self.call(self.PAUSE_ENDPOINT, {"hashes": torrent_hash}, is_write=True)
