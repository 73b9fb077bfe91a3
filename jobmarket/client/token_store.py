"""Client-side credential persistence.

A JSON file under the user's home directory is the primary store. When it
cannot be read or written (read-only home, disk full, permissions) the
store falls back to process memory for the rest of the session.
"""
from __future__ import annotations

import json
import os
from pathlib import Path

from jobmarket.core.logging import get_logger

log = get_logger(__name__)

TOKEN_FILE_ENV = "JOBMARKET_TOKEN_FILE"
DEFAULT_TOKEN_FILE = Path.home() / ".jobmarket" / "credentials.json"

ACCESS_KEY = "access_token"
REFRESH_KEY = "refresh_token"


class MemoryTokenStore:
    """Tokens held in process memory only."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def load(self) -> dict[str, str]:
        return dict(self._data)

    def save(self, data: dict[str, str]) -> None:
        self._data = dict(data)

    def clear(self) -> None:
        self._data = {}


class FileTokenStore:
    """Tokens in a JSON file readable only by the current user."""

    def __init__(self, path: Path | str | None = None) -> None:
        if path is None:
            path = os.environ.get(TOKEN_FILE_ENV) or DEFAULT_TOKEN_FILE
        self.path = Path(path)

    def load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not contain a JSON object")
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        tmp.unlink(missing_ok=True)
        # Created 0600 up front; a stale temp file would keep its old mode
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(json.dumps(data))
        os.replace(tmp, self.path)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class CredentialStore:
    """Save, read and clear the access/refresh pair.

    Uses the primary store until it fails once, then the fallback.
    """

    def __init__(
        self,
        primary: FileTokenStore | MemoryTokenStore | None = None,
        fallback: MemoryTokenStore | None = None,
    ) -> None:
        self.primary = primary if primary is not None else FileTokenStore()
        self.fallback = fallback if fallback is not None else MemoryTokenStore()
        self.using_fallback = False

    def save(self, access_token: str, refresh_token: str | None = None) -> None:
        data = {ACCESS_KEY: access_token}
        if refresh_token:
            data[REFRESH_KEY] = refresh_token
        self.fallback.save(data)
        if self.using_fallback:
            return
        try:
            self.primary.save(data)
        except OSError as exc:
            log.warning("Credential file unavailable (%s), keeping tokens in memory", exc)
            self.using_fallback = True

    def get_access_token(self) -> str | None:
        return self._load().get(ACCESS_KEY)

    def get_refresh_token(self) -> str | None:
        return self._load().get(REFRESH_KEY)

    def clear(self) -> None:
        self.fallback.clear()
        try:
            self.primary.clear()
        except OSError as exc:
            log.warning("Could not remove credential file: %s", exc)

    def _load(self) -> dict[str, str]:
        if self.using_fallback:
            return self.fallback.load()
        try:
            return self.primary.load()
        except (OSError, ValueError) as exc:
            log.warning("Credential file unreadable (%s), using in-memory tokens", exc)
            self.using_fallback = True
            return self.fallback.load()
