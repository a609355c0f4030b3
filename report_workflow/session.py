"""
Client-side session storage: bearer token and the signed-in user.

Stored as a small JSON file so the CLI keeps a login between runs.
Values may be JSON-encoded strings or raw strings; both read back the same.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .config import ENV_SESSION_FILE, TOKEN_KEYS, USER_KEY

DEFAULT_SESSION_FILE = Path.home() / ".edulearn" / "session.json"


def parse_stored(raw: Any) -> Any:
    """Decode a stored value; text that is not JSON is returned as-is."""
    if raw is None or raw == "":
        return None
    if not isinstance(raw, str):
        return raw
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


class SessionStore:
    """Token and user record persisted in a JSON file."""

    def __init__(self, path: Optional[Path] = None):
        env_path = os.getenv(ENV_SESSION_FILE)
        self.path = Path(path or env_path or DEFAULT_SESSION_FILE)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError:
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2))

    def get_token(self) -> Optional[str]:
        data = self._read()
        raw = next((data[key] for key in TOKEN_KEYS if data.get(key)), None)
        parsed = parse_stored(raw)
        if not isinstance(parsed, str):
            return None
        clean = parsed.strip().strip('"')
        return clean or None

    def set_token(self, token: Optional[str]) -> None:
        data = self._read()
        if token:
            data[TOKEN_KEYS[0]] = token
        else:
            for key in TOKEN_KEYS:
                data.pop(key, None)
        self._write(data)

    def get_user(self) -> Optional[Dict[str, Any]]:
        parsed = parse_stored(self._read().get(USER_KEY))
        return parsed if isinstance(parsed, dict) else None

    def set_user(self, user: Optional[Dict[str, Any]]) -> None:
        data = self._read()
        if user:
            data[USER_KEY] = json.dumps(user)
        else:
            data.pop(USER_KEY, None)
        self._write(data)

    def clear(self) -> None:
        self.set_token(None)
        self.set_user(None)
