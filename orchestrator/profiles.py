import json
import logging
from pathlib import Path
from typing import Dict, Optional

from pydantic import ValidationError

from .models import UserProfile


logger = logging.getLogger(__name__)


class ProfileStore:
    """Read-only user profiles from a JSON document mapping user id -> profile.

    The document is re-read whenever its modification time changes.
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self._cache: Optional[Dict[str, dict]] = None
        self._mtime: Optional[float] = None

    def _read(self) -> Dict[str, dict]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.info("profile store %s not found, continuing without profiles", self.path)
            raw = {}
        except (OSError, ValueError) as e:
            logger.warning("profile store %s unreadable: %s", self.path, e)
            raw = {}
        return raw if isinstance(raw, dict) else {}

    def _modified_at(self) -> Optional[float]:
        try:
            return self.path.stat().st_mtime
        except OSError:
            return None

    def load(self) -> Dict[str, dict]:
        mtime = self._modified_at()
        if self._cache is None or mtime != self._mtime:
            self._cache = self._read()
            self._mtime = mtime
        return self._cache

    def get(self, user_id: Optional[str]) -> Optional[UserProfile]:
        if not user_id:
            return None
        data = self.load().get(user_id)
        if not isinstance(data, dict):
            return None
        try:
            return UserProfile.model_validate(data)
        except ValidationError as e:
            logger.warning("profile %s is malformed: %s", user_id, e)
            return None
