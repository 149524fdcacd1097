"""Local persistent cache of the in-progress form session."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from app.qualification.session import LeadSession

logger = logging.getLogger(__name__)

CACHE_KEY = "quantumSolarSplashFormCompetitor"
DEFAULT_CACHE_DIR = Path.home() / ".cache" / "solarlead"


class LocalSessionCache:
    """One JSON file named after CACHE_KEY, overwritten on every save.

    Writes are best-effort: I/O errors are logged and never raised.
    """

    def __init__(self, directory: Optional[Path] = None):
        self.path = Path(directory or DEFAULT_CACHE_DIR) / f"{CACHE_KEY}.json"

    def save(self, session: LeadSession) -> bool:
        stamped = session.model_copy(update={"last_saved": datetime.utcnow()})
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(stamped.model_dump_json(by_alias=True))
            return True
        except OSError as e:
            logger.warning("Failed to save form session to %s: %s", self.path, e)
            return False

    def load(self) -> Optional[LeadSession]:
        if not self.path.exists():
            return None
        try:
            return LeadSession.model_validate(json.loads(self.path.read_text()))
        except (OSError, ValueError, ValidationError) as e:
            logger.warning("Ignoring unreadable form cache %s: %s", self.path, e)
            return None

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Failed to clear form cache %s: %s", self.path, e)
