import json
import logging
import time
from pathlib import Path
from typing import List, Dict, Any, Optional

from subbill.config import settings

logger = logging.getLogger(__name__)


class PopularServicesCache:
    """
    Best-effort on-disk copy of the last popular-services list.
    Only read when the remote fetch fails; no expiry or eviction.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or settings.popular_cache_path)

    def save(self, services: List[Dict[str, Any]]) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            payload = {"saved_at": time.time(), "services": services}
            self.path.write_text(json.dumps(payload, ensure_ascii=False, default=str), encoding="utf-8")
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Could not write popular services cache {self.path}: {e}")
            return False

    def load(self) -> Optional[List[Dict[str, Any]]]:
        if not self.path.exists():
            return None
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            return payload.get("services") or []
        except (OSError, ValueError, AttributeError) as e:
            logger.warning(f"Could not read popular services cache {self.path}: {e}")
            return None
