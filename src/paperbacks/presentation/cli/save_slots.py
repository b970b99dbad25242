"""File-system helpers for the quick-save slot."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

from paperbacks.presentation.cli import config

logger = logging.getLogger(__name__)


class QuickSaveStore:
    """Single quick-save slot on disk that skips identical rewrites."""

    def __init__(self, base_dir: Path | str | None = None, filename: str = "quick_save.json") -> None:
        self._base_dir = Path(base_dir) if base_dir is not None else config.get_save_dir()
        self._filename = filename
        self._last_written: str | None = None

    @property
    def path(self) -> Path:
        return self._base_dir / self._filename

    def exists(self) -> bool:
        """Return True if the slot has data on disk."""
        return self.path.exists()

    def read(self) -> Dict[str, Any] | None:
        """Load and parse the stored payload, or None when nothing is saved."""
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        return json.loads(text)

    def write(self, payload: Dict[str, Any]) -> bool:
        """Persist the payload; returns False when it matches the last write."""
        # The timestamp changes on every save, so compare without it.
        comparable = json.dumps({k: v for k, v in payload.items() if k != "timestamp"}, sort_keys=True)
        if comparable == self._last_written:
            logger.debug("Quick save unchanged; skipping write.")
            return False
        self._base_dir.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        self._last_written = comparable
        logger.info("Quick save written to %s.", self.path)
        return True
