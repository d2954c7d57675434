"""
Base adapter interface for vendor feed adapters.

Adapters read an already-downloaded feed dump from disk and hand back
normalized vendor documents. Downloading the feeds is left to external
fetchers; pointing an adapter at their output is the integration seam.
"""
import json
import logging
import traceback
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from vulnstore.models import Vendor

logger = logging.getLogger(__name__)


@dataclass
class SourceHealth:
    """Health status of a source adapter."""
    source_id: str
    is_healthy: bool
    last_fetch: Optional[datetime]
    records_fetched: int
    error_message: Optional[str] = None


class BaseAdapter(ABC):
    """
    Abstract base class for vendor feed adapters.

    Subclasses set `vendor` and implement normalize(). fetch() never raises:
    failures are recorded in the adapter's health and an empty list is returned.
    """

    vendor: Vendor

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.source_id: str = self.vendor.field
        self.path = Path(config["path"]) if config.get("path") else None
        self._last_fetch: Optional[datetime] = None
        self._last_error: Optional[str] = None
        self._records_fetched: int = 0

    def fetch(self) -> List[Any]:
        """
        Load the feed dump and return normalized documents.

        Returns:
            List of documents of the adapter's vendor model
        """
        self._last_fetch = datetime.utcnow()

        try:
            documents = self.normalize(self._load_data())
            self._records_fetched = len(documents)
            self._last_error = None
            return documents

        except Exception as e:
            error_msg = f"{type(e).__name__}: {str(e)}"
            self._last_error = error_msg
            self._records_fetched = 0
            logger.error(f"{self.source_id} adapter failed: {error_msg}")
            logger.debug(f"Full traceback:\n{traceback.format_exc()}")
            return []

    @abstractmethod
    def normalize(self, raw: Any) -> List[Any]:
        """
        Transform the parsed feed into vendor documents.

        Args:
            raw: Parsed JSON content of the feed dump

        Returns:
            List of normalized documents
        """
        pass

    def _load_data(self) -> Any:
        if self.path is None:
            raise ValueError(f"No path configured for {self.source_id}")
        if not self.path.exists():
            raise FileNotFoundError(f"No feed dump at {self.path}")
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def get_health(self) -> SourceHealth:
        """Return health status of this adapter."""
        return SourceHealth(
            source_id=self.source_id,
            is_healthy=self._last_error is None,
            last_fetch=self._last_fetch,
            records_fetched=self._records_fetched,
            error_message=self._last_error
        )
