"""
Flowchart Store

In-memory flowchart storage with an optional pickle cache on disk.
Good for development and testing; use Neo4jClient for production.
"""

import pickle
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Dict, List

from .schema import Flowchart

logger = logging.getLogger(__name__)


class DuplicateFlowchartError(Exception):
    """Raised when creating a flowchart whose _id is already taken"""

    def __init__(self, flowchart_id: int):
        super().__init__(f"Flowchart {flowchart_id} already exists")
        self.flowchart_id = flowchart_id


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FlowchartStore:
    """
    Stores flowchart documents keyed by their numeric _id.

    Usage:
        store = FlowchartStore(cache_path="data/flowcharts.pkl").load()

        store.create(flowchart)
        flowchart = store.get(1)
        store.delete(1)
    """

    def __init__(self, cache_path: Optional[str] = None):
        """
        Initialize the store.

        Args:
            cache_path: Pickle file mirrored after every write (None disables it)
        """
        self.cache_path = Path(cache_path) if cache_path else None
        self.flowcharts: Dict[int, Flowchart] = {}

    def create(self, flowchart: Flowchart) -> Flowchart:
        """Insert a new flowchart, stamping createdAt/updatedAt"""
        if flowchart.id in self.flowcharts:
            raise DuplicateFlowchartError(flowchart.id)

        now = utcnow()
        stored = flowchart.model_copy(update={'created_at': now, 'updated_at': now})
        self.flowcharts[stored.id] = stored
        self._persist()
        return stored

    def get(self, flowchart_id: int) -> Optional[Flowchart]:
        """Get a flowchart by _id"""
        return self.flowcharts.get(flowchart_id)

    def list_all(self) -> List[Flowchart]:
        """All flowcharts ordered by _id"""
        return [self.flowcharts[key] for key in sorted(self.flowcharts)]

    def replace(self, flowchart: Flowchart) -> Flowchart:
        """Overwrite an existing flowchart, keeping createdAt and bumping updatedAt"""
        existing = self.flowcharts.get(flowchart.id)
        if existing is None:
            raise KeyError(flowchart.id)

        stored = flowchart.model_copy(update={
            'created_at': existing.created_at,
            'updated_at': utcnow()
        })
        self.flowcharts[stored.id] = stored
        self._persist()
        return stored

    def delete(self, flowchart_id: int) -> bool:
        """Delete a flowchart; returns False when it did not exist"""
        if self.flowcharts.pop(flowchart_id, None) is None:
            return False
        self._persist()
        return True

    def count(self) -> int:
        return len(self.flowcharts)

    def _persist(self):
        if self.cache_path:
            self.save(str(self.cache_path))

    def save(self, path: str):
        """Save flowcharts to pickle file"""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, 'wb') as f:
            pickle.dump({
                'flowcharts': {key: fc.model_dump(by_alias=True) for key, fc in self.flowcharts.items()}
            }, f)
        logger.debug(f"Saved {len(self.flowcharts)} flowcharts to {target}")

    def load(self, path: Optional[str] = None) -> "FlowchartStore":
        """Load flowcharts from pickle file (missing file leaves the store empty)"""
        source = Path(path) if path else self.cache_path
        if source is None or not source.exists():
            return self

        with open(source, 'rb') as f:
            data = pickle.load(f)
            self.flowcharts = {
                int(key): Flowchart.model_validate(raw)
                for key, raw in data['flowcharts'].items()
            }
        logger.info(f"Loaded {len(self.flowcharts)} flowcharts from {source}")
        return self
