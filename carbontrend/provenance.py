# -*- coding: utf-8 -*-
"""
Provenance Tracking for the CarbonTrend engine

SHA-256 based audit trail of analyses, projections and Paris evaluations.
Every record is chained to the previous one so the log is tamper-evident,
and records are grouped per entity for lookup.

Example:
    >>> from carbontrend.provenance import ProvenanceTracker
    >>> tracker = ProvenanceTracker()
    >>> chain_hash = tracker.record("entity", "Q123", "analyze", tracker.build_hash({"a": 1}))
    >>> valid, chain = tracker.verify_chain("entity", "Q123")
    >>> assert valid is True
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    """Return current UTC datetime with microseconds zeroed."""
    return datetime.now(timezone.utc).replace(microsecond=0)


class ProvenanceTracker:
    """Chain-hashed log of trend engine operations.

    Attributes:
        _chain_store: Entries grouped by ``entity_type:entity_id``.
        _global_chain: All entries in recording order.
        _last_chain_hash: Most recent chain hash for linking.
        _lock: Thread-safety lock.
    """

    _GENESIS_HASH = hashlib.sha256(b"carbontrend-genesis").hexdigest()

    def __init__(self) -> None:
        self._chain_store: Dict[str, List[Dict[str, Any]]] = {}
        self._global_chain: List[Dict[str, Any]] = []
        self._last_chain_hash: str = self._GENESIS_HASH
        self._lock = threading.Lock()
        logger.debug("ProvenanceTracker initialized")

    def record(
        self,
        entity_type: str,
        entity_id: str,
        action: str,
        data_hash: str,
    ) -> str:
        """Record an operation on an entity.

        Args:
            entity_type: Kind of entity (``entity``, ``series``, ``batch``).
            entity_id: Entity identifier.
            action: Operation performed (analyze, project, paris).
            data_hash: SHA-256 hash of the operation result.

        Returns:
            Chain hash of the new entry.
        """
        timestamp = _utcnow().isoformat()
        store_key = f"{entity_type}:{entity_id}"
        entry = {
            "entity_type": entity_type,
            "entity_id": entity_id,
            "action": action,
            "data_hash": data_hash,
            "timestamp": timestamp,
            "previous_hash": "",
            "chain_hash": "",
        }

        with self._lock:
            entry["previous_hash"] = self._last_chain_hash
            chain_hash = self._compute_chain_hash(
                self._last_chain_hash, data_hash, action, timestamp,
            )
            entry["chain_hash"] = chain_hash
            self._chain_store.setdefault(store_key, []).append(entry)
            self._global_chain.append(entry)
            self._last_chain_hash = chain_hash

        logger.debug(
            "Recorded provenance: %s/%s action=%s hash=%s",
            entity_type, entity_id, action, chain_hash[:16],
        )
        return chain_hash

    def verify_chain(
        self,
        entity_type: str,
        entity_id: str,
    ) -> Tuple[bool, List[Dict[str, Any]]]:
        """Recompute the chain hashes of an entity's entries.

        Returns:
            Tuple of (is_valid, chain_entries). An unknown entity is valid
            with an empty chain.
        """
        store_key = f"{entity_type}:{entity_id}"
        with self._lock:
            chain = list(self._chain_store.get(store_key, []))

        for entry in chain:
            expected = self._compute_chain_hash(
                entry["previous_hash"], entry["data_hash"],
                entry["action"], entry["timestamp"],
            )
            if expected != entry["chain_hash"]:
                logger.warning(
                    "Chain verification failed for %s/%s at action %s",
                    entity_type, entity_id, entry["action"],
                )
                return False, chain
        return True, chain

    def get_chain(self, entity_type: str, entity_id: str) -> List[Dict[str, Any]]:
        """Entries recorded for an entity, oldest first."""
        store_key = f"{entity_type}:{entity_id}"
        with self._lock:
            return list(self._chain_store.get(store_key, []))

    def get_global_chain(self, limit: int = 100) -> List[Dict[str, Any]]:
        """Most recent entries across all entities, newest first."""
        with self._lock:
            return list(reversed(self._global_chain[-limit:]))

    def _compute_chain_hash(
        self,
        previous_hash: str,
        data_hash: str,
        action: str,
        timestamp: str,
    ) -> str:
        combined = json.dumps({
            "previous": previous_hash,
            "data": data_hash,
            "action": action,
            "timestamp": timestamp,
        }, sort_keys=True)
        return hashlib.sha256(combined.encode("utf-8")).hexdigest()

    @property
    def entry_count(self) -> int:
        with self._lock:
            return len(self._global_chain)

    @property
    def entity_count(self) -> int:
        with self._lock:
            return len(self._chain_store)

    def export_json(self) -> str:
        """Export all provenance records as a JSON string."""
        with self._lock:
            data = list(self._global_chain)
        return json.dumps(data, indent=2, default=str)

    def build_hash(self, data: Any) -> str:
        """Build a SHA-256 hash for arbitrary JSON-serialisable data."""
        serialized = json.dumps(data, sort_keys=True, default=str)
        return hashlib.sha256(serialized.encode("utf-8")).hexdigest()


__all__ = [
    "ProvenanceTracker",
]
