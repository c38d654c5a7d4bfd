"""
Bounded proof ledger backed by a durable key-value store
"""
import json
import logging
from typing import Dict, List, Optional

from bson.binary import Binary
from pydantic import TypeAdapter

from ..config import settings
from ..models import ProofRecord

logger = logging.getLogger(__name__)

_records_adapter = TypeAdapter(List[ProofRecord])


class InMemoryKeyValueStore:
    """Process-local store used in tests and when MongoDB is disabled"""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._data: Dict[str, bytes] = dict(initial or {})

    async def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    async def set(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)


class MongoKeyValueStore:
    """Key-value store over a MongoDB collection, one document per key"""

    def __init__(self, database, collection_name: str = "kv_store"):
        self.collection = database[collection_name]

    async def get(self, key: str) -> Optional[bytes]:
        doc = await self.collection.find_one({"_id": key})
        if not doc:
            return None
        return bytes(doc["value"])

    async def set(self, key: str, value: bytes) -> None:
        await self.collection.replace_one(
            {"_id": key},
            {"_id": key, "value": Binary(value)},
            upsert=True
        )


class ProofLedger:
    """
    Most-recent-first history of issued proofs

    Inserting a known hash is a no-op; inserting beyond capacity evicts the
    oldest record. Every mutation is written through to the store, and a
    store failure never takes the in-memory ledger down with it.
    """

    def __init__(self, store=None, key: Optional[str] = None, capacity: Optional[int] = None):
        self.store = store or InMemoryKeyValueStore()
        self.key = key or settings.ledger_key
        self.capacity = capacity or settings.ledger_capacity
        self._records: List[ProofRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, proof_hash: str) -> bool:
        return self.lookup(proof_hash) is not None

    async def load(self) -> List[ProofRecord]:
        """Replace the in-memory records with the stored ones; empty on any failure"""
        try:
            raw = await self.store.get(self.key)
            if raw is None:
                records = []
            else:
                records = _records_adapter.validate_json(raw)
        except Exception as e:
            logger.error(f"Failed to load proof ledger '{self.key}', starting empty: {e}")
            records = []

        self._records = self._deduplicate(records)[:self.capacity]
        logger.info(f"Loaded {len(self._records)} proof record(s) from ledger '{self.key}'")
        return self.all()

    async def save(self) -> bool:
        try:
            payload = json.dumps(
                [record.model_dump(mode="json") for record in self._records]
            ).encode("utf-8")
            await self.store.set(self.key, payload)
            return True
        except Exception as e:
            logger.error(f"Failed to save proof ledger '{self.key}': {e}")
            return False

    async def insert(self, record: ProofRecord) -> bool:
        """
        Add a record at the head of the ledger

        Returns:
            True if the record was added, False if its hash was already present
        """
        if self.lookup(record.hash) is not None:
            logger.info(f"Proof {record.hash[:12]}... already in ledger")
            return False

        self._records = [record] + self._records[:self.capacity - 1]
        await self.save()
        return True

    def lookup(self, proof_hash: str) -> Optional[ProofRecord]:
        for record in self._records:
            if record.hash == proof_hash:
                return record
        return None

    def all(self) -> List[ProofRecord]:
        return list(self._records)

    async def clear(self):
        self._records = []
        await self.save()

    @staticmethod
    def _deduplicate(records: List[ProofRecord]) -> List[ProofRecord]:
        seen = set()
        unique = []
        for record in records:
            if record.hash not in seen:
                seen.add(record.hash)
                unique.append(record)
        return unique


# Global ledger instance; main.py swaps in a MongoDB store when enabled
proof_ledger = ProofLedger()
