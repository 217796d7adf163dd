"""Local key-value persistence for the request collection."""
from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from threading import Lock
from typing import Dict, List, Optional, Protocol, Sequence

from frota.core.config import get_settings
from frota.core.logging import logger
from frota.models.requests import RequestStatus, RequestType, VehicleRequest


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...


class LocalStorage:
    """String key-value store kept in a single JSON document on disk."""

    def __init__(self, path: Path | str | None = None) -> None:
        settings = get_settings()
        self._path = Path(path or settings.state_path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        with self._path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        if not isinstance(payload, dict):
            raise ValueError(f"Storage file {self._path} does not hold a key-value object")
        return payload

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            try:
                state = self._read()
            except ValueError as exc:
                logger.warning(
                    "Storage file corrupt; rewriting it from scratch",
                    path=str(self._path),
                    error=str(exc),
                )
                state = {}
            state[key] = value
            tmp_path = self._path.with_suffix(".tmp")
            with tmp_path.open("w", encoding="utf-8") as handle:
                json.dump(state, handle, indent=2, ensure_ascii=False)
            tmp_path.replace(self._path)


class MemoryStorage:
    """In-process key-value store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value


def seed_requests() -> List[VehicleRequest]:
    """Fixed dataset used when nothing usable is stored."""
    now = datetime.now(timezone.utc)
    return [
        VehicleRequest(
            id="REQ-001",
            created_at=now,
            client_name="Empresa ABC Lda",
            client_contact="912345678",
            request_type=RequestType.RENTAL,
            pickup_location="Aeroporto",
            dropoff_location="Aeroporto",
            pickup_date=datetime(2026, 2, 10, 10, 0),
            return_date=datetime(2026, 2, 15, 10, 0),
            vehicle_group="Grupo C (Compacto)",
            operator_name="João Silva",
            status=RequestStatus.PENDING,
            notes="Cliente VIP",
        ),
        VehicleRequest(
            id="REQ-002",
            created_at=now - timedelta(days=1),
            client_name="Hotel Solar",
            client_contact="210000000",
            request_type=RequestType.TRANSFER,
            pickup_location="Hotel Solar",
            dropoff_location="Centro de Congressos",
            pickup_date=datetime(2026, 2, 8, 9, 0),
            return_date=datetime(2026, 2, 8, 9, 45),
            vehicle_group="Van 9 Lugares",
            assigned_driver="Carlos Motorista",
            operator_name="Ana Sousa",
            status=RequestStatus.CONFIRMED,
        ),
    ]


class RequestStore:
    """Whole-collection load/save of requests under one storage key."""

    def __init__(self, storage: KeyValueStorage | None = None, key: str | None = None) -> None:
        settings = get_settings()
        self._storage = storage if storage is not None else LocalStorage()
        self._key = key or settings.storage_key

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> List[VehicleRequest]:
        """Read the stored collection, falling back to the seed dataset."""
        try:
            raw = self._storage.get_item(self._key)
        except Exception as exc:
            logger.error("Failed to read stored requests; using seed dataset", key=self._key, error=str(exc))
            return seed_requests()

        if raw is None:
            logger.info("No stored requests found; using seed dataset", key=self._key)
            return seed_requests()

        try:
            payload = json.loads(raw)
            if not isinstance(payload, list):
                raise ValueError(f"expected a list, got {type(payload).__name__}")
            records = [VehicleRequest.model_validate(item) for item in payload]
        except (TypeError, ValueError) as exc:
            logger.error("Stored requests are unreadable; using seed dataset", key=self._key, error=str(exc))
            return seed_requests()

        logger.debug("Loaded stored requests", key=self._key, count=len(records))
        return records

    def save(self, records: Sequence[VehicleRequest]) -> bool:
        """Write the full collection. Returns False when the write failed."""
        try:
            blob = json.dumps(
                [record.model_dump(mode="json", by_alias=True, exclude_none=True) for record in records],
                ensure_ascii=False,
            )
            self._storage.set_item(self._key, blob)
        except Exception as exc:
            logger.error("Failed to save requests", key=self._key, count=len(records), error=str(exc))
            return False
        return True
