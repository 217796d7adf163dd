"""In-memory request collection with persistence on every mutation."""
from __future__ import annotations

import re
from datetime import datetime, timezone
from threading import RLock
from typing import Any, Callable, Dict, Iterable, List, Optional

from frota.core.logging import logger
from frota.models.requests import (
    ALL,
    RequestFilters,
    RequestStatus,
    RequestType,
    VehicleRequest,
    VehicleRequestCreate,
    VehicleRequestUpdate,
)
from frota.services.request_store import RequestStore


ChangeListener = Callable[[List[VehicleRequest]], Any]

_IMMUTABLE_FIELDS = {"id", "created_at"}
_NULLABLE_FIELDS = {"assigned_driver", "assigned_vehicle_plate", "notes", "estimated_cost"}


class RequestRepository:
    """Ordered collection of requests, newest first."""

    ID_PREFIX = "REQ-"
    ID_PATTERN = re.compile(r"^REQ-(\d+)$")

    def __init__(self, records: Iterable[VehicleRequest] = ()) -> None:
        self._records: List[VehicleRequest] = list(records)
        self._listeners: List[ChangeListener] = []
        self._lock = RLock()
        self._high_water = self._max_suffix(self._records)

    @classmethod
    def from_store(cls, store: RequestStore) -> "RequestRepository":
        """Load from ``store`` and save back to it after every mutation."""
        repository = cls(store.load())
        repository.subscribe(store.save)
        return repository

    def subscribe(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        snapshot = list(self._records)
        for listener in self._listeners:
            try:
                listener(snapshot)
            except Exception as exc:
                logger.error("Request change listener failed", listener=repr(listener), error=str(exc))

    @classmethod
    def _suffix(cls, request_id: str) -> Optional[int]:
        match = cls.ID_PATTERN.match(request_id or "")
        return int(match.group(1)) if match else None

    @classmethod
    def _max_suffix(cls, records: Iterable[VehicleRequest]) -> int:
        suffixes = [cls._suffix(record.id) for record in records]
        return max((value for value in suffixes if value is not None), default=0)

    def next_id(self) -> str:
        with self._lock:
            sequence = max(len(self._records), self._high_water) + 1
        return f"{self.ID_PREFIX}{sequence:03d}"

    def __len__(self) -> int:
        return len(self._records)

    def list(self) -> List[VehicleRequest]:
        with self._lock:
            return list(self._records)

    def get(self, request_id: str) -> Optional[VehicleRequest]:
        with self._lock:
            for record in self._records:
                if record.id == request_id:
                    return record
        return None

    def require(self, request_id: str) -> VehicleRequest:
        """Like ``get`` but raises KeyError for an unknown id."""
        record = self.get(request_id)
        if record is None:
            raise KeyError(request_id)
        return record

    def drivers(self) -> List[str]:
        """Distinct assigned drivers, in collection order."""
        seen: Dict[str, None] = {}
        for record in self.list():
            if record.assigned_driver:
                seen.setdefault(record.assigned_driver, None)
        return list(seen)

    def create(self, data: VehicleRequestCreate) -> VehicleRequest:
        with self._lock:
            request_id = self.next_id()
            record = VehicleRequest(
                **data.model_dump(),
                id=request_id,
                created_at=datetime.now(timezone.utc),
            )
            self._records.insert(0, record)
            self._high_water = max(self._high_water, self._suffix(request_id) or 0)
            self._notify()
        logger.info("Request created", request_id=record.id, request_type=record.request_type.value)
        return record

    def update(self, request_id: str, partial: VehicleRequestUpdate | Dict[str, Any]) -> Optional[VehicleRequest]:
        """Shallow-merge ``partial`` into the matching record. Returns None when no record matches."""
        if isinstance(partial, VehicleRequestUpdate):
            patch = partial.model_dump(exclude_unset=True)
        else:
            patch = VehicleRequestUpdate.model_validate(partial).model_dump(exclude_unset=True)
        patch = {
            name: value
            for name, value in patch.items()
            if name not in _IMMUTABLE_FIELDS and (value is not None or name in _NULLABLE_FIELDS)
        }

        with self._lock:
            for index, record in enumerate(self._records):
                if record.id != request_id:
                    continue
                merged = VehicleRequest.model_validate({**record.model_dump(), **patch})
                self._records[index] = merged
                self._notify()
                break
            else:
                logger.warning("Update target not found", request_id=request_id)
                return None

        logger.info("Request updated", request_id=request_id, fields=sorted(patch))
        return merged

    def delete(self, request_id: str) -> bool:
        with self._lock:
            remaining = [record for record in self._records if record.id != request_id]
            if len(remaining) == len(self._records):
                logger.warning("Delete target not found", request_id=request_id)
                return False
            self._records = remaining
            self._notify()
        logger.info("Request deleted", request_id=request_id)
        return True

    def replace_all(self, records: Iterable[VehicleRequest]) -> None:
        with self._lock:
            self._records = list(records)
            self._high_water = max(self._high_water, self._max_suffix(self._records))
            self._notify()

    def filter(self, filters: RequestFilters | None = None) -> List[VehicleRequest]:
        """Records matching the search text and every active exact-match filter."""
        filters = filters or RequestFilters()
        term = filters.search.lower()
        status = _parse_filter(RequestStatus, filters.status)
        request_type = _parse_filter(RequestType, filters.request_type)
        driver = filters.driver

        results = []
        for record in self.list():
            if term and not (
                term in record.client_name.lower()
                or term in record.id.lower()
                or term in record.operator_name.lower()
            ):
                continue
            if status is not ALL and record.status != status:
                continue
            if request_type is not ALL and record.request_type != request_type:
                continue
            if driver != ALL and record.assigned_driver != driver:
                continue
            results.append(record)
        return results


def _parse_filter(enum_cls, value: str):
    if value == ALL:
        return ALL
    try:
        return enum_cls(value)
    except ValueError:
        # Unknown values match nothing.
        return None
