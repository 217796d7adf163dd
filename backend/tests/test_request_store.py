"""Unit tests for local request persistence and seed fallback."""
from __future__ import annotations

import json
import os
import sys
from datetime import datetime
from pathlib import Path


TMP = Path(__file__).resolve().parent / ".tmp_state"
TMP.mkdir(parents=True, exist_ok=True)
os.environ["STATE_PATH"] = str(TMP / "local_storage.json")
os.environ["API_KEY"] = ""

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from frota.models.requests import RequestStatus, RequestType, VehicleRequest  # noqa: E402
from frota.services.request_store import LocalStorage, MemoryStorage, RequestStore  # noqa: E402


class ExplodingStorage(MemoryStorage):
    def get_item(self, key):
        raise OSError("disk unavailable")

    def set_item(self, key, value):
        raise OSError("quota exceeded")


def _record(request_id: str, **overrides) -> VehicleRequest:
    values = dict(
        id=request_id,
        client_name="Empresa ABC",
        client_contact="912000000",
        request_type=RequestType.TRANSFER,
        pickup_location="Aeroporto",
        dropoff_location="Hotel Central",
        pickup_date=datetime(2026, 3, 1, 8, 30),
        return_date=datetime(2026, 3, 1, 9, 15),
        vehicle_group="Van 9 Lugares",
        assigned_driver="Rui Costa",
        operator_name="Ana Sousa",
        status=RequestStatus.CONFIRMED,
        estimated_cost=85.5,
    )
    values.update(overrides)
    return VehicleRequest(**values)


def test_missing_key_falls_back_to_seed_dataset():
    store = RequestStore(storage=MemoryStorage(), key="fleet_requests")
    records = store.load()

    assert [record.id for record in records] == ["REQ-001", "REQ-002"]
    assert records[0].client_name == "Empresa ABC Lda"
    assert records[1].assigned_driver == "Carlos Motorista"


def test_corrupt_value_falls_back_to_seed_dataset():
    storage = MemoryStorage({"fleet_requests": "{not json"})
    records = RequestStore(storage=storage, key="fleet_requests").load()
    assert [record.id for record in records] == ["REQ-001", "REQ-002"]


def test_incompatible_shape_is_treated_as_corruption():
    storage = MemoryStorage({"fleet_requests": json.dumps({"requests": []})})
    assert len(RequestStore(storage=storage, key="fleet_requests").load()) == 2

    storage = MemoryStorage({"fleet_requests": json.dumps([{"id": "REQ-001"}])})
    assert [r.id for r in RequestStore(storage=storage, key="fleet_requests").load()] == ["REQ-001", "REQ-002"]


def test_unreadable_storage_falls_back_to_seed_dataset():
    records = RequestStore(storage=ExplodingStorage(), key="fleet_requests").load()
    assert len(records) == 2


def test_save_then_load_round_trips_collection():
    storage = MemoryStorage()
    store = RequestStore(storage=storage, key="fleet_requests")
    original = [_record("REQ-002"), _record("REQ-001", assigned_driver=None, notes="Cliente VIP")]

    assert store.save(original) is True
    assert store.load() == original

    store.save(store.load())
    assert store.load() == original


def test_saved_blob_uses_camel_case_keys_and_tags():
    storage = MemoryStorage()
    RequestStore(storage=storage, key="fleet_requests").save([_record("REQ-001")])

    payload = json.loads(storage.items["fleet_requests"])
    assert payload[0]["clientName"] == "Empresa ABC"
    assert payload[0]["requestType"] == "TRANSFER"
    assert payload[0]["status"] == "CONFIRMED"
    assert "createdAt" in payload[0]


def test_load_accepts_display_labels_from_older_blobs():
    legacy = [{
        "id": "REQ-007",
        "createdAt": "2026-02-01T12:00:00.000Z",
        "clientName": "Hotel Solar",
        "clientContact": "210000000",
        "requestType": "Transfer",
        "pickupLocation": "Hotel Solar",
        "dropoffLocation": "Centro de Congressos",
        "pickupDate": "2026-02-08T09:00",
        "returnDate": "2026-02-08T09:45",
        "vehicleGroup": "Van 9 Lugares",
        "operatorName": "Ana Sousa",
        "status": "Aguarda confirmação",
    }]
    storage = MemoryStorage({"fleet_requests": json.dumps(legacy)})
    records = RequestStore(storage=storage, key="fleet_requests").load()

    assert len(records) == 1
    assert records[0].request_type is RequestType.TRANSFER
    assert records[0].status is RequestStatus.PENDING
    assert records[0].pickup_date == datetime(2026, 2, 8, 9, 0)


def test_failed_save_reports_false_and_keeps_prior_content():
    storage = MemoryStorage({"fleet_requests": "[]"})
    store = RequestStore(storage=storage, key="fleet_requests")

    class FailingWrites(MemoryStorage):
        def set_item(self, key, value):
            raise OSError("quota exceeded")

    failing = RequestStore(storage=FailingWrites(storage.items), key="fleet_requests")
    assert failing.save([_record("REQ-001")]) is False
    assert store.load() == []


def test_local_storage_persists_keys_in_one_file(tmp_path: Path):
    path = tmp_path / "nested" / "local_storage.json"
    storage = LocalStorage(path)
    storage.set_item("fleet_requests", "[]")
    storage.set_item("other", "value")

    reopened = LocalStorage(path)
    assert reopened.get_item("fleet_requests") == "[]"
    assert reopened.get_item("other") == "value"
    assert reopened.get_item("missing") is None
    assert not path.with_suffix(".tmp").exists()


def test_local_storage_round_trip_through_request_store(tmp_path: Path):
    store = RequestStore(storage=LocalStorage(tmp_path / "state.json"), key="fleet_requests")
    records = [_record("REQ-001")]
    store.save(records)

    assert RequestStore(storage=LocalStorage(tmp_path / "state.json"), key="fleet_requests").load() == records


def test_corrupt_storage_file_falls_back_and_is_rewritten_on_save(tmp_path: Path):
    path = tmp_path / "state.json"
    path.write_text("garbage", encoding="utf-8")
    store = RequestStore(storage=LocalStorage(path), key="fleet_requests")

    assert len(store.load()) == 2
    assert store.save([_record("REQ-001")]) is True
    assert [record.id for record in store.load()] == ["REQ-001"]


def test_read_failure_on_save_keeps_other_keys(tmp_path: Path, monkeypatch):
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"other": "value", "fleet_requests": "[]"}), encoding="utf-8")
    storage = LocalStorage(path)

    def unreadable():
        raise PermissionError("read denied")

    monkeypatch.setattr(storage, "_read", unreadable)
    store = RequestStore(storage=storage, key="fleet_requests")

    assert store.save([_record("REQ-001")]) is False
    assert json.loads(path.read_text(encoding="utf-8")) == {"other": "value", "fleet_requests": "[]"}
