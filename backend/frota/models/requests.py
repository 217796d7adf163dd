"""Domain models for fleet rental and transfer requests."""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


ALL = "ALL"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RequestType(str, Enum):
    """Kind of service requested."""

    RENTAL = "RENTAL"
    TRANSFER = "TRANSFER"

    @classmethod
    def _missing_(cls, value: object):
        # Older stored blobs carry the display label instead of the tag.
        return _from_label(REQUEST_TYPE_LABELS, value)

    @property
    def label(self) -> str:
        return REQUEST_TYPE_LABELS[self]


class RequestStatus(str, Enum):
    """Operational lifecycle status for a request."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @classmethod
    def _missing_(cls, value: object):
        return _from_label(REQUEST_STATUS_LABELS, value)

    @property
    def label(self) -> str:
        return REQUEST_STATUS_LABELS[self]


REQUEST_TYPE_LABELS: Dict[RequestType, str] = {
    RequestType.RENTAL: "Aluguer",
    RequestType.TRANSFER: "Transfer",
}

REQUEST_STATUS_LABELS: Dict[RequestStatus, str] = {
    RequestStatus.PENDING: "Aguarda confirmação",
    RequestStatus.CONFIRMED: "Confirmado",
    RequestStatus.IN_PROGRESS: "Em Curso",
    RequestStatus.COMPLETED: "Concluído",
    RequestStatus.CANCELLED: "Cancelado",
}


def _from_label(labels: Dict[Any, str], value: object):
    text = str(value or "").strip()
    for member, label in labels.items():
        if text.lower() in {label.lower(), member.value.lower()}:
            return member
    return None


REQUIRED_FIELDS = (
    "operator_name",
    "client_name",
    "client_contact",
    "pickup_location",
    "dropoff_location",
    "pickup_date",
    "return_date",
)

REQUIRED_FIELDS_PROMPT = "Por favor preencha os campos obrigatórios."


class RequiredFieldsMissing(ValueError):
    """Raised when a submission lacks one or more required fields."""

    def __init__(self, fields: List[str]) -> None:
        self.fields = list(fields)
        super().__init__(f"{REQUIRED_FIELDS_PROMPT} ({', '.join(to_camel(name) for name in self.fields)})")


def missing_required_fields(values: Dict[str, Any]) -> List[str]:
    """Names of required fields that are absent or blank in ``values``."""
    missing = []
    for name in REQUIRED_FIELDS:
        value = values.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _RequestModel(CamelModel):
    @field_validator("request_type", mode="before", check_fields=False)
    @classmethod
    def _coerce_request_type(cls, value: Any) -> Any:
        if value is None or isinstance(value, RequestType):
            return value
        return RequestType(value)

    @field_validator("status", mode="before", check_fields=False)
    @classmethod
    def _coerce_status(cls, value: Any) -> Any:
        if value is None or isinstance(value, RequestStatus):
            return value
        return RequestStatus(value)


class VehicleRequestCreate(_RequestModel):
    """Request data as submitted by the operator; id and createdAt are assigned on create."""

    client_name: str
    client_contact: str
    request_type: RequestType = RequestType.RENTAL
    pickup_location: str
    dropoff_location: str
    pickup_date: datetime
    return_date: datetime
    vehicle_group: str = ""
    assigned_driver: Optional[str] = None
    assigned_vehicle_plate: Optional[str] = None
    operator_name: str
    status: RequestStatus = RequestStatus.PENDING
    notes: Optional[str] = None
    estimated_cost: Optional[float] = Field(default=None, ge=0)


class VehicleRequest(VehicleRequestCreate):
    """Persisted request record."""

    id: str
    created_at: datetime = Field(default_factory=_utcnow)


class VehicleRequestUpdate(_RequestModel):
    """Partial request data; also the shape of the edit form."""

    client_name: Optional[str] = None
    client_contact: Optional[str] = None
    request_type: Optional[RequestType] = None
    pickup_location: Optional[str] = None
    dropoff_location: Optional[str] = None
    pickup_date: Optional[datetime] = None
    return_date: Optional[datetime] = None
    vehicle_group: Optional[str] = None
    assigned_driver: Optional[str] = None
    assigned_vehicle_plate: Optional[str] = None
    operator_name: Optional[str] = None
    status: Optional[RequestStatus] = None
    notes: Optional[str] = None
    estimated_cost: Optional[float] = Field(default=None, ge=0)


class RequestFilters(BaseModel):
    """List filters; ``ALL`` disables the corresponding exact-match filter."""

    search: str = ""
    status: str = ALL
    request_type: str = ALL
    driver: str = ALL


class ChartPoint(CamelModel):
    name: str
    value: int


class DashboardStats(CamelModel):
    """Counts derived from a repository snapshot."""

    total: int
    by_status: Dict[str, int]
    by_type: Dict[str, int]
    pending: int
    confirmed: int
    completed: int
    rentals: int
    transfers: int
    revenue: float
    chart: List[ChartPoint] = Field(default_factory=list)
