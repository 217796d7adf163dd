"""Summary counts over a request snapshot."""
from __future__ import annotations

from collections import Counter
from typing import Iterable

from frota.models.requests import ChartPoint, DashboardStats, RequestStatus, RequestType, VehicleRequest


CHART_STATUSES = (
    ("Pendentes", RequestStatus.PENDING),
    ("Confirmados", RequestStatus.CONFIRMED),
    ("Concluídos", RequestStatus.COMPLETED),
)


def compute_stats(records: Iterable[VehicleRequest]) -> DashboardStats:
    """Recount everything from scratch; one pass over ``records``."""
    by_status: Counter[str] = Counter({status.value: 0 for status in RequestStatus})
    by_type: Counter[str] = Counter({request_type.value: 0 for request_type in RequestType})
    total = 0
    revenue = 0.0

    for record in records:
        total += 1
        by_status[record.status.value] += 1
        by_type[record.request_type.value] += 1
        if record.estimated_cost is not None:
            revenue += record.estimated_cost

    return DashboardStats(
        total=total,
        by_status=dict(by_status),
        by_type=dict(by_type),
        pending=by_status[RequestStatus.PENDING.value],
        confirmed=by_status[RequestStatus.CONFIRMED.value],
        completed=by_status[RequestStatus.COMPLETED.value],
        rentals=by_type[RequestType.RENTAL.value],
        transfers=by_type[RequestType.TRANSFER.value],
        revenue=round(revenue, 2),
        chart=[ChartPoint(name=name, value=by_status[status.value]) for name, status in CHART_STATUSES],
    )
