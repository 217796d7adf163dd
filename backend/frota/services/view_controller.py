"""Single-operator workspace: active view, edit slot and analysis gate."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Any, Dict, Optional

from frota.core.config import get_settings
from frota.core.logging import logger
from frota.models.requests import (
    DashboardStats,
    RequestStatus,
    RequestType,
    RequiredFieldsMissing,
    VehicleRequest,
    VehicleRequestCreate,
    VehicleRequestUpdate,
    missing_required_fields,
)
from frota.models.workspace import AppView, WorkspaceSnapshot
from frota.services.aggregation import compute_stats
from frota.services.analyst import OperationsAnalyst
from frota.services.request_repository import RequestRepository
from frota.services.request_store import RequestStore


@dataclass
class AppState:
    view: AppView = AppView.OVERVIEW
    editing: Optional[VehicleRequest] = None
    analyzing: bool = False
    analysis: str = ""


def form_defaults() -> VehicleRequestUpdate:
    """Initial values of the new-request form."""
    now = datetime.now().replace(second=0, microsecond=0)
    return VehicleRequestUpdate(
        status=RequestStatus.PENDING,
        request_type=RequestType.RENTAL,
        pickup_date=now,
        return_date=now + timedelta(days=1),
    )


class ViewController:
    """Mediates between operator actions, the repository and the active view."""

    def __init__(
        self,
        repository: RequestRepository,
        analyst: OperationsAnalyst | None = None,
        state: AppState | None = None,
    ) -> None:
        self.repository = repository
        self.analyst = analyst or OperationsAnalyst()
        self.state = state or AppState()

    def _log_view(self) -> None:
        editing = self.state.editing.id if self.state.editing is not None else None
        logger.info("View changed", view=self.state.view.value, editing=editing)

    def select_view(self, view: AppView) -> AppState:
        self.state.view = AppView(view)
        self._log_view()
        return self.state

    def begin_create(self) -> AppState:
        self.state.editing = None
        self.state.view = AppView.EDIT
        self._log_view()
        return self.state

    def begin_edit(self, record: VehicleRequest) -> AppState:
        self.state.editing = record
        self.state.view = AppView.EDIT
        self._log_view()
        return self.state

    def begin_edit_by_id(self, request_id: str) -> AppState:
        """Open the edit form for a stored request; KeyError if it does not exist."""
        return self.begin_edit(self.repository.require(request_id))

    def cancel(self) -> AppState:
        self.state.editing = None
        self.state.view = AppView.LIST
        self._log_view()
        return self.state

    def form_values(self) -> VehicleRequestUpdate:
        if self.state.editing is None:
            return form_defaults()
        return VehicleRequestUpdate.model_validate(self.state.editing.model_dump(exclude={"id", "created_at"}))

    def snapshot(self) -> WorkspaceSnapshot:
        form = self.form_values()
        return WorkspaceSnapshot(
            view=self.state.view,
            editing=self.state.editing,
            form=form,
            driver_field_enabled=form.request_type != RequestType.RENTAL,
            operator=get_settings().default_operator,
        )

    def submit(self, data: VehicleRequestUpdate | Dict[str, Any]) -> Optional[VehicleRequest]:
        """Create or update from form data, then return to the list.

        Raises RequiredFieldsMissing without touching the repository or the
        view when a required field is blank.
        """
        if not isinstance(data, VehicleRequestUpdate):
            data = VehicleRequestUpdate.model_validate(data)
        submitted = data.model_dump(exclude_unset=True)
        editing = self.state.editing

        if editing is not None:
            values = {**editing.model_dump(), **submitted}
        else:
            values = submitted
        missing = missing_required_fields(values)
        if missing:
            raise RequiredFieldsMissing(missing)

        if editing is not None:
            record = self.repository.update(editing.id, data)
            if record is None:
                logger.warning("Edited request no longer exists", request_id=editing.id)
        else:
            payload = {name: value for name, value in submitted.items() if value is not None}
            record = self.repository.create(VehicleRequestCreate.model_validate(payload))

        self.state.editing = None
        self.state.view = AppView.LIST
        self._log_view()
        return record

    def delete(self, request_id: str, confirmed: bool = False) -> bool:
        """Remove a request once the operator has confirmed it."""
        if not confirmed:
            logger.info("Delete not confirmed; nothing removed", request_id=request_id)
            return False
        if self.state.editing is not None and self.state.editing.id == request_id:
            self.state.editing = None
        return self.repository.delete(request_id)

    def stats(self) -> DashboardStats:
        return compute_stats(self.repository.list())

    async def run_analysis(self) -> bool:
        """Run one analysis; returns False when one is already in flight."""
        if self.state.analyzing:
            logger.info("Analysis already running; trigger ignored")
            return False
        self.state.analyzing = True
        try:
            self.state.analysis = await self.analyst.analyze(self.repository.list())
        finally:
            self.state.analyzing = False
        return True


@lru_cache()
def get_controller() -> ViewController:
    """Process-wide workspace backed by the configured local storage."""
    repository = RequestRepository.from_store(RequestStore())
    logger.info("Workspace loaded", requests=len(repository))
    return ViewController(repository)
