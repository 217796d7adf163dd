"""Models for the operator workspace: active view, edit form and dashboard."""
from __future__ import annotations

from enum import Enum
from typing import Optional

from frota.models.requests import CamelModel, DashboardStats, VehicleRequest, VehicleRequestUpdate


class AppView(str, Enum):
    """Screens the operator can switch between."""

    OVERVIEW = "overview"
    EDIT = "edit"
    LIST = "list"


class SelectViewRequest(CamelModel):
    view: AppView


class WorkspaceSnapshot(CamelModel):
    """What the front-end needs to render the current screen."""

    view: AppView
    editing: Optional[VehicleRequest] = None
    form: VehicleRequestUpdate
    driver_field_enabled: bool = True
    operator: str


class SubmitResponse(CamelModel):
    record: Optional[VehicleRequest] = None
    created: bool
    view: AppView


class AnalysisState(CamelModel):
    analyzing: bool = False
    text: str = ""


class AnalysisRunResponse(AnalysisState):
    accepted: bool


class DashboardResponse(CamelModel):
    stats: DashboardStats
    analysis: AnalysisState
