"""API routes for the overview counts and the AI operations summary."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from frota.models.workspace import AnalysisRunResponse, AnalysisState, DashboardResponse
from frota.services.view_controller import ViewController, get_controller

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _analysis_state(controller: ViewController) -> AnalysisState:
    return AnalysisState(analyzing=controller.state.analyzing, text=controller.state.analysis)


@router.get("", response_model=DashboardResponse)
def get_dashboard(controller: ViewController = Depends(get_controller)):
    return DashboardResponse(stats=controller.stats(), analysis=_analysis_state(controller))


@router.post("/analysis", response_model=AnalysisRunResponse)
async def run_analysis(controller: ViewController = Depends(get_controller)):
    accepted = await controller.run_analysis()
    state = _analysis_state(controller)
    return AnalysisRunResponse(accepted=accepted, analyzing=state.analyzing, text=state.text)
