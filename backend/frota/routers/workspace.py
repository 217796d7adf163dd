"""API routes driving the operator's view state and edit form."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from frota.core.logging import logger
from frota.models.requests import RequiredFieldsMissing, VehicleRequestUpdate
from frota.models.workspace import SelectViewRequest, SubmitResponse, WorkspaceSnapshot
from frota.services.view_controller import ViewController, get_controller

router = APIRouter(prefix="/workspace", tags=["workspace"])


@router.get("", response_model=WorkspaceSnapshot)
def get_workspace(controller: ViewController = Depends(get_controller)):
    return controller.snapshot()


@router.post("/view", response_model=WorkspaceSnapshot)
def select_view(request: SelectViewRequest, controller: ViewController = Depends(get_controller)):
    controller.select_view(request.view)
    return controller.snapshot()


@router.post("/create", response_model=WorkspaceSnapshot)
def begin_create(controller: ViewController = Depends(get_controller)):
    controller.begin_create()
    return controller.snapshot()


@router.post("/edit/{request_id}", response_model=WorkspaceSnapshot)
def begin_edit(request_id: str, controller: ViewController = Depends(get_controller)):
    try:
        controller.begin_edit_by_id(request_id)
    except KeyError:
        logger.info("Edit requested for unknown request", request_id=request_id)
        raise HTTPException(status_code=404, detail="Request not found")
    return controller.snapshot()


@router.post("/submit", response_model=SubmitResponse)
def submit_form(request: VehicleRequestUpdate, controller: ViewController = Depends(get_controller)):
    created = controller.state.editing is None
    try:
        record = controller.submit(request)
    except RequiredFieldsMissing as exc:
        logger.info("Form submission rejected", missing=exc.fields)
        raise HTTPException(status_code=400, detail=str(exc))
    return SubmitResponse(record=record, created=created, view=controller.state.view)


@router.post("/cancel", response_model=WorkspaceSnapshot)
def cancel_form(controller: ViewController = Depends(get_controller)):
    controller.cancel()
    return controller.snapshot()
