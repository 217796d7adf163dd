"""API routes for fleet request records, filters and exports."""
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from frota.core.logging import logger
from frota.models.requests import (
    ALL,
    RequestFilters,
    RequiredFieldsMissing,
    VehicleRequest,
    VehicleRequestCreate,
    VehicleRequestUpdate,
    missing_required_fields,
)
from frota.services.export import CSV_FILENAME, document_filename, to_delimited_text, to_printable_document
from frota.services.view_controller import ViewController, get_controller

router = APIRouter(prefix="/requests", tags=["requests"])


def get_filters(
    search: str = Query(default="", description="Case-insensitive match on client, ID or operator"),
    status: str = Query(default=ALL),
    request_type: str = Query(default=ALL, alias="type"),
    driver: str = Query(default=ALL),
) -> RequestFilters:
    return RequestFilters(search=search, status=status, request_type=request_type, driver=driver)


def _get_or_404(controller: ViewController, request_id: str) -> VehicleRequest:
    try:
        return controller.repository.require(request_id)
    except KeyError:
        logger.info("Request not found", request_id=request_id)
        raise HTTPException(status_code=404, detail="Request not found")


@router.get("", response_model=List[VehicleRequest])
def list_requests(
    filters: RequestFilters = Depends(get_filters),
    controller: ViewController = Depends(get_controller),
):
    return controller.repository.filter(filters)


@router.get("/drivers")
def list_drivers(controller: ViewController = Depends(get_controller)) -> dict:
    return {"drivers": controller.repository.drivers()}


@router.get("/export.csv")
def export_csv(
    filters: RequestFilters = Depends(get_filters),
    controller: ViewController = Depends(get_controller),
) -> Response:
    content = to_delimited_text(controller.repository.filter(filters))
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{CSV_FILENAME}"'},
    )


@router.get("/{request_id}", response_model=VehicleRequest)
def get_request(request_id: str, controller: ViewController = Depends(get_controller)):
    return _get_or_404(controller, request_id)


@router.get("/{request_id}/document.pdf")
def print_request(request_id: str, controller: ViewController = Depends(get_controller)) -> Response:
    record = _get_or_404(controller, request_id)
    try:
        payload = to_printable_document(record)
    except Exception as exc:
        logger.error("Failed to render request document", request_id=request_id, error=str(exc))
        raise HTTPException(status_code=500, detail=str(exc))
    return Response(
        content=payload,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{document_filename(record)}"'},
    )


@router.post("", response_model=VehicleRequest, status_code=201)
def create_request(request: VehicleRequestCreate, controller: ViewController = Depends(get_controller)):
    missing = missing_required_fields(request.model_dump())
    if missing:
        raise HTTPException(status_code=400, detail=str(RequiredFieldsMissing(missing)))
    return controller.repository.create(request)


@router.patch("/{request_id}", response_model=VehicleRequest)
def update_request(
    request_id: str,
    request: VehicleRequestUpdate,
    controller: ViewController = Depends(get_controller),
):
    record = controller.repository.update(request_id, request)
    if record is None:
        raise HTTPException(status_code=404, detail="Request not found")
    return record


@router.delete("/{request_id}")
def delete_request(
    request_id: str,
    confirm: bool = Query(default=False, description="Operator confirmed the deletion"),
    controller: ViewController = Depends(get_controller),
) -> dict:
    if not confirm:
        raise HTTPException(
            status_code=400,
            detail="Tem a certeza que pretende eliminar este registo? Repita com confirm=true.",
        )
    if not controller.delete(request_id, confirmed=True):
        raise HTTPException(status_code=404, detail="Request not found")
    return {"deleted": True, "id": request_id}
