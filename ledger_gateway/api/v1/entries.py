"""/v1/workspaces/{workspace_id}/entries - ledger entry endpoints"""

import logging
from typing import NoReturn
from fastapi import APIRouter, Depends, HTTPException, Request

from ledger_gateway.api.v1.schemas import (
    DeleteResponse,
    EntryCreateRequest,
    EntryResponse,
    EntryUpdateRequest,
    ScheduleResponse,
)
from ledger_gateway.api.dependencies import get_record_manager, get_request_id
from ledger_gateway.services.installment_manager import InstallmentRecordManager
from ledger_gateway.domain.exceptions import (
    EntryNotFoundError,
    InstallmentValidationError,
    ScheduleIntegrityError,
)

router = APIRouter()


def _raise_http_error(error: Exception, manager: InstallmentRecordManager, request_id: str) -> NoReturn:
    """Translate domain failures into HTTP errors"""
    if isinstance(error, InstallmentValidationError):
        logging.warning(f"Validation failed: {error}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(error))
    if isinstance(error, EntryNotFoundError):
        raise HTTPException(status_code=404, detail=str(error))
    if isinstance(error, ScheduleIntegrityError):
        logging.error(f"Schedule integrity error: {error}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(error))

    manager.db.rollback()
    logging.error(f"Unexpected error: {error}", extra={"request_id": request_id})
    raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/workspaces/{workspace_id}/entries", response_model=EntryResponse)
def create_entry(
    workspace_id: str,
    request_body: EntryCreateRequest,
    request: Request,
    manager: InstallmentRecordManager = Depends(get_record_manager),
):
    """
    Create a ledger entry.

    With is_installment set, the entry becomes an installment purchase and
    one child entry per month is generated in the same transaction.
    """
    try:
        entry = manager.create_entry(request_body.to_domain(workspace_id))
    except Exception as e:
        _raise_http_error(e, manager, get_request_id(request))
    return EntryResponse.from_entry(entry)


@router.get("/workspaces/{workspace_id}/entries/{entry_id}", response_model=EntryResponse)
def get_entry(
    workspace_id: str,
    entry_id: int,
    request: Request,
    manager: InstallmentRecordManager = Depends(get_record_manager),
):
    try:
        entry = manager.get_entry(entry_id, workspace_id)
    except Exception as e:
        _raise_http_error(e, manager, get_request_id(request))
    return EntryResponse.from_entry(entry)


@router.patch("/workspaces/{workspace_id}/entries/{entry_id}", response_model=EntryResponse)
def update_entry(
    workspace_id: str,
    entry_id: int,
    request_body: EntryUpdateRequest,
    request: Request,
    manager: InstallmentRecordManager = Depends(get_record_manager),
):
    """
    Update a ledger entry.

    Changing amount, months, issuer, date or the installment flag of an
    installment purchase rebuilds its whole schedule. Installment children
    only accept description and category changes.
    """
    try:
        entry = manager.update_entry(entry_id, workspace_id, request_body.to_domain())
    except Exception as e:
        _raise_http_error(e, manager, get_request_id(request))
    return EntryResponse.from_entry(entry)


@router.delete("/workspaces/{workspace_id}/entries/{entry_id}", response_model=DeleteResponse)
def delete_entry(
    workspace_id: str,
    entry_id: int,
    request: Request,
    manager: InstallmentRecordManager = Depends(get_record_manager),
):
    """Delete an entry; deleting an installment purchase removes its children too"""
    try:
        rows_deleted = manager.delete_entry(entry_id, workspace_id)
    except Exception as e:
        _raise_http_error(e, manager, get_request_id(request))
    return DeleteResponse(entry_id=entry_id, rows_deleted=rows_deleted)


@router.get("/workspaces/{workspace_id}/entries/{entry_id}/schedule", response_model=ScheduleResponse)
def get_schedule(
    workspace_id: str,
    entry_id: int,
    request: Request,
    manager: InstallmentRecordManager = Depends(get_record_manager),
):
    """
    Retrieve an installment purchase with its payment schedule.

    Returns:
        Parent entry plus each installment's amount split into principal and fee
    """
    try:
        schedule = manager.get_schedule(entry_id, workspace_id)
    except Exception as e:
        _raise_http_error(e, manager, get_request_id(request))
    return ScheduleResponse.from_schedule(schedule)
