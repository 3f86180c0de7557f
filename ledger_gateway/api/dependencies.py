"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ledger_gateway.infrastructure.database.session import get_db
from ledger_gateway.services.installment_manager import InstallmentRecordManager


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_record_manager(db: Session = Depends(get_db)) -> InstallmentRecordManager:
    """Provide an installment record manager bound to the request's session"""
    return InstallmentRecordManager(db)
