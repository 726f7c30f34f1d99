"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request

from fueleu_banking.domain.ports import BankingStore
from fueleu_banking.services.banking_service import BankingService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_store(request: Request) -> BankingStore:
    """Persistence handle attached to the app at startup"""
    return request.app.state.store


def get_banking_service(request: Request, store: BankingStore = Depends(get_store)) -> BankingService:
    """Provide a request-scoped banking service tagged with the request ID"""
    return BankingService(store, request_id=get_request_id(request))
