"""/v1/banking - compliance balance banking endpoints"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request

from fueleu_banking.api.dependencies import get_banking_service, get_request_id
from fueleu_banking.api.v1.schemas import (
    BankEntryCreate,
    BankEntrySchema,
    BankingOperationRequest,
    BankingResultResponse,
    BankingStatusResponse,
    ErrorResponse,
    entries_to_schema,
)
from fueleu_banking.domain.exceptions import (
    BankingError,
    ComplianceNotFoundError,
    InvalidAmountError,
    InvalidEntryError,
    PersistenceError,
)
from fueleu_banking.services.banking_service import BankingService

router = APIRouter(prefix="/banking")

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    500: {"description": "Internal server error"},
    503: {"description": "Storage unavailable"},
}


def _http_status(error: BankingError) -> int:
    if isinstance(error, (InvalidAmountError, InvalidEntryError)):
        return 400
    if isinstance(error, ComplianceNotFoundError):
        return 404
    return 422


def _rejected(error: BankingError) -> HTTPException:
    # Rule rejections are logged by the service with the request ID
    body = ErrorResponse.from_failure(error.to_failure())
    return HTTPException(status_code=_http_status(error), detail=body.model_dump(by_alias=True))


def _unavailable(error: PersistenceError, request_id: str) -> HTTPException:
    logging.error(f"Persistence error: {error}", extra={"request_id": request_id})
    return HTTPException(status_code=503, detail="Banking storage unavailable")


def _internal_error(error: Exception, request_id: str) -> HTTPException:
    logging.error(f"Unexpected error: {error}", extra={"request_id": request_id})
    return HTTPException(status_code=500, detail="Internal server error")


@router.get("/records", response_model=List[BankEntrySchema])
def get_bank_entries(
    request: Request,
    ship_id: str = Query(..., alias="shipId", min_length=1, description="Ship identifier"),
    year: int = Query(..., description="Compliance year"),
    service: BankingService = Depends(get_banking_service),
):
    """Ledger entries for one ship-year, most recent first"""
    try:
        return entries_to_schema(service.get_bank_entries(ship_id, year))
    except PersistenceError as e:
        raise _unavailable(e, get_request_id(request))
    except Exception as e:
        raise _internal_error(e, get_request_id(request))


@router.get("/records/all", response_model=List[BankEntrySchema])
def get_bank_records(request: Request, service: BankingService = Depends(get_banking_service)):
    """Every ledger entry in the system, most recent first"""
    try:
        return entries_to_schema(service.get_bank_records())
    except PersistenceError as e:
        raise _unavailable(e, get_request_id(request))
    except Exception as e:
        raise _internal_error(e, get_request_id(request))


@router.post(
    "/records",
    response_model=BankEntrySchema,
    status_code=201,
    responses=ERROR_RESPONSES,
)
def add_bank_entry(
    request_body: BankEntryCreate,
    request: Request,
    service: BankingService = Depends(get_banking_service),
):
    """
    Append a raw ledger entry without CB validation.

    Intended for data migration and seeding; CB records are not touched.
    """
    request_id = get_request_id(request)
    try:
        return BankEntrySchema.from_domain(service.add_bank_entry(request_body.to_domain()))
    except BankingError as e:
        raise _rejected(e)
    except PersistenceError as e:
        raise _unavailable(e, request_id)
    except Exception as e:
        raise _internal_error(e, request_id)


@router.get("/history/{ship_id}", response_model=List[BankEntrySchema])
def get_ship_banking_history(
    request: Request,
    ship_id: str = Path(..., min_length=1),
    service: BankingService = Depends(get_banking_service),
):
    """Ship's ledger entries across all years, most recent first"""
    try:
        return entries_to_schema(service.get_ship_banking_history(ship_id))
    except PersistenceError as e:
        raise _unavailable(e, get_request_id(request))
    except Exception as e:
        raise _internal_error(e, get_request_id(request))


@router.get("/status/{ship_id}/{year}", response_model=BankingStatusResponse, response_model_exclude_none=True)
def get_banking_status(
    request: Request,
    ship_id: str = Path(..., min_length=1),
    year: int = Path(...),
    service: BankingService = Depends(get_banking_service),
):
    """
    Current CB, ship-wide banking totals and the ship's entries split by year.

    Returns `exists: false` rather than 404 when CB has not been computed.
    """
    try:
        return BankingStatusResponse.from_domain(service.get_banking_status(ship_id, year))
    except PersistenceError as e:
        raise _unavailable(e, get_request_id(request))
    except Exception as e:
        raise _internal_error(e, get_request_id(request))


@router.post("/bank", response_model=BankingResultResponse, responses=ERROR_RESPONSES)
def bank_surplus(
    request_body: BankingOperationRequest,
    request: Request,
    service: BankingService = Depends(get_banking_service),
):
    """Bank part of a ship-year surplus"""
    request_id = get_request_id(request)
    try:
        result = service.bank_surplus(request_body.ship_id, request_body.year, request_body.amount)
    except BankingError as e:
        raise _rejected(e)
    except PersistenceError as e:
        raise _unavailable(e, request_id)
    except Exception as e:
        raise _internal_error(e, request_id)

    return BankingResultResponse.from_domain(result)


@router.post("/apply", response_model=BankingResultResponse, responses=ERROR_RESPONSES)
def apply_banked_surplus(
    request_body: BankingOperationRequest,
    request: Request,
    service: BankingService = Depends(get_banking_service),
):
    """Apply banked surplus against a ship-year deficit"""
    request_id = get_request_id(request)
    try:
        result = service.apply_banked_surplus(request_body.ship_id, request_body.year, request_body.amount)
    except BankingError as e:
        raise _rejected(e)
    except PersistenceError as e:
        raise _unavailable(e, request_id)
    except Exception as e:
        raise _internal_error(e, request_id)

    return BankingResultResponse.from_domain(result)
