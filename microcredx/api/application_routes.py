from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from typing import Any, Dict, List
import logging

from microcredx.core.auth_dependencies import get_current_user
from microcredx.core.exceptions import ServiceError
from microcredx.database.models import ApplicationStatusEnum, LoanApplication
from microcredx.helpers.response_builder import (
    delete_result,
    serialize_document,
    serialize_documents,
    update_result,
)
from microcredx.schemas import LoanApplicationSubmit, StatusUpdate
from microcredx.services.application_service import ApplicationLedgerService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Loan Applications"])


def get_application_service(request: Request) -> ApplicationLedgerService:
    return request.app.state.application_service


# Submits a new application, or overwrites the borrower's pending one
@router.post("/save-loan", response_model=Dict[str, Any])
async def save_loan(payload: LoanApplicationSubmit, service: ApplicationLedgerService = Depends(get_application_service)):
    try:
        fields = payload.model_dump(exclude={"email"})
        result = await service.submit(payload.email, fields)
        if isinstance(result, LoanApplication):
            return serialize_document(result)
        return update_result(result)
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error saving loan application for {payload.email}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save loan application")


# Lists every application submitted with the given email
@router.get("/get-loan", response_model=List[Dict[str, Any]])
async def get_loans_by_email(
    email: str = Query(..., description="Applicant email"),
    service: ApplicationLedgerService = Depends(get_application_service),
):
    try:
        return serialize_documents(await service.list_by_email(email))
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error fetching applications for {email}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch loan applications")


@router.get("/get-allloans", response_model=List[Dict[str, Any]])
async def get_pending_loans(service: ApplicationLedgerService = Depends(get_application_service)):
    try:
        return serialize_documents(await service.list_by_status(ApplicationStatusEnum.pending))
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error fetching pending applications: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch loan applications")


@router.get("/get-Approved-loans", response_model=List[Dict[str, Any]])
async def get_approved_loans(service: ApplicationLedgerService = Depends(get_application_service)):
    try:
        return serialize_documents(await service.list_by_status(ApplicationStatusEnum.approved))
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error fetching approved applications: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch loan applications")


# Every application, for staff holding a verified identity token
@router.get("/all-adminloan", response_model=List[Dict[str, Any]])
async def get_all_applications(
    current_user: Dict = Depends(get_current_user),
    service: ApplicationLedgerService = Depends(get_application_service),
):
    try:
        logger.info(f"All applications requested by {current_user['email']}")
        return serialize_documents(await service.list_all())
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error fetching all applications: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch loan applications")


@router.get("/application/{application_id}", response_model=Dict[str, Any])
async def get_application(application_id: str, service: ApplicationLedgerService = Depends(get_application_service)):
    try:
        return serialize_document(await service.get_by_id(application_id))
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error retrieving application {application_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch loan application")


@router.patch("/loan-status/{application_id}", response_model=Dict[str, Any])
async def update_loan_status(
    application_id: str,
    payload: StatusUpdate,
    service: ApplicationLedgerService = Depends(get_application_service),
):
    try:
        return update_result(await service.set_status(application_id, payload.status))
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error updating status of application {application_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update status")


@router.delete("/delete-application/{application_id}", response_model=Dict[str, Any])
async def delete_application(application_id: str, service: ApplicationLedgerService = Depends(get_application_service)):
    try:
        return delete_result(await service.delete(application_id))
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error deleting application {application_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete loan application")
