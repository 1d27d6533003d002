from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from typing import Any, Dict, List
import logging

from microcredx.core.exceptions import NotFoundError, ServiceError
from microcredx.helpers.response_builder import (
    build_list_envelope,
    delete_result,
    insert_result,
    serialize_document,
    serialize_documents,
)
from microcredx.schemas import LoanProductAdminUpdate, LoanProductCreate, LoanProductUpdate
from microcredx.services.loan_catalog_service import LoanCatalogService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Loan Catalog"])


def get_loan_catalog_service(request: Request) -> LoanCatalogService:
    return request.app.state.catalog_service


# Lists every loan product
@router.get("/all-loan", response_model=List[Dict[str, Any]])
async def list_all_loans(service: LoanCatalogService = Depends(get_loan_catalog_service)):
    try:
        return serialize_documents(await service.list_all())
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error listing loans: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch loans")


# Lists the products featured on the home page
@router.get("/home-loans", response_model=Dict[str, Any])
async def list_home_loans(service: LoanCatalogService = Depends(get_loan_catalog_service)):
    try:
        return build_list_envelope(await service.list_home())
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error fetching home loans: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal Server Error")


@router.get("/home-allloans", response_model=Dict[str, Any])
async def list_home_all_loans(service: LoanCatalogService = Depends(get_loan_catalog_service)):
    try:
        return build_list_envelope(await service.list_all())
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error fetching all loans: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal Server Error")


# Returns one product wrapped in {success, data}; failures use {success: false, message}
@router.get("/loan-details/{loan_id}")
async def get_loan_details(loan_id: str, service: LoanCatalogService = Depends(get_loan_catalog_service)):
    try:
        product = await service.get_by_id(loan_id)
        return {"success": True, "data": serialize_document(product)}
    except NotFoundError as e:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"success": False, "message": e.message})
    except Exception as e:
        logger.error(f"Error retrieving loan details {loan_id}: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": "Server error"},
        )


# Lists the products a manager created
@router.get("/create-loan", response_model=List[Dict[str, Any]])
async def list_loans_by_creator(
    email: str = Query(..., description="Email of the creating manager"),
    service: LoanCatalogService = Depends(get_loan_catalog_service),
):
    try:
        return serialize_documents(await service.list_by_creator(email))
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error listing loans created by {email}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch loans")


@router.post("/add-loan", response_model=Dict[str, Any])
async def add_loan(payload: LoanProductCreate, service: LoanCatalogService = Depends(get_loan_catalog_service)):
    try:
        product = await service.create(payload.model_dump(exclude_unset=True))
        return insert_result(product)
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error saving loan: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save loan")


# Manager edit: only the summary fields
@router.put("/update-loan/{loan_id}", response_model=Dict[str, Any])
async def update_loan(
    loan_id: str,
    payload: LoanProductUpdate,
    service: LoanCatalogService = Depends(get_loan_catalog_service),
):
    try:
        modified = await service.update(loan_id, payload.model_dump(by_alias=True, exclude_unset=True))
        return {"success": True, "updatedCount": modified}
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error updating loan {loan_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update loan")


# Admin edit: the full field set
@router.put("/update-adminloan/{loan_id}", response_model=Dict[str, Any])
async def update_admin_loan(
    loan_id: str,
    payload: LoanProductAdminUpdate,
    service: LoanCatalogService = Depends(get_loan_catalog_service),
):
    try:
        modified = await service.update(loan_id, payload.model_dump(by_alias=True, exclude_unset=True))
        return {"success": True, "modifiedCount": modified}
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error updating loan {loan_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update loan")


@router.delete("/delete-loan/{loan_id}", response_model=Dict[str, Any])
async def delete_loan(loan_id: str, service: LoanCatalogService = Depends(get_loan_catalog_service)):
    try:
        return delete_result(await service.delete(loan_id))
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error deleting loan {loan_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete loan")
