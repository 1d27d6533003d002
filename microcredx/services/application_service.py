import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Union

from pymongo.errors import DuplicateKeyError, PyMongoError
from pymongo.results import UpdateResult

from microcredx.core.exceptions import ConflictError, InvalidArgumentError, NotFoundError, StoreError
from microcredx.database.models import (
    APPLICATION_FORM_FIELDS,
    ApplicationStatusEnum,
    LoanApplication,
)
from microcredx.utils.object_id_utils import parse_object_id

logger = logging.getLogger(__name__)


def _stored_name(field_name: str) -> str:
    field = LoanApplication.model_fields[field_name]
    return field.alias or field_name


def validate_status(value: Union[str, ApplicationStatusEnum]) -> ApplicationStatusEnum:
    try:
        return ApplicationStatusEnum(value)
    except ValueError:
        valid = ", ".join(s.value for s in ApplicationStatusEnum)
        raise InvalidArgumentError(f"Invalid status. Valid statuses are: {valid}")


class ApplicationLedgerService:
    """Loan applications submitted by borrowers and reviewed by staff.

    A partial unique index on ``email`` (restricted to Pending applications)
    backs the one-active-application-per-borrower rule. ``submit`` updates the
    borrower's Pending application when there is one and inserts otherwise; an
    insert that loses a race against a concurrent submission hits the index and
    is retried once as an update.
    """

    def __init__(self):
        logger.info("ApplicationLedgerService initialized")

    async def list_all(self) -> List[LoanApplication]:
        try:
            return await LoanApplication.find_all().to_list()
        except PyMongoError as e:
            logger.error(f"Error fetching loan applications: {e}")
            raise StoreError("Failed to fetch loan applications") from e

    async def list_by_status(self, status: Union[str, ApplicationStatusEnum]) -> List[LoanApplication]:
        status_enum = validate_status(status)
        try:
            applications = await LoanApplication.find({"status": status_enum.value}).to_list()
            logger.info(f"Fetched {len(applications)} {status_enum.value} applications")
            return applications
        except PyMongoError as e:
            logger.error(f"Error fetching {status_enum.value} applications: {e}")
            raise StoreError("Failed to fetch loan applications") from e

    async def list_by_email(self, email: str) -> List[LoanApplication]:
        try:
            return await LoanApplication.find({"email": email}).to_list()
        except PyMongoError as e:
            logger.error(f"Error fetching applications for {email}: {e}")
            raise StoreError("Failed to fetch loan applications") from e

    async def get_by_id(self, application_id: str) -> LoanApplication:
        object_id = parse_object_id(application_id)
        if object_id is None:
            raise NotFoundError("Loan application not found")

        try:
            application = await LoanApplication.find_one({"_id": object_id})
        except PyMongoError as e:
            logger.error(f"Error retrieving application {application_id}: {e}")
            raise StoreError("Failed to fetch loan application") from e

        if application is None:
            logger.warning(f"Loan application {application_id} not found")
            raise NotFoundError("Loan application not found")
        return application

    async def count_by_status(self, status: Union[str, ApplicationStatusEnum]) -> int:
        status_enum = validate_status(status)
        try:
            return await LoanApplication.find({"status": status_enum.value}).count()
        except PyMongoError as e:
            logger.error(f"Error counting {status_enum.value} applications: {e}")
            raise StoreError("Failed to get count") from e

    async def submit(self, email: str, fields: Dict[str, Any]) -> Union[LoanApplication, UpdateResult]:
        """Create the borrower's Pending application or overwrite its form fields.

        Returns the new ``LoanApplication`` when one was created, otherwise the
        ``UpdateResult`` of the in-place update. Status and fee status are never
        touched by a resubmission.
        """
        form = {name: fields.get(name) for name in APPLICATION_FORM_FIELDS}
        try:
            result = await self._update_pending(email, form)
            if result.matched_count:
                logger.info(f"Updated pending application for {email}")
                return result

            application = LoanApplication(email=email, **form)
            try:
                await application.insert()
            except DuplicateKeyError:
                logger.warning(f"Concurrent submission detected for {email}; retrying as update")
                result = await self._update_pending(email, form)
                if result.matched_count == 0:
                    raise ConflictError("A loan application for this email is already being processed")
                return result

            logger.info(f"Loan application created with ID: {application.id}")
            return application
        except PyMongoError as e:
            logger.error(f"Error saving loan application for {email}: {e}")
            raise StoreError("Failed to save loan application") from e

    async def _update_pending(self, email: str, form: Dict[str, Any]) -> UpdateResult:
        changes = {_stored_name(name): value for name, value in form.items()}
        changes["updatedAt"] = datetime.now(timezone.utc)
        return await LoanApplication.find_one(
            {"email": email, "status": ApplicationStatusEnum.pending.value}
        ).update({"$set": changes})

    async def set_status(self, application_id: str, status: Union[str, ApplicationStatusEnum]) -> UpdateResult:
        status_enum = validate_status(status)
        object_id = parse_object_id(application_id)
        if object_id is None:
            raise InvalidArgumentError("Invalid application id")

        try:
            result = await LoanApplication.find_one({"_id": object_id}).update(
                {"$set": {"status": status_enum.value, "updatedAt": datetime.now(timezone.utc)}}
            )
        except DuplicateKeyError as e:
            # Reopening would leave the borrower with two Pending applications
            raise ConflictError("This borrower already has a pending loan application") from e
        except PyMongoError as e:
            logger.error(f"Error updating status of application {application_id}: {e}")
            raise StoreError("Failed to update status") from e

        logger.info(f"Application {application_id} status set to {status_enum.value} (matched={result.matched_count})")
        return result

    async def delete(self, application_id: str):
        object_id = parse_object_id(application_id)
        if object_id is None:
            raise InvalidArgumentError("Invalid application id")

        try:
            result = await LoanApplication.find_one({"_id": object_id}).delete()
        except PyMongoError as e:
            logger.error(f"Error deleting application {application_id}: {e}")
            raise StoreError("Failed to delete loan application") from e

        logger.info(f"Deleted application {application_id}")
        return result
