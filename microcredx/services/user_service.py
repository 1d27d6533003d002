import logging
from typing import List, Optional

from pymongo.errors import DuplicateKeyError, PyMongoError
from pymongo.results import UpdateResult

from microcredx.core.exceptions import InvalidArgumentError, NotFoundError, StoreError
from microcredx.database.models import ApplicationStatusEnum, RoleEnum, User
from microcredx.services.application_service import ApplicationLedgerService
from microcredx.utils.object_id_utils import parse_object_id

logger = logging.getLogger(__name__)


def validate_role(value: str) -> RoleEnum:
    try:
        return RoleEnum(value)
    except ValueError:
        valid = ", ".join(r.value for r in RoleEnum)
        raise InvalidArgumentError(f"Invalid role. Valid roles are: {valid}")


class UserDirectoryService:

    def __init__(self, ledger: ApplicationLedgerService):
        self.ledger = ledger
        logger.info("UserDirectoryService initialized")

    async def list_all(self) -> List[User]:
        try:
            return await User.find_all().to_list()
        except PyMongoError as e:
            logger.error(f"Error fetching users: {e}")
            raise StoreError("Failed to fetch users") from e

    async def find_by_email(self, email: str) -> Optional[User]:
        try:
            return await User.find_one({"email": email})
        except PyMongoError as e:
            logger.error(f"Error looking up user {email}: {e}")
            raise StoreError("Failed to fetch user") from e

    # Returns the stored user for email, creating it on first sight; repeat calls never modify it
    async def register_or_fetch(self, email: str, name: Optional[str] = None, role: Optional[str] = None) -> User:
        existing_user = await self.find_by_email(email)
        if existing_user:
            return existing_user

        new_user = User(
            email=email,
            name=name,
            role=validate_role(role) if role else RoleEnum.borrower,
        )
        try:
            await new_user.insert()
        except DuplicateKeyError:
            # Another request registered the same email first; hand back that record
            logger.info(f"User {email} registered concurrently; returning stored record")
            return await self.find_by_email(email)
        except PyMongoError as e:
            logger.error(f"User save failed for {email}: {e}")
            raise StoreError("Failed to save user") from e

        logger.info(f"User registered with ID: {new_user.id}")
        return new_user

    async def get_role(self, email: str) -> RoleEnum:
        user = await self.find_by_email(email)
        if user is None:
            logger.warning(f"Role requested for unknown user {email}")
            raise NotFoundError("User not found")
        return user.role

    async def set_role(self, user_id: str, role: str) -> UpdateResult:
        role_enum = validate_role(role)
        object_id = parse_object_id(user_id)
        if object_id is None:
            raise InvalidArgumentError("Invalid user id")

        try:
            result = await User.find_one({"_id": object_id}).update({"$set": {"role": role_enum.value}})
        except PyMongoError as e:
            logger.error(f"Error updating role of user {user_id}: {e}")
            raise StoreError("Failed to update role") from e

        logger.info(f"User {user_id} role set to {role_enum.value} (matched={result.matched_count})")
        return result

    async def count_pending(self) -> int:
        return await self.ledger.count_by_status(ApplicationStatusEnum.pending)
