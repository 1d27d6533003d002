import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo.errors import PyMongoError

from microcredx.core.exceptions import InvalidArgumentError, NotFoundError, StoreError
from microcredx.database.models import LoanProduct
from microcredx.utils.object_id_utils import parse_object_id

logger = logging.getLogger(__name__)


class LoanCatalogService:
    """Create, read, update and delete loan products in the ``allloan`` collection."""

    def __init__(self, home_limit: Optional[int] = None):
        # None leaves /home-loans unbounded
        self.home_limit = home_limit
        logger.info("LoanCatalogService initialized (home_limit=%s)", home_limit)

    # Returns every product in store order
    async def list_all(self) -> List[LoanProduct]:
        try:
            products = await LoanProduct.find_all().to_list()
            logger.info(f"Fetched {len(products)} loan products")
            return products
        except PyMongoError as e:
            logger.error(f"Error fetching loan products: {e}")
            raise StoreError("Failed to fetch loans") from e

    # Returns products flagged for the home page, capped at home_limit when configured
    async def list_home(self) -> List[LoanProduct]:
        try:
            query = LoanProduct.find({"showOnHome": True})
            if self.home_limit is not None:
                query = query.limit(self.home_limit)
            products = await query.to_list()
            logger.info(f"Fetched {len(products)} home loan products")
            return products
        except PyMongoError as e:
            logger.error(f"Error fetching home loans: {e}")
            raise StoreError("Internal Server Error") from e

    # Returns products created by the given manager/admin email
    async def list_by_creator(self, email: str) -> List[LoanProduct]:
        try:
            return await LoanProduct.find({"createdBy": email}).to_list()
        except PyMongoError as e:
            logger.error(f"Error fetching loans created by {email}: {e}")
            raise StoreError("Failed to fetch loans") from e

    async def get_by_id(self, product_id: str) -> LoanProduct:
        object_id = parse_object_id(product_id)
        if object_id is None:
            logger.warning(f"Malformed loan id requested: {product_id}")
            raise NotFoundError("Loan Not Found")

        try:
            product = await LoanProduct.find_one({"_id": object_id})
        except PyMongoError as e:
            logger.error(f"Error retrieving loan {product_id}: {e}")
            raise StoreError("Server error") from e

        if product is None:
            logger.warning(f"Loan {product_id} not found")
            raise NotFoundError("Loan Not Found")
        return product

    async def create(self, fields: Dict[str, Any]) -> LoanProduct:
        """Persist a new product.

        ``fields`` uses attribute names (``short_desc``, ``created_by`` ...).
        Caller-supplied ``created_at``/``updated_at`` are kept; otherwise both
        are stamped with the same current time.
        """
        data = dict(fields)
        now = datetime.now(timezone.utc)
        created_at = data.pop("created_at", None) or now
        updated_at = data.pop("updated_at", None) or now

        product = LoanProduct(**data, created_at=created_at, updated_at=updated_at)
        try:
            await product.insert()
        except PyMongoError as e:
            logger.error(f"Error saving loan product: {e}")
            raise StoreError("Failed to save loan") from e

        logger.info(f"Loan product created with ID: {product.id}")
        return product

    async def update(self, product_id: str, changes: Dict[str, Any]) -> int:
        """Set the given stored fields (camelCase keys) and stamp ``updatedAt``.

        Returns the modified count; raises NotFoundError when no product has the id.
        """
        object_id = parse_object_id(product_id)
        if object_id is None:
            raise InvalidArgumentError("Invalid loan id")

        update_doc = {**changes, "updatedAt": datetime.now(timezone.utc)}
        try:
            result = await LoanProduct.find_one({"_id": object_id}).update({"$set": update_doc})
        except PyMongoError as e:
            logger.error(f"Error updating loan {product_id}: {e}")
            raise StoreError("Failed to update loan") from e

        if result.matched_count == 0:
            logger.warning(f"Loan {product_id} not found for update")
            raise NotFoundError("Loan not found")

        logger.info(f"Loan {product_id} updated ({sorted(changes)})")
        return result.modified_count

    # Deleting an absent product is not an error; the result just reports zero
    async def delete(self, product_id: str):
        object_id = parse_object_id(product_id)
        if object_id is None:
            raise InvalidArgumentError("Invalid loan id")

        try:
            result = await LoanProduct.find_one({"_id": object_id}).delete()
        except PyMongoError as e:
            logger.error(f"Error deleting loan {product_id}: {e}")
            raise StoreError("Failed to delete loan") from e

        logger.info(f"Deleted loan {product_id} (deleted={result.deleted_count if result else 0})")
        return result
