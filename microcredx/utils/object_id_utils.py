from typing import Optional

from beanie import PydanticObjectId
from bson import ObjectId


def parse_object_id(value: str) -> Optional[PydanticObjectId]:
    """Return the ObjectId for ``value``, or None when it is not a well-formed id."""
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        return None
    return PydanticObjectId(value)
