from typing import Any, Dict, Iterable, List

from beanie import Document
from pymongo.results import DeleteResult, UpdateResult


def serialize_document(document: Document) -> Dict[str, Any]:
    """Dump a Beanie document the way the store holds it: ``_id`` as a string and camelCase keys."""
    return document.model_dump(mode="json", by_alias=True, exclude={"revision_id"})


def serialize_documents(documents: Iterable[Document]) -> List[Dict[str, Any]]:
    return [serialize_document(d) for d in documents]


def insert_result(document: Document) -> Dict[str, Any]:
    return {"acknowledged": True, "insertedId": str(document.id)}


def update_result(result: UpdateResult) -> Dict[str, Any]:
    upserted_id = getattr(result, "upserted_id", None)
    return {
        "acknowledged": getattr(result, "acknowledged", True),
        "matchedCount": result.matched_count,
        "modifiedCount": result.modified_count,
        "upsertedId": str(upserted_id) if upserted_id is not None else None,
    }


def delete_result(result: DeleteResult) -> Dict[str, Any]:
    return {
        "acknowledged": getattr(result, "acknowledged", True),
        "deletedCount": result.deleted_count if result is not None else 0,
    }


def build_list_envelope(documents: List[Document]) -> Dict[str, Any]:
    return {
        "status": "success",
        "count": len(documents),
        "data": serialize_documents(documents),
    }
