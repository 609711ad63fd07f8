from beanie import PydanticObjectId as OID
from fastapi import HTTPException, status


def parse_object_id(value: str, label: str = "id") -> OID:
    """Parse a path/body id into an ObjectId, 400 on malformed input."""
    try:
        return OID(value)
    except Exception:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid {label}")


def try_object_id(value: str) -> OID | None:
    try:
        return OID(value)
    except Exception:
        return None
