"""Base models and common types."""

from typing import Any, Dict
from pydantic import BaseModel, ConfigDict


class DocumentBase(BaseModel):
    """Base model for MongoDB documents."""
    
    model_config = ConfigDict(
        validate_by_name=True,
        use_enum_values=True
    )

    @classmethod
    def from_mongo(cls, document: Dict[str, Any]):
        """Build a model from a raw Motor document, stringifying ``_id``."""
        data = dict(document)
        if "_id" in data:
            data["_id"] = str(data["_id"])
        return cls(**data)
