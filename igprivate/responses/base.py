"""
Base Models
===========
Shared configuration for all igprivate response models.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class InstaModel(BaseModel):
    """
    Base model for Instagram data.

    Features:
        - extra="allow": unknown Instagram fields are preserved, not discarded
        - populate_by_name=True: fields can be set by name or alias
        - .to_dict(): convert back to plain dict
    """

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
    )

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=False, exclude_none=True)


class InstagramResponse(InstaModel):
    """Top-level API response envelope: {"status": "ok", ...}"""

    status: str = "ok"
    message: Optional[str] = None
