"""Pydantic schemas for requests sent to the backend."""

from datetime import date
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class GamePayload(BaseModel):
    """Normalized entry body for create and update requests."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    release_date: date
    platforms: list[str] = Field(..., min_length=1)
    shop_url: Optional[str] = None
    image_url: Optional[str] = None
    developer: Optional[str] = None
    publisher: Optional[str] = None
    catalog_id: Optional[Union[int, str]] = Field(default=None, alias="igdbId")
    tba: bool = False

    def to_wire(self) -> dict:
        """Serialize with backend field names, omitting absent optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
