"""Pydantic schemas used to validate incoming JSON:API and HAL documents.

Unknown members are ignored so that documents produced by newer servers
still decode.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _coerce_id(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class JSONAPIResourceIdentifier(BaseModel):
    """Resource identifier object: type + id."""

    model_config = ConfigDict(extra="ignore")

    type: str = Field(min_length=1)
    id: str = Field(min_length=1)

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> Any:
        return _coerce_id(value)


class JSONAPIRelationship(BaseModel):
    """Relationship object; ``data`` may be omitted entirely."""

    model_config = ConfigDict(extra="ignore")

    links: Optional[Dict[str, Any]] = None
    data: Union[JSONAPIResourceIdentifier, List[JSONAPIResourceIdentifier], None] = None
    meta: Optional[Dict[str, Any]] = None

    @property
    def has_data(self) -> bool:
        return "data" in self.model_fields_set


class JSONAPIResource(BaseModel):
    """Resource object with attributes and relationships."""

    model_config = ConfigDict(extra="ignore")

    type: str = Field(min_length=1)
    id: str = Field(min_length=1)
    attributes: Optional[Dict[str, Any]] = None
    relationships: Optional[Dict[str, JSONAPIRelationship]] = None
    links: Optional[Dict[str, Any]] = None
    meta: Optional[Dict[str, Any]] = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> Any:
        return _coerce_id(value)


class JSONAPIDocument(BaseModel):
    """Top-level JSON:API document; ``data`` is required."""

    model_config = ConfigDict(extra="ignore")

    data: Union[JSONAPIResource, List[JSONAPIResource], None]
    included: Optional[List[JSONAPIResource]] = None
    meta: Optional[Dict[str, Any]] = None
    links: Optional[Dict[str, Any]] = None


class JSONAPIErrorDocument(BaseModel):
    """Top-level JSON:API error document."""

    errors: List[Dict[str, Any]]


class HALLink(BaseModel):
    """HAL link object; ``method`` is a common non-standard extension."""

    model_config = ConfigDict(extra="ignore")

    href: str
    method: Optional[str] = None
    type: Optional[str] = None
    title: Optional[str] = None
    templated: bool = False


class HALResource(BaseModel):
    """HAL resource object; state properties are read from the raw mapping."""

    model_config = ConfigDict(extra="ignore")

    links: Dict[str, Union[HALLink, List[HALLink]]] = Field(alias="_links")
    embedded: Optional[Dict[str, Any]] = Field(default=None, alias="_embedded")

    @field_validator("links")
    @classmethod
    def require_self_link(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(value.get("self"), HALLink):
            raise ValueError("_links.self must be a single link object")
        return value
