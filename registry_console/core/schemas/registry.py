"""Registry entity schemas

Field names follow the registry service's JSON (camelCase, Mongo-style
``_id``); Python attributes are snake_case and populated by alias.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class RegistryModel(BaseModel):
    """Base for registry payloads"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_payload(self) -> dict:
        """Serialize with the service's field names"""
        return self.model_dump(by_alias=True, exclude_none=True)


class Owner(RegistryModel):
    id: str = Field(..., alias="_id")
    name: str
    contact: str = ""
    email: str = ""
    proof_id: str = Field("", alias="proofId")


class OwnerRef(RegistryModel):
    """Owner as embedded in a land record; the service may omit fields."""

    id: Optional[str] = Field(None, alias="_id")
    name: str = ""
    contact: Optional[str] = None
    email: Optional[str] = None
    proof_id: Optional[str] = Field(None, alias="proofId")


class Property(RegistryModel):
    id: str = Field(..., alias="_id")
    location: str
    area: str = ""
    market_value: float = Field(0, alias="marketValue", ge=0)
    property_type: str = Field("", alias="propertyType")
    survey_number: str = Field("", alias="surveyNumber")
    current_owner_id: Optional[str] = Field(None, alias="currentOwnerId")

    @field_validator("area", "survey_number", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("current_owner_id", mode="before")
    @classmethod
    def unwrap_owner(cls, v: Any) -> Any:
        """Accept a populated owner object in place of its id."""
        if isinstance(v, dict):
            return v.get("_id") or v.get("id")
        return v

    @model_validator(mode="before")
    @classmethod
    def take_current_owner(cls, data: Any) -> Any:
        # The service sends either currentOwnerId or a populated currentOwner
        if isinstance(data, dict) and "currentOwnerId" not in data and "current_owner_id" not in data:
            owner = data.get("currentOwner")
            if owner is not None:
                data = {**data, "currentOwnerId": owner}
        return data


class OwnershipEntry(RegistryModel):
    owner: OwnerRef
    transfer_date: datetime = Field(..., alias="transferDate")


class LandRecord(RegistryModel):
    """Property with its denormalized current owner and transfer history"""

    location: str
    survey_number: str = Field("", alias="surveyNumber")
    area: str = ""
    market_value: float = Field(0, alias="marketValue", ge=0)
    current_owner: OwnerRef = Field(..., alias="currentOwner")
    ownership_history: List[OwnershipEntry] = Field(
        default_factory=list, alias="ownershipHistory"
    )

    @field_validator("area", "survey_number", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class OwnerRegistration(RegistryModel):
    """Body of POST /registerOwner"""

    name: str
    contact: str
    email: str
    proof_id: str = Field(..., alias="proofId")


class LandRegistration(RegistryModel):
    """Body of POST /registerLand"""

    location: str
    area: str
    market_value: float = Field(..., alias="marketValue", ge=0)
    property_type: str = Field(..., alias="propertyType")
    survey_number: str = Field(..., alias="surveyNumber")
    current_owner_id: str = Field(..., alias="currentOwnerId")


class OwnershipTransfer(RegistryModel):
    """Body of PUT /transferOwnership"""

    land_id: str = Field(..., alias="landId")
    new_owner_id: str = Field(..., alias="newOwnerId")


class MessageResponse(RegistryModel):
    message: str = ""
