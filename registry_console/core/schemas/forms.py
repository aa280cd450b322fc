"""Request bodies accepted by the console's form views.

Every field defaults to empty so that a missing input reaches the form's
own required-field check instead of failing request validation.
"""

from pydantic import BaseModel, ConfigDict, Field


class FormInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True, extra="ignore")

    def values(self) -> dict:
        return self.model_dump()


class CredentialsInput(FormInput):
    email: str = ""
    password: str = ""


class OwnerInput(FormInput):
    name: str = ""
    contact: str = ""
    email: str = ""
    proof_id: str = Field("", alias="proofId")


class LandInput(FormInput):
    location: str = ""
    area: str = ""
    market_value: str = Field("", alias="marketValue")
    property_type: str = Field("", alias="propertyType")
    survey_number: str = Field("", alias="surveyNumber")
    current_owner_id: str = Field("", alias="currentOwnerId")


class TransferInput(FormInput):
    land_id: str = Field("", alias="landId")
    new_owner_id: str = Field("", alias="newOwnerId")
