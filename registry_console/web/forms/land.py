"""Register-land form. The owner selector is filled from the mount snapshot."""

import math

from registry_console.api.client import REGISTER_LAND_FAILED
from registry_console.core.exceptions import ValidationError
from registry_console.core.reference_data import ReferenceKind
from registry_console.core.schemas.registry import LandRegistration
from registry_console.web.forms.base import REQUIRED_FIELDS_MESSAGE, RegistryForm

MARKET_VALUE_MESSAGE = "Market value must be a non-negative number."


class RegisterLandForm(RegistryForm):
    name = "register_land"
    fields = (
        "location",
        "area",
        "market_value",
        "property_type",
        "survey_number",
        "current_owner_id",
    )
    reference_kinds = (ReferenceKind.OWNERS,)
    fallback_message = REGISTER_LAND_FAILED

    def validate(self) -> LandRegistration:
        if self.missing_fields():
            raise ValidationError(REQUIRED_FIELDS_MESSAGE)

        try:
            market_value = float(self.values["market_value"])
        except ValueError:
            raise ValidationError(MARKET_VALUE_MESSAGE) from None
        if not math.isfinite(market_value) or market_value < 0:
            raise ValidationError(MARKET_VALUE_MESSAGE)

        values = {field: self.values[field].strip() for field in self.fields}
        values["market_value"] = market_value
        return LandRegistration(**values)

    async def perform(self, request: LandRegistration) -> str:
        return await self._client.register_land(request)
