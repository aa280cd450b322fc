"""Register-owner form"""

from registry_console.api.client import REGISTER_OWNER_FAILED
from registry_console.core.exceptions import ValidationError
from registry_console.core.schemas.registry import OwnerRegistration
from registry_console.web.forms.base import REQUIRED_FIELDS_MESSAGE, RegistryForm


class RegisterOwnerForm(RegistryForm):
    name = "register_owner"
    fields = ("name", "contact", "email", "proof_id")
    fallback_message = REGISTER_OWNER_FAILED

    def validate(self) -> OwnerRegistration:
        if self.missing_fields():
            raise ValidationError(REQUIRED_FIELDS_MESSAGE)
        return OwnerRegistration(**{field: self.values[field].strip() for field in self.fields})

    async def perform(self, request: OwnerRegistration) -> str:
        return await self._client.register_owner(request)
