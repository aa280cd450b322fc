"""Transfer-ownership form.

Both selectors come from the snapshot taken at mount. A transfer recorded
elsewhere after that is not reflected until the form is mounted again.
"""

from registry_console.api.client import TRANSFER_FAILED
from registry_console.core.exceptions import ValidationError
from registry_console.core.reference_data import ReferenceKind
from registry_console.core.schemas.registry import OwnershipTransfer
from registry_console.web.forms.base import RegistryForm

SELECTION_MESSAGE = "Please select both land and a new owner."


class TransferOwnershipForm(RegistryForm):
    name = "transfer"
    fields = ("land_id", "new_owner_id")
    reference_kinds = (ReferenceKind.LANDS, ReferenceKind.OWNERS)
    fallback_message = TRANSFER_FAILED

    def validate(self) -> OwnershipTransfer:
        if self.missing_fields():
            raise ValidationError(SELECTION_MESSAGE)
        return OwnershipTransfer(
            land_id=self.values["land_id"].strip(),
            new_owner_id=self.values["new_owner_id"].strip(),
        )

    async def perform(self, request: OwnershipTransfer) -> str:
        return await self._client.transfer_ownership(request.land_id, request.new_owner_id)
