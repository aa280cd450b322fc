"""View-record form: one read of a land's record and ownership history."""

from typing import Any, Dict, Optional

from registry_console.api.client import FETCH_RECORD_FAILED
from registry_console.core.exceptions import ValidationError
from registry_console.core.reference_data import ReferenceKind
from registry_console.core.schemas.registry import LandRecord
from registry_console.web.forms.base import NO_MESSAGE, RegistryForm

SELECTION_MESSAGE = "Please select a land to view its record."


class ViewRecordForm(RegistryForm):
    name = "view_record"
    fields = ("land_id",)
    reference_kinds = (ReferenceKind.LANDS,)
    fallback_message = FETCH_RECORD_FAILED

    def __init__(self, client):
        super().__init__(client)
        self.record: Optional[LandRecord] = None

    def validate(self) -> str:
        land_id = self.values["land_id"].strip()
        if not land_id:
            raise ValidationError(SELECTION_MESSAGE)
        return land_id

    def begin(self) -> None:
        self.message = NO_MESSAGE
        self.record = None

    async def perform(self, land_id: str) -> LandRecord:
        return await self._client.get_land_record(land_id)

    def succeed(self, result: LandRecord) -> None:
        # The selection stays; a search shows the record, not a message
        self.record = result

    async def search(self, land_id: Optional[str] = None):
        if land_id is not None:
            self.update(land_id=land_id)
        return await self.submit()

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["record"] = self.record.model_dump(by_alias=True, mode="json") if self.record else None
        return data
