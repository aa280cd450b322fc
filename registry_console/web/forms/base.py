"""
Form orchestration contract.

Every form follows the same cycle:

1. ``validate()`` checks required fields locally. A failure sets an error
   message and no request is made.
2. ``perform()`` issues exactly one request. There is no retry.
3. On success ``succeed()`` clears the inputs and shows the server's
   message; on failure the error message is the server's structured
   message, or the per-action fallback when there was none.

A form is a component with a lifetime. ``mount()`` fetches its reference
snapshot and ``dispose()`` cancels whatever is still in flight. A result
that arrives after disposal is dropped and never touches the form.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from registry_console.api.client import RegistryApiClient
from registry_console.core.exceptions import RemoteError, ScopeClosedError, ValidationError
from registry_console.core.lifetime import TaskScope
from registry_console.core.reference_data import (
    EMPTY_SNAPSHOT,
    ReferenceDataCache,
    ReferenceKind,
    ReferenceSnapshot,
)
from registry_console.core.schemas.registry import Owner, Property

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "All fields are required."


class MessageKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class FormMessage:
    text: str = ""
    kind: Optional[MessageKind] = None

    @property
    def is_error(self) -> bool:
        return self.kind is MessageKind.ERROR

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "type": self.kind.value if self.kind else ""}


NO_MESSAGE = FormMessage()


def owner_label(owner: Owner) -> str:
    return f"{owner.name} (ID: ...{owner.id[-4:]})"


def land_label(land: Property) -> str:
    return f"{land.location} (Survey#: {land.survey_number})"


class RegistryForm(ABC):
    """Base class for the console's forms.

    Subclasses declare their input ``fields`` and the ``reference_kinds``
    their selectors need, and implement ``validate`` and ``perform``.
    """

    name: str = "form"
    fields: Tuple[str, ...] = ()
    secret_fields: Tuple[str, ...] = ()
    reference_kinds: Tuple[ReferenceKind, ...] = ()
    fallback_message: str = ""

    def __init__(self, client: RegistryApiClient):
        self._client = client
        self.scope = TaskScope(self.name)
        self._reference = ReferenceDataCache(client, self.scope)
        self.snapshot: ReferenceSnapshot = EMPTY_SNAPSHOT
        self.message: FormMessage = NO_MESSAGE
        self.values: Dict[str, str] = dict.fromkeys(self.fields, "")
        self.mounted = False

    @property
    def disposed(self) -> bool:
        return self.scope.closed

    async def mount(self) -> "RegistryForm":
        """Fetch this instance's reference snapshot."""
        if self.reference_kinds:
            try:
                self.snapshot = await self._reference.fetch_snapshot(self.reference_kinds)
            except ScopeClosedError:
                logger.debug(f"{self.name} disposed while mounting; snapshot dropped")
                return self
        self.mounted = True
        return self

    def dispose(self) -> None:
        self.scope.close()

    def update(self, **values: Any) -> None:
        """Set input values. Unknown fields are rejected."""
        unknown = set(values) - set(self.fields)
        if unknown:
            raise ValueError(f"Unknown field(s) for {self.name}: {', '.join(sorted(unknown))}")
        for field, value in values.items():
            self.values[field] = "" if value is None else str(value)

    def reset(self) -> None:
        self.values = dict.fromkeys(self.fields, "")

    def missing_fields(self) -> List[str]:
        return [field for field in self.fields if not self.values.get(field, "").strip()]

    @abstractmethod
    def validate(self) -> Any:
        """Build the request from the current inputs.

        Raises:
            ValidationError: When a required input is missing or malformed.
        """

    @abstractmethod
    async def perform(self, request: Any) -> Any:
        """Issue the form's single request"""

    def begin(self) -> None:
        """Called after validation passed, right before the request."""

    def succeed(self, result: Any) -> None:
        self.reset()
        self._show(str(result or ""), MessageKind.SUCCESS)

    def fail(self, error: RemoteError) -> None:
        self._show(error.message or self.fallback_message, MessageKind.ERROR)

    async def submit(self) -> FormMessage:
        """Run one validate/request/report cycle and return the message shown."""
        if self.disposed:
            logger.debug(f"Submit on disposed {self.name} ignored")
            return self.message

        try:
            request = self.validate()
        except ValidationError as e:
            self._show(e.message, MessageKind.ERROR)
            return self.message

        self.begin()
        try:
            result = await self.scope.run(self.perform(request))
        except ScopeClosedError:
            logger.debug(f"{self.name} disposed with a request in flight; result dropped")
            return self.message
        except RemoteError as e:
            if not self.disposed:
                self.fail(e)
            return self.message

        if self.disposed:
            return self.message
        self.succeed(result)
        return self.message

    def _show(self, text: str, kind: MessageKind) -> None:
        self.message = FormMessage(text=text, kind=kind)

    def options(self) -> Dict[str, List[Dict[str, str]]]:
        """Selector options built from the reference snapshot"""
        options: Dict[str, List[Dict[str, str]]] = {}
        if ReferenceKind.OWNERS in self.reference_kinds:
            options["owners"] = [
                {"value": owner.id, "label": owner_label(owner)} for owner in self.snapshot.owners
            ]
        if ReferenceKind.LANDS in self.reference_kinds:
            options["lands"] = [
                {"value": land.id, "label": land_label(land)} for land in self.snapshot.lands
            ]
        return options

    def to_dict(self) -> Dict[str, Any]:
        values = {
            field: ("" if field in self.secret_fields else value)
            for field, value in self.values.items()
        }
        data: Dict[str, Any] = {
            "form": self.name,
            "values": values,
            "message": self.message.to_dict(),
        }
        if self.reference_kinds:
            data["options"] = self.options()
            data["unavailable"] = sorted(kind.value for kind in self.snapshot.failed)
        return data
