from registry_console.web.forms.auth import LoginForm, RegisterAccountForm
from registry_console.web.forms.base import FormMessage, MessageKind, RegistryForm
from registry_console.web.forms.land import RegisterLandForm
from registry_console.web.forms.owner import RegisterOwnerForm
from registry_console.web.forms.records import ViewRecordForm
from registry_console.web.forms.transfer import TransferOwnershipForm

__all__ = [
    "FormMessage",
    "LoginForm",
    "MessageKind",
    "RegisterAccountForm",
    "RegisterLandForm",
    "RegisterOwnerForm",
    "RegistryForm",
    "TransferOwnershipForm",
    "ViewRecordForm",
]
