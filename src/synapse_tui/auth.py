"""Credential prompt flow for the homeserver session."""

from __future__ import annotations

import logging
from collections.abc import Callable

from synapse_tui.backend import BackendError, ErrorKind, SynapseClient
from synapse_tui.fields import MutableText
from synapse_tui.prompt import Action, PromptOverlay

_logger = logging.getLogger(__name__)

HOST_FIELD = 0
TOKEN_FIELD = 1

SETUP_MESSAGE = "Please provide the missing server information"

# Where to put the cursor after a failed validation; None leaves it alone.
_ERROR_FOCUS: dict[ErrorKind, int | None] = {
    ErrorKind.UNAUTHORIZED: TOKEN_FIELD,
    ErrorKind.HOST_UNREACHABLE: HOST_FIELD,
    ErrorKind.INVALID_RESPONSE: None,
}


class CredentialFlow:
    """Builds the credential overlay and validates what the user submits."""

    def __init__(self, client: SynapseClient, on_success: Callable[[SynapseClient], None] | None = None) -> None:
        self.client = client
        self.on_success = on_success

    def build_prompt(self) -> PromptOverlay:
        """Overlay pre-filled with the previous host and token."""
        cursor = TOKEN_FIELD if self.client.host else HOST_FIELD
        return PromptOverlay(
            message=SETUP_MESSAGE,
            fields=[
                ("Host", MutableText(self.client.host)),
                ("Access Token", MutableText(self.client.access_token)),
            ],
            buttons=[Action.OK, Action.EXIT],
            cursor=cursor,
        )

    def submit(self, prompt: PromptOverlay) -> bool:
        """Handle a resolved overlay. Returns False if the user chose to exit.

        On a validation failure the overlay is reopened with the error text.
        """
        if prompt.result is None or prompt.result.is_exit:
            return False

        host = prompt.field_text(HOST_FIELD).strip().rstrip("/")
        token = prompt.field_text(TOKEN_FIELD).strip()
        if not host:
            prompt.reopen("Error : host is mandatory", focus=HOST_FIELD)
            return True
        if not token:
            prompt.reopen("Error : token is mandatory", focus=TOKEN_FIELD)
            return True
        if not token.isascii():
            prompt.reopen("Error : token contains invalid characters", focus=TOKEN_FIELD)
            return True

        self.client.set_credentials(host, token)
        try:
            self.client.validate_token()
        except BackendError as e:
            _logger.info("Credential validation failed (%s)", e.kind.value)
            prompt.reopen(e.message, focus=_ERROR_FOCUS[e.kind])
            return True

        if self.on_success is not None:
            self.on_success(self.client)
        return True
