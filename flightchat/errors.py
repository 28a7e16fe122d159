"""Error taxonomy for the chat pipeline and its collaborators.

Pipeline errors carry a generic, user-facing message; the upstream error
text is kept in ``detail`` for diagnostics only.
"""

from typing import Optional

GENERIC_APOLOGY = "Sorry, something went wrong while processing your request."


class PipelineError(Exception):
    """Base class for caller-visible chat pipeline failures."""

    user_message: str = GENERIC_APOLOGY

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.user_message)
        self.detail = detail


class EmptyRequest(PipelineError):
    user_message = "At least one message is required."


class UpstreamLLMFailure(PipelineError):
    def __init__(self, detail: Optional[str] = None, step: Optional[str] = None):
        super().__init__(detail)
        self.step = step


class UpstreamSearchFailure(PipelineError):
    pass


# Collaborator errors

class LLMConfigError(RuntimeError):
    """No usable LLM provider is configured."""


class FlightSearchError(RuntimeError):
    """The flight service call failed or returned a malformed payload."""


class AmadeusError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
