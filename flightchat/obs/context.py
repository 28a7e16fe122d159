"""Request context helpers using ContextVars.

Each HTTP request gets a request_id; calls to the flight service also carry
the envelope session_id so both services can be correlated in the logs.
"""

from contextvars import ContextVar
from typing import Optional


# Public ContextVars (names are stable API)
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
session_id_var: ContextVar[Optional[str]] = ContextVar("session_id", default=None)
service_var: ContextVar[Optional[str]] = ContextVar("service", default=None)
