# pvtracker/core/exceptions.py
"""
Domain errors raised by the store and the plan importer.

Every message is user-facing: the API routes hand `str(exc)` straight to the
client as the error detail.
"""


class PoleVaultError(Exception):
    """Base class for all tracker errors."""


class PlanValidationError(PoleVaultError):
    """An uploaded weekly plan is not valid JSON or has the wrong shape."""


class SessionNotFoundError(PoleVaultError):
    def __init__(self, session_id: str):
        super().__init__("Session not found.")
        self.session_id = session_id


class DuplicateSessionError(PoleVaultError):
    def __init__(self, session_id: str):
        super().__init__(f"A session with id '{session_id}' already exists.")
        self.session_id = session_id


class HeightNotFoundError(PoleVaultError):
    def __init__(self, block_id: str):
        super().__init__("Height not found in this session.")
        self.block_id = block_id


class AttemptClosedError(PoleVaultError):
    """A result was recorded on an attempt after the bar was already cleared."""
