"""
Errors raised by the backend layer.

The store catches these per operation; everything else lets them propagate.
"""


class BackendError(Exception):
    """A backend read or write failed."""


class AuthError(BackendError):
    """The backend rejected our credentials. Never retried."""


class NotFoundError(BackendError):
    """The referenced record does not exist."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id
