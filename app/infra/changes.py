"""
In-process change feed.

Repositories publish an event after every committed write; the sync service
lets the application subscribe per table, the way a realtime channel would.
"""

import logging
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"


class ChangeEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    table: str
    event: str  # INSERT, UPDATE or DELETE
    record_id: str
    user_id: Optional[str] = None


ChangeCallback = Callable[[ChangeEvent], None]

_subscribers: Dict[str, List[ChangeCallback]] = {}


def subscribe(table: str, callback: ChangeCallback) -> Callable[[], None]:
    """
    Register a callback for changes on a table.

    Args:
        table: Table name, e.g. 'tasks'
        callback: Function that receives the ChangeEvent

    Returns:
        A function that removes the subscription again.
    """
    callbacks = _subscribers.setdefault(table, [])
    if callback not in callbacks:
        callbacks.append(callback)

    def unsubscribe():
        if callback in callbacks:
            callbacks.remove(callback)

    return unsubscribe


def publish(table: str, event: str, record_id: str, user_id: Optional[str] = None) -> None:
    """Notify all subscribers of a table"""
    change = ChangeEvent(table=table, event=event, record_id=record_id, user_id=user_id)
    for callback in list(_subscribers.get(table, [])):
        try:
            callback(change)
        except Exception:
            logger.exception(f"Change subscriber failed for {table} {event}")


def clear_subscribers() -> None:
    """Drop every subscription"""
    _subscribers.clear()
