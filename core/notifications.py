"""
Transient user notifications ("toasts").

A NotificationService is created per consumer and passed in explicitly
(editor, service layer, tests) rather than living in module state. It keeps a
bounded queue, newest first. An open notification closes by itself once its
``duration`` has elapsed; closed (or dismissed) notifications are removed once
``remove_delay`` further seconds have passed. Expiry is applied lazily on read.
"""
from __future__ import annotations

import itertools
import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

VARIANT_DEFAULT = 'default'
VARIANT_DESTRUCTIVE = 'destructive'

Listener = Callable[[List['Notification']], None]


@dataclass(frozen=True)
class Notification:
    id: str
    title: str
    description: str = ''
    variant: str = VARIANT_DEFAULT
    open: bool = True
    expires_at: Optional[float] = None
    dismissed_at: Optional[float] = None


class NotificationHandle:
    """Returned by ``notify`` so the caller can update or dismiss its own toast."""

    def __init__(self, service: 'NotificationService', notification_id: str):
        self._service = service
        self.id = notification_id

    def dismiss(self) -> None:
        self._service.dismiss(self.id)

    def update(self, **changes) -> None:
        self._service.update(self.id, **changes)


class NotificationService:
    def __init__(self, limit: int = 1, remove_delay: float = 1000.0, duration: Optional[float] = 5.0,
                 clock: Callable[[], float] = time.monotonic):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit
        self.remove_delay = remove_delay
        self.duration = duration
        self._clock = clock
        self._queue: List[Notification] = []
        self._listeners: List[Listener] = []
        self._ids = itertools.count(1)

    @classmethod
    def from_settings(cls, **overrides) -> 'NotificationService':
        from django.conf import settings

        options = {
            'limit': getattr(settings, 'NOTIFICATION_LIMIT', 1),
            'remove_delay': getattr(settings, 'NOTIFICATION_REMOVE_DELAY', 1000.0),
            'duration': getattr(settings, 'NOTIFICATION_DURATION', 5.0),
        }
        options.update(overrides)
        return cls(**options)

    # ------------------------------
    # Queue operations
    # ------------------------------
    def notify(self, title: str, description: str = '', variant: str = VARIANT_DEFAULT,
               duration: Optional[float] = None) -> NotificationHandle:
        """Show a notification; ``duration`` (seconds) overrides the service default."""
        duration = self.duration if duration is None else duration
        expires_at = self._clock() + duration if duration is not None else None
        notification = Notification(id=str(next(self._ids)), title=title, description=description,
                                    variant=variant, expires_at=expires_at)
        self._queue = [notification] + self._queue
        evicted = self._queue[self.limit:]
        self._queue = self._queue[:self.limit]
        if evicted:
            logger.debug("Evicted %d notification(s) over limit=%d", len(evicted), self.limit)
        self._publish()
        return NotificationHandle(self, notification.id)

    def error(self, description: str, title: str = 'Error') -> NotificationHandle:
        return self.notify(title, description, VARIANT_DESTRUCTIVE)

    def update(self, notification_id: str, **changes) -> None:
        changes.pop('id', None)
        self._queue = [replace(n, **changes) if n.id == notification_id else n for n in self._queue]
        self._publish()

    def dismiss(self, notification_id: Optional[str] = None) -> None:
        """Close one notification (or all) and schedule removal."""
        now = self._clock()
        self._queue = [
            replace(n, open=False, dismissed_at=n.dismissed_at if n.dismissed_at is not None else now)
            if notification_id is None or n.id == notification_id else n
            for n in self._queue
        ]
        self._publish()

    def remove(self, notification_id: Optional[str] = None) -> None:
        if notification_id is None:
            self._queue = []
        else:
            self._queue = [n for n in self._queue if n.id != notification_id]
        self._publish()

    @property
    def notifications(self) -> List[Notification]:
        self._purge_expired()
        return list(self._queue)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------
    # Internals
    # ------------------------------
    def _purge_expired(self) -> None:
        now = self._clock()
        current = [
            replace(n, open=False, dismissed_at=n.expires_at)
            if n.open and n.expires_at is not None and now >= n.expires_at else n
            for n in self._queue
        ]
        kept = [
            n for n in current
            if n.dismissed_at is None or now - n.dismissed_at < self.remove_delay
        ]
        if kept != self._queue:
            self._queue = kept
            self._publish()

    def _publish(self) -> None:
        snapshot = list(self._queue)
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Notification listener %r failed", listener)

    def as_dicts(self) -> List[Dict[str, object]]:
        return [
            {'id': n.id, 'title': n.title, 'description': n.description, 'variant': n.variant, 'open': n.open}
            for n in self.notifications
        ]
