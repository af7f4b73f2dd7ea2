"""
In-memory checklist editing and save-payload normalization.

The editor holds a draft of a checklist (name, description and an ordered
item list) while the user adds, edits, removes and drags items around. New
items are keyed by a DraftId until the checklist is persisted; draft keys and
editing state never reach the save payload.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from typing import Callable, Iterable, List, Mapping, Optional, Sequence

from core.notifications import VARIANT_DESTRUCTIVE, NotificationService

from .exceptions import ChecklistValidationError

logger = logging.getLogger(__name__)

DRAFT_PREFIX = 'draft-'

NAME_REQUIRED = "Checklist name is required"
ITEMS_REQUIRED = "At least one checklist item is required"
LABEL_REQUIRED = "All items must have a label"
VALIDATION_TITLE = "Validation Error"
SUCCESS_TITLE = "Success"
SAVE_CREATED = "Checklist created successfully"
SAVE_UPDATED = "Checklist updated successfully"
SAVE_FAILED = "Failed to save checklist"


class DraftId(str):
    """Client-only key for an item that has not been saved yet."""

    @classmethod
    def new(cls) -> 'DraftId':
        return cls(f"{DRAFT_PREFIX}{uuid.uuid4().hex}")


def is_draft(key) -> bool:
    return isinstance(key, DraftId) or (isinstance(key, str) and key.startswith(DRAFT_PREFIX))


@dataclass(frozen=True)
class EditorItem:
    key: str
    label: str = ''
    required: bool = True
    order_index: int = 0
    note: str = ''


def reorder_items(items: Sequence[EditorItem], source_index: int,
                  destination_index: Optional[int]) -> List[EditorItem]:
    """
    Move one item and rewrite every order_index to its new position.

    A cancelled drag (no destination) or an out-of-range index returns the
    items unchanged.
    """
    items = list(items)
    if destination_index is None:
        return items
    if not (0 <= source_index < len(items)) or not (0 <= destination_index < len(items)):
        return items

    moved = items.pop(source_index)
    items.insert(destination_index, moved)
    return [replace(item, order_index=index) for index, item in enumerate(items)]


def _reindexed(items: Iterable[EditorItem]) -> List[EditorItem]:
    return [replace(item, order_index=index) for index, item in enumerate(items)]


def _item_value(item, name, default=None):
    if isinstance(item, Mapping):
        return item.get(name, default)
    return getattr(item, name, default)


def _validate(name, items) -> str:
    if not (name or '').strip():
        return NAME_REQUIRED
    if not items:
        return ITEMS_REQUIRED
    if any(not str(_item_value(item, 'label') or '').strip() for item in items):
        return LABEL_REQUIRED
    return ''


def normalize_checklist_payload(data: Mapping) -> dict:
    """
    Validate and normalize a checklist save payload.

    Items are emitted in list order with contiguous order_index values; any
    keys, ids and notes supplied by the client are dropped.
    """
    if not isinstance(data, Mapping):
        raise ChecklistValidationError("Checklist payload must be an object")

    name = data.get('name')
    items = data.get('items') or []
    if not isinstance(items, (list, tuple)):
        raise ChecklistValidationError("Items must be a list")

    message = _validate(name if isinstance(name, str) else '', items)
    if message:
        raise ChecklistValidationError(message)

    payload = {
        'name': name.strip(),
        'items': [
            {
                'label': str(_item_value(item, 'label')).strip(),
                'required': bool(_item_value(item, 'required', True)),
                'order_index': index,
            }
            for index, item in enumerate(items)
        ],
    }
    description = (data.get('description') or '').strip()
    if description:
        payload['description'] = description
    return payload


class ChecklistEditor:
    """
    Editing session for one checklist.

    ``on_save`` receives the normalized payload; it is never called when
    validation fails. Validation failures are published on ``notifications``
    and raised as ChecklistValidationError. The outcome of ``on_save`` is
    published too: a success notice, or the error (logged and re-raised,
    never retried).
    """

    def __init__(self, on_save: Callable[[dict], object],
                 notifications: Optional[NotificationService] = None,
                 checklist: Optional[Mapping] = None):
        self.on_save = on_save
        self.notifications = notifications or NotificationService()
        self.checklist = checklist
        self.name = ''
        self.description = ''
        self.items: List[EditorItem] = []
        self.editing_key: Optional[str] = None
        self.reset()

    # ------------------------------
    # Item operations
    # ------------------------------
    def add_item(self) -> EditorItem:
        item = EditorItem(key=DraftId.new(), order_index=len(self.items))
        self.items = self.items + [item]
        self.editing_key = item.key
        return item

    def update_item(self, key: str, /, **changes) -> None:
        changes.pop('key', None)
        changes.pop('order_index', None)
        self.items = [replace(item, **changes) if item.key == key else item for item in self.items]

    def remove_item(self, key: str) -> None:
        self.items = _reindexed(item for item in self.items if item.key != key)
        if self.editing_key == key:
            self.editing_key = None

    def move_item(self, source_index: int, destination_index: Optional[int]) -> None:
        self.items = reorder_items(self.items, source_index, destination_index)

    def select(self, key: Optional[str]) -> None:
        self.editing_key = key

    # ------------------------------
    # Lifecycle
    # ------------------------------
    def reset(self) -> None:
        """Discard edits: back to the checklist being edited, or a blank draft."""
        source = self.checklist
        if source:
            self.name = source.get('name') or ''
            self.description = source.get('description') or ''
            stored = sorted(source.get('items') or [], key=lambda i: _item_value(i, 'order_index', 0))
            self.items = _reindexed(
                EditorItem(
                    key=str(_item_value(item, 'id')),
                    label=_item_value(item, 'label') or '',
                    required=bool(_item_value(item, 'required', True)),
                    note=_item_value(item, 'note') or '',
                )
                for item in stored
            )
        else:
            self.name = ''
            self.description = ''
            self.items = []
        self.editing_key = None

    def save(self):
        message = _validate(self.name, self.items)
        if message:
            logger.debug("Checklist save rejected: %s", message)
            self.notifications.notify(VALIDATION_TITLE, message, VARIANT_DESTRUCTIVE)
            raise ChecklistValidationError(message)

        payload = normalize_checklist_payload({
            'name': self.name,
            'description': self.description,
            'items': self.items,
        })
        try:
            result = self.on_save(payload)
        except Exception as exc:
            logger.exception("Error saving checklist %r", payload['name'])
            self.notifications.error(str(exc) or SAVE_FAILED)
            raise

        self.notifications.notify(SUCCESS_TITLE, SAVE_UPDATED if self.checklist else SAVE_CREATED)
        return result
