import pytest

from checklists.editor import (
    ITEMS_REQUIRED, LABEL_REQUIRED, NAME_REQUIRED, SAVE_CREATED, SAVE_FAILED, SAVE_UPDATED, SUCCESS_TITLE,
    VALIDATION_TITLE, ChecklistEditor, DraftId, EditorItem, is_draft, normalize_checklist_payload,
    reorder_items,
)
from checklists.exceptions import ChecklistValidationError
from core.notifications import VARIANT_DEFAULT, VARIANT_DESTRUCTIVE, NotificationService


def _items(count):
    return [EditorItem(key=str(i), label=f"Item {i}", order_index=i) for i in range(count)]


class Recorder:
    def __init__(self):
        self.payloads = []

    def __call__(self, payload):
        self.payloads.append(payload)
        return 'saved'


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def notifications():
    return NotificationService(limit=5)


@pytest.fixture
def editor(recorder, notifications):
    return ChecklistEditor(recorder, notifications=notifications)


# ------------------------------
# reorder_items
# ------------------------------
def test_reorder_moves_item_and_rewrites_order():
    result = reorder_items(_items(3), 0, 2)
    assert [item.key for item in result] == ['1', '2', '0']
    assert [item.order_index for item in result] == [0, 1, 2]


def test_reorder_moves_item_up():
    result = reorder_items(_items(4), 3, 1)
    assert [item.key for item in result] == ['0', '3', '1', '2']
    assert [item.order_index for item in result] == [0, 1, 2, 3]


def test_reorder_without_destination_is_noop():
    items = _items(3)
    assert reorder_items(items, 0, None) == items


@pytest.mark.parametrize('source, destination', [(5, 0), (0, 3), (-1, 0)])
def test_reorder_out_of_range_is_noop(source, destination):
    items = _items(3)
    assert reorder_items(items, source, destination) == items


# ------------------------------
# normalize_checklist_payload
# ------------------------------
def test_payload_has_contiguous_order_and_no_ids():
    payload = normalize_checklist_payload({
        'name': '  Opening checks ',
        'description': '   ',
        'items': [
            {'id': 'draft-1', 'label': ' Lights ', 'required': False, 'order_index': 7},
            {'id': 'abc', 'label': 'Doors'},
        ],
    })
    assert payload == {
        'name': 'Opening checks',
        'items': [
            {'label': 'Lights', 'required': False, 'order_index': 0},
            {'label': 'Doors', 'required': True, 'order_index': 1},
        ],
    }


def test_payload_keeps_non_blank_description():
    payload = normalize_checklist_payload({'name': 'A', 'description': ' Morning ', 'items': [{'label': 'x'}]})
    assert payload['description'] == 'Morning'


@pytest.mark.parametrize('data, message', [
    ({'name': '', 'items': [{'label': 'x'}]}, NAME_REQUIRED),
    ({'name': '   ', 'items': [{'label': 'x'}]}, NAME_REQUIRED),
    ({'name': 'A', 'items': []}, ITEMS_REQUIRED),
    ({'name': 'A'}, ITEMS_REQUIRED),
    ({'name': 'A', 'items': [{'label': 'x'}, {'label': '  '}]}, LABEL_REQUIRED),
])
def test_payload_validation_messages(data, message):
    with pytest.raises(ChecklistValidationError) as excinfo:
        normalize_checklist_payload(data)
    assert excinfo.value.message == message


# ------------------------------
# ChecklistEditor
# ------------------------------
def test_draft_ids():
    key = DraftId.new()
    assert is_draft(key)
    assert is_draft('draft-123')
    assert not is_draft('5b0f6f7e-0000-0000-0000-000000000000')
    assert key != DraftId.new()


def test_add_item_selects_new_draft(editor):
    item = editor.add_item()
    second = editor.add_item()
    assert is_draft(item.key)
    assert editor.editing_key == second.key
    assert [i.order_index for i in editor.items] == [0, 1]


def test_update_item_ignores_key_and_order(editor):
    item = editor.add_item()
    editor.update_item(item.key, label='Check seals', required=False, order_index=9, key='other')
    updated = editor.items[0]
    assert updated.key == item.key
    assert updated.label == 'Check seals'
    assert updated.required is False
    assert updated.order_index == 0


def test_remove_item_reindexes_and_clears_selection(editor):
    first = editor.add_item()
    second = editor.add_item()
    third = editor.add_item()
    editor.select(second.key)

    editor.remove_item(second.key)

    assert [i.key for i in editor.items] == [first.key, third.key]
    assert [i.order_index for i in editor.items] == [0, 1]
    assert editor.editing_key is None


def test_remove_other_item_keeps_selection(editor):
    first = editor.add_item()
    second = editor.add_item()
    editor.remove_item(first.key)
    assert editor.editing_key == second.key


def test_save_rejects_missing_name(editor, recorder, notifications):
    item = editor.add_item()
    editor.update_item(item.key, label='Lights')

    with pytest.raises(ChecklistValidationError):
        editor.save()

    assert recorder.payloads == []
    toast = notifications.notifications[0]
    assert toast.title == VALIDATION_TITLE
    assert toast.description == NAME_REQUIRED
    assert toast.variant == VARIANT_DESTRUCTIVE


def test_save_rejects_empty_item_list(editor, recorder, notifications):
    editor.name = 'Closing'
    with pytest.raises(ChecklistValidationError):
        editor.save()
    assert recorder.payloads == []
    assert notifications.notifications[0].description == ITEMS_REQUIRED


def test_save_rejects_blank_label(editor, recorder, notifications):
    editor.name = 'Closing'
    editor.add_item()
    with pytest.raises(ChecklistValidationError):
        editor.save()
    assert recorder.payloads == []
    assert notifications.notifications[0].description == LABEL_REQUIRED


def test_save_passes_normalized_payload(editor, recorder):
    editor.name = 'Closing'
    first = editor.add_item()
    second = editor.add_item()
    editor.update_item(first.key, label='Lock door')
    editor.update_item(second.key, label='Bins out', required=False)
    editor.move_item(1, 0)

    assert editor.save() == 'saved'
    assert recorder.payloads == [{
        'name': 'Closing',
        'items': [
            {'label': 'Bins out', 'required': False, 'order_index': 0},
            {'label': 'Lock door', 'required': True, 'order_index': 1},
        ],
    }]


def test_reset_restores_existing_checklist(recorder):
    checklist = {
        'name': 'Stored',
        'description': 'Desc',
        'items': [
            {'id': 'b', 'label': 'Second', 'required': True, 'order_index': 1},
            {'id': 'a', 'label': 'First', 'required': False, 'order_index': 0},
        ],
    }
    editor = ChecklistEditor(recorder, checklist=checklist)
    assert [i.key for i in editor.items] == ['a', 'b']

    editor.name = 'Changed'
    editor.add_item()
    editor.reset()

    assert editor.name == 'Stored'
    assert [i.label for i in editor.items] == ['First', 'Second']
    assert editor.editing_key is None


def test_reset_blank_editor(editor):
    editor.name = 'Temp'
    editor.add_item()
    editor.reset()
    assert editor.name == ''
    assert editor.items == []


def test_update_item_drops_stray_key_keyword(editor):
    item = editor.add_item()
    editor.update_item(item.key, key='draft-other', label='Seals')
    assert [(i.key, i.label) for i in editor.items] == [(item.key, 'Seals')]


def _ready_editor(on_save, notifications, checklist=None):
    editor = ChecklistEditor(on_save, notifications=notifications, checklist=checklist)
    editor.name = 'Closing'
    item = editor.add_item()
    editor.update_item(item.key, label='Lock door')
    return editor


def test_save_failure_is_published_and_reraised(notifications):
    calls = []

    def failing_save(payload):
        calls.append(payload)
        raise ConnectionError('network down')

    editor = _ready_editor(failing_save, notifications)
    with pytest.raises(ConnectionError):
        editor.save()

    assert len(calls) == 1
    toast = notifications.notifications[0]
    assert toast.title == 'Error'
    assert toast.description == 'network down'
    assert toast.variant == VARIANT_DESTRUCTIVE


def test_save_failure_without_message_uses_fallback(notifications):
    def failing_save(payload):
        raise RuntimeError()

    editor = _ready_editor(failing_save, notifications)
    with pytest.raises(RuntimeError):
        editor.save()
    assert notifications.notifications[0].description == SAVE_FAILED


def test_save_success_is_published(recorder, notifications):
    _ready_editor(recorder, notifications).save()
    toast = notifications.notifications[0]
    assert (toast.title, toast.description, toast.variant) == (SUCCESS_TITLE, SAVE_CREATED, VARIANT_DEFAULT)


def test_save_success_for_existing_checklist(recorder, notifications):
    checklist = {'name': 'Stored', 'items': [{'id': 'a', 'label': 'First', 'order_index': 0}]}
    editor = ChecklistEditor(recorder, notifications=notifications, checklist=checklist)
    editor.save()
    assert notifications.notifications[0].description == SAVE_UPDATED
