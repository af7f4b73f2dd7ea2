import pytest

from core.notifications import VARIANT_DEFAULT, VARIANT_DESTRUCTIVE, NotificationService


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


def test_default_limit_keeps_only_newest(clock):
    service = NotificationService(clock=clock)
    service.notify('First')
    service.notify('Second')
    assert [n.title for n in service.notifications] == ['Second']


def test_newest_first_within_limit(clock):
    service = NotificationService(limit=3, clock=clock)
    for title in ('a', 'b', 'c', 'd'):
        service.notify(title)
    assert [n.title for n in service.notifications] == ['d', 'c', 'b']


def test_error_uses_destructive_variant(clock):
    service = NotificationService(clock=clock)
    service.error('Could not save')
    toast = service.notifications[0]
    assert toast.title == 'Error'
    assert toast.description == 'Could not save'
    assert toast.variant == VARIANT_DESTRUCTIVE


def test_handle_update_and_dismiss(clock):
    service = NotificationService(limit=2, remove_delay=10, clock=clock)
    handle = service.notify('Saving', 'Please wait')
    handle.update(title='Saved', description='')
    assert service.notifications[0].title == 'Saved'
    assert service.notifications[0].variant == VARIANT_DEFAULT

    handle.dismiss()
    assert service.notifications[0].open is False

    clock.now = 9.9
    assert len(service.notifications) == 1
    clock.now = 10
    assert service.notifications == []


def test_dismiss_all(clock):
    service = NotificationService(limit=3, clock=clock)
    service.notify('a')
    service.notify('b')
    service.dismiss()
    assert all(not n.open for n in service.notifications)


def test_remove(clock):
    service = NotificationService(limit=3, clock=clock)
    first = service.notify('a')
    service.notify('b')
    service.remove(first.id)
    assert [n.title for n in service.notifications] == ['b']
    service.remove()
    assert service.notifications == []


def test_subscribers_receive_snapshots(clock):
    service = NotificationService(clock=clock)
    seen = []
    unsubscribe = service.subscribe(lambda queue: seen.append([n.title for n in queue]))
    service.notify('one')
    unsubscribe()
    service.notify('two')
    assert seen == [['one']]


def test_failing_listener_does_not_break_others(clock):
    service = NotificationService(clock=clock)
    seen = []

    def broken(queue):
        raise RuntimeError('boom')

    service.subscribe(broken)
    service.subscribe(lambda queue: seen.append(len(queue)))
    service.notify('one')
    assert seen == [1]


def test_as_dicts(clock):
    service = NotificationService(clock=clock)
    service.notify('Hello', 'World')
    assert service.as_dicts() == [
        {'id': '1', 'title': 'Hello', 'description': 'World', 'variant': VARIANT_DEFAULT, 'open': True},
    ]


def test_limit_must_be_positive():
    with pytest.raises(ValueError):
        NotificationService(limit=0)


def test_from_settings(settings):
    settings.NOTIFICATION_LIMIT = 4
    service = NotificationService.from_settings(remove_delay=5)
    assert service.limit == 4
    assert service.remove_delay == 5


def test_open_notification_closes_after_duration(clock):
    service = NotificationService(remove_delay=10, duration=5, clock=clock)
    service.notify('Saved')

    clock.now = 4.9
    assert [(n.title, n.open) for n in service.notifications] == [('Saved', True)]
    clock.now = 5
    assert [(n.title, n.open) for n in service.notifications] == [('Saved', False)]
    clock.now = 15
    assert service.notifications == []


def test_per_notification_duration_overrides_default(clock):
    service = NotificationService(limit=2, remove_delay=1, duration=5, clock=clock)
    service.notify('Short', duration=1)
    service.notify('Default')

    clock.now = 2.5
    assert [n.title for n in service.notifications] == ['Default']


def test_no_duration_stays_open(clock):
    service = NotificationService(duration=None, clock=clock)
    service.notify('Sticky')
    clock.now = 10 ** 7
    assert service.notifications[0].open is True


def test_auto_close_is_published(clock):
    service = NotificationService(duration=1, clock=clock)
    seen = []
    service.notify('Saved')
    service.subscribe(lambda queue: seen.append([n.open for n in queue]))

    clock.now = 1
    assert service.notifications[0].open is False
    assert seen == [[False]]
