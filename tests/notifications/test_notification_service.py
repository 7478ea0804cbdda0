from __future__ import annotations

from datetime import timedelta

import pytest

from src.hrms.hrms.core.constants import MAX_DELIVERY_ATTEMPTS
from src.hrms.hrms.core.enums import DeliveryStatus
from src.hrms.hrms.core.exceptions import NotFoundError
from src.hrms.hrms.notifications.publisher import account_room
from src.hrms.hrms.notifications.service import NotificationService
from tests.fakes import FailingPublisher, FakeNotificationRepo, FakeOutboxRepo, RecordingPublisher


@pytest.fixture
def repos():
    notifications = FakeNotificationRepo()
    return notifications, FakeOutboxRepo(notifications)


def test_notify_persists_and_publishes(repos, clock):
    notifications, outbox = repos
    publisher = RecordingPublisher()
    service = NotificationService(notifications, outbox, publisher, clock=clock)

    n = service.notify(5, type="leave_request", title="New Leave Request", message="hello", metadata={"leave_id": 1})

    assert publisher.published == [(5, n.to_dict())]
    assert notifications.outbox[n.notification_id].status == DeliveryStatus.DELIVERED


def test_publish_failure_keeps_notification_for_retry(repos, clock):
    notifications, outbox = repos
    service = NotificationService(notifications, outbox, FailingPublisher(), clock=clock)

    n = service.notify(5, type="leave_update", title="t", message="m")

    assert notifications.get(n.notification_id) is not None
    event = notifications.outbox[n.notification_id]
    assert event.status == DeliveryStatus.FAILED
    assert event.attempts == 1
    assert "socket server unavailable" in event.last_error

    publisher = RecordingPublisher()
    recovered = NotificationService(notifications, outbox, publisher, clock=clock)
    assert recovered.retry_pending() == {"delivered": 1, "failed": 0, "dropped": 0}
    assert publisher.published[0][0] == 5
    assert notifications.outbox[n.notification_id].status == DeliveryStatus.DELIVERED
    assert recovered.retry_pending() == {"delivered": 0, "failed": 0, "dropped": 0}


def test_retry_gives_up_after_max_attempts(repos, clock):
    notifications, outbox = repos
    failing = FailingPublisher()
    service = NotificationService(notifications, outbox, failing, clock=clock)
    n = service.notify(5, type="leave_update", title="t", message="m")

    for _ in range(MAX_DELIVERY_ATTEMPTS + 2):
        service.retry_pending()

    assert notifications.outbox[n.notification_id].attempts == MAX_DELIVERY_ATTEMPTS
    assert failing.calls == MAX_DELIVERY_ATTEMPTS


def test_read_state_is_owner_scoped(repos, clock, world, employee, hr):
    notifications, outbox = repos
    service = NotificationService(notifications, outbox, RecordingPublisher(), clock=clock)
    mine = service.notify(employee.account_id, type="leave_update", title="t", message="m")
    service.notify(employee.account_id, type="leave_update", title="t2", message="m2")

    with pytest.raises(NotFoundError, match="Notification not found"):
        service.mark_read(hr, mine.notification_id)

    clock.now += timedelta(minutes=1)
    read = service.mark_read(employee, mine.notification_id)
    assert read.is_read and read.read_at == clock.now
    assert service.mark_all_read(employee) == 1
    assert all(n.is_read for n in service.list_for(employee))

    with pytest.raises(NotFoundError):
        service.delete(hr, mine.notification_id)
    service.delete(employee, mine.notification_id)
    assert len(service.list_for(employee)) == 1


def test_account_room_name():
    assert account_room(42) == "account:42"
