"""Tests for the notification inbox."""

import uuid

import pytest

from gigmarket.core.exceptions import NotificationNotFoundError
from gigmarket.services.inbox_service import InboxService
from gigmarket.services.notification_service import enqueue_notification
from gigmarket.utils.constants import ROLE_STUDENT


@pytest.fixture
def inbox(session_factory):
    return InboxService(session_factory)


@pytest.fixture
def notify(session_factory):
    def _notify(recipient, event="job_accepted", **payload):
        with session_factory.begin() as db:
            row = enqueue_notification(db, event, recipient.id, payload={"job_title": "Barista", **payload})
            db.flush()
            return row.id

    return _notify


class TestInbox:
    def test_list_newest_first_with_unread_count(self, student, make_user, inbox, notify):
        first = notify(student)
        second = notify(student, event="payment_received", amount="475.00")
        notify(make_user(ROLE_STUDENT))

        result = inbox.list_notifications(student.id)

        assert [n.id for n in result["notifications"]] == [second, first]
        assert result["unread_count"] == 2
        assert result["total"] == 2
        assert result["notifications"][0].message == 'You received 475.00 for "Barista".'

    def test_filters_and_pagination(self, student, inbox, notify):
        for _ in range(3):
            notify(student)
        notify(student, event="job_shortlisted")

        assert inbox.list_notifications(student.id, event="job_shortlisted")["total"] == 1
        page = inbox.list_notifications(student.id, page=2, limit=3)
        assert page["pages"] == 2
        assert len(page["notifications"]) == 1

    def test_mark_read_is_recipient_scoped(self, student, make_user, inbox, notify):
        row_id = notify(student)

        with pytest.raises(NotificationNotFoundError):
            inbox.mark_read(make_user(ROLE_STUDENT).id, row_id)

        row = inbox.mark_read(student.id, row_id)
        assert row.is_read is True
        assert row.read_at is not None
        read_at = row.read_at

        assert inbox.mark_read(student.id, row_id).read_at == read_at
        assert inbox.list_notifications(student.id, is_read=False)["total"] == 0
        assert inbox.list_notifications(student.id, is_read=True)["total"] == 1

    def test_mark_many_and_all_read(self, student, make_user, inbox, notify):
        ids = [notify(student) for _ in range(3)]
        foreign = notify(make_user(ROLE_STUDENT))

        assert inbox.mark_many_read(student.id, [ids[0], foreign, "not-a-uuid"]) == 2
        assert inbox.mark_all_read(student.id) == 2
        assert inbox.mark_all_read(student.id) == 0
        assert inbox.list_notifications(student.id)["unread_count"] == 0

    def test_stats_by_event(self, student, inbox, notify):
        notify(student)
        read_id = notify(student)
        notify(student, event="job_shortlisted")
        inbox.mark_read(student.id, read_id)

        stats = inbox.get_stats(student.id)

        assert stats == {
            "total": 3,
            "unread": 2,
            "by_event": {
                "job_accepted": {"total": 2, "unread": 1},
                "job_shortlisted": {"total": 1, "unread": 1},
            },
        }

    def test_delete(self, student, make_user, inbox, notify):
        row_id = notify(student)

        with pytest.raises(NotificationNotFoundError):
            inbox.delete_notification(make_user(ROLE_STUDENT).id, row_id)

        inbox.delete_notification(student.id, row_id)
        assert inbox.list_notifications(student.id)["total"] == 0
        with pytest.raises(NotificationNotFoundError):
            inbox.delete_notification(student.id, row_id)

    def test_unknown_id(self, student, inbox):
        with pytest.raises(NotificationNotFoundError):
            inbox.mark_read(student.id, uuid.uuid4())
