"""Tests for the notification outbox and its dispatcher."""

from datetime import timedelta

import httpx
from sqlalchemy import event, select

from gigmarket.config import settings
from gigmarket.models import NotificationOutbox
from gigmarket.services.notification_service import (
    LoggingNotifier,
    NotificationDispatcher,
    WebhookNotifier,
    enqueue_notification,
    render,
)
from gigmarket.utils.constants import OUTBOX_DISPATCHING, OUTBOX_FAILED, OUTBOX_PENDING, OUTBOX_SENT
from gigmarket.utils.helpers import utc_now


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def notify(self, event, recipient_id, job_id, payload):
        self.sent.append((event, recipient_id, job_id, payload))


class BrokenNotifier:
    def notify(self, event, recipient_id, job_id, payload):
        raise RuntimeError("push gateway unavailable")


def enqueue(session_factory, recipient_id, event="job_accepted", payload=None):
    with session_factory.begin() as db:
        row = enqueue_notification(db, event, recipient_id, payload=payload or {"job_title": "Barista"})
        db.flush()
        return row.id


def outbox_row(session_factory, row_id) -> NotificationOutbox:
    with session_factory() as db:
        return db.execute(select(NotificationOutbox).where(NotificationOutbox.id == row_id)).scalar_one()


class TestTemplates:
    def test_render_fills_job_title_and_payload(self):
        title, message = render("payment_received", "Logo design", {"amount": "475.00"})
        assert title == "Payment Received!"
        assert message == 'You received 475.00 for "Logo design".'

    def test_missing_payload_keys_render_empty(self):
        _, message = render("payment_received", "Logo design")
        assert message == 'You received  for "Logo design".'


class TestOutbox:
    def test_enqueue_is_transactional(self, student, session_factory):
        try:
            with session_factory.begin() as db:
                enqueue_notification(db, "job_accepted", student.id)
                raise RuntimeError("state change failed")
        except RuntimeError:
            pass

        with session_factory() as db:
            assert db.execute(select(NotificationOutbox)).scalars().all() == []

    def test_dispatch_marks_sent(self, student, session_factory):
        row_id = enqueue(session_factory, student.id)
        notifier = RecordingNotifier()

        stats = NotificationDispatcher(session_factory, notifier=notifier).dispatch_pending()

        assert stats == {"sent": 1, "retried": 0, "failed": 0}
        event, recipient_id, job_id, payload = notifier.sent[0]
        assert event == "job_accepted"
        assert recipient_id == str(student.id)
        assert job_id is None
        assert payload["title"] == "Job Application Accepted!"

        row = outbox_row(session_factory, row_id)
        assert row.status == OUTBOX_SENT
        assert row.attempts == 1
        assert row.dispatched_at is not None

        again = NotificationDispatcher(session_factory, notifier=notifier).dispatch_pending()
        assert again == {"sent": 0, "retried": 0, "failed": 0}
        assert len(notifier.sent) == 1

    def test_failures_retry_then_give_up(self, student, session_factory):
        row_id = enqueue(session_factory, student.id)
        dispatcher = NotificationDispatcher(session_factory, notifier=BrokenNotifier())
        dispatcher.max_attempts = 2

        assert dispatcher.dispatch_pending() == {"sent": 0, "retried": 1, "failed": 0}
        row = outbox_row(session_factory, row_id)
        assert row.status == OUTBOX_PENDING
        assert row.last_error == "push gateway unavailable"

        assert dispatcher.dispatch_pending() == {"sent": 0, "retried": 0, "failed": 1}
        row = outbox_row(session_factory, row_id)
        assert row.status == OUTBOX_FAILED
        assert row.attempts == 2

    def test_logging_notifier_never_raises(self):
        LoggingNotifier().notify("job_accepted", "user-1", None, {"title": "Hi"})


class TestDispatchLeases:
    def test_delivery_runs_outside_any_transaction(self, student, session_factory):
        row_id = enqueue(session_factory, student.id)
        open_transactions = []

        def track_begin(session, transaction):
            if transaction.parent is None:
                open_transactions.append(transaction)

        def track_end(session, transaction):
            if transaction in open_transactions:
                open_transactions.remove(transaction)

        class InspectingNotifier:
            def __init__(self):
                self.seen = []

            def notify(self, event, recipient_id, job_id, payload):
                self.seen.append(len(open_transactions))
                # the claim is already committed and visible to other sessions
                self.seen.append(outbox_row(session_factory, row_id).status)

        event.listen(session_factory, "after_transaction_create", track_begin)
        event.listen(session_factory, "after_transaction_end", track_end)
        try:
            notifier = InspectingNotifier()
            assert NotificationDispatcher(session_factory, notifier=notifier).dispatch_pending()["sent"] == 1
        finally:
            event.remove(session_factory, "after_transaction_create", track_begin)
            event.remove(session_factory, "after_transaction_end", track_end)

        assert notifier.seen == [0, OUTBOX_DISPATCHING]
        row = outbox_row(session_factory, row_id)
        assert row.status == OUTBOX_SENT
        assert row.claimed_at is None

    def test_abandoned_dispatch_is_reclaimed_after_lease(self, student, session_factory):
        row_id = enqueue(session_factory, student.id)
        crashed = NotificationDispatcher(session_factory, notifier=RecordingNotifier())
        crashed._claim(10, utc_now())

        notifier = RecordingNotifier()
        dispatcher = NotificationDispatcher(session_factory, notifier=notifier)
        assert dispatcher.dispatch_pending() == {"sent": 0, "retried": 0, "failed": 0}

        later = utc_now() + timedelta(seconds=settings.NOTIFICATION_LEASE_SECONDS + 1)
        assert dispatcher.dispatch_pending(now=later) == {"sent": 1, "retried": 0, "failed": 0}
        assert len(notifier.sent) == 1
        row = outbox_row(session_factory, row_id)
        assert row.status == OUTBOX_SENT
        assert row.attempts == 2

    def test_abandoned_dispatch_at_max_attempts_fails(self, student, session_factory):
        row_id = enqueue(session_factory, student.id)
        dispatcher = NotificationDispatcher(session_factory, notifier=RecordingNotifier())
        dispatcher.max_attempts = 1
        dispatcher._claim(10, utc_now())

        later = utc_now() + timedelta(seconds=settings.NOTIFICATION_LEASE_SECONDS + 1)
        assert dispatcher.dispatch_pending(now=later) == {"sent": 0, "retried": 0, "failed": 0}

        row = outbox_row(session_factory, row_id)
        assert row.status == OUTBOX_FAILED
        assert row.last_error == "delivery lease expired"
        assert dispatcher.notifier.sent == []

    def test_outcome_for_a_lost_claim_is_dropped(self, student, session_factory):
        row_id = enqueue(session_factory, student.id)

        class DeletingNotifier:
            def notify(self, event, recipient_id, job_id, payload):
                with session_factory.begin() as db:
                    db.delete(db.get(NotificationOutbox, row_id))

        stats = NotificationDispatcher(session_factory, notifier=DeletingNotifier()).dispatch_pending()

        assert stats == {"sent": 0, "retried": 0, "failed": 0}


class TestWebhookNotifier:
    def test_posts_event(self, monkeypatch):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200)

        real_client = httpx.Client
        monkeypatch.setattr(
            httpx, "Client", lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs)
        )

        WebhookNotifier("https://hooks.example.com/notify", timeout=1).notify(
            "job_shortlisted", "user-1", "job-1", {"title": "You're Shortlisted!"}
        )

        assert len(requests) == 1
        assert requests[0].url == "https://hooks.example.com/notify"
        body = requests[0].read()
        assert b'"event":"job_shortlisted"' in body.replace(b" ", b"")
