"""
Tests for the management commands and the APScheduler wiring.
"""
from datetime import timedelta
from io import StringIO
from unittest.mock import patch

import pytest
from django.core.management import CommandError, call_command
from django.utils import timezone

from filings.models import Deadline
from notifications import scheduler
from notifications.models import OutboundMessage, Reminder


def run(name, *args):
    out = StringIO()
    call_command(name, *args, stdout=out, stderr=StringIO())
    return out.getvalue()


class TestCommands:

    def test_generate_deadlines(self, entity):
        output = run("generate_deadlines")

        assert "24 new deadlines across 1 entities" in output
        assert Deadline.objects.count() == 24

    def test_pipeline_end_to_end(self, entity, contact):
        deadline = Deadline.objects.create(
            entity=entity,
            return_type=Deadline.ReturnType.GSTR1,
            period_month=1,
            period_year=2099,
            due_date=timezone.localdate() + timedelta(days=5),
        )

        assert "3 reminders" in run("schedule_reminders", "--deadline", str(deadline.pk))

        Reminder.objects.filter(deadline=deadline).update(send_at=timezone.now() - timedelta(minutes=1))
        assert "3 sent" in run("send_deadline_reminders", "--worker-id", "cli-worker")
        assert "3 sent" in run("dispatch_outbox")

        assert OutboundMessage.objects.filter(status=OutboundMessage.Status.SENT).count() == 3

    def test_negative_batch_size_is_a_command_error(self, db):
        with pytest.raises(CommandError, match="batch_size"):
            run("send_deadline_reminders", "--batch-size", "-1")
        with pytest.raises(CommandError, match="batch_size"):
            run("dispatch_outbox", "--batch-size", "-5")

    def test_release_stale_claims(self, db):
        assert "Released 0 reminders and 0 messages" in run("release_stale_claims", "--minutes", "5")


class TestScheduler:

    def test_disabled_by_setting(self, settings):
        settings.ENABLE_SCHEDULER = False

        with patch.object(scheduler, "BackgroundScheduler") as background:
            scheduler.start_scheduler()

        background.assert_not_called()

    def test_registers_jobs_once(self, settings, monkeypatch):
        settings.ENABLE_SCHEDULER = True
        monkeypatch.setattr(scheduler, "_scheduler", None)

        with patch.object(scheduler, "BackgroundScheduler") as background:
            scheduler.start_scheduler()
            scheduler.start_scheduler()

        background.assert_called_once()
        instance = background.return_value
        job_ids = [call.kwargs["id"] for call in instance.add_job.call_args_list]
        assert job_ids == [
            "send_deadline_reminders",
            "dispatch_outbox",
            "release_stale_claims",
            "schedule_reminders",
        ]
        for call in instance.add_job.call_args_list:
            assert call.kwargs["max_instances"] == 1
        instance.start.assert_called_once()


class TestPipelineChecks:

    def test_default_settings_pass(self, settings):
        from notifications.checks import check_pipeline_settings

        settings.INTERNAL_API_KEY = "s3cret"
        assert check_pipeline_settings() == []

    def test_bad_transport_and_hour(self, settings):
        from notifications.checks import check_pipeline_settings

        settings.INTERNAL_API_KEY = "s3cret"
        settings.MESSAGE_TRANSPORT = "notifications.transport.CarrierPigeon"
        settings.REMINDER_SEND_HOUR = 25

        ids = [error.id for error in check_pipeline_settings()]
        assert ids == ["notifications.E001", "notifications.E002"]

    def test_open_internal_api_outside_debug(self, settings):
        from notifications.checks import check_pipeline_settings

        settings.DEBUG = False
        settings.INTERNAL_API_KEY = ""

        assert [error.id for error in check_pipeline_settings()] == ["notifications.W002"]

    def test_open_internal_api_allowed_in_debug(self, settings):
        from notifications.checks import check_pipeline_settings

        settings.DEBUG = True
        settings.INTERNAL_API_KEY = ""

        assert check_pipeline_settings() == []
