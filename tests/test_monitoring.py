"""Tests for Sentry helpers with reporting disabled."""

from unittest.mock import patch

import pytest

from sqlai.core.monitoring import send_test_events, setup_sentry, start_command_transaction


@pytest.mark.unit
def test_setup_without_dsn():
    setup_sentry(environment="test")


@pytest.mark.unit
def test_transaction_finished_at_exit():
    with patch("sqlai.core.monitoring.atexit.register") as register:
        start_command_transaction("query")
    register.assert_called_once()
    register.call_args.args[0]()


@pytest.mark.unit
def test_send_test_events_captures_error():
    with patch("sqlai.core.monitoring.sentry_sdk.capture_exception") as capture:
        send_test_events()
    [error] = capture.call_args.args
    assert str(error) == "sqlai Sentry test error"
