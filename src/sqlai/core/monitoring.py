"""Sentry error tracking and performance tracing.

Nothing is sent unless SENTRY_DSN is set. The CLI callback calls
setup_sentry() right after logging is configured and opens one
transaction per command.
"""

import atexit
import os

import sentry_sdk

from sqlai.__about__ import __version__


class SentryTestError(RuntimeError):
    """Raised on purpose by ``sqlai test-sentry``."""


def setup_sentry(environment: str | None = None) -> None:
    sentry_sdk.init(
        dsn=os.environ.get("SENTRY_DSN"),
        traces_sample_rate=0.03,
        environment=environment or os.environ.get("SENTRY_ENVIRONMENT", "local"),
        release=__version__,
        attach_stacktrace=True,
        send_default_pii=False,
    )


def start_command_transaction(command: str | None) -> None:
    """Open a transaction for the running command, finished at exit."""
    transaction = sentry_sdk.start_transaction(op="cli", name=command or "sqlai")
    transaction.__enter__()

    def finish() -> None:
        transaction.__exit__(None, None, None)
        sentry_sdk.flush(timeout=2)

    atexit.register(finish)


def send_test_events() -> None:
    """Emit one captured error and one traced query span."""
    try:
        raise SentryTestError("sqlai Sentry test error")
    except SentryTestError as e:
        sentry_sdk.capture_exception(e)

    with sentry_sdk.start_transaction(op="test", name="test_sentry") as txn:
        with sentry_sdk.start_span(op="db.query", description="SELECT 1"):
            pass
        txn.set_status("ok")
    sentry_sdk.flush(timeout=5)
