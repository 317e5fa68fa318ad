"""Tests for the per-request structlog context."""

import structlog
from shared.logging import bind_request


def test_request_context_replaces_the_previous_one():
    bind_request(method="GET", path="/orders/1", actor_id="picker-1")
    bind_request(method="PUT", path="/complaints/2/check", actor_id=None)

    try:
        assert structlog.contextvars.get_contextvars() == {
            "method": "PUT",
            "path": "/complaints/2/check",
            "actor_id": None,
        }
    finally:
        structlog.contextvars.clear_contextvars()
