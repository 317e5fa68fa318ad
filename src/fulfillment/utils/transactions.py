"""Serialized units of work for fulfillment writes.

Status guards read an order and then write it back. Each handler that does so
runs its reads, guards and writes inside ``exclusive_unit_of_work``: the block
is its own unit of work, and the lock is held until that unit of work has
committed. The next writer therefore loads the committed result and its guard
sees the new state.

Across processes the lock does not apply. There the aggregate's ``_version``
check on update refuses a write based on a stale copy, and the refusal is
raised as ``Conflict``.
"""

import threading
from contextlib import contextmanager

from protean.core.unit_of_work import UnitOfWork
from protean.exceptions import ExpectedVersionError
from shared.errors import Conflict

_write_lock = threading.RLock()


@contextmanager
def exclusive_unit_of_work():
    with _write_lock:
        try:
            with UnitOfWork():
                yield
        except ExpectedVersionError as exc:
            raise Conflict("Record was modified concurrently; reload and retry") from exc
