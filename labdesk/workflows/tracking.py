"""
Loading flags and response sequencing for collaborator calls.

Every call made through a tracker:
- raises the loading flag before the call and lowers it on every exit path
- receives a monotonically increasing sequence number

A response is applied only if its sequence number is newer than the last one
accepted, so a slow, older fetch can never overwrite fresher state.

Usage:
    tracker = RequestTracker("archived")

    async with tracker.track() as ticket:
        records = await store.fetch_archived()
    if ticket.accept():
        apply(records)
"""

from __future__ import annotations

import contextlib
from dataclasses import dataclass, field
from typing import AsyncIterator

from labdesk.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class Ticket:
    """
    Handle for one tracked call.
    """

    sequence: int
    tracker: "RequestTracker" = field(repr=False)

    def accept(self) -> bool:
        """Claim the right to apply this response; False if it is stale."""
        return self.tracker.accept(self.sequence)

    @property
    def is_stale(self) -> bool:
        return self.sequence <= self.tracker.last_accepted


class RequestTracker:
    def __init__(self, name: str) -> None:
        self.name = name
        self._issued = 0
        self._accepted = 0
        self._in_flight = 0

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def last_issued(self) -> int:
        return self._issued

    @property
    def last_accepted(self) -> int:
        return self._accepted

    def accept(self, sequence: int) -> bool:
        if sequence <= self._accepted:
            log.debug(
                f"[FETCH STALE] {self.name} #{sequence} discarded",
                extra={"tracker": self.name, "sequence": sequence, "accepted": self._accepted},
            )
            return False
        self._accepted = sequence
        return True

    @contextlib.asynccontextmanager
    async def track(self) -> AsyncIterator[Ticket]:
        self._issued += 1
        ticket = Ticket(sequence=self._issued, tracker=self)
        self._in_flight += 1
        try:
            yield ticket
        finally:
            self._in_flight -= 1


__all__ = ["RequestTracker", "Ticket"]
