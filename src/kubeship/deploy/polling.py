"""Bounded polling for cluster readiness.

Cluster creation on the platform takes from minutes to the better part
of an hour.  ``PollPolicy`` describes how often to ask and how long to
keep asking; ``wait_until`` runs a probe under that policy and raises
``ProvisioningTimeoutError`` when the budget is exhausted.

Delay = min(interval * (backoff ** attempt), max_interval)

Example:
    >>> policy = PollPolicy(interval=60, max_wait=3600)
    >>> [policy.next_delay(n) for n in range(3)]
    [60.0, 60.0, 60.0]
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from kubeship.core.errors import ProvisioningTimeoutError
from kubeship.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class PollPolicy:
    """Interval, backoff and overall budget for a readiness poll.

    Attributes:
        interval: Seconds to wait before the first re-check
        max_wait: Total seconds to keep polling before giving up
        backoff: Multiplier applied to the delay after each check (1.0 = fixed)
        max_interval: Cap on a single delay
    """

    interval: float = 60.0
    max_wait: float = 3600.0
    backoff: float = 1.0
    max_interval: float = 300.0

    def next_delay(self, attempt: int) -> float:
        """Delay before check number ``attempt + 1`` (zero-based)."""
        return float(min(self.interval * (self.backoff ** attempt), self.max_interval))


@dataclass
class PollOutcome:
    """What a finished poll observed."""

    attempts: int
    waited_seconds: float
    last_output: str = ""


@dataclass
class Poller:
    """Runs a probe under a ``PollPolicy``.

    ``sleep`` and ``clock`` are injectable so tests run instantly.
    """

    policy: PollPolicy
    sleep: Callable[[float], None] = time.sleep
    clock: Callable[[], float] = time.monotonic

    def wait_until(
        self,
        probe: Callable[[], str],
        done: Callable[[str], bool],
        *,
        subject: str,
        on_wait: Callable[[int, str], None] | None = None,
    ) -> PollOutcome:
        """Call ``probe`` until ``done(output)`` is true.

        The first check happens immediately.  Between checks the poller
        sleeps ``policy.next_delay(n)``, never past the overall budget.

        Raises
        ------
        ProvisioningTimeoutError
            When ``policy.max_wait`` elapses with ``done`` still false.
        """
        started = self.clock()
        attempts = 0

        while True:
            output = probe()
            attempts += 1
            waited = self.clock() - started
            if done(output):
                logger.info("poll.done", subject=subject, attempts=attempts, waited=round(waited, 1))
                return PollOutcome(attempts=attempts, waited_seconds=waited, last_output=output)

            remaining = self.policy.max_wait - waited
            if remaining <= 0:
                raise ProvisioningTimeoutError(subject, waited, attempts)

            if on_wait is not None:
                on_wait(attempts, output)

            delay = min(self.policy.next_delay(attempts - 1), remaining)
            logger.info("poll.waiting", subject=subject, attempt=attempts, delay=delay)
            self.sleep(delay)
