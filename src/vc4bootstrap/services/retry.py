"""Bounded fixed-interval polling shared by the license and readiness loops."""

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from vc4bootstrap.models import RetryBudget


@dataclass(frozen=True)
class RetryOutcome:
    succeeded: bool
    attempts: int
    last_value: Any = None


def retry_until(
    probe: Callable[[int], Any],
    predicate: Callable[[Any], bool],
    budget: RetryBudget,
    sleep: Callable[[float], None] = time.sleep,
    wait_first: bool = False,
    on_miss: Optional[Callable[[int, Any], None]] = None,
) -> RetryOutcome:
    """Calls ``probe(attempt)`` until ``predicate`` accepts its result.

    At most ``budget.max_attempts`` probes are made, spaced by
    ``budget.interval_seconds``. With ``wait_first`` the interval is also slept
    before the first probe, otherwise there is no sleep after the last miss.
    """
    value = None
    for attempt in range(1, budget.max_attempts + 1):
        if wait_first:
            sleep(budget.interval_seconds)

        value = probe(attempt)
        if predicate(value):
            return RetryOutcome(succeeded=True, attempts=attempt, last_value=value)

        if on_miss is not None:
            on_miss(attempt, value)

        if not wait_first and attempt < budget.max_attempts:
            sleep(budget.interval_seconds)

    return RetryOutcome(succeeded=False, attempts=budget.max_attempts, last_value=value)
