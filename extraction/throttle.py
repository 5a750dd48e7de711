"""
extraction/throttle.py: kolejka wywołań modelu z polityką odstępów.

CallQueue wykonuje wywołania sekwencyjnie i przed każdym kolejnym
(nie przed pierwszym) czeka tyle, ile wskaże DelayPolicy.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Protocol, TypeVar

T = TypeVar("T")


class DelayPolicy(Protocol):
    def delay(self, calls_made: int, last_failed: bool) -> float:
        """Odstęp (s) przed wywołaniem numer calls_made + 1."""
        ...


@dataclass(frozen=True, slots=True)
class FixedDelay:
    seconds: float = 0.2

    def delay(self, calls_made: int, last_failed: bool) -> float:
        return self.seconds


@dataclass(frozen=True, slots=True)
class ExponentialBackoff:
    """
    Stały odstęp po sukcesie, rosnący wykładniczo po kolejnych błędach
    (base * factor^n, maksymalnie max_seconds).
    """
    base: float = 0.2
    factor: float = 2.0
    max_seconds: float = 30.0

    def delay(self, calls_made: int, last_failed: bool) -> float:
        if not last_failed:
            return self.base
        return min(self.base * self.factor ** calls_made, self.max_seconds)


class CallQueue:
    def __init__(
        self,
        policy: DelayPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.policy = policy or FixedDelay()
        self.sleep = sleep
        self.calls_made = 0
        self._consecutive_failures = 0

    def submit(self, fn: Callable[[], T]) -> T:
        """Wykonuje fn() po odczekaniu odstępu; wyjątki z fn są propagowane."""
        if self.calls_made > 0:
            failed = self._consecutive_failures > 0
            n = self._consecutive_failures if failed else self.calls_made
            seconds = self.policy.delay(n, failed)
            if seconds > 0:
                self.sleep(seconds)

        self.calls_made += 1
        try:
            result = fn()
        except Exception:
            self._consecutive_failures += 1
            raise
        self._consecutive_failures = 0
        return result
