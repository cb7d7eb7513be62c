# =============================================================================
# Admission Gate — Non-Blocking Per-Endpoint Permit Pool
# =============================================================================
#
# Each public endpoint that feeds the generation queue owns one gate:
#   - /analyze-code         → capacity 5
#   - /generate, /upload    → capacity 10
#
# A request either takes a permit immediately or is refused immediately
# (the API answers 429). Refused callers never wait and never enqueue work.
# The permit is released exactly once, on every exit path.
#
# The gates do not talk to each other. Saturating one leaves the other's
# capacity untouched, even though both feed the same serialized worker.
#
# USAGE:
#   permit = gate.try_enter()
#   if permit is None:
#       ...  # 429
#   try:
#       ...
#   finally:
#       gate.exit(permit)
#
# or, equivalently:
#   with gate.admit():
#       ...
# =============================================================================

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class AdmissionRefused(Exception):
    """Raised by AdmissionGate.admit() when no permit is available."""

    def __init__(self, gate_name: str, capacity: int) -> None:
        super().__init__(
            f"Admission gate '{gate_name}' is full ({capacity} active requests)"
        )
        self.gate_name = gate_name
        self.capacity = capacity


class Permit:
    """Proof of a successful try_enter(). Valid for a single exit()."""

    __slots__ = ("_gate_name", "_released")

    def __init__(self, gate_name: str) -> None:
        self._gate_name = gate_name
        self._released = False

    @property
    def released(self) -> bool:
        return self._released


class AdmissionGate:
    """
    Fixed-capacity counting permit pool with non-blocking acquisition.

    Counter updates are guarded by a lock so the gate is safe to share
    between the event loop and threadpool handlers.
    """

    def __init__(self, name: str, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(
                f"Admission gate '{name}' needs a capacity of at least 1, "
                f"got {capacity}"
            )
        self._name = name
        self._capacity = capacity
        self._in_use = 0
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def in_use(self) -> int:
        return self._in_use

    @property
    def available(self) -> int:
        return self._capacity - self._in_use

    def try_enter(self) -> Permit | None:
        """Take a permit, or return None at once if the pool is exhausted."""
        with self._lock:
            if self._in_use >= self._capacity:
                logger.warning(
                    "Admission refused on '%s' (%d/%d in use)",
                    self._name, self._in_use, self._capacity,
                )
                return None
            self._in_use += 1
            return Permit(self._name)

    def exit(self, permit: Permit) -> None:
        """
        Return a permit to the pool.

        Raises:
            RuntimeError: If the permit was already released or belongs
                to a different gate.
        """
        with self._lock:
            if permit._gate_name != self._name:
                raise RuntimeError(
                    f"Permit from gate '{permit._gate_name}' returned to "
                    f"gate '{self._name}'"
                )
            if permit._released:
                raise RuntimeError(
                    f"Permit for gate '{self._name}' released twice"
                )
            permit._released = True
            self._in_use -= 1

    @contextmanager
    def admit(self) -> Iterator[Permit]:
        """Scoped acquisition. Raises AdmissionRefused when full."""
        permit = self.try_enter()
        if permit is None:
            raise AdmissionRefused(self._name, self._capacity)
        try:
            yield permit
        finally:
            self.exit(permit)
