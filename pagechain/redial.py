# pagechain/redial.py
"""
Network re-authentication ("redial").

:class:`RedialCoordinator` is the one object every redial handler shares. It
serializes redial attempts: a caller that arrives while another redial is in
flight waits for it and receives its result instead of triggering a second
reconnect.
"""
from __future__ import annotations

import enum
import subprocess
import threading
from typing import Optional, Protocol, Sequence

from pagechain.logger import get_logger

__all__ = (
    "RedialResult",
    "NetworkExecutor",
    "NullRedialExecutor",
    "CommandRedialExecutor",
    "RedialCoordinator",
)

_log = get_logger("redial")


class RedialResult(enum.Enum):
    SUCCESS = "success"
    FAILED = "failed"


class NetworkExecutor(Protocol):
    def redial(self) -> RedialResult: ...


class NullRedialExecutor:
    """Executor for crawls without a reconnect command; always succeeds."""

    def redial(self) -> RedialResult:
        _log.debug("No redial command configured, nothing to do")
        return RedialResult.SUCCESS


class CommandRedialExecutor:
    """Runs an external reconnect command (PPPoE dialer, VPN restart, ...).

    Exit code 0 means success. Timeouts and launch errors count as failure.
    """

    def __init__(self, command: Sequence[str], timeout: float = 60.0) -> None:
        if not command:
            raise ValueError("redial command must not be empty")
        self.command = list(command)
        self.timeout = timeout

    def redial(self) -> RedialResult:
        _log.info("Redialing: %s", " ".join(self.command))
        try:
            proc = subprocess.run(
                self.command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            _log.error("Redial command timed out after %.1f s", self.timeout)
            return RedialResult.FAILED
        except OSError as exc:
            _log.error("Redial command could not be started: %s", exc)
            return RedialResult.FAILED

        if proc.returncode != 0:
            _log.error("Redial command exited with %d: %s", proc.returncode, proc.stderr.strip())
            return RedialResult.FAILED
        return RedialResult.SUCCESS


class RedialCoordinator:
    """Shared redial service passed explicitly to the handlers that need it."""

    def __init__(self, executor: NetworkExecutor, lock: Optional[threading.Lock] = None) -> None:
        self.executor = executor
        self._lock = lock if lock is not None else threading.Lock()
        self._generation = 0
        self._last_result: Optional[RedialResult] = None

    @property
    def attempts(self) -> int:
        """Number of redials actually executed."""
        return self._generation

    def redial(self) -> RedialResult:
        seen = self._generation
        with self._lock:
            if self._generation != seen and self._last_result is not None:
                # Another caller finished a redial while we were waiting.
                _log.debug("Joined in-flight redial: %s", self._last_result.value)
                return self._last_result
            result = self.executor.redial()
            self._last_result = result
            self._generation += 1
            attempt = self._generation
        if result is RedialResult.FAILED:
            _log.error("Redial failed (attempt %d)", attempt)
        else:
            _log.info("Redial succeeded (attempt %d)", attempt)
        return result
