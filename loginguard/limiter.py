"""In-memory login attempt limiter.

Each identifier (username, email or IP) gets a sliding window of attempt
timestamps plus an optional block that forces denial until it expires. Both
are expired on read, so decisions never depend on the background reaper; the
reaper only bounds memory.

State is split into shards, each guarded by its own lock. Every operation on
one identifier runs under that identifier's shard lock.
"""

from __future__ import annotations

import logging
import math
import time
from collections import deque
from dataclasses import dataclass, field
from threading import Lock
from typing import Callable

from loginguard.reaper import Reaper

logger = logging.getLogger(__name__)

DEFAULT_SHARDS = 16


class ConfigError(ValueError):
    """Raised when a limiter is built with settings that would never or always block."""


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


def _is_positive_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return value > 0 and math.isfinite(value)


@dataclass(frozen=True, slots=True)
class RateLimiterConfig:
    max_attempts: int
    window_ms: int
    block_duration_ms: int | None = None

    def __post_init__(self) -> None:
        if isinstance(self.max_attempts, bool) or not isinstance(self.max_attempts, int) or self.max_attempts <= 0:
            raise ConfigError(f"max_attempts must be a positive integer, got {self.max_attempts!r}")
        if not _is_positive_number(self.window_ms):
            raise ConfigError(f"window_ms must be positive, got {self.window_ms!r}")
        if self.block_duration_ms is not None and not _is_positive_number(self.block_duration_ms):
            raise ConfigError(f"block_duration_ms must be positive, got {self.block_duration_ms!r}")

    @property
    def effective_block_ms(self) -> int:
        if self.block_duration_ms is None:
            return self.window_ms
        return self.block_duration_ms


@dataclass(frozen=True, slots=True)
class AttemptResult:
    allowed: bool
    remaining_attempts: int
    retry_after_ms: int | None = None

    def to_dict(self) -> dict:
        out = {"allowed": self.allowed, "remainingAttempts": self.remaining_attempts}
        if self.retry_after_ms is not None:
            out["retryAfterMs"] = self.retry_after_ms
        return out


@dataclass(frozen=True, slots=True)
class LimiterStats:
    total_tracked_identifiers: int
    total_blocked_identifiers: int

    def to_dict(self) -> dict:
        return {
            "totalTrackedIdentifiers": self.total_tracked_identifiers,
            "totalBlockedIdentifiers": self.total_blocked_identifiers,
        }


@dataclass(slots=True)
class _Shard:
    history: "dict[str, deque[float]]" = field(default_factory=dict)
    blocked: dict[str, float] = field(default_factory=dict)
    lock: Lock = field(default_factory=Lock)


class LoginRateLimiter:
    """Per-identifier sliding window limiter with a blocking overlay.

    Every public operation accepts ``now`` in milliseconds; when omitted the
    limiter's clock is read. The default clock is monotonic, so recorded
    timestamps are always ascending.

    The reaper thread starts at construction (unless ``start_reaper=False``)
    and runs every ``window_ms``. Call :meth:`close`, or use the limiter as a
    context manager, to stop it.
    """

    def __init__(
        self,
        config: RateLimiterConfig,
        *,
        shard_count: int = DEFAULT_SHARDS,
        clock: Callable[[], float] | None = None,
        start_reaper: bool = True,
    ) -> None:
        if isinstance(shard_count, bool) or not isinstance(shard_count, int) or shard_count < 1:
            raise ConfigError(f"shard_count must be a positive integer, got {shard_count!r}")
        self.config = config
        self._clock = clock or _monotonic_ms
        self._shards = tuple(_Shard() for _ in range(shard_count))
        self._closed = False
        self._reaper = Reaper(self.sweep, interval_s=config.window_ms / 1000.0)
        if start_reaper:
            self._reaper.start()

    def __enter__(self) -> "LoginRateLimiter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def reaper_running(self) -> bool:
        return self._reaper.running

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._reaper.stop()

    def is_rate_limited(self, identifier: str, now: float | None = None) -> bool:
        shard = self._shard_for(identifier)
        with shard.lock:
            now = self._now(now)
            if self._active_block(shard, identifier, now) is not None:
                return True
            return self._recent_count(shard, identifier, now) >= self.config.max_attempts

    def record_attempt(self, identifier: str, now: float | None = None) -> AttemptResult:
        max_attempts = self.config.max_attempts
        shard = self._shard_for(identifier)
        with shard.lock:
            # read under the lock so one identifier's timestamps stay ascending
            now = self._now(now)
            expiry = self._active_block(shard, identifier, now)
            if expiry is not None:
                return AttemptResult(False, 0, max(0, math.ceil(expiry - now)))
            if self._recent_count(shard, identifier, now) >= max_attempts:
                return AttemptResult(False, 0, math.ceil(self.config.window_ms))

            q = shard.history.get(identifier)
            if q is None:
                q = deque()
                shard.history[identifier] = q
            q.append(now)

            count = self._recent_count(shard, identifier, now)
            remaining = max(0, max_attempts - count)
            if count >= max_attempts:
                # The attempt that reaches the limit goes through; later ones hit the block.
                block_ms = self.config.effective_block_ms
                shard.blocked[identifier] = now + block_ms
                logger.info("blocking identifier for %s ms after %d attempts", block_ms, count)
                logger.debug("blocked identifier %r", identifier)
            return AttemptResult(True, remaining)

    def reset(self, identifier: str) -> None:
        shard = self._shard_for(identifier)
        with shard.lock:
            shard.history.pop(identifier, None)
            shard.blocked.pop(identifier, None)

    def get_stats(self) -> LimiterStats:
        tracked = 0
        blocked = 0
        for shard in self._shards:
            with shard.lock:
                tracked += len(shard.history)
                blocked += len(shard.blocked)
        return LimiterStats(tracked, blocked)

    def sweep(self, now: float | None = None) -> tuple[int, int]:
        """Purge empty windows and expired blocks from every shard.

        Returns ``(histories_removed, blocks_removed)``.
        """
        now = self._now(now)
        histories_removed = 0
        blocks_removed = 0
        for shard in self._shards:
            with shard.lock:
                for identifier, expiry in list(shard.blocked.items()):
                    if now >= expiry:
                        del shard.blocked[identifier]
                        blocks_removed += 1
                        if shard.history.pop(identifier, None) is not None:
                            histories_removed += 1
                for identifier in list(shard.history):
                    if self._recent_count(shard, identifier, now) == 0:
                        histories_removed += 1
        if histories_removed or blocks_removed:
            logger.debug("sweep removed %d histories, %d blocks", histories_removed, blocks_removed)
        return histories_removed, blocks_removed

    def _now(self, now: float | None) -> float:
        if now is None:
            return self._clock()
        return now

    def _shard_for(self, identifier: str) -> _Shard:
        return self._shards[hash(identifier) % len(self._shards)]

    def _active_block(self, shard: _Shard, identifier: str, now: float) -> float | None:
        """Return the block expiry, deleting the block if it has run out.

        An expired block takes the identifier's history with it, so the next
        attempt starts a fresh window.
        """
        expiry = shard.blocked.get(identifier)
        if expiry is None:
            return None
        if now >= expiry:
            del shard.blocked[identifier]
            shard.history.pop(identifier, None)
            return None
        return expiry

    def _recent_count(self, shard: _Shard, identifier: str, now: float) -> int:
        q = shard.history.get(identifier)
        if q is None:
            return 0
        cutoff = now - self.config.window_ms
        while q and q[0] <= cutoff:
            q.popleft()
        if not q:
            del shard.history[identifier]
            return 0
        return len(q)
