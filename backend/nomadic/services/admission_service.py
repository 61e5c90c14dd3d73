"""
Redis tent holds for concurrent submissions on the same date.

Each booking gets its own hold: a per-date sorted set scores booking ids by
hold expiry, and a companion hash records how many tents each one holds.
The acquire script drops expired holds, checks paid + live holds + requested
against the daily capacity and adds the new hold in one step, so two racing
submissions cannot both take the last tents. A hold is released when its
booking is paid (it is then counted as paid) or when the booking write
fails; an abandoned checkout's hold expires on its own after the checkout
window, however much traffic the date gets.

Circuit breaker: on Redis failure the gate fails open and the system behaves
like OptimisticAdmission. The database stays authoritative for what is paid.
"""

import os
import time
from datetime import date
from typing import Callable

from redis.exceptions import RedisError

from nomadic.services.interfaces.admission import AdmissionStrategy
from nomadic.infrastructure.redis_client import get_redis
from nomadic.core.config import get_settings
from nomadic.core.logging import get_logger
from nomadic.core.metrics import redis_connection_errors, redis_circuit_breaker_open

logger = get_logger(__name__)

_SCRIPT_DIR = os.path.join(os.path.dirname(__file__), '../infrastructure')


def _load_script(name: str) -> str:
    with open(os.path.join(_SCRIPT_DIR, name), 'r') as f:
        return f.read()


ACQUIRE_SCRIPT = _load_script('tent_hold_acquire.lua')
RELEASE_SCRIPT = _load_script('tent_hold_release.lua')


def hold_key(booking_date: date) -> str:
    return f"tent_holds:{booking_date.isoformat()}"


def hold_sizes_key(booking_date: date) -> str:
    return f"tent_hold_sizes:{booking_date.isoformat()}"


class RedisAdmission(AdmissionStrategy):
    """
    Redis-based tent holds, one per booking.

    Use when several customers are likely to book the same date at once
    (holiday weekends, promotions).
    """

    def __init__(self, client=None, clock: Callable[[], float] = time.time):
        self._client = client
        self._clock = clock
        self._acquire = None
        self._release = None

    async def _scripts(self):
        if self._client is None:
            self._client = await get_redis()
        if self._client is None:
            return None, None
        if self._acquire is None:
            self._acquire = self._client.register_script(ACQUIRE_SCRIPT)
            self._release = self._client.register_script(RELEASE_SCRIPT)
        return self._acquire, self._release

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _fail_open(self, operation: str, error: Exception):
        redis_connection_errors.inc()
        redis_circuit_breaker_open.set(1)
        logger.warning("tent_hold_redis_error", operation=operation, error=str(error))

    async def admit(self, booking_date: date, booking_id: int, tents: int, paid_tents: int) -> bool:
        settings = get_settings()
        try:
            acquire, _ = await self._scripts()
            if acquire is None:
                redis_circuit_breaker_open.set(1)
                return True
            result = await acquire(
                keys=[hold_key(booking_date), hold_sizes_key(booking_date)],
                args=[
                    booking_id,
                    tents,
                    paid_tents,
                    settings.MAX_TENTS_PER_DATE,
                    settings.TENT_HOLD_TTL_SECONDS * 1000,
                    self._now_ms(),
                ],
            )
        except RedisError as e:
            self._fail_open("admit", e)
            return True

        redis_circuit_breaker_open.set(0)
        admitted = bool(int(result))
        logger.debug("tent_hold_requested", booking_id=booking_id, tents=tents, admitted=admitted)
        return admitted

    async def release(self, booking_date: date, booking_id: int):
        try:
            _, release = await self._scripts()
            if release is None:
                return
            await release(
                keys=[hold_key(booking_date), hold_sizes_key(booking_date)],
                args=[booking_id],
            )
        except RedisError as e:
            # Best effort: the hold expires with its TTL anyway
            self._fail_open("release", e)
