"""Single and multi-channel notification delivery with retries.

Each channel walks its own ``ChannelAttempt`` state machine. Multi-channel
requests fan out in an anyio task group, so one channel's retries never delay
another. Callers always get one result per distinct requested channel, even
when the call times out or is cancelled.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence

import anyio

from hms_messaging.domain.entities import (
    NOTIFICATION_STATUS_FAILED,
    NOTIFICATION_STATUS_SENT,
    ChannelAttempt,
    ChannelResult,
    NotificationMessage,
    NotificationRecord,
    RetryPolicy,
)
from hms_messaging.utils import now_utc

from .ports import NotificationRecordStore
from .registry import ChannelRegistry

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]

REASON_DISABLED = "disabled"
REASON_NOT_REGISTERED = "not registered"
REASON_UNAVAILABLE = "unavailable"
REASON_SEND_FAILED = "send failed"
REASON_CANCELLED = "cancelled"


class NotificationDispatcher:
    """Deliver notifications through the channels held by a :class:`ChannelRegistry`."""

    def __init__(
        self,
        registry: ChannelRegistry,
        policy: RetryPolicy,
        *,
        record_store: NotificationRecordStore | None = None,
        sleep: SleepFn = anyio.sleep,
    ) -> None:
        self._registry = registry
        self._policy = policy
        self._records = record_store
        self._sleep = sleep

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def send_single(self, channel_type: str, message: NotificationMessage) -> bool:
        """Send ``message`` through one channel and report whether it got through."""

        result = await self.deliver(channel_type, message)
        return result.succeeded

    async def send_multi(
        self,
        channel_types: Sequence[str],
        message: NotificationMessage,
        *,
        timeout: float | None = None,
        cancel_event: anyio.Event | None = None,
    ) -> dict[str, bool]:
        """Send ``message`` through every channel concurrently.

        Duplicated channel types are dispatched once. Channels still running
        when ``timeout`` expires or ``cancel_event`` is set are reported as
        failed.
        """

        results = await self.deliver_many(
            channel_types, message, timeout=timeout, cancel_event=cancel_event
        )
        return {channel_type: result.succeeded for channel_type, result in results.items()}

    async def deliver(self, channel_type: str, message: NotificationMessage) -> ChannelResult:
        """Like :meth:`send_single` but return the full :class:`ChannelResult`."""

        tracker = ChannelAttempt(channel_type, self._policy.max_attempts)
        result = await self._deliver(tracker, message)
        await self._record(message, [result])
        return result

    async def deliver_many(
        self,
        channel_types: Sequence[str],
        message: NotificationMessage,
        *,
        timeout: float | None = None,
        cancel_event: anyio.Event | None = None,
    ) -> dict[str, ChannelResult]:
        """Like :meth:`send_multi` but return a :class:`ChannelResult` per channel."""

        requested = list(dict.fromkeys(channel_types))
        trackers = {
            channel_type: ChannelAttempt(channel_type, self._policy.max_attempts)
            for channel_type in requested
        }
        finished: dict[str, ChannelResult] = {}

        async def run(channel_type: str) -> None:
            finished[channel_type] = await self._deliver(trackers[channel_type], message)

        with anyio.move_on_after(timeout) as deadline:
            async with anyio.create_task_group() as outer:
                if cancel_event is not None:
                    outer.start_soon(_cancel_when_set, cancel_event, outer.cancel_scope)
                async with anyio.create_task_group() as channels:
                    for channel_type in requested:
                        channels.start_soon(run, channel_type)
                outer.cancel_scope.cancel()

        if deadline.cancelled_caught:
            logger.warning("Multi-channel dispatch to %s timed out after %ss", message.recipient, timeout)

        results: dict[str, ChannelResult] = {}
        for channel_type in requested:
            result = finished.get(channel_type)
            if result is None:
                logger.warning("Channel %s cancelled before completion", channel_type)
                result = ChannelResult(
                    channel_type=channel_type,
                    succeeded=False,
                    reason=REASON_CANCELLED,
                    attempts=trackers[channel_type].attempts,
                )
            results[channel_type] = result

        await self._record(message, list(results.values()))
        return results

    async def _deliver(self, tracker: ChannelAttempt, message: NotificationMessage) -> ChannelResult:
        channel_type = tracker.channel_type
        if not self._policy.is_enabled(channel_type):
            logger.warning("Channel %s is disabled by configuration", channel_type)
            return ChannelResult(channel_type, False, REASON_DISABLED, 0)

        sender = self._registry.resolve(channel_type)
        if sender is None:
            logger.warning("Channel %s not found", channel_type)
            return ChannelResult(channel_type, False, REASON_NOT_REGISTERED, 0)

        if not sender.is_available():
            logger.warning("Channel %s is not available", channel_type)
            return ChannelResult(channel_type, False, REASON_UNAVAILABLE, 0)

        while True:
            tracker.start()
            reason = REASON_SEND_FAILED
            try:
                sent = bool(await sender.send(message))
            except Exception as exc:
                logger.exception("Failed to send notification via %s", channel_type)
                sent = False
                reason = str(exc) or type(exc).__name__

            if sent:
                tracker.succeed()
                return ChannelResult(channel_type, True, None, tracker.attempts)

            tracker.fail()
            if tracker.is_terminal:
                logger.warning(
                    "Giving up on %s for %s after %s attempts",
                    channel_type,
                    message.recipient,
                    tracker.attempts,
                )
                return ChannelResult(channel_type, False, reason, tracker.attempts)

            logger.info(
                "Attempt %s/%s via %s failed; retrying in %ss",
                tracker.attempts,
                tracker.max_attempts,
                channel_type,
                self._policy.delay_seconds,
            )
            await self._sleep(self._policy.delay_seconds)
            tracker.retry()

    async def _record(self, message: NotificationMessage, results: Sequence[ChannelResult]) -> None:
        """Store one record per result in a worker thread; store calls block."""

        if self._records is None:
            return
        await anyio.to_thread.run_sync(self._write_records, message, results)

    def _write_records(self, message: NotificationMessage, results: Iterable[ChannelResult]) -> None:
        metadata = json.loads(json.dumps(dict(message.metadata), default=str))
        for result in results:
            created_at = now_utc()
            record = NotificationRecord(
                id=None,
                recipient=message.recipient,
                subject=message.subject,
                message=message.content,
                channel_type=result.channel_type,
                status=NOTIFICATION_STATUS_SENT if result.succeeded else NOTIFICATION_STATUS_FAILED,
                appointment_id=_as_optional_int(metadata.get("appointment_id")),
                user_id=_as_optional_str(metadata.get("user_id")),
                error_message=result.reason,
                retry_count=max(result.attempts - 1, 0),
                metadata=metadata,
                is_read=False,
                created_at=created_at,
                sent_at=created_at if result.succeeded else None,
            )
            try:
                self._records.create(record)
            except Exception:
                logger.exception(
                    "Failed to record %s notification for %s", result.channel_type, message.recipient
                )


async def _cancel_when_set(event: anyio.Event, scope: anyio.CancelScope) -> None:
    await event.wait()
    scope.cancel()


def _as_optional_int(value: object) -> int | None:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def _as_optional_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


__all__ = [
    "NotificationDispatcher",
    "REASON_CANCELLED",
    "REASON_DISABLED",
    "REASON_NOT_REGISTERED",
    "REASON_SEND_FAILED",
    "REASON_UNAVAILABLE",
]
