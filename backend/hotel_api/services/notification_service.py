"""Background SMS delivery decoupled from request handling."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from hotel_api.core.config import Settings
from hotel_api.integrations import SmsClient, SmsClientError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SmsNotification:
    phone_number: str
    message: str
    context: dict[str, Any] = field(default_factory=dict)
    attempts: int = 0


class NotificationQueue:
    """Queue of outbound SMS drained by a single worker task.

    Enqueueing never blocks on delivery. Failed sends are retried with a
    linear backoff and dropped (with an error log) after ``max_attempts``.
    """

    def __init__(
        self,
        sender: SmsClient,
        *,
        max_attempts: int = 3,
        retry_backoff: float = 2.0,
        country_code: str = "",
    ) -> None:
        self.sender = sender
        self._max_attempts = max(1, max_attempts)
        self._retry_backoff = retry_backoff
        self._country_code = country_code
        self._queue: asyncio.Queue[SmsNotification] = asyncio.Queue()
        self._worker: asyncio.Task[None] | None = None

    def start(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run(), name="sms-notifications")

    async def stop(self) -> None:
        if self._worker is None:
            return
        worker, self._worker = self._worker, None
        worker.cancel()
        try:
            await worker
        except asyncio.CancelledError:
            pass
        pending = self._queue.qsize()
        if pending:
            logger.warning("Stopping notification queue with %d undelivered SMS", pending)

    async def join(self) -> None:
        """Wait until every queued notification has been handled."""
        await self._queue.join()

    def international(self, mobile: str) -> str:
        mobile = str(mobile)
        if self._country_code and not mobile.startswith(self._country_code):
            return f"{self._country_code}{mobile}"
        return mobile

    def enqueue_sms(self, phone_number: str, message: str, **context: Any) -> None:
        if not phone_number:
            logger.debug("No phone number provided for SMS; skipping")
            return
        self._queue.put_nowait(
            SmsNotification(phone_number=phone_number, message=message, context=context)
        )

    async def _run(self) -> None:
        while True:
            notification = await self._queue.get()
            try:
                await self._deliver(notification)
            finally:
                self._queue.task_done()

    async def _deliver(self, notification: SmsNotification) -> None:
        while True:
            notification.attempts += 1
            try:
                await self.sender.send(notification.phone_number, notification.message)
                return
            except SmsClientError:
                if notification.attempts >= self._max_attempts:
                    logger.exception(
                        "Giving up on SMS to %s after %d attempts (%s)",
                        notification.phone_number,
                        notification.attempts,
                        notification.context,
                    )
                    return
                logger.warning(
                    "SMS to %s failed (attempt %d); retrying",
                    notification.phone_number,
                    notification.attempts,
                )
            except Exception:
                logger.exception(
                    "Unexpected SMS failure for %s (%s)",
                    notification.phone_number,
                    notification.context,
                )
                return
            await asyncio.sleep(self._retry_backoff * notification.attempts)


def build_notification_queue(settings: Settings) -> NotificationQueue:
    sender = SmsClient(
        settings.sms_gateway_url,
        api_key=settings.sms_api_key,
        sender_id=settings.sms_sender_id,
        echo=settings.dev_sms_echo,
    )
    return NotificationQueue(
        sender,
        max_attempts=settings.notification_max_attempts,
        retry_backoff=settings.notification_retry_backoff_seconds,
        country_code=settings.sms_country_code,
    )


def build_account_created_sms(*, brand: str, password: str) -> str:
    return (
        f"Your {brand} account has been created. You can login to your account "
        f"using your mobile No. and password: {password}"
    )


def build_guest_cancellation_sms(*, hotel_name: str) -> str:
    return (
        f"Your hotel {hotel_name} has been cancelled. Your refund will be "
        "processed according to the cancellation policy."
    )


def build_admin_cancellation_sms(*, hotel_name: str, guest_name: str, mobile: str) -> str:
    return (
        f"Hello admin, hotel {hotel_name} has been cancelled. "
        f"Guest name : {guest_name}, Contact no: {mobile}."
    )
