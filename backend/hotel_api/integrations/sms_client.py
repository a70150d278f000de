"""Outbound SMS delivery through an HTTP gateway."""

from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)


class SmsClientError(RuntimeError):
    """Raised when the SMS gateway rejects or fails a message."""


class SmsClient:
    """Send text messages, or log them when no gateway is configured."""

    def __init__(
        self,
        gateway_url: str | None,
        *,
        api_key: str | None = None,
        sender_id: str = "TRPBZR",
        echo: bool = False,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._gateway_url = gateway_url
        self._api_key = api_key
        self._sender_id = sender_id
        self._echo = echo or not gateway_url
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @property
    def echo_mode(self) -> bool:
        return self._echo

    async def close(self) -> None:
        await self._client.aclose()

    async def send(self, phone_number: str, message: str) -> None:
        if self._echo:
            logger.info("SMS to %s: %s", phone_number, message)
            return
        payload = {
            "sender": self._sender_id,
            "mobiles": phone_number,
            "message": message,
        }
        headers = {"authkey": self._api_key} if self._api_key else {}
        try:
            response = await self._client.post(
                self._gateway_url, json=payload, headers=headers
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as exc:
            raise SmsClientError(f"SMS gateway request failed for {phone_number}") from exc
        except ValueError as exc:
            raise SmsClientError("SMS gateway returned invalid JSON") from exc
        if isinstance(body, dict) and body.get("type") not in (None, "success"):
            raise SmsClientError(f"SMS gateway rejected message: {body.get('message')}")
