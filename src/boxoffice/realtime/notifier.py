"""Notifier — hands committed changes to the broadcast hub.

Learn: One attempt per change, bounded by a short timeout. The mutation
has already committed by the time notify() runs, so a failure here is
logged and dropped: never retried, never raised to the caller. If changes
ever need to survive a hub outage, put a queue between the two processes
instead of adding retries here.
"""

from typing import Optional, Protocol

import httpx
import structlog

from boxoffice.errors import DeliveryError
from boxoffice.events import ChangeEvent, WireMessage
from boxoffice.middleware.request_id import REQUEST_ID_HEADER

logger = structlog.get_logger()


class Notifier(Protocol):
    async def notify(self, change: ChangeEvent) -> bool:
        ...


class WebhookNotifier:
    """POSTs each change to the hub's /webhook endpoint."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 2.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    async def notify(self, change: ChangeEvent) -> bool:
        """Deliver one change. Returns True if the hub acknowledged it."""
        message = change.to_wire()
        try:
            await self._deliver(message)
        except DeliveryError as e:
            logger.warning(
                "notifier.delivery_failed",
                kind=change.kind.value,
                url=self.url,
                error=e.message,
            )
            return False

        logger.debug("notifier.delivered", kind=change.kind.value)
        return True

    async def _deliver(self, message: WireMessage) -> None:
        # Hub logs the fan-out under the request that caused it
        headers = {}
        request_id = structlog.contextvars.get_contextvars().get("request_id")
        if request_id:
            headers[REQUEST_ID_HEADER] = request_id

        try:
            resp = await self._client.post(
                self.url,
                json=message.model_dump(mode="json"),
                headers=headers,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise DeliveryError(f"hub timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise DeliveryError(f"hub unreachable: {e}") from e

        if resp.is_error:
            raise DeliveryError(f"hub answered {resp.status_code}")

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
