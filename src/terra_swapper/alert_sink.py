"""Best-effort failure notifications via a Slack incoming webhook."""

import logging

import httpx

logger = logging.getLogger(__name__)


class SlackAlertSink:
    """
    Fire-and-forget Slack notifier.

    Delivery problems are logged and swallowed so an alerting outage can
    never interfere with the swapper's own error handling.
    """

    def __init__(
        self,
        webhook_url: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None
    ) -> None:
        """
        Initialize the sink.

        Args:
            webhook_url: Slack webhook URL; empty disables notifications
            timeout: Delivery timeout in seconds
            transport: Optional transport override (used for testing)
        """
        self.webhook_url = webhook_url
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    async def notify(self, message: str) -> None:
        """Post a message to the webhook. Never raises."""
        if not self.enabled:
            logger.debug("Slack notification skipped (no webhook configured)")
            return

        try:
            response = await self.client.post(self.webhook_url, json={"text": message})
            response.raise_for_status()
        except Exception as e:
            logger.error(f"Slack Notification Error: {e}")

    async def close(self) -> None:
        await self.client.aclose()
