"""
Infrastructure layer: dispatch of critical weather alerts.

Delivery (push, SMS) belongs to downstream collaborators; the default
dispatcher only logs the alerts it receives.
"""
from typing import Optional, Sequence
import logging

logger = logging.getLogger(__name__)


class AlertDispatcher:
    """Base class for alert delivery backends."""

    async def dispatch(self, location: str, alerts: Sequence[str]) -> int:
        """
        Deliver alerts for a location.

        Returns:
            Number of alerts delivered
        """
        raise NotImplementedError


class LoggingAlertDispatcher(AlertDispatcher):
    """Writes each alert to the application log at WARNING level."""

    async def dispatch(self, location: str, alerts: Sequence[str]) -> int:
        for alert in alerts:
            logger.warning(f"Critical weather alert for {location}: {alert}")
        return len(alerts)


_alert_dispatcher: Optional[AlertDispatcher] = None


def get_alert_dispatcher() -> AlertDispatcher:
    """Get or create the singleton alert dispatcher."""
    global _alert_dispatcher
    if _alert_dispatcher is None:
        _alert_dispatcher = LoggingAlertDispatcher()
    return _alert_dispatcher
