"""
Status change notifications.

Consumes the payload of a ``candidate.status_changed`` event and tells the
candidate and the hiring manager, as the transition rule's notification
settings ask.
"""

import logging
from typing import Any, Dict, Optional

from core.exceptions import ExternalServiceError
from core.integrations.email import EmailService, render_status_email
from database.security import mask_email

logger = logging.getLogger(__name__)


class StatusNotifier:
    """Send the notifications attached to an applied transition."""

    def __init__(self, email_service: Optional[EmailService] = None):
        self.email_service = email_service or EmailService()

    async def notify(self, payload: Dict[str, Any]) -> Dict[str, bool]:
        """
        Notify about one applied transition.

        Args:
            payload: Event payload carrying candidate, interview, statuses and
                ``notification_settings``

        Returns:
            Which recipients were notified

        Raises:
            ExternalServiceError: the candidate email could not be delivered
        """
        settings = payload.get("notification_settings") or {}
        sent = {"candidate": False, "hiring_manager": False}

        if settings.get("notify_candidate"):
            sent["candidate"] = await self._notify_candidate(payload, settings)

        if settings.get("notify_hiring_manager"):
            sent["hiring_manager"] = self._notify_hiring_manager(payload)

        return sent

    async def _notify_candidate(
        self, payload: Dict[str, Any], settings: Dict[str, Any]
    ) -> bool:
        email = payload.get("candidate_email")
        if not email:
            logger.info(
                f"Response {payload.get('response_id')} has no email, "
                "skipping candidate notification"
            )
            return False

        subject, body = render_status_email(
            candidate_name=payload.get("candidate_name"),
            interview_name=payload.get("interview_name") or "your interview",
            new_status=payload["to_status"],
            template=settings.get("email_template"),
        )
        delivered = await self.email_service.send_email_async(
            to_email=email, subject=subject, body=body
        )
        if not delivered:
            raise ExternalServiceError(
                "email", f"Could not deliver status email to {mask_email(email)}"
            )
        return True

    def _notify_hiring_manager(self, payload: Dict[str, Any]) -> bool:
        manager_id = payload.get("hiring_manager_id")
        if not manager_id:
            logger.info(
                f"Interview of response {payload.get('response_id')} has no owner, "
                "skipping hiring manager notification"
            )
            return False

        # Hiring managers read changes from their dashboard feed
        logger.info(
            "Hiring manager notified of status change",
            extra={
                "hiring_manager_id": manager_id,
                "response_id": payload.get("response_id"),
                "from_status": payload.get("from_status"),
                "to_status": payload.get("to_status"),
            },
        )
        return True
