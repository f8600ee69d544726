"""Order confirmation email via Resend.

Delivery is best effort: failures are logged and never reach the caller.
"""

from __future__ import annotations

import logging

from app.config import EmailConfig

logger = logging.getLogger(__name__)


class Notifier:
    def __init__(self, email: EmailConfig):
        self.email = email

    def _send(self, to: str, subject: str, html: str) -> bool:
        """Send an email via Resend. Returns True on success."""
        if not self.email.resend_api_key:
            logger.warning("RESEND_API_KEY not set, email to %s not sent: %s", to, subject)
            return False

        import resend
        resend.api_key = self.email.resend_api_key

        try:
            resend.Emails.send({
                "from": self.email.from_address,
                "to": [to],
                "subject": subject,
                "html": html,
            })
            return True
        except Exception:
            logger.exception("Failed to send email to %s", to)
            return False

    def send_order_confirmation(self, to: str, order_ids: list[str], pickup_date, kind: str) -> bool:
        rows = "".join(f"<li><code>{oid}</code></li>" for oid in order_ids)
        html = f"""
        <h2>Your {kind} order is booked</h2>
        <p>We will pick up {len(order_ids)} bicycle(s) on <strong>{pickup_date.isoformat()}</strong>.</p>
        <ul>{rows}</ul>
        <p><a href="{self.email.app_url}/orders">Track your orders</a></p>
        """
        return self._send(to, f"Order confirmation: pickup on {pickup_date.isoformat()}", html)
