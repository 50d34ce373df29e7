"""
Notification service for transactional email.
Renders the welcome email and delivers it through the Resend SDK.
"""

import html
import logging
from datetime import datetime, timezone
from typing import Optional

import resend
from starlette.concurrency import run_in_threadpool

from app.config import Settings
from app.models.user import UserRole

logger = logging.getLogger(__name__)

GREETINGS = {
    UserRole.ADMIN: "Welcome, Mighty Admin",
    UserRole.AGENT: "Welcome, Trusted Agent",
    UserRole.BUYER: "Welcome, Smart Buyer",
}

ROLE_MESSAGES = {
    UserRole.ADMIN: "You now have full access to manage agents, properties, and users.",
    UserRole.AGENT: "You can start listing properties and connecting with buyers.",
    UserRole.BUYER: "Browse available listings and connect with trusted agents today.",
}


def render_welcome_email(full_name: str, role: UserRole, client_url: str, app_name: str) -> str:
    """
    Render the role-specific welcome email body.

    Args:
        full_name: Recipient's display name
        role: Recipient's role, selects greeting and message
        client_url: Base URL of the web client, used for the login link
        app_name: Product name shown in the email

    Returns:
        HTML document
    """
    greeting = GREETINGS.get(role, "Welcome!")
    message = ROLE_MESSAGES.get(role, "")
    login_url = f"{client_url.rstrip('/')}/login"
    year = datetime.now(timezone.utc).year

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <title>Welcome to {html.escape(app_name)}</title>
</head>
<body style="font-family: 'Segoe UI', Tahoma, sans-serif; background-color: #f5f5f5; margin: 0; padding: 0;">
  <div style="max-width: 650px; margin: 40px auto; background-color: #ffffff; border-radius: 10px;">
    <div style="background: linear-gradient(135deg, #0078ff, #00b4d8); padding: 30px; text-align: center; color: white;">
      <h1 style="margin: 10px 0 0; font-size: 26px;">{greeting}</h1>
    </div>
    <div style="padding: 30px; color: #333;">
      <p>Hi <strong>{html.escape(full_name)}</strong>,</p>
      <p>We're thrilled to have you join <strong>{html.escape(app_name)}</strong> as a <strong>{role.value}</strong>.
        {message}</p>
      <p>Get started by exploring your dashboard and managing your real estate goals today.</p>
      <div style="text-align: center; margin: 40px 0;">
        <a href="{html.escape(login_url, quote=True)}"
           style="background: #0078ff; color: white; text-decoration: none; padding: 14px 35px; border-radius: 30px;">
          Login into your account
        </a>
      </div>
      <p>Cheers,<br/><strong>The {html.escape(app_name)} Team</strong></p>
    </div>
    <div style="background-color: #f8f9fa; text-align: center; padding: 15px; font-size: 12px; color: #777;">
      <p>&copy; {year} {html.escape(app_name)}. All rights reserved.</p>
    </div>
  </div>
</body>
</html>
"""


class NotificationService:
    """Sends email through Resend. Delivery failures never propagate."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.sender = f"{settings.sender_name} <{settings.email_from}>"
        resend.api_key = settings.resend_api_key

    async def send_email(self, subject: str, html_body: str, to: Optional[str] = None) -> bool:
        """
        Send one email.

        Args:
            subject: Subject line
            html_body: HTML content
            to: Recipient, defaults to the configured EMAIL_TO address

        Returns:
            True if the provider accepted the message
        """
        params: resend.Emails.SendParams = {
            "from": self.sender,
            "to": [to or self.settings.email_to],
            "subject": subject,
            "html": html_body,
        }

        try:
            # The SDK is blocking; run it off the event loop
            result = await run_in_threadpool(resend.Emails.send, params)
        except Exception as e:
            logger.warning(f"Email delivery failed for {params['to'][0]}: {e}")
            return False

        logger.info(f"Email sent to {params['to'][0]}: {subject} ({(result or {}).get('id')})")
        return True

    async def send_welcome_email(self, email: str, full_name: str, role: UserRole) -> bool:
        """Send the welcome email for a new account."""
        body = render_welcome_email(
            full_name, role, self.settings.client_url, self.settings.app_name
        )
        return await self.send_email(f"Welcome to {self.settings.app_name}", body, to=email)
