"""Email notifications to case handlers.

Supports:
- console: Logs emails to console (development)
- smtp: Standard SMTP delivery

Notification mails carry only the case code and a portal link. Report content
never leaves the system by mail.
"""

import html
import smtplib
from abc import ABC, abstractmethod
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Iterable

from loguru import logger

from models.config import Settings


class EmailProvider(ABC):
    """Abstract base class for email providers."""

    @abstractmethod
    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> bool:
        """Send an email."""
        pass


class SMTPProvider(EmailProvider):
    """SMTP email provider."""

    def __init__(self, config: Settings) -> None:
        self.host = config.SMTP_HOST
        self.port = config.SMTP_PORT
        self.user = config.SMTP_USER
        self.password = config.SMTP_PASSWORD
        self.from_email = config.SMTP_FROM_EMAIL
        self.from_name = config.SMTP_FROM_NAME
        self.use_tls = config.SMTP_USE_TLS
        self.use_ssl = config.SMTP_USE_SSL

    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> bool:
        """Send email via SMTP.

        Supports both:
        - Implicit SSL (port 465): use SMTP_USE_SSL=true
        - STARTTLS (port 587): use SMTP_USE_TLS=true
        """
        try:
            msg = MIMEMultipart("alternative")
            msg["Subject"] = subject
            msg["From"] = f"{self.from_name} <{self.from_email}>"
            msg["To"] = to_email

            msg.attach(MIMEText(text_body, "plain", "utf-8"))
            msg.attach(MIMEText(html_body, "html", "utf-8"))

            if self.use_ssl:
                server = smtplib.SMTP_SSL(self.host, self.port, timeout=30)
            else:
                server = smtplib.SMTP(self.host, self.port, timeout=30)
                if self.use_tls:
                    server.starttls()

            try:
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.sendmail(self.from_email, to_email, msg.as_string())
            finally:
                server.quit()

            logger.info("Notification email sent")
            return True

        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP: Authentication failed - {e.smtp_code}")
            return False
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send notification email: {e}")
            return False


class ConsoleProvider(EmailProvider):
    """Console email provider for development/testing."""

    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> bool:
        """Log email to console."""
        logger.info(
            f"\n{'=' * 60}\n"
            f"EMAIL (Console Provider - Development Mode)\n"
            f"{'=' * 60}\n"
            f"To: {to_email}\n"
            f"Subject: {subject}\n"
            f"{'-' * 60}\n"
            f"{text_body}\n"
            f"{'=' * 60}\n"
        )
        return True


def get_email_provider(config: Settings) -> EmailProvider:
    """Get the configured email provider."""
    provider_name = config.EMAIL_PROVIDER.lower()

    if provider_name == "smtp":
        return SMTPProvider(config)
    elif provider_name == "console":
        return ConsoleProvider()
    else:
        logger.warning(f"Unknown email provider '{provider_name}', using console")
        return ConsoleProvider()


class EmailNotifier:
    """
    Fire-and-forget notifications about new reports.

    Every failure is logged and swallowed; a submission never fails because
    of mail delivery.
    """

    def __init__(self, provider: EmailProvider, app_url: str):
        self.provider = provider
        self.app_url = app_url.rstrip("/")

    def build_new_report_email(self, case_code: str) -> tuple[str, str, str]:
        """Return (subject, text_body, html_body) for a new report."""
        subject = f"Neuer Hinweis eingegangen ({case_code})"
        admin_url = f"{self.app_url}/admin"
        text = (
            "Ein neuer Hinweis ist eingegangen.\n\n"
            f"Fallnummer: {case_code}\n\n"
            f"Bitte melden Sie sich im Verwaltungsbereich an: {admin_url}\n"
        )
        safe_code = html.escape(case_code)
        safe_url = html.escape(admin_url, quote=True)
        html_body = f"""<!DOCTYPE html>
<html><head><meta charset="UTF-8"></head>
<body style="font-family: sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
<h2 style="color: #333;">Neuer Hinweis eingegangen</h2>
<p>Fallnummer: <strong>{safe_code}</strong></p>
<p><a href="{safe_url}">Zum Verwaltungsbereich</a></p>
</body></html>"""
        return subject, text, html_body

    def notify_new_report(self, recipients: Iterable[str], case_code: str) -> int:
        """
        Notify every recipient about a new report.

        Args:
            recipients: Admin e-mail addresses
            case_code: Case code of the new report

        Returns:
            Number of mails handed over successfully
        """
        recipients = list(recipients)
        if not recipients:
            logger.debug("No admin e-mail addresses configured, skipping notification")
            return 0

        subject, text_body, html_body = self.build_new_report_email(case_code)
        sent = 0
        for to_email in recipients:
            try:
                if self.provider.send(to_email, subject, html_body, text_body):
                    sent += 1
            except Exception as e:
                logger.error(f"Notification provider raised: {e}")
        return sent
