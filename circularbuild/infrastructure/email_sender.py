# circularbuild/infrastructure/email_sender.py
"""Outbound notification email over SMTP.

Sending is best effort: an unconfigured server or a delivery failure is
logged and reported as ``False``. smtplib is blocking, so the actual
conversation with the server runs on a worker thread.
"""
import asyncio
import html
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from circularbuild.domain.events import MessageCreated

DEFAULT_FROM = "CircularBuild <no-reply@circularbuild.org>"
DEFAULT_SITE_URL = "https://www.circularbuild.org"


class SmtpEmailSender:
    def __init__(self, config, logger: logging.Logger):
        self.config = config
        self.logger = logger

    @property
    def configured(self) -> bool:
        return bool(
            self.config.SMTP_HOST
            and self.config.SMTP_PORT
            and self.config.SMTP_USER
            and self.config.SMTP_PASS
        )

    def _from_address(self) -> str:
        return (self.config.SMTP_FROM or "").strip() or DEFAULT_FROM

    def _build_message(self, to_email: str, subject: str, text: str, html_body: str | None):
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self._from_address()
        msg["To"] = to_email
        msg.attach(MIMEText(text, "plain"))
        if html_body:
            msg.attach(MIMEText(html_body, "html"))
        return msg

    def _deliver(self, to_email: str, msg) -> None:
        port = int(self.config.SMTP_PORT)
        if port == 465:
            server = smtplib.SMTP_SSL(self.config.SMTP_HOST, port, timeout=10)
        else:
            server = smtplib.SMTP(self.config.SMTP_HOST, port, timeout=10)
        with server:
            if port != 465:
                server.starttls()
            server.login(self.config.SMTP_USER, self.config.SMTP_PASS)
            server.sendmail(self.config.SMTP_USER, [to_email], msg.as_string())

    async def send(
        self, to_email: str | None, subject: str, text: str, html_body: str | None = None
    ) -> bool:
        to_email = (to_email or "").strip()
        if not to_email:
            return False
        if not self.configured:
            self.logger.warning(
                "Email skipped: SMTP credentials are not configured"
            )
            return False
        msg = self._build_message(to_email, subject, text, html_body)
        try:
            await asyncio.to_thread(self._deliver, to_email, msg)
        except (smtplib.SMTPException, OSError) as e:
            self.logger.error(f"Failed to send email to {to_email}: {e!s}")
            return False
        self.logger.info(f"Email sent to {to_email}: {subject}")
        return True


class ChatEmailNotifier:
    """Emails the recipient of a new chat message with a link back to the chat."""

    def __init__(self, sender: SmtpEmailSender, site_url: str | None):
        self.sender = sender
        self.site_url = (site_url or DEFAULT_SITE_URL).rstrip("/")

    def chat_link(self, chat_id: int) -> str:
        return f"{self.site_url}/chats/{chat_id}"

    def compose(self, event: MessageCreated) -> tuple[str, str, str]:
        listing_title = event.listing_title or "a listing"
        recipient_name = event.recipient_name or "CircularBuild member"
        sender_name = event.sender_name or "A CircularBuild member"
        link = self.chat_link(event.chat_id)

        subject = f"New message about {listing_title}"
        text = (
            f"Hi {recipient_name},\n\n"
            f'{sender_name} just sent you a message about "{listing_title}".\n\n'
            f"Open the chat to reply: {link}\n\n"
            "- CircularBuild"
        )
        html_body = (
            '<div style="font-family: Arial, sans-serif; line-height: 1.6;">'
            f"<p>Hi {html.escape(recipient_name)},</p>"
            f"<p><strong>{html.escape(sender_name)}</strong> just sent you a message "
            f"about <em>{html.escape(listing_title)}</em>.</p>"
            f'<p><a href="{html.escape(link)}">Open chat</a></p>'
            "</div>"
        )
        return subject, text, html_body

    async def notify_message_created(self, event: MessageCreated) -> bool:
        if not event.recipient_email:
            return False
        subject, text, html_body = self.compose(event)
        return await self.sender.send(event.recipient_email, subject, text, html_body)
