# backend/mailer.py
"""Dev-only mail delivery through an Ethereal (https://ethereal.email) sandbox.

Messages are never delivered to real inboxes; Ethereal keeps them and the
returned preview URL lets a human look at what would have been sent.
"""
import html
import logging
import re
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from email.policy import SMTP as SMTP_POLICY
from typing import List, Optional

import requests

from config import Settings
from errors import MailDeliveryError
from models import Summary, action_items_to_text, lines_to_text

logger = logging.getLogger(__name__)

ETHEREAL_API = "https://api.nodemailer.com/user"
ETHEREAL_WEB = "https://ethereal.email"
MSGID = re.compile(r"MSGID=([^\s\]]+)")


def _items(values: List[str]) -> str:
    return "".join(f"<li>{html.escape(v)}</li>" for v in values)


def render_summary_html(summary: Summary) -> str:
    parts = [
        "<h2>Meeting Summary</h2>",
        f"<h4>Key Points</h4><ul>{_items(summary.points)}</ul>",
    ]
    if summary.decisions:
        parts.append(f"<h4>Decisions</h4><ul>{_items(summary.decisions)}</ul>")
    if summary.action_items:
        rows = "".join(
            f"<li><strong>{html.escape(a.owner)}</strong>: {html.escape(a.task)} "
            f"— <em>{html.escape(a.due)}</em></li>"
            for a in summary.action_items
        )
        parts.append(f"<h4>Action Items</h4><ul>{rows}</ul>")
    return "".join(parts)


def render_summary_text(summary: Summary) -> str:
    sections = ["Meeting Summary", "", "Key Points", lines_to_text(summary.points)]
    if summary.decisions:
        sections += ["", "Decisions", lines_to_text(summary.decisions)]
    if summary.action_items:
        sections += ["", "Action Items (owner | task | due)", action_items_to_text(summary.action_items)]
    return "\n".join(sections)


@dataclass
class SmtpAccount:
    user: str
    password: str
    host: str
    port: int
    web: str = ETHEREAL_WEB


class EtherealMailer:
    def __init__(self, settings: Settings, session: Optional[requests.Session] = None, timeout: float = 30):
        self.settings = settings
        self.session = session or requests.Session()
        self.timeout = timeout

    def account(self) -> SmtpAccount:
        if self.settings.smtp_user and self.settings.smtp_password:
            return SmtpAccount(
                self.settings.smtp_user, self.settings.smtp_password,
                self.settings.smtp_host, self.settings.smtp_port,
            )
        return self.create_test_account()

    def create_test_account(self) -> SmtpAccount:
        resp = self.session.post(
            ETHEREAL_API,
            json={"requestor": "meeting-summarizer", "version": "1.0.0"},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        if data.get("status") != "success":
            logger.error("Ethereal account creation failed: %s", data.get("error"))
            raise MailDeliveryError()
        smtp = data.get("smtp") or {}
        return SmtpAccount(
            user=data["user"],
            password=data["pass"],
            host=smtp.get("host", self.settings.smtp_host),
            port=int(smtp.get("port", self.settings.smtp_port)),
            web=data.get("web", ETHEREAL_WEB),
        )

    def build_message(self, recipients: List[str], subject: str, html_body: str, text: str = "") -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.settings.mail_from
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = subject
        msg.set_content(text or re.sub(r"<[^>]+>", "", html_body))
        msg.add_alternative(html_body, subtype="html")
        return msg

    def deliver(self, account: SmtpAccount, msg: EmailMessage, recipients: List[str]) -> str:
        """Send ``msg`` and return the server's reply to DATA."""
        with smtplib.SMTP(account.host, account.port, timeout=self.timeout) as smtp:
            smtp.starttls(context=ssl.create_default_context())
            smtp.login(account.user, account.password)
            code, reply = smtp.mail(self.settings.mail_from)
            if code != 250:
                raise smtplib.SMTPSenderRefused(code, reply, self.settings.mail_from)
            for rcpt in recipients:
                code, reply = smtp.rcpt(rcpt)
                if code not in (250, 251):
                    raise smtplib.SMTPRecipientsRefused({rcpt: (code, reply)})
            code, reply = smtp.data(msg.as_bytes(policy=SMTP_POLICY))
            if code != 250:
                raise smtplib.SMTPDataError(code, reply)
        return reply.decode("utf-8", "replace") if isinstance(reply, bytes) else str(reply)

    def send(self, recipients: List[str], subject: str, html_body: str, text: str = "") -> str:
        """Deliver an HTML mail and return its Ethereal preview URL."""
        try:
            account = self.account()
            reply = self.deliver(account, self.build_message(recipients, subject, html_body, text), recipients)
        except MailDeliveryError:
            raise
        except (requests.RequestException, smtplib.SMTPException, OSError, KeyError, ValueError) as exc:
            logger.exception("Mail delivery failed")
            raise MailDeliveryError() from exc

        match = MSGID.search(reply)
        preview_url = f"{account.web}/message/{match.group(1)}" if match else f"{account.web}/messages"
        logger.info("Mock email sent: %s", reply)
        logger.info("Preview URL: %s", preview_url)
        return preview_url
