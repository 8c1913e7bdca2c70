from __future__ import annotations

import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.mime.text import MIMEText
from typing import Any, Optional, Protocol

from jinja2 import DictLoader, Environment, StrictUndefined

from .model import EmailMessage

logger = logging.getLogger(__name__)

SYSTEM_NAME = "Campus Leave System"

_TEMPLATES = {
    "leave_status.txt": """\
Dear {{ student_name }},

Your {{ leave.leave_type.value }} leave request from {{ leave.start_date }} to {{ leave.end_date }} \
({{ leave.days }} day{{ "s" if leave.days != 1 else "" }}) has been {{ leave.status.value }}.
{% if leave.remarks %}
Remarks: {{ leave.remarks }}
{% endif %}
---
{{ system_name }}
""",
    "leave_reminder.txt": """\
Dear {{ student_name }},

This is a reminder that your approved {{ leave.leave_type.value }} leave starts on {{ leave.start_date }} \
and ends on {{ leave.end_date }}.

---
{{ system_name }}
""",
}

_env = Environment(loader=DictLoader(_TEMPLATES), undefined=StrictUndefined, keep_trailing_newline=True)


def render_email(template_name: str, **context: Any) -> str:
    context.setdefault("system_name", SYSTEM_NAME)
    return _env.get_template(template_name).render(**context)


class Mailer(Protocol):
    def send(self, message: EmailMessage) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class SmtpSettings:
    server: str
    port: int = 587
    use_tls: bool = True
    username: Optional[str] = None
    password: Optional[str] = None
    default_sender: Optional[str] = None

    @classmethod
    def from_settings(cls, settings) -> Optional["SmtpSettings"]:
        server = getattr(settings, "MAIL_SERVER", None)
        if not server:
            return None
        return cls(
            server=str(server),
            port=int(getattr(settings, "MAIL_PORT", 587)),
            use_tls=bool(getattr(settings, "MAIL_USE_TLS", True)),
            username=getattr(settings, "MAIL_USERNAME", None) or None,
            password=getattr(settings, "MAIL_PASSWORD", None) or None,
            default_sender=getattr(settings, "MAIL_DEFAULT_SENDER", None) or None,
        )


class SmtpMailer:
    """Sends plain-text mail over SMTP. Failures are logged and reported as False."""

    def __init__(self, settings: SmtpSettings):
        self._settings = settings

    def send(self, message: EmailMessage) -> bool:
        s = self._settings
        msg = MIMEText(message.body, "plain", "utf-8")
        msg["From"] = s.default_sender or s.username or "no-reply@localhost"
        msg["To"] = message.recipient
        msg["Subject"] = f"{SYSTEM_NAME} - {message.subject}"

        try:
            with smtplib.SMTP(s.server, s.port, timeout=10) as server:
                if s.use_tls:
                    server.starttls(context=ssl.create_default_context())
                if s.username and s.password:
                    server.login(s.username, s.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send email to %s", message.recipient)
            return False

        logger.info("Email sent to %s: %s", message.recipient, message.subject)
        return True


class LoggingMailer:
    """Used when no SMTP server is configured."""

    def send(self, message: EmailMessage) -> bool:
        logger.info("Email not configured; would send to %s: %s", message.recipient, message.subject)
        logger.debug("Email body:\n%s", message.body)
        return True


def build_mailer(settings) -> Mailer:
    smtp = SmtpSettings.from_settings(settings)
    return SmtpMailer(smtp) if smtp else LoggingMailer()
