"""
Email delivery orchestrator — SMTP (primary) with Brevo (fallback).

Sending is fire-and-forget: failures are logged, never raised, so a mail
outage never fails the operation that triggered it.
"""
from __future__ import annotations

import html
import logging

from app.config import Settings
from app.email import brevo, smtp

logger = logging.getLogger(__name__)


class Mailer:
    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    async def send(self, to: str, subject: str, body: str) -> bool:
        """Try SMTP first, fall back to Brevo. Returns whether any provider accepted it."""
        if not to:
            logger.warning("No recipient address — skipping email %r", subject)
            return False

        if smtp.is_configured(self._settings):
            if await smtp.deliver(to, subject, body, self._settings):
                return True
            logger.warning("SMTP failed for %s — falling back to Brevo", to)

        if brevo.is_configured(self._settings):
            if await brevo.deliver(to, subject, body, self._settings):
                return True
            logger.error("Brevo fallback also failed for %s", to)
            return False

        logger.warning("No email provider configured — skipping email to %s", to)
        return False


def _describe_duration(secs: int) -> str:
    for unit, size in (("day", 86400), ("hour", 3600), ("minute", 60)):
        if secs >= size and secs % size == 0:
            count = secs // size
            return f"{count} {unit}" + ("s" if count != 1 else "")
    return f"{secs} second" + ("s" if secs != 1 else "")


def results_report_email(
    survey_title: str, download_url: str, expires_in_secs: int,
) -> tuple[str, str]:
    """Subject and HTML body for the 'your export is ready' email."""
    title = html.escape(survey_title)
    subject = f"Survey results ready: {survey_title}"
    body = (
        f"<p>Your results export for <strong>{title}</strong> is ready.</p>"
        f"<p style='text-align:center;margin:32px 0'>"
        f"<a href='{html.escape(download_url, quote=True)}' "
        f"style='background:#2563eb;color:#fff;padding:14px 28px;border-radius:6px;"
        f"text-decoration:none;font-weight:bold'>Download CSV</a></p>"
        f"<p>The link expires in <strong>{_describe_duration(expires_in_secs)}</strong>.</p>"
        "<p style='color:#6b7280;font-size:13px'>"
        "This is an automated notification. Do not reply to this email.</p>"
    )
    return subject, body
