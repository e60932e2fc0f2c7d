"""
Brevo transactional email client (fallback provider) — async httpx REST call.

Returns True on success, False on any failure (never raises).
"""
from __future__ import annotations

import logging

import httpx

from app.config import Settings

logger = logging.getLogger(__name__)
_BREVO_URL = "https://api.brevo.com/v3/smtp/email"


def is_configured(settings: Settings) -> bool:
    return bool(settings.brevo_api_key)


def _payload(to_email: str, subject: str, html: str, s: Settings) -> dict:
    return {
        "sender": {"email": s.brevo_from_email, "name": s.brevo_from_name},
        "to": [{"email": to_email}],
        "subject": subject,
        "htmlContent": html,
    }


async def deliver(to_email: str, subject: str, html: str, settings: Settings) -> bool:
    if not is_configured(settings):
        return False
    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            r = await client.post(
                _BREVO_URL,
                json=_payload(to_email, subject, html, settings),
                headers={"api-key": settings.brevo_api_key, "Content-Type": "application/json"},
            )
    except httpx.HTTPError as exc:
        logger.error("Brevo request failed: %s", exc)
        return False
    if r.status_code >= 400:
        logger.error("Brevo error %s: %s", r.status_code, r.text[:300])
        return False
    return True
