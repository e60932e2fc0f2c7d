"""
Global slowapi rate limiter for the anonymous submission endpoint.

Mounted onto app.state in main.py so the slowapi middleware can find it.
Storage comes from RATE_LIMIT_STORAGE_URI (``memory://`` when unset; point it
at Redis when running more than one worker). Storage errors are swallowed so a
limiter outage never blocks submissions.
"""
from fastapi import Request
from slowapi import Limiter

from app.config import get_settings
from app.dependencies import get_client_ip

SUBMIT_RATE_LIMIT = "30/minute"


def client_key(request: Request) -> str:
    return get_client_ip(request) or "anonymous"


limiter = Limiter(
    key_func=client_key,
    storage_uri=get_settings().rate_limit_storage_uri,
    swallow_errors=True,
)
