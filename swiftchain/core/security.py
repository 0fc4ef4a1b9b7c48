"""HTTP hardening: CORS origin policy and default security headers."""

from __future__ import annotations

from typing import Dict

# localhost on any port, Vercel and Netlify preview deployments
CORS_ORIGIN_REGEX = (
    r"^https?://localhost(:\d+)?$"
    r"|^https://[a-z0-9-]+(\.[a-z0-9-]+)*\.vercel\.app$"
    r"|^https://[a-z0-9-]+(\.[a-z0-9-]+)*\.netlify\.app$"
)

SECURITY_HEADERS: Dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
}


async def security_headers_middleware(request, call_next):  # type: ignore
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response
