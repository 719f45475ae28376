"""
Sentry SDK configuration with anonymity-preserving settings.

Implements:
- Environment-based initialization
- Scrubbing of anything that could identify a whistleblower or leak
  credentials (IP addresses, cookies, Authorization headers, request bodies)
- Loguru integration
"""

import os
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.loguru import LoguruIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.types import Event, Hint

# Request bodies on these paths carry secrets, passwords or report content
SENSITIVE_PATH_PREFIXES = (
    "/api/reports",
    "/api/whistleblower",
    "/api/admin/login",
    "/api/admin/users",
)


def _before_send(event: Event, hint: Hint) -> Event | None:
    """
    Scrub identifying data before sending to Sentry.

    - Drop the user block entirely (reports are anonymous by design)
    - Remove cookies and the Authorization header
    - Remove request bodies and query strings
    """
    event.pop("user", None)

    request = event.get("request")
    if request and isinstance(request, dict):
        request.pop("cookies", None)
        request.pop("data", None)
        request.pop("query_string", None)
        request.pop("env", None)
        headers = request.get("headers")
        if isinstance(headers, dict):
            for name in list(headers):
                if name.lower() in (
                    "authorization",
                    "x-forwarded-for",
                    "x-real-ip",
                    "cf-connecting-ip",
                ):
                    headers[name] = "[Filtered]"

    return event


def _traces_sampler(sampling_context: dict[str, Any]) -> float:
    """Sample rate per request; credential endpoints are never traced."""
    if sampling_context.get("parent_sampled") is True:
        return 1.0

    asgi_scope = sampling_context.get("asgi_scope", {})
    path = asgi_scope.get("path", "")

    if path in ["/health", "/api/health"]:
        return 0.0

    if path.startswith(SENSITIVE_PATH_PREFIXES):
        return 0.0

    return 0.2


def init_sentry() -> None:
    """
    Initialize Sentry SDK with FastAPI integration.

    Sentry is disabled if SENTRY_DSN environment variable is not set.
    """
    dsn = os.getenv("SENTRY_DSN")

    if not dsn:
        return

    sentry_sdk.init(
        dsn=dsn,
        environment=os.getenv("ENVIRONMENT", "development"),
        release=os.getenv("SENTRY_RELEASE", "unknown"),
        send_default_pii=False,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            LoguruIntegration(),
        ],
        traces_sampler=_traces_sampler,
        sample_rate=1.0,
        before_send=_before_send,
        attach_stacktrace=True,
        max_breadcrumbs=50,
        ignore_errors=[
            KeyboardInterrupt,
            SystemExit,
        ],
    )
