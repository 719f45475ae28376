"""
Process-wide service handles.

Built once when the application is created and resolved per request through
the `get_services` dependency, so tests can swap in their own instances.
"""

from dataclasses import dataclass

from fastapi import Request

from models.config import Settings
from services.email_service import EmailNotifier, get_email_provider
from services.file_storage import LocalFileStorage
from services.login_throttle import LoginThrottle


@dataclass
class ServiceRegistry:
    storage: LocalFileStorage
    notifier: EmailNotifier
    login_throttle: LoginThrottle


def build_service_registry(config: Settings) -> ServiceRegistry:
    """Construct the service handles described by the settings."""
    return ServiceRegistry(
        storage=LocalFileStorage(config.UPLOADS_DIR),
        notifier=EmailNotifier(get_email_provider(config), config.APP_URL),
        login_throttle=LoginThrottle(
            max_failures=config.LOGIN_MAX_FAILED_ATTEMPTS,
            window_seconds=config.LOGIN_WINDOW_SECONDS,
        ),
    )


def get_services(request: Request) -> ServiceRegistry:
    """FastAPI dependency returning the registry stored on the app."""
    return request.app.state.services
