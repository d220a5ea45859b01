"""
Centralized logging configuration with Sentry integration.

Provides structured logging and error tracking.
"""

import logging
import sys
from typing import Dict, Any, Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.httpx import HttpxIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from app.core.config import settings
from app.logging.custom_logger import LevelAwareFormatter

SENSITIVE_FIELDS = [
    'token', 'secret', 'authorization', 'access_token', 'refresh_token',
    'client_secret', 'code', 'state', 'session', 'api_key', 'private_key',
]

SENSITIVE_HEADERS = [
    'Authorization', 'Cookie', 'Set-Cookie', 'X-API-Key', 'X-Auth-Token'
]


def init_sentry():
    """
    Initialize Sentry for error tracking and performance monitoring.

    Only initializes if SENTRY_DSN is configured.
    """
    if not settings.SENTRY_DSN:
        logging.info("SENTRY_DSN not configured. Sentry disabled.")
        return

    try:
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            environment=settings.SENTRY_ENVIRONMENT or settings.MODE,
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
            integrations=[
                FastApiIntegration(),
                SqlalchemyIntegration(),
                HttpxIntegration(),
            ],
            before_send=filter_sensitive_data,
            send_default_pii=False,
            attach_stacktrace=True,
            max_breadcrumbs=50,
        )
        logging.info(f"Sentry initialized successfully for environment: {settings.MODE}")
    except Exception as e:
        logging.error(f"Failed to initialize Sentry: {e}")


def filter_sensitive_data(event: Dict[str, Any], hint: Dict[str, Any] = None) -> Optional[Dict[str, Any]]:
    """
    Filter sensitive data before sending to Sentry.

    Removes OAuth codes and state, tokens, secrets and cookies from request
    data, query strings and headers.

    Args:
        event: Sentry event dictionary
        hint: Sentry hint dictionary

    Returns:
        Modified event with sensitive data removed
    """
    request = event.get('request')
    if not isinstance(request, dict):
        return event

    data = request.get('data')
    if isinstance(data, dict):
        for field in SENSITIVE_FIELDS:
            if field in data:
                data[field] = '[FILTERED]'

    if request.get('query_string'):
        request['query_string'] = '[FILTERED]'

    if 'cookies' in request:
        request['cookies'] = '[FILTERED]'

    headers = request.get('headers')
    if isinstance(headers, dict):
        for header in SENSITIVE_HEADERS:
            for key in list(headers.keys()):
                if key.lower() == header.lower():
                    headers[key] = '[FILTERED]'

    return event


def capture_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    user: Optional[Dict[str, Any]] = None,
    tags: Optional[Dict[str, str]] = None
) -> Optional[str]:
    """
    Capture an error and send to Sentry with context.

    Args:
        error: Exception to capture
        context: Additional context dict to attach
        user: User information dict (id, username)
        tags: Tags to attach to the event

    Returns:
        Sentry event ID if sent, None otherwise
    """
    if not settings.SENTRY_DSN:
        return None

    try:
        with sentry_sdk.new_scope() as scope:
            if user:
                scope.set_user({
                    "id": user.get("id"),
                    "username": user.get("username")
                })

            if context:
                for key, value in context.items():
                    scope.set_context(key, value if isinstance(value, dict) else {"value": value})

            if tags:
                for key, value in tags.items():
                    scope.set_tag(key, value)

            event_id = sentry_sdk.capture_exception(error)
            logging.info(f"Error captured in Sentry with event ID: {event_id}")
            return event_id
    except Exception as e:
        logging.error(f"Failed to capture error in Sentry: {e}")
        return None


def setup_logging():
    """
    Configure logging for the application.

    Installs a single console handler on the root logger whose formatter
    understands the custom levels of ``app.logging``.
    """
    log_level = settings.LOG_LEVEL

    logger = logging.getLogger()
    logger.setLevel(getattr(logging, log_level.upper()))

    # Remove existing handlers
    logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, log_level.upper()))
    console_handler.setFormatter(LevelAwareFormatter())

    logger.addHandler(console_handler)

    logging.info(f"Logging configured with level: {log_level}")
