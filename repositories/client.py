"""
Backend selection and configuration.

This module reads configuration from the environment (after loading `.env`)
and builds the collaborators that back the lead store and the notification
dispatcher. The mode switch never changes the operation contracts, only
which implementation serves them.

Environment variables (all optional):
- MOCK_MODE: "false" (or 0/no/off) to use a remote backend; any other value keeps the in-memory mock
- API_URL: Backend base URL (default http://localhost:3001/api/v1)
- OWNER_NUMBER: WhatsApp number that owner notifications go to
- WHATSAPP_SUCCESS_RATE: Mock send success probability, 0..1 (default 0.9)
- WHATSAPP_SUMMARY_LENGTH: Characters of a sent message kept on the timeline (default 50)
- HEARTBEAT_INTERVAL_SECONDS: Heartbeat period, 8..12 (default 10)
- SEED_DEMO_DATA: Preload demo leads and users in mock mode; "false" (or 0/no/off) disables it
- HTTP_TIMEOUT_SECONDS: Backend request timeout (default 10)
- LOG_LEVEL: Root log level (default INFO)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from repositories.lead_store import DEFAULT_SUMMARY_LENGTH, InMemoryLeadStore, LeadStore
from repositories.remote_backend import (
    DEFAULT_TIMEOUT_SECONDS,
    BackendClient,
    HttpLeadStore,
    HttpUserDirectory,
)
from repositories.seed_data import demo_leads, demo_users
from repositories.user_repository import InMemoryUserDirectory, UserDirectory

# Load environment variables from the project's .env file, if present
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

HEARTBEAT_MIN_SECONDS = 8.0
HEARTBEAT_MAX_SECONDS = 12.0


_TRUTHY = ("1", "true", "yes", "y", "on")
_FALSY = ("0", "false", "no", "n", "off")


def _as_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    """Only an explicit value of the opposite sense overrides the default."""
    value = env.get(name)
    if value is None or value.strip() == "":
        return default
    value = value.strip().lower()
    if default:
        return value not in _FALSY
    return value in _TRUTHY


def _as_float(env: Mapping[str, str], name: str, default: float) -> float:
    value = env.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise RuntimeError(f"Invalid environment variable: {name}={value!r} is not a number.")


def _as_int(env: Mapping[str, str], name: str, default: int) -> int:
    value = env.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise RuntimeError(f"Invalid environment variable: {name}={value!r} is not an integer.")


@dataclass(frozen=True)
class Settings:
    mock_mode: bool = True
    api_url: str = "http://localhost:3001/api/v1"
    owner_number: str = "919876543210"
    whatsapp_success_rate: float = 0.9
    whatsapp_summary_length: int = DEFAULT_SUMMARY_LENGTH
    heartbeat_interval_seconds: float = 10.0
    seed_demo_data: bool = True
    http_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = "INFO"


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Read Settings from the environment.

    Raises:
        RuntimeError: If a variable is present but invalid. The message names it.
    """
    env = os.environ if env is None else env

    settings = Settings(
        mock_mode=_as_bool(env, "MOCK_MODE", True),
        api_url=(env.get("API_URL") or Settings.api_url).strip(),
        owner_number=(env.get("OWNER_NUMBER") or Settings.owner_number).strip(),
        whatsapp_success_rate=_as_float(env, "WHATSAPP_SUCCESS_RATE", Settings.whatsapp_success_rate),
        whatsapp_summary_length=_as_int(env, "WHATSAPP_SUMMARY_LENGTH", Settings.whatsapp_summary_length),
        heartbeat_interval_seconds=_as_float(
            env, "HEARTBEAT_INTERVAL_SECONDS", Settings.heartbeat_interval_seconds
        ),
        seed_demo_data=_as_bool(env, "SEED_DEMO_DATA", True),
        http_timeout_seconds=_as_float(env, "HTTP_TIMEOUT_SECONDS", Settings.http_timeout_seconds),
        log_level=(env.get("LOG_LEVEL") or Settings.log_level).strip().upper(),
    )

    if not 0.0 <= settings.whatsapp_success_rate <= 1.0:
        raise RuntimeError(
            "Invalid environment variable: WHATSAPP_SUCCESS_RATE must be between 0 and 1."
        )
    if settings.whatsapp_summary_length < 1:
        raise RuntimeError(
            "Invalid environment variable: WHATSAPP_SUMMARY_LENGTH must be at least 1."
        )
    if not HEARTBEAT_MIN_SECONDS <= settings.heartbeat_interval_seconds <= HEARTBEAT_MAX_SECONDS:
        raise RuntimeError(
            "Invalid environment variable: HEARTBEAT_INTERVAL_SECONDS must be between "
            f"{HEARTBEAT_MIN_SECONDS:g} and {HEARTBEAT_MAX_SECONDS:g}."
        )
    if settings.http_timeout_seconds <= 0:
        raise RuntimeError("Invalid environment variable: HTTP_TIMEOUT_SECONDS must be positive.")
    if settings.log_level not in logging.getLevelNamesMapping():
        raise RuntimeError(f"Invalid environment variable: LOG_LEVEL={settings.log_level!r} is not a log level.")
    if not settings.mock_mode and not settings.api_url.startswith(("http://", "https://")):
        raise RuntimeError(
            "Invalid environment variable: API_URL must start with http:// or https:// "
            "when MOCK_MODE is false."
        )

    return settings


@dataclass(frozen=True)
class Backend:
    """The collaborators selected by the mode switch."""
    store: LeadStore
    users: UserDirectory
    client: Optional[BackendClient] = None


def build_backend(settings: Settings) -> Backend:
    """
    Build the lead store and user directory for the configured mode.

    - mock mode: a fresh in-memory store (optionally seeded with demo data)
    - backend mode: HTTP implementations sharing one BackendClient
    """
    if settings.mock_mode:
        leads = demo_leads() if settings.seed_demo_data else []
        users = demo_users() if settings.seed_demo_data else []
        return Backend(
            store=InMemoryLeadStore(leads, summary_length=settings.whatsapp_summary_length),
            users=InMemoryUserDirectory(users),
        )

    client = BackendClient(settings.api_url, timeout=settings.http_timeout_seconds)
    return Backend(
        store=HttpLeadStore(client),
        users=HttpUserDirectory(client),
        client=client,
    )


__all__ = ["Backend", "Settings", "build_backend", "load_settings"]
