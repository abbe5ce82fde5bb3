"""
Remote backend (HTTP) for non-mock mode.

Implements the lead store and user directory operations against a backend
that serves the REST contract:

    GET  /leads?limit&page&status&q     -> {leads, total, page, limit}
    GET  /leads/{id}                    -> Lead
    POST /leads                         -> Lead
    PUT  /leads/{id}                    -> Lead
    POST /leads/{id}/notes              -> Note
    GET  /users                         -> User[]

Status mapping:
- 404 -> NotFound
- 400/422 -> ValidationError
- any other non-2xx, connection failure, timeout or bad JSON -> NetworkError
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import requests

from domain.errors import NetworkError, NotFound, ValidationError
from domain.lead import Lead
from domain.timeline import Note
from domain.user import User
from repositories.lead_query import DEFAULT_PAGE_SIZE, LeadPage, LeadQueryFilters
from repositories.lead_rows import row_to_lead, row_to_note, row_to_user
from repositories.lead_store import LeadCreate, normalize_changes

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0

# Page size used when walking every page for all_leads().
_SCAN_PAGE_SIZE = 100


def _error_detail(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return str(body)[:200]


class BackendClient:
    """
    Thin JSON-over-HTTP client shared by the remote store, directory and dispatcher.

    Args:
        base_url: Backend base URL, e.g. http://localhost:3001/api/v1
        timeout: Per-request timeout in seconds
        session: Optional pre-configured requests.Session
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method, url, params=params, json=json, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.warning(
                "Backend request failed",
                extra={"method": method, "url": url, "error": str(e)},
            )
            raise NetworkError(f"{method} {path} failed: {e}") from e

        if response.status_code == 404:
            raise NotFound(_error_detail(response))
        if response.status_code in (400, 422):
            raise ValidationError(_error_detail(response))
        if not response.ok:
            raise NetworkError(
                f"{method} {path} returned {response.status_code}: {_error_detail(response)}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise NetworkError(f"{method} {path} returned invalid JSON") from e


class HttpLeadStore:
    """Lead store backed by a remote REST backend."""

    def __init__(self, client: BackendClient) -> None:
        self._client = client

    def list_leads(
        self,
        filters: LeadQueryFilters,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> LeadPage:
        if page < 1:
            raise ValidationError(f"page must be >= 1, got {page}")
        if limit < 1:
            raise ValidationError(f"limit must be >= 1, got {limit}")

        params: Dict[str, Any] = {"limit": limit, "page": page}
        if filters.status is not None:
            params["status"] = filters.status.value
        if filters.text and filters.text.strip():
            params["q"] = filters.text

        body = self._client.request("GET", "/leads", params=params)
        try:
            return LeadPage(
                leads=[row_to_lead(row) for row in body.get("leads") or []],
                total=int(body["total"]),
                page=int(body.get("page", page)),
                limit=int(body.get("limit", limit)),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise NetworkError(f"Malformed lead list response: {e}") from e

    def all_leads(self) -> List[Lead]:
        leads: List[Lead] = []
        page = 1
        while True:
            result = self.list_leads(LeadQueryFilters(), page=page, limit=_SCAN_PAGE_SIZE)
            leads.extend(result.leads)
            if not result.leads or len(leads) >= result.total:
                return leads
            page += 1

    def get_lead(self, lead_id: str) -> Lead:
        return self._lead(self._client.request("GET", f"/leads/{lead_id}"))

    def create_lead(self, data: LeadCreate) -> Lead:
        payload: Dict[str, Any] = {
            "name": data.name,
            "phone": data.phone,
            "address": data.address,
            "source": getattr(data.source, "value", data.source),
        }
        if data.email:
            payload["email"] = data.email
        if data.notes and data.notes.strip():
            payload["notes"] = data.notes
        return self._lead(self._client.request("POST", "/leads", json=payload))

    def update_lead(self, lead_id: str, changes: Mapping[str, Any]) -> Lead:
        # Validate locally so bad input never leaves the process.
        fields = normalize_changes(changes)
        payload: Dict[str, Any] = {}
        for key, value in fields.items():
            if hasattr(value, "value"):
                value = value.value
            elif hasattr(value, "isoformat"):
                value = value.isoformat()
            elif key == "quote_amount" and value is not None:
                value = float(value)
            payload[key] = value
        return self._lead(self._client.request("PUT", f"/leads/{lead_id}", json=payload))

    def add_note(self, lead_id: str, content: str, user_id: Optional[str] = None) -> Note:
        if not content or not content.strip():
            raise ValidationError("Note content must not be empty")
        body = self._client.request("POST", f"/leads/{lead_id}/notes", json={"content": content})
        try:
            return row_to_note(body, lead_id)
        except (KeyError, TypeError, ValueError) as e:
            raise NetworkError(f"Malformed note response: {e}") from e

    def record_notification(self, lead_id: str, audience: str, summary: str) -> None:
        # The backend records the timeline entry as part of /whatsapp/send.
        return None

    @staticmethod
    def _lead(body: Any) -> Lead:
        try:
            return row_to_lead(body)
        except (KeyError, TypeError, ValueError) as e:
            raise NetworkError(f"Malformed lead response: {e}") from e


class HttpUserDirectory:
    """User directory backed by GET /users."""

    def __init__(self, client: BackendClient) -> None:
        self._client = client

    def list_users(self) -> List[User]:
        body = self._client.request("GET", "/users")
        try:
            return [row_to_user(row) for row in body]
        except (KeyError, TypeError, ValueError) as e:
            raise NetworkError(f"Malformed user list response: {e}") from e

    def get_user(self, user_id: Optional[str]) -> Optional[User]:
        if not user_id:
            return None
        for user in self.list_users():
            if user.id == user_id:
                return user
        return None


__all__ = [
    "BackendClient",
    "DEFAULT_TIMEOUT_SECONDS",
    "HttpLeadStore",
    "HttpUserDirectory",
]
