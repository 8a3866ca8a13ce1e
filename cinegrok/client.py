"""
HTTP client for the CineGrok API.

Every non-2xx response becomes an APIError (AuthRequiredError for 401) carrying
the best message the server gave. Transport failures become APIError("Network
error", 500). Nothing is retried.
"""
import threading
from typing import Any, Callable, Optional

import httpx

from cinegrok.app.core.config import settings
from cinegrok.app.core.logging_config import get_logger

logger = get_logger("client")


class APIError(Exception):
    def __init__(self, message: str, status: int = 500, data: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data

    def __repr__(self) -> str:
        return f"APIError(status={self.status}, message={self.message!r})"


class AuthRequiredError(APIError):
    """HTTP 401 - the caller should prompt the user to log in."""


def _message_from_body(body: Any) -> Optional[str]:
    if isinstance(body, str):
        return body or None
    if not isinstance(body, dict):
        return None
    for key in ("message", "error_description"):
        if isinstance(body.get(key), str) and body[key]:
            return body[key]
    error = body.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    if isinstance(error, str) and error:
        return error
    detail = body.get("detail")
    if isinstance(detail, str) and detail:
        return detail
    if isinstance(detail, dict) and isinstance(detail.get("errors"), dict):
        return "; ".join(f"{field}: {msg}" for field, msg in detail["errors"].items())
    if isinstance(detail, list) and detail and isinstance(detail[0], dict):
        return detail[0].get("msg")
    if isinstance(body.get("msg"), str) and body["msg"]:
        return body["msg"]
    return None


def extract_error_message(response: httpx.Response) -> str:
    """Best-effort human message for a failed response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    message = _message_from_body(body)
    if message:
        return message
    text = (response.text or "").strip()
    if text:
        return text[:500]
    return response.reason_phrase or f"HTTP {response.status_code}"


def error_from_response(response: httpx.Response) -> APIError:
    try:
        data = response.json()
    except ValueError:
        data = None
    message = extract_error_message(response)
    if response.status_code == 401:
        return AuthRequiredError(message, 401, data)
    return APIError(message, response.status_code, data)


class CineGrokClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        http: Optional[httpx.Client] = None,
        token: Optional[str] = None,
        timeout: float = settings.http_request_timeout,
    ):
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.token = token

    def close(self) -> None:
        self.http.close()

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def request(self, method: str, path: str, **kwargs) -> Any:
        headers = {**self._headers(), **kwargs.pop("headers", {})}
        try:
            response = self.http.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("Request failed method=%s path=%s error=%s", method, path, e)
            raise APIError("Network error", 500) from e
        if response.is_error:
            raise error_from_response(response)
        if not response.content:
            return None
        if "application/json" in response.headers.get("content-type", ""):
            return response.json()
        return response.content

    # --- Auth ---
    def signup(self, email: str, password: str, full_name: Optional[str] = None) -> dict:
        result = self.request("POST", "/api/auth/signup", json={
            "email": email, "password": password, "full_name": full_name,
        })
        self.token = result["access_token"]
        return result

    def login(self, email: str, password: str) -> dict:
        result = self.request("POST", "/api/auth/login", json={"email": email, "password": password})
        self.token = result["access_token"]
        return result

    def logout(self) -> dict:
        result = self.request("POST", "/api/auth/logout")
        self.token = None
        return result

    def me(self) -> Optional[dict]:
        return self.request("GET", "/api/auth/me")["user"]

    # --- Filmmakers ---
    def list_filmmakers(self, page: int = 1, limit: Optional[int] = None, **filters) -> dict:
        params = {"page": page, **{k: v for k, v in filters.items() if v}}
        if limit:
            params["limit"] = limit
        return self.request("GET", "/api/v1/filmmakers", params=params)

    def get_filmmaker(self, filmmaker_id: str) -> dict:
        return self.request("GET", f"/api/v1/filmmakers/{filmmaker_id}")

    def search(self, q: str, vector: bool = False) -> list[dict]:
        return self.request("GET", "/api/v1/search", params={"q": q, "vector": str(vector).lower()})

    def ingest(self, row: dict, ingest_key: Optional[str] = None) -> dict:
        headers = {"X-Ingest-Key": ingest_key} if ingest_key else {}
        return self.request("POST", "/api/v1/ingest", json=row, headers=headers)

    def process_ai(self, filmmaker_id: str) -> dict:
        return self.request("POST", "/api/v1/process-ai", json={"id": filmmaker_id})

    def export(self, filmmaker_id: str, format: str = "pdf") -> bytes:
        return self.request("GET", f"/api/v1/filmmakers/{filmmaker_id}/export", params={"format": format})

    # --- Profile builder ---
    def wizard_state(self, step: Optional[int] = None) -> dict:
        params = {"step": step} if step is not None else None
        return self.request("GET", "/api/v1/profile-builder", params=params)

    def update_draft(self, fields: dict) -> dict:
        return self.request("PUT", "/api/v1/profile-builder/draft", json={"fields": fields})

    def next_step(self) -> dict:
        return self.request("POST", "/api/v1/profile-builder/next")

    def previous_step(self) -> dict:
        return self.request("POST", "/api/v1/profile-builder/back")

    def toggle_role(self, role: str, kind: str) -> dict:
        return self.request("POST", "/api/v1/profile-builder/roles/toggle", json={"role": role, "kind": kind})

    def add_film(self, fields: Optional[dict] = None) -> dict:
        return self.request("POST", "/api/v1/profile-builder/films", json={"fields": fields or {}})

    def publish(self) -> dict:
        return self.request("POST", "/api/v1/profile-builder/publish")

    # --- Interests ---
    def is_interested(self, filmmaker_id: str) -> bool:
        return self.request("GET", "/api/interested-profiles", params={"filmmakerId": filmmaker_id})["isInterested"]

    def express_interest(self, filmmaker_id: str) -> dict:
        return self.request("POST", "/api/interested-profiles", json={"filmmakerId": filmmaker_id})

    def remove_interest(self, filmmaker_id: str) -> dict:
        return self.request("DELETE", "/api/interested-profiles", json={"filmmakerId": filmmaker_id})

    def collaboration_interests(
        self, status: str = "all", role: Optional[str] = None, location: Optional[str] = None
    ) -> dict:
        params = {"status": status, **{k: v for k, v in (("role", role), ("location", location)) if v}}
        return self.request("GET", "/api/v1/collaboration-interests", params=params)

    def update_interest(self, filmmaker_id: str, status: Optional[str] = None, notes: Optional[str] = None) -> dict:
        body = {"filmmakerId": filmmaker_id}
        if status is not None:
            body["status"] = status
        if notes is not None:
            body["notes"] = notes
        return self.request("PATCH", "/api/v1/collaboration-interests", json=body)

    # --- Analytics ---
    def track_view(self, filmmaker_id: str) -> dict:
        return self.request("POST", "/api/v1/analytics/track", json={"type": "view", "filmmakerId": filmmaker_id})

    def track_click(self, filmmaker_id: str, click_type: str, target_id: str = "") -> None:
        """Fire-and-forget: any failure is logged at debug level and dropped."""
        try:
            self.request("POST", "/api/v1/analytics/track", json={
                "type": "click",
                "filmmakerId": filmmaker_id,
                "clickType": click_type,
                "targetId": target_id,
            })
        except APIError as e:
            logger.debug("Click tracking dropped filmmaker_id=%s status=%s: %s", filmmaker_id, e.status, e.message)

    def stats(self, days: int = 30, trend: bool = False, clicks: bool = False) -> dict:
        return self.request("GET", "/api/v1/analytics/stats", params={
            "days": days, "trend": str(trend).lower(), "clicks": str(clicks).lower(),
        })

    # --- Storage ---
    def upload(self, file_name: str, content: bytes, path: str, mime_type: str = "application/octet-stream") -> str:
        result = self.request(
            "POST",
            "/api/storage/upload",
            files={"file": (file_name, content, mime_type)},
            data={"path": path},
        )
        return result["publicUrl"]


class SessionMonitor:
    """
    Polls /api/auth/me and reports login-state changes. A failed check counts as
    logged out until the next poll succeeds.
    """

    def __init__(
        self,
        client: CineGrokClient,
        interval: float = settings.session_poll_interval,
        on_change: Optional[Callable[[Optional[dict]], None]] = None,
    ):
        self.client = client
        self.interval = interval
        self.on_change = on_change
        self.user: Optional[dict] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_logged_in(self) -> bool:
        return self.user is not None

    def check_once(self) -> Optional[dict]:
        try:
            user = self.client.me()
        except APIError as e:
            logger.debug("Session check failed status=%s: %s", e.status, e.message)
            user = None
        if (user or {}).get("id") != (self.user or {}).get("id"):
            self.user = user
            if self.on_change:
                self.on_change(user)
        else:
            self.user = user
        return self.user

    def _run(self) -> None:
        while not self._stop.is_set():
            self.check_once()
            self._stop.wait(self.interval)

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="cinegrok-session-monitor", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)
            self._thread = None
