"""HTTP client for the Vivimap API.

Holds the session cookie in its httpx cookie jar and a local cache of pins,
which it uses to refuse placements inside the exclusivity radius before
anything is sent.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

import httpx

from app.schemas.memory import file_kind_for_mime
from app.services.placement import DEFAULT_EXCLUSIVITY_RADIUS_M, PlacementDecision, check_exclusivity

MAX_TOTAL_UPLOAD_MB = 50


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class PlacementRejected(Exception):
    def __init__(self, decision: PlacementDecision):
        super().__init__("This area is too close to an existing memory. Please choose a spot further away.")
        self.decision = decision


class UploadTooLarge(Exception):
    def __init__(self, total_bytes: int, max_total_mb: float):
        super().__init__(f"Total file size cannot exceed {max_total_mb:g}MB.")
        self.total_bytes = total_bytes
        self.max_total_mb = max_total_mb


@dataclass
class LoginResult:
    user: dict | None = None
    requires_verification: bool = False
    email: str | None = None
    message: str | None = None


@dataclass
class UploadedFile:
    name: str
    mime_type: str = ""
    size: int = 0

    def descriptor(self) -> dict:
        return {"name": self.name, "type": file_kind_for_mime(self.mime_type)}


@dataclass
class VivimapClient:
    http: httpx.Client
    api_prefix: str = "/api"
    exclusivity_radius_m: float = DEFAULT_EXCLUSIVITY_RADIUS_M
    max_total_upload_mb: float = MAX_TOTAL_UPLOAD_MB
    memories: list[dict] = field(default_factory=list)
    user: dict | None = None

    @classmethod
    def connect(cls, base_url: str, **kwargs) -> "VivimapClient":
        return cls(http=httpx.Client(base_url=base_url, timeout=10.0), **kwargs)

    def close(self) -> None:
        self.http.close()

    def _request(self, method: str, path: str, json: Any = None, ok: Sequence[int] = (200, 201)) -> tuple[int, Any]:
        r = self.http.request(method, f"{self.api_prefix}{path}", json=json)
        try:
            body = r.json() if r.content else {}
        except ValueError:
            body = {"message": r.text}
        if r.status_code not in ok:
            message = body.get("message") if isinstance(body, dict) else None
            raise ApiError(r.status_code, message or r.reason_phrase)
        return r.status_code, body

    # --- auth ---

    def signup(self, email: str, password: str, full_name: str, username: str) -> str:
        _, body = self._request(
            "POST",
            "/auth/signup",
            {"email": email, "password": password, "fullName": full_name, "username": username},
        )
        return body["message"]

    def verify_email(self, email: str, code: str) -> dict:
        _, body = self._request("POST", "/auth/verify-email", {"email": email, "code": code})
        self.user = body["user"]
        return self.user

    def login(self, email: str, password: str) -> LoginResult:
        """A 403 here is not a failure: the account exists but must verify first."""
        status, body = self._request(
            "POST", "/auth/login", {"email": email, "password": password}, ok=(200, 403)
        )
        if status == 403:
            return LoginResult(
                requires_verification=bool(body.get("requiresVerification")),
                email=body.get("email"),
                message=body.get("message"),
            )
        self.user = body["user"]
        return LoginResult(user=self.user)

    def resend_verification(self, email: str) -> str:
        _, body = self._request("POST", "/auth/resend-verification", {"email": email})
        return body["message"]

    def session(self) -> dict | None:
        """Current user, or None when there is no valid session."""
        try:
            _, body = self._request("GET", "/auth/session")
        except ApiError as e:
            if e.status_code in (401, 404):
                self.user = None
                return None
            raise
        self.user = body["user"]
        return self.user

    def logout(self) -> None:
        self._request("POST", "/auth/logout")
        self.user = None

    # --- memories ---

    def list_memories(self) -> list[dict]:
        _, body = self._request("GET", "/memories")
        self.memories = list(body)
        return self.memories

    def check_placement(self, position: Sequence[float]) -> PlacementDecision:
        return check_exclusivity(position, (m["position"] for m in self.memories), self.exclusivity_radius_m)

    def create_memory(
        self,
        position: Sequence[float],
        title: str,
        description: str = "",
        files: Sequence[UploadedFile] = (),
    ) -> dict:
        total = sum(f.size for f in files)
        if total > self.max_total_upload_mb * 1024 * 1024:
            raise UploadTooLarge(total, self.max_total_upload_mb)
        decision = self.check_placement(position)
        if not decision.allowed:
            raise PlacementRejected(decision)
        payload = {
            "position": [position[0], position[1]],
            "title": title,
            "description": description,
            "files": [f.descriptor() for f in files],
        }
        _, body = self._request("POST", "/memories", payload)
        self.memories.append(body)
        return body
