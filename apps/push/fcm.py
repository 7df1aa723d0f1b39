"""Firebase Cloud Messaging HTTP v1 client."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import requests
from django.conf import settings
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request as GoogleRequest
from google.oauth2 import service_account


log = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/firebase.messaging"]
TOKEN_URI = "https://oauth2.googleapis.com/token"
SEND_URL = "https://fcm.googleapis.com/v1/projects/{project_id}/messages:send"
ICON_PATH = "/icons/icon-192.png"


class PushNotConfigured(Exception):
    pass


class PushAuthError(Exception):
    """The provider access token could not be obtained."""


@dataclass
class PushMessage:
    title: str
    body: str
    click_target: str = ""
    data: dict[str, str] = field(default_factory=dict)

    def to_fcm(self, token: str) -> dict:
        # FCM data values must be strings
        data = {k: str(v) for k, v in self.data.items()}
        data["click_action"] = self.click_target
        webpush: dict = {
            "notification": {
                "title": self.title,
                "body": self.body,
                "icon": ICON_PATH,
                "data": {"click_action": self.click_target},
            },
        }
        if self.click_target.startswith("https://"):
            webpush["fcm_options"] = {"link": self.click_target}
        return {
            "message": {
                "token": token,
                "notification": {"title": self.title, "body": self.body},
                "data": data,
                "webpush": webpush,
            }
        }


@dataclass
class DeliveryResult:
    token: str
    ok: bool
    http_status: Optional[int] = None
    error: Optional[str] = None


class _TimeoutRequest(GoogleRequest):
    def __init__(self, session: requests.Session, timeout: float):
        super().__init__(session=session)
        self._timeout = timeout

    def __call__(self, url, method="GET", body=None, headers=None, timeout=None, **kwargs):
        return super().__call__(url, method=method, body=body, headers=headers, timeout=timeout or self._timeout, **kwargs)


class FcmClient:
    def __init__(self, project_id: str, credentials, *, session: Optional[requests.Session] = None, timeout: float = 5.0):
        self.project_id = project_id
        self.credentials = credentials
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "FcmClient":
        project_id = getattr(settings, "FIREBASE_PROJECT_ID", "")
        client_email = getattr(settings, "FIREBASE_CLIENT_EMAIL", "")
        private_key = (getattr(settings, "FIREBASE_PRIVATE_KEY", "") or "").replace("\\n", "\n")
        if not (project_id and client_email and private_key):
            raise PushNotConfigured("Firebase credentials not configured")
        try:
            credentials = service_account.Credentials.from_service_account_info(
                {
                    "type": "service_account",
                    "project_id": project_id,
                    "client_email": client_email,
                    "private_key": private_key,
                    "token_uri": TOKEN_URI,
                },
                scopes=SCOPES,
            )
        except ValueError as e:
            raise PushNotConfigured(f"Invalid Firebase credentials: {e}") from e
        return cls(project_id, credentials, timeout=float(getattr(settings, "PUSH_TIMEOUT_SECONDS", 5)))

    def access_token(self) -> str:
        if not self.credentials.valid:
            try:
                self.credentials.refresh(_TimeoutRequest(self.session, self.timeout))
            except GoogleAuthError as e:
                raise PushAuthError(str(e)) from e
        return self.credentials.token

    def send(self, token: str, message: PushMessage) -> DeliveryResult:
        headers = {
            "Authorization": f"Bearer {self.access_token()}",
            "Content-Type": "application/json; charset=UTF-8",
        }
        url = SEND_URL.format(project_id=self.project_id)
        try:
            resp = self.session.post(url, json=message.to_fcm(token), headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            return DeliveryResult(token=token, ok=False, error=str(e))
        if resp.ok:
            return DeliveryResult(token=token, ok=True, http_status=resp.status_code)
        return DeliveryResult(token=token, ok=False, http_status=resp.status_code, error=resp.text[:1000])

    def close(self) -> None:
        if self._owns_session:
            self.session.close()


def get_push_client() -> FcmClient:
    return FcmClient.from_settings()
