import json
import logging
from enum import Enum
from typing import Any, Optional

import requests

from todo_portal.config import SecuritySettings, XsrfPolicy
from todo_portal.exceptions import NetworkError, SessionInvalid, UnexpectedResponse

logger = logging.getLogger(__name__)


class JsonContentType(str, Enum):
    """Content types accepted as JSON, in normalized form."""
    PLAIN = "application/json"
    UTF8 = "application/json;charset=utf-8"


def normalize_content_type(value: Optional[str]) -> str:
    if not value:
        return ""
    return ";".join(part.strip() for part in value.split(";")).lower()


def is_json_content_type(value: Optional[str]) -> bool:
    normalized = normalize_content_type(value)
    return any(normalized == member.value for member in JsonContentType)


class ApiClient:
    """
    Thin wrapper over a requests.Session.
    The session's cookie jar carries the gateway session cookie on every call.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        security: Optional[SecuritySettings] = None,
        verify_tls: bool = True,
        timeout: Optional[float] = None,
        log_requests: bool = True,
    ):
        self.session = session or requests.Session()
        self.security = security or SecuritySettings()
        self.verify_tls = verify_tls
        self.timeout = timeout
        self.log_requests = log_requests

    def get(self, endpoint: str) -> requests.Response:
        return self._send("GET", endpoint, headers=self._base_headers())

    def post(self, endpoint: str, body: Any, extra_headers: Optional[dict[str, str]] = None) -> requests.Response:
        headers = {**self._base_headers(), "Content-Type": "application/json", **(extra_headers or {})}
        return self._send("POST", endpoint, headers=headers, data=json.dumps(body))

    def get_json(self, endpoint: str) -> Any:
        return self.classify(endpoint, self.get(endpoint))

    def probe(self, endpoint: str) -> None:
        """
        Fire-and-forget GET that follows the gateway's redirect chain so any
        cookies it sets land in the jar. Status and body are not inspected;
        only a network-level failure is reported.
        """
        self._send("GET", endpoint, allow_redirects=True)

    def classify(self, endpoint: str, response: requests.Response) -> Any:
        if response.status_code == 401:
            raise SessionInvalid(endpoint)

        if response.headers.get("Content-Length") == "0":
            return {}

        if is_json_content_type(response.headers.get("Content-Type")):
            try:
                return response.json()
            except ValueError:
                logger.warning("Malformed JSON from %s", endpoint)
                raise self._unexpected(endpoint, response)

        raise self._unexpected(endpoint, response)

    def _unexpected(self, endpoint: str, response: requests.Response) -> UnexpectedResponse:
        return UnexpectedResponse(
            endpoint=endpoint,
            status=response.status_code,
            status_text=response.reason or "",
            headers=response.headers,
            body=response.text,
        )

    def _base_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        headers.update(self._xsrf_headers())
        return headers

    def _xsrf_headers(self) -> dict[str, str]:
        if self.security.xsrf_policy == XsrfPolicy.CONSTANT:
            return {self.security.xsrf_header: self.security.xsrf_constant}

        token = self.session.cookies.get(self.security.xsrf_cookie)
        if not token:
            logger.debug("No %s cookie yet; sending request without anti-forgery header", self.security.xsrf_cookie)
            return {}
        return {self.security.xsrf_header: token}

    def _send(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        try:
            response = self.session.request(
                method,
                endpoint,
                timeout=self.timeout,
                verify=self.verify_tls,
                **kwargs,
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, endpoint, exc)
            raise NetworkError(endpoint, str(exc)) from exc

        if self.log_requests:
            logger.info("%s %s %s", method, endpoint, response.status_code)
        return response


def build_api_client(settings, session: Optional[requests.Session] = None) -> ApiClient:
    session = session or requests.Session()
    for name, value in settings.api.cookies.items():
        session.cookies.set(name, value)
    return ApiClient(
        session=session,
        security=settings.security,
        verify_tls=settings.api.verify_tls,
        timeout=settings.api.timeout_seconds,
        log_requests=settings.logging.log_requests,
    )
