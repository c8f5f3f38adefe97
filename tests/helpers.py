import json
from typing import Any, Optional

import requests
from requests.cookies import RequestsCookieJar
from requests.structures import CaseInsensitiveDict

BASE_URL = "https://api.test"
HOME_PAGE = "https://home.test"


def make_response(
    status: int = 200,
    json_body: Any = None,
    text: Optional[str] = None,
    headers: Optional[dict[str, str]] = None,
    reason: Optional[str] = None,
) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.reason = reason if reason is not None else {200: "OK", 204: "No Content", 401: "Unauthorized", 500: "Internal Server Error"}.get(status, "")
    response.headers = CaseInsensitiveDict(headers or {})
    response.encoding = "utf-8"
    if json_body is not None:
        response._content = json.dumps(json_body).encode("utf-8")
        response.headers.setdefault("Content-Type", "application/json")
    else:
        response._content = (text or "").encode("utf-8")
    return response


def empty_response(status: int = 204) -> requests.Response:
    return make_response(status, headers={"Content-Length": "0"})


class FakeSession:
    """
    Stands in for requests.Session: answers from a per-(method, url) queue and records calls.
    A queued exception is raised instead of returned; a queued callable is called for its response.
    """

    def __init__(self):
        self.cookies = RequestsCookieJar()
        self.calls: list[dict] = []
        self._routes: dict[tuple[str, str], list] = {}

    def add(self, method: str, url: str, *results) -> None:
        self._routes.setdefault((method, url), []).extend(results)

    def request(self, method: str, url: str, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        queue = self._routes.get((method, url))
        if not queue:
            raise AssertionError(f"Unexpected request {method} {url}")
        result = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(result, Exception):
            raise result
        if callable(result):
            return result()
        return result

    def urls(self, method: Optional[str] = None) -> list[str]:
        return [c["url"] for c in self.calls if method is None or c["method"] == method]


class RecordingNavigator:
    def __init__(self):
        self.visited: list[str] = []

    def navigate(self, url: str) -> None:
        self.visited.append(url)

