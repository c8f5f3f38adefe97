from dataclasses import dataclass
from urllib.parse import quote


@dataclass(frozen=True)
class Endpoints:
    """
    URLs of the todo API and the access gateway in front of it.
    """
    base_url: str
    home_page: str

    def _url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}{path}"

    @property
    def user(self) -> str:
        return self._url("/user")

    @property
    def login_non_interactive(self) -> str:
        return self._url("/login/non-interactive")

    @property
    def login(self) -> str:
        return self._url("/login")

    @property
    def logout(self) -> str:
        return self._url("/logout")

    @property
    def logout_app_only(self) -> str:
        return self._url("/pa/oidc/logout")

    @property
    def todos(self) -> str:
        return self._url("/todos")

    def todos_for(self, username: str) -> str:
        return f"{self.todos}/{quote(username, safe='')}"

    @classmethod
    def from_settings(cls, settings) -> "Endpoints":
        return cls(base_url=settings.api.base_url, home_page=settings.api.home_page)
