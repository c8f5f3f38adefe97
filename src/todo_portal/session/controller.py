import logging
import threading
from typing import Callable, Optional

from pydantic import ValidationError

from todo_portal.api.client import ApiClient
from todo_portal.api.endpoints import Endpoints
from todo_portal.config import LogoutMethod
from todo_portal.domain.models import User
from todo_portal.exceptions import ApiError, NetworkError, SessionInvalid
from todo_portal.result import Err, Ok, Result
from todo_portal.session.navigator import Navigator
from todo_portal.session.state import SESSION_INVALID, ErrorValue, Session, SessionState

logger = logging.getLogger(__name__)

SessionListener = Callable[[Session], None]


class SessionController:
    """
    Owns the session state machine:

        Unresolved      --/user ok-->          Authenticated
        Unresolved      --/user 401-->         Unauthenticated
        any             --/user other error--> Error (user kept)
        Unauthenticated --login()-->           silent probe, then Authenticated
                                               or navigation to the login page
        Authenticated   --logout()-->          Unauthenticated + navigation

    Every /user fetch takes a ticket. A completion is applied only when nothing
    newer (a later fetch, a reported error, a logout) has been applied already.
    """

    def __init__(
        self,
        client: ApiClient,
        endpoints: Endpoints,
        navigator: Navigator,
        logout_method: LogoutMethod = LogoutMethod.GET,
    ):
        self.client = client
        self.endpoints = endpoints
        self.navigator = navigator
        self.logout_method = logout_method
        self._session = Session()
        self._lock = threading.Lock()
        self._issued = 0
        self._applied = 0
        self._listeners: list[SessionListener] = []

    @property
    def session(self) -> Session:
        with self._lock:
            return self._session

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ----- user fetch -----
    def start(self) -> Session:
        return self.refresh()

    def refresh(self) -> Session:
        ticket = self._issue()
        return self._apply_user_result(ticket, self._fetch_user())

    def _fetch_user(self) -> Result[User]:
        try:
            data = self.client.get_json(self.endpoints.user)
            return Ok(User.model_validate(data))
        except (ApiError, ValidationError) as exc:
            return Err(exc)

    def _apply_user_result(self, ticket: int, result: Result[User]) -> Session:
        with self._lock:
            if ticket < self._applied:
                logger.debug("Dropping stale /user result (ticket %s < %s)", ticket, self._applied)
                return self._session
            self._applied = ticket
            current = self._session
            if isinstance(result, Ok):
                updated = Session(SessionState.AUTHENTICATED, result.value, None, current.navigated_to)
            elif result.session_invalid:
                updated = self._invalidated(current)
            else:
                logger.warning("Fetching user failed: %s", result.error)
                updated = Session(SessionState.ERROR, current.user, result.error, current.navigated_to)
            self._session = updated
        self._notify(updated)
        return updated

    # ----- login / logout -----
    def login(self) -> Session:
        """
        Try to reuse an upstream identity-provider session without leaving the
        page; fall back to the interactive login page.
        """
        try:
            # The probe's response is deliberately not inspected: only whether
            # the request went through at all decides the next step.
            self.client.probe(self.endpoints.login_non_interactive)
        except NetworkError as exc:
            logger.info("Silent login unavailable (%s)", exc.reason)
            return self._navigate(self.endpoints.login)

        ticket = self._issue()
        result = self._fetch_user()
        if isinstance(result, Err):
            logger.info("No reusable session after silent login: %s", result.error)
            return self._navigate(self.endpoints.login)
        return self._apply_user_result(ticket, result)

    def logout(self, app_only: bool = False) -> Session:
        if app_only:
            try:
                self.client.probe(self.endpoints.logout_app_only)
            except NetworkError as exc:
                return self.report_error(exc)
            self._invalidate()
            return self._navigate(self.endpoints.home_page)

        if self.logout_method == LogoutMethod.POST:
            try:
                response = self.client.post(self.endpoints.logout, {})
            except NetworkError as exc:
                return self.report_error(exc)
            logger.info("Global logout answered %s", response.status_code)
            self._invalidate()
            return self._navigate(self.endpoints.home_page)

        self._invalidate()
        return self._navigate(self.endpoints.logout)

    # ----- errors -----
    def report_error(self, error: ErrorValue) -> Session:
        """
        Errors raised by views. A rejected session re-enters the login flow;
        anything else is kept until the user clears it.
        """
        with self._lock:
            self._applied = self._issue_locked()
            current = self._session
            if isinstance(error, SessionInvalid) or error is SESSION_INVALID:
                updated = self._invalidated(current)
            else:
                updated = Session(SessionState.ERROR, current.user, error, current.navigated_to)
            self._session = updated
        self._notify(updated)
        return updated

    def clear_error(self) -> Session:
        with self._lock:
            current = self._session
            if not current.has_error:
                return current
            state = SessionState.AUTHENTICATED if current.user is not None else SessionState.UNRESOLVED
            updated = Session(state, current.user, None, current.navigated_to)
            self._session = updated
        self._notify(updated)
        return updated

    # ----- internals -----
    def _invalidate(self) -> Session:
        with self._lock:
            self._applied = self._issue_locked()
            updated = self._invalidated(self._session)
            self._session = updated
        self._notify(updated)
        return updated

    @staticmethod
    def _invalidated(current: Session) -> Session:
        return Session(SessionState.UNAUTHENTICATED, None, SESSION_INVALID, current.navigated_to)

    def _navigate(self, url: str) -> Session:
        with self._lock:
            current = self._session
            updated = Session(current.state, current.user, current.error, url)
            self._session = updated
        self.navigator.navigate(url)
        self._notify(updated)
        return updated

    def _issue(self) -> int:
        with self._lock:
            return self._issue_locked()

    def _issue_locked(self) -> int:
        self._issued += 1
        return self._issued

    def _notify(self, session: Session) -> None:
        for listener in list(self._listeners):
            listener(session)
