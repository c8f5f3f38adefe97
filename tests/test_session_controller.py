import requests

from helpers import BASE_URL, HOME_PAGE, empty_response, make_response
from todo_portal.config import LogoutMethod
from todo_portal.exceptions import NetworkError, SessionInvalid, UnexpectedResponse
from todo_portal.session import SESSION_INVALID, SessionController, SessionState

USER_URL = f"{BASE_URL}/user"
PROBE_URL = f"{BASE_URL}/login/non-interactive"
LOGIN_URL = f"{BASE_URL}/login"
BOB = {"username": "bob", "groups": ["dev"]}


def build_controller(client, endpoints, navigator, **kwargs) -> SessionController:
    return SessionController(client=client, endpoints=endpoints, navigator=navigator, **kwargs)


def test_initial_session_is_invalid(client, endpoints, navigator):
    controller = build_controller(client, endpoints, navigator)
    session = controller.session
    assert session.state == SessionState.UNRESOLVED
    assert session.invalid
    assert session.user is None


def test_start_authenticates(client, endpoints, navigator, fake_session):
    fake_session.add("GET", USER_URL, make_response(200, json_body=BOB))
    controller = build_controller(client, endpoints, navigator)

    session = controller.start()
    assert session.state == SessionState.AUTHENTICATED
    assert session.user.username == "bob"
    assert session.user.groups == ["dev"]
    assert session.error is None


def test_start_401_is_unauthenticated(client, endpoints, navigator, fake_session):
    fake_session.add("GET", USER_URL, make_response(401))
    controller = build_controller(client, endpoints, navigator)

    session = controller.start()
    assert session.state == SessionState.UNAUTHENTICATED
    assert session.error is SESSION_INVALID


def test_other_error_keeps_user(client, endpoints, navigator, fake_session):
    fake_session.add(
        "GET",
        USER_URL,
        make_response(200, json_body=BOB),
        make_response(503, text="down", headers={"Content-Type": "text/plain"}),
    )
    controller = build_controller(client, endpoints, navigator)
    controller.start()

    session = controller.refresh()
    assert session.state == SessionState.ERROR
    assert session.user.username == "bob"
    assert isinstance(session.error, UnexpectedResponse)


def test_refresh_401_after_authenticated(client, endpoints, navigator, fake_session):
    fake_session.add("GET", USER_URL, make_response(200, json_body=BOB), make_response(401))
    controller = build_controller(client, endpoints, navigator)
    controller.start()

    session = controller.refresh()
    assert session.state == SessionState.UNAUTHENTICATED
    assert session.user is None


def test_clear_error_keeps_authentication(client, endpoints, navigator, fake_session):
    fake_session.add(
        "GET",
        USER_URL,
        make_response(200, json_body=BOB),
        requests.ConnectionError("reset"),
    )
    controller = build_controller(client, endpoints, navigator)
    controller.start()
    assert controller.refresh().state == SessionState.ERROR

    session = controller.clear_error()
    assert session.state == SessionState.AUTHENTICATED
    assert session.error is None
    assert session.user.username == "bob"


def test_clear_error_does_not_touch_unauthenticated(client, endpoints, navigator, fake_session):
    fake_session.add("GET", USER_URL, make_response(401))
    controller = build_controller(client, endpoints, navigator)
    controller.start()

    assert controller.clear_error().state == SessionState.UNAUTHENTICATED


def test_login_silent_success(client, endpoints, navigator, fake_session):
    fake_session.add("GET", USER_URL, make_response(401), make_response(200, json_body=BOB))
    fake_session.add("GET", PROBE_URL, make_response(200, text=""))
    controller = build_controller(client, endpoints, navigator)
    controller.start()

    session = controller.login()
    assert session.state == SessionState.AUTHENTICATED
    assert navigator.visited == []
    assert fake_session.urls() == [USER_URL, PROBE_URL, USER_URL]


def test_login_probe_network_failure_navigates_to_login(client, endpoints, navigator, fake_session):
    fake_session.add("GET", USER_URL, make_response(401))
    fake_session.add("GET", PROBE_URL, requests.ConnectionError("blocked"))
    controller = build_controller(client, endpoints, navigator)
    controller.start()

    session = controller.login()
    assert navigator.visited == [LOGIN_URL]
    assert session.navigated_to == LOGIN_URL
    # The probe failure is expected, not an error to show.
    assert session.invalid


def test_login_refetch_401_navigates_to_login(client, endpoints, navigator, fake_session):
    fake_session.add("GET", USER_URL, make_response(401))
    fake_session.add("GET", PROBE_URL, make_response(302, text=""))
    controller = build_controller(client, endpoints, navigator)
    controller.start()

    controller.login()
    assert navigator.visited == [LOGIN_URL]


def test_global_logout_navigates(client, endpoints, navigator, fake_session):
    fake_session.add("GET", USER_URL, make_response(200, json_body=BOB))
    controller = build_controller(client, endpoints, navigator)
    controller.start()

    session = controller.logout()
    assert navigator.visited == [f"{BASE_URL}/logout"]
    assert session.invalid
    assert session.user is None


def test_global_logout_via_post(client, endpoints, navigator, fake_session):
    fake_session.add("GET", USER_URL, make_response(200, json_body=BOB))
    fake_session.add("POST", f"{BASE_URL}/logout", empty_response(200))
    controller = build_controller(client, endpoints, navigator, logout_method=LogoutMethod.POST)
    controller.start()

    controller.logout()
    assert fake_session.urls("POST") == [f"{BASE_URL}/logout"]
    assert navigator.visited == [HOME_PAGE]


def test_app_only_logout_probes_then_goes_home(client, endpoints, navigator, fake_session):
    fake_session.add("GET", USER_URL, make_response(200, json_body=BOB))
    fake_session.add("GET", f"{BASE_URL}/pa/oidc/logout", make_response(200, text=""))
    controller = build_controller(client, endpoints, navigator)
    controller.start()

    session = controller.logout(app_only=True)
    assert fake_session.urls()[-1] == f"{BASE_URL}/pa/oidc/logout"
    assert navigator.visited == [HOME_PAGE]
    assert session.state == SessionState.UNAUTHENTICATED


def test_app_only_logout_network_failure_is_shown(client, endpoints, navigator, fake_session):
    fake_session.add("GET", USER_URL, make_response(200, json_body=BOB))
    fake_session.add("GET", f"{BASE_URL}/pa/oidc/logout", requests.ConnectionError("offline"))
    controller = build_controller(client, endpoints, navigator)
    controller.start()

    session = controller.logout(app_only=True)
    assert navigator.visited == []
    assert session.state == SessionState.ERROR
    assert isinstance(session.error, NetworkError)


def test_report_error_routes_session_invalid(client, endpoints, navigator, fake_session):
    fake_session.add("GET", USER_URL, make_response(200, json_body=BOB))
    controller = build_controller(client, endpoints, navigator)
    controller.start()

    session = controller.report_error(SessionInvalid(f"{BASE_URL}/todos/alice"))
    assert session.state == SessionState.UNAUTHENTICATED

    session = controller.report_error("boom")
    assert session.state == SessionState.ERROR
    assert session.error == "boom"


def test_stale_user_result_is_dropped(client, endpoints, navigator, fake_session):
    fake_session.add("GET", USER_URL, make_response(200, json_body=BOB))
    controller = build_controller(client, endpoints, navigator)

    # A fetch starts, then the session is rejected before it completes.
    stale_ticket = controller._issue()
    stale_result = controller._fetch_user()
    controller.report_error(SessionInvalid(USER_URL))

    session = controller._apply_user_result(stale_ticket, stale_result)
    assert session.state == SessionState.UNAUTHENTICATED


def test_listeners_receive_every_transition(client, endpoints, navigator, fake_session):
    fake_session.add("GET", USER_URL, make_response(200, json_body=BOB))
    controller = build_controller(client, endpoints, navigator)
    seen = []
    unsubscribe = controller.subscribe(lambda s: seen.append(s.state))

    controller.start()
    controller.report_error("x")
    unsubscribe()
    controller.clear_error()

    assert seen == [SessionState.AUTHENTICATED, SessionState.ERROR]
