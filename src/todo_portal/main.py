from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import typer

from todo_portal.app import TodoApp, ViewUnavailable
from todo_portal.config import Settings, settings as default_settings
from todo_portal.exceptions import ConfigError
from todo_portal.result import Err
from todo_portal.session import BrowserNavigator, SessionState

cli = typer.Typer(help="todo-portal: session-aware client for the identity-aware todo API")

SHELL_HELP = """Commands:
  refresh            re-fetch user details
  login              sign in (silently if possible)
  logout             log out everywhere
  logout-app         log out of this app only
  clear              dismiss the current error
  add <text>         create a todo
  query <username>   show another user's todos (admins)
  reset              clear the admin query
  help               show this help
  quit               leave the shell"""


def setup_logging(verbose: bool, level: str = "INFO"):
    resolved = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def _load_settings(config_path: Optional[Path]) -> Settings:
    if config_path is None:
        return default_settings
    try:
        return Settings.load(config_path)
    except ConfigError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=1)


def build_app(config_path: Optional[Path], verbose: bool, open_browser: bool, auto_refresh: bool) -> TodoApp:
    loaded = _load_settings(config_path)
    setup_logging(verbose, loaded.logging.level)
    return TodoApp(loaded, navigator=BrowserNavigator(open_browser=open_browser), auto_refresh=auto_refresh)


ConfigOption = typer.Option(None, "--config", "-c", help="Path to a settings YAML file")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Enable verbose logging")
BrowserOption = typer.Option(True, "--browser/--no-browser", help="Open navigation targets in the system browser")


def _finish(app: TodoApp) -> None:
    """Print the screen, release the app and map the session outcome to an exit code."""
    typer.echo(app.render())
    session = app.session
    app.stop()
    if session.state == SessionState.ERROR:
        raise typer.Exit(code=1)


@cli.command()
def version() -> None:
    """Print client version."""
    typer.echo(f"{default_settings.app.name} {default_settings.app.version}")


@cli.command()
def whoami(
    config: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Show the current session and user details."""
    app = build_app(config, verbose, open_browser=False, auto_refresh=False)
    app.start()
    _finish(app)


@cli.command()
def login(
    config: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
    browser: bool = BrowserOption,
) -> None:
    """Sign in, reusing an existing identity-provider session when possible."""
    app = build_app(config, verbose, open_browser=browser, auto_refresh=False)
    session = app.start()
    if session.invalid:
        app.login()
    _finish(app)


@cli.command()
def logout(
    app_only: bool = typer.Option(False, "--app-only", help="Only end this application's session"),
    config: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
    browser: bool = BrowserOption,
) -> None:
    """Log out globally, or from this application only."""
    app = build_app(config, verbose, open_browser=browser, auto_refresh=False)
    app.start()
    app.logout(app_only=app_only)
    _finish(app)


@cli.command()
def todos(
    config: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Show the todo view for the signed-in user."""
    app = build_app(config, verbose, open_browser=False, auto_refresh=False)
    app.start()
    if app.view is None and not app.session.has_error:
        typer.echo(app.render())
        app.stop()
        raise typer.Exit(code=1)
    _finish(app)


@cli.command()
def add(
    content: str = typer.Argument(..., help="Todo text"),
    config: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Create a todo for the signed-in user."""
    app = build_app(config, verbose, open_browser=False, auto_refresh=False)
    app.start()
    try:
        result = app.create_todo(content)
    except ViewUnavailable as e:
        typer.echo(app.render())
        app.stop()
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)
    typer.echo(app.render())
    app.stop()
    if isinstance(result, Err):
        raise typer.Exit(code=1)


@cli.command()
def query(
    username: str = typer.Argument(..., help="User whose todos to show"),
    config: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Show another user's todos (administrators only)."""
    app = build_app(config, verbose, open_browser=False, auto_refresh=False)
    app.start()
    try:
        app.query_todos(username)
    except ViewUnavailable as e:
        typer.echo(app.render())
        app.stop()
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)
    _finish(app)


def run_shell_command(app: TodoApp, line: str) -> bool:
    """Run one shell line against the app. Returns False when the shell should exit."""
    command, _, argument = line.strip().partition(" ")
    command = command.lower()
    argument = argument.strip()

    if command in ("quit", "exit"):
        return False
    if command in ("", "help"):
        typer.echo(SHELL_HELP)
        return True

    try:
        if command == "refresh":
            app.refresh()
        elif command == "login":
            app.login()
        elif command == "logout":
            app.logout()
        elif command == "logout-app":
            app.logout(app_only=True)
        elif command == "clear":
            app.clear_error()
        elif command == "add":
            app.create_todo(argument)
        elif command == "query":
            app.query_todos(argument)
        elif command == "reset":
            app.clear_query()
        else:
            typer.echo(f"Unknown command: {command}")
            return True
    except ViewUnavailable as e:
        typer.echo(str(e))
        return True

    typer.echo(app.render())
    return app.session.navigated_to is None


@cli.command()
def shell(
    config: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
    browser: bool = BrowserOption,
) -> None:
    """Interactive session with periodic refresh of user details."""
    app = build_app(config, verbose, open_browser=browser, auto_refresh=True)
    app.start()
    typer.echo(app.render())
    try:
        while app.session.navigated_to is None:
            try:
                line = typer.prompt("todo-portal", default="", show_default=False)
            except (EOFError, typer.Abort):
                break
            if not run_shell_command(app, line):
                break
    finally:
        app.stop()


if __name__ == "__main__":
    cli()
