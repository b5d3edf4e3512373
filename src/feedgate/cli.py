"""FeedGate command line.

``feedgate serve`` runs the API under uvicorn; the other commands manage
the credential store directly.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import NoReturn, TypeVar

import click

from feedgate.core.config import get_settings
from feedgate.core.exceptions import FeedGateError
from feedgate.core.logging import configure_logging, get_logger

T = TypeVar("T")


def _run_with_database(work: Callable[[], Awaitable[T]]) -> T:
    """Run ``work`` on a fresh event loop and dispose the engine afterwards."""
    from feedgate.infrastructure.persistence.database import close_database

    async def runner() -> T:
        try:
            return await work()
        finally:
            await close_database()

    return asyncio.run(runner())


@click.group()
@click.version_option(version="0.1.0", prog_name="FeedGate")
def cli() -> None:
    """FeedGate - signup, login and token gate for the feed API.

    Settings come from FEEDGATE_* environment variables and .env.
    """


@cli.command()
@click.option("--host", type=str, default=None, help="Bind address (default: FEEDGATE_HOST)")
@click.option("--port", type=int, default=None, help="Bind port (default: FEEDGATE_PORT)")
@click.option("--workers", type=int, default=None, help="Worker processes (default: FEEDGATE_WORKERS)")
@click.option("--reload", is_flag=True, default=False, help="Restart on code changes (single worker)")
def serve(host: str | None, port: int | None, workers: int | None, reload: bool) -> None:
    """Start the HTTP API."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings)

    options = {
        "host": host or settings.host,
        "port": port or settings.port,
        "workers": 1 if reload else (workers or settings.workers),
        "reload": reload,
    }
    get_logger(__name__).info("Starting FeedGate server", environment=settings.environment, **options)

    uvicorn.run(
        "feedgate.infrastructure.api.app:app",
        log_level=settings.log_level.lower(),
        access_log=True,
        **options,
    )


@cli.command("init-db")
@click.option("--force", is_flag=True, help="Do not ask for confirmation")
def init_db(force: bool) -> None:
    """Create the users table.

    For development only; production deployments run
    ``alembic upgrade head``.
    """
    from feedgate.infrastructure.persistence.database import ensure_sqlite_directory, get_db_manager
    from feedgate.infrastructure.persistence.models import UserModel  # noqa: F401

    settings = get_settings()
    configure_logging(settings)

    if settings.is_production and not force:
        click.echo("ERROR: production database; run the Alembic migrations instead.", err=True)
        raise SystemExit(1)
    if not force:
        click.confirm("Create the FeedGate tables now?", abort=True, default=False)

    ensure_sqlite_directory(settings)
    _run_with_database(lambda: get_db_manager().create_tables())
    click.echo("Database initialized.")


@cli.command("create-user")
@click.option("--email", type=str, prompt="Email", help="Login email")
@click.option("--name", type=str, prompt="Name", help="Display name")
@click.option(
    "--password",
    type=str,
    prompt="Password",
    hide_input=True,
    confirmation_prompt=True,
    help="Password (prompted for when omitted)",
)
def create_user(email: str, name: str, password: str) -> None:
    """Register a user, applying the same rules as PUT /auth/signup."""
    from feedgate.domain.services import AuthService, SignupValidator
    from feedgate.infrastructure.auth import TokenCodec
    from feedgate.infrastructure.persistence.database import get_db_manager

    settings = get_settings()
    configure_logging(settings)

    async def signup() -> str:
        async with get_db_manager().session() as session:
            service = AuthService(
                session=session,
                codec=TokenCodec.from_settings(settings),
                validator=SignupValidator(settings.password_min_length),
                bcrypt_rounds=settings.bcrypt_rounds,
            )
            return (await service.signup(email=email, name=name, password=password)).user_id

    try:
        user_id = _run_with_database(signup)
    except FeedGateError as e:
        click.echo(f"Error: {e.message}", err=True)
        for detail in e.data or []:
            click.echo(f"  {detail['field']}: {detail['message']}", err=True)
        raise SystemExit(1)

    click.echo(f"User created: {user_id}")


@cli.command()
def info() -> None:
    """Show the effective configuration (secrets hidden)."""
    settings = get_settings()
    signing_key = settings.secret_key_id
    if settings.uses_default_secret:
        signing_key += " (default secret!)"
    retired = ", ".join(settings.previous_secret_keys) or "none"

    rows = [
        ("Environment", settings.environment),
        ("Debug", settings.debug),
        ("API Prefix", settings.api_prefix or "/"),
        ("Listen", f"{settings.host}:{settings.port} x{settings.workers}"),
        ("Database", settings.database_url),
        ("Token Expire", f"{settings.access_token_expire_minutes} minutes"),
        ("Signing Key", signing_key),
        ("Retired Keys", retired),
        ("Bcrypt Rounds", settings.bcrypt_rounds),
        ("Logging", f"{settings.log_level} ({settings.log_format})"),
    ]

    click.echo(f"FeedGate v{settings.app_version}")
    click.echo("=" * 40)
    for label, value in rows:
        click.echo(f"  {label + ':':<15}{value}")


def main() -> NoReturn:
    """Console-script and ``python -m feedgate`` entry point."""
    cli()


if __name__ == "__main__":
    main()
