from __future__ import annotations

import sys

import typer

from account_store.auth.hasher import BcryptHasher
from account_store.auth.validator import CredentialValidator
from account_store.config import get_settings
from account_store.domain.errors import AccountStoreError
from account_store.infrastructure.backend import PostgresBackend
from account_store.infrastructure.schema import ensure_schema
from account_store.repositories.accounts import AccountRepository
from account_store.utils.logging import configure_logging

app = typer.Typer(help="Account store administration CLI.")


def _backend() -> PostgresBackend:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    return PostgresBackend.from_settings(settings)


def _accounts(backend: PostgresBackend) -> AccountRepository:
    return AccountRepository(backend)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}:***@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"pool=({settings.db_pool_min_size},{settings.db_pool_max_size}) "
        f"deadline={settings.db_call_timeout_seconds}s bcrypt_rounds={settings.bcrypt_rounds}"
    )


@app.command("init-db")
def init_db() -> None:
    """
    Create the account store tables if they do not exist.
    """
    with _backend() as backend:
        ensure_schema(backend)
    typer.echo("Schema ready.")


@app.command("create-user")
def create_user(
    username: str = typer.Argument(..., help="Unique login name."),
    email: str = typer.Argument(..., help="Unique email address."),
    password: str = typer.Option(
        ..., "--password", "-p", prompt=True, hide_input=True, confirmation_prompt=True
    ),
) -> None:
    """
    Hash the password and create an account.
    """
    hasher = BcryptHasher(rounds=get_settings().bcrypt_rounds)
    with _backend() as backend:
        account_id = _accounts(backend).create(username, hasher.hash(password), email)
    typer.echo(f"Created account {account_id} for '{username}'.")


@app.command("check-login")
def check_login(
    username: str = typer.Argument(...),
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True),
) -> None:
    """
    Validate a username/password pair and report the verification flag.
    """
    hasher = BcryptHasher(rounds=get_settings().bcrypt_rounds)
    with _backend() as backend:
        result = CredentialValidator(_accounts(backend), hasher).validate(username, password)
    typer.echo(
        f"credentials_valid={result.credentials_valid} email_verified={result.email_verified}"
    )
    if not result.credentials_valid:
        raise typer.Exit(code=1)


@app.command("verify-email")
def verify_email(username: str = typer.Argument(...)) -> None:
    """
    Mark an account's email as verified.
    """
    with _backend() as backend:
        _accounts(backend).mark_email_verified(username)
    typer.echo(f"Email verified for '{username}'.")


def main() -> None:
    try:
        app()
    except AccountStoreError as exc:
        typer.echo(f"Error: {exc}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
