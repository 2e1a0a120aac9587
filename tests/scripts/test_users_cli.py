# tests/scripts/test_users_cli.py
"""Tests for the user provisioning CLI."""

import pytest

from chrysalis.core.security import decode_access_token
from chrysalis.models import User
from chrysalis.scripts import users as users_cli


@pytest.fixture()
def cli_sessions(db_session, monkeypatch):
    # The in-memory engine has a single connection, so the CLI shares the test session.
    monkeypatch.setattr(users_cli, "SessionLocal", lambda: db_session)


def test_create_prints_token(cli_sessions, db_session, capsys):
    code = users_cli.main(["create", "--email", "gil@example.org", "--username", "gil"])

    token = capsys.readouterr().out.strip().splitlines()[-1]
    user = db_session.query(User).filter(User.username == "gil").one()
    assert code == 0
    assert decode_access_token(token) == user.id


def test_token_for_existing_user(cli_sessions, test_user, capsys):
    code = users_cli.main(["token", "--username", "alice"])

    assert code == 0
    assert decode_access_token(capsys.readouterr().out.strip()) == test_user.id


def test_token_for_unknown_user(cli_sessions, capsys):
    code = users_cli.main(["token", "--username", "nobody"])

    assert code == 1
    assert "no user named" in capsys.readouterr().err


def test_create_reports_validation_errors(cli_sessions, capsys):
    code = users_cli.main(["create", "--email", "broken", "--username", "gil"])

    assert code == 1
    assert "validation_error" in capsys.readouterr().err
