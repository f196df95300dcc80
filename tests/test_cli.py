"""Tests for the admin CLI."""
from click.testing import CliRunner

from family_sns.cli import cli
from family_sns.db.models import Family, User


def test_create_family_prints_invite_code(db):
    runner = CliRunner()
    result = runner.invoke(
        cli,
        [
            "create-family",
            "--name", "Sato",
            "--admin-email", "Admin@Example.com",
            "--admin-name", "Admin",
            "--password", "secret123",
        ],
    )
    assert result.exit_code == 0, result.output

    family = db.query(Family).one()
    admin = db.query(User).one()
    assert admin.email == "admin@example.com"
    assert admin.role == "admin"
    assert f"Invite code: {family.id}" in result.output


def test_create_family_duplicate_email_fails(db, alice):
    runner = CliRunner()
    result = runner.invoke(
        cli,
        [
            "create-family",
            "--name", "Again",
            "--admin-email", alice.email,
            "--admin-name", "Dup",
            "--password", "secret123",
        ],
    )
    assert result.exit_code != 0
    assert "already in use" in result.output


def test_list_members(db, alice, bob):
    runner = CliRunner()
    result = runner.invoke(cli, ["list-members", "--family-id", alice.family_id])
    assert result.exit_code == 0
    assert "Alice <alice@example.com>" in result.output
    assert "Bob <bob@example.com>" in result.output
