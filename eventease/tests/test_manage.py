"""
Test the operator commands.
"""
import pytest
from sqlalchemy.orm import Session

from eventease import manage
from eventease.models.users import Role
from eventease.services import accounts


@pytest.fixture(autouse=True)
def manage_database(monkeypatch, session_factory, db_engine):
    """Point the commands at the test database."""
    monkeypatch.setattr(manage, "SessionLocal", session_factory)
    monkeypatch.setattr(manage, "engine", db_engine)


class TestManageCommands:
    """Test the eventease-manage commands."""

    def test_grant_role(self, db_session: Session, user, capsys):
        exit_code = manage.main(["grant-role", "jane@mail.com", "admin"])

        assert exit_code == 0
        assert "Granted admin to jane@mail.com" in capsys.readouterr().out
        assert accounts.has_role(db_session, user.user_id, Role.ADMIN.value)

    def test_grant_role_matches_email_case_insensitively(self, db_session: Session, user):
        assert manage.main(["grant-role", " JANE@mail.com ", "admin"]) == 0
        assert accounts.has_role(db_session, user.user_id, Role.ADMIN.value)

    def test_grant_role_unknown_email(self, db_session: Session, user, capsys):
        exit_code = manage.main(["grant-role", "ghost@mail.com", "admin"])

        assert exit_code == 1
        assert "No account for ghost@mail.com" in capsys.readouterr().err
        assert not accounts.has_role(db_session, user.user_id, Role.ADMIN.value)

    def test_unknown_role(self):
        with pytest.raises(SystemExit):
            manage.main(["grant-role", "jane@mail.com", "owner"])

    def test_create_tables(self, capsys):
        assert manage.main(["create-tables"]) == 0
        assert "Tables created." in capsys.readouterr().out
