import os
import time
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from src.timetable.errors import AuthenticationError
from src.timetable.models import Teacher
from src.timetable.session import SIGNED_OUT, Session, SessionManager


def _client(valid: bool = True, user_id: str | None = "u-1", teachers=None) -> MagicMock:
    client = MagicMock()
    client.verify_password.return_value = valid
    client.get_user_id.return_value = user_id
    client.teachers_for_user.return_value = (
        [Teacher(id=7, name="Amal Rahman", subject="Physics")] if teachers is None else teachers
    )
    return client


def test_signed_out_by_default(tmp_path: Path) -> None:
    manager = SessionManager(str(tmp_path))
    assert manager.current == SIGNED_OUT
    assert not manager.load().is_authenticated


def test_teacher_login_persists_and_logout_clears(tmp_path: Path) -> None:
    manager = SessionManager(str(tmp_path))
    session = manager.login_teacher(_client(), "amal", "secret")

    assert session.is_teacher
    assert session.teacher_name == "Amal Rahman"
    assert manager.state_file.exists()

    restored = SessionManager(str(tmp_path)).load()
    assert restored.teacher_id == 7
    assert restored.is_authenticated

    assert manager.logout() == SIGNED_OUT
    assert not manager.state_file.exists()
    assert not SessionManager(str(tmp_path)).load().is_authenticated


def test_invalid_credentials(tmp_path: Path) -> None:
    manager = SessionManager(str(tmp_path))
    with pytest.raises(AuthenticationError, match="Invalid username or password"):
        manager.login_teacher(_client(valid=False), "amal", "wrong")
    assert not manager.state_file.exists()


def test_account_without_teacher_link(tmp_path: Path) -> None:
    manager = SessionManager(str(tmp_path))
    with pytest.raises(AuthenticationError, match="teacher access"):
        manager.login_teacher(_client(teachers=[]), "amal", "secret")


def test_admin_login(tmp_path: Path) -> None:
    manager = SessionManager(str(tmp_path))
    session = manager.login_admin()
    assert session.is_admin
    assert not session.is_teacher
    assert SessionManager(str(tmp_path)).load().is_admin


def test_expired_session_is_discarded(tmp_path: Path) -> None:
    manager = SessionManager(str(tmp_path), max_session_age_hours=1)
    manager.save(Session(is_admin=True))
    two_hours_ago = time.time() - 2 * 3600
    os.utime(manager.state_file, (two_hours_ago, two_hours_ago))

    assert not manager.is_session_valid()
    assert manager.load() == SIGNED_OUT


def test_corrupt_state_file(tmp_path: Path) -> None:
    manager = SessionManager(str(tmp_path))
    manager.state_file.write_text("{not json", encoding="utf-8")
    assert manager.load() == SIGNED_OUT
