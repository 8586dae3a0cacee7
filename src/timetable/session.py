"""Console session: who is signed in, and the login/logout lifecycle.

Session is an explicit value passed into views instead of ambient key-value
flags. SessionManager persists it to a small JSON state file so a kiosk or
teacher terminal survives restarts until the session expires.
"""

from datetime import datetime, timedelta
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.timetable.backend import SupabaseClient
from src.timetable.errors import AuthenticationError
from src.timetable.logging import get_logger

log = get_logger(__name__)


class Session(BaseModel):
    """Signed-in identity. The default instance is the signed-out session."""

    model_config = ConfigDict(frozen=True)

    is_admin: bool = False
    teacher_id: int | str | None = None
    teacher_name: str | None = None
    authenticated_at: datetime | None = Field(default=None)

    @property
    def is_teacher(self) -> bool:
        return self.teacher_id is not None

    @property
    def is_authenticated(self) -> bool:
        return self.is_admin or self.is_teacher


SIGNED_OUT = Session()


class SessionManager:
    """Creates, persists and clears the console session.

    Args:
        state_dir: Directory holding the session state file.
        max_session_age_hours: Saved sessions older than this are discarded.
    """

    def __init__(self, state_dir: str = "data/state", max_session_age_hours: int = 24) -> None:
        self.state_dir = Path(state_dir)
        self.state_file = self.state_dir / "console_session.json"
        self.max_session_age_hours = max_session_age_hours
        self.current: Session = SIGNED_OUT

        self.state_dir.mkdir(parents=True, exist_ok=True)

        log.debug(
            "session_manager_initialized",
            state_file=str(self.state_file),
            max_age_hours=max_session_age_hours,
        )

    def is_session_valid(self) -> bool:
        """Check if a saved session exists and is still fresh."""
        if not self.state_file.exists():
            log.debug("session_check", result="missing")
            return False

        file_mtime = datetime.fromtimestamp(self.state_file.stat().st_mtime)
        age = datetime.now() - file_mtime
        if age > timedelta(hours=self.max_session_age_hours):
            log.info(
                "session_check",
                result="expired",
                age_hours=age.total_seconds() / 3600,
                max_hours=self.max_session_age_hours,
            )
            return False

        log.debug("session_check", result="valid", age_hours=age.total_seconds() / 3600)
        return True

    def load(self) -> Session:
        """Restore the saved session, or the signed-out session if none is usable."""
        if not self.is_session_valid():
            self.current = SIGNED_OUT
            return self.current
        try:
            self.current = Session.model_validate_json(self.state_file.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            log.warning("session_restore_failed", error=str(e))
            self.current = SIGNED_OUT
            return self.current
        log.info("session_restored", is_admin=self.current.is_admin, teacher_id=self.current.teacher_id)
        return self.current

    def save(self, session: Session) -> None:
        tmp = self.state_file.with_suffix(".tmp")
        tmp.write_text(session.model_dump_json(), encoding="utf-8")
        tmp.replace(self.state_file)
        self.current = session
        log.debug("session_saved", path=str(self.state_file))

    def login_admin(self) -> Session:
        """Start an admin session (the admin gate has no backend credentials)."""
        session = Session(is_admin=True, authenticated_at=datetime.now())
        self.save(session)
        log.info("admin_logged_in")
        return session

    def login_teacher(self, client: SupabaseClient, username: str, password: str) -> Session:
        """Verify credentials with the backend and start a teacher session.

        Raises:
            AuthenticationError: Wrong credentials, or the account has no teacher.
            BackendError: The backend could not be reached.
        """
        log.info("teacher_login_started", username=username)

        if not client.verify_password(username, password):
            log.warning("teacher_login_failed", username=username, reason="invalid_credentials")
            raise AuthenticationError("Invalid username or password")

        user_id = client.get_user_id(username)
        teachers = client.teachers_for_user(user_id) if user_id else []
        if not teachers:
            log.warning("teacher_login_failed", username=username, reason="no_teacher_link")
            raise AuthenticationError("You do not have teacher access")

        teacher = teachers[0]
        session = Session(
            teacher_id=teacher.id,
            teacher_name=teacher.name,
            authenticated_at=datetime.now(),
        )
        self.save(session)
        log.info("teacher_logged_in", teacher_id=teacher.id)
        return session

    def logout(self) -> Session:
        """Forget the current session and delete the saved state."""
        if self.state_file.exists():
            self.state_file.unlink()
            log.info("session_cleared", path=str(self.state_file))
        else:
            log.debug("session_clear_skipped", reason="file_not_found")
        self.current = SIGNED_OUT
        return self.current
