"""Supabase REST client for the console tables and RPC functions.

Thin wrapper over PostgREST: every call is one HTTP request, failures are
raised as BackendError subclasses and never retried here. Views surface the
error and the user retries by reloading.

Tables used:
    teachers, teacher_users, class_schedules, presentation_settings,
    presentation_images, news, store_orders
RPC functions used:
    verify_password(username, password) -> boolean
"""

from collections.abc import Iterable
from datetime import date, datetime, timedelta, timezone
from typing import Any

import requests

from src.timetable.config import TimetableConfig
from src.timetable.errors import (
    BackendResponseError,
    BackendUnavailableError,
    CancellationDateError,
    RecordShapeError,
)
from src.timetable.logging import get_logger
from src.timetable.models import (
    NewsItem,
    Order,
    PresentationImage,
    PresentationSettings,
    ScheduleDraft,
    ScheduleEntry,
    Teacher,
    parse_record,
    parse_records,
)
from src.timetable.placement import day_matches
from src.timetable.timeutil import date_key

log = get_logger(__name__)

SCHEDULE_SELECT = "*,teachers(id,name,subject)"
NEW_ORDER_WINDOW = timedelta(hours=24)


class SupabaseClient:
    """PostgREST client bound to one Supabase project.

    Args:
        url: Project URL, e.g. https://xyz.supabase.co
        anon_key: Anonymous API key, sent as both apikey and bearer token.
        timeout: Per-request timeout in seconds.
        http: Optional requests.Session (tests inject a mock here).
    """

    def __init__(
        self,
        url: str,
        anon_key: str,
        *,
        timeout: float = 30.0,
        http: requests.Session | None = None,
    ) -> None:
        if not url or not anon_key:
            missing = [name for name, value in (("SUPABASE_URL", url), ("SUPABASE_ANON_KEY", anon_key)) if not value]
            raise ValueError(f"Missing Supabase configuration: {', '.join(missing)}")
        self.url = url.rstrip("/")
        self.timeout = timeout
        self._http = http or requests.Session()
        self._headers = {
            "apikey": anon_key,
            "Authorization": f"Bearer {anon_key}",
            "Content-Type": "application/json",
        }

    @classmethod
    def from_config(cls, config: TimetableConfig) -> "SupabaseClient":
        return cls(
            config.supabase_url,
            config.supabase_anon_key,
            timeout=config.request_timeout_seconds,
        )

    # ------------------------------------------------------------------
    # Raw PostgREST operations
    # ------------------------------------------------------------------
    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json_body: Any = None,
        prefer: str | None = None,
    ) -> Any:
        headers = dict(self._headers)
        if prefer:
            headers["Prefer"] = prefer

        try:
            response = self._http.request(
                method,
                f"{self.url}{path}",
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            log.warning("backend_timeout", method=method, path=path, error=str(e))
            raise BackendUnavailableError(f"{method} {path} timed out") from e
        except requests.ConnectionError as e:
            log.warning("backend_unreachable", method=method, path=path, error=str(e))
            raise BackendUnavailableError(f"Could not reach backend: {e}") from e

        if response.status_code >= 400:
            log.error(
                "backend_error_response",
                method=method,
                path=path,
                status=response.status_code,
            )
            raise BackendResponseError(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        log.debug("backend_request_ok", method=method, path=path, status=response.status_code)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RecordShapeError(
                f"{method} {path} returned a non-JSON body", record="response", row=response.text
            ) from e

    def select(self, table: str, params: dict[str, str] | None = None) -> Any:
        return self._request("GET", f"/rest/v1/{table}", params=params)

    def insert(self, table: str, values: dict[str, Any]) -> Any:
        return self._request(
            "POST", f"/rest/v1/{table}", json_body=[values], prefer="return=representation"
        )

    def update(self, table: str, match: dict[str, Any], values: dict[str, Any]) -> Any:
        params = {column: f"eq.{value}" for column, value in match.items()}
        return self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=params,
            json_body=values,
            prefer="return=representation",
        )

    def delete(self, table: str, match: dict[str, Any]) -> None:
        params = {column: f"eq.{value}" for column, value in match.items()}
        self._request("DELETE", f"/rest/v1/{table}", params=params)

    def rpc(self, function: str, payload: dict[str, Any]) -> Any:
        return self._request("POST", f"/rest/v1/rpc/{function}", json_body=payload)

    # ------------------------------------------------------------------
    # Teachers and auth
    # ------------------------------------------------------------------
    def list_teachers(self) -> list[Teacher]:
        rows = self.select("teachers", {"select": "*", "order": "name"})
        teachers = parse_records(Teacher, rows)
        log.info("teachers_fetched", count=len(teachers))
        return teachers

    def verify_password(self, username: str, password: str) -> bool:
        result = self.rpc("verify_password", {"username": username, "password": password})
        if not isinstance(result, bool):
            raise RecordShapeError(
                "verify_password must return a boolean", record="verify_password", row=result
            )
        return result

    def get_user_id(self, username: str) -> str | None:
        rows = self.select(
            "teacher_users", {"select": "id", "username": f"eq.{username}", "limit": "1"}
        )
        if not rows:
            return None
        user_id = rows[0].get("id") if isinstance(rows[0], dict) else None
        if user_id is None:
            raise RecordShapeError("teacher_users row without id", record="teacher_users", row=rows[0])
        return str(user_id)

    def teachers_for_user(self, user_id: str) -> list[Teacher]:
        rows = self.select("teachers", {"select": "*", "user_id": f"eq.{user_id}"})
        return parse_records(Teacher, rows)

    # ------------------------------------------------------------------
    # Schedules
    # ------------------------------------------------------------------
    def list_schedules(
        self,
        *,
        day: str | None = None,
        teacher_ids: Iterable[int | str] | None = None,
        year: int | None = None,
        days: Iterable[date] | None = None,
    ) -> list[ScheduleEntry]:
        """Fetch schedules ordered by start time.

        Args:
            day: Only rows whose weekday column equals this name.
            teacher_ids: Only rows belonging to these teachers.
            year: Year used to migrate legacy "M/d" date keys (default: current year).
            days: Dates on screen; a legacy key matching one of them takes its year.
        """
        params = {"select": SCHEDULE_SELECT, "order": "start_time"}
        if day is not None:
            params["day"] = f"eq.{day}"
        if teacher_ids is not None:
            ids = ",".join(str(i) for i in teacher_ids)
            params["teacher_id"] = f"in.({ids})"

        rows = self.select("class_schedules", params)
        entries = parse_records(ScheduleEntry, rows, year=year, days=days)
        log.info("schedules_fetched", day=day, count=len(entries))
        return entries

    def create_schedule(self, draft: ScheduleDraft) -> ScheduleEntry:
        rows = self.insert("class_schedules", draft.to_row())
        if not rows:
            raise RecordShapeError("insert returned no row", record="class_schedules", row=rows)
        entry = parse_record(ScheduleEntry, rows[0])
        log.info("schedule_created", schedule_id=entry.id, day=entry.day, date_tag=entry.date_tag)
        return entry

    def cancel_schedule_on(self, entry: ScheduleEntry, day: date) -> ScheduleEntry:
        """Record a per-date cancellation; cancelling twice is a no-op.

        Raises:
            CancellationDateError: If the entry does not fall on `day`.
        """
        key = date_key(day)
        if not day_matches(entry, day):
            raise CancellationDateError(
                f"Schedule {entry.id} does not take place on {key}"
            )
        if key in entry.canceled_dates:
            log.debug("schedule_already_canceled", schedule_id=entry.id, date=key)
            return entry

        canceled = sorted(entry.canceled_dates | {key})
        rows = self.update("class_schedules", {"id": entry.id}, {"canceled_dates": canceled})
        log.info("schedule_canceled", schedule_id=entry.id, date=key)
        if rows:
            row = dict(rows[0])
            # PATCH returns the bare row, without the embedded teacher.
            row.setdefault("teacher_name", entry.teacher_name)
            return parse_record(ScheduleEntry, row)
        return entry.model_copy(update={"canceled_dates": frozenset(canceled)})

    def delete_schedule(self, schedule_id: int | str) -> None:
        self.delete("class_schedules", {"id": schedule_id})
        log.info("schedule_deleted", schedule_id=schedule_id)

    # ------------------------------------------------------------------
    # Presentation, news, orders
    # ------------------------------------------------------------------
    def get_presentation_settings(self) -> PresentationSettings:
        rows = self.select("presentation_settings", {"select": "*", "limit": "1"})
        if not rows:
            log.info("presentation_settings_missing", fallback="defaults")
            return PresentationSettings()
        return parse_record(PresentationSettings, rows[0])

    def list_presentation_images(self, category_id: str) -> list[PresentationImage]:
        rows = self.select(
            "presentation_images",
            {"select": "*", "category_id": f"eq.{category_id}", "order": "created_at"},
        )
        return parse_records(PresentationImage, rows)

    def list_news(self) -> list[NewsItem]:
        rows = self.select("news", {"select": "*", "order": "created_at.desc"})
        return parse_records(NewsItem, rows)

    def recent_orders(self, since: datetime) -> list[Order]:
        rows = self.select(
            "store_orders",
            {
                "select": "id,created_at,status,payment_status,customer_name,total_amount",
                "created_at": f"gt.{since.isoformat()}",
                "order": "created_at.desc",
            },
        )
        return parse_records(Order, rows)


def has_new_orders(
    orders: Iterable[Order],
    viewed_ids: Iterable[int | str],
    now: datetime | None = None,
) -> bool:
    """True if an order younger than 24 hours has not been marked viewed."""
    now = now or datetime.now(timezone.utc)
    viewed = {str(i) for i in viewed_ids}
    return any(
        order.created_at > now - NEW_ORDER_WINDOW and str(order.id) not in viewed
        for order in orders
    )
