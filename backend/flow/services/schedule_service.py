"""
Scheduled Export Service - CRUD over the hosted backend's scheduled_exports table.

Only the metadata lives here; running the schedules is the hosted backend's job.
"""
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

SCHEDULE_PRESETS: Dict[str, str] = {
    "daily": "0 9 * * *",
    "weekly": "0 9 * * 1",
    "monthly": "0 9 1 * *",
    "custom": "0 * * * *",
}

SCHEDULED_EXPORT_TYPES = ("pdf", "xlsx", "csv", "json")

TABLE = "scheduled_exports"


class BackendError(Exception):
    """Raised when the hosted backend rejects or fails a request"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def schedule_label(cron: str) -> str:
    """Preset name for a cron expression; anything unknown is 'custom'"""
    for label, expression in SCHEDULE_PRESETS.items():
        if expression == cron:
            return label
    return "custom"


@dataclass
class ScheduledExport:
    id: str
    name: str
    export_type: str
    schedule_cron: str
    is_active: bool = True
    config: Dict[str, Any] = field(default_factory=dict)
    last_run: Optional[str] = None
    next_run: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[str] = None

    @property
    def schedule(self) -> str:
        return schedule_label(self.schedule_cron)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ScheduledExport":
        return cls(
            id=str(row.get("id")),
            name=row.get("name", ""),
            export_type=row.get("export_type", "pdf"),
            schedule_cron=row.get("schedule_cron", SCHEDULE_PRESETS["custom"]),
            is_active=bool(row.get("is_active", True)),
            config=row.get("config") or {},
            last_run=row.get("last_run"),
            next_run=row.get("next_run"),
            user_id=row.get("user_id"),
            created_at=row.get("created_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["schedule"] = self.schedule
        return data


class HostedBackendClient:
    """Thin PostgREST client for the hosted backend"""

    def __init__(self, base_url: str, api_key: str, timeout: float = 10.0, session: requests.Session = None):
        self.rest_url = f"{base_url.rstrip('/')}/rest/v1"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })

    def request(self, method: str, table: str, params: Dict[str, str] = None,
                json: Any = None, prefer: str = None) -> Any:
        headers = {"Prefer": prefer} if prefer else None
        url = f"{self.rest_url}/{table}"
        try:
            response = self.session.request(method, url, params=params, json=json,
                                            headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Hosted backend unreachable (%s %s): %s", method, table, e)
            raise BackendError("Hosted backend is unreachable") from e

        if response.status_code >= 400:
            logger.warning("Hosted backend returned %s for %s %s: %s",
                           response.status_code, method, table, response.text[:200])
            raise BackendError(f"Hosted backend returned {response.status_code}", response.status_code)
        if not response.content:
            return None
        return response.json()


class ScheduleService:
    """Manage a user's scheduled exports"""

    def __init__(self, client: HostedBackendClient):
        self.client = client

    def list_for_user(self, user_id: str) -> List[ScheduledExport]:
        """Newest first"""
        rows = self.client.request("GET", TABLE, params={
            "select": "*",
            "user_id": f"eq.{user_id}",
            "order": "created_at.desc",
        }) or []
        return [ScheduledExport.from_row(row) for row in rows]

    def create(self, user_id: str, name: str, export_type: str = "pdf", schedule: str = "daily",
               config: Dict[str, Any] = None) -> ScheduledExport:
        name = (name or "").strip()
        if not name:
            raise ValueError("A scheduled export needs a name")
        if export_type not in SCHEDULED_EXPORT_TYPES:
            raise ValueError(f"Unsupported export type '{export_type}'")
        if schedule not in SCHEDULE_PRESETS:
            raise ValueError(f"Unknown schedule '{schedule}'. Use one of: {', '.join(SCHEDULE_PRESETS)}")

        rows = self.client.request("POST", TABLE, json={
            "user_id": user_id,
            "name": name,
            "export_type": export_type,
            "schedule_cron": SCHEDULE_PRESETS[schedule],
            "config": config or {},
            "is_active": True,
        }, prefer="return=representation")
        if not rows:
            raise BackendError("Hosted backend returned no row for the new schedule")
        created = ScheduledExport.from_row(rows[0])
        logger.info("Created scheduled export %s (%s) for user %s", created.id, created.schedule, user_id)
        return created

    def toggle(self, export_id: str, is_active: bool) -> Optional[ScheduledExport]:
        """Flip the current active flag: an active schedule is paused and vice versa"""
        rows = self.client.request("PATCH", TABLE, params={"id": f"eq.{export_id}"},
                                   json={"is_active": not is_active}, prefer="return=representation")
        return ScheduledExport.from_row(rows[0]) if rows else None

    def delete(self, export_id: str) -> None:
        self.client.request("DELETE", TABLE, params={"id": f"eq.{export_id}"})
        logger.info("Deleted scheduled export %s", export_id)
