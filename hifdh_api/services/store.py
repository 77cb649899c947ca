import logging
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

import httpx
from postgrest.exceptions import APIError

from hifdh_api import config
from hifdh_api.errors import StoreError, StorePermissionError, StoreUnavailableError

logger = logging.getLogger(__name__)

PROFILES = "profiles"
DAILY_LOGS = "daily_logs"

PERMISSION_CODES = {"42501", "PGRST301", "PGRST302"}
# connection/timeout/serialization failures reported by PostgREST or Postgres
TRANSIENT_CODES = {"PGRST000", "PGRST001", "PGRST002", "PGRST003", "57014", "40001", "40P01"}


def classify_store_error(error: Exception) -> StoreError:
    if isinstance(error, httpx.TransportError):
        return StoreUnavailableError(f"Store unavailable: {error}")

    if isinstance(error, APIError):
        code = str(error.code or "")
        message = error.message or str(error)
        if code in PERMISSION_CODES:
            return StorePermissionError(f"Permission denied: {message}")
        if code in TRANSIENT_CODES or code.startswith("5"):
            return StoreUnavailableError(f"Store unavailable: {message}")
        return StoreError(message)

    return StoreError(str(error))


class DocumentStore:
    """
    Profiles (`profiles`, keyed by the auth user id) and their daily logs
    (`daily_logs`, unique on userId + dateKey) behind the Supabase table API.
    Writes are merges: only the columns passed are changed.
    """

    def __init__(
        self,
        supabase,
        retry_delays: Optional[Sequence[float]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.supabase = supabase
        self.retry_delays = list(config.store_retry_delays() if retry_delays is None else retry_delays)
        self._sleep = sleep

    def _execute(self, builder, what: str):
        delays = [0.0] + self.retry_delays
        last_error: Optional[StoreError] = None

        for attempt, delay in enumerate(delays):
            if delay:
                self._sleep(delay)
            try:
                return builder.execute()
            except (APIError, httpx.TransportError) as e:
                error = classify_store_error(e)
                if not isinstance(error, StoreUnavailableError):
                    logger.error(f"Store error on {what}: {error.message}")
                    raise error from e
                last_error = error
                logger.warning(f"Transient store error on {what} (attempt {attempt + 1}/{len(delays)}): {e}")

        raise last_error

    # -------- Profiles --------

    def get_profile(self, uid: str) -> Optional[Dict[str, Any]]:
        res = self._execute(
            self.supabase.table(PROFILES).select("*").eq("id", uid).limit(1),
            f"get profile {uid}",
        )
        return res.data[0] if res.data else None

    def merge_profile(self, uid: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        res = self._execute(
            self.supabase.table(PROFILES).upsert({"id": uid, **fields}, on_conflict="id"),
            f"merge profile {uid}",
        )
        return res.data[0] if res.data else None

    def compare_and_set_profile(
        self,
        uid: str,
        fields: Dict[str, Any],
        expected: Dict[str, Any],
    ) -> bool:
        """Update the profile only if every `expected` column still holds its value."""
        builder = self.supabase.table(PROFILES).update(fields).eq("id", uid)
        for column, value in expected.items():
            builder = builder.is_(column, "null") if value is None else builder.eq(column, value)

        res = self._execute(builder, f"conditional profile update {uid}")
        return bool(res.data)

    def list_profiles(self, role: str) -> List[Dict[str, Any]]:
        res = self._execute(
            self.supabase.table(PROFILES).select("id, email").eq("role", role).order("email"),
            f"list {role} profiles",
        )
        return res.data or []

    # -------- Daily logs --------

    def get_log(self, uid: str, date_key: str) -> Optional[Dict[str, Any]]:
        res = self._execute(
            self.supabase.table(DAILY_LOGS).select("*").eq("userId", uid).eq("dateKey", date_key).limit(1),
            f"get log {uid}/{date_key}",
        )
        return res.data[0] if res.data else None

    def upsert_log(self, uid: str, date_key: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        payload = {**fields, "userId": uid, "dateKey": date_key}
        res = self._execute(
            self.supabase.table(DAILY_LOGS).upsert(payload, on_conflict="userId,dateKey"),
            f"upsert log {uid}/{date_key}",
        )
        return res.data[0] if res.data else None

    def update_log(self, uid: str, date_key: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        res = self._execute(
            self.supabase.table(DAILY_LOGS).update(fields).eq("userId", uid).eq("dateKey", date_key),
            f"update log {uid}/{date_key}",
        )
        return res.data[0] if res.data else None

    def query_logs(self, uid: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        builder = self.supabase.table(DAILY_LOGS).select("*").eq("userId", uid).order("dateKey", desc=True)
        if limit:
            builder = builder.limit(limit)
        res = self._execute(builder, f"query logs {uid}")
        return res.data or []

    def logs_below_version(self, version: int) -> List[Dict[str, Any]]:
        table = self.supabase.table(DAILY_LOGS)
        unversioned = self._execute(table.select("*").is_("schemaVersion", "null"), "query unversioned logs")
        older = self._execute(table.select("*").lt("schemaVersion", version), f"query logs below v{version}")
        return (unversioned.data or []) + (older.data or [])
