"""PostgREST (Supabase) loader for the relational target."""

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from .base import BaseLoader
from ..models.record import UpsertResult

logger = logging.getLogger(__name__)


class PostgRESTLoader(BaseLoader):
    """
    Loader for a Supabase project through its REST and auth admin APIs.

    Authenticates with the service role key so that bulk writes bypass
    row-level security. Upserts use ``on_conflict`` on the primary key with
    ``resolution=merge-duplicates``; repeating a write is a no-op.
    """

    def __init__(
        self,
        base_url: str,
        service_key: str,
        dry_run: bool = False,
        page_size: int = 1000,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the PostgREST loader.

        Args:
            base_url: Project URL (e.g. https://<ref>.supabase.co)
            service_key: Service role key
            dry_run: If True, simulate writes
            page_size: Rows per page for table reads
            timeout: Per-request timeout in seconds
            session: Custom requests session
        """
        super().__init__(dry_run=dry_run)
        self.base_url = base_url.rstrip("/")
        self.service_key = service_key
        self.page_size = page_size
        self.timeout = timeout
        self._session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a requests session with authentication."""
        session = requests.Session()
        session.headers["apikey"] = self.service_key
        session.headers["Authorization"] = f"Bearer {self.service_key}"
        session.headers["Content-Type"] = "application/json"
        return session

    def _table_url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    def _upsert(self, table: str, record: Dict[str, Any], primary_key: str) -> UpsertResult:
        """Send one upsert request."""
        key = record.get(primary_key)

        try:
            response = self._session.post(
                self._table_url(table),
                params={"on_conflict": primary_key},
                json=record,
                headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            return UpsertResult(table=table, primary_key=key, success=False, error=str(e))

        if response.ok:
            return UpsertResult(table=table, primary_key=key, success=True, status_code=response.status_code)

        message, code = self._error_details(response)
        return UpsertResult(
            table=table,
            primary_key=key,
            success=False,
            error=message,
            error_code=code,
            status_code=response.status_code,
        )

    def fetch_all(self, table: str, columns: str) -> List[Dict[str, Any]]:
        """Read a whole table page by page, ordered by id."""
        rows: List[Dict[str, Any]] = []
        offset = 0

        while True:
            response = self._session.get(
                self._table_url(table),
                params={
                    "select": columns,
                    "order": "id.asc",
                    "limit": self.page_size,
                    "offset": offset,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            page = response.json()

            rows.extend(page)
            if len(page) < self.page_size:
                break
            offset += len(page)

        logger.debug(f"Read {len(rows)} rows from {table}")
        return rows

    def _create_identity(self, payload: Dict[str, Any]) -> UpsertResult:
        """Create a user through the auth admin API."""
        user_id = payload.get("id")

        try:
            response = self._session.post(
                f"{self.base_url}/auth/v1/admin/users",
                json=payload,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            return UpsertResult(table="auth.users", primary_key=user_id, success=False, error=str(e))

        if response.ok:
            return UpsertResult(table="auth.users", primary_key=user_id, success=True, status_code=response.status_code)

        message, code = self._error_details(response)
        return UpsertResult(
            table="auth.users",
            primary_key=user_id,
            success=False,
            error=message,
            error_code=code,
            status_code=response.status_code,
        )

    def validate_connection(self) -> bool:
        """Validate connection to the REST endpoint."""
        try:
            response = self._session.get(f"{self.base_url}/rest/v1/", timeout=self.timeout)
            return response.status_code < 500
        except requests.exceptions.RequestException as e:
            logger.error(f"Target connection validation failed: {e}")
            return False

    @staticmethod
    def _error_details(response: requests.Response) -> Tuple[str, Optional[str]]:
        """Extract message and error code from an error response."""
        try:
            data = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}", None

        if not isinstance(data, dict):
            return str(data), None

        message = data.get("message") or data.get("msg") or data.get("error") or str(data)
        code = data.get("code") or data.get("error_code")
        return str(message), str(code) if code is not None else None
