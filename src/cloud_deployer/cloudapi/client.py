"""HTTP client for the hosting platform's management API."""

from __future__ import annotations

import logging
import os
import time
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

import requests

from ..errors import PlatformApiError
from .models import Application, Database, Domain, Environment, Task

if TYPE_CHECKING:
    from ..config import ApiConfig

logger = logging.getLogger(__name__)


class CloudApiClient:
    """Thin blocking wrapper over the platform REST endpoints.

    Every method performs one request. Methods that submit work return the
    platform :class:`Task`; callers wait on it separately.
    """

    def __init__(
        self,
        config: "ApiConfig",
        *,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not config.username or not config.api_key:
            raise ValueError("API username and key are required")

        self.config = config
        self.base_url = config.endpoint.rstrip("/")
        self.session = session or requests.Session()
        self.session.auth = (config.username, config.api_key)
        self._sleep = sleep

        proxy = config.proxy or os.environ.get("HTTPS_PROXY") or os.environ.get("HTTP_PROXY")
        if proxy:
            self.session.proxies = {"http": proxy, "https": proxy}
            logger.info("Platform API client using proxy: %s", proxy)

    # -- read -----------------------------------------------------------------

    def get_application(self, app: str) -> Application:
        return Application.from_payload(self._request("GET", f"/sites/{app}"))

    def list_environments(self, app: str) -> List[Environment]:
        payload = self._request("GET", f"/sites/{app}/envs")
        return [Environment.from_payload(item) for item in payload]

    def list_databases(self, app: str, env: str) -> List[Database]:
        payload = self._request("GET", f"/sites/{app}/envs/{env}/dbs")
        return [Database.from_payload(item) for item in payload]

    def list_domains(self, app: str, env: str) -> List[Domain]:
        payload = self._request("GET", f"/sites/{app}/envs/{env}/domains")
        return [Domain.from_payload(item) for item in payload]

    def get_task(self, app: str, task_id: str) -> Task:
        return Task.from_payload(self._request("GET", f"/sites/{app}/tasks/{task_id}"))

    def list_tasks(self, app: str) -> List[Task]:
        payload = self._request("GET", f"/sites/{app}/tasks")
        return [Task.from_payload(item) for item in payload]

    # -- submit ---------------------------------------------------------------

    def create_database_backup(self, app: str, env: str, db: str) -> Task:
        return self._submit("POST", f"/sites/{app}/envs/{env}/dbs/{db}/backups")

    def copy_database(self, app: str, db: str, from_env: str, to_env: str) -> Task:
        return self._submit("POST", f"/sites/{app}/dbs/{db}/db-copy/{from_env}/{to_env}")

    def copy_files(self, app: str, from_env: str, to_env: str) -> Task:
        return self._submit("POST", f"/sites/{app}/files-copy/{from_env}/{to_env}")

    def push_code(self, app: str, env: str, ref: str) -> Task:
        return self._submit("POST", f"/sites/{app}/envs/{env}/code-deploy", params={"path": ref})

    def purge_cache(self, app: str, env: str, domain: str) -> Task:
        return self._submit("DELETE", f"/sites/{app}/envs/{env}/domains/{domain}/cache")

    # -- transport ------------------------------------------------------------

    def _submit(self, method: str, path: str, params: Optional[Dict[str, str]] = None) -> Task:
        return Task.from_payload(self._request(method, path, params=params))

    def _request(self, method: str, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        url = f"{self.base_url}{path}.json"
        max_retries = max(1, self.config.max_retries)

        # Retry loop for rate limiting
        for attempt in range(max_retries):
            try:
                response = self.session.request(
                    method,
                    url,
                    params=params,
                    timeout=self.config.request_timeout,
                )
            except requests.exceptions.RequestException as exc:
                raise PlatformApiError(f"{method} {url} failed: {exc}", url=url) from exc

            if response.status_code == 429 and attempt < max_retries - 1:
                wait_time = 5 * (attempt + 1)
                logger.warning("Rate limited by platform API. Waiting %ss before retry...", wait_time)
                self._sleep(wait_time)
                continue

            try:
                response.raise_for_status()
            except requests.exceptions.HTTPError as exc:
                raise PlatformApiError(
                    f"{method} {url} returned {response.status_code}: {response.text[:500]}",
                    status_code=response.status_code,
                    url=url,
                ) from exc

            try:
                return response.json()
            except ValueError as exc:
                raise PlatformApiError(f"{method} {url} returned invalid JSON", url=url) from exc

        raise PlatformApiError("Rate limited after max retries", status_code=429, url=url)
