"""Tests for the platform HTTP client."""

import pytest
import requests

from cloud_deployer.cloudapi import CloudApiClient, EnvironmentKind
from cloud_deployer.config import ApiConfig
from cloud_deployer.errors import PlatformApiError


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []
        self.auth = None
        self.proxies = {}

    def request(self, method, url, params=None, timeout=None):
        self.requests.append((method, url, params))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def make_client(*responses, **config):
    session = FakeSession(responses)
    api_config = ApiConfig(username="ops@example.com", api_key="secret", endpoint="https://api.example.com/v1/", **config)
    client = CloudApiClient(api_config, session=session, sleep=lambda s: None)
    return client, session


class TestCloudApiClient:
    def test_requires_credentials(self):
        with pytest.raises(ValueError):
            CloudApiClient(ApiConfig())

    def test_sets_basic_auth(self):
        _, session = make_client()
        assert session.auth == ("ops@example.com", "secret")

    def test_list_environments(self):
        client, session = make_client(
            FakeResponse(payload=[{"name": "dev", "ssh_host": "dev-1"}, {"name": "prod"}])
        )

        envs = client.list_environments("prod:mysite")

        assert session.requests == [("GET", "https://api.example.com/v1/sites/prod:mysite/envs.json", None)]
        assert [env.name for env in envs] == ["dev", "prod"]
        assert envs[0].ssh_host == "dev-1"
        assert envs[1].kind is EnvironmentKind.PRODUCTION

    def test_push_code_sends_ref_and_returns_task(self):
        client, session = make_client(FakeResponse(payload={"id": 99, "state": "waiting", "completed": None}))

        task = client.push_code("prod:mysite", "stage", "tags/1.2")

        method, url, params = session.requests[0]
        assert method == "POST"
        assert url.endswith("/sites/prod:mysite/envs/stage/code-deploy.json")
        assert params == {"path": "tags/1.2"}
        assert task.id == "99"
        assert not task.completed

    def test_purge_cache_uses_delete(self):
        client, session = make_client(FakeResponse(payload={"id": "5", "state": "waiting"}))

        client.purge_cache("site", "prod", "www.example.com")

        assert session.requests[0][0] == "DELETE"
        assert session.requests[0][1].endswith("/envs/prod/domains/www.example.com/cache.json")

    def test_get_task_parses_completion(self):
        client, _ = make_client(
            FakeResponse(payload={"id": "5", "state": "error", "completed": "1700000000", "sender": "ops"})
        )

        task = client.get_task("site", "5")

        assert task.completed
        assert task.state == "error"
        assert not task.succeeded
        assert task.completed_at == 1700000000

    def test_http_error_raises_platform_error(self):
        client, _ = make_client(FakeResponse(status_code=403, text="forbidden"))

        with pytest.raises(PlatformApiError) as excinfo:
            client.list_environments("site")
        assert excinfo.value.status_code == 403

    def test_transport_error_raises_platform_error(self):
        client, _ = make_client(requests.exceptions.ConnectionError("refused"))

        with pytest.raises(PlatformApiError):
            client.list_tasks("site")

    def test_rate_limit_is_retried(self):
        client, session = make_client(
            FakeResponse(status_code=429),
            FakeResponse(payload=[{"name": "main"}]),
        )

        dbs = client.list_databases("site", "prod")

        assert [db.name for db in dbs] == ["main"]
        assert len(session.requests) == 2

    def test_rate_limit_exhausted(self):
        client, _ = make_client(FakeResponse(status_code=429), FakeResponse(status_code=429), max_retries=2)

        with pytest.raises(PlatformApiError) as excinfo:
            client.list_domains("site", "prod")
        assert excinfo.value.status_code == 429

    def test_application_unix_username(self):
        client, _ = make_client(FakeResponse(payload={"name": "prod:mysite", "unix_username": "mysite"}))

        app = client.get_application("prod:mysite")

        assert app.id == "prod:mysite"
        assert app.unix_username == "mysite"
