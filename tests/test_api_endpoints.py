try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import json

import httpx
import pytest

from dns_editor.clients.cloudflare import PERMISSION_MESSAGE, ProviderResponse
from dns_editor.clients.sqlite_store import SQLiteTokenTable
from dns_editor.main import app
from dns_editor.services.credential_store import CredentialStore

pytestmark = pytest.mark.anyio

ROOT_HEADERS = {"X-Account-Id": "acct-1", "X-Api-Token": "cf-root-secret"}


def _ok(result=None) -> ProviderResponse:
    return ProviderResponse(ok=True, status_code=200, success=True, result=result)


def _failure(message: str, status_code: int = 400) -> ProviderResponse:
    return ProviderResponse(
        ok=False, status_code=status_code, success=False, errors=[{"message": message}]
    )


class StubProvider:
    def __init__(self) -> None:
        self.records: list[dict] = [
            {
                "id": "r1",
                "type": "A",
                "name": "x.example.com",
                "content": "1.1.1.1",
                "ttl": 1,
                "proxied": False,
                "comment": None,
                "zone_name": "example.com",
            }
        ]
        self.verify_response = _ok([])
        self.zones_response = _ok([{"id": "zone-1", "name": "example.com"}])
        self.failing_names: set[str] = set()
        self.calls: list[tuple] = []

    async def verify(self, account_id: str) -> ProviderResponse:
        self.calls.append(("verify", account_id))
        return self.verify_response

    async def list_zones(self, account_id: str) -> ProviderResponse:
        self.calls.append(("zones", account_id))
        return self.zones_response

    async def list_records(self, zone_id: str) -> ProviderResponse:
        self.calls.append(("list", zone_id))
        return _ok(self.records)

    async def create_record(self, zone_id: str, payload: dict) -> ProviderResponse:
        self.calls.append(("create", payload["name"]))
        if payload["name"] in self.failing_names:
            return _failure("Record already exists.")
        return _ok({"id": "new", **payload})

    async def update_record(self, zone_id: str, record_id: str, payload: dict) -> ProviderResponse:
        self.calls.append(("update", record_id))
        return _ok({"id": record_id, **payload})

    async def delete_record(self, zone_id: str, record_id: str) -> ProviderResponse:
        self.calls.append(("delete", record_id))
        return _ok({"id": record_id})


class ProviderRecorder:
    """Provider factory that remembers which identity each client was built for."""

    def __init__(self, provider) -> None:
        self.provider = provider
        self.identities = []

    def __call__(self, identity):
        self.identities.append(identity)
        return self.provider


@pytest.fixture()
def overrides(tmp_path):
    from dns_editor import dependencies

    provider = StubProvider()
    recorder = ProviderRecorder(provider)
    store = CredentialStore(primary=SQLiteTokenTable(str(tmp_path / "tokens.db")))

    app.dependency_overrides.clear()
    app.dependency_overrides.update(
        {
            dependencies.get_credential_store: lambda: store,
            dependencies.get_provider_factory: lambda: recorder,
        }
    )

    yield provider, recorder, store

    app.dependency_overrides.clear()


@pytest.fixture()
async def client(overrides):
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
    ) as test_client:
        yield test_client


async def _issue(client, **body) -> dict:
    response = await client.post("/api/tokens", headers=ROOT_HEADERS, json=body or None)
    assert response.status_code == 201
    return response.json()["result"]


async def test_health(client):
    response = await client.get("/api/health")

    assert response.json() == {"status": "ok"}


async def test_verify_root_login(overrides, client):
    provider, recorder, _ = overrides

    response = await client.post("/api/auth/verify", headers=ROOT_HEADERS)

    assert response.status_code == 200
    assert response.json() == {"success": True, "role": "root"}
    assert provider.calls == [("verify", "acct-1")]
    assert recorder.identities[0].api_token == "cf-root-secret"


async def test_missing_credentials_are_rejected(client):
    response = await client.get("/api/zones", headers={"X-Account-Id": "acct-1"})

    assert response.status_code == 401
    assert response.json()["success"] is False
    assert response.json()["errors"][0]["message"]


async def test_verify_surfaces_rewritten_provider_error(overrides, client):
    provider, _, _ = overrides
    provider.verify_response = _failure(PERMISSION_MESSAGE, status_code=403)

    response = await client.post("/api/auth/verify", headers=ROOT_HEADERS)

    assert response.status_code == 502
    assert response.json() == {"success": False, "errors": [{"message": PERMISSION_MESSAGE}]}


async def test_bearer_api_token_is_accepted_for_root(overrides, client):
    _, recorder, _ = overrides

    response = await client.get(
        "/api/zones",
        headers={"X-Account-Id": "acct-1", "Authorization": "Bearer cf-root-secret"},
    )

    assert response.status_code == 200
    assert response.json()["result"] == [{"id": "zone-1", "name": "example.com"}]
    assert recorder.identities[0].api_token == "cf-root-secret"


async def test_issued_token_acts_as_bound_identity(overrides, client):
    _, recorder, _ = overrides
    issued = await _issue(client, expiry_days=7)

    response = await client.post(
        "/api/auth/verify", headers={"X-Login-Token": issued["token"]}
    )

    assert response.json() == {"success": True, "role": "token"}
    delegated = recorder.identities[-1]
    assert delegated.account_id == "acct-1"
    assert delegated.api_token == "cf-root-secret"
    assert issued["boundApiToken"] == "cf-root-secret"


async def test_token_accepted_from_query_string_and_bearer(overrides, client):
    issued = await _issue(client)

    by_query = await client.get("/api/zones", params={"login_token": issued["token"]})
    by_bearer = await client.get(
        "/api/zones", headers={"Authorization": f"Bearer {issued['token']}"}
    )

    assert by_query.status_code == 200
    assert by_bearer.status_code == 200


async def test_list_tokens_masks_bound_credential(client):
    first = await _issue(client)
    second = await _issue(client, expiry_days=30)

    response = await client.get("/api/tokens", headers={"X-Login-Token": first["token"]})

    body = response.json()
    assert body["success"] is True
    assert [entry["id"] for entry in body["result"]] == [first["id"], second["id"]]
    assert {entry["boundApiToken"] for entry in body["result"]} == {"***"}
    assert [entry["isExpired"] for entry in body["result"]] == [False, False]
    assert set(body["result"][0]) == {
        "id",
        "token",
        "created",
        "expiry",
        "boundAccountId",
        "boundApiToken",
        "isExpired",
    }
    assert body["result"][0]["boundAccountId"] == "acct-1"


async def test_issue_rejects_excessive_lifetime(client):
    response = await client.post(
        "/api/tokens", headers=ROOT_HEADERS, json={"expiry_days": 400}
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


async def test_revoked_token_can_no_longer_authenticate(client):
    issued = await _issue(client)

    revoke = await client.delete(f"/api/tokens/{issued['id']}", headers=ROOT_HEADERS)
    after = await client.get("/api/zones", headers={"X-Login-Token": issued["token"]})

    assert revoke.json() == {"success": True}
    assert after.status_code == 401


async def test_unknown_token_is_rejected(client):
    response = await client.get("/api/zones", headers={"X-Login-Token": "tk_" + "0" * 120})

    assert response.status_code == 401


async def test_delegated_login_without_storage_reports_configuration_error(client):
    from dns_editor import dependencies

    app.dependency_overrides[dependencies.get_credential_store] = lambda: CredentialStore()

    response = await client.get("/api/zones", headers={"X-Login-Token": "tk_" + "0" * 120})

    assert response.status_code == 503
    assert "storage" in response.json()["errors"][0]["message"]


async def test_fetch_records_returns_editable_listing(client):
    response = await client.get("/api/zones/zone-1/records", headers=ROOT_HEADERS)

    assert response.json() == {
        "success": True,
        "result": [
            {
                "id": "r1",
                "type": "A",
                "name": "x.example.com",
                "content": "1.1.1.1",
                "proxied": False,
                "ttl": 1,
                "comment": "",
            }
        ],
    }


async def test_deploy_applies_changes(overrides, client):
    provider, _, _ = overrides
    desired = [
        {"type": "A", "name": "y.example.com", "content": "2.2.2.2"},
    ]

    response = await client.post(
        "/api/zones/zone-1/deploy", headers=ROOT_HEADERS, json=desired
    )

    body = response.json()
    assert response.status_code == 200
    assert body["success"] is True
    assert body["result"]["applied"] == 2
    assert body["message"] == "DNS sync complete: 2 change(s) applied."
    assert [call[0] for call in provider.calls] == ["list", "delete", "create"]


async def test_deploy_accepts_editor_code_payload(overrides, client):
    provider, _, _ = overrides
    code = json.dumps(
        [{"id": "r1", "type": "A", "name": "x.example.com", "content": "1.1.1.1", "ttl": 1}]
    )

    response = await client.post(
        "/api/zones/zone-1/deploy", headers=ROOT_HEADERS, json={"code": code}
    )

    assert response.status_code == 200
    assert response.json()["result"]["applied"] == 0
    assert [call[0] for call in provider.calls] == ["list"]


async def test_deploy_reports_partial_failure(overrides, client):
    provider, _, _ = overrides
    provider.failing_names = {"bad.example.com"}
    desired = [
        {"id": "r1", "type": "A", "name": "x.example.com", "content": "1.1.1.1"},
        {"type": "A", "name": "bad.example.com", "content": "3.3.3.3"},
        {"type": "A", "name": "good.example.com", "content": "4.4.4.4"},
    ]

    response = await client.post(
        "/api/zones/zone-1/deploy", headers=ROOT_HEADERS, json={"records": desired}
    )

    body = response.json()
    assert response.status_code == 207
    assert body["success"] is False
    assert body["result"]["applied"] == 1
    assert [error["name"] for error in body["result"]["errors"]] == ["bad.example.com"]
    assert "Create bad.example.com failed: Record already exists." in body["errors"][0]["message"]


@pytest.mark.parametrize(
    "payload",
    [{"code": "[{not json"}, {"code": 42}, {"type": "A"}, [{"type": "A", "name": "x"}]],
)
async def test_deploy_rejects_malformed_input_before_remote_calls(overrides, client, payload):
    provider, _, _ = overrides

    response = await client.post(
        "/api/zones/zone-1/deploy", headers=ROOT_HEADERS, json=payload
    )

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert provider.calls == []


async def test_unexpected_failures_become_system_errors(overrides, client):
    provider, _, _ = overrides

    async def explode(account_id):
        raise RuntimeError("boom")

    provider.list_zones = explode

    response = await client.get("/api/zones", headers=ROOT_HEADERS)

    assert response.status_code == 500
    assert response.json() == {"success": False, "errors": [{"message": "System error: boom"}]}


async def test_malformed_token_request_uses_error_envelope(client):
    response = await client.post(
        "/api/tokens", headers=ROOT_HEADERS, json={"expiry_days": "forever"}
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "expiry_days" in body["errors"][0]["message"]
    assert "detail" not in body


async def test_deploy_without_body_is_a_validation_error(overrides, client):
    provider, _, _ = overrides

    response = await client.post("/api/zones/zone-1/deploy", headers=ROOT_HEADERS)

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert response.json()["errors"][0]["message"].startswith("Invalid request:")
    assert provider.calls == []
