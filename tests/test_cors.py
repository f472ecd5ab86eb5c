import pytest

from intranet_platform.api.cors import CorsPolicy, CorsPolicyProvider
from intranet_platform.config import Config


@pytest.fixture
def policy(cfg: Config) -> CorsPolicy:
    return CorsPolicy.from_config(cfg)


@pytest.mark.parametrize("origin", [None, "", "http://localhost:5173", "http://10.0.0.1", "https://evil.example"])
def test_policy_is_the_same_for_every_origin(policy, origin):
    provider = CorsPolicyProvider(policy)
    p = provider.policy_for(origin)
    assert p is policy
    assert p.allow_credentials is True
    assert set(p.allowed_methods) == {"GET", "POST", "PUT", "DELETE"}


@pytest.mark.parametrize(
    "origin",
    [
        "192.168.1.5",
        "http://192.168.1.5",
        "http://192.168.0.42:3000",
        "127.0.0.1",
        "http://127.0.0.1:8080",
        "localhost",
        "https://localhost:5173",
    ],
)
def test_allowed_origins(policy, origin):
    assert policy.allows_origin(origin) is True


@pytest.mark.parametrize(
    "origin",
    [
        "10.0.0.1",
        "http://10.0.0.1",
        "http://192.169.1.5",
        "http://127.0.0.2",
        "http://localhost.evil.example",
        "http://evil.example/localhost",
        "http://192.168.1.5.evil.example:80/x",
        "http://192.168.evil.example",
        "https://192.168.attacker.example",
        "http://192.168.1.5.evil.example",
        "http://192.168.1.5.evil.example:8080",
        "http://192.168.",
        None,
        "",
    ],
)
def test_rejected_origins(policy, origin):
    assert policy.allows_origin(origin) is False


def test_response_headers(policy):
    h = policy.response_headers("http://192.168.1.5:3000")
    assert h["Access-Control-Allow-Methods"] == "GET,POST,PUT,DELETE"
    assert h["Access-Control-Allow-Credentials"] == "true"
    assert h["Access-Control-Allow-Origin"] == "http://192.168.1.5:3000"

    h = policy.response_headers("http://10.0.0.1")
    assert "Access-Control-Allow-Origin" not in h
    assert h["Access-Control-Allow-Credentials"] == "true"


@pytest.mark.parametrize("origin", ["http://LOCALHOST:5173", "HTTP://192.168.1.5", "Localhost"])
def test_origin_matching_ignores_case(policy, origin):
    assert policy.allows_origin(origin) is True


def test_allows_method(policy):
    assert policy.allows_method("put") is True
    assert policy.allows_method("PATCH") is False


def test_empty_pattern_list_matches_nothing():
    p = CorsPolicy(allowed_methods=("GET",), allowed_origin_patterns=())
    assert p.allows_origin("http://localhost") is False


def _methods(header: str) -> set:
    return {m.strip() for m in header.split(",")}


def test_preflight_from_lan_origin(client):
    r = client.options(
        "/api/accounts/me",
        headers={"Origin": "http://192.168.1.5:3000", "Access-Control-Request-Method": "PUT"},
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "http://192.168.1.5:3000"
    assert r.headers["access-control-allow-credentials"] == "true"
    assert _methods(r.headers["access-control-allow-methods"]) == {"GET", "POST", "PUT", "DELETE"}


def test_preflight_from_foreign_origin_is_refused(client):
    r = client.options(
        "/api/accounts/me",
        headers={"Origin": "http://10.0.0.1", "Access-Control-Request-Method": "GET"},
    )
    assert r.status_code == 400
    assert "access-control-allow-origin" not in r.headers


def test_preflight_with_disallowed_method_is_refused(client):
    r = client.options(
        "/api/accounts/me",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "PATCH"},
    )
    assert r.status_code == 400


def test_simple_request_echoes_allowed_origin(client):
    r = client.get("/", headers={"Origin": "http://localhost:5173"})
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert r.headers["access-control-allow-credentials"] == "true"

    r = client.get("/", headers={"Origin": "http://10.0.0.1"})
    assert r.status_code == 200
    assert "access-control-allow-origin" not in r.headers


@pytest.mark.parametrize(
    "origin",
    ["https://192.168.attacker.example", "http://192.168.1.5.evil.example"],
)
def test_lan_lookalike_hostnames_get_no_cors_headers(client, origin):
    r = client.get("/", headers={"Origin": origin})
    assert r.status_code == 200
    assert "access-control-allow-origin" not in r.headers

    r = client.options("/api/accounts/me", headers={"Origin": origin, "Access-Control-Request-Method": "GET"})
    assert r.status_code == 400
    assert "access-control-allow-origin" not in r.headers


def test_middleware_and_policy_agree_on_case(client, policy):
    origin = "http://LOCALHOST:5173"
    assert policy.allows_origin(origin) is True
    r = client.get("/", headers={"Origin": origin})
    assert r.headers["access-control-allow-origin"] == origin


def test_unauthorized_response_still_carries_cors_headers(client):
    r = client.get("/api/accounts/me", headers={"Origin": "http://192.168.1.5"})
    assert r.status_code == 401
    assert r.headers["access-control-allow-origin"] == "http://192.168.1.5"
