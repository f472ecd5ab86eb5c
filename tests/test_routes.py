import pytest

from intranet_platform.auth.routes import RouteClassifier
from intranet_platform.config import Config


@pytest.fixture
def classifier(cfg: Config) -> RouteClassifier:
    return RouteClassifier.from_config(cfg)


@pytest.mark.parametrize("path", ["/", "/static", "/metadata", "/api/login"])
def test_configured_public_paths_are_public(classifier, path):
    assert classifier.is_public(path) is True


@pytest.mark.parametrize(
    "path",
    [
        "/api/logout",
        "/api/accounts/me",
        "/api/accounts/1",
        "/health",
        "/static/app.js",
        "/api/login/",
        "/metadata/",
        "/API/LOGIN",
        "",
        "//",
    ],
)
def test_other_paths_require_authentication(classifier, path):
    assert classifier.is_public(path) is False


def test_public_paths_follow_config(cfg):
    c = Config(**{**cfg.__dict__, "API_PREFIX": "/v2", "PATH_STATIC": "/assets"})
    classifier = RouteClassifier.from_config(c)
    assert classifier.public_paths == frozenset({"/", "/assets", "/metadata", "/v2/login"})
    assert classifier.is_public("/api/login") is False
