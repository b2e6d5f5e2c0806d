from __future__ import annotations

import pytest

from pydocrepo.config import SourceConfig
from pydocrepo.exceptions import DocRepoConfigError


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DOCREPO_PROJECT_ID", "demo")
    monkeypatch.setenv("DOCREPO_DATABASE", "staging")
    monkeypatch.setenv("DOCREPO_BASE_URL", "http://localhost:8080/")
    monkeypatch.setenv("DOCREPO_REQUEST_TIMEOUT", "5")
    monkeypatch.setenv("DOCREPO_API_TRACE_ENABLED", "yes")

    config = SourceConfig.from_env()

    assert config.project_id == "demo"
    assert config.database == "staging"
    assert config.request_timeout == 5.0
    assert config.api_trace_enabled is True
    assert config.run_query_url == "http://localhost:8080/v1/projects/demo/databases/staging/documents:runQuery"


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DOCREPO_PROJECT_ID", "from-env")
    monkeypatch.setenv("DOCREPO_REQUEST_TIMEOUT", "5")
    monkeypatch.setenv("DOCREPO_API_TRACE_ENABLED", "1")

    config = SourceConfig.from_env(project_id="explicit", request_timeout=1.0, api_trace_enabled=False)

    assert config.project_id == "explicit"
    assert config.request_timeout == 1.0
    assert config.api_trace_enabled is False


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("DOCREPO_DATABASE", "DOCREPO_BASE_URL", "DOCREPO_ACCESS_TOKEN", "DOCREPO_REQUEST_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DOCREPO_PROJECT_ID", "demo")

    config = SourceConfig.from_env()

    assert config.database == "(default)"
    assert config.access_token is None
    assert config.documents_root == "projects/demo/databases/(default)/documents"


def test_missing_project_id(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DOCREPO_PROJECT_ID", raising=False)
    with pytest.raises(DocRepoConfigError, match="DOCREPO_PROJECT_ID"):
        SourceConfig.from_env()


def test_bad_timeout_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DOCREPO_PROJECT_ID", "demo")
    monkeypatch.setenv("DOCREPO_REQUEST_TIMEOUT", "soon")
    with pytest.raises(DocRepoConfigError):
        SourceConfig.from_env()


def test_validation() -> None:
    with pytest.raises(DocRepoConfigError):
        SourceConfig(project_id=" ")
    with pytest.raises(DocRepoConfigError):
        SourceConfig(project_id="demo", request_timeout=0)
