"""Document source configuration for pydocrepo."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pydocrepo._constants import BASE_URL, DEFAULT_DATABASE
from pydocrepo.exceptions import DocRepoConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class SourceConfig:
    """Configuration for :class:`pydocrepo.rest.RestDocumentSource`.

    Parameters
    ----------
    project_id : str
        Project that owns the database.
    database : str
        Database id. Defaults to ``"(default)"``.
    base_url : str
        API base URL. Point this at an emulator (e.g.
        ``"http://localhost:8080"``) for local development.
    access_token : str or None
        OAuth2 bearer token sent as ``Authorization`` header. Emulators
        accept requests without one.
    request_timeout : float
        Total timeout in seconds for a single ``runQuery`` request.
    api_trace_enabled : bool
        Log redacted request and response bodies at DEBUG level.
    """

    project_id: str
    database: str = DEFAULT_DATABASE
    base_url: str = BASE_URL
    access_token: str | None = None
    request_timeout: float = 30.0
    api_trace_enabled: bool = False

    def __post_init__(self) -> None:
        if not self.project_id or not self.project_id.strip():
            raise DocRepoConfigError("project_id must be non-empty")
        if self.request_timeout <= 0:
            raise DocRepoConfigError(f"request_timeout must be positive, got {self.request_timeout}")

    @property
    def database_path(self) -> str:
        """Resource name of the database (``projects/<p>/databases/<d>``)."""
        return f"projects/{self.project_id}/databases/{self.database}"

    @property
    def documents_root(self) -> str:
        """Resource name prefix shared by every document in the database."""
        return f"{self.database_path}/documents"

    @property
    def run_query_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/v1/{self.documents_root}:runQuery"

    @classmethod
    def from_env(cls, **overrides: Any) -> SourceConfig:
        """Create configuration from environment variables.

        Reads ``DOCREPO_PROJECT_ID`` and optional ``DOCREPO_*`` variables.
        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        SourceConfig
            Populated configuration.

        Raises
        ------
        DocRepoConfigError
            If no project id is available or a numeric variable is malformed.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "DOCREPO_PROJECT_ID": "project_id",
            "DOCREPO_DATABASE": "database",
            "DOCREPO_BASE_URL": "base_url",
            "DOCREPO_ACCESS_TOKEN": "access_token",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        timeout_env = env.get("DOCREPO_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            try:
                config_kwargs["request_timeout"] = float(timeout_env)
            except ValueError as exc:
                raise DocRepoConfigError(f"DOCREPO_REQUEST_TIMEOUT is not a number: {timeout_env!r}") from exc

        if "api_trace_enabled" not in overrides:
            config_kwargs["api_trace_enabled"] = _env_bool(
                env.get("DOCREPO_API_TRACE_ENABLED"),
                False,
            )

        config_kwargs.update(overrides)

        if "project_id" not in config_kwargs:
            raise DocRepoConfigError("DOCREPO_PROJECT_ID is not set")

        return cls(**config_kwargs)
