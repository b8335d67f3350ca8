"""Configuration management for Jira Tracker."""

import os
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_STATE_FILE = Path("~/.jira_tracker/state.json")


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    One instance is built at startup (see ``jira_tracker.cli``) and handed to
    everything that needs it.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Jira settings
    jira_url: str = Field(
        default="",
        description="Jira Cloud base URL (e.g., https://example.atlassian.net)",
    )
    jira_email: str = Field(
        default="",
        description="Email of the Jira account used for issue lookups",
    )
    jira_api_token: str = Field(
        default="",
        description="Jira API token",
    )
    jira_account_id: str = Field(
        default="",
        description="Atlassian account ID used as worklog author (looked up when empty)",
    )

    # Tempo settings
    tempo_api_token: str = Field(
        default="",
        description="Tempo API token",
    )
    tempo_url: str = Field(
        default="https://api.tempo.io/4",
        description="Tempo REST API base URL",
    )

    # Server settings
    tracker_host: str = Field(
        default="127.0.0.1",
        description="Address the HTTP server binds to",
    )
    tracker_port: int = Field(
        default=8080,
        description="Port the HTTP server listens on",
    )

    # State file settings
    json_file: Path = Field(
        default=DEFAULT_STATE_FILE,
        validate_default=True,
        description="Path of the JSON state file (~ and $VARS are expanded)",
    )
    watch_debounce_seconds: float = Field(
        default=1.0,
        description="Quiet period before an external state file change is reloaded",
    )

    http_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for Jira and Tempo requests",
    )

    @field_validator("json_file", mode="before")
    @classmethod
    def _expand_path(cls, value: str | Path) -> Path:
        return Path(os.path.expanduser(os.path.expandvars(str(value))))

    def get_state_file(self) -> Path:
        """Get the state file path (already expanded on load)."""
        return self.json_file
