# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Application configuration via environment variables and .env files."""

from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from qlscan.core.constants import FailurePolicy

# Comma-separated in the environment, never JSON
CsvList = Annotated[list[str], NoDecode]


def _split_csv(v: object) -> list[str]:
    if isinstance(v, str):
        return [x.strip() for x in v.split(",") if x.strip()]
    return v if isinstance(v, list) else []


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="QLSCAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
    )

    # CodeQL CLI
    codeql_path: str = "codeql"
    auto_detect_cli: bool = True
    min_cli_version: str = ""  # e.g. "2.16.0"; empty accepts any version
    home_dir: Path = Field(default_factory=lambda: Path.home() / ".codeql")
    query_pack_path: str = ""  # defaults to <home_dir>/packages
    auto_download_packs: bool = True

    # Workspace and repository
    workspace: Path = Path(".")
    languages: CsvList = []
    repo_languages: CsvList = []  # as reported by the hosting service
    repo_owner: str = ""
    repo_name: str = ""

    @field_validator("languages", "repo_languages", mode="before")
    @classmethod
    def _parse_lists(cls, v: object) -> list[str]:
        return _split_csv(v)

    # Analysis
    suites: CsvList = ["default"]
    threat_model: str = "remote"
    build_none_languages: CsvList = ["cpp", "csharp", "java"]
    threads: int = 0

    @field_validator("suites", "build_none_languages", mode="before")
    @classmethod
    def _parse_analysis_lists(cls, v: object) -> list[str]:
        return _split_csv(v)

    # Timeouts (seconds)
    version_timeout: float = 30.0
    discovery_timeout: float = 30.0
    pack_download_timeout: float = 120.0
    build_timeout: float = 300.0
    analyze_timeout: float = 600.0

    # What to do when one language's build or analysis fails
    failure_policy: FailurePolicy = FailurePolicy.ABORT

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"

    @property
    def databases_dir(self) -> Path:
        return self.home_dir / "databases"

    @property
    def results_dir(self) -> Path:
        return self.home_dir / "results"

    @property
    def state_dir(self) -> Path:
        return self.home_dir / "state"

    @property
    def packages_dir(self) -> Path:
        if self.query_pack_path:
            return Path(self.query_pack_path).expanduser()
        return self.home_dir / "packages"


def get_settings(**overrides: object) -> Settings:
    return Settings(**overrides)  # type: ignore[arg-type]
