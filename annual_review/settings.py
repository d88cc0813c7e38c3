from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    """
    App settings.

    Notes:
    - Defaults are local and deterministic (SQLite file, bundled YAML rules).
    - Every field can be overridden with an `ANNUAL_REVIEW_*` env var.
    """

    model_config = SettingsConfigDict(env_prefix="ANNUAL_REVIEW_", extra="ignore")

    db_url: str | None = None
    security_config_path: str | None = None
    workflow_rules_path: str | None = None
    log_level: str = "INFO"
    seed_demo_data: bool = True

    # Only used when security_config.yaml selects the "jwt" auth provider.
    jwt_secret: str | None = None
    jwt_audience: str = "authenticated"
    jwt_leeway_seconds: int = 30

    def resolved_db_url(self) -> str:
        if self.db_url:
            return self.db_url

        repo_root = _PACKAGE_DIR.parent
        db_path = repo_root / "annual_review.db"
        return f"sqlite:///{db_path}"

    def resolved_security_config_path(self) -> Path:
        if self.security_config_path:
            return Path(self.security_config_path)
        return _PACKAGE_DIR / "config" / "security_config.yaml"

    def resolved_workflow_rules_path(self) -> Path:
        if self.workflow_rules_path:
            return Path(self.workflow_rules_path)
        return _PACKAGE_DIR / "config" / "workflow_rules.yaml"


@lru_cache
def get_settings() -> Settings:
    return Settings()
