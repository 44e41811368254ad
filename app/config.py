"""Contract builder configuration — loaded from environment / .env file."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="CONTRACTS_", extra="ignore")

    env: str = "development"
    database_url: str = "sqlite+aiosqlite:///./contracts.db"
    log_level: str = "INFO"

    # Paths (relative to project root)
    templates_dir: Path = Path("templates")

    # Typst compiler
    typst_binary: str = "typst"
    typst_font_paths: list[Path] = []
    compile_timeout: float = 30.0  # seconds before the compiler is killed
    compile_workdir: Path | None = None  # None = system temp dir

    # Compile policy
    enforce_required_variables: bool = True
    allow_unpublished_compile: bool = True


settings = Settings()
