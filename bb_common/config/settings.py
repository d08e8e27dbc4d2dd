"""Process-wide benchbot configuration."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from bb_common.errors import ConfigError

CONFIG_ENV_VAR = "BENCHBOT_CONFIG"
DEFAULT_CONFIG_DIRNAME = ".dimforge"
DEFAULT_CONFIG_NAME = "benchbot.json"


class SuiteSettings(BaseModel):
    """Layout and build options of the benchmarked suite."""

    model_config = ConfigDict(frozen=True)

    project: str = Field(default="rapier3d", description="Store collection the results are written to")
    bench_subdir: str = Field(default="benchmarks3d", description="Suite directory inside the checkout")
    binary: str = Field(default="all_benchmarks3", description="Suite binary under target/release")
    features: List[str] = Field(
        default_factory=lambda: ["simd-nightly", "other-backends"],
        description="Cargo features used both to build and to run the suite",
    )
    reference_backend: str = Field(default="rapier", description="Backend shown by queries unless other engines are requested")
    build_timeout_seconds: float = Field(default=3600, gt=0, description="Budget for each checkout/build step")
    run_timeout_seconds: float = Field(default=1800, gt=0, description="Budget for each benchmark run")


class BenchConfig(BaseModel):
    """Connection settings shared by the publisher, the worker and the queries."""

    model_config = ConfigDict(frozen=True)

    mongodb_bencher_uri: str = Field(description="Result store URI used to write records")
    mongodb_server_uri: str = Field(description="Result store URI used by read-only queries")
    rabbitmq_uri: str = Field(description="AMQP URI of the job queue")
    mongodb_db: str = Field(description="Result store database name")
    suite: SuiteSettings = Field(default_factory=SuiteSettings)

    @classmethod
    def from_json(cls, json_str: str) -> "BenchConfig":
        return cls.model_validate_json(json_str)

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)

    def save(self, filepath: Path) -> None:
        filepath.parent.mkdir(parents=True, exist_ok=True)
        filepath.write_text(self.to_json(), encoding="utf-8")

    @classmethod
    def load(cls, filepath: Optional[Path] = None) -> "BenchConfig":
        """Load the configuration, raising ConfigError when it is unusable."""
        resolved = resolve_config_path(filepath)
        try:
            raw = resolved.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigError(
                "Could not open configuration file. Did you run `benchbot configure`?",
                context={"path": resolved},
                cause=exc,
            ) from exc
        try:
            return cls.from_json(raw)
        except ValidationError as exc:
            raise ConfigError(
                "Could not read configuration file as JSON.",
                context={"path": resolved, "errors": exc.error_count()},
                cause=exc,
            ) from exc


def default_config_dir() -> Path:
    return Path.home() / DEFAULT_CONFIG_DIRNAME


def resolve_config_path(config_path: Optional[Path] = None) -> Path:
    """
    Return the configuration file to use.

    Respects an explicit path, then the BENCHBOT_CONFIG environment variable,
    then $HOME/.dimforge/benchbot.json.
    """
    if config_path is not None:
        return Path(config_path).expanduser()
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return default_config_dir() / DEFAULT_CONFIG_NAME
