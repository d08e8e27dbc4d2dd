"""Tests for BenchConfig loading and serialization."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from bb_common.config import BenchConfig, SuiteSettings, resolve_config_path
from bb_common.errors import ConfigError


pytestmark = pytest.mark.unit_common


def test_config_round_trips_through_json(bench_config: BenchConfig) -> None:
    assert BenchConfig.from_json(bench_config.to_json()) == bench_config


def test_save_and_load(tmp_path: Path, bench_config: BenchConfig) -> None:
    target = tmp_path / "nested" / "benchbot.json"
    bench_config.save(target)
    assert BenchConfig.load(target) == bench_config


def test_reads_the_four_key_file_format(tmp_path: Path) -> None:
    path = tmp_path / "benchbot.json"
    path.write_text(
        json.dumps(
            {
                "mongodb_bencher_uri": "mongodb://w",
                "mongodb_server_uri": "mongodb://r",
                "rabbitmq_uri": "amqp://q",
                "mongodb_db": "bench",
            }
        )
    )
    cfg = BenchConfig.load(path)
    assert cfg.rabbitmq_uri == "amqp://q"
    assert cfg.suite == SuiteSettings()
    assert cfg.suite.project == "rapier3d"
    assert cfg.suite.features == ["simd-nightly", "other-backends"]


def test_missing_file_raises_config_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError) as excinfo:
        BenchConfig.load(tmp_path / "absent.json")
    assert excinfo.value.context["path"].endswith("absent.json")


def test_malformed_file_raises_config_error(tmp_path: Path) -> None:
    path = tmp_path / "benchbot.json"
    path.write_text('{"rabbitmq_uri": "amqp://q"')
    with pytest.raises(ConfigError):
        BenchConfig.load(path)


def test_undecodable_file_raises_config_error(tmp_path: Path) -> None:
    path = tmp_path / "benchbot.json"
    path.write_bytes(b"\xff\xfe{}")
    with pytest.raises(ConfigError, match="Could not open"):
        BenchConfig.load(path)


def test_missing_key_raises_config_error(tmp_path: Path) -> None:
    path = tmp_path / "benchbot.json"
    path.write_text(json.dumps({"rabbitmq_uri": "amqp://q"}))
    with pytest.raises(ConfigError):
        BenchConfig.load(path)


def test_config_is_immutable(bench_config: BenchConfig) -> None:
    with pytest.raises(ValidationError):
        bench_config.rabbitmq_uri = "amqp://other"


def test_resolve_config_path_precedence(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("BENCHBOT_CONFIG", raising=False)
    assert resolve_config_path() == tmp_path / ".dimforge" / "benchbot.json"

    monkeypatch.setenv("BENCHBOT_CONFIG", str(tmp_path / "env.json"))
    assert resolve_config_path() == tmp_path / "env.json"

    assert resolve_config_path(tmp_path / "explicit.json") == tmp_path / "explicit.json"
