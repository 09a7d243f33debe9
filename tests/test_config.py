"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from recordlink.config.policies import IndexPolicy, MatchingPolicy, Policies, load_policies
from recordlink.config.settings import Settings


def _write_yaml(path: Path, payload: dict) -> None:
    path.write_text(yaml.safe_dump(payload), encoding="utf-8")


def test_policy_defaults() -> None:
    policies = Policies()
    assert policies.matching.min_score == 1.0
    assert policies.matching.max_resolution_passes == 10_000
    assert policies.index.backend == "memory"
    assert policies.similarity.days_scale == 30
    assert policies.store.batch_size == 1000


def test_policy_validation() -> None:
    with pytest.raises(ValidationError):
        MatchingPolicy(min_score=-1)
    with pytest.raises(ValidationError):
        MatchingPolicy(max_resolution_passes=0)
    with pytest.raises(ValidationError):
        IndexPolicy(backend="memcached")


def test_load_policies_from_dict() -> None:
    source = {"matching": {"min_score": 2.5}, "index": {"backend": "redis"}}
    policies = load_policies(source)

    assert policies.matching.min_score == 2.5
    assert policies.index.backend == "redis"
    assert source == {"matching": {"min_score": 2.5}, "index": {"backend": "redis"}}


def test_load_policies_from_yaml_with_env_override(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    path = tmp_path / "policies.yaml"
    _write_yaml(path, {"similarity": {"days_scale": 10}})
    monkeypatch.setenv("RECORDLINK_POLICY__MATCHING__MAX_RESOLUTION_PASSES", "5")

    policies = load_policies(path)

    assert policies.similarity.days_scale == 10
    assert policies.matching.max_resolution_passes == 5


def test_load_policies_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_policies(tmp_path / "missing.yaml")


def test_settings_environment_override(tmp_path: Path) -> None:
    _write_yaml(
        tmp_path / "default.yaml",
        {"log_level": "INFO", "policies": {"matching": {"min_score": 1.0}, "similarity": {"days_scale": 30}}},
    )
    _write_yaml(tmp_path / "testing.yaml", {"log_level": "DEBUG", "policies": {"matching": {"min_score": 1.5}}})

    settings = Settings(config_dir=tmp_path, environment="testing")

    assert settings.environment == "testing"
    assert settings.log_level == "DEBUG"
    assert settings.policies.matching.min_score == 1.5
    assert settings.policies.similarity.days_scale == 30


def test_settings_env_override(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _write_yaml(tmp_path / "default.yaml", {"policies": {"index": {"namespace": "from-file"}}})
    monkeypatch.setenv("RECORDLINK_SETTINGS__POLICIES__INDEX__NAMESPACE", "from-env")

    settings = Settings(config_dir=tmp_path)

    assert settings.policies.index.namespace == "from-env"


def test_explicit_policies_take_precedence(tmp_path: Path) -> None:
    _write_yaml(tmp_path / "default.yaml", {"policies": {"matching": {"min_score": 1.0, "max_resolution_passes": 7}}})

    settings = Settings(config_dir=tmp_path, policies={"matching": {"min_score": 3.0}})

    assert settings.policies.matching.min_score == 3.0
    assert settings.policies.matching.max_resolution_passes == 7


def test_settings_log_file_lives_in_log_dir(tmp_path: Path) -> None:
    settings = Settings(config_dir=tmp_path, log_dir=tmp_path / "logs")
    assert settings.log_file == tmp_path / "logs" / "recordlink.log"


def test_repository_default_config_loads() -> None:
    settings = Settings()
    assert settings.policies.index.namespace == "recordlink"
    assert settings.policies.matching.progress_log_interval == 100
