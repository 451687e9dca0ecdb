# tests/core/datasources/test_datasource_loader.py
from __future__ import annotations

from pathlib import Path

import pytest

from switchboard.core.datasources.loader import (
    load_and_register_datasources,
    parse_datasource_entry,
    profiles_from_env,
    profiles_from_yaml,
)
from switchboard.core.datasources.registry import DatasourceRegistry


class TestParseDatasourceEntry:
    def test_full_entry(self):
        p = parse_datasource_entry("User_Service", "HTTP| http://users.local |2000|5")

        assert p.name == "User_Service"
        assert p.kind == "http"
        assert p.base_address == "http://users.local"
        assert p.timeout_ms == 2000
        assert p.retry_budget == 5

    def test_missing_fields_take_defaults(self):
        p = parse_datasource_entry("posts", "|http://posts.local")

        assert p.kind == "http"
        assert p.timeout_ms == 5000
        assert p.retry_budget == 3

    @pytest.mark.parametrize("timeout,retries", [("abc", "x"), ("0", "0"), ("", "")])
    def test_unparsable_numbers_fall_back(self, timeout, retries):
        p = parse_datasource_entry("svc", f"http|http://svc|{timeout}|{retries}")

        assert p.timeout_ms == 5000
        assert p.retry_budget == 3

    def test_leading_digits_are_used(self):
        p = parse_datasource_entry("svc", "http|http://svc|1500ms|2x")

        assert p.timeout_ms == 1500
        assert p.retry_budget == 2


class TestProfilesFromEnv:
    def test_only_prefixed_non_empty_entries(self):
        env = {
            "DATASOURCE_USERS": "http|http://users|1000|2",
            "DATASOURCE_EMPTY": "",
            "DATASOURCE_": "http|http://nameless",
            "OTHER_VAR": "http|http://ignored",
        }

        profiles = profiles_from_env(env)

        assert [p.name for p in profiles] == ["USERS"]

    def test_custom_defaults(self):
        profiles = profiles_from_env(
            {"DATASOURCE_X": "http|http://x"},
            default_timeout_ms=750,
            default_retry_count=1,
        )

        assert profiles[0].timeout_ms == 750
        assert profiles[0].retry_budget == 1


class TestProfilesFromYaml:
    def test_load_with_env_substitution(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("USERS_URL", "http://users.example")
        monkeypatch.delenv("USERS_KEY", raising=False)

        cfg = tmp_path / "datasources.yaml"
        cfg.write_text(
            """
datasources:
  Users:
    type: http
    base_url: "${USERS_URL}"
    timeout_ms: 1200
    retry_count: 4
    headers:
      X-Api-Key: "${USERS_KEY:-dev-key}"
""",
            encoding="utf-8",
        )

        profiles = profiles_from_yaml([str(cfg)])

        assert len(profiles) == 1
        p = profiles[0]
        assert p.name == "Users"
        assert p.base_address == "http://users.example"
        assert p.timeout_ms == 1200
        assert p.retry_budget == 4
        assert p.default_headers["X-Api-Key"] == "dev-key"
        assert p.default_headers["Content-Type"] == "application/json"

    def test_later_file_overrides(self, tmp_path: Path):
        (tmp_path / "01_base.yaml").write_text(
            "datasources:\n  users:\n    base_url: http://old\n", encoding="utf-8"
        )
        (tmp_path / "02_override.yaml").write_text(
            "datasources:\n  USERS:\n    base_url: http://new\n", encoding="utf-8"
        )

        profiles = profiles_from_yaml([str(tmp_path / "*.yaml")])

        assert len(profiles) == 1
        assert profiles[0].base_address == "http://new"

    def test_missing_base_url_raises(self, tmp_path: Path):
        cfg = tmp_path / "datasources.yaml"
        cfg.write_text("datasources:\n  broken:\n    timeout_ms: 10\n", encoding="utf-8")

        with pytest.raises(ValueError, match="base_url"):
            profiles_from_yaml([str(cfg)])

    def test_unset_env_var_raises(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("NOPE_URL", raising=False)
        cfg = tmp_path / "datasources.yaml"
        cfg.write_text('datasources:\n  x:\n    base_url: "${NOPE_URL}"\n', encoding="utf-8")

        with pytest.raises(ValueError, match="NOPE_URL"):
            profiles_from_yaml([str(cfg)])

    def test_no_files_is_empty(self, tmp_path: Path):
        assert profiles_from_yaml([str(tmp_path / "missing.yaml")]) == []


class TestLoadAndRegister:
    def test_yaml_overrides_env(self, tmp_path: Path):
        cfg = tmp_path / "datasources.yaml"
        cfg.write_text("datasources:\n  users:\n    base_url: http://from-yaml\n", encoding="utf-8")
        registry = DatasourceRegistry()

        load_and_register_datasources(
            registry=registry,
            patterns=[str(cfg)],
            environ={
                "DATASOURCE_USERS": "http|http://from-env|100|1",
                "DATASOURCE_POSTS": "http|http://posts|100|1",
            },
        )

        assert len(registry) == 2
        assert registry.resolve("USERS").base_address == "http://from-yaml"
        assert registry.resolve("posts").base_address == "http://posts"
