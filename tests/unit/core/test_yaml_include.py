"""Tests for YAML include: directive and --include."""

import sys

import pytest

from squashcat.core.config import State
from squashcat.core.yaml_settings import YamlWithIncludesSettingsSource


@pytest.fixture
def no_cli_includes(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["squashcat"])


def test_defaults_are_loaded_first(tmp_path, no_cli_includes):
    config_file = tmp_path / "squashcat.yaml"
    config_file.write_text(
        "config:\n  commands:\n    git:\n      push: git push origin HEAD:{branch}\n"
    )

    data = YamlWithIncludesSettingsSource(State, yaml_file=str(config_file))()

    assert data["config"]["commands"]["git"]["push"] == "git push origin HEAD:{branch}"
    # Sibling keys from defaults/default.yaml survive
    assert data["config"]["logger"]["console"]["enabled"] is True
    assert data["config"]["commands"]["git"]["rev_parse"] == "git rev-parse HEAD"


def test_include_directive_is_merged_and_removed(tmp_path, no_cli_includes):
    (tmp_path / "repos.yaml").write_text(
        "config:\n"
        "  batch:\n"
        "    target_repos: [octo/a, octo/b]\n"
        "    source_branch: develop\n"
    )
    config_file = tmp_path / "squashcat.yaml"
    config_file.write_text(
        "include: repos.yaml\n"
        "config:\n"
        "  batch:\n"
        "    source_branch: staging\n"
    )

    data = YamlWithIncludesSettingsSource(State, yaml_file=str(config_file))()

    assert "include" not in data
    assert data["config"]["batch"]["target_repos"] == ["octo/a", "octo/b"]
    # The including file wins
    assert data["config"]["batch"]["source_branch"] == "staging"


def test_nested_includes_resolve_relative_to_including_file(
    tmp_path, no_cli_includes
):
    shared = tmp_path / "shared"
    shared.mkdir()
    (shared / "commands.yaml").write_text(
        "config:\n  commands:\n    git:\n      push: git push --force-with-lease origin {branch}\n"
    )
    (shared / "team.yaml").write_text(
        "include: commands.yaml\nconfig:\n  git:\n    user_name: team-bot\n"
    )
    config_file = tmp_path / "squashcat.yaml"
    config_file.write_text("include: shared/team.yaml\n")

    data = YamlWithIncludesSettingsSource(State, yaml_file=str(config_file))()

    assert data["config"]["git"]["user_name"] == "team-bot"
    assert data["config"]["commands"]["git"]["push"].startswith(
        "git push --force-with-lease"
    )
    assert data["config"]["commands"]["git"]["clone"] == "git clone {url} {workdir}"


def test_circular_include_is_rejected(tmp_path, no_cli_includes):
    (tmp_path / "a.yaml").write_text("include: b.yaml\n")
    (tmp_path / "b.yaml").write_text("include: a.yaml\n")

    with pytest.raises(ValueError, match="Circular include"):
        YamlWithIncludesSettingsSource(State, yaml_file=str(tmp_path / "a.yaml"))()


def test_cli_include_is_loaded_last(tmp_path, monkeypatch):
    base = tmp_path / "squashcat.yaml"
    base.write_text("config:\n  batch:\n    target_branch: main\n")
    extra = tmp_path / "extra.yaml"
    extra.write_text("config:\n  batch:\n    target_branch: production\n")
    monkeypatch.setattr(
        sys, "argv", ["squashcat", "--include", str(extra), "merge"]
    )

    data = YamlWithIncludesSettingsSource(State, yaml_file=str(base))()

    assert data["config"]["batch"]["target_branch"] == "production"
