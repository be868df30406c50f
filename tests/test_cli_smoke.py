"""Smoke tests for CLI commands on a local style document."""

import json

import pytest
import yaml
from click.testing import CliRunner

from mapskin.cli.main import cli


@pytest.fixture
def runner():
    """Click test runner."""
    return CliRunner()


@pytest.fixture
def isolated_config_env(tmp_path, sample_style):
    """
    Temporary directory with a quiet config file and a style document.

    Returns the temporary directory path for further customization.
    """
    config_path = tmp_path / "config" / "mapskin_config.yaml"
    config_path.parent.mkdir()
    config_path.write_text(
        yaml.safe_dump({"global": {"log_level": "ERROR"}, "studio": {"failsafe_timeout": 5}}),
        encoding="utf-8",
    )
    (tmp_path / "style.json").write_text(json.dumps(sample_style), encoding="utf-8")
    return tmp_path


def invoke(runner, env_dir, *args):
    config = str(env_dir / "config" / "mapskin_config.yaml")
    return runner.invoke(cli, ["--env", "test", "--config", config, *args])


def test_cli_help(runner):
    """Test that main CLI help works."""
    result = runner.invoke(cli, ["--env", "test", "--help"])
    assert result.exit_code == 0
    assert "Usage:" in result.output
    for command in ("classify", "entities", "snapshot", "apply", "presets"):
        assert command in result.output


@pytest.mark.parametrize("command", ["classify", "entities", "snapshot", "apply"])
def test_command_help(runner, command):
    result = runner.invoke(cli, ["--env", "test", command, "--help"])
    assert result.exit_code == 0
    assert "Usage:" in result.output


def test_info(runner, isolated_config_env):
    result = invoke(runner, isolated_config_env, "info")
    assert result.exit_code == 0
    assert "mapskin version" in result.output


def test_presets(runner, isolated_config_env):
    result = invoke(runner, isolated_config_env, "presets")
    assert result.exit_code == 0
    assert "nocturne" in result.output


def test_missing_config_file(runner, tmp_path):
    result = runner.invoke(cli, ["--config", str(tmp_path / "nope.yaml"), "info"])
    assert result.exit_code == 2


def test_classify_json(runner, isolated_config_env):
    style = str(isolated_config_env / "style.json")
    result = invoke(runner, isolated_config_env, "classify", style, "--json")

    assert result.exit_code == 0, result.output
    groups = json.loads(result.stdout)
    assert groups["water"] == ["water", "waterway-river"]
    assert groups["roadsMajor"] == ["road-primary"]


def test_classify_missing_style(runner, isolated_config_env):
    missing = str(isolated_config_env / "missing.json")
    result = invoke(runner, isolated_config_env, "classify", missing)
    assert result.exit_code == 1
    assert "Could not load style" in result.output


def test_entities_json(runner, isolated_config_env):
    style = str(isolated_config_env / "style.json")
    result = invoke(runner, isolated_config_env, "entities", style, "--json")

    assert result.exit_code == 0, result.output
    rows = json.loads(result.stdout)
    assert rows[0]["key"] == "transportation"
    assert rows[0]["layerCount"] == 2


def test_snapshot_yaml(runner, isolated_config_env):
    style = str(isolated_config_env / "style.json")
    output = isolated_config_env / "out" / "snapshot.yaml"
    result = invoke(
        runner, isolated_config_env, "snapshot", style, "-o", str(output), "--format", "yaml"
    )

    assert result.exit_code == 0, result.output
    data = yaml.safe_load(output.read_text(encoding="utf-8"))
    assert data["basemap"] == "custom"
    assert data["componentStyles"]["waterColor"] == "#a0c8f0"


def test_snapshot_reconciled(runner, isolated_config_env):
    style = str(isolated_config_env / "style.json")
    output = isolated_config_env / "config.json"
    result = invoke(runner, isolated_config_env, "snapshot", style, "-o", str(output), "--reconciled")

    assert result.exit_code == 0, result.output
    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["camera"]["zoom"] == 12.4
    assert "creative" in data


def test_apply_preset(runner, isolated_config_env):
    style = str(isolated_config_env / "style.json")
    output = isolated_config_env / "editorial.json"
    saved = isolated_config_env / "editorial-config.yaml"
    result = invoke(
        runner,
        isolated_config_env,
        "apply",
        style,
        "--preset",
        "editorial",
        "-o",
        str(output),
        "--save-config",
        str(saved),
    )

    assert result.exit_code == 0, result.output
    layers = {layer["id"]: layer for layer in json.loads(output.read_text(encoding="utf-8"))["layers"]}
    assert layers["background"]["paint"]["background-color"] == "#f2ece2"
    assert layers["water"]["paint"]["fill-color"] == "#b4cfdd"
    assert "markers-core" in layers

    config = yaml.safe_load(saved.read_text(encoding="utf-8"))
    assert config["markerStyles"]["labelMode"] == "indexName"


def test_apply_saved_config(runner, isolated_config_env):
    style = str(isolated_config_env / "style.json")
    saved = isolated_config_env / "saved.yaml"
    saved.write_text(
        yaml.safe_dump({"componentStyles": {"waterColor": "#ff0000"}}), encoding="utf-8"
    )
    output = isolated_config_env / "restyled.json"
    result = invoke(runner, isolated_config_env, "apply", style, "--config", str(saved), "-o", str(output))

    assert result.exit_code == 0, result.output
    layers = {layer["id"]: layer for layer in json.loads(output.read_text(encoding="utf-8"))["layers"]}
    assert layers["water"]["paint"]["fill-color"] == "#ff0000"


def test_apply_unknown_preset(runner, isolated_config_env):
    style = str(isolated_config_env / "style.json")
    result = invoke(runner, isolated_config_env, "apply", style, "--preset", "nope")
    assert result.exit_code == 2
    assert "Unknown preset" in result.output


def test_apply_invalid_config(runner, isolated_config_env):
    style = str(isolated_config_env / "style.json")
    saved = isolated_config_env / "saved.yaml"
    saved.write_text(yaml.safe_dump({"camera": {"zoom": 99}}), encoding="utf-8")
    result = invoke(runner, isolated_config_env, "apply", style, "--config", str(saved))
    assert result.exit_code == 2
