import json

import pytest
import yaml
from click.testing import CliRunner

from searpc import __version__
from searpc.cli import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def home(tmp_path, monkeypatch, sample_module):
    """searpc home with a config registering the sample Greeter."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("SEARPC_HOME", str(home))
    (home / "config.yaml").write_text(yaml.safe_dump({
        "services": [f"{sample_module}:Greeter"],
        "log_level": "ERROR",
        "log_format": "structured",
        "console": False,
    }))
    return home


def _last_json_line(output: str) -> dict:
    return json.loads(output.strip().splitlines()[-1])


def test_version(runner):
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_init_command_creates_config(runner, tmp_path, monkeypatch):
    home = tmp_path / "custom_home"
    monkeypatch.setenv("SEARPC_HOME", str(home))

    result = runner.invoke(main, ["init"])
    assert result.exit_code == 0
    assert "Initialized searpc config" in result.output

    cfg = yaml.safe_load((home / "config.yaml").read_text())
    assert cfg["services"] == []
    assert cfg["log_format"] == "pretty"


def test_init_does_not_overwrite_without_force(runner, tmp_path, monkeypatch):
    home = tmp_path / "custom_home"
    monkeypatch.setenv("SEARPC_HOME", str(home))
    home.mkdir(parents=True)
    (home / "config.yaml").write_text("existing: true")

    result = runner.invoke(main, ["init"])
    assert result.exit_code == 1
    assert "Config already exists" in result.output
    assert (home / "config.yaml").read_text() == "existing: true"


def test_init_force_overwrites(runner, tmp_path, monkeypatch):
    home = tmp_path / "custom_home"
    monkeypatch.setenv("SEARPC_HOME", str(home))
    home.mkdir(parents=True)
    (home / "config.yaml").write_text("existing: true")

    result = runner.invoke(main, ["init", "--force"])
    assert result.exit_code == 0
    assert "services" in yaml.safe_load((home / "config.yaml").read_text())


def test_services_lists_functions(runner, home):
    result = runner.invoke(main, ["services"])
    assert result.exit_code == 0
    assert "Greeter" in result.output
    assert "add (2 args)" in result.output
    assert "hello (1 args)" in result.output


def test_services_without_config(runner, tmp_path, monkeypatch):
    monkeypatch.setenv("SEARPC_HOME", str(tmp_path / "missing"))
    result = runner.invoke(main, ["services"])
    assert result.exit_code == 1
    assert "Config not loaded" in result.output


def test_call_success(runner, home):
    result = runner.invoke(main, ["call", "Greeter", '["add", 2, 3]'])
    assert result.exit_code == 0
    assert _last_json_line(result.output) == {"ret": 5, "err_code": 0, "err_msg": ""}


def test_call_from_stdin(runner, home):
    result = runner.invoke(main, ["call", "Greeter", "-"], input='["hello", "ann"]')
    assert result.exit_code == 0
    assert _last_json_line(result.output)["ret"] == "hello ann"


def test_call_error_envelope_exit_zero(runner, home):
    """Error envelopes are output, not CLI failures."""
    result = runner.invoke(main, ["call", "Nope", '["add", 2, 3]'])
    assert result.exit_code == 0
    assert _last_json_line(result.output)["err_code"] == 501


def test_call_check_flag(runner, home):
    result = runner.invoke(main, ["call", "--check", "Greeter", '["add", 2]'])
    assert result.exit_code == 1
    assert _last_json_line(result.output)["err_code"] == 512


def test_explicit_config_option(runner, tmp_path, sample_module, monkeypatch):
    monkeypatch.setenv("SEARPC_HOME", str(tmp_path / "unused"))
    path = tmp_path / "alt.yaml"
    path.write_text(yaml.safe_dump({
        "services": [f"{sample_module}:Greeter"],
        "console": False,
    }))
    result = runner.invoke(main, ["--config", str(path), "call", "Greeter", '["hello", "x"]'])
    assert result.exit_code == 0
    assert _last_json_line(result.output)["ret"] == "hello x"
