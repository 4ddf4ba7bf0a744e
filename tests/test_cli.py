"""Tests for the trampoline CLI harness."""

import pytest
import yaml
from click.testing import CliRunner

from trampoline.cli import cli, load_batch
from trampoline.hooks import Hook


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    monkeypatch.delenv("TRAMPOLINE_AUTHORIZED_CALLER", raising=False)
    return str(tmp_path / "config.yaml")


def _write_batch(tmp_path, hooks, name="batch.yaml"):
    path = tmp_path / name
    path.write_text(yaml.dump({"hooks": hooks}))
    return str(path)


class TestLoadBatch:
    """Tests for reading batch files."""

    def test_mapping_form(self, tmp_path):
        path = _write_batch(tmp_path, [{"target": "builtin.noop", "budget": 10}])
        assert load_batch(path) == (Hook("builtin.noop", b"", 10),)

    def test_list_form(self, tmp_path):
        path = tmp_path / "batch.yaml"
        path.write_text(yaml.dump([{"target": "a"}, {"target": "b"}]))
        assert [h.target for h in load_batch(str(path))] == ["a", "b"]

    def test_empty_file(self, tmp_path):
        path = tmp_path / "batch.yaml"
        path.write_text("")
        assert load_batch(str(path)) == ()


class TestDescribe:
    """Tests for the describe command."""

    def test_lists_hooks(self, runner, tmp_path):
        batch = _write_batch(tmp_path, [
            {"target": "builtin.noop", "payload": "0xabcd", "budget": 1000},
            {"target": "builtin.revert", "budget": 2000},
        ])
        result = runner.invoke(cli, ["describe", batch])
        assert result.exit_code == 0
        assert "builtin.noop" in result.output
        assert "0xabcd" in result.output
        assert "2000" in result.output

    def test_invalid_batch(self, runner, tmp_path):
        batch = _write_batch(tmp_path, [{"payload": "00"}])
        result = runner.invoke(cli, ["describe", batch])
        assert result.exit_code == 1
        assert "missing target" in result.output


class TestSimulate:
    """Tests for the simulate command."""

    def test_successful_run(self, runner, tmp_path, config_path):
        batch = _write_batch(tmp_path, [
            {"target": "builtin.noop", "budget": 1000},
            {"target": "builtin.revert", "budget": 1000},
        ])
        result = runner.invoke(cli, [
            "simulate", batch, "--budget", "1000000",
            "--caller", "settlement", "--config", config_path,
        ])
        assert result.exit_code == 0, result.output
        assert "2 hooks dispatched" in result.output
        assert "300/1000000" in result.output

    def test_unauthorized_sender(self, runner, tmp_path, config_path):
        batch = _write_batch(tmp_path, [{"target": "builtin.noop", "budget": 1000}])
        result = runner.invoke(cli, [
            "simulate", batch, "--budget", "1000000",
            "--caller", "settlement", "--sender", "mallory", "--config", config_path,
        ])
        assert result.exit_code == 1
        assert "Unauthorized" in result.output

    def test_starvation(self, runner, tmp_path, config_path):
        batch = _write_batch(tmp_path, [{"target": "builtin.burn", "budget": 100000}])
        result = runner.invoke(cli, [
            "simulate", batch, "--budget", "100000",
            "--caller", "settlement", "--config", config_path,
        ])
        assert result.exit_code == 1
        assert "ResourceStarvation" in result.output

    def test_budget_below_overhead(self, runner, tmp_path, config_path):
        batch = _write_batch(tmp_path, [{"target": "builtin.noop", "budget": 1000}])
        result = runner.invoke(cli, [
            "simulate", batch, "--budget", "120",
            "--caller", "settlement", "--config", config_path,
        ])
        assert result.exit_code == 1
        assert "ResourceStarvation" in result.output

    def test_missing_caller(self, runner, tmp_path, config_path):
        batch = _write_batch(tmp_path, [{"target": "builtin.noop"}])
        result = runner.invoke(cli, [
            "simulate", batch, "--budget", "1000", "--config", config_path,
        ])
        assert result.exit_code == 1
        assert "authorized_caller" in result.output

    def test_budget_required(self, runner, tmp_path, config_path):
        batch = _write_batch(tmp_path, [{"target": "builtin.noop"}])
        result = runner.invoke(cli, ["simulate", batch, "--config", config_path])
        assert result.exit_code == 2

    def test_configured_target(self, runner, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.dump({
            "dispatcher": {"authorized_caller": "settlement"},
            "targets": {"custom.spend": "trampoline.targets:spend"},
        }))
        batch = _write_batch(tmp_path, [
            {"target": "custom.spend", "payload": "0x01f4", "budget": 1000},
        ])
        result = runner.invoke(cli, [
            "simulate", batch, "--budget", "100000", "--config", str(config_path),
        ])
        assert result.exit_code == 0, result.output
        assert "650/100000" in result.output
