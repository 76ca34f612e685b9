"""Tests for the command-line entry point."""

import logging
from unittest.mock import patch

import pytest

from peerdeploy.config import CONFIG_ENV_VAR
from peerdeploy.errors import UsageError
from peerdeploy.runner import LOG_LEVEL_ENV_VAR, USAGE, configure_logging, main, parse_args


class TestParseArgs:
    def test_flags_and_hosts(self):
        invocation = parse_args(["--mode", "test", "--", "10.0.0.1", "10.0.0.2"])

        assert invocation.flags == ["--mode", "test"]
        assert invocation.hosts == ["10.0.0.1", "10.0.0.2"]
        assert not invocation.show_help

    def test_no_flags(self):
        invocation = parse_args(["--", "a"])

        assert invocation.flags == []
        assert invocation.hosts == ["a"]

    @pytest.mark.parametrize("argv", [[], ["--mode", "x"], ["--mode", "x", "--"]])
    def test_missing_hosts(self, argv):
        with pytest.raises(UsageError):
            parse_args(argv)

    @pytest.mark.parametrize(
        "argv", [["-h"], ["--help"], ["--mode", "x", "--", "a", "--help"], ["-hx"]]
    )
    def test_help(self, argv):
        assert parse_args(argv).show_help

    def test_flag_resembling_help_prefix_is_forwarded(self):
        invocation = parse_args(["--hold", "--", "a"])

        assert invocation.flags == ["--hold"]
        assert not invocation.show_help


class TestMain:
    @pytest.fixture(autouse=True)
    def isolated_config(self, tmp_path, monkeypatch):
        """Run from an empty directory with no config file."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)

    def test_help_exits_zero(self, capsys):
        assert main(["--help"]) == 0
        assert USAGE in capsys.readouterr().out

    def test_no_hosts_exits_nonzero_without_building(self, capsys):
        with patch("peerdeploy.runner.Deployment") as deployment:
            assert main(["--mode", "test"]) == 1

        deployment.assert_not_called()
        assert "Usage:" in capsys.readouterr().err

    def test_build_failure(self, tmp_path, monkeypatch, capsys):
        config = tmp_path / "deploy.yaml"
        config.write_text("build_command: ['sh', '-c', 'exit 7']\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config))

        with patch("peerdeploy.fanout.FanOut.run") as fan_out_run:
            assert main(["--", "10.0.0.1"]) == 1

        fan_out_run.assert_not_called()
        err = capsys.readouterr().err
        assert "Build failed" in err
        assert "exited with status 7" in err

    def test_missing_config_file(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "missing.yaml"))

        assert main(["--", "a"]) == 1
        assert "Config file not found" in capsys.readouterr().err

    def test_invalid_config(self, tmp_path, monkeypatch, capsys):
        (tmp_path / "peerdeploy.yaml").write_text("launch_delay: soon\n")

        assert main(["--", "a"]) == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_success_passes_hosts_and_flags(self):
        with patch("peerdeploy.runner.Deployment") as deployment:
            assert main(["--mode", "test", "--", "a", "b"]) == 0

        args = deployment.call_args.args
        assert args[1] == ["a", "b"]
        assert args[2] == ["--mode", "test"]
        deployment.return_value.run.assert_called_once_with()


class TestConfigureLogging:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("debug", logging.DEBUG),
            ("ERROR", logging.ERROR),
            ("LOGGER", logging.WARNING),
            ("basicConfig", logging.WARNING),
            ("nonsense", logging.WARNING),
        ],
    )
    def test_level_from_env(self, value, expected):
        with patch("peerdeploy.runner.logging.basicConfig") as basic_config:
            configure_logging({LOG_LEVEL_ENV_VAR: value})

        assert basic_config.call_args.kwargs["level"] == expected

    def test_default_level(self):
        with patch("peerdeploy.runner.logging.basicConfig") as basic_config:
            configure_logging({})

        assert basic_config.call_args.kwargs["level"] == logging.WARNING
