"""Tests for argument parsing, configuration and the dephub entry point."""
import csv
import json
from unittest.mock import MagicMock, patch

import pytest

import dephub
from args import parse_args
from checkers import Update
from cli_config import apply_cli_overrides, apply_config, load_config
from common.errors import RegistryError
from constants import Constants, ExitCodes, _load_yaml_config

_SAVED = ("REGISTRY_URL_PACKAGIST", "REGISTRY_URL_PYPI", "GITHUB_API_BASE", "REQUEST_TIMEOUT", "REQUIREMENTS_FILE")


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep Constants and the default config location test-local."""
    saved = {name: getattr(Constants, name) for name in _SAVED}
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("DEPHUB_LOG_LEVEL", raising=False)
    yield
    for name, value in saved.items():
        setattr(Constants, name, value)


def _run(argv):
    with pytest.raises(SystemExit) as exc:
        dephub.main(argv)
    return exc.value.code


class TestArgs:
    """Test argument parsing."""

    def test_match_mode(self):
        """The package type is lowercased and match arguments are kept."""
        args = parse_args(["-t", "Composer", "-m", "1.2.3", "^1.0"])
        assert args.package_type == "composer"
        assert args.MATCH == ["1.2.3", "^1.0"]
        assert args.LOG_LEVEL is None

    def test_source_required(self):
        """A source or match argument is required."""
        with pytest.raises(SystemExit):
            parse_args(["-t", "pip"])

    def test_sources_are_exclusive(self):
        """Only one source may be given."""
        with pytest.raises(SystemExit):
            parse_args(["-t", "pip", "-d", ".", "-g", "git@github.com:a/b.git"])

    def test_updates_and_compatible_exclusive(self):
        """Update modes are mutually exclusive."""
        with pytest.raises(SystemExit):
            parse_args(["-t", "pip", "-d", ".", "-u", "--compatible"])

    def test_unknown_type(self):
        """Unsupported package types are rejected."""
        with pytest.raises(SystemExit):
            parse_args(["-t", "npm", "-d", "."])


class TestConfig:
    """Test YAML config loading and application."""

    def test_apply_known_keys(self):
        """Known keys update the settings with coerced values."""
        applied = apply_config({
            "packagist_url": "https://repo.example.com",
            "request_timeout": "5",
            "requirements_file": "reqs.txt",
        })
        assert applied["request_timeout"] == 5
        assert Constants.REGISTRY_URL_PACKAGIST == "https://repo.example.com"
        assert Constants.REQUEST_TIMEOUT == 5
        assert Constants.REQUIREMENTS_FILE == "reqs.txt"

    def test_unknown_and_invalid_values_ignored(self):
        """Unknown keys and invalid values leave the settings alone."""
        timeout = Constants.REQUEST_TIMEOUT
        assert apply_config({"nope": 1, "request_timeout": "soon"}) == {}
        assert apply_config({"request_timeout": -3}) == {}
        assert Constants.REQUEST_TIMEOUT == timeout

    def test_load_from_path(self, tmp_path):
        """An explicit config path is loaded and applied."""
        path = tmp_path / "cfg.yml"
        path.write_text("pypi_url: https://mirror.example.com\n", encoding="utf-8")
        assert load_config(str(path)) == {"pypi_url": "https://mirror.example.com"}
        assert Constants.REGISTRY_URL_PYPI == "https://mirror.example.com"

    def test_default_location(self, tmp_path):
        """The default config location is searched."""
        cfg_dir = tmp_path / ".config" / "dephub"
        cfg_dir.mkdir(parents=True)
        (cfg_dir / "dephub.yml").write_text("request_timeout: 7\n", encoding="utf-8")
        assert _load_yaml_config() == {"request_timeout": 7}

    def test_missing_or_malformed_file(self, tmp_path):
        """Missing, non-mapping and broken YAML files load as empty."""
        assert _load_yaml_config(str(tmp_path / "absent.yml")) == {}
        bad = tmp_path / "bad.yml"
        bad.write_text("- just\n- a list\n", encoding="utf-8")
        assert _load_yaml_config(str(bad)) == {}
        broken = tmp_path / "broken.yml"
        broken.write_text("key: [unclosed\n", encoding="utf-8")
        assert _load_yaml_config(str(broken)) == {}

    def test_cli_override(self):
        """Command line values take precedence over the config file."""
        apply_cli_overrides(MagicMock(REQUIREMENTS_FILE="dev.txt"))
        assert Constants.REQUIREMENTS_FILE == "dev.txt"


class TestMatchCommand:
    """Test -m/--match."""

    def test_match(self, capsys):
        """A satisfied constraint prints true and exits successfully."""
        assert _run(["-t", "composer", "-m", "1.5.0", "^1"]) == ExitCodes.SUCCESS.value
        assert capsys.readouterr().out.strip() == "true"

    def test_no_match(self, capsys):
        """An unsatisfied constraint prints false with its own exit code."""
        assert _run(["-t", "pip", "-m", "2.0", ">=1.0,<2.0"]) == ExitCodes.NO_MATCH.value
        assert capsys.readouterr().out.strip() == "false"

    def test_quiet(self, capsys):
        """Quiet mode prints nothing."""
        assert _run(["-t", "pip", "-q", "-m", "1.0", "1.0"]) == ExitCodes.SUCCESS.value
        assert capsys.readouterr().out == ""

    def test_parse_error(self):
        """A malformed constraint exits with the parse error code."""
        assert _run(["-t", "composer", "-m", "1.0", ">=1.0|<2.0"]) == ExitCodes.PARSE_ERROR.value


class TestSourceCommand:
    """Test -d/--directory and -g/--git."""

    @pytest.fixture
    def composer_project(self, tmp_path):
        project = tmp_path / "project"
        project.mkdir()
        (project / "composer.json").write_text(
            json.dumps({"require": {"monolog/monolog": "^2.0", "psr/log": "^1.0"}}), encoding="utf-8")
        (project / "composer.lock").write_text(
            json.dumps({"packages": [{"name": "monolog/monolog", "version": "2.9.1"}]}), encoding="utf-8")
        return project

    def test_lists_constraints(self, composer_project, capsys):
        """Without a mode the declared constraints are printed as JSON."""
        assert _run(["-t", "composer", "-d", str(composer_project)]) == ExitCodes.SUCCESS.value
        assert json.loads(capsys.readouterr().out) == [
            {"name": "monolog/monolog", "version": "^2.0"},
            {"name": "psr/log", "version": "^1.0"},
        ]

    def test_csv_output_file(self, composer_project, tmp_path):
        """CSV output is written with a header row."""
        out = tmp_path / "out.csv"
        assert _run(["-t", "composer", "-d", str(composer_project), "-o", str(out)]) == ExitCodes.SUCCESS.value
        with open(out, newline="", encoding="utf-8") as fh:
            rows = list(csv.reader(fh))
        assert rows[0] == ["name", "version"]
        assert rows[1] == ["monolog/monolog", "^2.0"]

    def test_json_output_file(self, composer_project, tmp_path):
        """An explicit format overrides the output extension."""
        out = tmp_path / "out.txt"
        assert _run(["-t", "composer", "-d", str(composer_project), "-o", str(out), "-f", "json"]) == 0
        assert len(json.loads(out.read_text(encoding="utf-8"))) == 2

    def test_missing_manifest(self, tmp_path):
        """A missing manifest exits with the file error code."""
        assert _run(["-t", "pip", "-d", str(tmp_path)]) == ExitCodes.FILE_ERROR.value

    def test_unsupported_git_host(self):
        """Unsupported git hosts exit with the file error code."""
        assert _run(["-t", "pip", "-g", "https://gitlab.com/a/b.git"]) == ExitCodes.FILE_ERROR.value

    @patch("dephub.ComposerUpdatesChecker")
    def test_updates(self, mock_checker_cls, composer_project, capsys):
        """The update mode forwards the incompatible-only flag."""
        checker = mock_checker_cls.return_value
        checker.last_updates.return_value = [Update("psr/log", "3.0.0", "PHP-FIG", "https://x", "", "^1.0")]
        code = _run(["-t", "composer", "-d", str(composer_project), "-u", "--incompatible-only"])
        assert code == ExitCodes.SUCCESS.value
        assert checker.last_updates.call_args[1] == {"incompatible_only": True}
        assert json.loads(capsys.readouterr().out)[0]["version"] == "3.0.0"

    @patch("dephub.ComposerUpdatesChecker")
    def test_compatible(self, mock_checker_cls, composer_project, capsys):
        """The compatible mode passes constraints and locked requirements."""
        checker = mock_checker_cls.return_value
        checker.compatible_updates.return_value = []
        code = _run(["-t", "composer", "-d", str(composer_project), "--compatible"])
        assert code == ExitCodes.SUCCESS.value
        constraints, requirements = checker.compatible_updates.call_args[0]
        assert [r.name for r in requirements] == ["monolog/monolog"]
        assert len(constraints) == 2
        assert json.loads(capsys.readouterr().out) == []

    @patch("dephub.PipUpdatesChecker")
    def test_compatible_without_lock(self, mock_checker_cls, tmp_path, capsys):
        """Without a lock file no compatible lookup is made."""
        (tmp_path / "requirements.txt").write_text("requests>=2\n", encoding="utf-8")
        assert _run(["-t", "pip", "-d", str(tmp_path), "--compatible"]) == ExitCodes.SUCCESS.value
        mock_checker_cls.return_value.compatible_updates.assert_not_called()
        assert json.loads(capsys.readouterr().out) == []

    @patch("dephub.git_source")
    def test_registry_error(self, mock_git_source):
        """Registry failures exit with the connection error code."""
        mock_git_source.return_value.constraints.side_effect = RegistryError("github connection error")
        code = _run(["-t", "composer", "-g", "git@github.com:a/b.git", "--ref", "main"])
        assert code == ExitCodes.CONNECTION_ERROR.value
        assert mock_git_source.call_args[1]["ref"] == "main"

    def test_log_file(self, tmp_path):
        """Log output is written to the requested file."""
        log = tmp_path / "dephub.log"
        _run(["-t", "pip", "--logfile", str(log), "-q", "-m", "1.0", "1.0"])
        assert "satisfies" in log.read_text(encoding="utf-8")
