from __future__ import annotations

import json
import logging
import re
import sys
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from sonarqube_provisioner.cli import _LOG_FORMAT, _configure_logging, _resolve_level, app
from sonarqube_provisioner.config.loader import ConfigError
from sonarqube_provisioner.core.state import ResourceInstance
from sonarqube_provisioner.engine.errors import (
    EditionUnsupportedError,
    NotFoundError,
    TransportError,
    ValidationError,
)

runner = CliRunner()


def _strip_ansi(text: str) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


def _instance() -> ResourceInstance:
    return ResourceInstance(
        id="proj1/42",
        resource_type="sonarqube_gitlab_binding",
        name="proj1",
        attributes={"project": "proj1", "repository": "42"},
    )


class TestVersion:
    def test_version_flag(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "sonarqube-provisioner" in result.stdout

    def test_short_version_flag(self) -> None:
        result = runner.invoke(app, ["-V"])
        assert result.exit_code == 0
        assert "sonarqube-provisioner" in result.stdout


class TestValidateCommand:
    @patch("sonarqube_provisioner.config.validate")
    @patch("sonarqube_provisioner.config.load")
    def test_valid(self, mock_load: MagicMock, mock_validate: MagicMock) -> None:
        result = runner.invoke(app, ["validate", "--no-color", "-c", "cfg.yaml"])
        assert result.exit_code == 0
        assert "Configuration is valid." in result.stdout
        mock_load.assert_called_once()
        mock_validate.assert_called_once_with(mock_load.return_value)

    @patch("sonarqube_provisioner.config.validate")
    @patch("sonarqube_provisioner.config.load")
    def test_validation_errors_listed(
        self, mock_load: MagicMock, mock_validate: MagicMock
    ) -> None:
        _ = mock_load
        mock_validate.side_effect = ValidationError(["first problem", "second problem"])

        result = runner.invoke(app, ["validate", "--no-color"])

        assert result.exit_code == 1
        assert "Validation failed:" in result.output
        assert "  - first problem" in result.output
        assert "  - second problem" in result.output

    @patch("sonarqube_provisioner.config.load")
    def test_config_error(self, mock_load: MagicMock) -> None:
        mock_load.side_effect = ConfigError("bad yaml")

        result = runner.invoke(app, ["validate"])

        assert result.exit_code == 1
        assert "Configuration error: bad yaml" in _strip_ansi(result.output)
        assert "Traceback" not in result.output


class TestReadCommand:
    @patch("sonarqube_provisioner.config.read")
    @patch("sonarqube_provisioner.config.load")
    def test_prints_json(self, mock_load: MagicMock, mock_read: MagicMock) -> None:
        mock_read.return_value = _instance()

        result = runner.invoke(app, ["read", "sonarqube_gitlab_binding.proj1", "--id", "proj1/42"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["id"] == "proj1/42"
        assert payload["attributes"]["repository"] == "42"
        mock_read.assert_called_once_with(
            mock_load.return_value, "sonarqube_gitlab_binding.proj1", "proj1/42"
        )

    @patch("sonarqube_provisioner.config.read")
    @patch("sonarqube_provisioner.config.load")
    def test_gone(self, mock_load: MagicMock, mock_read: MagicMock) -> None:
        _ = mock_load
        mock_read.return_value = None

        result = runner.invoke(app, ["read", "sonarqube_permissions.devs", "--id", "r"])

        assert result.exit_code == 2
        assert "no longer exists on the server" in result.stdout

    @patch("sonarqube_provisioner.config.read")
    @patch("sonarqube_provisioner.config.load")
    def test_transport_error(self, mock_load: MagicMock, mock_read: MagicMock) -> None:
        _ = mock_load
        mock_read.side_effect = TransportError(
            method="GET",
            url="https://sonar.example.com/api/permissions/groups",
            caller="PermissionsHandler.read",
            status_code=401,
        )

        result = runner.invoke(app, ["read", "sonarqube_permissions.devs", "--id", "r"])

        assert result.exit_code == 1
        assert "Request failed:" in result.output
        assert "status 401" in result.output

    def test_id_is_required(self) -> None:
        result = runner.invoke(app, ["read", "sonarqube_permissions.devs"])
        assert result.exit_code != 0


class TestImportCommand:
    @patch("sonarqube_provisioner.config.import_resource")
    @patch("sonarqube_provisioner.config.load")
    def test_imports(self, mock_load: MagicMock, mock_import: MagicMock) -> None:
        mock_import.return_value = _instance()

        result = runner.invoke(app, ["import", "sonarqube_gitlab_binding", "proj1/42", "-n", "p"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["name"] == "proj1"
        mock_import.assert_called_once_with(
            mock_load.return_value, "sonarqube_gitlab_binding", "proj1/42", name="p"
        )

    @patch("sonarqube_provisioner.config.import_resource")
    @patch("sonarqube_provisioner.config.load")
    def test_unsupported_edition(self, mock_load: MagicMock, mock_import: MagicMock) -> None:
        _ = mock_load
        mock_import.side_effect = EditionUnsupportedError("GitLab Bindings", "community", "10.4")

        result = runner.invoke(app, ["import", "sonarqube_gitlab_binding", "proj1/42"])

        assert result.exit_code == 1
        assert "Unsupported: GitLab Bindings are not supported" in result.output

    @patch("sonarqube_provisioner.config.import_resource")
    @patch("sonarqube_provisioner.config.load")
    def test_not_found(self, mock_load: MagicMock, mock_import: MagicMock) -> None:
        _ = mock_load
        mock_import.side_effect = NotFoundError("sonarqube_gitlab_binding", "proj1/42")

        result = runner.invoke(app, ["import", "sonarqube_gitlab_binding", "proj1/42"])

        assert result.exit_code == 1
        assert "Not found:" in result.output


@pytest.fixture
def _reset_pkg_logger():
    """Reset the package and transport logger levels after each logging test."""
    yield
    logging.getLogger("sonarqube_provisioner").setLevel(logging.NOTSET)
    logging.getLogger("urllib3").setLevel(logging.NOTSET)


@pytest.mark.usefixtures("_reset_pkg_logger")
class TestConfigureLogging:
    """``basicConfig`` is mocked: pytest's own root handler must stay in place."""

    @patch("logging.basicConfig")
    def test_verbose_flag_configures_info(self, mock_bc: MagicMock) -> None:
        _configure_logging(1)
        mock_bc.assert_called_once_with(
            level=logging.WARNING,
            format=_LOG_FORMAT,
            stream=sys.stderr,
            force=True,
        )
        assert logging.getLogger("sonarqube_provisioner").level == logging.INFO

    @patch("logging.basicConfig")
    def test_double_verbose_configures_debug(self, mock_bc: MagicMock) -> None:
        _configure_logging(2)
        mock_bc.assert_called_once()
        assert logging.getLogger("sonarqube_provisioner").level == logging.DEBUG

    @patch("logging.basicConfig")
    def test_double_verbose_leaves_transport_quiet(self, mock_bc: MagicMock) -> None:
        _configure_logging(2)
        assert logging.getLogger("urllib3").level == logging.NOTSET

    @patch("logging.basicConfig")
    def test_triple_verbose_enables_transport_logs(self, mock_bc: MagicMock) -> None:
        _configure_logging(3)
        mock_bc.assert_called_once()
        assert logging.getLogger("sonarqube_provisioner").level == logging.DEBUG
        assert logging.getLogger("urllib3").level == logging.DEBUG

    @patch("logging.basicConfig")
    def test_no_verbose_stays_unconfigured(self, mock_bc: MagicMock) -> None:
        _configure_logging(0)
        mock_bc.assert_not_called()

    @patch("logging.basicConfig")
    def test_sonar_log_overrides_verbose(
        self, mock_bc: MagicMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SONAR_LOG", "warning")
        _configure_logging(2)
        mock_bc.assert_called_once()
        assert logging.getLogger("sonarqube_provisioner").level == logging.WARNING

    @patch("logging.basicConfig")
    def test_invalid_sonar_log_defaults_to_info(
        self,
        mock_bc: MagicMock,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.setenv("SONAR_LOG", "chatty")
        _configure_logging(0)
        mock_bc.assert_called_once()
        assert logging.getLogger("sonarqube_provisioner").level == logging.INFO
        assert "invalid SONAR_LOG level 'CHATTY'" in capsys.readouterr().err


class TestResolveLevel:
    @pytest.mark.parametrize(
        ("verbose", "expected"),
        [(0, None), (1, logging.INFO), (2, logging.DEBUG), (5, logging.DEBUG)],
    )
    def test_from_flags(self, verbose: int, expected: int | None) -> None:
        assert _resolve_level(verbose) == expected

    def test_env_name_is_case_insensitive(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SONAR_LOG", "Error")
        assert _resolve_level(0) == logging.ERROR
