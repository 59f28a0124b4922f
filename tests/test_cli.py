import json
from pathlib import Path
from unittest.mock import patch

import pytest

from authy_client import cli
from authy_client import logging_config
from conftest import make_response


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch("authy_client.cli.setup_logging"):
        yield


@pytest.fixture
def config_file(tmp_path: Path) -> str:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"api_key": "cli-key", "sandbox": True}), encoding="utf-8")
    return str(path)


def test_init_writes_config(tmp_path: Path, capsys):
    config_dir = tmp_path / "authy"

    assert cli.main(["init", "--config-dir", str(config_dir), "--api-key", "abc", "--sandbox"]) == 0

    data = json.loads((config_dir / "config.json").read_text())
    assert data["api_key"] == "abc"
    assert data["sandbox"] is True
    assert "sandbox" in capsys.readouterr().out


def test_init_refuses_to_overwrite(tmp_path: Path):
    (tmp_path / "config.json").write_text("{}")
    assert cli.main(["init", "--config-dir", str(tmp_path), "--api-key", "abc"]) == 1
    assert cli.main(["init", "--config-dir", str(tmp_path), "--api-key", "abc", "--force"]) == 0


def test_init_without_api_key(tmp_path: Path, monkeypatch, capsys):
    monkeypatch.delenv("AUTHY_API_KEY", raising=False)
    assert cli.main(["init", "--config-dir", str(tmp_path)]) == 1
    assert "Api key is missing" in capsys.readouterr().err


def test_register(config_file, http, capsys):
    http.request.return_value = make_response(200, {"success": True, "user": {"id": 77}})

    assert cli.main(["register", "jane@example.com", "5551234567", "--config", config_file]) == 0

    assert "77" in capsys.readouterr().out
    args, kwargs = http.request.call_args
    assert args[1] == "http://sandbox-api.authy.com/protected/json/users/new"
    assert kwargs["params"]["api_key"] == "cli-key"


def test_verify_invalid_token_exit_code(config_file, http, capsys):
    assert cli.main(["verify", "1234", "12", "--config", config_file]) == 1

    http.request.assert_not_called()
    assert "is invalid" in capsys.readouterr().err


def test_verify_verbose_prints_raw_response(config_file, http, capsys):
    http.request.return_value = make_response(200, text='{"token": "is valid"}')

    assert cli.main(["verify", "1234", "0000000", "--config", config_file, "-v"]) == 0
    assert capsys.readouterr().out.strip() == '{"token": "is valid"}'


def test_remove_empty_id(config_file, http, capsys):
    assert cli.main(["remove", " ", "--config", config_file]) == 1

    http.request.assert_not_called()
    assert "Error: User id is missing" in capsys.readouterr().err


def test_sms_remote_failure(config_file, http, capsys):
    http.request.return_value = make_response(503, {"success": False, "message": "Service unavailable"})

    assert cli.main(["sms", "1234", "--locale", "de", "--config", config_file]) == 1

    assert "service_unavailable" in capsys.readouterr().err
    assert http.request.call_args[1]["params"]["locale"] == "de"


def test_call(config_file, http, capsys):
    http.request.return_value = make_response(200, {"success": True, "cellphone": "+1-XXX-XXX-XX67"})

    assert cli.main(["call", "1234", "--force", "--config", config_file]) == 0
    assert "+1-XXX-XXX-XX67" in capsys.readouterr().out


def test_config_from_environment(monkeypatch, tmp_path: Path, http):
    monkeypatch.setenv("AUTHY_API_CONFIG", str(tmp_path / "absent.json"))
    monkeypatch.setenv("AUTHY_API_KEY", "env-key")
    http.request.return_value = make_response(200, {"token": "is valid"})

    assert cli.main(["verify", "1", "123456"]) == 0
    assert http.request.call_args[1]["params"]["api_key"] == "env-key"


def test_missing_config_file(tmp_path: Path, capsys):
    assert cli.main(["sms", "1", "--config", str(tmp_path / "nope.json")]) == 1
    assert "Config file not found" in capsys.readouterr().err


def test_unknown_log_level_option(config_file, http, capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["sms", "1", "--config", config_file, "--log-level", "verbose"])

    assert excinfo.value.code == 2
    assert "--log-level" in capsys.readouterr().err
    http.request.assert_not_called()


def test_log_level_option_is_case_insensitive(config_file, http):
    assert cli.main(["sms", "1", "--config", config_file, "--log-level", "debug"]) == 0
    cli.setup_logging.assert_called_once_with("DEBUG")


def test_unknown_log_level_from_environment(config_file, http, monkeypatch, capsys):
    monkeypatch.setenv("AUTHY_LOG_LEVEL", "bogus")

    with patch("authy_client.cli.setup_logging", wraps=logging_config.setup_logging):
        assert cli.main(["sms", "1", "--config", config_file]) == 1

    assert "Error: Unknown log level: BOGUS" in capsys.readouterr().err
    http.request.assert_not_called()


@pytest.mark.parametrize("command, expected", [
    ("sms", "SMS not sent: Ignored"),
    ("call", "Call not started: Ignored"),
])
def test_ignored_delivery(config_file, http, capsys, command, expected):
    http.request.return_value = make_response(
        200, {"success": True, "ignored": True, "message": "Ignored: not needed for smartphones."})

    assert cli.main([command, "1234", "--config", config_file]) == 0
    assert expected in capsys.readouterr().out
