from pathlib import Path

import pytest
from pydantic import ValidationError

from core.config import AppSettings, build_server_config, load_settings, parse_listen_address
from core.errors import ConfigError


@pytest.fixture
def settings(monkeypatch, tmp_path):
    for name in ("ADDR", "SHUTDOWN_GRACE_SECONDS", "CERT_FILE", "KEY_FILE", "ACCESS_LOG"):
        monkeypatch.delenv(f"TEST_DEPLOY_{name}", raising=False)
    monkeypatch.chdir(tmp_path)
    return AppSettings(_env_file=None)


@pytest.mark.parametrize(
    ("addr", "expected"),
    [
        (":4000", (None, 4000)),
        ("127.0.0.1:8443", ("127.0.0.1", 8443)),
        ("localhost:80", ("localhost", 80)),
        ("[::1]:443", ("::1", 443)),
        ("0.0.0.0:0", ("0.0.0.0", 0)),
    ],
)
def test_parse_listen_address(addr, expected):
    assert parse_listen_address(addr) == expected


def test_empty_address_uses_scheme_default_port():
    assert parse_listen_address("") == (None, 443)
    assert parse_listen_address("", tls=False) == (None, 80)


@pytest.mark.parametrize(
    "addr",
    ["localhost", "::1:80", "host:", "[::1]", "[::1]443", ":70000", ":no-such-service-xyz"],
)
def test_parse_listen_address_rejects_garbage(addr):
    with pytest.raises(ConfigError):
        parse_listen_address(addr)


def test_defaults_match_the_documented_flags(settings, tls_material):
    config = build_server_config(settings, cert_file=tls_material.cert, key_file=tls_material.key)

    assert config.address == ":4000"
    assert config.host is None
    assert config.port == 4000
    assert config.shutdown_grace == 15.0
    assert (config.read_timeout, config.write_timeout, config.idle_timeout) == (5.0, 10.0, 60.0)
    assert config.static_prefix == "/static/"
    assert config.scheme == "https"


def test_cli_overrides_win_over_settings(settings, ui_tree):
    config = build_server_config(
        settings,
        addr="127.0.0.1:9000",
        wait="1m",
        template_path=ui_tree.template,
        static_dir=ui_tree.static,
        tls=False,
        access_log=False,
    )

    assert config.port == 9000
    assert config.shutdown_grace == 60.0
    assert config.template_path == ui_tree.template
    assert config.static_dir == ui_tree.static
    assert config.access_log is False
    assert config.scheme == "http"


def test_invalid_wait_is_a_config_error(settings):
    with pytest.raises(ConfigError, match="--wait"):
        build_server_config(settings, wait="soon", tls=False)


def test_tls_without_material_is_a_config_error(settings):
    with pytest.raises(ConfigError, match="cert_file"):
        build_server_config(settings)


def test_config_error_exit_code():
    assert ConfigError.exit_code == 2


def test_config_is_immutable(settings):
    config = build_server_config(settings, tls=False)
    with pytest.raises(ValidationError):
        config.port = 1


def test_settings_accept_go_durations_from_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TEST_DEPLOY_SHUTDOWN_GRACE_SECONDS", "1m30s")
    monkeypatch.setenv("TEST_DEPLOY_ADDR", ":8443")
    monkeypatch.setenv("TEST_DEPLOY_CERT_FILE", "")

    settings = AppSettings(_env_file=None)

    assert settings.shutdown_grace_seconds == 90.0
    assert settings.addr == ":8443"
    assert settings.cert_file is None


def test_relative_ui_paths_resolve_against_cwd_first(settings, tmp_path):
    (tmp_path / "ui" / "static").mkdir(parents=True)
    config = build_server_config(settings, tls=False)
    assert config.static_dir.resolve() == (tmp_path / "ui" / "static").resolve()


def test_absolute_ui_paths_are_kept(settings):
    config = build_server_config(settings, tls=False, static_dir=Path("/nonexistent/static"))
    assert config.static_dir == Path("/nonexistent/static")


def test_load_settings_maps_bad_env_to_config_error(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TEST_DEPLOY_SHUTDOWN_GRACE_SECONDS", "abc")

    with pytest.raises(ConfigError, match="shutdown_grace_seconds"):
        load_settings()


def test_log_level_is_normalised(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TEST_DEPLOY_LOG_LEVEL", " debug ")

    assert AppSettings(_env_file=None).log_level == "DEBUG"


def test_unknown_log_level_is_rejected(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TEST_DEPLOY_LOG_LEVEL", "chatty")

    with pytest.raises(ValidationError, match="unknown log level"):
        AppSettings(_env_file=None)
