from pathlib import Path

import pytest
from pydantic import ValidationError

from netbird_exporter.config import Settings, load_config
from netbird_exporter.exceptions import ConfigError

ENV_VARS = (
    "NETBIRD_API_URL",
    "NETBIRD_API_TOKEN",
    "NETBIRD_API_TIMEOUT",
    "LISTEN_ADDRESS",
    "METRICS_PATH",
    "LOG_LEVEL",
    "LOG_FILE",
    "SHUTDOWN_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate each test from the caller's environment and working directory."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults():
    settings = load_config()

    assert settings.netbird_api_url == "https://api.netbird.io"
    assert settings.netbird_api_token is None
    assert settings.netbird_api_timeout == 30
    assert settings.listen_address == ":8080"
    assert settings.metrics_path == "/metrics"
    assert settings.log_level == "info"
    assert settings.shutdown_timeout == 30


def test_environment_override(monkeypatch):
    monkeypatch.setenv("NETBIRD_API_URL", "https://netbird.example.com")
    monkeypatch.setenv("NETBIRD_API_TOKEN", "nbp_secret")
    monkeypatch.setenv("LISTEN_ADDRESS", "127.0.0.1:9100")
    monkeypatch.setenv("METRICS_PATH", "/prom")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = load_config()

    assert settings.netbird_api_url == "https://netbird.example.com"
    assert settings.require_token() == "nbp_secret"
    assert settings.listen_host == "127.0.0.1"
    assert settings.listen_port == 9100
    assert settings.metrics_path == "/prom"
    assert settings.log_level == "debug"


def test_require_token_missing():
    settings = load_config()

    with pytest.raises(ConfigError, match="NETBIRD_API_TOKEN environment variable is required"):
        settings.require_token()


def test_blank_token_counts_as_missing(monkeypatch):
    monkeypatch.setenv("NETBIRD_API_TOKEN", "   ")

    assert load_config().netbird_api_token is None


@pytest.mark.parametrize(
    "raw, expected",
    [("/metrics", "/metrics"), ("prom", "/prom"), ("", "/metrics"), ("  /x  ", "/x")],
)
def test_metrics_path_normalised(raw, expected):
    assert Settings(metrics_path=raw).metrics_path == expected


@pytest.mark.parametrize(
    "address, host, port",
    [(":8080", "0.0.0.0", 8080), ("127.0.0.1:9000", "127.0.0.1", 9000), ("[::1]:8080", "::1", 8080)],
)
def test_listen_address_split(address, host, port):
    settings = Settings(listen_address=address)

    assert settings.listen_host == host
    assert settings.listen_port == port


@pytest.mark.parametrize("address", ["8080", "localhost", "host:port", ":99999"])
def test_invalid_listen_address(address):
    with pytest.raises(ValidationError):
        Settings(listen_address=address)


def test_non_positive_timeout_rejected():
    with pytest.raises(ValidationError):
        Settings(netbird_api_timeout=0)


def test_yaml_file(tmp_path):
    config_file = tmp_path / "custom.yaml"
    config_file.write_text("netbird_api_token: from-file\nmetrics_path: stats\nlisten_address: ':9999'\n")

    settings = load_config(config_file)

    assert settings.netbird_api_token == "from-file"
    assert settings.metrics_path == "/stats"
    assert settings.listen_port == 9999


def test_environment_beats_yaml(tmp_path, monkeypatch):
    config_file = tmp_path / "custom.yaml"
    config_file.write_text("log_level: warning\n")
    monkeypatch.setenv("LOG_LEVEL", "error")

    assert load_config(config_file).log_level == "error"


def test_default_yaml_picked_up_from_cwd(tmp_path):
    (tmp_path / "netbird-exporter.yaml").write_text("netbird_api_url: http://localhost:33073\n")

    assert load_config().netbird_api_url == "http://localhost:33073"


def test_missing_config_file():
    with pytest.raises(ConfigError, match="Config file not found"):
        load_config(Path("does-not-exist.yaml"))


def test_unreadable_yaml_is_ignored(tmp_path):
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("key: [unclosed\n")

    assert load_config(config_file).metrics_path == "/metrics"


def test_overrides_win_and_none_is_ignored(monkeypatch):
    monkeypatch.setenv("LISTEN_ADDRESS", ":9100")
    monkeypatch.setenv("METRICS_PATH", "/from-env")

    settings = load_config(listen_address="127.0.0.1:7000", metrics_path=None)

    assert settings.listen_address == "127.0.0.1:7000"
    assert settings.metrics_path == "/from-env"


def test_dotenv_file_is_read(tmp_path):
    (tmp_path / ".env").write_text("NETBIRD_API_TOKEN=from-dotenv\nMETRICS_PATH=/dotenv\n")

    settings = load_config()

    assert settings.netbird_api_token == "from-dotenv"
    assert settings.metrics_path == "/dotenv"


def test_environment_beats_dotenv(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("NETBIRD_API_TOKEN=from-dotenv\n")
    monkeypatch.setenv("NETBIRD_API_TOKEN", "from-env")

    assert load_config().netbird_api_token == "from-env"


def test_dotenv_beats_yaml(tmp_path):
    (tmp_path / ".env").write_text("LOG_LEVEL=debug\n")
    (tmp_path / "netbird-exporter.yaml").write_text("log_level: error\n")

    assert load_config().log_level == "debug"
