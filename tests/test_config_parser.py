from pathlib import Path

import pytest

from jsmon.config_parser import DEFAULT_CONFIG, ConfigParser
from jsmon.exceptions import ApiKeyNotFoundError


def test_parse_config_reads_values(tmp_path: Path) -> None:
    config_path = tmp_path / "config.txt"
    config_path.write_text(
        "# comment\n"
        "api_key = 'abc-123'\n"
        "base_url = https://jsmon.example.test/api/\n"
        "timeout = 5\n"
        "max_retries = 4\n"
        "retry_delay = 0\n",
        encoding="utf-8",
    )

    config = ConfigParser(str(config_path)).parse_config()

    assert config["api_key"] == "abc-123"
    assert config["base_url"] == "https://jsmon.example.test/api"
    assert config["timeout"] == 5.0
    assert config["max_retries"] == 4
    assert config["retry_delay"] == 0.0


def test_invalid_values_fall_back_to_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "config.txt"
    config_path.write_text(
        "timeout = soon\nmax_retries = many\nbase_url = ftp://x\nunknown = 1\nbroken line\n",
        encoding="utf-8",
    )

    config = ConfigParser(str(config_path)).parse_config()

    assert config["timeout"] == DEFAULT_CONFIG["timeout"]
    assert config["max_retries"] == DEFAULT_CONFIG["max_retries"]
    assert config["base_url"] == DEFAULT_CONFIG["base_url"]


def test_missing_file_creates_default_config(tmp_path: Path) -> None:
    config_path = tmp_path / "nested" / "config.txt"

    config = ConfigParser(str(config_path)).parse_config()

    assert config_path.exists()
    assert config == DEFAULT_CONFIG
    # 新建的默认配置可以被再次读取
    assert ConfigParser(str(config_path)).parse_config() == DEFAULT_CONFIG


def test_env_api_key_overrides_file(monkeypatch, tmp_path: Path) -> None:
    config_path = tmp_path / "config.txt"
    config_path.write_text("api_key = from-file\n", encoding="utf-8")
    monkeypatch.setenv("JSMON_API_KEY", "from-env")

    assert ConfigParser(str(config_path)).load_api_key() == "from-env"


def test_config_path_from_env(isolated_config: Path) -> None:
    isolated_config.write_text("api_key = stored\n", encoding="utf-8")
    assert ConfigParser().load_api_key() == "stored"


def test_load_api_key_raises_when_missing(tmp_path: Path) -> None:
    with pytest.raises(ApiKeyNotFoundError):
        ConfigParser(str(tmp_path / "config.txt")).load_api_key()
