"""環境変数からの Settings 読み込みを検証するテスト。

観点:
    - 未設定時の既定値
    - 不正な PORT / LOG_LEVEL の拒否
"""

import pytest

from pets.config import DEFAULT_MONGODB_URI, Settings


def test_defaults_when_environment_is_empty():
    """環境変数が空の場合に既定値となることを確認する。"""
    settings = Settings.from_env({})
    assert settings.mongodb_uri == DEFAULT_MONGODB_URI
    assert settings.mongodb_db is None
    assert settings.port == 3000
    assert settings.log_level == "INFO"


def test_values_are_read_from_environment():
    """各環境変数が反映されることを確認する。"""
    settings = Settings.from_env(
        {
            "MONGODB_URI": "mongodb://db.example:27017/pets",
            "MONGODB_DB": "pets_test",
            "PORT": "8080",
            "LOG_LEVEL": "debug",
        }
    )
    assert settings.mongodb_uri == "mongodb://db.example:27017/pets"
    assert settings.mongodb_db == "pets_test"
    assert settings.port == 8080
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize("port", ["abc", "0", "70000"])
def test_invalid_port_is_rejected(port):
    """整数でない・範囲外の PORT は ValueError になることを確認する。"""
    with pytest.raises(ValueError):
        Settings.from_env({"PORT": port})


def test_unknown_log_level_is_rejected():
    """未知の LOG_LEVEL は ValueError になることを確認する。"""
    with pytest.raises(ValueError):
        Settings.from_env({"LOG_LEVEL": "LOUD"})
