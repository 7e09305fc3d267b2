from __future__ import annotations

import pytest

from remotefs.adapters.config import loader as loader_module
from remotefs.adapters.config.loader import ConfigLoader, resolve_connection_config
from remotefs.core.exceptions import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "ADDRESS", "USER", "PASSWORD", "KEY", "PASSPHRASE",
        "HOST_KEY_POLICY", "KNOWN_HOSTS", "TIMEOUT",
    ):
        monkeypatch.delenv(f"REMOTEFS_{name}", raising=False)


def test_toml_connection_table_is_flattened(tmp_path):
    path = tmp_path / "remotefs.toml"
    path.write_text(
        '[connection]\naddress = "files.example.com:2222"\nuser = "alice"\ntimeout = 7\n'
    )

    cfg = ConfigLoader().load(toml_path=path, use_env=False)

    assert cfg == {"address": "files.example.com:2222", "user": "alice", "timeout": 7}


def test_missing_or_broken_toml(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        ConfigLoader().load_toml(tmp_path / "absent.toml")

    broken = tmp_path / "broken.toml"
    broken.write_text("address = \n")
    with pytest.raises(ConfigError, match="Failed to parse"):
        ConfigLoader().load_toml(broken)


def test_precedence_cli_over_env_over_toml(tmp_path, monkeypatch):
    path = tmp_path / "remotefs.toml"
    path.write_text('address = "toml-host"\nuser = "toml-user"\npassword = "toml-pw"\n')
    monkeypatch.setenv("REMOTEFS_USER", "env-user")
    monkeypatch.setenv("REMOTEFS_PASSWORD", "12345")
    monkeypatch.setenv("REMOTEFS_TIMEOUT", "2.5")

    cfg = ConfigLoader().load(
        toml_path=path,
        cli_overrides={"password": "cli-pw", "user": None},
    )

    assert cfg["address"] == "toml-host"
    assert cfg["user"] == "env-user"
    assert cfg["password"] == "cli-pw"
    assert cfg["timeout"] == 2.5


def test_env_secrets_stay_strings(monkeypatch):
    monkeypatch.setenv("REMOTEFS_PASSWORD", "0042")

    assert ConfigLoader().load_env() == {"password": "0042"}


def test_resolve_password_config():
    config = resolve_connection_config(
        {"address": "host:2200", "user": "bob", "password": "pw", "timeout": "3"}
    )

    assert config.address == "host:2200"
    assert config.user == "bob"
    assert config.credential.method == "password"
    assert config.host_key_policy == "reject"
    assert config.session_options() == {
        "host_key_policy": "reject",
        "known_hosts": None,
        "timeout": 3.0,
    }


def test_key_wins_over_password():
    config = resolve_connection_config(
        {"address": "host", "user": "bob", "password": "pw", "key": "~/.ssh/id", "passphrase": "pp"}
    )

    assert config.credential.method == "key"
    assert config.credential.key_path == "~/.ssh/id"
    assert config.credential.passphrase == "pp"


@pytest.mark.parametrize(
    "cfg, message",
    [
        ({"user": "bob", "password": "pw"}, "No address"),
        ({"address": "host", "password": "pw"}, "No user"),
        ({"address": "host", "user": "bob"}, "No credential"),
        ({"address": "host:x", "user": "bob", "password": "pw"}, "invalid port"),
        ({"address": "host", "user": "bob", "password": "pw", "timeout": "soon"}, "Invalid timeout"),
    ],
)
def test_resolve_rejects_incomplete_config(cfg, message):
    with pytest.raises(ConfigError, match=message):
        resolve_connection_config(cfg)


def test_ssh_config_alias_fills_gaps(monkeypatch):
    monkeypatch.setattr(
        loader_module,
        "load_ssh_config",
        lambda alias: {"host": "10.1.2.3", "user": "deploy", "port": 2022, "key_file": "/keys/deploy"},
    )

    config = resolve_connection_config({"ssh_config": "prod"})

    assert config.address == "10.1.2.3:2022"
    assert config.user == "deploy"
    assert config.credential.key_path == "/keys/deploy"
