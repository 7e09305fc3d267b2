from __future__ import annotations

from unittest.mock import MagicMock

import paramiko
import pytest

from remotefs.core.exceptions import ConfigError, ConnectError, ConnectFailure, ProtocolInitError
from remotefs.domain.files import connect as connect_module
from remotefs.domain.files.client import ParamikoFileClient
from remotefs.domain.files.hostkeys import HostKeyRejected, RejectUnknownPolicy
from remotefs.domain.files.service import RemoteFileSession


class CreatedClients(list):
    """SSHClient mocks in creation order; ``behaviours`` configure the next ones"""

    def __init__(self):
        super().__init__()
        self.behaviours = []


@pytest.fixture
def ssh_clients(monkeypatch):
    """Replace paramiko.SSHClient; returns the list of created instances"""
    created = CreatedClients()

    def factory():
        client = MagicMock(name=f"SSHClient#{len(created)}")
        if created.behaviours:
            created.behaviours.pop(0)(client)
        created.append(client)
        return client

    monkeypatch.setattr(connect_module.paramiko, "SSHClient", factory)
    return created


def _ok(client):
    client.open_sftp.return_value = MagicMock(name="SFTPClient")


def test_password_connect_returns_ready_session(ssh_clients):
    ssh_clients.behaviours.append(_ok)

    session = RemoteFileSession.connect_with_password("files.example.com:2222", "alice", "s3cret")

    ssh = ssh_clients[0]
    kwargs = ssh.connect.call_args.kwargs
    assert kwargs["hostname"] == "files.example.com"
    assert kwargs["port"] == 2222
    assert kwargs["username"] == "alice"
    assert kwargs["password"] == "s3cret"
    assert kwargs["look_for_keys"] is False
    assert kwargs["allow_agent"] is False
    assert kwargs["timeout"] is None
    assert isinstance(ssh.set_missing_host_key_policy.call_args.args[0], RejectUnknownPolicy)

    sftp = ssh.open_sftp.return_value
    session.close()
    sftp.close.assert_called_once()
    ssh.close.assert_called_once()


def test_default_port_is_22(ssh_clients):
    ssh_clients.behaviours.append(_ok)

    RemoteFileSession.connect_with_password("files.example.com", "alice", "pw").close()

    assert ssh_clients[0].connect.call_args.kwargs["port"] == 22


def test_rejected_auth_leaves_nothing_open_and_next_connect_works(ssh_clients):
    def reject(client):
        client.connect.side_effect = paramiko.AuthenticationException("Authentication failed.")

    ssh_clients.behaviours.extend([reject, _ok])

    with pytest.raises(ConnectError) as excinfo:
        RemoteFileSession.connect_with_password("host:22", "alice", "wrong")

    assert excinfo.value.reason is ConnectFailure.AUTH_REJECTED
    assert isinstance(excinfo.value.__cause__, paramiko.AuthenticationException)
    failed = ssh_clients[0]
    failed.close.assert_called_once()
    failed.open_sftp.assert_not_called()

    session = RemoteFileSession.connect_with_password("host:22", "alice", "right")
    assert not session.closed
    session.close()


def test_unreachable_host(ssh_clients):
    def refuse(client):
        client.connect.side_effect = ConnectionRefusedError(111, "Connection refused")

    ssh_clients.behaviours.append(refuse)

    with pytest.raises(ConnectError) as excinfo:
        RemoteFileSession.connect_with_password("10.0.0.1:22", "bob", "pw")

    assert excinfo.value.reason is ConnectFailure.UNREACHABLE
    assert "failed to connect to server 10.0.0.1:22" in str(excinfo.value)
    ssh_clients[0].close.assert_called_once()


def test_unknown_host_key_is_rejected(ssh_clients):
    def unknown_host(client):
        client.connect.side_effect = HostKeyRejected("server host not found in known_hosts")

    ssh_clients.behaviours.append(unknown_host)

    with pytest.raises(ConnectError) as excinfo:
        RemoteFileSession.connect_with_password("host", "bob", "pw")

    assert excinfo.value.reason is ConnectFailure.HOST_KEY_REJECTED


def test_ssh_negotiation_failure(ssh_clients):
    def bad_banner(client):
        client.connect.side_effect = paramiko.SSHException("Error reading SSH protocol banner")

    ssh_clients.behaviours.append(bad_banner)

    with pytest.raises(ConnectError) as excinfo:
        RemoteFileSession.connect_with_password("host", "bob", "pw")

    assert excinfo.value.reason is ConnectFailure.PROTOCOL


def test_sftp_start_failure_closes_transport(ssh_clients):
    def no_subsystem(client):
        client.open_sftp.side_effect = paramiko.SSHException("Channel closed.")

    ssh_clients.behaviours.append(no_subsystem)

    with pytest.raises(ProtocolInitError) as excinfo:
        RemoteFileSession.connect_with_password("host", "bob", "pw")

    assert excinfo.value.reason is ConnectFailure.PROTOCOL
    assert "failed to create SFTP client" in str(excinfo.value)
    ssh_clients[0].close.assert_called_once()


def test_connect_options_are_forwarded(ssh_clients, tmp_path):
    ssh_clients.behaviours.append(_ok)
    known = tmp_path / "known_hosts"
    known.write_text("")
    policy = paramiko.WarningPolicy()

    RemoteFileSession.connect_with_password(
        "host", "bob", "pw", host_key_policy=policy, timeout=5.0, known_hosts=str(known)
    ).close()

    ssh = ssh_clients[0]
    ssh.load_host_keys.assert_called_once_with(str(known))
    ssh.set_missing_host_key_policy.assert_called_once_with(policy)
    assert ssh.connect.call_args.kwargs["timeout"] == 5.0
    assert ssh.connect.call_args.kwargs["banner_timeout"] == 5.0


def test_known_hosts_path_is_expanded(ssh_clients, tmp_path, monkeypatch):
    ssh_clients.behaviours.append(_ok)
    monkeypatch.setenv("HOME", str(tmp_path))
    (tmp_path / "extra_hosts").write_text("")

    RemoteFileSession.connect_with_password("host", "bob", "pw", known_hosts="~/extra_hosts").close()

    ssh_clients[0].load_host_keys.assert_called_once_with(str(tmp_path / "extra_hosts"))


def test_unreadable_known_hosts_is_a_config_error(ssh_clients, tmp_path):
    def missing_file(client):
        client.load_host_keys.side_effect = FileNotFoundError(2, "No such file or directory")

    ssh_clients.behaviours.append(missing_file)

    with pytest.raises(ConfigError, match="failed to load known_hosts file"):
        RemoteFileSession.connect_with_password(
            "host", "bob", "pw", known_hosts=str(tmp_path / "absent")
        )

    ssh = ssh_clients[0]
    ssh.connect.assert_not_called()
    ssh.close.assert_called_once()


def test_malformed_address_fails_before_connecting(ssh_clients):
    with pytest.raises(ConfigError):
        RemoteFileSession.connect_with_password("host:notaport", "bob", "pw")
    assert ssh_clients == []


# ============================================================
# Private keys
# ============================================================

def test_private_key_connect(ssh_clients, tmp_path):
    ssh_clients.behaviours.append(_ok)
    key = paramiko.ECDSAKey.generate()
    key_path = tmp_path / "id_ecdsa"
    key.write_private_key_file(str(key_path))

    session = RemoteFileSession.connect_with_private_key("host", "carol", str(key_path))

    pkey = ssh_clients[0].connect.call_args.kwargs["pkey"]
    assert pkey.get_fingerprint() == key.get_fingerprint()
    assert "password" not in ssh_clients[0].connect.call_args.kwargs
    assert isinstance(session, RemoteFileSession)
    session.close()


def test_encrypted_private_key_needs_passphrase(ssh_clients, tmp_path):
    ssh_clients.behaviours.append(_ok)
    key = paramiko.ECDSAKey.generate()
    key_path = tmp_path / "id_ecdsa"
    key.write_private_key_file(str(key_path), password="hunter2")

    with pytest.raises(ConnectError) as excinfo:
        RemoteFileSession.connect_with_private_key("host", "carol", str(key_path))
    assert excinfo.value.reason is ConnectFailure.KEY_UNPARSABLE
    assert ssh_clients == []

    RemoteFileSession.connect_with_private_key(
        "host", "carol", str(key_path), passphrase="hunter2"
    ).close()
    assert len(ssh_clients) == 1


def test_unreadable_private_key(ssh_clients, tmp_path):
    with pytest.raises(ConnectError) as excinfo:
        RemoteFileSession.connect_with_private_key("host", "carol", str(tmp_path / "missing"))

    assert excinfo.value.reason is ConnectFailure.KEY_UNREADABLE
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)
    assert ssh_clients == []


def test_unparsable_private_key(ssh_clients, tmp_path):
    key_path = tmp_path / "garbage"
    key_path.write_text("this is not a key\n")

    with pytest.raises(ConnectError) as excinfo:
        RemoteFileSession.connect_with_private_key("host", "carol", str(key_path))

    assert excinfo.value.reason is ConnectFailure.KEY_UNPARSABLE
    assert ssh_clients == []


def test_open_file_client_wraps_sftp():
    ssh = MagicMock()

    client = connect_module.open_file_client(ssh)

    assert isinstance(client, ParamikoFileClient)
    assert client.sftp is ssh.open_sftp.return_value
