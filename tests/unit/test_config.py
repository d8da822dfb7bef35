"""
Tests for kvwatch configuration resolution.

Tests cover:
- Source priority (host inputs, flags, config file)
- Ignore-tag merging
- Channel parsing
- Credential loading
"""

from __future__ import annotations

import json

import pytest

from kvwatch.config import (
    ChatSettings,
    CredentialBundle,
    EffectiveConfig,
    NotifyChannel,
    SmtpSettings,
    load_config_file,
    read_host_inputs,
    resolve_config,
)
from kvwatch.errors import ConfigError


class TestNotifyChannel:
    """Tests for NotifyChannel parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, NotifyChannel.CONSOLE),
            ("", NotifyChannel.CONSOLE),
            ("console", NotifyChannel.CONSOLE),
            ("email", NotifyChannel.EMAIL),
            ("EMAIL", NotifyChannel.EMAIL),
            ("slack", NotifyChannel.CHAT),
            ("chat", NotifyChannel.CHAT),
        ],
    )
    def test_from_string(self, value, expected):
        """Known channel names map to channels."""
        assert NotifyChannel.from_string(value) == expected

    def test_from_string_unknown(self):
        """Unknown channel names are a config error."""
        with pytest.raises(ConfigError, match="Unknown notification channel"):
            NotifyChannel.from_string("pigeon")


class TestReadHostInputs:
    """Tests for host input reading."""

    def test_reads_prefixed_variables(self):
        """INPUT_* variables are read with lower-case names."""
        env = {
            "INPUT_VAULT": "vault-a",
            "INPUT_NOTIFY-VIA": "email",
            "PATH": "/usr/bin",
        }
        assert read_host_inputs(env) == {"vault": "vault-a", "notify-via": "email"}

    def test_blank_inputs_are_absent(self):
        """Blank inputs are ignored."""
        assert read_host_inputs({"INPUT_VAULT": "  ", "INPUT_TO": ""}) == {}

    def test_underscores_map_to_hyphens(self):
        """INPUT_IGNORE_TAGS is read as ignore-tags."""
        assert read_host_inputs({"INPUT_IGNORE_TAGS": "a"}) == {"ignore-tags": "a"}


class TestResolveConfig:
    """Tests for resolve_config."""

    def test_flags_only(self):
        """Flags are used when no other source is present."""
        config = resolve_config(
            vault="my-vault",
            ignore_tags=["ignore"],
            notify_by="email",
            to=["a@example.com", "b@example.com"],
            environ={},
        )

        assert config.vault_name == "my-vault"
        assert config.ignore_tags == frozenset({"ignore"})
        assert config.notify_channel == NotifyChannel.EMAIL
        assert config.recipients == ("a@example.com", "b@example.com")
        assert config.debug is False

    def test_defaults(self):
        """Unspecified settings fall back to defaults."""
        config = resolve_config(vault="v", environ={})

        assert config.notify_channel == NotifyChannel.CONSOLE
        assert config.recipients == ()
        assert config.ignore_tags == frozenset()
        assert config.smtp == SmtpSettings()
        assert config.chat == ChatSettings()

    def test_missing_vault_raises(self):
        """No vault from any source is a config error."""
        with pytest.raises(ConfigError, match="No vault specified"):
            resolve_config(environ={})

    def test_host_inputs_override_flags(self):
        """Host inputs win over flags for the same setting."""
        env = {
            "INPUT_VAULT": "host-vault",
            "INPUT_NOTIFY-VIA": "slack",
            "INPUT_TO": "#host-channel",
        }
        config = resolve_config(
            vault="flag-vault",
            notify_by="email",
            to=["flag@example.com"],
            environ=env,
        )

        assert config.vault_name == "host-vault"
        assert config.notify_channel == NotifyChannel.CHAT
        assert config.recipients == ("#host-channel",)

    def test_host_vault_satisfies_requirement(self):
        """The vault may come only from host inputs."""
        config = resolve_config(environ={"INPUT_VAULT": "host-vault"})
        assert config.vault_name == "host-vault"

    def test_ignore_tags_are_combined(self):
        """Ignore tags from flags and host inputs are unioned."""
        config = resolve_config(
            vault="v",
            ignore_tags=["flag-tag"],
            environ={"INPUT_IGNORE-TAGS": "host-a, host-b\nhost-c"},
        )
        assert config.ignore_tags == frozenset({"flag-tag", "host-a", "host-b", "host-c"})

    def test_multi_value_host_recipients(self):
        """Host recipients are split on commas and newlines."""
        config = resolve_config(
            vault="v",
            environ={"INPUT_TO": "a@example.com,b@example.com\nc@example.com"},
        )
        assert config.recipients == ("a@example.com", "b@example.com", "c@example.com")

    def test_flag_recipients_are_not_split(self):
        """Repeated --to values keep embedded commas."""
        config = resolve_config(
            vault="v",
            to=["Doe, John <j@example.com>", "b@example.com"],
            environ={},
        )
        assert config.recipients == ("Doe, John <j@example.com>", "b@example.com")

    @pytest.mark.parametrize("value", ["true", "True", "1", "yes"])
    def test_host_debug_enables_debug(self, value):
        """A truthy debug input enables debug."""
        config = resolve_config(vault="v", environ={"INPUT_DEBUG": value})
        assert config.debug is True

    def test_host_debug_false_keeps_flag(self):
        """A falsy debug input does not disable the flag."""
        config = resolve_config(vault="v", debug=True, environ={"INPUT_DEBUG": "false"})
        assert config.debug is True

    def test_empty_notify_flag_means_console(self):
        """--notifyBy '' selects the console."""
        config = resolve_config(vault="v", notify_by="", environ={})
        assert config.notify_channel == NotifyChannel.CONSOLE

    def test_reads_os_environ_by_default(self, monkeypatch):
        """Without an explicit environ, os.environ is read."""
        monkeypatch.setenv("INPUT_VAULT", "env-vault")
        assert resolve_config().vault_name == "env-vault"


class TestConfigFile:
    """Tests for config file loading."""

    def test_yaml_file(self, tmp_path):
        """YAML config files are loaded."""
        path = tmp_path / "kvwatch.yaml"
        path.write_text(
            "vault: file-vault\n"
            "notify_by: email\n"
            "to:\n  - ops@example.com\n"
            "ignore_tags: [file-tag]\n"
            "smtp:\n  host: relay.example.com\n  port: 587\n  use_tls: true\n"
            "chat:\n  username: Bot\n"
        )
        config = resolve_config(config_file=path, environ={})

        assert config.vault_name == "file-vault"
        assert config.notify_channel == NotifyChannel.EMAIL
        assert config.recipients == ("ops@example.com",)
        assert config.ignore_tags == frozenset({"file-tag"})
        assert config.smtp.host == "relay.example.com"
        assert config.smtp.port == 587
        assert config.smtp.use_tls is True
        assert config.chat.username == "Bot"
        assert config.chat.icon_emoji == ":warning:"

    def test_json_file(self, tmp_path):
        """JSON config files are loaded."""
        path = tmp_path / "kvwatch.json"
        path.write_text(json.dumps({"vault": "json-vault", "debug": True}))
        config = resolve_config(config_file=path, environ={})

        assert config.vault_name == "json-vault"
        assert config.debug is True

    def test_flags_override_file(self, tmp_path):
        """Flags win over the config file, tags are combined."""
        path = tmp_path / "kvwatch.yml"
        path.write_text("vault: file-vault\nto: [file@example.com]\nignore_tags: [a]\n")
        config = resolve_config(
            vault="flag-vault",
            to=["flag@example.com"],
            ignore_tags=["b"],
            config_file=path,
            environ={},
        )

        assert config.vault_name == "flag-vault"
        assert config.recipients == ("flag@example.com",)
        assert config.ignore_tags == frozenset({"a", "b"})

    def test_missing_file(self, tmp_path):
        """A missing file is a config error."""
        with pytest.raises(ConfigError, match="Unable to read"):
            load_config_file(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        """Unparseable YAML is a config error."""
        path = tmp_path / "bad.yaml"
        path.write_text("vault: [unclosed\n")
        with pytest.raises(ConfigError, match="Unable to parse"):
            load_config_file(path)

    def test_non_mapping(self, tmp_path):
        """A top-level list is rejected."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="must contain a mapping"):
            load_config_file(path)

    def test_empty_file(self, tmp_path):
        """An empty YAML file is an empty config."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config_file(path) == {}


class TestEffectiveConfig:
    """Tests for EffectiveConfig."""

    def test_vault_url_from_name(self):
        """A vault name maps to its vault.azure.net URL."""
        config = EffectiveConfig(vault_name="my-vault")
        assert config.vault_url == "https://my-vault.vault.azure.net"

    def test_vault_url_passthrough(self):
        """A full URL is used as is."""
        config = EffectiveConfig(vault_name="https://custom.vault.azure.cn")
        assert config.vault_url == "https://custom.vault.azure.cn"

    def test_to_dict(self):
        """to_dict uses sorted tags and channel names."""
        config = EffectiveConfig(
            vault_name="v",
            ignore_tags=frozenset({"b", "a"}),
            notify_channel=NotifyChannel.CHAT,
            recipients=("#c",),
        )
        data = config.to_dict()

        assert data["ignore_tags"] == ["a", "b"]
        assert data["notify_by"] == "chat"
        assert data["to"] == ["#c"]

    def test_is_immutable(self):
        """EffectiveConfig cannot be modified after creation."""
        config = EffectiveConfig(vault_name="v")
        with pytest.raises(AttributeError):
            config.vault_name = "other"  # type: ignore[misc]


class TestCredentialBundle:
    """Tests for CredentialBundle."""

    def test_from_env(self):
        """Credentials are read from the given environment."""
        env = {
            "AZURE_CLIENT_ID": "id",
            "AZURE_CLIENT_SECRET": "secret",
            "AZURE_TENANT_ID": "tenant",
            "MAILSERVER_USER": "user",
            "MAILSERVER_PASSWORD": "pw",
            "SLACK_WEBHOOK_URL": "https://hooks.slack.com/x",
        }
        creds = CredentialBundle.from_env(env)

        assert creds.has_vault_credentials is True
        assert creds.mail_user == "user"
        assert creds.mail_password == "pw"
        assert creds.slack_webhook_url == "https://hooks.slack.com/x"

    def test_partial_vault_credentials(self):
        """Any missing service-principal variable counts as missing."""
        creds = CredentialBundle.from_env({"AZURE_CLIENT_ID": "id", "AZURE_TENANT_ID": "t"})
        assert creds.has_vault_credentials is False

    def test_empty_values_are_none(self):
        """Empty variables are treated as unset."""
        creds = CredentialBundle.from_env({"MAILSERVER_USER": ""})
        assert creds.mail_user is None
