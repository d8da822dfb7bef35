"""
Configuration for kvwatch.

Resolves command-line flags, host-provided inputs and config files into
an immutable EffectiveConfig, plus a CredentialBundle read from the
environment.
"""

from kvwatch.config.settings import (
    ChatSettings,
    CredentialBundle,
    EffectiveConfig,
    NotifyChannel,
    SmtpSettings,
    load_config_file,
    read_host_inputs,
    resolve_config,
)

__all__ = [
    "ChatSettings",
    "CredentialBundle",
    "EffectiveConfig",
    "NotifyChannel",
    "SmtpSettings",
    "load_config_file",
    "read_host_inputs",
    "resolve_config",
]
