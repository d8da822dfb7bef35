"""
kvwatch CLI entry point.

Checks a key vault for expired and soon-expiring secrets and sends the
result to the console, by email or to Slack.
"""

from __future__ import annotations

import argparse
import logging
import sys

from kvwatch import __version__
from kvwatch.config import CredentialBundle, resolve_config
from kvwatch.errors import ConfigError, CredentialError, DeliveryError, VaultAccessError
from kvwatch.observability import configure_logging
from kvwatch.runner import run_check, vault_access_hints

logger = logging.getLogger("kvwatch.cli")

EPILOG = """
Ensure you have the required authentication set up in your environment:
  $ export AZURE_CLIENT_ID=[SERVICE_PRINCIPAL_ID]
  $ export AZURE_CLIENT_SECRET=[SERVICE_PRINCIPAL_PASSWORD]
  $ export AZURE_TENANT_ID=[AZURE_TENANT_ID]

To send email:
  $ export MAILSERVER_PASSWORD=PASSWORD
  $ export MAILSERVER_USER=USER

To send via Slack:
  $ export SLACK_WEBHOOK_URL=URL

Send alert via mail:
  $ kvwatch -v keyvault-name --notifyBy email --to mail@mail.com [--to mail2@mail.com]

Send alert via Slack:
  $ kvwatch -v keyvault-name --notifyBy slack --to channel

If notifyBy is omitted, warnings are printed to the console:
  $ kvwatch -v keyvault-name
"""


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="kvwatch",
        description="Report expired and soon-expiring Azure Key Vault secrets",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"kvwatch {__version__}",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Print debug info",
    )
    parser.add_argument(
        "-v",
        "--vault",
        metavar="VAULT_NAME",
        help="Name of the keyvault to check",
    )
    parser.add_argument(
        "--ignoreTags",
        "--ignore-tags",
        dest="ignore_tags",
        action="append",
        default=[],
        metavar="TAG",
        help="If a secret has any of these tags, it will be ignored (repeatable)",
    )
    parser.add_argument(
        "--notifyBy",
        "--notify-by",
        dest="notify_by",
        default=None,
        metavar="{slack,email}",
        help="How to send alerts. Prints to console if blank",
    )
    parser.add_argument(
        "--to",
        dest="to",
        action="append",
        default=[],
        metavar="RECIPIENT",
        help="Where to send alerts (recipient or slack channel). "
        "If email, can be repeated",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="YAML or JSON config file",
    )
    parser.add_argument(
        "--log-format",
        choices=["human", "json"],
        default=None,
        help="Log output format (default: human)",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(
        level="DEBUG" if args.debug else None,
        format=args.log_format,
    )

    try:
        config = resolve_config(
            vault=args.vault,
            ignore_tags=args.ignore_tags,
            notify_by=args.notify_by,
            to=args.to,
            debug=args.debug,
            config_file=args.config,
        )
    except ConfigError as e:
        logger.error(str(e))
        return e.exit_code

    if config.debug:
        logging.getLogger("kvwatch").setLevel(logging.DEBUG)
    logger.debug(f"Effective config: {config.to_dict()}")

    credentials = CredentialBundle.from_env()

    try:
        run_check(config, credentials)
    except (ConfigError, CredentialError) as e:
        logger.error(str(e))
        return e.exit_code
    except VaultAccessError as e:
        logger.error("Unable to get the secret-list from your keyvault")
        for hint in vault_access_hints(credentials):
            logger.error(hint)
        if credentials.has_vault_credentials:
            logger.error(str(e.__cause__ or e))
        logger.debug("Vault access failure", exc_info=True)
        return e.exit_code
    except DeliveryError as e:
        logger.error(str(e))
        return e.exit_code

    return 0


if __name__ == "__main__":
    sys.exit(main())
