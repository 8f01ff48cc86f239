"""
Command-line interface for the Soroban Domains client.

This module provides the main CLI entry point with commands for:
- node: Compute the node of a domain or subdomain (offline)
- validate: Check a domain against the registry rules (offline)
- search: Resolve a domain record
- data: Read an attribute stored against a domain node
- reverse: Look up the reverse domain of an address
- health: Check the configured RPC server
- config: Configuration management
"""

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Optional

from . import __version__
from .audit_logger import AuditLogger
from .client import SorobanDomainsClient
from .config import (
    SDKConfig,
    config_to_dict,
    load_config_from_env,
    load_config_from_file,
    save_config_to_file,
)
from .domain_validator import DomainValidator
from .enums import ErrorCode
from .exceptions import (
    ConfigurationError,
    ConfigurationMissingError,
    NotFoundError,
    SorobanDomainsError,
)
from .node_hasher import parse_domain
from .rpc_client import SorobanRpcClient


DEFAULT_CONFIG_PATH = Path.home() / ".soroban_domains" / "config.json"


def resolve_config(config_path: Optional[str]) -> SDKConfig:
    """
    Load configuration from --config, or from the environment.

    Raises:
        ConfigurationError: If an explicit config file is missing or invalid
    """
    if config_path:
        config = load_config_from_file(Path(config_path))
        if config is None:
            raise ConfigurationError(
                code=ErrorCode.CONFIGURATION_MISSING.value,
                message=f"Could not load config from {config_path}",
                details={"path": config_path},
            )
        return config
    return load_config_from_env()


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


async def search_domain(config: SDKConfig, domain: str, sub_domain: Optional[str]) -> dict:
    """Resolve a domain and return its record as a dict."""
    logger = AuditLogger.from_config(config.logging)
    async with SorobanDomainsClient(config, logger=logger) as client:
        record = await client.search_domain(domain, sub_domain=sub_domain)
    return {"type": record.type.value, "value": asdict(record.value)}


async def get_domain_data(config: SDKConfig, node: str, key: str) -> dict:
    """Read one attribute and return it as a dict."""
    logger = AuditLogger.from_config(config.logging)
    async with SorobanDomainsClient(config, logger=logger) as client:
        value = await client.get_domain_data(node, key)
    payload = value.value.hex() if isinstance(value.value, bytes) else value.value
    return {"type": value.type.value, "value": payload}


async def get_reverse_domain(config: SDKConfig, address: str) -> str:
    """Look up the reverse domain of an address."""
    logger = AuditLogger.from_config(config.logging)
    async with SorobanDomainsClient(config, logger=logger) as client:
        return await client.get_reverse_domain(address)


async def check_health(config: SDKConfig) -> dict:
    """Query the health of the configured RPC server."""
    if not config.rpc_url:
        raise ConfigurationMissingError("rpc_url", "A URL of the RPC was not provided")
    async with SorobanRpcClient(config.rpc_url) as rpc:
        return await rpc.get_health()


def _run_network_command(args: argparse.Namespace, coroutine_factory) -> int:
    try:
        config = resolve_config(args.config)
        result = asyncio.run(coroutine_factory(config))
    except NotFoundError as e:
        print(e.message, file=sys.stderr)
        return 1
    except SorobanDomainsError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    if isinstance(result, str):
        print(result)
    else:
        _print_json(result)
    return 0


def cmd_node(args: argparse.Namespace) -> int:
    """Handle the 'node' command."""
    print(parse_domain(args.domain, sub_domain=args.sub, tld=args.tld))
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle the 'validate' command."""
    result = DomainValidator().validate(args.domain)
    if result.valid:
        print(f"{result.canonical_domain} is valid")
        return 0

    print(f"Invalid domain: {result.error.message}", file=sys.stderr)
    return 1


def cmd_search(args: argparse.Namespace) -> int:
    """Handle the 'search' command."""
    return _run_network_command(
        args,
        lambda config: search_domain(config, args.domain, args.sub),
    )


def cmd_data(args: argparse.Namespace) -> int:
    """Handle the 'data' command."""
    return _run_network_command(
        args,
        lambda config: get_domain_data(config, args.node, args.key),
    )


def cmd_reverse(args: argparse.Namespace) -> int:
    """Handle the 'reverse' command."""
    return _run_network_command(
        args,
        lambda config: get_reverse_domain(config, args.address),
    )


def cmd_health(args: argparse.Namespace) -> int:
    """Handle the 'health' command."""
    return _run_network_command(args, check_health)


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    config_path = Path(args.path) if args.path else DEFAULT_CONFIG_PATH

    if args.action == "show":
        try:
            config = load_config_from_file(config_path)
        except ConfigurationError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1
        if config is None:
            print(f"No configuration found at: {config_path}")
            print("Use 'config init' to create a default configuration.")
            return 1

        print(f"Configuration from: {config_path}")
        _print_json(config_to_dict(config))
        return 0

    elif args.action == "init":
        if config_path.exists() and not args.force:
            print(f"Configuration already exists at: {config_path}")
            print("Use --force to overwrite.")
            return 1

        config = SDKConfig.with_published_contracts(rpc_url=args.rpc_url)
        try:
            save_config_to_file(config, config_path)
        except OSError as e:
            print(f"Error saving config: {e}", file=sys.stderr)
            return 1
        print(f"Configuration created at: {config_path}")
        return 0

    return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="soroban-domains",
        description="Resolve Soroban Domains names, attributes and reverse domains",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # 'node' command
    node_parser = subparsers.add_parser(
        "node",
        help="Compute the node of a domain",
    )
    node_parser.add_argument("domain", help="Second level label (e.g., stellar)")
    node_parser.add_argument("--sub", "-s", help="Subdomain label (e.g., payments)")
    node_parser.add_argument("--tld", "-t", help="Top level label (default: xlm)")
    node_parser.set_defaults(func=cmd_node)

    # 'validate' command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Check a domain against the registry rules",
    )
    validate_parser.add_argument("domain", help="Domain to validate (e.g., stellar.xlm)")
    validate_parser.set_defaults(func=cmd_validate)

    # 'search' command
    search_parser = subparsers.add_parser(
        "search",
        help="Resolve a domain record",
    )
    search_parser.add_argument("domain", help="Second level label (e.g., stellar)")
    search_parser.add_argument("--sub", "-s", help="Subdomain label")
    search_parser.add_argument("--config", "-c", help="Path to configuration file")
    search_parser.set_defaults(func=cmd_search)

    # 'data' command
    data_parser = subparsers.add_parser(
        "data",
        help="Read an attribute stored against a domain node",
    )
    data_parser.add_argument("node", help="Hex encoded domain node")
    data_parser.add_argument("key", help="Attribute key (e.g., WEBSITE)")
    data_parser.add_argument("--config", "-c", help="Path to configuration file")
    data_parser.set_defaults(func=cmd_data)

    # 'reverse' command
    reverse_parser = subparsers.add_parser(
        "reverse",
        help="Look up the reverse domain of an address",
    )
    reverse_parser.add_argument("address", help="Stellar address (G...)")
    reverse_parser.add_argument("--config", "-c", help="Path to configuration file")
    reverse_parser.set_defaults(func=cmd_reverse)

    # 'health' command
    health_parser = subparsers.add_parser(
        "health",
        help="Check the health of the RPC server",
    )
    health_parser.add_argument("--config", "-c", help="Path to configuration file")
    health_parser.set_defaults(func=cmd_health)

    # 'config' command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
    )
    config_parser.add_argument(
        "action",
        choices=["show", "init"],
        help="Configuration action",
    )
    config_parser.add_argument("--path", "-p", help="Path to configuration file")
    config_parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Force overwrite existing configuration",
    )
    config_parser.add_argument(
        "--rpc-url",
        help="RPC URL stored in a new configuration",
    )
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
