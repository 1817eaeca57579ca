"""Command-line interface for Cloud Deployer."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import List, Optional

from .config import AppConfig, load_config
from .errors import DeployerError
from .interaction import AutoResponseHandler
from .orchestrator import FanOutReport
from .utils.logging import get_logger, set_verbose
from .workflow import DeploymentWorkflow

logger = get_logger(__name__)


@dataclass
class CLIContext:
    """Context captured from CLI arguments."""

    config: AppConfig
    assume_yes: bool = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cloud-deployer",
        description="Deploy code and prepare environments on the hosting platform.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a JSON config file overriding defaults.",
    )
    parser.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Answer yes to production confirmations (non-interactive runs).",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    def add(name: str, help_text: str, *positionals: str) -> argparse.ArgumentParser:
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("app", help="Application identifier")
        for positional in positionals:
            sub.add_argument(positional)
        return sub

    add("prod:deploy", "Deploy a branch/tag to production with backups, config and cache purge", "ref")
    add("preprod:deploy", "Deploy a branch/tag to a non-production environment", "env", "ref")
    add("preprod:deploy:all", "Deploy a branch/tag to every non-production environment", "ref")
    add("prod:config-update", "Update configuration and database in production")
    add("preprod:config-update", "Update configuration and database in a non-production environment", "env")
    add("preprod:config-update:all", "Update configuration and database in every non-production environment")
    add("prod:prepare", "Back up every production database ahead of a deployment")
    add("preprod:prepare", "Copy databases and files between environments after backing both up", "env_from", "env_to")
    add("preprod:prepare:all", "Refresh every non-production environment from production")
    add("prod:purge-cache", "Purge the cache for every production domain")
    add("preprod:purge-cache", "Purge the cache for every domain of a non-production environment", "env")
    add("task:info", "Show details of a platform task", "task_id")

    return parser


def _build_context(args: argparse.Namespace) -> CLIContext:
    config = load_config(args.config)
    return CLIContext(config=config, assume_yes=args.yes)


def _report_fan_out(report: FanOutReport) -> int:
    for name in report.attempted:
        if name in report.failed:
            print(f"  {name}: FAILED - {report.failed[name]}")
        else:
            print(f"  {name}: ok")
    if report.ok:
        return 0
    logger.error("%d of %d environment(s) failed", len(report.failed), len(report.attempted))
    return 1


def dispatch_command(args: argparse.Namespace, workflow: Optional[DeploymentWorkflow] = None) -> int:
    if workflow is None:
        context = _build_context(args)
        handler = AutoResponseHandler(always_confirm=True) if context.assume_yes else None
        workflow = DeploymentWorkflow(config=context.config, interaction_handler=handler)

    command = args.command
    app = args.app

    if command == "task:info":
        for line in workflow.task_info(app, args.task_id):
            print(line)
        return 0

    single = {
        "prod:deploy": lambda: workflow.deploy_prod(app, args.ref),
        "preprod:deploy": lambda: workflow.deploy_preprod(app, args.env, args.ref),
        "prod:config-update": lambda: workflow.config_update_prod(app),
        "preprod:config-update": lambda: workflow.config_update_preprod(app, args.env),
        "prod:prepare": lambda: workflow.prepare_prod(app),
        "preprod:prepare": lambda: workflow.prepare_preprod(app, args.env_from, args.env_to),
        "prod:purge-cache": lambda: workflow.purge_cache_prod(app),
        "preprod:purge-cache": lambda: workflow.purge_cache_preprod(app, args.env),
    }
    fan_out = {
        "preprod:deploy:all": lambda: workflow.deploy_preprod_all(app, args.ref),
        "preprod:config-update:all": lambda: workflow.config_update_preprod_all(app),
        "preprod:prepare:all": lambda: workflow.prepare_preprod_all(app),
    }

    if command in single:
        outcomes = single[command]()
        if outcomes is None:
            print("Cancelled, nothing was changed.")
            return 0
        for outcome in outcomes:
            logger.debug(outcome.describe())
        print(f"{command} finished: {len(outcomes)} step(s) completed")
        return 0

    if command in fan_out:
        return _report_fan_out(fan_out[command]())

    raise ValueError(f"Unsupported command: {command}")


def run_cli(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    set_verbose(args.verbose)
    try:
        return dispatch_command(args)
    except DeployerError as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1
    except (FileNotFoundError, ValueError) as exc:
        logger.error("%s", exc)
        return 2
