#!/usr/bin/env python3
"""
brodeploy command line.

    brodeploy core                     deploy the protocol on top of BRO token + oracle
    brodeploy full --dry-run           print what a full deploy would do
    brodeploy core --redeploy staking_v1
    brodeploy plan pair                same as ``pair --dry-run``
    brodeploy show-artifact            print recorded addresses for CHAINID
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from tabulate import tabulate

from brodeploy.config.logging_config import get_cli_logger
from brodeploy.config.settings import Settings, load_env
from brodeploy.helpers.artifact_store import ARTIFACT_FIELDS, ArtifactStore
from brodeploy.helpers.terra_client import TerraClient
from brodeploy.setup.flows import FLOWS, describe_flow, run_flow

logger = logging.getLogger("brodeploy.cli")

# swapped in tests
client_factory = TerraClient


def _settings(args: argparse.Namespace) -> Settings:
    load_env(args.env_file)
    return Settings.from_env(
        network_id=args.chain_id,
        config_dir=args.config_dir,
        artifacts_dir=args.artifacts_dir,
        wasm_dir=args.wasm_dir,
    )


def _print_plan(flow: str, rows: list[list[str]]) -> None:
    print(f"\nPlan for '{flow}':")
    print(tabulate(rows, headers=["#", "Step", "Action", "Reads"], tablefmt="grid"))


def _cmd_flow(args: argparse.Namespace) -> int:
    get_cli_logger(args.debug, args.log_dir)
    try:
        settings = _settings(args)
        client = client_factory(settings)
        if args.dry_run:
            _print_plan(args.flow, describe_flow(args.flow, settings, client, redeploy=args.redeploy))
            return 0
        run_flow(args.flow, settings, client, redeploy=args.redeploy, log_dir=args.log_dir)
        return 0
    except Exception as e:
        logger.error(f"{args.flow} deploy failed: {e}")
        logger.debug("Traceback", exc_info=True)
        return 1


def _cmd_plan(args: argparse.Namespace) -> int:
    args.dry_run = True
    return _cmd_flow(args)


def _cmd_show_artifact(args: argparse.Namespace) -> int:
    get_cli_logger(args.debug, args.log_dir)
    try:
        settings = _settings(args)
        store = ArtifactStore(settings.artifacts_dir)
        artifact = store.load(settings.network_id)
        if args.json:
            print(json.dumps(artifact.to_dict(), indent=2))
            return 0
        rows = [[name, artifact.get(name) or "-"] for name in ARTIFACT_FIELDS]
        print(f"\n{store.path_for(settings.network_id)}:")
        print(tabulate(rows, headers=["Contract", "Address"], tablefmt="grid"))
        return 0
    except Exception as e:
        logger.error(f"Error: {e}")
        return 1


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--env-file", help="Path to .env file to load before reading CHAINID/ADMIN_ADDRESS/MNEMONIC/LCD")
    common.add_argument("--chain-id", help="Override CHAINID")
    common.add_argument("--config-dir", type=Path, help="Directory holding <chain-id>.json configs (default ./config)")
    common.add_argument("--artifacts-dir", type=Path, help="Directory holding <chain-id>.json artifacts (default ./artifacts)")
    common.add_argument("--wasm-dir", type=Path, help="Directory holding compiled .wasm files (default WASM_DIR or ../../artifacts)")
    common.add_argument("--log-dir", type=Path, help="Directory for log files (default BRODEPLOY_LOG_DIR or ./logs)")
    common.add_argument("--debug", action="store_true", help="Verbose logging")

    parser = argparse.ArgumentParser(prog="brodeploy", description="Brotocol contract deployment on Terra")
    sub = parser.add_subparsers(dest="cmd")

    for flow in FLOWS:
        p_flow = sub.add_parser(flow, parents=[common], help=f"Run the '{flow}' deploy flow")
        p_flow.add_argument("--dry-run", action="store_true", help="Resolve and print the plan; send no transactions")
        p_flow.add_argument(
            "--redeploy",
            nargs="+",
            default=[],
            metavar="NAME",
            help="Artifact fields to deploy again even if already recorded (e.g. staking_v1)",
        )
        p_flow.set_defaults(func=_cmd_flow, flow=flow)

    p_plan = sub.add_parser("plan", parents=[common], help="Print the resolved plan of a flow")
    p_plan.add_argument("flow", choices=list(FLOWS))
    p_plan.add_argument("--redeploy", nargs="+", default=[], metavar="NAME")
    p_plan.set_defaults(func=_cmd_plan)

    p_show = sub.add_parser("show-artifact", parents=[common], help="Print recorded contract addresses")
    p_show.add_argument("--json", action="store_true", help="Print raw JSON")
    p_show.set_defaults(func=_cmd_show_artifact)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 2
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
