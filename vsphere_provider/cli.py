"""
Command-line driver for the vSphere provider.

Usage:
    vsphere-provider apply   --config pg.json --state pg.state.json
    vsphere-provider refresh --state pg.state.json
    vsphere-provider destroy --state pg.state.json

Connection settings come from VSPHERE_* environment variables.
"""

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from vsphere_provider.config import settings
from vsphere_provider.errors import ProviderError
from vsphere_provider.provider import Provider
from vsphere_provider.resources import HOST_PORT_GROUP

logger = logging.getLogger(__name__)


def _load_json(path: Optional[str]) -> Optional[Dict[str, Any]]:
    if not path or not os.path.exists(path):
        return None
    with open(path, "r", encoding="utf-8") as f:
        content = f.read().strip()
    return json.loads(content) if content else None


def _write_state(path: Optional[str], state: Optional[Dict[str, Any]]) -> None:
    text = json.dumps(state, indent=2, sort_keys=True)
    if not path:
        print(text)
        return
    if state is None:
        if os.path.exists(path):
            os.remove(path)
        return
    with open(path, "w", encoding="utf-8") as f:
        f.write(text + "\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vsphere-provider", description="Manage vSphere host networking declaratively")
    parser.add_argument("--type", default=HOST_PORT_GROUP, help="resource type (default: %(default)s)")
    sub = parser.add_subparsers(dest="command", required=True)

    apply_cmd = sub.add_parser("apply", help="create or update a resource to match its configuration")
    apply_cmd.add_argument("--config", required=True, help="JSON file with the desired attributes")
    apply_cmd.add_argument("--state", help="JSON state file, read then rewritten")

    for name, help_text in (("refresh", "re-read live state"), ("destroy", "delete the resource")):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("--state", required=True, help="JSON state file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    provider = Provider(settings)
    prior_state = _load_json(args.state)

    try:
        if args.command == "apply":
            config = _load_json(args.config)
            if config is None:
                raise ProviderError(f"configuration file {args.config} is missing or empty")
            _write_state(args.state, provider.apply(args.type, config, prior_state))
        elif prior_state is None:
            raise ProviderError(f"no state recorded in {args.state}")
        elif args.command == "refresh":
            state = provider.refresh(args.type, prior_state)
            if state is None:
                logger.warning(f"{args.type} {prior_state.get('id')} no longer exists")
            _write_state(args.state, state)
        else:
            provider.destroy(args.type, prior_state)
            _write_state(args.state, None)
    except ProviderError as e:
        logger.error(str(e))
        return 1
    finally:
        if provider.client is not None:
            provider.client.disconnect_vcenter()
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
