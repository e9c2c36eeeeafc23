from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Optional

from loguru import logger

from psc_toolbox.core.loader import discover_tools, get_tool
from psc_toolbox.core.logging import configure_logging


def _cmd_list(args: argparse.Namespace) -> int:
    for tool in discover_tools():
        print(f"{tool.meta.id}\t{tool.meta.version}\t{tool.meta.name}")
    return 0


def _cmd_defaults(args: argparse.Namespace) -> int:
    tool = get_tool(args.tool)
    print(json.dumps(tool.default_inputs(), indent=2))
    return 0


def _cmd_run(args: argparse.Namespace) -> int:
    tool = get_tool(args.tool)
    if args.inputs:
        inputs = json.loads(Path(args.inputs).read_text(encoding="utf-8"))
    else:
        inputs = tool.default_inputs()
    res = tool.run(inputs)
    print(json.dumps(res, indent=2))
    if not res.get("ok"):
        logger.error(res.get("error", "run failed"))
        return 1
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="psc_toolbox", description="PSC Toolbox headless runner")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--quiet", action="store_true", help="no console log sink")
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="list registered tools")
    p_list.set_defaults(func=_cmd_list)

    p_def = sub.add_parser("defaults", help="print a tool's default inputs as JSON")
    p_def.add_argument("tool")
    p_def.set_defaults(func=_cmd_defaults)

    p_run = sub.add_parser("run", help="run a tool and write its calc package")
    p_run.add_argument("tool")
    p_run.add_argument("--inputs", help="JSON inputs file (defaults when omitted)")
    p_run.set_defaults(func=_cmd_run)

    args = parser.parse_args(argv)
    configure_logging(args.log_level, console=not args.quiet)
    try:
        return args.func(args)
    except KeyError as e:
        logger.error(str(e))
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
