"""CLI entry point: argument parsing and subcommand dispatch."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from ctxgraph import __version__
from ctxgraph.config import load_config, resolve_path


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """
    Configure the ctxgraph logger: level from --verbose/--quiet or config, console
    handler, optional file handler from config.
    """
    config = load_config(None)
    log_cfg = config.get("logging") or {}
    if verbose:
        level_name = "DEBUG"
    elif quiet:
        level_name = "ERROR"
    else:
        level_name = (log_cfg.get("level") or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    root = logging.getLogger("ctxgraph")
    root.setLevel(level)
    if not root.handlers:
        fmt = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(fmt)
        root.addHandler(console)
        log_file = log_cfg.get("file")
        if log_file:
            try:
                log_path = Path(log_file).expanduser()
                log_path.parent.mkdir(parents=True, exist_ok=True)
                fh = logging.FileHandler(log_path, encoding="utf-8")
                fh.setFormatter(fmt)
                root.addHandler(fh)
            except OSError as e:
                root.warning("Cannot open log file %s: %s", log_file, e)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ctxgraph",
        description="Index a notes folder into a cached context graph of LLM summaries.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would be done without making changes.",
    )
    log_group = parser.add_mutually_exclusive_group()
    log_group.add_argument("-v", "--verbose", action="store_true", help="Verbose (DEBUG) output.")
    log_group.add_argument("-q", "--quiet", action="store_true", help="Quiet (errors only).")

    # Same flags on subparsers so "ctxgraph sync . --dry-run" works
    global_flags = argparse.ArgumentParser(add_help=False)
    global_flags.add_argument("--dry-run", action="store_true", help=argparse.SUPPRESS)
    log_grp = global_flags.add_mutually_exclusive_group()
    log_grp.add_argument("-v", "--verbose", action="store_true", help=argparse.SUPPRESS)
    log_grp.add_argument("-q", "--quiet", action="store_true", help=argparse.SUPPRESS)

    scan_flags = argparse.ArgumentParser(add_help=False)
    scan_flags.add_argument(
        "--exclude",
        "-x",
        action="append",
        metavar="PATH",
        help="Relative path to exclude (repeatable; added to config exclusions).",
    )
    scan_flags.add_argument("--max-nodes", type=int, help="Node ceiling (default: config max_nodes, 300).")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)

    p_sync = subparsers.add_parser(
        "sync",
        help="Build or refresh the context graph (only changed content is re-summarized).",
        parents=[global_flags, scan_flags],
    )
    p_sync.add_argument("path", type=Path, nargs="?", default=Path("."), help="Folder to index (default: .).")
    p_sync.add_argument("--model", "-m", type=str, help="Ollama model name (e.g. qwen2.5:7b).")
    p_sync.set_defaults(run="sync")

    p_status = subparsers.add_parser(
        "status",
        help="Compare the folder with its stored graph (synced / out of sync / new).",
        parents=[global_flags, scan_flags],
    )
    p_status.add_argument("path", type=Path, nargs="?", default=Path("."), help="Indexed folder (default: .).")
    p_status.set_defaults(run="status")

    p_prune = subparsers.add_parser("prune", help="Delete the stored context graph.", parents=[global_flags])
    p_prune.add_argument("path", type=Path, nargs="?", default=Path("."), help="Indexed folder (default: .).")
    p_prune.set_defaults(run="prune")

    p_export = subparsers.add_parser("export", help="Export graph nodes to JSON or CSV.", parents=[global_flags])
    p_export.add_argument("path", type=Path, nargs="?", default=Path("."), help="Indexed folder (default: .).")
    p_export.add_argument("--format", "-f", choices=("json", "csv"), default="json", help="Output format.")
    p_export.set_defaults(run="export")

    p_config = subparsers.add_parser("config", help="Show or edit configuration.", parents=[global_flags])
    p_config.add_argument("path", type=Path, nargs="?", default=Path("."), help="Folder for project-local config (default: .).")
    p_config.add_argument("--show", action="store_true", help="Display current settings.")
    p_config.add_argument("--set", dest="set_key", metavar="KEY=VALUE", help="Set a configuration value.")
    p_config.add_argument("--add", dest="add_key", metavar=("KEY", "VALUE"), nargs=2, help="Append VALUE to list KEY (e.g. exclusions archive).")
    p_config.add_argument("--remove", dest="remove_key", metavar=("KEY", "VALUE"), nargs=2, help="Remove VALUE from list KEY.")
    p_config.add_argument("--global", dest="global_", action="store_true", help="With --set/--add/--remove: write to global config.")
    p_config.set_defaults(run="config")

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(
        verbose=getattr(args, "verbose", False),
        quiet=getattr(args, "quiet", False),
    )
    run = getattr(args, "run", None)
    if not run:
        parser.print_help()
        sys.exit(0)

    if hasattr(args, "path"):
        args.path = resolve_path(args.path)

    if run == "sync":
        from ctxgraph.commands.sync import run as cmd_run
    elif run == "status":
        from ctxgraph.commands.status import run as cmd_run
    elif run == "prune":
        from ctxgraph.commands.prune import run as cmd_run
    elif run == "export":
        from ctxgraph.commands.export import run as cmd_run
    elif run == "config":
        from ctxgraph.commands.config_cmd import run as cmd_run
    else:
        parser.print_help()
        sys.exit(0)

    cmd_run(args)


if __name__ == "__main__":
    main()
