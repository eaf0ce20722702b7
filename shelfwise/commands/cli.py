import argparse
from pathlib import Path

from shelfwise.errors import ShelfError, ValidationError
from shelfwise.state.io import find_config, load_config
from .output import error_body, print_result


class ShelfArgumentParser(argparse.ArgumentParser):
    """Usage errors become a JSON error body instead of exit status 2."""

    def error(self, message):
        raise ValidationError(message)


def build_parser() -> argparse.ArgumentParser:
    p = ShelfArgumentParser(prog="shelf", description="Shelfwise CLI - Resolve groups and batch-file records")
    p.add_argument("--library", help="Library snapshot (default: ./library.json or 'library' from shelf.yaml)")
    p.add_argument("--config", help="Config file (default: shelf.yaml next to the library, then ./shelf.yaml)")
    p.add_argument("--pretty", action="store_true", help="Pretty print JSON output")
    sub = p.add_subparsers(dest="cmd", required=True)

    # INIT
    p_init = sub.add_parser("init", help="Create an empty library")
    p_init.add_argument("-d", "--database", action="append", help="Database to create (repeatable)")
    p_init.add_argument("--force", action="store_true", help="Replace an existing library")

    # GROUP
    p_group = sub.add_parser("group", aliases=["mkdir"], help="Resolve or create a group path (fuzzy by default)")
    p_group.add_argument("path", help='Group path, e.g. "/Authors A-Z/E/EWIN, Milton"')
    p_group.add_argument("-d", "--database", help="Target database (name or UUID)")
    p_group.add_argument("--exact", action="store_true", help="Exact name matching only")
    p_group.add_argument("--no-create", action="store_true", help="Fail instead of creating missing groups")

    # GET
    p_get = sub.add_parser("get", help="Look up a record by id, numeric id, path or name")
    p_get.add_argument("--id", help="Record UUID or item link")
    p_get.add_argument("--numeric-id", type=int, help="Numeric record id")
    p_get.add_argument("--path", help="Path relative to --scope (or the database root)")
    p_get.add_argument("--name", help="Exact record name searched below --scope")
    p_get.add_argument("--scope", help="Group UUID or path that path/name lookups start from")
    p_get.add_argument("-d", "--database", help="Database (name or UUID)")

    # MOVE
    p_move = sub.add_parser("move", help="Move records into a group")
    p_move.add_argument("records", nargs="+", help="Record UUIDs")
    p_move.add_argument("--to", required=True, help="Destination group UUID or path")
    p_move.add_argument("-d", "--database", help="Database for a path destination")

    # REPLICATE
    p_rep = sub.add_parser("replicate", help="Replicate a record into one or more groups")
    p_rep.add_argument("record", help="Record UUID")
    p_rep.add_argument("destinations", nargs="+", help="Destination group UUIDs or paths")
    p_rep.add_argument("-d", "--database", help="Database for path destinations")

    # CLASSIFY-BATCH
    p_batch = sub.add_parser("classify-batch", aliases=["file"], help="Batch classify multiple records")
    p_batch.add_argument("-i", "--input", help="JSON array of directives, a JSON file, or - for stdin")
    p_batch.add_argument("--csv", help="Directive CSV (reference,database,destination,...)")
    p_batch.add_argument("--strict", action="store_true", help="Report success=false if any directive failed")
    p_batch.add_argument("--report-csv", help="Write a per-directive CSV report")

    return p


def _load_config(args):
    library = Path(args.library).resolve() if args.library else None
    config_path = Path(args.config) if args.config else find_config(library)
    if args.config and not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    config = load_config(config_path)
    if library is not None:
        config.library_path = library
    if args.pretty:
        config.pretty = True
    return config


def main(argv=None) -> int:
    p = build_parser()
    try:
        args = p.parse_args(argv)
    except ValidationError as e:
        print_result(error_body(e))
        return 0

    pretty = args.pretty
    try:
        config = _load_config(args)
        pretty = config.pretty

        # Route to appropriate module
        if args.cmd == "init":
            from .init_library import run as init_run
            result = init_run(args, config)
        elif args.cmd in ("group", "mkdir"):
            from .group import run as group_run
            result = group_run(args, config)
        elif args.cmd == "get":
            from .get import run as get_run
            result = get_run(args, config)
        elif args.cmd == "move":
            from .move import run_move
            result = run_move(args, config)
        elif args.cmd == "replicate":
            from .move import run_replicate
            result = run_replicate(args, config)
        elif args.cmd in ("classify-batch", "file"):
            from .classify_batch import run as batch_run
            result = batch_run(args, config)
        else:
            raise ShelfError(f"Unknown command: {args.cmd}")
    except (ShelfError, FileNotFoundError, ValueError) as e:
        result = error_body(e)

    print_result(result, pretty)
    return 0


if __name__ == "__main__":
    main()
