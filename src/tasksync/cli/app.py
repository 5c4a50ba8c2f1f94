"""CLI app entrypoint and error mapping."""

from __future__ import annotations

import sys

from tasksync.contracts.exceptions import AdapterError, ConfigError, TaskSyncError


def main(argv: list[str] | None = None) -> int:
    import tasksync.cli as cli

    parser = cli.build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        cli.logging.basicConfig(level=cli.logging.DEBUG, format="%(name)s %(message)s", stream=sys.stderr)

    try:
        if args.command == "pull":
            cli.asyncio.run(cli._run_pull(args))
        elif args.command == "push":
            cli.asyncio.run(cli._run_push(args))
        elif args.command == "sync":
            cli.asyncio.run(cli._run_check(args))
        elif args.command == "reports":
            if args.reports_command == "list":
                cli._run_reports_list(args)
            else:
                cli._run_reports_show(args)
        return 0
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 3
    except AdapterError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 4
    except TaskSyncError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 5
    except Exception as exc:  # pragma: no cover - defensive fallback
        print(f"error: {exc}", file=sys.stderr)
        return 1


__all__ = ["main"]
