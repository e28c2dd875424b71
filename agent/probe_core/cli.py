"""
Command-line front-end.

  probe-agent [run] [--once] [--env-file PATH]
  probe-agent ledger init | show | compact
  probe-agent ledger add-service | remove-service | add-task | remove-task NAME
"""

import argparse
import os
import sys

from dotenv import find_dotenv, load_dotenv

from .constants import AGENT_VERSION, DEFAULT_LEDGER_FILE
from .config import setup_logging
from .errors import LedgerError
from .ledger import Ledger
from . import runner


def _ledger_path(args):
    if args.ledger:
        return args.ledger
    load_dotenv(find_dotenv(usecwd=True), override=False)
    return os.getenv("LEDGER_PATH") or DEFAULT_LEDGER_FILE


def cmd_run(args):
    runner.main(once=args.once, dotenv_path=args.env_file)
    return 0


def cmd_ledger_init(ledger, args):
    agent_id = ledger.create()
    print(agent_id)
    return 0


def cmd_ledger_show(ledger, args):
    record = ledger.read()
    print(f"agent_id: {record.agent_id}")
    print("services to verify:")
    for name in record.services_to_verify or ["(none)"]:
        print(f"  {name}")
    print("tasks to verify:")
    for name in record.tasks_to_verify or ["(none)"]:
        print(f"  {name}")
    return 0


def _mutation(method, done, noop):
    def cmd(ledger, args):
        changed = getattr(ledger, method)(args.name)
        print((done if changed else noop).format(args.name))
        return 0
    return cmd


def cmd_ledger_compact(ledger, args):
    print("Compacted." if ledger.compact() else "Already compact.")
    return 0


LEDGER_COMMANDS = {
    "init": cmd_ledger_init,
    "show": cmd_ledger_show,
    "compact": cmd_ledger_compact,
    "add-service": _mutation("add_service", "Added service {}.", "Service {} already listed."),
    "remove-service": _mutation("remove_service", "Removed service {}.", "Service {} not listed."),
    "add-task": _mutation("add_task", "Added task {}.", "Task {} already listed."),
    "remove-task": _mutation("remove_task", "Removed task {}.", "Task {} not listed."),
}


def cmd_ledger(args):
    ledger = Ledger(_ledger_path(args))
    try:
        return LEDGER_COMMANDS[args.ledger_cmd](ledger, args)
    except (LedgerError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


def build_parser():
    p = argparse.ArgumentParser(prog="probe-agent", description="Host telemetry agent")
    p.add_argument("--version", action="version", version=f"%(prog)s {AGENT_VERSION}")
    sub = p.add_subparsers(dest="command")

    run = sub.add_parser("run", help="Start the collection loop (default)")
    run.add_argument("--once", action="store_true", help="Collect and deliver a single sample, then exit")
    run.add_argument("--env-file", default=None, help="Path to a .env file")
    run.set_defaults(func=cmd_run)

    led = sub.add_parser("ledger", help="Inspect or edit the local ledger")
    led.add_argument("--ledger", default=None, help="Ledger file (default: $LEDGER_PATH or ./info)")
    led_sub = led.add_subparsers(dest="ledger_cmd", required=True)
    led_sub.add_parser("init", help="Create the ledger with a new agent id")
    led_sub.add_parser("show", help="Print agent id and verify lists")
    led_sub.add_parser("compact", help="Drop blank and duplicate entries")
    for name in ("add-service", "remove-service", "add-task", "remove-task"):
        cmd = led_sub.add_parser(name)
        cmd.add_argument("name")
    led.set_defaults(func=cmd_ledger)

    return p


COMMANDS = ("run", "ledger")
TOP_LEVEL_FLAGS = ("-h", "--help", "--version")


def main(argv=None):
    argv = list(sys.argv[1:] if argv is None else argv)
    # Without a subcommand everything belongs to "run".
    if not argv or (argv[0] not in COMMANDS and argv[0] not in TOP_LEVEL_FLAGS):
        argv = ["run", *argv]
    args = build_parser().parse_args(argv)
    if args.command == "ledger":
        setup_logging(level="WARNING")
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
