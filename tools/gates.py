#!/usr/bin/env python3
"""
Bundle Gates - Feature Gate Tool

Lists, detects, enables and disables feature gates in an installed CLI
bundle or native binary.
"""

import argparse
import sys

from bundlegate.core.bundle import resolve_bundle
from bundlegate.core.detector import detect_all, detect_one, scan_raw_flags
from bundlegate.core.gates import FeatureGate, find_gate, list_all, list_patchable
from bundlegate.core.locator import find_all_clis
from bundlegate.core.patcher import disable_gate, enable_all_gates, enable_gate, reset_gates
from bundlegate.core.results import GatePatchConfig, GateStatus, PatchOutcome


def _yes_no(value: bool) -> str:
    return "yes" if value else "no"


def list_gates() -> None:
    """Print registered gates and exit."""
    patchable = {gate.codename for gate in list_patchable()}
    binary = {gate.codename for gate in list_patchable(binary=True)}

    print("Registered gates:")
    print()
    for gate in list_all():
        modes = []
        if gate.codename in patchable:
            modes.append("text")
        if gate.codename in binary:
            modes.append("binary")
        print(f"  {gate.codename} ({gate.name}) [{gate.category.value}]")
        print(f"    {gate.description}")
        print(f"    patchable: {', '.join(modes) or 'detection only'}")
        if gate.env_override:
            print(f"    env override: {gate.env_override}")
        print()


def print_status_table(statuses: list[GateStatus]) -> None:
    print(f"{'Codename':<28} {'Flag':<40} {'Detected':<9} {'Enabled':<8}")
    print("-" * 88)
    for status in statuses:
        print(
            f"{status.codename:<28} {status.name:<40} "
            f"{_yes_no(status.detected):<9} {_yes_no(status.enabled):<8}"
        )


def report_outcome(action: str, outcome: PatchOutcome) -> int:
    """
    Print the result of a mutating operation.

    Returns:
        Process exit code
    """
    if not outcome.success:
        kind = outcome.error_kind.value if outcome.error_kind else "error"
        print(f"Error ({kind}): {outcome.error}")
        return 1

    for status in outcome.gates_changed:
        state = "enabled" if status.enabled else "disabled"
        print(f"{action}: {status.codename} ({status.name}) is {state}")
        if status.env_override:
            print(f"  (alternatively set {status.env_override})")
    if outcome.backup_path:
        print(f"Backup: {outcome.backup_path}")
    return 0


def detect(cli_path: str | None, name: str | None) -> int:
    bundle = resolve_bundle(cli_path)
    if bundle is None:
        print("Error: could not find the target artifact. Pass --path.")
        return 1

    mode = "binary" if bundle.is_binary_target else "script"
    print(f"Artifact: {bundle.path} ({mode}, {len(bundle.content):,} bytes)")
    print()

    if name:
        status = detect_one(name, bundle)
        if status is None:
            print(f"Error: unknown gate '{name}'. Use --list to see registered gates.")
            return 1
        print_status_table([status])
    else:
        print_status_table(detect_all(bundle))
    return 0


def scan(cli_path: str | None) -> int:
    bundle = resolve_bundle(cli_path)
    if bundle is None:
        print("Error: could not find the target artifact. Pass --path.")
        return 1

    flags = scan_raw_flags(bundle)
    known = {gate.name for gate in list_all()}
    print(f"Found {len(flags)} flags ({len(known & set(flags))} registered):")
    for flag in flags:
        marker = " " if flag in known else "*"
        print(f"  {marker} {flag}")
    return 0


def locate() -> int:
    paths = find_all_clis()
    if not paths:
        print("No installed artifacts found.")
        return 1
    for path in paths:
        print(path)
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Detect and patch feature gates in a CLI bundle or native binary",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show gate state of the installed CLI
  python tools/gates.py detect

  # Enable one gate in a specific bundle, without a backup
  python tools/gates.py enable workout-v2 --path ./cli.js --no-backup

  # Enable every patchable gate, then undo everything
  python tools/gates.py enable-all
  python tools/gates.py reset
""",
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=["detect", "scan", "locate", "enable", "enable-all", "disable", "reset"],
        help="Operation to perform",
    )
    parser.add_argument("gate", nargs="?", help="Gate flag name or codename")
    parser.add_argument("--path", default=None, help="Artifact path (default: auto-detect)")
    parser.add_argument(
        "--no-backup", action="store_true", help="Do not back up the artifact before writing"
    )
    parser.add_argument("--list", action="store_true", help="List registered gates and exit")

    args = parser.parse_args()

    if args.list:
        list_gates()
        sys.exit(0)

    if not args.command:
        parser.error("the following arguments are required: command")

    config = GatePatchConfig(cli_path=args.path, backup=not args.no_backup)

    if args.command in ("enable", "disable"):
        if not args.gate:
            parser.error(f"{args.command} requires a gate name")
        gate: FeatureGate | None = find_gate(args.gate)
        if gate is not None and gate.codename not in {g.codename for g in list_patchable()}:
            print(f"Warning: '{gate.codename}' is detection-only")
            if gate.env_override:
                print(f"  Set {gate.env_override} instead")

    if args.command == "detect":
        sys.exit(detect(args.path, args.gate))
    elif args.command == "scan":
        sys.exit(scan(args.path))
    elif args.command == "locate":
        sys.exit(locate())
    elif args.command == "enable":
        sys.exit(report_outcome("Enabled", enable_gate(args.gate, config)))
    elif args.command == "enable-all":
        sys.exit(report_outcome("Enabled", enable_all_gates(config)))
    elif args.command == "disable":
        sys.exit(report_outcome("Disabled", disable_gate(args.gate, config)))
    else:
        outcome = reset_gates(config)
        if outcome.success:
            print(f"Restored from {outcome.backup_path}")
            sys.exit(0)
        sys.exit(report_outcome("Reset", outcome))


if __name__ == "__main__":
    main()
