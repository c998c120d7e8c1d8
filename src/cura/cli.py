#!/usr/bin/env python3
"""CLI entry point for cura package.

Usage:
    python -m cura list [--data-dir DIR] [--config cura.toml]
    python -m cura show <patient_id> [--json]
    python -m cura scan
    python -m cura context <patient_id> [--question "..."]
    python -m cura init-config [--output cura.toml]
    python -m cura serve-mcp
"""

import argparse
import json
import logging
import sys

DEFAULT_CONFIG = "cura.toml"


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="cura",
        description="Load FHIR bundles and browse normalized patient records.",
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG, help="Path to cura.toml")
    parser.add_argument("--data-dir", default=None, help="Bundle folder (overrides config and CURA_DATA_DIR)")
    parser.add_argument("--lenient", action="store_true", help="Skip unreadable bundle files instead of failing")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log load progress to stderr")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("list", help="List all patients")

    show_parser = sub.add_parser("show", help="Show one patient's chart")
    show_parser.add_argument("patient_id", help="Patient id (case-insensitive)")
    show_parser.add_argument("--json", action="store_true", help="Print as JSON instead of markdown")

    sub.add_parser("scan", help="Show resource counts per bundle file")

    context_parser = sub.add_parser("context", help="Print the summarizer prompt for a patient")
    context_parser.add_argument("patient_id", help="Patient id (case-insensitive)")
    context_parser.add_argument("--question", default=None, help="Question to ask about the patient")

    init_parser = sub.add_parser("init-config", help="Write a starter cura.toml")
    init_parser.add_argument("--output", default=DEFAULT_CONFIG, help="Config file output path")

    sub.add_parser("serve-mcp", help="Start MCP server over the loaded patients")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)-8s %(name)s: %(message)s",
    )

    if args.command == "init-config":
        _handle_init_config(args)
    elif args.command == "list":
        _handle_list(args)
    elif args.command == "show":
        _handle_show(args)
    elif args.command == "scan":
        _handle_scan(args)
    elif args.command == "context":
        _handle_context(args)
    elif args.command == "serve-mcp":
        _handle_serve_mcp(args)


def _load_config(args):
    from cura.config import load_config

    return load_config(
        args.config,
        data_dir=args.data_dir,
        strict=False if args.lenient else None,
    )


def _open_store(args):
    from cura.store import PatientStore

    return PatientStore(_load_config(args).source)


def _get_patient_or_exit(store, patient_id: str):
    patient = store.get(patient_id)
    if patient is None:
        print(f"Patient {patient_id} not found.", file=sys.stderr)
        sys.exit(1)
    return patient


def _run_store(fn):
    from cura.sources.base import BundleParseError

    try:
        return fn()
    except BundleParseError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


def _handle_list(args):
    store = _open_store(args)
    patients = _run_store(store.get_all)
    if not patients:
        print(f"No patients found in {store.config.folder}")
        return

    print(f"\n{'ID':<38}  {'Name':<30}  {'Gender':<8}  {'DOB':<10}")
    print(f"{'─'*38}  {'─'*30}  {'─'*8}  {'─'*10}")
    for p in patients:
        print(f"{p.id[:38]:<38}  {p.full_name[:30]:<30}  {p.gender:<8}  {p.birth_date:%Y-%m-%d}")

    print(f"\n({len(patients)} patients)")


def _handle_show(args):
    from cura.formatters.markdown import format_patient

    store = _open_store(args)
    patient = _run_store(lambda: _get_patient_or_exit(store, args.patient_id))
    if args.json:
        print(json.dumps(patient.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(format_patient(patient))


def _handle_scan(args):
    from cura.core.bundle import assemble_patient, summarize_bundle
    from cura.sources.base import scan_bundles

    config = _load_config(args).source
    docs = _run_store(lambda: list(scan_bundles(config)))
    if not docs:
        print(f"No bundle files found in {config.folder}")
        return

    for doc in docs:
        counts = summarize_bundle(doc.data)
        patient = assemble_patient(doc.data)
        who = f"{patient.full_name} ({patient.id})" if patient else "no patient"
        print(f"{doc.path}: {who}")
        for rtype, n in sorted(counts.items()):
            print(f"    {rtype:<25} {n:>6}")

    print(f"\n({len(docs)} files)")


def _handle_context(args):
    from cura.formatters.markdown import build_patient_prompt

    store = _open_store(args)
    patient = _run_store(lambda: _get_patient_or_exit(store, args.patient_id))
    system, user = build_patient_prompt(patient, args.question)
    print("=== system ===")
    print(system)
    print("\n=== user ===")
    print(user)


def _handle_init_config(args):
    from cura.config import generate_config

    path = generate_config(config_path=args.output)
    print(f"Config generated at {path}")


def _handle_serve_mcp(args):
    import cura.mcp.server as server

    server.configure(_open_store(args))
    server.mcp.run()


if __name__ == "__main__":
    main()
