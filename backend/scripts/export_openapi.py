#!/usr/bin/env python
"""Export the OpenAPI document, or diff it against a committed copy.

Usage:
  python backend/scripts/export_openapi.py --out backend/openapi.json
  python backend/scripts/export_openapi.py --check backend/openapi.json
  python backend/scripts/export_openapi.py --transitions

Exit Codes:
  0 success / committed copy is current
  2 committed copy is stale (--check)
"""
from __future__ import annotations
import argparse, json, pathlib, sys

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from fieldjobs.openapi import build_openapi_spec  # noqa: E402


def render(spec: dict) -> str:
    return json.dumps(spec, indent=2, sort_keys=True) + '\n'


def print_transitions(spec: dict):
    table = spec['components']['schemas']['Job']['x-transitions']
    width = max(len(s) for s in table)
    for status, targets in table.items():
        print(f"{status.ljust(width)} -> {', '.join(targets) or '(terminal)'}")


def main(argv: list[str]) -> int:
    p = argparse.ArgumentParser(description="Export the deterministic OpenAPI document")
    p.add_argument('--out', help='Path to write JSON document')
    p.add_argument('--check', metavar='PATH', help='Exit 2 when PATH differs from the current document')
    p.add_argument('--transitions', action='store_true', help='Print the job status transition table')
    args = p.parse_args(argv)

    spec = build_openapi_spec()
    text = render(spec)

    if args.out:
        out_path = pathlib.Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text)
        print(f"Wrote OpenAPI JSON to {out_path} ({len(text)} bytes)")

    if args.check:
        committed = pathlib.Path(args.check)
        if not committed.exists() or committed.read_text() != text:
            print(f"{committed} is stale; re-run with --out {committed}", file=sys.stderr)
            return 2
        print(f"{committed} is up to date")

    if args.transitions:
        print_transitions(spec)

    if not (args.out or args.check or args.transitions):
        sys.stdout.write(text)
    return 0


if __name__ == '__main__':  # pragma: no cover
    sys.exit(main(sys.argv[1:]))
