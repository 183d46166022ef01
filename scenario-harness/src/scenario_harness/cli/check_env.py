from __future__ import annotations

import argparse
import os
import shlex
import subprocess
from typing import List, Mapping, Optional, Sequence

IN_NIX_SHELL_ENV = "IN_NIX_SHELL"
EXPECTED_ENV = "SCENARIO_HARNESS_EXPECTED_TOOLCHAIN"
INTROSPECT_ENV = "SCENARIO_HARNESS_INTROSPECT_CMD"

DEFAULT_INTROSPECT_CMD = "hn-introspect"
DEFAULT_COMPONENT = "holochain:"
DEFAULT_EXPECTED = (
    "- holochain: https://github.com/holochain/holochain/archive/"
    "7c80ce00fb7ff01b339aa61e258ee548ef1b9a4b.tar.gz"
)

_HINT = [
    "Go to the base folder of the project, ",
    "where you find default.nix, ",
    "and run 'nix-shell' in the command line.",
]


def _run(cmd: Sequence[str], *, timeout_s: float) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        list(cmd),
        capture_output=True,
        text=True,
        timeout=timeout_s,
        check=False,
    )


def component_line(output: str, component: str) -> str:
    """Lines of `output` mentioning `component`, joined like `grep` would print them."""
    return "\n".join(line for line in output.splitlines() if component in line)


def check_toolchain(
    *,
    env: Mapping[str, str],
    introspect_cmd: Sequence[str],
    component: str = DEFAULT_COMPONENT,
    expected: str = DEFAULT_EXPECTED,
    timeout_s: float = 30.0,
) -> List[str]:
    """Return diagnostic lines; an empty list means the toolchain is the expected one."""
    if not env.get(IN_NIX_SHELL_ENV):
        return ["It looks like you are NOT running in a nix-shell", *_HINT]

    try:
        proc = _run(introspect_cmd, timeout_s=timeout_s)
    except FileNotFoundError:
        return [f"introspection command not found: {' '.join(introspect_cmd)}"]
    except subprocess.TimeoutExpired:
        return [f"introspection command timed out after {timeout_s}s"]

    found = component_line(proc.stdout or "", component)
    if found.strip() != expected.strip():
        return [
            "It looks like you are running in an OLD nix-shell",
            *_HINT,
            f"expected: {expected}",
            f"found:    {found or '<missing>'}",
        ]
    return []


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Check that the shell provides the expected toolchain version."
    )
    parser.add_argument(
        "--expected",
        type=str,
        default=os.environ.get(EXPECTED_ENV, DEFAULT_EXPECTED),
        help="Expected introspection line for the component.",
    )
    parser.add_argument("--component", type=str, default=DEFAULT_COMPONENT)
    parser.add_argument(
        "--introspect_cmd",
        type=str,
        default=os.environ.get(INTROSPECT_ENV, DEFAULT_INTROSPECT_CMD),
        help="Command printing the toolchain components, one per line.",
    )
    parser.add_argument("--timeout_s", type=float, default=30.0)
    args = parser.parse_args(argv)

    problems = check_toolchain(
        env=os.environ,
        introspect_cmd=shlex.split(args.introspect_cmd),
        component=args.component,
        expected=args.expected,
        timeout_s=args.timeout_s,
    )
    for line in problems:
        print(line)
    return 1 if problems else 0


if __name__ == "__main__":
    raise SystemExit(main())
