"""Command line entry points: `scenario-harness`, `tap-diff` and `check-toolchain`."""
