"""Example suites and the bundles they exercise."""

# Example bundles sit in `workdir/` next to the suite modules, unlike the
# `DEFAULT_WORKDIR_OFFSET` layout of a standalone app.
EXAMPLES_WORKDIR_OFFSET = ("workdir",)
