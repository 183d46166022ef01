"""Locate compiled artifact bundles relative to the test module that uses them."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Union

PathLike = Union[str, "os.PathLike[str]"]

# Test modules live in `<app>/tests/src/`; bundles are built into `<app>/dna/workdir/`.
DEFAULT_WORKDIR_OFFSET = ("..", "..", "dna", "workdir")


class ArtifactNotFoundError(FileNotFoundError):
    pass


def locate_artifact(module_file: PathLike, *relative: PathLike) -> Path:
    """Return the absolute path of `relative` applied to `module_file`'s directory.

    The join is normalized lexically (`..` collapses without touching the
    filesystem) and nothing checks that the target exists: a missing bundle
    surfaces when a player installs it.
    """
    base = Path(os.path.abspath(os.fspath(module_file))).parent
    joined = os.path.join(str(base), *(os.fspath(p) for p in relative))
    return Path(os.path.normpath(joined))


def bundle_path_to_id(path: PathLike) -> str:
    name = Path(os.fspath(path)).name
    stem = name.split(".", 1)[0]
    return stem or name
