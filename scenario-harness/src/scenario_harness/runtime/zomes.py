from __future__ import annotations

import importlib
import importlib.util
import inspect
import sys
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Dict, Optional, TypeVar

from scenario_harness.spec.bundle import ZomeManifest

EXTERN_ATTR = "__zome_extern__"

F = TypeVar("F", bound=Callable[..., Any])


class ZomeLoadError(RuntimeError):
    pass


def extern(fn: F) -> F:
    """Mark a module-level function as callable from outside the zome.

    Externs take the `ZomeContext` first and, optionally, one payload argument.
    """
    setattr(fn, EXTERN_ATTR, True)
    return fn


@dataclass(frozen=True)
class Zome:
    name: str
    module: ModuleType
    externs: Dict[str, Callable[..., Any]]

    def extern_fn(self, fn_name: str) -> Callable[..., Any]:
        fn = self.externs.get(fn_name)
        if fn is None:
            known = ", ".join(sorted(self.externs)) or "<none>"
            raise ZomeLoadError(f"zome {self.name!r} has no extern {fn_name!r} (known: {known})")
        return fn


def _load_module_from_path(path: Path) -> ModuleType:
    path = path.resolve()
    if not path.exists():
        raise FileNotFoundError(path)

    module_name = f"scenario_zome_{path.stem}_{abs(hash(str(path)))}"
    if module_name in sys.modules:
        return sys.modules[module_name]
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ZomeLoadError(f"failed to load zome module: {path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


def _import_zome_module(ref: str, *, bundle_dir: Optional[Path]) -> ModuleType:
    if ref.endswith(".py"):
        path = Path(ref)
        if not path.is_absolute() and bundle_dir is not None:
            path = bundle_dir / path
        return _load_module_from_path(path)
    try:
        return importlib.import_module(ref)
    except ImportError as e:
        raise ZomeLoadError(f"cannot import zome module {ref!r}: {e}") from e


def load_zome(manifest: ZomeManifest, *, bundle_dir: Optional[Path] = None) -> Zome:
    try:
        module = _import_zome_module(manifest.module, bundle_dir=bundle_dir)
    except FileNotFoundError as e:
        raise ZomeLoadError(f"zome {manifest.name!r} module not found: {e}") from e

    externs = {
        name: fn
        for name, fn in inspect.getmembers(module, callable)
        if getattr(fn, EXTERN_ATTR, False)
    }
    if not externs:
        raise ZomeLoadError(f"zome {manifest.name!r} ({manifest.module}) exports no externs")
    return Zome(name=manifest.name, module=module, externs=externs)
