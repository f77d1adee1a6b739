"""Lazy attribute resolution for the top-level package.

``import critical_section`` stays cheap: the lock machinery (and the
platform lock modules it probes) is only imported on first attribute access.
"""

from __future__ import annotations

import importlib
from collections.abc import Callable, Iterable


def make_getattr(
    module_name: str,
    export_names: Iterable[str],
    *,
    mapping: dict[str, str],
) -> Callable[[str], object]:
    """
    Create a module-level ``__getattr__`` resolving exports on demand.

    Args:
        module_name: Name of the current module (for error messages).
        export_names: Public names the module promises.
        mapping: Name -> module path that defines it.
    """
    export_set = set(export_names)
    missing = export_set - set(mapping)
    if missing:
        raise ValueError(f"no lazy target for {sorted(missing)}")

    def __getattr__(name: str) -> object:
        if name in mapping:
            module = importlib.import_module(mapping[name])
            return getattr(module, name)
        raise AttributeError(f"module {module_name!r} has no attribute {name!r}")

    return __getattr__
