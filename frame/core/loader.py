"""Loading command and type modules from files and resolving their exports."""

import importlib
import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Any

from ..errors import RegistrationError

logger = logging.getLogger(__name__)

DYNAMIC_PREFIX = "frame_dynamic"


def resolve_export(client: Any, obj: Any, base: type, label: str) -> Any:
    """
    Turn an exported object into an instance of ``base``.

    Accepts an instance, a subclass (instantiated with the client), or an
    object whose ``default`` attribute holds either. Anything else raises
    :class:`RegistrationError`.
    """
    if not isinstance(obj, base) and not (inspect.isclass(obj) and issubclass(obj, base)) and hasattr(obj, "default"):
        obj = obj.default

    if isinstance(obj, base):
        return obj
    if inspect.isclass(obj) and issubclass(obj, base):
        return obj(client)
    raise RegistrationError(f"Invalid {label} object to register: {obj!r}")


def is_export(obj: Any, base: type) -> bool:
    if not isinstance(obj, base) and not (inspect.isclass(obj) and issubclass(obj, base)) and hasattr(obj, "default"):
        obj = obj.default
    return isinstance(obj, base) or (inspect.isclass(obj) and issubclass(obj, base))


def module_name_for(path: Path, root: Path) -> str:
    relative = path.relative_to(root).with_suffix("")
    return ".".join((DYNAMIC_PREFIX, root.name, *relative.parts))


def load_module_from_path(path: Path, module_name: str) -> ModuleType:
    """Import a source file under ``module_name``, replacing any previous copy."""
    spec = importlib.util.spec_from_file_location(module_name, path)
    if not spec or not spec.loader:
        raise ImportError(f"Cannot load module from {path}")

    module = importlib.util.module_from_spec(spec)
    previous = sys.modules.get(module_name)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        # Keep the last working copy around so reloads can fail safely
        if previous is not None:
            sys.modules[module_name] = previous
        else:
            del sys.modules[module_name]
        raise
    return module


def reload_module(module_name: str) -> ModuleType:
    module = sys.modules.get(module_name)
    if module is None:
        raise ImportError(f"Module {module_name} is not loaded")
    if module_name.startswith(f"{DYNAMIC_PREFIX}."):
        return load_module_from_path(Path(module.__file__), module_name)
    return importlib.reload(module)


def unload_module(module_name: str) -> None:
    # Regular package modules stay importable; only file-loaded copies are dropped
    if module_name.startswith(f"{DYNAMIC_PREFIX}."):
        sys.modules.pop(module_name, None)


def extract_exports(module: ModuleType, base: type) -> list[Any]:
    """Find what a module exports for ``base``.

    A ``default`` attribute wins; otherwise every public ``base`` subclass
    defined in the module itself is exported.
    """
    if hasattr(module, "default"):
        exported = module.default
        return list(exported) if isinstance(exported, (list, tuple)) else [exported]

    exports = []
    for name, obj in inspect.getmembers(module, inspect.isclass):
        if (
            issubclass(obj, base)
            and obj is not base
            and not name.startswith("_")
            and obj.__module__ == module.__name__
        ):
            exports.append(obj)
    return exports


def discover_modules(directory: str | Path) -> list[Path]:
    """List the python files of a directory and its first level of subdirectories."""
    root = Path(directory)
    if not root.is_dir():
        raise RegistrationError(f"Directory does not exist: {root}")

    found: list[Path] = []
    for path in sorted(root.iterdir()):
        if path.name.startswith("_"):
            continue
        if path.is_file() and path.suffix == ".py":
            found.append(path)
        elif path.is_dir():
            found.extend(p for p in sorted(path.glob("*.py")) if not p.name.startswith("_"))

    logger.info(f"Discovered {len(found)} modules in {root}")
    return found


def load_exports_in(directory: str | Path, base: type) -> list[Any]:
    root = Path(directory)
    exports: list[Any] = []
    for path in discover_modules(root):
        module = load_module_from_path(path, module_name_for(path, root))
        exports.extend(extract_exports(module, base))
    return exports
