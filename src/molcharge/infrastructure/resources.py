"""
Internal resource management infrastructure.

Datasets processed by the charge tools live next to a project manifest
(`<project>_manifest.json`). Every stored file gets a unique resource id and
a manifest entry recording which tool produced it, so a standardization run
can be traced back step by step.
"""

import json
import secrets
import inspect
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from molcharge.infrastructure.supported_resource_types import TYPE_REGISTRY
from molcharge.config import DATA_ROOT


def get_supported_resource_types() -> list[str]:
    """Return a list of supported resource types."""
    return list(TYPE_REGISTRY.keys())


def _get_timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")


def _summarize_arg(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool, type(None))):
        return value
    if isinstance(value, (list, tuple)):
        return f"<{type(value).__name__} of length {len(value)}>"
    if isinstance(value, dict):
        return f"<dict with {len(value)} keys>"
    text = repr(value)
    return text if len(text) < 100 else f"<{type(value).__name__}>"


def _get_parent_info() -> dict:
    """Describe the first caller outside this module (the tool storing a resource)."""
    unknown = {'function_name': 'unknown', 'function_inputs': {}, 'module': 'unknown'}

    # stack[0] is this function, stack[1] is _store_resource
    stack = inspect.stack()
    this_file = Path(__file__).resolve()
    parent = next((f for f in stack[2:] if Path(f.filename).resolve() != this_file), None)
    if parent is None:
        return unknown

    frame = parent.frame
    arginfo = inspect.getargvalues(frame)
    module = inspect.getmodule(frame)
    return {
        'function_name': parent.function,
        'function_inputs': {name: _summarize_arg(arginfo.locals.get(name)) for name in arginfo.args},
        'module': module.__name__ if module else 'unknown',
    }


def _generate_id(type_tag: str) -> str:
    """Generate unique resource ID: {type_tag}_{8_hex_chars}{extension}."""
    rand = secrets.token_hex(4).upper()
    return f"{type_tag}_{rand}{TYPE_REGISTRY[type_tag]['ext']}"


def _store_resource(obj: Any, project_manifest_path: str, filename: str, explanation: str, type_tag: str) -> str:
    """Internal: Store object next to the manifest and track it there.

    Returns the stored filename (base filename plus resource id), which is the
    handle later passed to `_load_resource`.
    """
    if type_tag not in TYPE_REGISTRY:
        raise ValueError(f"Unsupported resource type: {type_tag}")
    _check_if_manifest_exists(project_manifest_path)

    # the random id keeps repeated output filenames from overwriting each other
    stored_name = f"{filename}_{_generate_id(type_tag)}"
    path = Path(project_manifest_path).parent / stored_name

    save_fn: Callable[[Any, Path], None] = TYPE_REGISTRY[type_tag]['save']
    save_fn(obj, path)

    parent_info = _get_parent_info()
    add_to_project_manifest(project_manifest_path=project_manifest_path,
                            filename=stored_name, type_tag=type_tag, explanation=explanation,
                            parent_function_name=parent_info['function_name'],
                            parent_function_inputs=parent_info['function_inputs'],
                            module_name=parent_info['module'])
    return stored_name


def _load_resource(project_manifest_path: str, filename: str) -> Any:
    """Internal: Load a stored resource, inferring its type from the resource id."""
    _check_if_manifest_exists(project_manifest_path)

    parts = filename.split("_")
    if len(parts) < 3:
        raise ValueError(f"Invalid resource_id format: {filename}")
    type_tag = parts[-2]
    if type_tag not in TYPE_REGISTRY:
        raise ValueError(f"Unknown resource type in id: {filename}")

    path = Path(project_manifest_path).parent / filename
    if not path.exists():
        raise FileNotFoundError(f"Resource file not found: {path}")

    load_fn: Callable[[Path], Any] = TYPE_REGISTRY[type_tag]["load"]
    return load_fn(path)


def create_project_manifest(path: str, project_name: str) -> dict:
    """Create a new project manifest to track resources in a directory.

    Creates `<path>/<project_name>_manifest.json`. Create a manifest BEFORE
    running any dataset-level charge tool; those tools store their output
    next to it.

    Args:
        path: Directory where manifest and data files will be stored
        project_name: Name for this project (used in manifest filename)

    Returns:
        dict with project_name, created_at timestamp, and empty resources list

    Raises:
        FileExistsError: If manifest already exists at this location
    """
    project_manifest_path = Path(path) / f"{project_name}_manifest.json"
    if project_manifest_path.exists():
        raise FileExistsError(f"Project manifest already exists at {project_manifest_path}")

    Path(path).mkdir(parents=True, exist_ok=True)

    manifest = {
        "project_name": project_name,
        "created_at": _get_timestamp(),
        "resources": []
    }
    with open(project_manifest_path, "w") as f:
        json.dump(manifest, f, indent=4)
    return manifest


def read_project_manifest(project_manifest_path: str) -> dict:
    """Read and return the complete project manifest with all tracked resources."""
    _check_if_manifest_exists(project_manifest_path)
    with open(project_manifest_path, "r") as f:
        return json.load(f)


def _check_if_manifest_exists(project_manifest_path: str) -> bool:
    """Internal: Check manifest exists, raise helpful error if not."""
    if Path(project_manifest_path).exists():
        return True
    raise FileNotFoundError(f"Project manifest not found at {project_manifest_path}. Please supply the correct path or create a new project manifest using the create_project_manifest function. The default data directory is located at {DATA_ROOT}")


def add_to_project_manifest(project_manifest_path: str, filename: str, type_tag: str, explanation: str | None = 'unknown',
                            timestamp: str | None = None, parent_function_name: str | None = 'unknown',
                            parent_function_inputs: dict | None = None, module_name: str | None = 'unknown') -> None:
    """Add a new resource entry to the project manifest for tracking.

    Args:
        project_manifest_path: Full path to the project manifest file
        filename: Name of the resource file being tracked
        type_tag: Resource type from TYPE_REGISTRY (csv, json)
        explanation: Brief 1-sentence description of what this resource contains
        timestamp: Optional timestamp (auto-generated if None)
        parent_function_name: Tool that produced the resource (usually auto-provided)
        parent_function_inputs: Arguments of that tool (usually auto-provided)
        module_name: Module of that tool (usually auto-provided)

    Raises:
        FileNotFoundError: If manifest doesn't exist. Create with create_project_manifest().
    """
    manifest = read_project_manifest(project_manifest_path)

    manifest["resources"].append({
        "filename": filename,
        "type_tag": type_tag,
        "explanation": explanation,
        "timestamp": timestamp or _get_timestamp(),
        "parent_function_name": parent_function_name,
        "parent_function_inputs": parent_function_inputs or {},
        "module_name": module_name
    })

    with open(project_manifest_path, "w") as f:
        json.dump(manifest, f, indent=4)


def get_all_resources_tools() -> list[Callable]:
    """Return list of all resource management tools for MCP server."""
    return [
        create_project_manifest,
        read_project_manifest,
        get_supported_resource_types,
    ]
