from __future__ import annotations

import importlib.metadata as md
import json
import re
from pathlib import Path
from typing import Iterable, List, Optional

from packaging.utils import canonicalize_name
from packaging.version import InvalidVersion, Version

from .errors import CollectionError
from .identify import identify_file, identify_license
from .types import FileSource, LicenseSources, ModuleLicenseRecord

LICENSE_FILE_PATTERN = re.compile(r"^(licen[cs]e|copying|notice)", re.IGNORECASE)
README_FILE_PATTERN = re.compile(r"^readme", re.IGNORECASE)
# Longer License fields hold the license text itself rather than a name.
MAX_DECLARED_NAME_LENGTH = 64


def _read_manifest(path: Path) -> dict | None:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def _declared_licenses(manifest: dict) -> list[str]:
    """Licenses named by ``license``/``licenses`` in a package.json manifest."""

    declared: list[str] = []
    entries = [manifest.get("license")]
    if isinstance(manifest.get("licenses"), list):
        entries.extend(manifest["licenses"])
    elif manifest.get("licenses"):
        entries.append(manifest["licenses"])

    for entry in entries:
        if isinstance(entry, dict):
            entry = entry.get("type")
        if isinstance(entry, str) and entry.strip():
            declared.append(entry.strip())
    return declared


def _matching_files(directory: Path, pattern: re.Pattern[str]) -> list[Path]:
    try:
        entries = sorted(directory.iterdir())
    except OSError:
        return []
    return [entry for entry in entries if entry.is_file() and pattern.match(entry.name)]


def _scan_files(source: FileSource, paths: Iterable[Path]) -> None:
    for path in paths:
        source.add_file(path, identify_file(path))


def _node_record(directory: Path, manifest: dict, dev: bool) -> ModuleLicenseRecord:
    sources = LicenseSources()
    sources.package.add(*_declared_licenses(manifest))
    _scan_files(sources.license, _matching_files(directory, LICENSE_FILE_PATTERN))
    _scan_files(sources.readme, _matching_files(directory, README_FILE_PATTERN))

    version = manifest.get("version")
    return ModuleLicenseRecord(
        name=str(manifest.get("name") or directory.name),
        version=str(version) if version else None,
        directory=directory,
        dev=dev,
        license_sources=sources,
    )


def _module_dirs(node_modules: Path) -> list[Path]:
    try:
        entries = sorted(node_modules.iterdir())
    except OSError:
        return []

    found: list[Path] = []
    for entry in entries:
        if entry.name.startswith(".") or not entry.is_dir():
            continue
        if entry.name.startswith("@"):
            try:
                scoped = sorted(entry.iterdir())
            except OSError:
                continue
            found.extend(child for child in scoped if child.is_dir())
        else:
            found.append(entry)
    return found


def _runtime_dependencies(manifest: dict) -> list[str]:
    names: list[str] = []
    for key in ("dependencies", "optionalDependencies"):
        block = manifest.get(key)
        if isinstance(block, dict):
            names.extend(block)
    return names


def _resolve_module(directory: Path, name: str, root: Path, installed: dict[Path, tuple]) -> Path | None:
    """Find ``name`` the way node does: the nearest ``node_modules`` upward, up to ``root``."""

    current = directory
    while True:
        if current.name != "node_modules":
            candidate = (current / "node_modules" / name).resolve()
            if candidate in installed:
                return candidate
        if current == root or current.parent == current:
            return None
        current = current.parent


def scan_node_modules(
    root: Path, depth: Optional[int] = None, production_only: bool = False
) -> List[ModuleLicenseRecord]:
    """Collect license findings for a node project and its installed modules.

    The project itself comes first, followed by every module under
    ``node_modules`` in directory order, nested ``node_modules`` included up to
    ``depth`` levels (``None`` walks everything, ``0`` keeps only the project).
    A module is flagged ``dev`` unless a chain of ``dependencies`` links it to
    the project, so modules that only dev tooling needs count as dev even when
    they are installed at the top level.
    """

    root = Path(root)
    manifest = _read_manifest(root / "package.json")
    if manifest is None:
        raise CollectionError(f"Unable to read {root / 'package.json'}")

    root_key = root.resolve()
    # resolved path -> (directory as walked, manifest, nesting level)
    installed: dict[Path, tuple[Path, dict, int]] = {root_key: (root, manifest, 0)}

    def _walk(node_modules: Path, level: int) -> None:
        for directory in _module_dirs(node_modules):
            resolved = directory.resolve()
            if resolved in installed:
                continue
            module_manifest = _read_manifest(directory / "package.json")
            if module_manifest is None:
                continue
            installed[resolved] = (directory, module_manifest, level)
            _walk(directory / "node_modules", level + 1)

    _walk(root / "node_modules", 1)

    production = {root_key}
    pending = [root_key]
    while pending:
        directory, module_manifest, _ = installed[pending.pop()]
        for name in _runtime_dependencies(module_manifest):
            target = _resolve_module(directory, name, root, installed)
            if target is not None and target not in production:
                production.add(target)
                pending.append(target)

    records: list[ModuleLicenseRecord] = []
    for key, (directory, module_manifest, level) in installed.items():
        if depth is not None and level > depth:
            continue
        dev = key not in production
        if production_only and dev:
            continue
        records.append(_node_record(directory, module_manifest, dev=dev))
    return records


def _normalize_version(raw: str | None) -> str | None:
    if not raw:
        return None
    try:
        return str(Version(raw))
    except InvalidVersion:
        return raw


def _distribution_licenses(metadata) -> list[str]:
    declared: list[str] = []
    expression = metadata.get("License-Expression")
    if expression:
        declared.append(expression.strip())

    license_field = (metadata.get("License") or "").strip()
    if license_field and license_field.upper() != "UNKNOWN":
        if len(license_field) <= MAX_DECLARED_NAME_LENGTH and "\n" not in license_field:
            declared.append(license_field)
        else:
            declared.extend(identify_license(f" {license_field} "))

    for classifier in metadata.get_all("Classifier") or []:
        if classifier.startswith("License ::"):
            name = classifier.split("::")[-1].strip()
            if name and name != "OSI Approved":
                declared.append(name)
    return declared


def _distribution_record(dist: md.Distribution) -> ModuleLicenseRecord:
    metadata = dist.metadata
    sources = LicenseSources()
    sources.package.add(*_distribution_licenses(metadata))

    metadata_path: Path | None = None
    for entry in dist.files or []:
        path = Path(str(dist.locate_file(entry)))
        if LICENSE_FILE_PATTERN.match(entry.name):
            sources.license.add_file(path, identify_file(path))
        elif entry.name in {"METADATA", "PKG-INFO"}:
            metadata_path = path

    raw = dist.read_text("METADATA") or dist.read_text("PKG-INFO") or ""
    _, _, description = raw.partition("\n\n")
    description = description or metadata.get("Description") or ""
    if description.strip():
        names = identify_license(f" {description} ")
        if metadata_path is not None:
            sources.readme.add_file(metadata_path, names)
        else:
            sources.readme.add(*names)

    return ModuleLicenseRecord(
        name=metadata["Name"],
        version=_normalize_version(dist.version),
        license_sources=sources,
    )


def scan_python_distributions(paths: Optional[Iterable[Path]] = None) -> List[ModuleLicenseRecord]:
    """Collect license findings for installed Python distributions, sorted by name."""

    if paths is not None:
        distributions = md.distributions(path=[str(path) for path in paths])
    else:
        distributions = md.distributions()

    by_name: dict[str, ModuleLicenseRecord] = {}
    for dist in distributions:
        name = dist.metadata.get("Name")
        if not name:
            continue
        key = canonicalize_name(name)
        # The first distribution on the path shadows later ones, as imports do.
        if key not in by_name:
            by_name[key] = _distribution_record(dist)
    return [by_name[key] for key in sorted(by_name)]


def scan_directory(
    root: Path, depth: Optional[int] = None, production_only: bool = False
) -> List[ModuleLicenseRecord]:
    root = Path(root)
    if not (root / "package.json").exists():
        raise CollectionError(f"No package.json found in {root}")
    return scan_node_modules(root, depth=depth, production_only=production_only)
