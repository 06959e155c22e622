from __future__ import annotations

import csv
import io
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from .errors import EmptyInputError, InvalidInputError, ReportError
from .tree import ReportTree, render_tree
from .types import FileSource, ModuleLicenseRecord

SUMMARY_MODES = ("off", "simple", "detail")
FORMATS = ("standard", "csv", "json")


@dataclass
class RenderResult:
    output: Optional[str] = None
    error: Optional[ReportError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> str:
        if self.error is not None:
            raise self.error
        return self.output or ""


def _validate(records: object) -> Optional[ReportError]:
    if not isinstance(records, (list, tuple)):
        return InvalidInputError(records)
    if len(records) < 1:
        return EmptyInputError()
    return None


def create_module_node(record: ModuleLicenseRecord) -> ReportTree:
    node = ReportTree(label=f"{record.id} [license(s): {', '.join(record.summary())}]")
    sources = record.license_sources

    summary = sources.package.summary()
    if summary:
        node.nodes.append("package.json:  " + ", ".join(summary))

    summary = sources.license.summary()
    if summary:
        node.nodes.append("license files: " + ", ".join(summary))

    summary = sources.readme.summary()
    if summary:
        node.nodes.append("readme files: " + ", ".join(summary))

    return node


def build_license_summary(records: Sequence[ModuleLicenseRecord]) -> dict[str, list[str]]:
    """Map every license seen to the ids of the modules carrying it, in input order."""

    summary: dict[str, list[str]] = {}
    for record in records:
        for license_name in record.summary():
            summary.setdefault(license_name, []).append(record.id)
    return summary


def create_summary(summary: dict[str, list[str]]) -> ReportTree:
    return ReportTree(label="LICENSES: " + ", ".join(sorted(summary)))


def modules_by_license(summary: dict[str, list[str]]) -> ReportTree:
    return ReportTree(
        label="LICENSES:",
        nodes=[ReportTree(label=license_name, nodes=list(ids)) for license_name, ids in summary.items()],
    )


def render_standard(records: Sequence[ModuleLicenseRecord], summary_mode: Optional[str] = None) -> RenderResult:
    """Render the console tree report.

    ``summary_mode`` may be ``"simple"`` (one line listing the licenses seen)
    or ``"detail"`` (modules grouped by license); any other value leaves the
    summary out. Invalid input is reported through the result, never raised.
    """

    error = _validate(records)
    if error:
        return RenderResult(error=error)

    # One line break between nodes, without the blank line a trailing newline would add.
    output = [render_tree(create_module_node(record)).rstrip("\n") for record in records]
    summary = build_license_summary(records)

    if summary_mode == "simple":
        output.append(render_tree(create_summary(summary)).rstrip("\n"))
    elif summary_mode == "detail":
        output.append(render_tree(modules_by_license(summary)).rstrip("\n"))

    return RenderResult(output="\n".join(output))


def _file_rows(source: FileSource) -> list[dict]:
    return [{"path": str(item.path), "licenses": list(item.names)} for item in source.files]


def _module_rows(records: Sequence[ModuleLicenseRecord]):
    for record in records:
        sources = record.license_sources
        yield {
            "id": record.id,
            "name": record.name,
            "version": record.version,
            "directory": str(record.directory) if record.directory else None,
            "dev": record.dev,
            "licenses": record.summary(),
            "sources": {
                "package": sources.package.summary(),
                "license": {"licenses": sources.license.summary(), "files": _file_rows(sources.license)},
                "readme": {"licenses": sources.readme.summary(), "files": _file_rows(sources.readme)},
            },
        }


def render_json(records: Sequence[ModuleLicenseRecord], summary_mode: Optional[str] = None) -> RenderResult:
    error = _validate(records)
    if error:
        return RenderResult(error=error)

    payload: dict = {"modules": list(_module_rows(records))}
    summary = build_license_summary(records)
    if summary_mode == "simple":
        payload["licenses"] = sorted(summary)
    elif summary_mode == "detail":
        payload["licenses"] = summary
    return RenderResult(output=json.dumps(payload, indent=2))


def render_csv(records: Sequence[ModuleLicenseRecord], summary_mode: Optional[str] = None) -> RenderResult:
    error = _validate(records)
    if error:
        return RenderResult(error=error)

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["name", "version", "directory", "dev", "licenses", "package", "license files", "readme files"])
    for record in records:
        sources = record.license_sources
        writer.writerow(
            [
                record.name,
                record.version or "",
                str(record.directory) if record.directory else "",
                "yes" if record.dev else "no",
                ", ".join(record.summary()),
                ", ".join(sources.package.summary()),
                ", ".join(sources.license.summary()),
                ", ".join(sources.readme.summary()),
            ]
        )
    return RenderResult(output=buffer.getvalue().rstrip("\n"))


def render_report(
    records: Sequence[ModuleLicenseRecord], fmt: str, summary_mode: Optional[str] = None
) -> RenderResult:
    fmt = fmt.lower()
    if fmt == "standard":
        return render_standard(records, summary_mode)
    if fmt == "csv":
        return render_csv(records, summary_mode)
    if fmt == "json":
        return render_json(records, summary_mode)
    raise ValueError(f"Unknown report format: {fmt}")


def write_report(
    records: Sequence[ModuleLicenseRecord],
    fmt: str,
    destination: Path | None,
    summary_mode: Optional[str] = None,
) -> RenderResult:
    result = render_report(records, fmt, summary_mode)
    if result.ok and destination:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(result.output or "")
    return result
