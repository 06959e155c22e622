from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List


def unique(names: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for name in names:
        if name not in seen:
            seen.add(name)
            ordered.append(name)
    return ordered


@dataclass(frozen=True)
class FileLicense:
    path: Path
    names: tuple[str, ...] = ()


@dataclass
class LicenseSource:
    names: List[str] = field(default_factory=list)

    def add(self, *names: str) -> None:
        self.names.extend(name for name in names if name)

    def summary(self) -> list[str]:
        return unique(self.names)


@dataclass
class PackageSource(LicenseSource):
    """Licenses declared by the module's manifest, taken as written."""


@dataclass
class FileSource(LicenseSource):
    """Licenses identified in a set of files (license texts or readmes)."""

    files: List[FileLicense] = field(default_factory=list)

    def add_file(self, path: Path, names: Iterable[str]) -> None:
        found = tuple(names)
        self.files.append(FileLicense(path=path, names=found))

    def summary(self) -> list[str]:
        return unique([*self.names, *(name for item in self.files for name in item.names)])


@dataclass
class LicenseSources:
    package: PackageSource = field(default_factory=PackageSource)
    license: FileSource = field(default_factory=FileSource)
    readme: FileSource = field(default_factory=FileSource)
