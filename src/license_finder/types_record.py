from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .types_sources import LicenseSources, unique


@dataclass
class ModuleLicenseRecord:
    name: str
    version: Optional[str] = None
    directory: Optional[Path] = None
    dev: bool = False
    license_sources: LicenseSources = field(default_factory=LicenseSources)

    @property
    def id(self) -> str:
        return f"{self.name}@{self.version}" if self.version else self.name

    def summary(self) -> list[str]:
        """Return every license found for the module, deduplicated and sorted.

        The summary is always computed from the three sources so it can never
        disagree with them.
        """

        sources = self.license_sources
        return sorted(
            unique(
                [
                    *sources.package.summary(),
                    *sources.license.summary(),
                    *sources.readme.summary(),
                ]
            )
        )
