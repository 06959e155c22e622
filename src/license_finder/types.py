from __future__ import annotations

"""Shared data structures for collected license findings.

The definitions live in small modules (sources and records) so each can
evolve independently while callers keep importing from one place.
"""

from .types_record import ModuleLicenseRecord
from .types_sources import FileLicense, FileSource, LicenseSource, LicenseSources, PackageSource, unique

__all__ = [
    "FileLicense",
    "FileSource",
    "LicenseSource",
    "LicenseSources",
    "ModuleLicenseRecord",
    "PackageSource",
    "unique",
]
