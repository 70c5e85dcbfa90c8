"""Application version string and build description."""

from __future__ import annotations

import platform
import sys
from dataclasses import dataclass

SEMVER_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz-."


def normalize_ver_string(value: str) -> str:
    """Return *value* with every character outside the semver alphabet removed."""
    return "".join(ch for ch in value if ch in SEMVER_ALPHABET)


@dataclass
class VersionInfo:
    """Version components plus optional branding for the build description."""

    major: str = "1"
    minor: str = "0"
    patch: str = "0"
    pre_release: str = "dev"
    build_metadata: str = ""
    brand: str = ""
    component: str = ""

    def string(self) -> str:
        """Return the version formatted per semantic versioning 2.0.0."""
        version = f"{self.major}.{self.minor}.{self.patch}"
        pre_release = normalize_ver_string(self.pre_release)
        if pre_release:
            version += "-" + pre_release
        build_metadata = normalize_ver_string(self.build_metadata)
        if build_metadata:
            version += "+" + build_metadata
        return version

    def build_info(self) -> str:
        """Return a one-line description of the version and runtime."""
        parts = [f"v{self.string()} ("]
        if self.brand:
            parts.append(self.brand + ", ")
        if self.component:
            parts.append(self.component + ", ")
        parts.append(
            f"{platform.python_implementation()} {platform.python_version()} "
            f"{sys.platform}/{platform.machine()})"
        )
        return "".join(parts)