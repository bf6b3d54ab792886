"""Version string helpers.

Handles conversion between Maven version strings and semver objects, with
special handling for incomplete version strings (e.g., "1.0" → "1.0.0"),
plus the snapshot suffix conventions used on release and hotfix branches.
"""

from __future__ import annotations

from collections.abc import Mapping

import semver

SNAPSHOT = "-SNAPSHOT"


def module_key(group_id: str, artifact_id: str) -> str:
    """Build the version-less key used to look modules up in version maps.

    Examples:
        module_key("com.example", "app") → "com.example:app"
    """
    return f"{group_id}:{artifact_id}"


def is_snapshot(version: str) -> bool:
    """Return True for development versions ending in -SNAPSHOT."""
    return version.casefold().endswith(SNAPSHOT.casefold())


def strip_snapshot(version: str) -> str:
    """Remove a trailing -SNAPSHOT, leaving release versions untouched.

    Examples:
        "1.2-SNAPSHOT" → "1.2"
        "1.2" → "1.2"
    """
    if is_snapshot(version):
        return version[: -len(SNAPSHOT)]
    return version


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Handles incomplete versions by padding with zeros:
    - "1" → "1.0.0"
    - "1.2" → "1.2.0"
    - "1.2.3" → "1.2.3"

    Only the first 3 components are used (major.minor.patch).
    Qualifiers such as "-beta" are not supported and raise ValueError.
    """
    parts = version_str.split(".")
    # Pad with zeros to ensure we have at least 3 parts
    while len(parts) < 3:
        parts.append("0")
    return semver.Version.parse(".".join(parts[:3]))


def bump_patch(version_str: str) -> str:
    """Increment the patch version and return as a string.

    Examples:
        "1.2.3" → "1.2.4"
        "1.0" → "1.0.1"
        "2" → "2.0.1"
    """
    return str(parse_version(version_str).bump_patch())


def next_development_version(version_str: str) -> str:
    """Compute the snapshot version that follows a release.

    Examples:
        "1.2.3" → "1.2.4-SNAPSHOT"
        "1.2-SNAPSHOT" → "1.2.1-SNAPSHOT"
    """
    return bump_patch(strip_snapshot(version_str)) + SNAPSHOT


def branch_suffix(suffix: str | None) -> str:
    """Normalize a configured branch-version suffix ("release" → "-release")."""
    if suffix is None or not suffix.strip():
        return ""
    return f"-{suffix}"


def to_branch_snapshot(
    versions: Mapping[str, str], label: str, suffix: str = ""
) -> dict[str, str]:
    """Turn the entries equal to label into branch snapshot versions.

    Only entries matching the label (case-insensitively) change; every other
    module keeps its version, so reactors with per-module versions still map
    cleanly.

    Examples:
        to_branch_snapshot({"a:b": "2.0"}, "2.0", "-release")
            → {"a:b": "2.0-release-SNAPSHOT"}
    """
    folded = label.casefold()
    return {
        key: value + suffix + SNAPSHOT if value.casefold() == folded else value
        for key, value in versions.items()
    }


def from_branch_snapshot(
    versions: Mapping[str, str], label: str, suffix: str = ""
) -> dict[str, str]:
    """Inverse of to_branch_snapshot: strip suffix + -SNAPSHOT from label entries.

    Examples:
        from_branch_snapshot({"a:b": "2.0-release-SNAPSHOT"}, "2.0", "-release")
            → {"a:b": "2.0"}
    """
    marker = suffix + SNAPSHOT
    folded = (label + marker).casefold()
    return {
        key: value[: -len(marker)] if value.casefold() == folded else value
        for key, value in versions.items()
    }
