"""Immutable module → version maps.

A VersionMap answers "which version should module X carry?" for one role of
an operation (original or target). Consistent maps stand in for reactors
where every module shares a single version: a lookup miss then falls back to
any value in the map.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping


class VersionMap(Mapping[str, str]):
    """Read-only mapping of "group:artifact" keys to version strings.

    Args:
        versions: Source mapping; copied, so later changes to it are not seen.
        consistent: Declare that all real values are identical, enabling the
                    fallback in resolve().
    """

    __slots__ = ("_versions", "_consistent")

    def __init__(
        self, versions: Mapping[str, str] | None = None, *, consistent: bool = False
    ) -> None:
        self._versions: dict[str, str] = dict(versions or {})
        self._consistent = consistent

    @property
    def consistent(self) -> bool:
        return self._consistent

    def __getitem__(self, key: str) -> str:
        return self._versions[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._versions)

    def __len__(self) -> int:
        return len(self._versions)

    def __repr__(self) -> str:
        return f"VersionMap({self._versions!r}, consistent={self._consistent})"

    def resolve(self, key: str | None, consistent: bool | None = None) -> str | None:
        """Look up a module's version, applying the consistency fallback.

        Args:
            key: Module key; None (e.g. no parent) always resolves to None.
            consistent: Overrides the map's own flag when not None.

        Returns:
            The mapped version, any value of the map when the key misses in
            consistent mode, or None.
        """
        if key is None:
            return None
        version = self._versions.get(key)
        if version:
            return version
        if consistent is None:
            consistent = self._consistent
        if consistent and self._versions:
            return next(iter(self._versions.values()))
        return None

    def with_consistency(self, consistent: bool) -> VersionMap:
        """Return a copy with the consistent flag replaced."""
        return VersionMap(self._versions, consistent=consistent)
