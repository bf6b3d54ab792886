"""Exception hierarchy for flow-versions.

Every failure raised by the library derives from FlowVersionsError so the
CLI can report it in one place. Nothing here is retried: the operator fixes
the project metadata and runs the step again.
"""

from __future__ import annotations


class FlowVersionsError(Exception):
    """Base class for all flow-versions errors."""


class ConfigError(FlowVersionsError):
    """A settings file or pom.xml could not be read."""


class VersionResolutionError(FlowVersionsError):
    """Target versions could not be computed for the reactor."""


class RewriteError(FlowVersionsError):
    """A change could not be applied to a module's document."""


class MissingVersionError(RewriteError):
    """No target version resolves for a module or its parent."""


class ReleaseError(FlowVersionsError):
    """A release workflow step failed."""
