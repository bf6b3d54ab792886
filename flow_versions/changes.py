"""Changes applied to a module's pom.xml.

Each change is a small frozen value built once per update pass from the
version maps it needs, then applied to every module of the reactor. The
set of changes is closed:

- SelfVersionChange: the module's own <version>
- ParentVersionChange: the <parent><version> reference
- DependencyVersionChange: versions of references to reactor modules
- ScmTagChange: <scm><tag> rendered from a template
- ScmHeadTagChange: <scm><tag> forced to HEAD

apply() mutates the document in place and returns a ChangeResult holding the
modified flag and a work log. Changes never read each other's effects, so
their order inside a changeset is a presentation convention only.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from string import Template
from typing import ClassVar

from .errors import MissingVersionError, RewriteError
from .models import ChangeResult, ModuleInfo
from .pom import (
    append_child,
    find_child,
    insert_child_after,
    iter_artifact_references,
    local_name,
    namespace_of,
    reference_key,
)
from .version_map import VersionMap
from .versions import module_key

HEAD = "HEAD"

# Version expressions that always follow the project's own version
PROJECT_VERSION_EXPRESSIONS = frozenset({"project.version", "pom.version", "version"})


def _require_version(
    versions: VersionMap, key: str, consistent: bool | None, what: str
) -> str:
    version = versions.resolve(key, consistent)
    if version is None:
        raise MissingVersionError(f"{what} not found")
    return version


def _text(el: ET.Element) -> str:
    return (el.text or "").strip()


@dataclass(frozen=True)
class SelfVersionChange:
    """Set the module's own version.

    An explicit <version> is always overwritten. A module inheriting its
    version from the parent only gets an explicit <version> when its target
    differs from the parent's target; otherwise inheritance is kept.
    """

    release_versions: VersionMap
    consistent: bool | None = None

    title: ClassVar[str] = "Update Project Version"

    def apply(self, module: ModuleInfo, root: ET.Element) -> ChangeResult:
        result = ChangeResult(title=self.title)
        ns = namespace_of(root)
        release_version = _require_version(
            self.release_versions,
            module.key,
            self.consistent,
            f"release version for {module.display_name}",
        )

        version_el = find_child(root, "version", ns)
        if version_el is not None:
            result.log.append(
                f"updating version '{_text(version_el)}' to '{release_version}'"
            )
            version_el.text = release_version
            result.modified = True
            return result

        parent_version = self.release_versions.resolve(
            module.parent_key, self.consistent
        )
        if release_version == parent_version:
            return result

        artifact_el = find_child(root, "artifactId", ns)
        if artifact_el is None:
            raise RewriteError(f"{module.display_name} has no <artifactId> element")
        result.log.append(f"setting version to '{release_version}'")
        insert_child_after(root, artifact_el, "version", release_version, ns)
        result.modified = True
        return result


@dataclass(frozen=True)
class ParentVersionChange:
    """Move the <parent> reference from the parent's original to its target.

    A reference that does not point at the parent's original version is
    left alone: it deliberately targets a version this release does not
    manage.
    """

    original_versions: VersionMap
    release_versions: VersionMap
    consistent: bool | None = None

    title: ClassVar[str] = "Update Parent Version"

    def apply(self, module: ModuleInfo, root: ET.Element) -> ChangeResult:
        result = ChangeResult(title=self.title)
        ns = namespace_of(root)
        parent_el = find_child(root, "parent", ns)
        if parent_el is None:
            return result

        group_el = find_child(parent_el, "groupId", ns)
        artifact_el = find_child(parent_el, "artifactId", ns)
        if group_el is None or artifact_el is None:
            raise RewriteError(
                f"<parent> of {module.display_name} must declare groupId "
                "and artifactId"
            )
        parent_key = module_key(_text(group_el), _text(artifact_el))

        # Maven 4 infers the parent version from the reactor
        version_el = find_child(parent_el, "version", ns)
        if version_el is None:
            return result

        current = _text(version_el)
        original = self.original_versions.resolve(parent_key, self.consistent)
        if original is None or current != original:
            return result

        parent_version = _require_version(
            self.release_versions,
            parent_key,
            self.consistent,
            f"release version for parent {parent_key} of {module.display_name}",
        )
        result.log.append(
            f"updating parent version '{current}' to '{parent_version}'"
        )
        version_el.text = parent_version
        result.modified = True
        return result


@dataclass(frozen=True)
class DependencyVersionChange:
    """Rewrite references to reactor modules that carry their original version.

    Covers dependencies, managed dependencies, plugins, managed plugins,
    extensions and report plugins, in the project and in each profile. A
    version given as ${property} rewrites the property instead, once.
    References to artifacts outside the original map are never touched.
    """

    original_versions: VersionMap
    release_versions: VersionMap
    update_dependencies: bool = True

    title: ClassVar[str] = "Update Dependency Versions"

    def apply(self, module: ModuleInfo, root: ET.Element) -> ChangeResult:
        result = ChangeResult(title=self.title)
        if not self.update_dependencies:
            return result

        ns = namespace_of(root)
        properties_el = find_child(root, "properties", ns)
        rewritten_properties: set[str] = set()

        for ref in iter_artifact_references(root, ns):
            key = reference_key(ref, ns, module.group_id)
            if key is None or key not in self.original_versions:
                continue
            version_el = find_child(ref, "version", ns)
            if version_el is None:
                # Version managed elsewhere
                continue

            original = self.original_versions[key]
            current = _text(version_el)
            if current.startswith("${") and current.endswith("}"):
                name = current[2:-1]
                if name in PROJECT_VERSION_EXPRESSIONS or name in rewritten_properties:
                    continue
                prop_el = _find_property(properties_el, name)
                if prop_el is None or _text(prop_el) != original:
                    continue
                target = self._target(key)
                result.log.append(
                    f"updating property '{name}' from '{original}' to '{target}'"
                )
                prop_el.text = target
                rewritten_properties.add(name)
                result.modified = True
                continue

            if current != original:
                continue
            target = self._target(key)
            result.log.append(f"updating {key} version '{current}' to '{target}'")
            version_el.text = target
            result.modified = True

        return result

    def _target(self, key: str) -> str:
        return _require_version(
            self.release_versions, key, None, f"release version for {key}"
        )


def _find_property(properties_el: ET.Element | None, name: str) -> ET.Element | None:
    if properties_el is None:
        return None
    for prop in properties_el:
        if local_name(prop) == name:
            return prop
    return None


def _set_scm_tag(
    result: ChangeResult, root: ET.Element, tag: str
) -> ChangeResult:
    ns = namespace_of(root)
    scm_el = find_child(root, "scm", ns)
    if scm_el is None:
        return result
    tag_el = find_child(scm_el, "tag", ns)
    if tag_el is None:
        result.log.append(f"setting scm tag to '{tag}'")
        append_child(scm_el, "tag", tag, ns)
        result.modified = True
    elif _text(tag_el) != tag:
        result.log.append(f"updating scm tag '{_text(tag_el)}' to '{tag}'")
        tag_el.text = tag
        result.modified = True
    return result


def _has_scm(root: ET.Element) -> bool:
    return find_child(root, "scm", namespace_of(root)) is not None


@dataclass(frozen=True)
class ScmTagChange:
    """Record the release tag name in <scm><tag>.

    The template supports ${version} and ${artifactId}. Documents without an
    <scm> section are left alone.
    """

    release_versions: VersionMap
    consistent: bool | None = None
    tag_template: str = "${version}"

    title: ClassVar[str] = "Update SCM Tag"

    def apply(self, module: ModuleInfo, root: ET.Element) -> ChangeResult:
        result = ChangeResult(title=self.title)
        if not _has_scm(root):
            return result
        version = _require_version(
            self.release_versions,
            module.key,
            self.consistent,
            f"release version for {module.display_name}",
        )
        tag = Template(self.tag_template).safe_substitute(
            version=version, artifactId=module.artifact_id
        )
        return _set_scm_tag(result, root, tag)


@dataclass(frozen=True)
class ScmHeadTagChange:
    """Point <scm><tag> at HEAD on branches that have no release tag yet."""

    release_versions: VersionMap
    consistent: bool | None = None

    title: ClassVar[str] = "Update SCM Tag to HEAD"

    def apply(self, module: ModuleInfo, root: ET.Element) -> ChangeResult:
        result = ChangeResult(title=self.title)
        if not _has_scm(root):
            return result
        _require_version(
            self.release_versions,
            module.key,
            self.consistent,
            f"release version for {module.display_name}",
        )
        return _set_scm_tag(result, root, HEAD)


Change = (
    SelfVersionChange
    | ParentVersionChange
    | DependencyVersionChange
    | ScmTagChange
    | ScmHeadTagChange
)
