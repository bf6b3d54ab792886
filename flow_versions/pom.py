"""pom.xml reading and writing utilities.

Uses xml.etree.ElementTree with comment preservation so rewritten poms keep
their layout, comments and default namespace. This is important for
maintaining readable, diff-friendly files.

All child lookups are namespace aware: when the <project> root declares a
default namespace every lookup uses it, otherwise no namespace is used.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from collections.abc import Iterator
from copy import deepcopy
from pathlib import Path

from .errors import ConfigError
from .versions import module_key

POM_NS = "http://maven.apache.org/POM/4.0.0"
DEFAULT_PLUGIN_GROUP = "org.apache.maven.plugins"

# Containers holding references to other artifacts, relative to <project>
# or to a <profile>: (path to the container, element name of one reference).
REFERENCE_CONTAINERS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("dependencies",), "dependency"),
    (("dependencyManagement", "dependencies"), "dependency"),
    (("build", "plugins"), "plugin"),
    (("build", "pluginManagement", "plugins"), "plugin"),
    (("build", "extensions"), "extension"),
    (("reporting", "plugins"), "plugin"),
)
MANAGEMENT_SECTIONS = frozenset({"dependencyManagement", "pluginManagement"})

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'
_PROLOG = re.compile(r"(?:\s+|<\?.*?\?>|<!--.*?-->|<!DOCTYPE[^>]*>)*", re.DOTALL)
_START_TAG = re.compile(
    r"<[^\s/>!?]+(?:\s+[^\s=/>]+\s*=\s*(?:\"[^\"]*\"|'[^']*'))*\s*>"
)
_XMLNS = re.compile(r"xmlns(?::([\w.-]+))?\s*=\s*[\"']([^\"']*)[\"']")


def load_pom(path: Path) -> ET.ElementTree:
    """Load and parse a pom.xml file, keeping comments.

    Raises:
        ConfigError: If the file is missing or not well-formed XML.
    """
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
    try:
        return ET.parse(path, parser=parser)
    except (OSError, ET.ParseError) as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc


def save_pom(path: Path, tree: ET.ElementTree) -> None:
    """Write a pom back to disk.

    The text in front of the root element (XML declaration, license header)
    and the root start tag are taken over from the file being replaced, so
    a rewrite only shows the changed elements in a diff. The default
    namespace stays unprefixed.
    """
    if path.exists():
        prolog, start_tag = split_prolog(path.read_text(encoding="utf-8"))
    else:
        prolog, start_tag = XML_DECLARATION, None

    root = tree.getroot()
    body = ET.tostring(_without_default_namespace(root), encoding="unicode")
    if start_tag is not None:
        body = _restore_start_tag(body, start_tag)
    # ElementTree drops the trailing newline of the original file
    path.write_text(prolog + body + "\n", encoding="utf-8")


def split_prolog(text: str) -> tuple[str, str | None]:
    """Split a pom's text into its prolog and the root element's start tag.

    The prolog is everything before the root element: XML declaration,
    comments, processing instructions and whitespace.
    """
    prolog = _PROLOG.match(text)
    end = prolog.end() if prolog else 0
    start_tag = _START_TAG.match(text, end)
    return text[:end], start_tag.group() if start_tag else None


def _without_default_namespace(root: ET.Element) -> ET.Element:
    """Copy of root whose default-namespace tags are unqualified."""
    ns = namespace_of(root)
    if ns is None:
        return root
    prefix = f"{{{ns}}}"
    copy = deepcopy(root)
    for el in copy.iter():
        if isinstance(el.tag, str) and el.tag.startswith(prefix):
            el.tag = el.tag[len(prefix) :]
    copy.set("xmlns", ns)
    return copy


def _restore_start_tag(body: str, start_tag: str) -> str:
    """Swap the serialized root start tag for the original one.

    Kept as serialized when it declares a namespace prefix the original
    does not.
    """
    serialized = _START_TAG.match(body)
    if serialized is None:
        return body
    if not set(_XMLNS.findall(serialized.group())) <= set(_XMLNS.findall(start_tag)):
        return body
    return start_tag + body[serialized.end() :]


def namespace_of(root: ET.Element) -> str | None:
    """Return the default namespace declared by the root element, if any."""
    if root.tag.startswith("{"):
        return root.tag[1:].split("}", 1)[0]
    return None


def qname(name: str, ns: str | None) -> str:
    """Qualify an element name with the document namespace."""
    return f"{{{ns}}}{name}" if ns else name


def local_name(el: ET.Element) -> str:
    tag = el.tag
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def find_child(el: ET.Element | None, name: str, ns: str | None) -> ET.Element | None:
    """Find the first direct child named name, or None."""
    if el is None:
        return None
    return el.find(qname(name, ns))


def find_path(el: ET.Element | None, names: tuple[str, ...], ns: str | None):
    """Follow a chain of child names, returning None at the first gap."""
    for name in names:
        el = find_child(el, name, ns)
        if el is None:
            return None
    return el


def child_text(el: ET.Element | None, name: str, ns: str | None) -> str | None:
    """Stripped text of a direct child, or None if missing or empty."""
    child = find_child(el, name, ns)
    if child is not None and child.text and child.text.strip():
        return child.text.strip()
    return None


def insert_child_after(
    parent: ET.Element, anchor: ET.Element, name: str, text: str, ns: str | None
) -> ET.Element:
    """Insert a new child element immediately after anchor.

    The new element copies the anchor's tail so it lands on its own line
    with the same indentation.
    """
    index = list(parent).index(anchor)
    child = ET.Element(qname(name, ns))
    child.text = text
    child.tail = anchor.tail
    parent.insert(index + 1, child)
    return child


def append_child(
    parent: ET.Element, name: str, text: str, ns: str | None
) -> ET.Element:
    """Append a new child element, following the siblings' indentation."""
    child = ET.Element(qname(name, ns))
    child.text = text
    children = list(parent)
    if children:
        last = children[-1]
        child.tail = last.tail
        if len(children) > 1:
            last.tail = children[-2].tail
        else:
            last.tail = parent.text
    parent.append(child)
    return child


def iter_reference_scopes(root: ET.Element, ns: str | None) -> Iterator[ET.Element]:
    """Yield the project root followed by every <profile> element."""
    yield root
    profiles = find_child(root, "profiles", ns)
    if profiles is not None:
        yield from profiles.findall(qname("profile", ns))


def iter_artifact_references(
    root: ET.Element, ns: str | None, managed: bool = True
) -> Iterator[ET.Element]:
    """Yield every dependency, plugin and extension element of the document.

    With managed=False, dependencyManagement and pluginManagement entries are
    skipped: they declare versions without creating a reference.
    """
    for scope in iter_reference_scopes(root, ns):
        for path, name in REFERENCE_CONTAINERS:
            if not managed and path[0] in MANAGEMENT_SECTIONS:
                continue
            container = find_path(scope, path, ns)
            if container is not None:
                yield from container.findall(qname(name, ns))


def reference_key(ref: ET.Element, ns: str | None, project_group: str) -> str | None:
    """Return the "group:artifact" key of a dependency/plugin element.

    ${project.groupId} resolves to the enclosing module's group, and plugins
    without a groupId default to org.apache.maven.plugins.
    """
    artifact_id = child_text(ref, "artifactId", ns)
    if artifact_id is None:
        return None
    group_id = child_text(ref, "groupId", ns)
    if group_id is None:
        group_id = DEFAULT_PLUGIN_GROUP if local_name(ref) != "dependency" else None
    elif group_id in ("${project.groupId}", "${pom.groupId}", "${groupId}"):
        group_id = project_group
    if group_id is None:
        return None
    return module_key(group_id, artifact_id)


def get_parent_key(root: ET.Element, ns: str | None) -> str | None:
    """Key of the declared <parent>, or None when the pom has no parent."""
    parent = find_child(root, "parent", ns)
    if parent is None:
        return None
    group_id = child_text(parent, "groupId", ns)
    artifact_id = child_text(parent, "artifactId", ns)
    if group_id is None or artifact_id is None:
        raise ConfigError("<parent> must declare groupId and artifactId")
    return module_key(group_id, artifact_id)


def get_project_coordinates(root: ET.Element, ns: str | None) -> tuple[str, str, str]:
    """Return (groupId, artifactId, version), inheriting from <parent>.

    Raises:
        ConfigError: If a coordinate is neither declared nor inherited.
    """
    parent = find_child(root, "parent", ns)
    artifact_id = child_text(root, "artifactId", ns)
    group_id = child_text(root, "groupId", ns) or child_text(parent, "groupId", ns)
    version = child_text(root, "version", ns) or child_text(parent, "version", ns)
    if artifact_id is None or group_id is None or version is None:
        raise ConfigError(
            "pom.xml must declare groupId, artifactId and version "
            "(directly or through <parent>)"
        )
    return group_id, artifact_id, version


def get_module_dirs(root: ET.Element, ns: str | None) -> list[str]:
    """Extract <modules><module> entries (paths relative to the pom)."""
    modules = find_child(root, "modules", ns)
    if modules is None:
        return []
    return [
        m.text.strip()
        for m in modules.findall(qname("module", ns))
        if m.text and m.text.strip()
    ]
