"""Shared test fixtures."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from flow_versions.models import ModuleInfo

POM_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<project xmlns="http://maven.apache.org/POM/4.0.0" '
    'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" '
    'xsi:schemaLocation="http://maven.apache.org/POM/4.0.0 '
    'http://maven.apache.org/xsd/maven-4.0.0.xsd">\n'
)

ROOT_POM = (
    POM_HEADER
    + """\
  <!-- reactor root -->
  <modelVersion>4.0.0</modelVersion>
  <groupId>com.example</groupId>
  <artifactId>parent</artifactId>
  <version>1.0-SNAPSHOT</version>
  <packaging>pom</packaging>
  <name>Example Parent</name>
  <modules>
    <module>core</module>
    <module>app</module>
  </modules>
  <properties>
    <core.version>1.0-SNAPSHOT</core.version>
  </properties>
  <dependencyManagement>
    <dependencies>
      <dependency>
        <groupId>com.example</groupId>
        <artifactId>core</artifactId>
        <version>${core.version}</version>
      </dependency>
    </dependencies>
  </dependencyManagement>
  <scm>
    <connection>scm:git:git@example.com:example/example.git</connection>
    <tag>HEAD</tag>
  </scm>
</project>
"""
)

CORE_POM = (
    POM_HEADER
    + """\
  <modelVersion>4.0.0</modelVersion>
  <parent>
    <groupId>com.example</groupId>
    <artifactId>parent</artifactId>
    <version>1.0-SNAPSHOT</version>
  </parent>
  <artifactId>core</artifactId>
  <dependencies>
    <dependency>
      <groupId>junit</groupId>
      <artifactId>junit</artifactId>
      <version>4.13.2</version>
    </dependency>
  </dependencies>
</project>
"""
)

APP_POM = (
    POM_HEADER
    + """\
  <modelVersion>4.0.0</modelVersion>
  <parent>
    <groupId>com.example</groupId>
    <artifactId>parent</artifactId>
    <version>1.0-SNAPSHOT</version>
  </parent>
  <artifactId>app</artifactId>
  <version>1.0-SNAPSHOT</version>
  <name>Example App</name>
  <dependencies>
    <dependency>
      <groupId>${project.groupId}</groupId>
      <artifactId>core</artifactId>
      <version>1.0-SNAPSHOT</version>
    </dependency>
  </dependencies>
</project>
"""
)


@pytest.fixture
def reactor_dir(tmp_path: Path) -> Path:
    """Create a three-module reactor: parent (root), core (inherits), app."""
    (tmp_path / "pom.xml").write_text(ROOT_POM)
    for name, content in (("core", CORE_POM), ("app", APP_POM)):
        module_dir = tmp_path / name
        module_dir.mkdir()
        (module_dir / "pom.xml").write_text(content)
    return tmp_path


@pytest.fixture
def reactor_modules(reactor_dir: Path) -> list[ModuleInfo]:
    """ModuleInfo list matching reactor_dir, in reactor order."""
    return [
        ModuleInfo(
            group_id="com.example",
            artifact_id="parent",
            version="1.0-SNAPSHOT",
            name="Example Parent",
            path=str(reactor_dir / "pom.xml"),
        ),
        ModuleInfo(
            group_id="com.example",
            artifact_id="core",
            version="1.0-SNAPSHOT",
            name="core",
            path=str(reactor_dir / "core" / "pom.xml"),
            parent_key="com.example:parent",
            deps=["com.example:parent"],
        ),
        ModuleInfo(
            group_id="com.example",
            artifact_id="app",
            version="1.0-SNAPSHOT",
            name="Example App",
            path=str(reactor_dir / "app" / "pom.xml"),
            parent_key="com.example:parent",
            deps=["com.example:parent", "com.example:core"],
        ),
    ]


def parse_pom(body: str, namespaced: bool = True) -> ET.Element:
    """Parse a <project> body into an element tree root."""
    xmlns = ' xmlns="http://maven.apache.org/POM/4.0.0"' if namespaced else ""
    return ET.fromstring(f"<project{xmlns}>{body}</project>")
