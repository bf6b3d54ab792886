"""Tests for flow_versions.rewriter."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

import pytest
from conftest import parse_pom

from flow_versions.changes import SelfVersionChange
from flow_versions.changeset import Changeset
from flow_versions.errors import MissingVersionError, RewriteError
from flow_versions.models import ModuleInfo
from flow_versions.rewriter import apply_changes, rewrite_modules
from flow_versions.version_map import VersionMap

VERSION = "{http://maven.apache.org/POM/4.0.0}version"


def module(artifact_id: str, path: str = "") -> ModuleInfo:
    return ModuleInfo(
        group_id="g", artifact_id=artifact_id, version="1.0-SNAPSHOT", path=path
    )


def self_version(versions: dict[str, str]):
    return lambda _module: Changeset().with_change(
        SelfVersionChange(VersionMap(versions))
    )


class TestRewriteModules:
    def test_rewrites_in_order(self) -> None:
        modules = [module("a"), module("b")]
        documents = {
            "g:a": parse_pom("<artifactId>a</artifactId><version>1.0-SNAPSHOT</version>"),
            "g:b": parse_pom("<artifactId>b</artifactId><version>1.0-SNAPSHOT</version>"),
        }

        outcomes = rewrite_modules(
            modules, documents, self_version({"g:a": "1.0", "g:b": "1.1"})
        )

        assert [o.module for o in outcomes] == ["g:a", "g:b"]
        assert documents["g:a"].find(VERSION).text == "1.0"
        assert documents["g:b"].find(VERSION).text == "1.1"

    def test_stops_at_first_failure(self) -> None:
        """Modules before the failure stay rewritten, later ones are untouched."""
        modules = [module("a"), module("b"), module("c")]
        documents = {
            key: parse_pom(
                f"<artifactId>{key[2:]}</artifactId><version>1.0-SNAPSHOT</version>"
            )
            for key in ("g:a", "g:b", "g:c")
        }

        with pytest.raises(MissingVersionError):
            rewrite_modules(
                modules, documents, self_version({"g:a": "1.0", "g:c": "1.0"})
            )

        assert documents["g:a"].find(VERSION).text == "1.0"
        assert documents["g:b"].find(VERSION).text == "1.0-SNAPSHOT"
        assert documents["g:c"].find(VERSION).text == "1.0-SNAPSHOT"

    def test_missing_document(self) -> None:
        with pytest.raises(RewriteError, match="g:a"):
            rewrite_modules([module("a")], {}, self_version({"g:a": "1.0"}))


class TestApplyChanges:
    def test_writes_modified_pom(self, reactor_dir: Path) -> None:
        path = reactor_dir / "app" / "pom.xml"
        app = ModuleInfo(
            group_id="com.example",
            artifact_id="app",
            version="1.0-SNAPSHOT",
            path=str(path),
        )

        outcome = apply_changes(
            app, self_version({"com.example:app": "1.0"})(app)
        )

        assert outcome.modified is True
        tree = ET.parse(path)
        assert tree.getroot().find(VERSION).text == "1.0"

    def test_unmodified_pom_not_written(self, reactor_dir: Path) -> None:
        path = reactor_dir / "core" / "pom.xml"
        before = path.read_text()
        core = ModuleInfo(
            group_id="com.example",
            artifact_id="core",
            version="1.0-SNAPSHOT",
            path=str(path),
            parent_key="com.example:parent",
        )
        versions = {"com.example:core": "1.0", "com.example:parent": "1.0"}

        outcome = apply_changes(core, self_version(versions)(core))

        assert outcome.modified is False
        assert path.read_text() == before

    def test_failure_leaves_file_alone(self, reactor_dir: Path) -> None:
        path = reactor_dir / "app" / "pom.xml"
        before = path.read_text()
        app = module("app", path=str(path))

        with pytest.raises(MissingVersionError):
            apply_changes(app, self_version({})(app))

        assert path.read_text() == before
