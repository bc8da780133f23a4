# tests/test_rule_discovery.py
"""Tests for extension-based rule discovery."""
import os
from pathlib import Path

import pytest

from textify.config.settings import DirRule, RuleStore
from textify.core.discovery.pattern_matching import IgnoreMatcher
from textify.core.discovery.rule_discovery import discover_rules, scan_extensions
from textify.exceptions import DiscoveryError


@pytest.fixture
def sample_project(make_project):
    return make_project({
        "main.go": "package main",
        "README.md": "# readme",
        "Makefile": "all:",
        ".env": "SECRET=1",
        "app.log": "ignored by gitignore",
        ".gitignore": "node_modules/\n*.log\n",
        "node_modules/pkg/index.js": "module.exports = {}",
        "frontend/app.ts": "export {}",
        "frontend/styles/site.CSS": "body {}",
        ".git/HEAD": "ref: refs/heads/main",
        ".git/hooks/pre-commit.sample": "#!/bin/sh",
        "docs/": None,
    })


class TestScanExtensions:
    def test_collects_lowercased_visible_extensions(self, sample_project: Path):
        matcher = IgnoreMatcher.from_root(sample_project)

        extensions = scan_extensions(sample_project, sample_project, matcher)

        assert extensions == ("css", "go", "md", "ts")

    def test_dotfiles_and_bare_names_have_no_extension(self, make_project):
        root = make_project({".bashrc": "x", "LICENSE": "x", "weird.": "x", "a.b.c": "x"})

        assert scan_extensions(root, root, IgnoreMatcher()) == ("c",)


class TestDiscoverRules:
    def test_fresh_store_gets_root_and_top_level_rules(self, sample_project: Path):
        store = discover_rules(sample_project)

        assert store.keys() == [".", "docs", "frontend"]
        assert store.get(".") == DirRule(enabled=True, extensions=("css", "go", "md", "ts"))
        assert store.get("frontend") == DirRule(enabled=True, extensions=("css", "ts"))
        assert store.get("docs") == DirRule(enabled=True, extensions=())

    def test_ignored_and_vcs_directories_get_no_rule(self, sample_project: Path):
        store = discover_rules(sample_project)

        assert "node_modules" not in store
        assert ".git" not in store

    def test_does_not_recurse_rule_granularity(self, sample_project: Path):
        store = discover_rules(sample_project)

        assert "frontend/styles" not in store

    def test_existing_rules_are_never_overwritten(self, sample_project: Path):
        existing = RuleStore({
            ".": DirRule(extensions=("py",)),
            "frontend": DirRule(extensions=("vue",), exclude=("dist",)),
        })

        store = discover_rules(sample_project, existing)

        assert store.get(".") == DirRule(extensions=("py",))
        assert store.get("frontend") == DirRule(extensions=("vue",), exclude=("dist",))
        assert "docs" in store

    def test_empty_root_rule_is_filled_but_keeps_other_fields(self, sample_project: Path):
        existing = RuleStore({".": DirRule(include=("secret.env",), exclude_extensions=("lock",))})

        store = discover_rules(sample_project, existing)

        root_rule = store.get(".")
        assert root_rule.extensions == ("css", "go", "md", "ts")
        assert root_rule.include == ("secret.env",)
        assert root_rule.exclude_extensions == ("lock",)

    def test_input_store_is_not_mutated(self, sample_project: Path):
        existing = RuleStore({"frontend": DirRule(extensions=("ts",))})

        discover_rules(sample_project, existing)

        assert existing.keys() == ["frontend"]

    def test_discovery_is_repeatable(self, sample_project: Path):
        first = discover_rules(sample_project)
        second = discover_rules(sample_project, first)

        assert first == second

    def test_unlistable_root_is_fatal(self, tmp_path: Path):
        with pytest.raises(DiscoveryError):
            discover_rules(tmp_path / "does-not-exist")

    def test_unreadable_subdirectory_contributes_no_extensions(self, make_project, monkeypatch):
        root = make_project({
            "main.go": "package main",
            "alpha/a.py": "print('a')",
            "broken/b.rs": "fn main() {}",
            "broken/inner/c.ts": "export {}",
        })
        real_scandir = os.scandir

        def flaky_scandir(path="."):
            if os.path.basename(os.fspath(path)) == "broken":
                raise PermissionError(13, "Permission denied", os.fspath(path))
            return real_scandir(path)

        monkeypatch.setattr(os, "scandir", flaky_scandir)

        store = discover_rules(root)

        assert store.keys() == [".", "alpha", "broken"]
        assert store.get(".").extensions == ("go", "py")
        assert store.get("alpha") == DirRule(enabled=True, extensions=("py",))
        assert store.get("broken") == DirRule(enabled=True, extensions=())
