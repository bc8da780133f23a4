# textify/core/discovery/__init__.py
"""
Path discovery and filtering module for textify.

This package walks the project tree under the per-directory rules, honours
.gitignore semantics, and proposes starter rules from the extensions it finds.
"""
from .pattern_matching import IgnoreMatcher
from .rule_discovery import discover_rules
from .walker import FileRecord, walk_tree

__all__ = ["FileRecord", "IgnoreMatcher", "discover_rules", "walk_tree"]
