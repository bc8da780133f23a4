# textify/config/__init__.py
"""
Configuration model and persistence for textify.
"""
from .settings import DirRule, RuleStore, ProjectConfig, ScanSettings
from .loader import load_project_config, save_project_config

__all__ = [
    "DirRule",
    "RuleStore",
    "ProjectConfig",
    "ScanSettings",
    "load_project_config",
    "save_project_config",
]
