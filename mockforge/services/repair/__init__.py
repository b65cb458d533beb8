"""Generated code repair."""

from .rules import (
    AppRootRule,
    CircularReferenceRule,
    DeprecatedApiRule,
    ExtractedConstantRenameRule,
    FixRule,
    ImportInsertionRule,
    ProjectImportRule,
    SingletonCallRule,
    ThemeLookupRule,
    default_rules,
)
from .service import CodeRepairEngine

__all__ = [
    "AppRootRule",
    "CircularReferenceRule",
    "DeprecatedApiRule",
    "ExtractedConstantRenameRule",
    "FixRule",
    "ImportInsertionRule",
    "ProjectImportRule",
    "SingletonCallRule",
    "ThemeLookupRule",
    "default_rules",
    "CodeRepairEngine",
]
