# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Language registry and resolution."""

from qlscan.languages.registry import LanguageRegistry
from qlscan.languages.resolver import LanguageResolver

__all__ = ["LanguageRegistry", "LanguageResolver"]
