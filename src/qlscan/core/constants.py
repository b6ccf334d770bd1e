# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Enumerations, severity thresholds, and the built-in language table."""

from enum import StrEnum


class Severity(StrEnum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


class ScanStatus(StrEnum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Stage(StrEnum):
    DATABASE_CREATE = "database-create"
    DATABASE_ANALYZE = "database-analyze"


class FailurePolicy(StrEnum):
    ABORT = "abort"
    SKIP = "skip"


SEVERITY_WEIGHTS: dict[Severity, int] = {
    Severity.CRITICAL: 100,
    Severity.HIGH: 75,
    Severity.MEDIUM: 50,
    Severity.LOW: 25,
    Severity.INFO: 0,
}

# security-severity score buckets, highest first
SEVERITY_SCORE_THRESHOLDS: list[tuple[float, Severity]] = [
    (9.0, Severity.CRITICAL),
    (7.0, Severity.HIGH),
    (5.0, Severity.MEDIUM),
    (3.0, Severity.LOW),
]

SEVERITY_LEVELS: dict[str, Severity] = {
    "critical": Severity.CRITICAL,
    "error": Severity.HIGH,
    "warning": Severity.MEDIUM,
    "note": Severity.LOW,
    "info": Severity.LOW,
}

DEFAULT_LANGUAGE_ALIASES: dict[str, list[str]] = {
    "javascript": ["javascript", "typescript", "js", "ts", "jsx", "tsx"],
    "python": ["python", "py"],
    "java": ["java"],
    "csharp": ["csharp", "c#", "cs"],
    "cpp": ["cpp", "c++", "c", "cc", "cxx"],
    "go": ["go", "golang"],
    "ruby": ["ruby", "rb"],
    "swift": ["swift"],
    "kotlin": ["kotlin", "kt"],
    "scala": ["scala"],
}

# Suites that live inside the language pack rather than being a pack of their own
CODE_SCANNING_SUITES = frozenset({"code-scanning", "security-extended", "security-and-quality"})

DEFAULT_QUERY_NAMESPACE = "codeql"
SARIF_SUFFIX = ".sarif"
MANIFEST_FILENAME = "manifest.json"
UNKNOWN_REVISION = "unknown"
