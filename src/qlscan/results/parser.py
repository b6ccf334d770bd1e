# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Parse SARIF result documents into normalized Finding objects.

Malformed runs, rules, results and flow steps are skipped one at a time;
nothing in a document short of unreadable JSON stops the rest from parsing.
Flow step indices are assigned after skipped steps are dropped, so they are
always contiguous and the first and last steps are the source and the sink.
"""

from __future__ import annotations

import json
import logging
import math
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

from pydantic import ValidationError

from qlscan.core.constants import SEVERITY_LEVELS, SEVERITY_SCORE_THRESHOLDS, Severity
from qlscan.models.finding import Finding, FlowStep, Location
from qlscan.models.sarif import (
    SarifDocument,
    SarifLocation,
    SarifRegion,
    SarifResult,
    SarifRule,
    SarifRun,
    SarifThreadFlowLocation,
    SarifToolComponent,
)

logger = logging.getLogger("qlscan.results.parser")

DEFAULT_MESSAGE = "No message"
DEFAULT_RULE_ID = "unknown"


# ---------------------------------------------------------------------------
# Severity
# ---------------------------------------------------------------------------


def normalize_severity(value: object) -> Severity | None:
    """Map a security-severity score or a SARIF level onto :class:`Severity`.

    Numeric strings are bucketed by score. Known level keywords are mapped
    directly. Any other non-empty value is ``info``. ``None`` and empty
    strings return ``None`` so the caller can fall back to another signal.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None

    try:
        score = float(text)
    except ValueError:
        score = math.nan

    if not math.isnan(score):
        for threshold, severity in SEVERITY_SCORE_THRESHOLDS:
            if score >= threshold:
                return severity
        return Severity.INFO

    return SEVERITY_LEVELS.get(text.lower(), Severity.INFO)


def _finding_severity(result: SarifResult, rule: SarifRule | None) -> Severity:
    candidates: list[str | None] = []
    if rule is not None:
        candidates.append(rule.security_severity)
    candidates.append(result.level)
    if rule is not None and rule.defaultConfiguration is not None:
        candidates.append(rule.defaultConfiguration.level)

    for candidate in candidates:
        severity = normalize_severity(candidate)
        if severity is not None:
            return severity
    return Severity.MEDIUM


# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------


def resolve_uri(uri: str, workspace_root: Path) -> str:
    """Return an absolute filesystem path for a SARIF artifact URI."""
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        path = url2pathname(parsed.path)
    else:
        path = unquote(uri)
    return os.path.abspath(os.path.join(os.fspath(workspace_root), path))


def _region_bounds(region: SarifRegion | None) -> tuple[int, int, int, int]:
    region = region or SarifRegion()
    start_line = max(region.startLine or 1, 1)
    start_column = max(region.startColumn or 1, 1)
    end_line = max(region.endLine or start_line, 1)
    end_column = max(region.endColumn or start_column, 1)
    return start_line, start_column, end_line, end_column


def _physical(location: SarifLocation | None, workspace_root: Path) -> tuple[str, SarifRegion | None] | None:
    if location is None or location.physicalLocation is None:
        return None
    physical = location.physicalLocation
    if physical.artifactLocation is None or not physical.artifactLocation.uri:
        return None
    return resolve_uri(physical.artifactLocation.uri, workspace_root), physical.region


def _flow_steps(result: SarifResult, workspace_root: Path) -> tuple[FlowStep, ...] | None:
    """Extract the first thread of the first code flow."""
    if not result.codeFlows or not result.codeFlows[0].threadFlows:
        return None

    steps: list[FlowStep] = []
    for raw in result.codeFlows[0].threadFlows[0].locations:
        try:
            flow_location = SarifThreadFlowLocation.model_validate(raw)
        except ValidationError as exc:
            logger.debug("Skipping malformed flow step: %s", exc)
            continue

        resolved = _physical(flow_location.location, workspace_root)
        if resolved is None:
            continue
        file_path, region = resolved
        start_line, start_column, end_line, end_column = _region_bounds(region)

        message = flow_location.message or (
            flow_location.location.message if flow_location.location else None
        )
        steps.append(
            FlowStep(
                file=file_path,
                start_line=start_line,
                start_column=start_column,
                end_line=end_line,
                end_column=end_column,
                message=message.text if message else None,
                step_index=len(steps),
            )
        )

    return tuple(steps) or None


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def _component_rules(raw_component: object) -> list[SarifRule]:
    try:
        component = SarifToolComponent.model_validate(raw_component)
    except ValidationError as exc:
        logger.debug("Skipping malformed tool component: %s", exc)
        return []

    rules: list[SarifRule] = []
    for raw_rule in component.rules:
        try:
            rules.append(SarifRule.model_validate(raw_rule))
        except ValidationError as exc:
            logger.debug("Skipping malformed rule: %s", exc)
    return rules


def _rule_catalog(run: SarifRun) -> tuple[dict[str, SarifRule], list[SarifRule]]:
    """Rules by id across the driver and its extensions, plus the driver's list."""
    if run.tool is None:
        return {}, []

    driver_rules = _component_rules(run.tool.driver) if run.tool.driver else []
    catalog: dict[str, SarifRule] = {}
    for rule in driver_rules:
        catalog.setdefault(rule.id, rule)
    for extension in run.tool.extensions:
        for rule in _component_rules(extension):
            catalog.setdefault(rule.id, rule)
    return catalog, driver_rules


def _lookup_rule(
    result: SarifResult,
    catalog: dict[str, SarifRule],
    driver_rules: list[SarifRule],
) -> tuple[str | None, SarifRule | None]:
    rule_id = result.ruleId or (result.rule.id if result.rule else None)
    if rule_id and rule_id in catalog:
        return rule_id, catalog[rule_id]

    index = result.rule.index if result.rule else None
    if index is not None and 0 <= index < len(driver_rules):
        rule = driver_rules[index]
        return rule_id or rule.id, rule
    return rule_id, None


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


def _parse_result(
    raw: object,
    catalog: dict[str, SarifRule],
    driver_rules: list[SarifRule],
    workspace_root: Path,
    language: str,
) -> Finding | None:
    try:
        result = SarifResult.model_validate(raw)
    except ValidationError as exc:
        logger.debug("Skipping malformed result: %s", exc)
        return None

    if not result.locations:
        return None
    resolved = _physical(result.locations[0], workspace_root)
    if resolved is None:
        return None
    file_path, region = resolved
    start_line, start_column, end_line, end_column = _region_bounds(region)

    rule_id, rule = _lookup_rule(result, catalog, driver_rules)
    message = result.message.text if result.message and result.message.text else DEFAULT_MESSAGE

    try:
        return Finding(
            rule_id=rule_id or DEFAULT_RULE_ID,
            severity=_finding_severity(result, rule),
            language=language,
            message=message,
            location=Location(
                file=file_path,
                start_line=start_line,
                start_column=start_column,
                end_line=end_line,
                end_column=end_column,
            ),
            flow_steps=_flow_steps(result, workspace_root),
        )
    except ValidationError as exc:
        logger.debug("Skipping result that does not form a valid finding: %s", exc)
        return None


def parse_sarif(
    document: Mapping[str, Any] | SarifDocument,
    workspace_root: Path | str,
    language: str,
) -> list[Finding]:
    """Convert a SARIF document into findings tagged with *language*.

    Args:
        document: Decoded SARIF JSON (or an already validated document).
        workspace_root: Directory that relative artifact URIs resolve against.
        language: Canonical language the analysis ran for.

    Returns:
        Findings in document order. Empty if the document has no runs or
        no results.
    """
    root = Path(workspace_root)
    if isinstance(document, SarifDocument):
        sarif = document
    else:
        try:
            sarif = SarifDocument.model_validate(document)
        except ValidationError as exc:
            logger.warning("Not a SARIF document: %s", exc)
            return []

    findings: list[Finding] = []
    for raw_run in sarif.runs:
        try:
            run = SarifRun.model_validate(raw_run)
        except ValidationError as exc:
            logger.debug("Skipping malformed run: %s", exc)
            continue
        if not run.results:
            continue

        catalog, driver_rules = _rule_catalog(run)
        for raw_result in run.results:
            finding = _parse_result(raw_result, catalog, driver_rules, root, language)
            if finding is not None:
                findings.append(finding)

    return findings


def load_sarif_file(path: Path, workspace_root: Path | str, language: str) -> list[Finding]:
    """Read and parse a SARIF file. Unreadable files yield no findings."""
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to load SARIF file %s: %s", path, exc)
        return []
    return parse_sarif(document, workspace_root, language)
