# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""SARIF 2.1.0 input models.

Only the parts of the document the findings parser reads are modelled. Every
field is optional and unknown keys are ignored. Lists whose entries may be
individually malformed (runs, rules, results, thread-flow locations) are kept
as raw values so that the parser can validate and skip them one at a time.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field, field_validator


def _none_as_empty(v: object) -> object:
    return [] if v is None else v


RawList = Annotated[list[Any], BeforeValidator(_none_as_empty)]


class SarifMessage(BaseModel):
    text: str | None = None


class SarifArtifactLocation(BaseModel):
    uri: str
    uriBaseId: str | None = None


class SarifRegion(BaseModel):
    startLine: int | None = None
    startColumn: int | None = None
    endLine: int | None = None
    endColumn: int | None = None


class SarifPhysicalLocation(BaseModel):
    artifactLocation: SarifArtifactLocation | None = None
    region: SarifRegion | None = None


class SarifLocation(BaseModel):
    physicalLocation: SarifPhysicalLocation | None = None
    message: SarifMessage | None = None


class SarifThreadFlowLocation(BaseModel):
    location: SarifLocation | None = None
    message: SarifMessage | None = None


class SarifThreadFlow(BaseModel):
    locations: RawList = Field(default_factory=list)


class SarifCodeFlow(BaseModel):
    threadFlows: Annotated[list[SarifThreadFlow], BeforeValidator(_none_as_empty)] = Field(
        default_factory=list
    )


class SarifRuleConfig(BaseModel):
    level: str | None = None


class SarifRule(BaseModel):
    id: str
    properties: dict[str, Any] = Field(default_factory=dict)
    defaultConfiguration: SarifRuleConfig | None = None

    @field_validator("properties", mode="before")
    @classmethod
    def _empty_properties(cls, v: object) -> object:
        return {} if v is None else v

    @property
    def security_severity(self) -> str | None:
        value = self.properties.get("security-severity")
        if value is None or value == "":
            return None
        return str(value)


class SarifRuleReference(BaseModel):
    id: str | None = None
    index: int | None = None


class SarifResult(BaseModel):
    ruleId: str | None = None
    rule: SarifRuleReference | None = None
    level: str | None = None
    message: SarifMessage | None = None
    locations: Annotated[list[SarifLocation], BeforeValidator(_none_as_empty)] = Field(
        default_factory=list
    )
    codeFlows: Annotated[list[SarifCodeFlow], BeforeValidator(_none_as_empty)] = Field(
        default_factory=list
    )


class SarifToolComponent(BaseModel):
    name: str | None = None
    version: str | None = None
    rules: RawList = Field(default_factory=list)


class SarifTool(BaseModel):
    driver: SarifToolComponent | None = None
    extensions: RawList = Field(default_factory=list)


class SarifRun(BaseModel):
    tool: SarifTool | None = None
    results: RawList = Field(default_factory=list)


class SarifDocument(BaseModel):
    version: str | None = None
    runs: RawList = Field(default_factory=list)
