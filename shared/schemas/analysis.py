"""Analysis result schemas.

An analysis result is one of two shapes:

- :class:`RefusalResult` — the scenario was declined, optionally with a
  reframed question. Never carries analysis sections.
- :class:`FrameAnalysis` — frame audit, system map and reality compression,
  plus optional levers.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

FramingVerdict = Literal[
    "WELL_FRAMED", "PARTIALLY_FLAWED", "FUNDAMENTALLY_FLAWED", "FALSE_DILEMMA",
]
LeverType = Literal["STRUCTURAL", "INCENTIVE", "INFORMATION", "GOVERNANCE"]
ActorType = Literal["person", "system", "institution"]
LeverFocus = Literal["prevention", "redesign"]
LeverImpact = Literal["high", "medium", "low"]

FRAMING_VERDICTS: Tuple[str, ...] = (
    "WELL_FRAMED", "PARTIALLY_FLAWED", "FUNDAMENTALLY_FLAWED", "FALSE_DILEMMA",
)
LEVER_TYPES: Tuple[str, ...] = ("STRUCTURAL", "INCENTIVE", "INFORMATION", "GOVERNANCE")
ACTOR_TYPES: Tuple[str, ...] = ("person", "system", "institution")
LEVER_FOCUSES: Tuple[str, ...] = ("prevention", "redesign")
LEVER_IMPACTS: Tuple[str, ...] = ("high", "medium", "low")

ANALYSIS_SECTIONS: Tuple[str, ...] = ("frameAudit", "systemMap", "realityCompression")


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------

class FrameAuditSection(_WireModel):
    assumptions: List[str] = Field(default_factory=list)
    false_binaries: List[str] = Field(default_factory=list)
    artificial_constraints: List[str] = Field(default_factory=list)
    beneficiaries: str = ""
    hidden_elements: List[str] = Field(default_factory=list)
    framing_verdict: FramingVerdict
    # Confidence that the verdict classification is correct, not in the analysis.
    confidence_score: float = Field(ge=0.0, le=1.0)
    why_this_framing_persists: str = Field(min_length=1)


class Actor(_WireModel):
    name: str
    type: Optional[ActorType] = None
    role: str = ""


class Dependency(_WireModel):
    from_: str = Field(alias="from")
    to: str
    description: str = ""


class PowerAsymmetry(_WireModel):
    decision_maker: str = ""
    cost_bearer: str = ""
    description: str = ""


class SystemMapSection(_WireModel):
    actors: List[Actor] = Field(default_factory=list)
    control_points: List[str] = Field(default_factory=list)
    dependencies: List[Dependency] = Field(default_factory=list)
    failure_modes: List[str] = Field(default_factory=list)
    power_asymmetries: List[PowerAsymmetry] = Field(default_factory=list)
    primary_control_holder: str = Field(min_length=1)
    primary_cost_bearer: str = Field(min_length=1)
    misalignment_description: str = Field(min_length=1)


class RealityCompressionSection(_WireModel):
    core_truths: List[str] = Field(min_length=3, max_length=5)


class Lever(_WireModel):
    """A descriptive system change point. Not a recommendation."""

    description: str = ""
    lever_type: LeverType
    focus: Optional[LeverFocus] = None
    impact: Optional[LeverImpact] = None


class LeversSection(_WireModel):
    change_points: List[Lever] = Field(default_factory=list)


class AnalysisMetadata(_WireModel):
    analyzed_at: datetime
    processing_time: int = Field(ge=0, description="Milliseconds from request start to completion.")


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class RefusalResult(_WireModel):
    kind: Literal["refusal"] = Field(default="refusal", exclude=True)
    refusal_reason: str = Field(min_length=1)
    reframed_question: Optional[str] = None
    metadata: Optional[AnalysisMetadata] = None


class FrameAnalysis(_WireModel):
    kind: Literal["analysis"] = Field(default="analysis", exclude=True)
    frame_audit: FrameAuditSection
    system_map: SystemMapSection
    reality_compression: RealityCompressionSection
    levers: Optional[LeversSection] = None
    metadata: Optional[AnalysisMetadata] = None


AnalysisResult = Union[RefusalResult, FrameAnalysis]


def is_refusal_payload(data: Mapping[str, Any]) -> bool:
    """True if an untrusted payload is refusal-shaped.

    A payload carrying either refusal field is judged against the refusal
    contract, even if the other refusal field is missing.
    """
    return (
        data.get("refusalReason") is not None
        or data.get("reframedQuestion") is not None
    )


def parse_analysis_result(data: Mapping[str, Any]) -> AnalysisResult:
    """Build the typed result for a payload that already passed validation.

    Raises
    ------
    pydantic.ValidationError
        If the payload does not fit the selected shape.
    """
    if is_refusal_payload(data):
        return RefusalResult.model_validate(data)
    return FrameAnalysis.model_validate(data)


def dump_analysis_result(result: AnalysisResult) -> dict:
    """Serialise to the camelCase wire shape, omitting absent optional fields."""
    return result.model_dump(mode="json", by_alias=True, exclude_none=True)
