"""Structural and content validation of generated analysis payloads.

The payload comes straight from the generative backend and is untrusted.
Every check runs on every call so that one pass reports all defects:

1. Refusal-shaped payloads must carry a non-empty ``refusalReason``,
   a non-empty ``reframedQuestion`` if one is given, and none of the
   analysis sections.
2. Analysis-shaped payloads must carry ``frameAudit``, ``systemMap`` and
   ``realityCompression``. A missing section is one error and its field
   checks are skipped.
3. ``levers`` is optional; when present each change point must have a
   known ``leverType`` and a description free of prescriptive phrasing.
4. Element shapes inside the sections (string lists, actors, dependencies,
   power asymmetries, lever focus and impact) are checked against the
   typed result models so that every rejection is explained here.
"""

from __future__ import annotations

import json
import logging
import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from shared.schemas.analysis import (
    ACTOR_TYPES,
    ANALYSIS_SECTIONS,
    FRAMING_VERDICTS,
    LEVER_FOCUSES,
    LEVER_IMPACTS,
    LEVER_TYPES,
    is_refusal_payload,
)

logger = logging.getLogger(__name__)

PRESCRIPTIVE_PHRASES = (
    "you should",
    "you must",
    "you need to",
    "you ought to",
    "you have to",
)

# Substrings that indicate embedded media or diagram markup.
IMAGE_INDICATORS = (
    "data:image",
    "<svg",
    "<img",
    "base64",
    "![",
    "mermaid",
    "graphviz",
)

_SYSTEM_MAP_POWER_FIELDS = (
    "primaryControlHolder",
    "primaryCostBearer",
    "misalignmentDescription",
)

_FRAME_AUDIT_LIST_FIELDS = (
    "assumptions",
    "falseBinaries",
    "artificialConstraints",
    "hiddenElements",
)
_SYSTEM_MAP_LIST_FIELDS = ("controlPoints", "failureModes")


@dataclass
class ResponseValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)


def _is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _check_string_list(section: Mapping[str, Any], name: str) -> List[str]:
    if name not in section:
        return []
    value = section[name]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        return [f"{name} must be an array of strings"]
    return []


def _check_optional_strings(item: Mapping[str, Any], names, label: str) -> List[str]:
    """Optional text fields may be omitted but not null or non-string."""
    return [
        f"{label}: {name} must be a string"
        for name in names
        if name in item and not isinstance(item[name], str)
    ]


def _check_objects(section: Mapping[str, Any], name: str, label: str, check) -> List[str]:
    if name not in section:
        return []
    value = section[name]
    if not isinstance(value, list):
        return [f"{name} must be an array"]
    errors: List[str] = []
    for index, item in enumerate(value):
        if not isinstance(item, Mapping):
            errors.append(f"{label} {index}: must be an object")
        else:
            errors.extend(check(item, f"{label} {index}"))
    return errors


def _check_actor(actor: Mapping[str, Any], label: str) -> List[str]:
    errors = []
    if not isinstance(actor.get("name"), str):
        errors.append(f"{label}: name is required and must be a string")
    actor_type = actor.get("type")
    if actor_type is not None and actor_type not in ACTOR_TYPES:
        errors.append(
            f"{label}: Invalid type: {actor_type}. Must be one of: {', '.join(ACTOR_TYPES)}"
        )
    errors.extend(_check_optional_strings(actor, ("role",), label))
    return errors


def _check_dependency(dependency: Mapping[str, Any], label: str) -> List[str]:
    errors = [
        f"{label}: {name} is required and must be a string"
        for name in ("from", "to")
        if not isinstance(dependency.get(name), str)
    ]
    errors.extend(_check_optional_strings(dependency, ("description",), label))
    return errors


def _check_power_asymmetry(asymmetry: Mapping[str, Any], label: str) -> List[str]:
    return _check_optional_strings(
        asymmetry, ("decisionMaker", "costBearer", "description"), label,
    )


class ResponseValidator:
    """Validates analysis payloads returned by the generative backend."""

    def validate(self, result: Any) -> ResponseValidationResult:
        if not isinstance(result, Mapping):
            return ResponseValidationResult(False, ["Response must be a JSON object"])

        if is_refusal_payload(result):
            errors = self._validate_refusal(result)
        else:
            errors = self._validate_analysis(result)

        return ResponseValidationResult(is_valid=not errors, errors=errors)

    # ------------------------------------------------------------------
    # Refusal
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_refusal(result: Mapping[str, Any]) -> List[str]:
        errors: List[str] = []

        if not _is_non_empty_string(result.get("refusalReason")):
            errors.append("Refusal response missing refusalReason")

        reframed = result.get("reframedQuestion")
        if reframed is not None and not _is_non_empty_string(reframed):
            errors.append("Refusal response reframedQuestion must be a non-empty string")

        for section in ANALYSIS_SECTIONS:
            if result.get(section) is not None:
                errors.append(f"Refusal response should not include {section} section")

        return errors

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def _validate_analysis(self, result: Mapping[str, Any]) -> List[str]:
        errors: List[str] = []
        checks = {
            "frameAudit": self._validate_frame_audit,
            "systemMap": self._validate_system_map,
            "realityCompression": self._validate_reality_compression,
        }
        for section in ANALYSIS_SECTIONS:
            value = result.get(section)
            if value is None:
                errors.append(f"Missing required {section} section")
            elif not isinstance(value, Mapping):
                errors.append(f"{section} must be an object")
            else:
                errors.extend(checks[section](value))

        levers = result.get("levers")
        if levers is not None:
            if isinstance(levers, Mapping):
                errors.extend(self._validate_levers(levers))
            else:
                errors.append("levers must be an object")

        return errors

    @staticmethod
    def _validate_frame_audit(frame_audit: Mapping[str, Any]) -> List[str]:
        errors: List[str] = []

        verdict = frame_audit.get("framingVerdict")
        if verdict not in FRAMING_VERDICTS:
            errors.append(
                f"Invalid framingVerdict: {verdict}. "
                f"Must be one of: {', '.join(FRAMING_VERDICTS)}"
            )

        score = frame_audit.get("confidenceScore")
        if not _is_number(score) or not 0 <= score <= 1:
            errors.append("confidenceScore must be a number between 0 and 1")

        if not _is_non_empty_string(frame_audit.get("whyThisFramingPersists")):
            errors.append("whyThisFramingPersists is required and must be a non-empty string")

        for name in _FRAME_AUDIT_LIST_FIELDS:
            errors.extend(_check_string_list(frame_audit, name))
        errors.extend(_check_optional_strings(frame_audit, ("beneficiaries",), "frameAudit"))

        return errors

    @staticmethod
    def _validate_system_map(system_map: Mapping[str, Any]) -> List[str]:
        errors = [
            f"{name} is required and must be a non-empty string"
            for name in _SYSTEM_MAP_POWER_FIELDS
            if not _is_non_empty_string(system_map.get(name))
        ]
        for name in _SYSTEM_MAP_LIST_FIELDS:
            errors.extend(_check_string_list(system_map, name))
        errors.extend(_check_objects(system_map, "actors", "Actor", _check_actor))
        errors.extend(_check_objects(system_map, "dependencies", "Dependency", _check_dependency))
        errors.extend(_check_objects(
            system_map, "powerAsymmetries", "Power asymmetry", _check_power_asymmetry,
        ))
        return errors

    @staticmethod
    def _validate_reality_compression(reality_compression: Mapping[str, Any]) -> List[str]:
        core_truths = reality_compression.get("coreTruths")
        if not isinstance(core_truths, list):
            return ["coreTruths must be an array"]

        count = len(core_truths)
        if count < 3 or count > 5:
            return [f"coreTruths must contain 3-5 items, found {count}"]
        if not all(isinstance(truth, str) for truth in core_truths):
            return ["coreTruths must be an array of strings"]
        return []

    @staticmethod
    def _validate_levers(levers: Mapping[str, Any]) -> List[str]:
        change_points = levers.get("changePoints")
        if not isinstance(change_points, list):
            return ["levers.changePoints must be an array"]

        errors: List[str] = []
        for index, lever in enumerate(change_points):
            if not isinstance(lever, Mapping):
                errors.append(f"Lever {index}: must be an object")
                continue

            lever_type = lever.get("leverType")
            if lever_type not in LEVER_TYPES:
                errors.append(
                    f"Lever {index}: Invalid leverType: {lever_type}. "
                    f"Must be one of: {', '.join(LEVER_TYPES)}"
                )

            description = lever.get("description")
            if isinstance(description, str):
                found = find_prescriptive_phrases(description)
                if found:
                    errors.append(
                        f"Lever {index}: Contains prescriptive language: {', '.join(found)}"
                    )
            elif "description" in lever:
                errors.append(f"Lever {index}: description must be a string")

            for name, allowed in (("focus", LEVER_FOCUSES), ("impact", LEVER_IMPACTS)):
                value = lever.get(name)
                if value is not None and value not in allowed:
                    errors.append(
                        f"Lever {index}: Invalid {name}: {value}. "
                        f"Must be one of: {', '.join(allowed)}"
                    )

        return errors

    @staticmethod
    def has_image_or_diagram_content(system_map: Any) -> bool:
        return has_image_or_diagram_content(system_map)


def find_prescriptive_phrases(text: str) -> List[str]:
    """Return the prescriptive phrases contained in *text*, case-insensitively."""
    lowered = text.lower()
    return [phrase for phrase in PRESCRIPTIVE_PHRASES if phrase in lowered]


def has_image_or_diagram_content(system_map: Any) -> bool:
    """Heuristic check for embedded images or diagram markup in a system map."""
    content = json.dumps(system_map, ensure_ascii=False, default=str)
    return any(indicator in content for indicator in IMAGE_INDICATORS)


def summarize_errors(errors: List[str], limit: int = 5) -> Dict[str, Any]:
    """Compact form of validator errors for log lines."""
    return {"count": len(errors), "errors": errors[:limit]}
