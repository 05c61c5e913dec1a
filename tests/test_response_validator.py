"""Tests for src.validation.response_validator -- output contract checks."""

import pytest

from src.validation.response_validator import (
    PRESCRIPTIVE_PHRASES,
    ResponseValidator,
    find_prescriptive_phrases,
    has_image_or_diagram_content,
    summarize_errors,
)


@pytest.fixture
def validator():
    return ResponseValidator()


# ===================================================================
# Analysis payloads
# ===================================================================

class TestAnalysisPayload:
    def test_valid_analysis(self, validator, analysis_payload):
        result = validator.validate(analysis_payload)
        assert result.is_valid, result.errors
        assert result.errors == []

    def test_levers_are_optional(self, validator, analysis_payload):
        del analysis_payload["levers"]
        assert validator.validate(analysis_payload).is_valid

    def test_non_object_rejected(self, validator):
        result = validator.validate(["not", "an", "object"])
        assert result.errors == ["Response must be a JSON object"]

    @pytest.mark.parametrize("section", ["frameAudit", "systemMap", "realityCompression"])
    def test_missing_section(self, validator, analysis_payload, section):
        del analysis_payload[section]
        result = validator.validate(analysis_payload)
        assert not result.is_valid
        assert f"Missing required {section} section" in result.errors

    def test_missing_section_skips_its_field_checks(self, validator, analysis_payload):
        del analysis_payload["frameAudit"]
        errors = validator.validate(analysis_payload).errors
        assert errors == ["Missing required frameAudit section"]

    def test_all_errors_reported_together(self, validator, analysis_payload):
        analysis_payload["frameAudit"]["framingVerdict"] = "MOSTLY_FINE"
        analysis_payload["systemMap"]["primaryCostBearer"] = ""
        analysis_payload["realityCompression"]["coreTruths"] = ["one"]
        errors = validator.validate(analysis_payload).errors
        assert len(errors) == 3

    def test_invalid_verdict(self, validator, analysis_payload):
        analysis_payload["frameAudit"]["framingVerdict"] = "MOSTLY_FINE"
        errors = validator.validate(analysis_payload).errors
        assert any(e.startswith("Invalid framingVerdict: MOSTLY_FINE") for e in errors)

    @pytest.mark.parametrize("score", [-0.1, 1.01, "0.5", None, True])
    def test_confidence_out_of_range_or_wrong_type(self, validator, analysis_payload, score):
        analysis_payload["frameAudit"]["confidenceScore"] = score
        errors = validator.validate(analysis_payload).errors
        assert "confidenceScore must be a number between 0 and 1" in errors

    @pytest.mark.parametrize("score", [0, 1, 0.0, 1.0, 0.42])
    def test_confidence_bounds_inclusive(self, validator, analysis_payload, score):
        analysis_payload["frameAudit"]["confidenceScore"] = score
        assert validator.validate(analysis_payload).is_valid

    @pytest.mark.parametrize("value", ["", "   ", None, 7])
    def test_why_this_framing_persists_required(self, validator, analysis_payload, value):
        analysis_payload["frameAudit"]["whyThisFramingPersists"] = value
        errors = validator.validate(analysis_payload).errors
        assert "whyThisFramingPersists is required and must be a non-empty string" in errors

    @pytest.mark.parametrize(
        "field", ["primaryControlHolder", "primaryCostBearer", "misalignmentDescription"],
    )
    def test_power_fields_required(self, validator, analysis_payload, field):
        del analysis_payload["systemMap"][field]
        errors = validator.validate(analysis_payload).errors
        assert f"{field} is required and must be a non-empty string" in errors

    @pytest.mark.parametrize("count", [0, 2, 6])
    def test_core_truths_count(self, validator, analysis_payload, count):
        analysis_payload["realityCompression"]["coreTruths"] = [f"truth {i}" for i in range(count)]
        errors = validator.validate(analysis_payload).errors
        assert f"coreTruths must contain 3-5 items, found {count}" in errors

    @pytest.mark.parametrize("count", [3, 4, 5])
    def test_core_truths_count_accepted(self, validator, analysis_payload, count):
        analysis_payload["realityCompression"]["coreTruths"] = [f"truth {i}" for i in range(count)]
        assert validator.validate(analysis_payload).is_valid

    def test_core_truths_must_be_list(self, validator, analysis_payload):
        analysis_payload["realityCompression"]["coreTruths"] = "one, two, three"
        assert "coreTruths must be an array" in validator.validate(analysis_payload).errors

    def test_section_must_be_object(self, validator, analysis_payload):
        analysis_payload["systemMap"] = "a map"
        assert "systemMap must be an object" in validator.validate(analysis_payload).errors


# ===================================================================
# Levers
# ===================================================================

class TestLevers:
    def test_invalid_lever_type(self, validator, analysis_payload):
        analysis_payload["levers"]["changePoints"][1]["leverType"] = "CULTURAL"
        errors = validator.validate(analysis_payload).errors
        assert len(errors) == 1
        assert errors[0].startswith("Lever 1: Invalid leverType: CULTURAL")

    @pytest.mark.parametrize("phrase", PRESCRIPTIVE_PHRASES)
    def test_prescriptive_language_rejected(self, validator, analysis_payload, phrase):
        analysis_payload["levers"]["changePoints"][0]["description"] = (
            f"{phrase.upper()} restructure the board"
        )
        errors = validator.validate(analysis_payload).errors
        assert errors == [f"Lever 0: Contains prescriptive language: {phrase}"]

    def test_descriptive_language_accepted(self, validator, analysis_payload):
        analysis_payload["levers"]["changePoints"][0]["description"] = (
            "Budget authority sits with people who never use the service"
        )
        assert validator.validate(analysis_payload).is_valid

    def test_change_points_must_be_list(self, validator, analysis_payload):
        analysis_payload["levers"] = {"changePoints": {"a": 1}}
        assert validator.validate(analysis_payload).errors == [
            "levers.changePoints must be an array"
        ]

    def test_levers_must_be_object(self, validator, analysis_payload):
        analysis_payload["levers"] = []
        assert validator.validate(analysis_payload).errors == ["levers must be an object"]


# ===================================================================
# Refusal payloads
# ===================================================================

class TestRefusalPayload:
    def test_valid_refusal(self, validator, refusal_payload):
        assert validator.validate(refusal_payload).is_valid

    def test_refusal_without_reframed_question(self, validator, refusal_factory):
        payload = refusal_factory()
        del payload["reframedQuestion"]
        assert validator.validate(payload).is_valid

    def test_reframed_question_alone_is_judged_as_refusal(self, validator):
        errors = validator.validate({"reframedQuestion": "What drives this?"}).errors
        assert errors == ["Refusal response missing refusalReason"]

    def test_empty_refusal_reason(self, validator, refusal_factory):
        errors = validator.validate(refusal_factory(refusalReason="  ")).errors
        assert errors == ["Refusal response missing refusalReason"]

    def test_empty_reframed_question(self, validator, refusal_factory):
        errors = validator.validate(refusal_factory(reframedQuestion="")).errors
        assert errors == ["Refusal response reframedQuestion must be a non-empty string"]

    def test_refusal_missing_reason_with_frame_audit(self, validator, analysis_payload):
        payload = {"reframedQuestion": "Who bears the cost?", "frameAudit": analysis_payload["frameAudit"]}
        errors = validator.validate(payload).errors
        assert errors == [
            "Refusal response missing refusalReason",
            "Refusal response should not include frameAudit section",
        ]

    def test_refusal_with_analysis_sections(self, validator, refusal_factory, analysis_payload):
        payload = refusal_factory(
            frameAudit=analysis_payload["frameAudit"],
            systemMap=analysis_payload["systemMap"],
        )
        errors = validator.validate(payload).errors
        assert "Refusal response should not include frameAudit section" in errors
        assert "Refusal response should not include systemMap section" in errors
        assert len(errors) == 2


# ===================================================================
# Helpers
# ===================================================================

class TestHelpers:
    def test_find_prescriptive_phrases(self):
        assert find_prescriptive_phrases("You Should and you must") == ["you should", "you must"]
        assert find_prescriptive_phrases("Incentives reward short-term output") == []

    @pytest.mark.parametrize(
        "snippet",
        ["data:image/png;base64,AAAA", "<svg></svg>", "![diagram](x.png)", "mermaid graph TD"],
    )
    def test_image_content_detected(self, analysis_payload, snippet):
        system_map = analysis_payload["systemMap"]
        system_map["failureModes"].append(snippet)
        assert has_image_or_diagram_content(system_map)
        assert ResponseValidator.has_image_or_diagram_content(system_map)

    def test_plain_system_map_has_no_image_content(self, analysis_payload):
        assert not has_image_or_diagram_content(analysis_payload["systemMap"])

    def test_summarize_errors_truncates(self):
        summary = summarize_errors([f"e{i}" for i in range(8)])
        assert summary["count"] == 8
        assert summary["errors"] == ["e0", "e1", "e2", "e3", "e4"]


# ===================================================================
# Element shapes mirrored from the typed result models
# ===================================================================

class TestElementShapes:
    @pytest.mark.parametrize("name,value,allowed", [
        ("focus", "mitigation", "prevention, redesign"),
        ("impact", "enormous", "high, medium, low"),
    ])
    def test_lever_focus_and_impact_enums(self, validator, analysis_payload, name, value, allowed):
        analysis_payload["levers"]["changePoints"][1][name] = value
        errors = validator.validate(analysis_payload).errors
        assert errors == [f"Lever 1: Invalid {name}: {value}. Must be one of: {allowed}"]

    def test_lever_focus_and_impact_optional(self, validator, analysis_payload):
        lever = analysis_payload["levers"]["changePoints"][0]
        del lever["focus"]
        lever["impact"] = None
        assert validator.validate(analysis_payload).is_valid

    def test_lever_description_must_be_string(self, validator, analysis_payload):
        analysis_payload["levers"]["changePoints"][0]["description"] = None
        errors = validator.validate(analysis_payload).errors
        assert errors == ["Lever 0: description must be a string"]

    def test_power_asymmetries_as_plain_strings(self, validator, analysis_payload):
        analysis_payload["systemMap"]["powerAsymmetries"] = ["Board decides, riders pay"]
        errors = validator.validate(analysis_payload).errors
        assert errors == ["Power asymmetry 0: must be an object"]

    def test_actor_shape(self, validator, analysis_payload):
        analysis_payload["systemMap"]["actors"] = [
            {"name": "Council", "type": "institution", "role": "Sets budget"},
            {"type": "group"},
        ]
        errors = validator.validate(analysis_payload).errors
        assert errors == [
            "Actor 1: name is required and must be a string",
            "Actor 1: Invalid type: group. Must be one of: person, system, institution",
        ]

    def test_dependency_requires_endpoints(self, validator, analysis_payload):
        analysis_payload["systemMap"]["dependencies"] = [{"from": "Council", "description": "funds"}]
        errors = validator.validate(analysis_payload).errors
        assert errors == ["Dependency 0: to is required and must be a string"]

    def test_string_lists(self, validator, analysis_payload):
        analysis_payload["frameAudit"]["assumptions"] = ["ok", {"not": "a string"}]
        analysis_payload["systemMap"]["controlPoints"] = None
        errors = validator.validate(analysis_payload).errors
        assert errors == [
            "assumptions must be an array of strings",
            "controlPoints must be an array of strings",
        ]

    def test_core_truths_must_be_strings(self, validator, analysis_payload):
        analysis_payload["realityCompression"]["coreTruths"] = ["a", "b", 3]
        errors = validator.validate(analysis_payload).errors
        assert errors == ["coreTruths must be an array of strings"]

    def test_accepted_payload_always_parses(self, validator, analysis_payload):
        from shared.schemas.analysis import FrameAnalysis, parse_analysis_result

        analysis_payload["systemMap"]["actors"].append({"name": "Riders"})
        analysis_payload["levers"]["changePoints"].append({"leverType": "INCENTIVE"})
        assert validator.validate(analysis_payload).is_valid
        assert isinstance(parse_analysis_result(analysis_payload), FrameAnalysis)
