"""Demo provider — canned analysis, no network.

Used when ``DEMO_MODE=true`` so the full request pipeline can run
without an API key or quota.
"""

from __future__ import annotations

import copy
import hashlib
import json
from typing import Any, Dict, Optional

from .base import LLMConfig, LLMProvider, LLMResponse

DEMO_ANALYSIS: Dict[str, Any] = {
    "frameAudit": {
        "assumptions": [
            "The problem as stated is the actual problem",
            "Current constraints are fixed and unchangeable",
            "All stakeholders have been identified",
        ],
        "falseBinaries": ["Either solve it this way or fail"],
        "artificialConstraints": ["Time pressure may be self-imposed"],
        "beneficiaries": "Those who benefit from maintaining the current framing",
        "hiddenElements": ["Systemic factors", "Power dynamics", "Alternative approaches"],
        "framingVerdict": "PARTIALLY_FLAWED",
        "confidenceScore": 0.7,
        "whyThisFramingPersists": (
            "Institutional inertia and cognitive shortcuts make this framing convenient"
        ),
    },
    "systemMap": {
        "actors": [
            {"name": "Decision Maker", "type": "person", "role": "Makes choices"},
            {"name": "System", "type": "system", "role": "Executes decisions"},
        ],
        "controlPoints": ["Decision point", "Resource allocation"],
        "dependencies": [
            {
                "from": "Decision Maker",
                "to": "System",
                "description": "Controls system behavior",
            }
        ],
        "failureModes": ["Misaligned incentives", "Information asymmetry"],
        "powerAsymmetries": [
            {
                "decisionMaker": "Decision Maker",
                "costBearer": "End Users",
                "description": "Those who decide don't bear the costs",
            }
        ],
        "primaryControlHolder": "Decision Maker",
        "primaryCostBearer": "End Users",
        "misalignmentDescription": (
            "Control and cost are separated, creating misaligned incentives"
        ),
    },
    "realityCompression": {
        "coreTruths": [
            "The framing of the problem shapes what solutions appear possible",
            "Power asymmetries mean those who decide often don't bear the consequences",
            "Systemic issues require systemic solutions, not individual fixes",
        ]
    },
}


class DemoProvider(LLMProvider):
    """Returns :data:`DEMO_ANALYSIS` for every scenario."""

    provider_name = "demo"

    def __init__(self, api_key: Optional[str] = None, default_model: str = "demo"):
        self.default_model = default_model

    def generate_json(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        config: Optional[LLMConfig] = None,
    ) -> LLMResponse:
        parsed = copy.deepcopy(DEMO_ANALYSIS)
        raw_text = json.dumps(parsed)
        return LLMResponse(
            raw_text=raw_text,
            parsed_json=parsed,
            model=self.default_model,
            provider=self.provider_name,
            stop_reason="stop",
            prompt_hash=hashlib.sha256(
                (system_prompt + user_prompt).encode()
            ).hexdigest()[:16],
            result_hash=hashlib.sha256(raw_text.encode()).hexdigest()[:16],
        )
