"""Framing analysis pipeline: prompt construction and request orchestration."""

from .orchestrator import AdmissionCheck, AnalysisOrchestrator, rate_limit_admission
from .prompt_builder import build_prompts, build_system_prompt, build_user_prompt
