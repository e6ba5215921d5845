"""Funding program compliance.

- Program presets (50K, 100K, 150K)
- Derived distance-to-limit and progress figures
- In Progress / Passed / Failed evaluation state machine
"""

from proptrack.compliance.evaluator import (
    ComplianceEvaluator,
    ComplianceFigures,
    ComplianceRule,
    classify_status,
    create_compliance_evaluator,
    evaluate_compliance,
)
from proptrack.compliance.programs import PROGRAM_PRESETS, get_program_rules

__all__ = [
    "ComplianceEvaluator",
    "ComplianceFigures",
    "ComplianceRule",
    "classify_status",
    "create_compliance_evaluator",
    "evaluate_compliance",
    "PROGRAM_PRESETS",
    "get_program_rules",
]
