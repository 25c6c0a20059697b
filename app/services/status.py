# app/services/status.py
from __future__ import annotations

from dataclasses import dataclass

AUDIT_READY_MIN = 80
NEEDS_ATTENTION_MIN = 50


@dataclass(frozen=True)
class ComplianceStatus:
    label: str
    color: str


AUDIT_READY = ComplianceStatus("Audit Ready", "green")
NEEDS_ATTENTION = ComplianceStatus("Needs Attention", "yellow")
ACTION_REQUIRED = ComplianceStatus("Action Required", "red")


def progress_of(completed: int, total: int) -> int:
    """
    Whole-number percentage, rounded half-up.
    total == 0 -> 0 (nothing to be ready for is not "ready").
    """
    if total <= 0:
        return 0
    completed = max(0, min(int(completed), int(total)))
    return (200 * completed + total) // (2 * total)


def classify(progress: int) -> ComplianceStatus:
    """
    Traffic-light label for a completion percentage:
      - >= 80 -> Audit Ready (green)
      - >= 50 -> Needs Attention (yellow)
      - otherwise -> Action Required (red)
    """
    if progress >= AUDIT_READY_MIN:
        return AUDIT_READY
    if progress >= NEEDS_ATTENTION_MIN:
        return NEEDS_ATTENTION
    return ACTION_REQUIRED
