"""Read-side reports over stored plan logs."""

from .commissions import UNKNOWN_COACH, CoachSummary, CommissionReport, summarize_logs

__all__ = ["UNKNOWN_COACH", "CoachSummary", "CommissionReport", "summarize_logs"]
