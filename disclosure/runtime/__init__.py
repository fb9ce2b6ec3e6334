"""Runtime types shared by every evaluator."""

from .trace import EvaluatorKind, PERMIT_VERDICTS, Trace, Verdict

__all__ = [
    "EvaluatorKind",
    "PERMIT_VERDICTS",
    "Trace",
    "Verdict",
]
