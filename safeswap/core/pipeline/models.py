"""
Pipeline outcome models.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..checks.models import CheckReport
from ..errors import ErrorCategory
from ..execution.models import (
    ApprovalResult,
    SimulationResult,
    SwapVerification,
    TransactionResult,
)
from ..validation.models import ValidationReport


class PipelineStage(str, Enum):
    """Stages of one swap attempt, in execution order."""
    VALIDATION = "validation"
    PRE_CHECKS = "pre_checks"
    APPROVAL = "approval"
    SIMULATION = "simulation"
    EXECUTION = "execution"
    VERIFICATION = "verification"
    COMPLETE = "complete"


@dataclass(frozen=True)
class SwapOutcome:
    """
    Result of one swap attempt.

    `stage` is the last stage reached; on failure it names the stage that
    stopped the attempt. Stage results are kept for every stage that ran.
    """
    attempt_id: str
    success: bool
    stage: PipelineStage
    validation: Optional[ValidationReport] = None
    pre_checks: Optional[CheckReport] = None
    approval: Optional[ApprovalResult] = None
    simulation: Optional[SimulationResult] = None
    transaction: Optional[TransactionResult] = None
    verification: Optional[SwapVerification] = None
    error: Optional[str] = None
    error_category: Optional[ErrorCategory] = None
    tx_hash: Optional[str] = None
    stack: Optional[str] = None

    @classmethod
    def succeeded(cls, attempt_id: str, **stages: Any) -> "SwapOutcome":
        transaction = stages.get("transaction")
        return cls(
            attempt_id=attempt_id,
            success=True,
            stage=PipelineStage.COMPLETE,
            tx_hash=transaction.tx_hash if transaction else None,
            **stages,
        )

    @classmethod
    def failed(
        cls,
        attempt_id: str,
        stage: PipelineStage,
        error: str,
        error_category: ErrorCategory,
        tx_hash: Optional[str] = None,
        stack: Optional[str] = None,
        **stages: Any,
    ) -> "SwapOutcome":
        return cls(
            attempt_id=attempt_id,
            success=False,
            stage=stage,
            error=error,
            error_category=error_category,
            tx_hash=tx_hash,
            stack=stack,
            **stages,
        )

    def to_dict(self) -> Dict[str, Any]:
        def dump(value):
            return value.to_dict() if value is not None else None

        return {
            "attempt_id": self.attempt_id,
            "success": self.success,
            "stage": self.stage.value,
            "validation": dump(self.validation),
            "pre_checks": dump(self.pre_checks),
            "approval": dump(self.approval),
            "simulation": dump(self.simulation),
            "transaction": dump(self.transaction),
            "verification": dump(self.verification),
            "error": self.error,
            "error_category": self.error_category.value if self.error_category else None,
            "tx_hash": self.tx_hash,
        }


@dataclass(frozen=True)
class EmergencyValidation:
    """Fast go/no-go answer without quotes, pool reads or gas checks."""
    safe: bool
    issues: Tuple[str, ...] = ()
