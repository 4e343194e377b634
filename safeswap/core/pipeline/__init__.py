"""
Safe Swap Pipeline

Usage:
    from safeswap.core.pipeline import build_orchestrator
    from safeswap.providers.signer import LocalAccountSigner

    orchestrator = build_orchestrator()
    outcome = await orchestrator.safe_swap(intent, LocalAccountSigner.from_key(key))
    if not outcome.success:
        print(outcome.stage, outcome.error)
"""

from .models import (
    EmergencyValidation,
    PipelineStage,
    SwapOutcome,
)

from .orchestrator import (
    SwapOrchestrator,
    build_orchestrator,
)

__all__ = [
    "EmergencyValidation",
    "PipelineStage",
    "SwapOutcome",
    "SwapOrchestrator",
    "build_orchestrator",
]
