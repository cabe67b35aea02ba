"""Workflow orchestration.

Stages import `karaflow.pipeline.jobs` and `karaflow.pipeline.context`; keep
the heavier imports lazy so `karaflow.pipeline` and `karaflow.stages` can
import each other.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from karaflow.pipeline.executor import PipelineExecutor
    from karaflow.pipeline.factory import create_orchestrator
    from karaflow.pipeline.orchestrator import Orchestrator

__all__ = ["Orchestrator", "PipelineExecutor", "create_orchestrator"]


def __getattr__(name: str) -> Any:
    if name == "PipelineExecutor":
        from karaflow.pipeline.executor import PipelineExecutor

        return PipelineExecutor
    if name == "Orchestrator":
        from karaflow.pipeline.orchestrator import Orchestrator

        return Orchestrator
    if name == "create_orchestrator":
        from karaflow.pipeline.factory import create_orchestrator

        return create_orchestrator
    raise AttributeError(name)
