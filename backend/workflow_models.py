"""
workflow_models.py — Pydantic Shapes for Persisted Workflows + API Bodies
===========================================================================
Field names stay camelCase: these objects round-trip unchanged to the
builder frontend and into stored JSON.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Block(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = Field(..., examples=["blk_1"])
    type: str = Field(..., examples=["walletBalance"])
    name: Optional[str] = None
    config: dict[str, Any] = Field(default_factory=dict)
    # UI canvas coordinates, ignored by the engine
    position: Optional[dict[str, Any]] = None


class ExecutionHistoryEntry(BaseModel):
    timestamp: str
    status: str
    duration: int = 0
    successfulBlocks: int = 0
    failedBlocks: int = 0
    result: dict[str, Any] = Field(default_factory=dict)


class Workflow(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: str = "Untitled Workflow"
    description: str = ""
    status: Literal["draft", "active", "paused"] = "draft"
    chains: list[str] = Field(default_factory=list)
    blocks: list[Block] = Field(default_factory=list)
    executionHistory: list[ExecutionHistoryEntry] = Field(default_factory=list)
    totalRuns: int = 0
    successRate: float = 0.0
    lastRun: Optional[str] = None
    lastAIAnalysis: Optional[dict[str, Any]] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


# ─── Request bodies ────────────────────────────────────────────────

class RunWorkflowRequest(BaseModel):
    # chain name → connected wallet address (watch-only, cannot sign)
    userWallets: dict[str, str] = Field(default_factory=dict, examples=[{"Algorand": "NEIQN3C2..."}])


class ScheduleWorkflowRequest(BaseModel):
    interval: Optional[int] = Field(default=None, ge=5, examples=[60])
    maxRuns: Optional[int] = Field(default=None, ge=0, examples=[10])
    userWallets: dict[str, str] = Field(default_factory=dict)
