"""
workflow_errors.py — Error Taxonomy for the Workflow Engine
=============================================================
Every failure a block can hit maps onto one of these classes. Messages are
written for the builder UI: they end up verbatim in execution outcomes,
so they must never carry stack traces or raw provider payloads.
"""

from typing import Optional


class WorkflowError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(WorkflowError):
    """A required block field is missing or malformed."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)

    @classmethod
    def missing(cls, field: str, label: Optional[str] = None) -> "ConfigurationError":
        return cls(f"{label or field} is required", field=field)


class UnknownBlockTypeError(ConfigurationError):
    def __init__(self, block_type: str):
        self.block_type = block_type
        super().__init__(f"Unknown block type: {block_type}", field="type")


class MissingCapabilityError(WorkflowError):
    """Requested chain or provider is not registered."""

    def __init__(self, message: str, name: Optional[str] = None):
        self.name = name
        super().__init__(message)


class MissingWalletError(WorkflowError):
    """A stake/swap block has no connected wallet for its chain."""

    def __init__(self, chain: str):
        self.chain = chain
        super().__init__(f"No wallet connected for {chain}")


class ProviderTransportError(WorkflowError):
    """The underlying network or service call failed."""

    def __init__(self, provider: str, message: str, status: Optional[int] = None):
        self.provider = provider
        self.status = status
        super().__init__(f"{provider} request failed: {message}")


class WorkflowAlreadyRunningError(WorkflowError):
    def __init__(self):
        super().__init__("Workflow is already running")
