"""
workflow_validator.py — Pre-flight Structural Check
=====================================================
Pure and side-effect free: no provider calls, no path resolution.
Per-type required fields come from the executors themselves, so the
validator and the runtime checks can never drift apart.

  validate_workflow(workflow) → {"isValid": bool, "errors": [str]}
"""

from typing import Any

from block_executors import EXECUTORS


def validate_workflow(workflow: Any) -> dict:
    errors: list[str] = []

    if not isinstance(workflow, dict):
        return {"isValid": False, "errors": ["Workflow must be an object"]}

    name = workflow.get("name")
    if not isinstance(name, str) or not name.strip():
        errors.append("Workflow name is required")

    blocks = workflow.get("blocks")
    if not isinstance(blocks, list) or not blocks:
        errors.append("Workflow must have at least one block")
        return {"isValid": False, "errors": errors}

    seen_ids = set()
    for index, block in enumerate(blocks):
        label = f"Block {index + 1}"
        if not isinstance(block, dict):
            errors.append(f"{label}: Block must be an object")
            continue

        block_id = block.get("id")
        if block_id in (None, ""):
            errors.append(f"{label}: Block id is required")
        elif str(block_id) in seen_ids:
            errors.append(f"{label}: Duplicate block id {block_id}")
        else:
            seen_ids.add(str(block_id))

        block_type = block.get("type")
        if not block_type:
            errors.append(f"{label}: Block type is required")
            continue
        executor = EXECUTORS.get(block_type)
        if executor is None:
            errors.append(f"{label}: Unknown block type: {block_type}")
            continue

        config = block.get("config")
        if not isinstance(config, dict):
            errors.append(f"{label}: Block configuration is missing")
            continue

        errors.extend(f"{label}: {message}" for message in executor.validation_errors(config))

    return {"isValid": not errors, "errors": errors}
