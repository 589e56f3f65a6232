"""
template_engine.py — {{path}} Interpolation for Notification Content
======================================================================
Expands double-brace placeholders inside free text (email subject/body,
recipient lists). Resolution order for each placeholder:

  1. WORKFLOW.name / WORKFLOW.id   → constants of the running workflow
  2. legacy aliases (rewritten, then resolved normally)
  3. AI.<rest>                     → last ai_explanation result's `response`
  4. anything else                 → field_resolver.resolve_field

Unresolvable placeholders render as "". Templating must never abort the
block that uses it, so every failure degrades to an empty string.
"""

import json
import logging
import re
from typing import Any

from execution_context import ExecutionContext
from field_resolver import resolve_field, split_path, walk_path

logger = logging.getLogger("template_engine")

PLACEHOLDER_RE = re.compile(r"\{\{\s*([^}]+?)\s*\}\}")

# Deprecated spellings kept so older saved workflows still render.
LEGACY_PATH_ALIASES = {
    "previous.ai_explanation.": "previous.",
}

AI_RESULT_TYPE = "ai_explanation"


# ═══════════════════════════════════════════════════════════════════
#  VALUE → TEXT
# ═══════════════════════════════════════════════════════════════════

def _is_primitive(value: Any) -> bool:
    return not isinstance(value, (dict, list, tuple))


def _scalar_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def stringify(value: Any) -> str:
    """Render a resolved value for inclusion in text."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)) and all(_is_primitive(v) for v in value):
        if not value:
            return ""
        return "".join(f"\n- {_scalar_text(v)}" for v in value)
    if isinstance(value, (dict, list, tuple)):
        try:
            return json.dumps(value)
        except (TypeError, ValueError):
            return str(value)
    return _scalar_text(value)


# ═══════════════════════════════════════════════════════════════════
#  PATH RESOLUTION
# ═══════════════════════════════════════════════════════════════════

def _apply_legacy_alias(path: str) -> str:
    for legacy, replacement in LEGACY_PATH_ALIASES.items():
        if path.startswith(legacy):
            logger.debug("Deprecated template path %r, use %r", path,
                         replacement + path[len(legacy):])
            return replacement + path[len(legacy):]
    return path


def _resolve_ai(rest: list[str], context: ExecutionContext) -> Any:
    latest = None
    for result in reversed(list(context.results.values())):
        if isinstance(result, dict) and result.get("type") == AI_RESULT_TYPE:
            latest = result
            break
    if latest is None:
        return None

    response = latest.get("response")
    # {{AI.response.explanation}} and {{AI.explanation}} mean the same thing
    if rest and rest[0] == "response" and not (
        isinstance(response, dict) and "response" in response
    ):
        rest = rest[1:]
    return walk_path(response, rest)


def resolve_template_path(path: str, context: ExecutionContext) -> Any:
    path = _apply_legacy_alias(path.strip())
    segments = split_path(path)
    if not segments:
        return None

    head, rest = segments[0], segments[1:]
    if head == "WORKFLOW":
        return walk_path(context.workflow_constants, rest)
    if head == "AI":
        return _resolve_ai(rest, context)
    return resolve_field(path, context)


def interpolate(template: Any, context: ExecutionContext) -> Any:
    """Replace {{path}} placeholders in `template`. Non-strings pass through."""
    if not isinstance(template, str) or not template:
        return template

    def _sub(match: re.Match) -> str:
        path = match.group(1)
        try:
            return stringify(resolve_template_path(path, context))
        except Exception as e:
            logger.debug("Template path %r failed to resolve: %s", path, e)
            return ""

    return PLACEHOLDER_RE.sub(_sub, template)
