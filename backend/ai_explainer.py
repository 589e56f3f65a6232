"""
ai_explainer.py — Gemini-backed AIProvider
============================================
Turns a user prompt + workflow context into a structured explanation:

  {success, explanation, insights[], recommendations[], confidence,
   model, timestamp, tokensUsed, rawResponse}

Gemini is asked for four plain-text sections (EXPLANATION / INSIGHTS /
RECOMMENDATIONS / CONFIDENCE) which are parsed here. generate_explanation
never raises: any failure becomes the success=False fallback object.
"""

import asyncio
import json
import logging
import math
import os
import re
from datetime import datetime, timezone
from typing import Optional

from dotenv import load_dotenv
from google import genai

from block_executors import fallback_explanation

load_dotenv()
logger = logging.getLogger("ai_explainer")

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

MAX_LIST_ITEMS = 5
DEFAULT_CONFIDENCE = 0.8

ANALYST_PROMPT = """You are an expert DeFi and blockchain analyst. Your task is to analyze the provided data and generate insights.

User Request: {prompt}

{context}Please provide your analysis in the following format:

EXPLANATION:
[Provide a clear, comprehensive explanation addressing the user's request]

INSIGHTS:
[List 3-5 key insights from the data analysis]
- Insight 1
- Insight 2
- Insight 3

RECOMMENDATIONS:
[Provide 3-5 actionable recommendations based on your analysis]
- Recommendation 1
- Recommendation 2
- Recommendation 3

CONFIDENCE:
[Rate your confidence in this analysis from 0.0 to 1.0]

Focus on:
- DeFi protocols and strategies
- Risk assessment and management
- Market trends and opportunities
- Portfolio optimization
- Gas optimization and cost efficiency
- Cross-chain opportunities

Keep your response practical, actionable, and focused on the Web3/DeFi context."""

_EXPLANATION_RE = re.compile(r"EXPLANATION:\s*([\s\S]*?)(?=INSIGHTS:|$)", re.IGNORECASE)
_INSIGHTS_RE = re.compile(r"INSIGHTS:\s*([\s\S]*?)(?=RECOMMENDATIONS:|$)", re.IGNORECASE)
_RECOMMENDATIONS_RE = re.compile(r"RECOMMENDATIONS:\s*([\s\S]*?)(?=CONFIDENCE:|$)", re.IGNORECASE)
_CONFIDENCE_RE = re.compile(r"CONFIDENCE:\s*([\d.]+)", re.IGNORECASE)
_LIST_ITEM_RE = re.compile(r"^(?:[-•*]|\d+\.)\s*")


# ═══════════════════════════════════════════════════════════════════
#  PROMPT + PARSING
# ═══════════════════════════════════════════════════════════════════

def build_prompt(prompt: str, context_data: Optional[dict]) -> str:
    context = ""
    if context_data:
        context = f"Context Data:\n{json.dumps(context_data, indent=2, default=str)}\n\n"
    return ANALYST_PROMPT.format(prompt=prompt, context=context)


def parse_list_items(text: str) -> list[str]:
    items = []
    for line in (text or "").splitlines():
        line = line.strip()
        if not _LIST_ITEM_RE.match(line):
            continue
        item = _LIST_ITEM_RE.sub("", line, count=1).strip()
        if item:
            items.append(item)
    return items[:MAX_LIST_ITEMS]


def fallback_insights(context_data: Optional[dict]) -> list[str]:
    context_data = context_data or {}
    summary = context_data.get("portfolioSummary") or {}
    results = context_data.get("results") or {}

    insights = []
    if summary.get("nativeTotals"):
        insights.append("Portfolio balance analysis shows current token distribution")
    if summary.get("transactionCounts"):
        insights.append("Recent transaction patterns indicate active trading behavior")
    if any(isinstance(r, dict) and r.get("type") == "token_info" for r in results.values()):
        insights.append("Token metrics suggest market volatility considerations")
    if not insights:
        insights.append("Data analysis completed with available information")
    return insights


FALLBACK_RECOMMENDATIONS = [
    "Monitor portfolio performance regularly",
    "Consider diversification across multiple chains",
    "Optimize gas usage for cost efficiency",
    "Stay updated with market trends and opportunities",
]


def _confidence(text: str) -> float:
    match = _CONFIDENCE_RE.search(text)
    try:
        value = float(match.group(1)) if match else DEFAULT_CONFIDENCE
    except ValueError:
        value = DEFAULT_CONFIDENCE
    if math.isnan(value):
        value = DEFAULT_CONFIDENCE
    return min(1.0, max(0.0, value))


def parse_response(text: str, context_data: Optional[dict]) -> dict:
    explanation = _EXPLANATION_RE.search(text)
    insights = _INSIGHTS_RE.search(text)
    recommendations = _RECOMMENDATIONS_RE.search(text)

    insight_items = parse_list_items(insights.group(1) if insights else "")
    recommendation_items = parse_list_items(recommendations.group(1) if recommendations else "")

    return {
        "explanation": (explanation.group(1) if explanation else text).strip(),
        "insights": insight_items or fallback_insights(context_data),
        "recommendations": recommendation_items or list(FALLBACK_RECOMMENDATIONS),
        "confidence": _confidence(text),
        "rawResponse": text,
    }


def estimate_tokens(text: str) -> int:
    # ~4 characters per token
    return math.ceil(len(text) / 4)


# ═══════════════════════════════════════════════════════════════════
#  PROVIDER
# ═══════════════════════════════════════════════════════════════════

class GeminiExplainer:
    def __init__(self, api_key: str = GEMINI_API_KEY, model: str = GEMINI_MODEL, client=None):
        self.model = model
        self._client = client
        if self._client is None and api_key:
            self._client = genai.Client(api_key=api_key)

    async def generate_explanation(self, prompt: str, context_data: dict) -> dict:
        if self._client is None:
            logger.warning("🧠 Gemini API key not configured — returning fallback explanation")
            return fallback_explanation("Gemini API key not configured", model=self.model)

        full_prompt = build_prompt(prompt, context_data)
        loop = asyncio.get_event_loop()

        def _generate():
            return self._client.models.generate_content(
                model=self.model,
                contents=[{"role": "user", "parts": [{"text": full_prompt}]}],
                config={"temperature": 0.4, "max_output_tokens": 1500},
            )

        try:
            logger.info("🧠 Gemini/%s explaining (%d chars of prompt) …", self.model, len(full_prompt))
            response = await loop.run_in_executor(None, _generate)
            text = (response.text or "").strip()
            if not text:
                return fallback_explanation("Gemini returned an empty response", model=self.model)
        except Exception as e:
            logger.error("Gemini explanation failed: %s", e)
            return fallback_explanation(str(e)[:200], model=self.model)

        return {
            "success": True,
            **parse_response(text, context_data),
            "model": self.model,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "tokensUsed": estimate_tokens(full_prompt + text),
        }
