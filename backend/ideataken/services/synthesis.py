"""AI Synthesis of aggregated sources into an ``Analysis``.

All model calls go through ``call_openai_chat_async`` in strict JSON mode.

RULES:
  - The score is the model's; the verdict label is not.  The verdict is
    always re-derived from the clamped score, and a disagreeing model
    label is replaced (``verdict_adjusted=True``).
  - Any failure (no key, transport error, unparseable or incomplete
    JSON) yields the heuristic analysis; a failed challenge keeps the
    previous analysis.  Synthesis never raises.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import ValidationError

from ..constants import DEFAULT_AI_CONFIDENCE, PROMPT_EXCERPT_LIMITS
from ..schemas.analysis_schema import Analysis, CompetitorSummary, verdict_for_score
from ..schemas.source_schema import AggregateSources
from .heuristics import heuristic_analysis
from .openai_client import call_openai_chat_async, validate_required_keys

logger = logging.getLogger(__name__)

LLMCall = Callable[..., Awaitable[Optional[Dict[str, Any]]]]

REQUIRED_KEYS = ["score", "verdict", "recommendation"]
_SENTIMENTS = ("Positive", "Neutral", "Critical")


_SYSTEM_PROMPT = """You are a world-class startup investor and market analyst.

You MUST respond with ONLY a valid JSON object. No markdown, no explanations.

RULES:
- Distinguish the GENERAL CATEGORY from the SPECIFIC NOVELTY of the idea.
  Do NOT penalize the score just because the broad category exists.
- If no one is doing EXACTLY what is proposed, the idea is an "Opportunity"
  or "Wide Open" even in a popular field.
- Zero direct competitors ("blue ocean") deserves a score of 85 or more.
- Verdict bands: 0-25 Taken, 26-60 Crowded, 61-85 Opportunity, 86-100 Wide Open."""

_OUTPUT_SHAPE = """{
  "score": <int 0-100>,
  "verdict": "Wide Open|Opportunity|Crowded|Taken",
  "nicheOpportunities": ["<3 very specific underserved segments>"],
  "uniqueAngles": ["<2 specific product features to beat incumbents>"],
  "marketGaps": "<how this specific idea fills a gap the competition missed>",
  "competitors": [{"name": "", "description": "", "url": "", "source": "Google|AppStore|ProductHunt|GitHub"}],
  "keyRisks": ["<main risks>"],
  "recommendation": "<3 sentences explaining WHY it is novel or WHY it is crowded>",
  "confidenceScore": <int 0-100>,
  "sentiment": "Positive|Neutral|Critical"
}"""


def _lines(items: List[str]) -> str:
    return "\n".join(items) if items else "None"


def build_source_digest(sources: AggregateSources) -> str:
    """Bounded excerpts of every source, in prompt form."""
    lim = PROMPT_EXCERPT_LIMITS
    google = _lines([f"- {g.name}: {g.description}" for g in sources.google[: lim["google"]]])
    apps = _lines([f"- {a.name}: {a.similarity}% match" for a in sources.app_store[: lim["app_store"]]])
    launches = _lines(
        [f"- {p.name}: {p.tagline} ({p.upvotes} upvotes)" for p in sources.product_hunt[: lim["product_hunt"]]]
    )
    research = _lines([f"- {r.title}: {r.snippet}" for r in sources.research[: lim["research"]]])
    reddit = _lines([f"- r/{r.subreddit}: {r.title}" for r in sources.reddit[: lim["reddit"]]])
    hn = _lines([f"- {h.title} ({h.comments} comments)" for h in sources.hacker_news[: lim["hacker_news"]]])
    repos = _lines([f"- {g.name} ({g.stars} stars): {g.description}" for g in sources.github[: lim["github"]]])
    trademark = (
        f"{len(sources.trademark.matches)} matches" if sources.trademark.found else "None found"
    )

    return f"""- Google Search Results:
{google}

- App Store Competitors:
{apps}

- Product Hunt Launches:
{launches}

- Research Papers & Academic Context:
{research}

- Reddit Discussions:
{reddit}

- Hacker News Mentions:
{hn}

- GitHub Projects: {len(sources.github)} repos found
{repos}

- Trends: Interest level {sources.trends.interest}/100 and it is {sources.trends.trend}
- Trademarks: {trademark}"""


def build_analysis_prompt(idea: str, sources: AggregateSources) -> str:
    return f"""Validate this startup idea: "{idea}"

=== RAW DATA GATHERED ===
{build_source_digest(sources)}

=== EVALUATION CRITERIA ===
1. SPECIFICITY: Are competitors doing EXACTLY this, or something in the same family?
2. TECHNICAL NOVELTY: Does the research suggest a first of its kind or a common topic?
3. MARKET GAPS: What is the delta between existing solutions and this proposal?

=== REQUIRED OUTPUT ===
Return ONLY this JSON structure:
{_OUTPUT_SHAPE}"""


def build_challenge_prompt(
    idea: str,
    sources: AggregateSources,
    user_challenge: str,
    previous_analysis: Optional[Analysis],
) -> str:
    previous = "None"
    if previous_analysis is not None:
        previous = previous_analysis.model_dump_json(
            include={"overall_score", "verdict", "recommendation", "market_gaps", "key_risks"}
        )
    return f"""Re-evaluate this startup idea: "{idea}"

The founder disputes your previous analysis. Weigh their argument against the
evidence. Change the score only if the argument is supported by the data or
exposes a real gap in the previous reasoning.

=== PREVIOUS ANALYSIS ===
{previous}

=== FOUNDER'S CHALLENGE ===
{user_challenge}

=== RAW DATA GATHERED ===
{build_source_digest(sources)}

=== REQUIRED OUTPUT ===
Return ONLY this JSON structure:
{_OUTPUT_SHAPE}"""


def _str_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if str(v).strip()]


def _competitors(value: Any) -> List[CompetitorSummary]:
    if not isinstance(value, list):
        return []
    competitors = []
    for item in value:
        if not isinstance(item, dict) or not str(item.get("name") or "").strip():
            continue
        competitors.append(
            CompetitorSummary(
                name=str(item["name"]).strip(),
                url=str(item.get("url") or ""),
                description=str(item.get("description") or ""),
                source=str(item.get("source") or ""),
            )
        )
    return competitors


def _clamp_int(value: Any, default: int) -> int:
    try:
        number = int(round(float(value)))
    except (TypeError, ValueError):
        return default
    return max(0, min(100, number))


def parse_analysis(raw: Dict[str, Any]) -> Analysis:
    """Map the model's JSON onto ``Analysis``, re-banding the verdict.

    Raises ValueError when a required key is missing or the score is not numeric.
    """
    if not validate_required_keys(raw, REQUIRED_KEYS, context="SYNTHESIS"):
        raise ValueError("Model output is missing required keys")

    try:
        score = max(0, min(100, int(round(float(raw["score"])))))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Model score is not numeric: {raw['score']!r}") from exc

    verdict = verdict_for_score(score)
    claimed = str(raw.get("verdict") or "").strip()
    adjusted = claimed.casefold() != verdict.value.casefold()
    if adjusted:
        logger.warning(
            "[SYNTHESIS] Model verdict %r inconsistent with score %d; using %r",
            claimed, score, verdict.value,
        )

    sentiment = raw.get("sentiment")
    recommendation = str(raw.get("recommendation") or "").strip()
    if not recommendation:
        raise ValueError("Model recommendation is empty")

    return Analysis(
        overall_score=score,
        verdict=verdict,
        confidence_score=_clamp_int(raw.get("confidenceScore"), DEFAULT_AI_CONFIDENCE),
        top_competitors=_competitors(raw.get("competitors")),
        key_risks=_str_list(raw.get("keyRisks")),
        niche_opportunities=_str_list(raw.get("nicheOpportunities")),
        unique_angles=_str_list(raw.get("uniqueAngles")),
        market_gaps=str(raw.get("marketGaps") or ""),
        recommendation=recommendation,
        sentiment=sentiment if sentiment in _SENTIMENTS else "Neutral",
        analysis_source="ai",
        verdict_adjusted=adjusted,
    )


class AnalysisSynthesizer:
    """Turns aggregated sources into an ``Analysis``, falling back to the heuristic."""

    def __init__(self, llm: LLMCall = call_openai_chat_async, max_completion_tokens: int = 2000):
        self.llm = llm
        self.max_completion_tokens = max_completion_tokens

    async def _ask(self, user_prompt: str, context: str) -> Optional[Analysis]:
        messages = [
            {"role": "system", "content": _SYSTEM_PROMPT},
            {"role": "user", "content": user_prompt},
        ]
        try:
            result = await self.llm(messages=messages, max_completion_tokens=self.max_completion_tokens)
        except EnvironmentError as exc:
            logger.warning("[SYNTHESIS] %s skipped: %s", context, exc)
            return None

        if result is None:
            logger.warning("[SYNTHESIS] %s: model returned nothing", context)
            return None
        try:
            return parse_analysis(result)
        except (ValueError, ValidationError) as exc:
            logger.warning("[SYNTHESIS] %s: unusable model output: %s", context, exc)
            return None

    async def synthesize(self, idea: str, sources: AggregateSources) -> Analysis:
        analysis = await self._ask(build_analysis_prompt(idea, sources), "analysis")
        if analysis is None:
            logger.info("[SYNTHESIS] Using heuristic analysis for %r", idea[:60])
            return heuristic_analysis(sources)
        return analysis

    async def challenge(
        self,
        idea: str,
        sources: AggregateSources,
        user_challenge: str,
        previous_analysis: Optional[Analysis] = None,
    ) -> Analysis:
        """Re-run the analysis with the founder's objection folded in.

        On failure the previous analysis stands; without one, the heuristic.
        """
        prompt = build_challenge_prompt(idea, sources, user_challenge, previous_analysis)
        analysis = await self._ask(prompt, "challenge")
        if analysis is not None:
            return analysis
        if previous_analysis is not None:
            return previous_analysis
        return heuristic_analysis(sources)
