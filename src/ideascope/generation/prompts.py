"""
Prompt builders for premium artifact generation.

Each artifact kind has a system prompt and a user prompt template that
describes the JSON shape the model must return. Templates are filled
from the generation parameters of the request.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from ideascope.core.models import ArtifactKind
from ideascope.llm.client import LLMRequest


@dataclass(frozen=True)
class PromptSpec:
    """System prompt, user template and token budget for one kind."""

    system: str
    template: str
    max_tokens: int = 3000


_SOURCE_SHAPE = (
    '{{"id": "src_001", "type": "web", "title": "Source title", '
    '"confidence": 0.85, "retrievedAt": "{now}"}}'
)

PROMPTS: dict[ArtifactKind, PromptSpec] = {
    ArtifactKind.KEYWORD_INTELLIGENCE: PromptSpec(
        system=(
            "You are a keyword research expert. Provide comprehensive keyword "
            "intelligence data in valid JSON format with realistic search volumes, "
            "CPC data, and difficulty scores."
        ),
        template=(
            'Analyze keyword intelligence for the primary keyword "{primary_keyword}" '
            "in the {industry} industry for {target_audience} in locale {locale}.\n\n"
            "Return JSON with keys primaryKeywords, longTailKeywords, competitorKeywords "
            "(each a list of {{keyword, searchVolume, cpc, difficulty, intent, "
            "trend24Months: [{{month, volume, competitionScore}}], relatedKeywords, "
            "sources: [" + _SOURCE_SHAPE + "]}}), totalSearchVolume, avgCpc, "
            'avgDifficulty, generatedAt: "{now}", locale: "{locale}".\n\n'
            "Include 24-month trends showing seasonal patterns and growth."
        ),
    ),
    ArtifactKind.REDDIT_ANALYSIS: PromptSpec(
        system=(
            "You are a Reddit community analyst specializing in startup market "
            "validation. Provide realistic, actionable insights based on real "
            "community discussions."
        ),
        template=(
            "Analyze Reddit discussions in {subreddits} about {keywords} for the "
            "{industry} industry.\n\n"
            "Return JSON with keys subredditInsights (list of {{subreddit, members, "
            "activityLevel, relevanceScore, topThemes}}), topDiscussions, "
            "overallSentiment {{positive, neutral, negative}}, keyPainPoints (list of "
            "{{painPoint, frequency, impact}}), sources: [" + _SOURCE_SHAPE + "], "
            'generatedAt: "{now}".'
        ),
    ),
    ArtifactKind.CUSTOMER_INTELLIGENCE: PromptSpec(
        system=(
            "You are a customer research strategist. Build evidence-based personas "
            "and segmentation in valid JSON."
        ),
        template=(
            "Build customer intelligence for a {industry} startup targeting "
            "{target_audience}.\n\n"
            "Return JSON with keys personas, marketSegmentation {{segments: [{{name, "
            "size, growthRate, characteristics}}]}}, customerJourney (list of {{stage, "
            "touchpoints, painPoints}}), behaviorInsights, sources: ["
            + _SOURCE_SHAPE
            + '], generatedAt: "{now}".'
        ),
    ),
    ArtifactKind.FINANCIAL_PROJECTIONS: PromptSpec(
        system=(
            "You are a startup CFO. Produce conservative 36-month financial "
            "projections in valid JSON."
        ),
        template=(
            "Create financial projections for a {industry} startup using a "
            "{revenue_model} revenue model.\n\n"
            "Return JSON with keys revenueStreams (list of {{name, model, "
            "monthlyProjection: [{{month, revenue, customers}}]}}), costStructure, "
            "profitabilityAnalysis {{breakEvenMonth, grossMargin, burnRate}}, "
            "fundingRequirements {{totalNeeded, milestones}}, assumptions, "
            'generatedAt: "{now}".'
        ),
        max_tokens=4000,
    ),
    ArtifactKind.TECHNOLOGY_OPERATIONS: PromptSpec(
        system=(
            "You are a startup CTO. Recommend a pragmatic technology stack and "
            "operating plan in valid JSON."
        ),
        template=(
            "Plan technology and operations for a {product_type} at {scale} scale.\n\n"
            "Return JSON with keys technologyStack (list of {{category, technologies: "
            "[{{name, purpose, complexity, cost}}]}}), developmentPhases, "
            "operationalRequirements, teamStructure {{coreTeam: [{{role, "
            "hiringPriority}}]}}, generatedAt: \"{now}\"."
        ),
        max_tokens=4000,
    ),
    ArtifactKind.LEGAL_REGULATORY: PromptSpec(
        system=(
            "You are a startup attorney. Summarize legal and regulatory "
            "requirements in valid JSON. This is general information, not legal advice."
        ),
        template=(
            "Outline legal and regulatory requirements for a {business_type} business "
            "incorporated in {jurisdiction}.\n\n"
            "Return JSON with keys businessStructure {{recommended, reasoning}}, "
            "requirements, complianceFrameworks, intellectualProperty {{protections}}, "
            'contractsAndAgreements (list of {{name, priority}}), generatedAt: "{now}".'
        ),
        max_tokens=4000,
    ),
    ArtifactKind.LAUNCH_ROADMAP: PromptSpec(
        system=(
            "You are a startup operator. Produce a realistic 12-month launch "
            "roadmap in valid JSON."
        ),
        template=(
            "Create a comprehensive 12-month launch roadmap for a {industry} startup"
            "{launch_clause}.\n\n"
            "Return JSON with keys milestones (list of {{title, month, deliverables, "
            "risks}}), quarterlyGoals, criticalPath, resourceAllocation, "
            'contingencyPlans, generatedAt: "{now}".'
        ),
        max_tokens=4000,
    ),
    ArtifactKind.COMPETITOR_MATRIX: PromptSpec(
        system=(
            "You are a competitive intelligence expert. Provide comprehensive "
            "competitor analysis with detailed pricing, market positioning, and "
            "strategic insights in valid JSON format."
        ),
        template=(
            "Analyze the competitive landscape for the {industry} industry, focusing "
            'on solutions related to "{target_keyword}".\n\n'
            "Return JSON with keys competitors (list of {{name, website, description, "
            "pricing: [{{tier, price, billingCycle, features}}], sentimentScore, "
            "marketShare, strengths, weaknesses, sources: [" + _SOURCE_SHAPE + "]}}), "
            "positioningMap (list of {{competitor, xAxis, yAxis}}), marketGaps, "
            'competitiveAdvantages, threatsAndOpportunities, generatedAt: "{now}".\n\n'
            "Include 8-12 real competitors."
        ),
        max_tokens=4000,
    ),
    ArtifactKind.GTM_PLAN: PromptSpec(
        system=(
            "You are a go-to-market strategist. Produce a phased GTM plan with "
            "tactics, KPIs and kill criteria in valid JSON."
        ),
        template=(
            'Create a go-to-market plan for: "{product_description}" targeting '
            "{target_audience} with a budget of {budget} USD.\n\n"
            "Return JSON with keys phases (list of {{name, duration, objectives, "
            "tactics: [{{channel, effort, cost, impact}}], kpis}}), risks (list of "
            "{{risk, probability, impact, mitigation}}), killCriteria, totalBudget, "
            'generatedAt: "{now}".'
        ),
        max_tokens=4000,
    ),
    ArtifactKind.MARKET_SIZING: PromptSpec(
        system=(
            "You are a market research expert specializing in market sizing "
            "analysis. Provide comprehensive TAM/SAM/SOM analysis with multiple "
            "methodologies and realistic projections in valid JSON format."
        ),
        template=(
            "Analyze the market size for the {industry} industry, specifically for "
            "{product_category} in {geography}.\n\n"
            "Return JSON with keys tam {{value, unit, method, segments}}, sam {{value, "
            "unit, method, reasoningFactors}}, som {{value, unit, method, "
            "marketPenetration, timeToCapture}}, bottomUpAnalysis, references: ["
            + _SOURCE_SHAPE
            + '], generatedAt: "{now}".'
        ),
    ),
}


def build_request(kind: ArtifactKind, params: dict[str, Any]) -> LLMRequest:
    """
    Build the LLM request for one artifact kind.

    Args:
        kind: Artifact kind to generate (not the aggregate)
        params: Generation parameters; missing keys render as empty text

    Returns:
        LLMRequest asking for a JSON object

    Raises:
        ValueError: If the kind has no prompt (the aggregate kind)
    """
    spec = PROMPTS.get(kind)
    if spec is None:
        raise ValueError(f"No prompt defined for {kind.label}")

    values = _DefaultDict({k: _render(v) for k, v in params.items()})
    values["now"] = datetime.now(timezone.utc).isoformat()
    launch_date = params.get("target_launch_date")
    values["launch_clause"] = (
        f" with target launch date of {launch_date}" if launch_date else ""
    )

    return LLMRequest(
        prompt=spec.template.format_map(values),
        system_prompt=spec.system,
        max_tokens=spec.max_tokens,
        json_mode=True,
    )


class _DefaultDict(dict):
    def __missing__(self, key: str) -> str:
        return ""


def _render(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    if value is None:
        return ""
    return str(value)
