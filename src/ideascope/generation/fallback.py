"""
Deterministic heuristic generation.

Used when no LLM API key is configured. Output is seeded from the kind,
analysis id and generation parameters, so the same request always
produces the same payload. Shapes follow the JSON the prompts ask for.
"""

import hashlib
import json
import random
from datetime import datetime, timezone
from typing import Any, Callable

from ideascope.core.models import ArtifactKind, Payload

Builder = Callable[[random.Random, dict[str, Any], str], Payload]


def _seed(kind: ArtifactKind, analysis_id: str, params: dict[str, Any]) -> int:
    material = json.dumps(
        {"kind": kind.value, "analysis_id": analysis_id, "params": params},
        sort_keys=True,
        default=str,
    )
    return int(hashlib.sha256(material.encode("utf-8")).hexdigest()[:16], 16)


def _source(kind: ArtifactKind, index: int, title: str, now: str) -> dict[str, Any]:
    return {
        "id": f"{kind.value}_{index:03d}",
        "type": "internal",
        "title": title,
        "confidence": 0.5,
        "retrievedAt": now,
    }


def _keyword_item(rng: random.Random, keyword: str, intent: str) -> dict[str, Any]:
    base = rng.randint(500, 12000)
    trend = [
        {
            "month": f"{2024 + (m // 12)}-{(m % 12) + 1:02d}",
            "volume": int(base * (0.8 + 0.4 * rng.random())),
            "competitionScore": rng.randint(30, 80),
        }
        for m in range(24)
    ]
    return {
        "keyword": keyword,
        "searchVolume": base,
        "cpc": round(rng.uniform(0.5, 6.0), 2),
        "difficulty": rng.randint(20, 85),
        "intent": intent,
        "trend24Months": trend,
        "relatedKeywords": [f"{keyword} tool", f"{keyword} software"],
        "sources": [],
    }


def _keywords(rng: random.Random, p: dict[str, Any], now: str) -> Payload:
    primary = p.get("primary_keyword") or "startup idea"
    primary_items = [_keyword_item(rng, primary, "commercial")]
    long_tail = [
        _keyword_item(rng, f"best {primary} for small business", "commercial"),
        _keyword_item(rng, f"how to choose {primary}", "informational"),
    ]
    competitor = [_keyword_item(rng, f"{primary} alternative", "commercial")]
    items = primary_items + long_tail + competitor
    return {
        "primaryKeywords": primary_items,
        "longTailKeywords": long_tail,
        "competitorKeywords": competitor,
        "totalSearchVolume": sum(i["searchVolume"] for i in items),
        "avgCpc": round(sum(i["cpc"] for i in items) / len(items), 2),
        "avgDifficulty": round(sum(i["difficulty"] for i in items) / len(items)),
        "generatedAt": now,
        "locale": p.get("locale") or "US",
        "sources": [
            _source(ArtifactKind.KEYWORD_INTELLIGENCE, 1, "Heuristic keyword model", now)
        ],
    }


def _reddit(rng: random.Random, p: dict[str, Any], now: str) -> Payload:
    subreddits = p.get("subreddits") or ["startups"]
    positive = rng.randint(30, 60)
    negative = rng.randint(5, 25)
    return {
        "subredditInsights": [
            {
                "subreddit": name,
                "members": rng.randint(10_000, 2_000_000),
                "activityLevel": rng.choice(["low", "medium", "high"]),
                "relevanceScore": round(rng.uniform(0.4, 0.95), 2),
                "topThemes": list(p.get("keywords") or [])[:3],
            }
            for name in subreddits
        ],
        "topDiscussions": [],
        "overallSentiment": {
            "positive": positive,
            "negative": negative,
            "neutral": 100 - positive - negative,
        },
        "keyPainPoints": [
            {"painPoint": "Existing tools are too expensive", "frequency": rng.randint(5, 40), "impact": "high"},
            {"painPoint": "Setup takes too long", "frequency": rng.randint(5, 40), "impact": "medium"},
        ],
        "generatedAt": now,
        "sources": [_source(ArtifactKind.REDDIT_ANALYSIS, 1, "Heuristic community model", now)],
    }


def _customers(rng: random.Random, p: dict[str, Any], now: str) -> Payload:
    audience = p.get("target_audience") or "small businesses"
    return {
        "personas": [
            {
                "name": "Early Adopter",
                "description": f"Tech-savvy member of {audience}",
                "demographics": {"ageRange": "25-40", "income": "50k-120k"},
            }
        ],
        "marketSegmentation": {
            "segments": [
                {
                    "name": audience,
                    "size": rng.randint(50_000, 5_000_000),
                    "growthRate": round(rng.uniform(0.02, 0.25), 3),
                    "characteristics": ["price sensitive", "time constrained"],
                }
            ]
        },
        "customerJourney": [
            {"stage": stage, "touchpoints": [], "painPoints": []}
            for stage in ("awareness", "consideration", "purchase", "retention")
        ],
        "behaviorInsights": [],
        "generatedAt": now,
        "sources": [_source(ArtifactKind.CUSTOMER_INTELLIGENCE, 1, "Heuristic persona model", now)],
    }


def _financials(rng: random.Random, p: dict[str, Any], now: str) -> Payload:
    price = rng.choice([19, 29, 49, 99])
    customers = rng.randint(20, 80)
    growth = 1 + rng.uniform(0.05, 0.15)
    projection = []
    for month in range(1, 37):
        projection.append(
            {"month": month, "customers": int(customers), "revenue": round(customers * price, 2)}
        )
        customers *= growth
    burn = rng.randint(15_000, 60_000)
    break_even = next(
        (row["month"] for row in projection if row["revenue"] >= burn), None
    )
    return {
        "revenueStreams": [
            {
                "name": "Core subscription",
                "model": p.get("revenue_model") or "subscription",
                "monthlyProjection": projection,
            }
        ],
        "costStructure": [{"category": "Operations", "monthlyCost": burn}],
        "profitabilityAnalysis": {
            "breakEvenMonth": break_even,
            "grossMargin": round(rng.uniform(0.6, 0.85), 2),
        },
        "fundingRequirements": {"totalNeeded": burn * 18, "milestones": []},
        "assumptions": [f"Price point of {price} USD per month", "Steady organic growth"],
        "generatedAt": now,
    }


def _technology(rng: random.Random, p: dict[str, Any], now: str) -> Payload:
    return {
        "technologyStack": [
            {
                "category": "Backend",
                "technologies": [
                    {"name": "Python", "purpose": "API services", "complexity": "medium", "cost": "free"}
                ],
            },
            {
                "category": "Infrastructure",
                "technologies": [
                    {"name": "Managed PostgreSQL", "purpose": "Primary datastore", "complexity": "low", "cost": "medium"}
                ],
            },
        ],
        "developmentPhases": [
            {"phase": "MVP", "durationWeeks": rng.randint(6, 12)},
            {"phase": "Beta", "durationWeeks": rng.randint(4, 8)},
        ],
        "operationalRequirements": [],
        "teamStructure": {
            "coreTeam": [
                {"role": "Full-stack engineer", "hiringPriority": "immediate"},
                {"role": "Product designer", "hiringPriority": "within-3-months"},
            ]
        },
        "productType": p.get("product_type") or "web_application",
        "scale": p.get("scale") or "startup",
        "generatedAt": now,
    }


def _legal(rng: random.Random, p: dict[str, Any], now: str) -> Payload:
    jurisdiction = p.get("jurisdiction") or "Delaware"
    return {
        "businessStructure": {
            "recommended": "C-Corporation",
            "jurisdiction": jurisdiction,
            "reasoning": "Standard structure for venture-backed startups",
        },
        "requirements": [
            {"category": "Privacy", "requirements": [{"name": "Privacy policy", "priority": "high"}]}
        ],
        "complianceFrameworks": [],
        "intellectualProperty": {"protections": [{"type": "trademark", "priority": "medium"}]},
        "contractsAndAgreements": [
            {"name": "Terms of service", "priority": "immediate"},
            {"name": "Founder agreement", "priority": "immediate"},
        ],
        "generatedAt": now,
    }


def _roadmap(rng: random.Random, p: dict[str, Any], now: str) -> Payload:
    milestones = []
    month = 0
    for title in ("MVP build", "Private beta", "Public launch", "First 100 customers"):
        month += rng.randint(1, 3)
        milestones.append({"title": title, "month": month, "deliverables": [], "risks": []})
    return {
        "milestones": milestones,
        "quarterlyGoals": [{"quarter": q, "goals": []} for q in ("Q1", "Q2", "Q3", "Q4")],
        "criticalPath": [m["title"] for m in milestones],
        "resourceAllocation": [],
        "contingencyPlans": [],
        "targetLaunchDate": p.get("target_launch_date"),
        "generatedAt": now,
    }


def _competitors(rng: random.Random, p: dict[str, Any], now: str) -> Payload:
    industry = p.get("industry") or "technology"
    competitors = []
    for index in range(1, 4):
        name = f"{industry.title()} Competitor {index}"
        competitors.append(
            {
                "name": name,
                "description": f"Established {industry} vendor",
                "pricing": [{"tier": "Starter", "price": rng.choice([19, 29, 49]), "billingCycle": "monthly", "features": []}],
                "sentimentScore": round(rng.uniform(0.3, 0.9), 2),
                "marketShare": rng.randint(3, 25),
                "strengths": [],
                "weaknesses": [],
                "sources": [],
            }
        )
    return {
        "competitors": competitors,
        "positioningMap": [
            {"competitor": c["name"], "xAxis": rng.randint(10, 90), "yAxis": rng.randint(10, 90)}
            for c in competitors
        ],
        "marketGaps": ["Underserved small-team segment"],
        "competitiveAdvantages": [],
        "threatsAndOpportunities": [],
        "generatedAt": now,
        "sources": [_source(ArtifactKind.COMPETITOR_MATRIX, 1, "Heuristic competitor model", now)],
    }


def _gtm(rng: random.Random, p: dict[str, Any], now: str) -> Payload:
    budget = p.get("budget") or 10_000
    phases = []
    for name, share in (("Validation", 0.2), ("Launch", 0.5), ("Scale", 0.3)):
        phases.append(
            {
                "name": name,
                "duration": f"{rng.randint(4, 12)} weeks",
                "budget": round(budget * share, 2),
                "tactics": [{"channel": "Content marketing", "effort": "medium", "cost": "low", "impact": "medium"}],
                "kpis": [],
            }
        )
    return {
        "phases": phases,
        "risks": [{"risk": "Low initial traction", "probability": "medium", "impact": "high"}],
        "killCriteria": ["Fewer than 10 paying customers after launch phase"],
        "totalBudget": budget,
        "generatedAt": now,
    }


def _market(rng: random.Random, p: dict[str, Any], now: str) -> Payload:
    tam = rng.randint(5, 80) * 1_000_000_000
    sam = int(tam * rng.uniform(0.1, 0.3))
    som = int(sam * rng.uniform(0.05, 0.15))
    return {
        "tam": {"value": tam, "unit": "USD", "method": {"method": "top-down", "confidence": 0.5}, "segments": []},
        "sam": {"value": sam, "unit": "USD", "method": {"method": "bottom-up", "confidence": 0.5}, "reasoningFactors": []},
        "som": {
            "value": som,
            "unit": "USD",
            "method": {"method": "comparative", "confidence": 0.5},
            "marketPenetration": round(som / sam, 3),
            "timeToCapture": 5,
        },
        "geography": p.get("geography") or "Global",
        "references": [_source(ArtifactKind.MARKET_SIZING, 1, "Heuristic market model", now)],
        "generatedAt": now,
    }


BUILDERS: dict[ArtifactKind, Builder] = {
    ArtifactKind.KEYWORD_INTELLIGENCE: _keywords,
    ArtifactKind.REDDIT_ANALYSIS: _reddit,
    ArtifactKind.CUSTOMER_INTELLIGENCE: _customers,
    ArtifactKind.FINANCIAL_PROJECTIONS: _financials,
    ArtifactKind.TECHNOLOGY_OPERATIONS: _technology,
    ArtifactKind.LEGAL_REGULATORY: _legal,
    ArtifactKind.LAUNCH_ROADMAP: _roadmap,
    ArtifactKind.COMPETITOR_MATRIX: _competitors,
    ArtifactKind.GTM_PLAN: _gtm,
    ArtifactKind.MARKET_SIZING: _market,
}


def generate_fallback(
    kind: ArtifactKind,
    analysis_id: str,
    params: dict[str, Any],
    now: datetime | None = None,
) -> Payload:
    """
    Produce a deterministic heuristic payload for one artifact kind.

    Args:
        kind: Leaf artifact kind
        analysis_id: Analysis identifier (part of the seed)
        params: Generation parameters (part of the seed)
        now: Timestamp stamped into ``generatedAt``

    Returns:
        Payload shaped like the model output for that kind

    Raises:
        ValueError: For the aggregate kind, which is assembled, not generated
    """
    builder = BUILDERS.get(kind)
    if builder is None:
        raise ValueError(f"No heuristic generator for {kind.label}")
    rng = random.Random(_seed(kind, analysis_id, params))
    stamp = (now or datetime.now(timezone.utc)).isoformat()
    payload = builder(rng, params, stamp)
    payload["dataSource"] = "heuristic"
    return payload
