# src/analysis/heuristic_analyzer.py — v1
"""Rule-based insight extraction used when the model is unavailable.

Deterministic: the same collection always yields the same insights, so a
record built from them replays byte-identically.
"""

from __future__ import annotations

import re
from typing import Any

from salesintel.analysis.base_analyzer import BaseInsightExtractor
from salesintel.analysis.models import (
    AnalysisResult,
    CompanyInsights,
    CompanyProfile,
    ContactRole,
    HiringSignal,
    KeyContact,
    NewsSignal,
    SignalType,
)
from salesintel.analysis.quality import HEURISTIC_RELIABILITY, assess_data_quality
from salesintel.sources.models import CollectionResponse

_MAX_SIGNALS = 5

# First match wins.
_SIGNAL_KEYWORDS: list[tuple[SignalType, re.Pattern[str]]] = [
    ("funding", re.compile(r"\b(raises?|funding|series [a-e]|investment|ipo|valuation)\b", re.I)),
    ("partnership", re.compile(r"\b(partner(s|ship)?|teams up|collaborat\w*)\b", re.I)),
    ("leadership", re.compile(r"\b(ceo|cfo|cto|appoint\w*|names? new|steps down|hires? .* as)\b", re.I)),
    ("hiring", re.compile(r"\b(hiring|hires|jobs|headcount|layoffs?)\b", re.I)),
    ("product", re.compile(r"\b(launch\w*|unveil\w*|releases?|introduc\w*|new product)\b", re.I)),
    ("expansion", re.compile(r"\b(expan\w*|opens?|acquir\w*|acquisition|new office|growth)\b", re.I)),
]

_ROLE_KEYWORDS: list[tuple[ContactRole, re.Pattern[str]]] = [
    ("Decision Maker", re.compile(r"\b(ceo|cto|cfo|coo|cio|chief|founder|president|vp|vice president|head of|director)\b", re.I)),
    ("Technical Buyer", re.compile(r"\b(engineer\w*|architect|devops|it|security|infrastructure)\b", re.I)),
    ("Champion", re.compile(r"\b(manager|lead|owner)\b", re.I)),
]

_KG_FIELDS = ("headquarters", "founded", "website", "description")


def classify_signal(headline: str) -> SignalType:
    for signal_type, pattern in _SIGNAL_KEYWORDS:
        if pattern.search(headline):
            return signal_type
    return "other"


def classify_role(title: str) -> ContactRole:
    for role, pattern in _ROLE_KEYWORDS:
        if pattern.search(title):
            return role
    return "Influencer"


class HeuristicInsightExtractor(BaseInsightExtractor):
    """Build insights directly from the collected fields. Never fails."""

    @property
    def name(self) -> str:
        return "heuristic"

    async def extract(self, target: str, collection: CollectionResponse) -> AnalysisResult:
        news = [self._news_signal(item) for item in collection.news[:_MAX_SIGNALS]]
        hiring = [
            HiringSignal(
                title=job.get("title", ""),
                location=job.get("location"),
                insight=f"Open role at {job.get('company') or target}",
            )
            for job in collection.jobs[:_MAX_SIGNALS]
        ]
        contacts = self._key_contacts(collection)
        insights = CompanyInsights(
            company=self._profile(target, collection.organic or {}),
            news_signals=news,
            hiring_signals=hiring,
            key_contacts=contacts,
            talking_points=self._talking_points(target, news, hiring, contacts),
            data_quality=assess_data_quality(collection, HEURISTIC_RELIABILITY),
        )
        return AnalysisResult(insights=insights, source="heuristic")

    @staticmethod
    def _profile(target: str, organic: dict[str, Any]) -> CompanyProfile:
        graph = organic.get("knowledge_graph") or {}
        fields = {f: str(graph[f]) for f in _KG_FIELDS if graph.get(f)}
        if "description" not in fields:
            for result in organic.get("results") or []:
                if result.get("snippet"):
                    fields["description"] = result["snippet"]
                    break
        industry = graph.get("type")
        return CompanyProfile(
            name=str(graph.get("title") or target),
            industry=str(industry) if industry else None,
            **fields,
        )

    @staticmethod
    def _news_signal(item: dict[str, Any]) -> NewsSignal:
        headline = item.get("title", "")
        return NewsSignal(
            headline=headline,
            date=item.get("date"),
            source=item.get("source"),
            insight=item.get("snippet", ""),
            signal_type=classify_signal(headline),
        )

    @staticmethod
    def _key_contacts(collection: CollectionResponse) -> list[KeyContact]:
        contacts: list[KeyContact] = []
        for profile in collection.linkedin:
            title = profile.get("title")
            if not title:
                continue
            contacts.append(KeyContact(
                title=title,
                name=profile.get("name"),
                role=classify_role(title),
                profile_url=profile.get("profile_url"),
            ))
        for record in collection.contacts:
            position = record.get("position")
            if not position:
                continue
            name = " ".join(
                p for p in (record.get("first_name"), record.get("last_name")) if p
            )
            contacts.append(KeyContact(
                title=position,
                name=name or None,
                role=classify_role(position),
                profile_url=record.get("social_url"),
            ))
        # decision makers first, original order otherwise
        order = {"Decision Maker": 0, "Champion": 1, "Technical Buyer": 2, "Influencer": 3}
        contacts.sort(key=lambda c: order[c.role])
        return contacts[:_MAX_SIGNALS]

    @staticmethod
    def _talking_points(
        target: str,
        news: list[NewsSignal],
        hiring: list[HiringSignal],
        contacts: list[KeyContact],
    ) -> list[str]:
        points: list[str] = []
        for signal in news:
            if signal.signal_type != "other":
                points.append(f"Ask about the recent {signal.signal_type} news: {signal.headline}")
                break
        if hiring:
            titles = ", ".join(h.title for h in hiring[:3])
            points.append(f"{target} is hiring ({titles}); explore the team's current priorities")
        decision_makers = [c for c in contacts if c.role == "Decision Maker"]
        if decision_makers:
            points.append(f"Reach out to {decision_makers[0].title} as the likely decision maker")
        points.append(f"Research {target}'s current challenges and initiatives")
        return points
