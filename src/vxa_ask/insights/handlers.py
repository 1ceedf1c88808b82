"""
Intent handlers.

One handler per intent. Each handler reads what it needs from the record
store, computes its own aggregates and answers with a ResponseEnvelope.
Store failures are turned into an error envelope by IntentHandler.respond,
so a handler never raises for a failed read.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, List, Optional

import pandas as pd

from ..core.config import RouterSettings
from ..core.exceptions import StoreReadError
from ..integrations.store import (
    BaseRecordStore,
    FilterOp,
    Record,
    RecordQuery,
    CUSTOMERS,
    RECRUITS,
    COMPETITORS
)
from ..models.query_models import IntentType, QueryFilters
from ..models.response import ResponseEnvelope, ResponseMeta
from .filter_extractor import OPEN_SALES_STAGES, RECRUIT_STAGES, SALES_STAGES
from .formatting import (
    cutoff_before,
    days_since,
    deal_value,
    format_currency,
    parse_timestamp,
    pluralize,
    total_value
)
from .lead_scoring import score_lead

logger = logging.getLogger(__name__)

HELP_SUGGESTIONS = ["Show pipeline", "Open candidates", "Meeting prep", "Competitor intel"]

COMPETITOR_STATUS_LABELS = {
    "bigplayer": "big player",
    "traction": "gaining traction",
    "watch": "on watch",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _verb(count: int, singular: str = "is", plural: str = "are") -> str:
    return singular if count == 1 else plural


def _stage_insights(records: List[Record], field: str, stages) -> List[str]:
    """One "<n> are in <stage> stage" line per stage present, in pipeline order."""
    counts = pd.Series([r.get(field) for r in records], dtype="object").value_counts()
    ordered = [s for s in stages if s in counts.index]
    ordered += [s for s in counts.index if s not in stages and s is not None]
    return [f"{int(counts[s])} {_verb(int(counts[s]))} in {s} stage" for s in ordered]


class IntentHandler(ABC):
    """
    Base class for intent handlers.

    Subclasses set `intent_type` and `subject` and implement `handle`.
    """

    intent_type: IntentType
    subject = "data"
    error_actions: List[str] = ["Try again"]

    def __init__(self, store: Optional[BaseRecordStore],
                 settings: Optional[RouterSettings] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.settings = settings or RouterSettings()
        self.clock = clock or _utcnow

    async def respond(self, filters: QueryFilters, query: str) -> ResponseEnvelope:
        """Run the handler, converting a failed store read into an error envelope."""
        try:
            return await self.handle(filters, query)
        except StoreReadError as e:
            logger.error(f"{type(self).__name__} could not read records: {e.message}")
            return ResponseEnvelope.error_response(
                self.intent_type,
                f"Unable to fetch {self.subject} at the moment.",
                list(self.error_actions)
            )

    @abstractmethod
    async def handle(self, filters: QueryFilters, query: str) -> ResponseEnvelope:
        """
        Answer a classified question.

        Args:
            filters: Filters extracted from the question
            query: The original question text

        Returns:
            The response envelope
        """
        pass

    def _rows(self, records: List[Record]) -> List[Record]:
        return records[:self.settings.max_rows]

    def _envelope(self, title: str, summary: str, **kwargs) -> ResponseEnvelope:
        return ResponseEnvelope(type=self.intent_type, title=title, summary=summary, **kwargs)


class PipelineHandler(IntentHandler):
    """Overview of every deal, newest first."""

    intent_type = IntentType.PIPELINE
    subject = "pipeline data"
    error_actions = ["Try again", "Show all deals"]

    async def handle(self, filters: QueryFilters, query: str) -> ResponseEnvelope:
        records = await self.store.select(
            RecordQuery(CUSTOMERS, order_by="created_at", ascending=False)
        )
        count = len(records)
        value = total_value(records)

        summary = f"Found {pluralize(count, 'deal')} in your pipeline"
        summary += f", worth {format_currency(value)} in MRR." if count else "."

        return self._envelope(
            "Pipeline Overview",
            summary,
            data=self._rows(records),
            insights=_stage_insights(records, "status", SALES_STAGES),
            suggested_actions=["Filter by stage", "Show closed won", "Revenue forecast"],
            meta=ResponseMeta(total_count=count, total_value=value)
        )


class SilentDealsHandler(IntentHandler):
    """Open deals with no update in the last N days."""

    intent_type = IntentType.PIPELINE_SILENT
    subject = "pipeline data"

    async def handle(self, filters: QueryFilters, query: str) -> ResponseEnvelope:
        days = filters.days if filters.days is not None else self.settings.silent_days
        now = self.clock()
        cutoff = cutoff_before(now, days)

        records = await self.store.select(
            RecordQuery(CUSTOMERS, order_by="updated_at", ascending=True)
            .where("status", FilterOp.IN, OPEN_SALES_STAGES)
            .where("updated_at", FilterOp.LT, cutoff)
        )
        rows = [dict(r, days_silent=days_since(r.get("updated_at"), now)) for r in records]
        count = len(rows)
        value = total_value(rows)

        if count:
            summary = (f"{pluralize(count, 'deal')} {_verb(count, 'has', 'have')} gone silent "
                       f"for {days}+ days, worth {format_currency(value)} in MRR.")
        else:
            summary = f"No open deals have gone silent for {days}+ days."

        insights = []
        if rows:
            quietest = rows[0]
            insights.append(
                f"{quietest.get('name') or quietest.get('company')} has been silent the longest "
                f"({quietest['days_silent']} days)"
            )
        insights.extend(_stage_insights(rows, "status", SALES_STAGES))

        return self._envelope(
            "Silent Deals",
            summary,
            data=self._rows(rows),
            insights=insights,
            suggested_actions=["Prep for a follow-up call", "Show deals over $5k", "Show pipeline"],
            meta=ResponseMeta(total_count=count, total_value=value)
        )


class DealsByStageHandler(IntentHandler):
    """Deals sitting in one sales stage."""

    intent_type = IntentType.PIPELINE_BY_STAGE
    subject = "pipeline data"

    async def handle(self, filters: QueryFilters, query: str) -> ResponseEnvelope:
        stage = filters.stage
        if stage not in SALES_STAGES:
            if stage:
                logger.warning(f"'{stage}' is not a sales stage, using {self.settings.default_stage}")
            stage = self.settings.default_stage

        records = await self.store.select(
            RecordQuery(CUSTOMERS, order_by="mrr_value", ascending=False)
            .where("status", FilterOp.EQ, stage)
        )
        count = len(records)
        value = total_value(records)

        summary = f"{pluralize(count, 'deal')} {_verb(count)} in the {stage} stage"
        summary += f", worth {format_currency(value)} in MRR." if count else "."

        insights = []
        if records and deal_value(records[0]) > 0:
            top = records[0]
            insights.append(f"Largest: {top.get('company') or top.get('name')} at {format_currency(deal_value(top))}")

        return self._envelope(
            f"Deals: {stage}",
            summary,
            data=self._rows(records),
            insights=insights,
            suggested_actions=["Which deals have gone silent?", "Show deals over $5k", "Show pipeline analytics"],
            meta=ResponseMeta(total_count=count, total_value=value)
        )


class DealsByValueHandler(IntentHandler):
    """Deals inside a value range, largest first."""

    intent_type = IntentType.PIPELINE_BY_VALUE
    subject = "pipeline data"

    async def handle(self, filters: QueryFilters, query: str) -> ResponseEnvelope:
        min_value, max_value = filters.min_value, filters.max_value
        if min_value is None and max_value is None:
            min_value = self.settings.min_deal_value

        record_query = RecordQuery(CUSTOMERS, order_by="mrr_value", ascending=False)
        if min_value is not None:
            record_query = record_query.where("mrr_value", FilterOp.GTE, min_value)
        if max_value is not None:
            record_query = record_query.where("mrr_value", FilterOp.LTE, max_value)

        records = await self.store.select(record_query)
        count = len(records)
        value = total_value(records)

        if min_value is not None and max_value is not None:
            range_text = f"between {format_currency(min_value)} and {format_currency(max_value)}"
        elif max_value is not None:
            range_text = f"under {format_currency(max_value)}"
        else:
            range_text = f"over {format_currency(min_value)}"

        if count:
            summary = f"Found {pluralize(count, 'deal')} {range_text}, worth {format_currency(value)} in MRR."
        else:
            summary = f"No deals found {range_text}."

        insights = []
        if records:
            top = records[0]
            insights.append(
                f"Largest deal: {top.get('name')} ({top.get('company') or 'no company'}) "
                f"at {format_currency(deal_value(top))}"
            )
            insights.extend(_stage_insights(records, "status", SALES_STAGES))

        return self._envelope(
            "Deals by Value",
            summary,
            data=self._rows(records),
            insights=insights,
            suggested_actions=["Show deals in negotiation", "Which deals have gone silent?", "Show pipeline"],
            meta=ResponseMeta(total_count=count, total_value=value)
        )


class PipelineAnalyticsHandler(IntentHandler):
    """Per-stage breakdown, win rate and average deal value."""

    intent_type = IntentType.PIPELINE_ANALYTICS
    subject = "pipeline data"

    async def handle(self, filters: QueryFilters, query: str) -> ResponseEnvelope:
        records = await self.store.select(RecordQuery(CUSTOMERS))
        df = pd.DataFrame(records, columns=["status", "mrr_value"])
        df["status"] = df["status"].fillna("unknown")
        df["mrr_value"] = pd.to_numeric(df["mrr_value"], errors="coerce")

        grouped = df.groupby("status")["mrr_value"].agg(["size", "sum", "mean"])
        stages = [s for s in SALES_STAGES if s in grouped.index]
        stages += [s for s in grouped.index if s not in SALES_STAGES]

        rows = []
        for stage in stages:
            mean = grouped.loc[stage, "mean"]
            rows.append({
                "stage": stage,
                "count": int(grouped.loc[stage, "size"]),
                "total_value": float(grouped.loc[stage, "sum"]),
                "average_value": None if pd.isna(mean) else float(mean),
            })

        count = len(df)
        value = float(df["mrr_value"].sum())
        by_stage = {row["stage"]: row["count"] for row in rows}
        won, lost = by_stage.get("won", 0), by_stage.get("lost", 0)
        open_count = sum(by_stage.get(s, 0) for s in OPEN_SALES_STAGES)

        insights = []
        if won + lost:
            win_rate = won / (won + lost) * 100
            insights.append(f"Win rate: {win_rate:.1f}% ({won} won, {lost} lost)")
        average = df["mrr_value"].mean()
        if not pd.isna(average):
            insights.append(f"Average deal value: {format_currency(round(float(average), 2))}")
        open_value = float(df.loc[df["status"].isin(OPEN_SALES_STAGES), "mrr_value"].sum())
        insights.append(f"Open pipeline: {format_currency(open_value)} across {pluralize(open_count, 'deal')}")

        summary = f"{pluralize(count, 'deal')} across {pluralize(len(rows), 'stage')}"
        summary += f", worth {format_currency(value)} in MRR." if count else "."

        return self._envelope(
            "Pipeline Analytics",
            summary,
            data=rows,
            insights=insights,
            suggested_actions=["Show deals in negotiation", "Which deals have gone silent?", "Show top leads"],
            meta=ResponseMeta(total_count=count, filtered_count=open_count, total_value=value)
        )


class MeetingPrepHandler(IntentHandler):
    """
    Briefing on the person or company a meeting is with.

    Customers (by name and by company), candidates and competitors are
    searched concurrently and the first hit from each is folded into one
    narrative.
    """

    intent_type = IntentType.MEETING_PREP
    subject = "meeting prep data"

    async def handle(self, filters: QueryFilters, query: str) -> ResponseEnvelope:
        subject = filters.name or filters.search_query
        if not subject:
            return self._envelope(
                "Meeting Prep",
                "Who are you meeting with? Include a name, for example \"Prep for my meeting with Jordan\".",
                suggested_actions=["Prep for my meeting with Jordan", "Show pipeline", "Open candidates"]
            )

        results = await asyncio.gather(
            self._search(CUSTOMERS, "name", subject),
            self._search(CUSTOMERS, "company", subject),
            self._search(RECRUITS, "name", subject),
            self._search(COMPETITORS, "name", subject),
            return_exceptions=True
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            logger.warning(f"{len(failures)} of {len(results)} meeting prep reads failed")
            raise next((f for f in failures if isinstance(f, StoreReadError)), failures[0])

        by_name, by_company, recruits, competitors = results
        customer = (by_name or by_company or [None])[0]
        recruit = recruits[0] if recruits else None
        competitor = competitors[0] if competitors else None

        now = self.clock()
        parts, insights, rows = [], [], []

        if customer:
            rows.append(dict(customer, match_type="customer"))
            idle = days_since(customer.get("updated_at"), now)
            sentence = (f"{customer.get('name')} from {customer.get('company') or 'an unknown company'} "
                        f"is a {customer.get('status')} deal worth {format_currency(deal_value(customer))} MRR")
            parts.append(sentence + (f", last updated {idle} days ago." if idle is not None else "."))
            if customer.get("status") == "negotiating":
                insights.append("Deal is in negotiation, come ready to discuss terms")
            if idle is not None and idle >= self.settings.silent_days:
                insights.append(f"No activity for {idle} days, open by reconnecting")
            insights.append(score_lead(customer, now).recommendation)

        if recruit:
            rows.append(dict(recruit, match_type="recruit"))
            parts.append(f"{recruit.get('name')} is a candidate for {recruit.get('position') or 'an open role'}, "
                         f"currently at the {recruit.get('stage')} stage.")
            if recruit.get("comments"):
                insights.append(f"Recruiter notes: {recruit['comments']}")

        if competitor:
            rows.append(dict(competitor, match_type="competitor"))
            status = COMPETITOR_STATUS_LABELS.get(competitor.get("status"), competitor.get("status"))
            sentence = f"{competitor.get('name')} is a competitor ({status})"
            if competitor.get("market_share") is not None:
                sentence += f" with {competitor['market_share']}% market share"
            parts.append(sentence + ".")
            if competitor.get("core_feature"):
                insights.append(f"Be ready to compare against {competitor['name']}'s {competitor['core_feature']}")

        if parts:
            summary = " ".join(parts)
        else:
            summary = f"I couldn't find \"{subject}\" among your customers, candidates or competitors."

        return self._envelope(
            f"Meeting Prep: {subject}",
            summary,
            data=rows,
            insights=insights,
            suggested_actions=["Which deals have gone silent?", "Competitor intel", "Show pipeline"],
            meta=ResponseMeta(total_count=len(rows))
        )

    async def _search(self, collection: str, field: str, text: str) -> List[Record]:
        return await self.store.select(
            RecordQuery(collection, limit=1).where(field, FilterOp.ILIKE, text)
        )


class RecruitmentHandler(IntentHandler):
    """Overview of every candidate, newest first."""

    intent_type = IntentType.RECRUITMENT
    subject = "candidate data"
    error_actions = ["Try again", "Show all candidates"]

    async def handle(self, filters: QueryFilters, query: str) -> ResponseEnvelope:
        records = await self.store.select(
            RecordQuery(RECRUITS, order_by="created_at", ascending=False)
        )
        count = len(records)

        insights = _stage_insights(records, "stage", RECRUIT_STAGES)
        high_priority = sum(1 for r in records if r.get("priority") == "high")
        if high_priority:
            insights.append(f"{pluralize(high_priority, 'high-priority candidate')}")
        technical = sum(1 for r in records if r.get("technical_role"))
        if technical:
            insights.append(f"{technical} {_verb(technical)} for technical roles")

        return self._envelope(
            "Recruitment Pipeline",
            f"You have {pluralize(count, 'candidate')} in your recruitment pipeline.",
            data=self._rows(records),
            insights=insights,
            suggested_actions=["Show candidates in interview stage", "Which candidates have offers?", "Show pipeline"],
            meta=ResponseMeta(total_count=count)
        )


class RecruitmentByStageHandler(IntentHandler):
    """Candidates at one recruiting stage."""

    intent_type = IntentType.RECRUITMENT_BY_STAGE
    subject = "candidate data"
    error_actions = ["Try again", "Show all candidates"]

    async def handle(self, filters: QueryFilters, query: str) -> ResponseEnvelope:
        stage = filters.stage if filters.stage in RECRUIT_STAGES else self.settings.default_recruit_stage

        records = await self.store.select(
            RecordQuery(RECRUITS, order_by="updated_at", ascending=False)
            .where("stage", FilterOp.EQ, stage)
        )
        count = len(records)

        insights = []
        positions = list(dict.fromkeys(r.get("position") for r in records if r.get("position")))
        if positions:
            insights.append(f"Positions: {', '.join(positions)}")
        high_priority = [r.get("name") for r in records if r.get("priority") == "high"]
        if high_priority:
            insights.append(f"High priority: {', '.join(high_priority)}")

        return self._envelope(
            f"Candidates: {stage}",
            f"{pluralize(count, 'candidate')} {_verb(count)} in the {stage} stage.",
            data=self._rows(records),
            insights=insights,
            suggested_actions=["Open candidates", "Which candidates have offers?", "Show pipeline"],
            meta=ResponseMeta(total_count=count)
        )


class CompetitorIntelHandler(IntentHandler):
    """Tracked competitors, most recently updated first."""

    intent_type = IntentType.COMPETITOR_INTEL
    subject = "competitor data"
    error_actions = ["Try again", "Add competitor"]

    async def handle(self, filters: QueryFilters, query: str) -> ResponseEnvelope:
        records = await self.store.select(
            RecordQuery(COMPETITORS, order_by="updated_at", ascending=False)
        )
        count = len(records)

        insights = []
        statuses = pd.Series([r.get("status") for r in records], dtype="object").value_counts()
        for status, label in COMPETITOR_STATUS_LABELS.items():
            if status in statuses.index:
                n = int(statuses[status])
                insights.append(f"{n} {_verb(n)} {label}")

        shares = pd.to_numeric(pd.Series([r.get("market_share") for r in records], dtype="object"),
                               errors="coerce")
        if shares.notna().any():
            leader = records[int(shares.idxmax())]
            insights.append(f"{leader.get('name')} leads on market share at {float(shares.max())}%")

        return self._envelope(
            "Competitor Intelligence",
            f"Tracking {pluralize(count, 'competitor')} in your market.",
            data=self._rows(records),
            insights=insights,
            suggested_actions=["Compare competitor features", "Market positioning", "Show pipeline"],
            meta=ResponseMeta(total_count=count)
        )


class ProspectingHandler(IntentHandler):
    """Open leads ranked by lead score."""

    intent_type = IntentType.PROSPECTING
    subject = "lead data"
    strong_threshold = 60

    async def handle(self, filters: QueryFilters, query: str) -> ResponseEnvelope:
        records = await self.store.select(
            RecordQuery(CUSTOMERS, order_by="created_at", ascending=False)
            .where("status", FilterOp.IN, OPEN_SALES_STAGES)
        )
        now = self.clock()
        scored = [dict(r, **score_lead(r, now).to_dict()) for r in records]
        scored.sort(key=lambda row: row["score"], reverse=True)

        count = len(scored)
        strong = sum(1 for row in scored if row["score"] >= self.strong_threshold)
        value = total_value(scored)

        if count:
            summary = (f"Ranked {pluralize(count, 'open lead')} by lead score; "
                       f"{strong} scored {self.strong_threshold} or higher.")
        else:
            summary = "No open leads to score right now."

        insights = [
            f"{row.get('name')} ({row.get('company') or 'no company'}): {row['score']}/100, {row['recommendation']}"
            for row in scored[:3]
        ]

        return self._envelope(
            "Top Prospects",
            summary,
            data=self._rows(scored),
            insights=insights,
            suggested_actions=["Which deals have gone silent?", "Show deals over $5k", "Show pipeline"],
            meta=ResponseMeta(total_count=count, filtered_count=strong, total_value=value)
        )


class CustomerHealthHandler(IntentHandler):
    """Won customers, flagging those with no update in the last N days."""

    intent_type = IntentType.CUSTOMER_HEALTH
    subject = "customer data"

    async def handle(self, filters: QueryFilters, query: str) -> ResponseEnvelope:
        days = filters.days if filters.days is not None else self.settings.health_days
        now = self.clock()
        cutoff = cutoff_before(now, days)

        records = await self.store.select(
            RecordQuery(CUSTOMERS, order_by="updated_at", ascending=True)
            .where("status", FilterOp.EQ, "won")
        )

        at_risk = []
        for record in records:
            updated = parse_timestamp(record.get("updated_at"))
            if updated is None or updated < cutoff:
                at_risk.append(dict(record, days_since_update=days_since(record.get("updated_at"), now)))

        active = len(records)
        risk_count = len(at_risk)
        risk_value = total_value(at_risk)

        if not active:
            summary = "No active customers yet."
        elif risk_count:
            summary = (f"{pluralize(active, 'active customer')}; {risk_count} {_verb(risk_count)} at risk "
                       f"with no update in {days}+ days, worth {format_currency(risk_value)} in MRR.")
        else:
            summary = f"All {pluralize(active, 'active customer')} have been updated in the last {days} days."

        insights = []
        if active:
            insights.append(f"{active - risk_count} of {active} customers look healthy")
            active_value = total_value(records)
            if risk_count and active_value:
                insights.append(f"{risk_value / active_value * 100:.1f}% of customer MRR is at risk")

        return self._envelope(
            "Customer Health",
            summary,
            data=self._rows(at_risk),
            insights=insights,
            suggested_actions=["Prep for a check-in call", "Show pipeline analytics", "Show pipeline"],
            meta=ResponseMeta(total_count=active, filtered_count=risk_count, total_value=risk_value)
        )


class GeneralHandler(IntentHandler):
    """Fallback for questions no other intent recognises."""

    intent_type = IntentType.GENERAL

    async def handle(self, filters: QueryFilters, query: str) -> ResponseEnvelope:
        return self._envelope(
            "How can I help?",
            f"I'm not sure how to handle \"{query}\" yet. Try asking about your pipeline, "
            f"candidates, meetings, or competitors.",
            insights=[
                "Try \"Which deals have gone silent?\"",
                "Try \"Show me deals over $5,000\"",
                "Try \"Prep for my meeting with Jordan\"",
            ],
            suggested_actions=list(HELP_SUGGESTIONS)
        )


HANDLER_CLASSES = (
    PipelineHandler,
    SilentDealsHandler,
    DealsByStageHandler,
    DealsByValueHandler,
    PipelineAnalyticsHandler,
    MeetingPrepHandler,
    RecruitmentHandler,
    RecruitmentByStageHandler,
    CompetitorIntelHandler,
    ProspectingHandler,
    CustomerHealthHandler,
    GeneralHandler,
)
