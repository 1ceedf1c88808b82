"""
Tests for the intent handlers against the sample records.
"""

import pytest

from vxa_ask.core.config import RouterSettings
from vxa_ask.insights.handlers import (
    CompetitorIntelHandler,
    CustomerHealthHandler,
    DealsByStageHandler,
    DealsByValueHandler,
    GeneralHandler,
    MeetingPrepHandler,
    PipelineAnalyticsHandler,
    PipelineHandler,
    ProspectingHandler,
    RecruitmentByStageHandler,
    RecruitmentHandler,
    SilentDealsHandler
)
from vxa_ask.integrations.store import CUSTOMERS, FilterOp
from vxa_ask.models.query_models import IntentType, QueryFilters
from vxa_ask.models.response import ERROR_TITLE


def _ids(envelope):
    return [row["id"] for row in envelope.data]


@pytest.mark.asyncio
async def test_pipeline_overview(memory_store, router_settings, fixed_clock):
    handler = PipelineHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(), "Show pipeline")

    assert envelope.type == IntentType.PIPELINE.value
    assert envelope.meta.total_count == 8
    assert envelope.meta.total_value == 30200
    assert "8 deals" in envelope.summary
    assert "$30,200" in envelope.summary
    assert "2 are in negotiating stage" in envelope.insights
    assert "1 is in lost stage" in envelope.insights
    assert _ids(envelope)[0] == "c-004"


@pytest.mark.asyncio
async def test_pipeline_rows_are_capped(memory_store, fixed_clock):
    handler = PipelineHandler(memory_store, RouterSettings(max_rows=3), fixed_clock)
    envelope = await handler.respond(QueryFilters(), "Show pipeline")

    assert len(envelope.data) == 3
    assert envelope.meta.total_count == 8


@pytest.mark.asyncio
async def test_silent_deals_default_window(memory_store, router_settings, fixed_clock):
    """Test that open deals untouched for 14 days are reported, quietest first."""
    handler = SilentDealsHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(), "Which deals have gone silent?")

    assert _ids(envelope) == ["c-005", "c-001"]
    assert envelope.data[1]["days_silent"] == 48
    assert envelope.meta.total_count == 2
    assert envelope.meta.total_value == 4500
    assert "2 deals have gone silent for 14+ days" in envelope.summary
    assert "$4,500" in envelope.summary
    assert envelope.insights[0].startswith("Sam Carter has been silent the longest")


@pytest.mark.asyncio
async def test_silent_deals_custom_window(memory_store, router_settings, fixed_clock):
    handler = SilentDealsHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(days=60), "silent for 60 days")

    assert _ids(envelope) == ["c-005"]
    assert "1 deal has gone silent for 60+ days" in envelope.summary


@pytest.mark.asyncio
async def test_silent_deals_zero_day_window(memory_store, router_settings, fixed_clock):
    """Test that an explicit 0-day window is used, not replaced by the default."""
    handler = SilentDealsHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(days=0), "silent for 0 days")

    assert _ids(envelope) == ["c-005", "c-001", "c-004", "c-002", "c-008"]
    assert envelope.meta.total_value == 9700
    assert "5 deals have gone silent for 0+ days" in envelope.summary


@pytest.mark.asyncio
async def test_silent_deals_huge_window(memory_store, router_settings, fixed_clock):
    handler = SilentDealsHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(days=1000000), "silent for 1000000 days")

    assert not envelope.is_error
    assert envelope.data == []
    assert envelope.summary == "No open deals have gone silent for 1000000+ days."


@pytest.mark.asyncio
async def test_silent_deals_reads_open_stages_only(memory_store, router_settings, fixed_clock):
    handler = SilentDealsHandler(memory_store, router_settings, fixed_clock)
    await handler.respond(QueryFilters(), "silent")

    query = memory_store.calls[-1]
    assert query.collection == CUSTOMERS
    status_filter = query.filters[0]
    assert status_filter.op == FilterOp.IN
    assert set(status_filter.value) == {"lead", "in-contact", "negotiating"}


@pytest.mark.asyncio
async def test_deals_by_value_default_minimum(memory_store, router_settings, fixed_clock):
    """Test that the value handler defaults to deals of $1,000 and up."""
    handler = DealsByValueHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(), "biggest deals")

    assert envelope.meta.total_count == 6
    assert envelope.meta.total_value == 29400
    assert _ids(envelope)[0] == "c-003"
    assert "over $1,000" in envelope.summary
    assert envelope.insights[0].startswith("Largest deal: Marcus Lee")


@pytest.mark.asyncio
async def test_deals_by_value_range(memory_store, router_settings, fixed_clock):
    handler = DealsByValueHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(min_value=2000, max_value=5000), "deals")

    assert _ids(envelope) == ["c-001", "c-008", "c-007"]
    assert "between $2,000 and $5,000" in envelope.summary


@pytest.mark.asyncio
async def test_deals_by_value_max_only_has_no_default_minimum(memory_store, router_settings, fixed_clock):
    handler = DealsByValueHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(max_value=1000), "deals under $1,000")

    assert _ids(envelope) == ["c-004"]


@pytest.mark.asyncio
async def test_deals_by_value_no_matches(memory_store, router_settings, fixed_clock):
    handler = DealsByValueHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(min_value=100000), "deals over $100k")

    assert envelope.data == []
    assert envelope.meta.total_count == 0
    assert envelope.meta.total_value == 0
    assert envelope.summary == "No deals found over $100,000."


@pytest.mark.asyncio
async def test_deals_by_stage_default(memory_store, router_settings, fixed_clock):
    handler = DealsByStageHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(), "negotiating")

    assert _ids(envelope) == ["c-001", "c-008"]
    assert envelope.meta.total_value == 7700
    assert "2 deals are in the negotiating stage" in envelope.summary


@pytest.mark.asyncio
async def test_deals_by_stage_ignores_recruiting_stage(memory_store, router_settings, fixed_clock):
    handler = DealsByStageHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(stage="interview"), "deals in interview")

    assert envelope.title == "Deals: negotiating"


@pytest.mark.asyncio
async def test_deals_by_stage_won(memory_store, router_settings, fixed_clock):
    handler = DealsByStageHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(stage="won"), "show closed won")

    assert _ids(envelope) == ["c-003", "c-006"]
    assert envelope.meta.total_value == 18000


@pytest.mark.asyncio
async def test_pipeline_analytics(memory_store, router_settings, fixed_clock):
    handler = PipelineAnalyticsHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(), "pipeline analytics")

    stages = [row["stage"] for row in envelope.data]
    assert stages == ["lead", "in-contact", "negotiating", "won", "lost"]
    lead_row = envelope.data[0]
    assert lead_row == {"stage": "lead", "count": 2, "total_value": 800.0, "average_value": 800.0}
    assert envelope.meta.total_count == 8
    assert envelope.meta.filtered_count == 5
    assert envelope.meta.total_value == 30200
    assert "Win rate: 66.7% (2 won, 1 lost)" in envelope.insights


@pytest.mark.asyncio
async def test_pipeline_analytics_empty_store(router_settings, fixed_clock):
    from vxa_ask.integrations.store import DataFrameRecordStore

    handler = PipelineAnalyticsHandler(DataFrameRecordStore({}), router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(), "pipeline analytics")

    assert envelope.data == []
    assert envelope.meta.total_count == 0
    assert envelope.meta.total_value == 0


@pytest.mark.asyncio
async def test_meeting_prep_without_name_skips_store(memory_store, router_settings, fixed_clock):
    """Test that meeting prep asks for a name instead of reading the store."""
    handler = MeetingPrepHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(), "prep for my meeting")

    assert memory_store.calls == []
    assert envelope.type == IntentType.MEETING_PREP.value
    assert envelope.title != ERROR_TITLE
    assert envelope.data is None
    assert "name" in envelope.summary


@pytest.mark.asyncio
async def test_meeting_prep_customer(memory_store, router_settings, fixed_clock):
    handler = MeetingPrepHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(name="Jordan"), "prep for my meeting with Jordan")

    assert envelope.title == "Meeting Prep: Jordan"
    assert "Jordan Blake from Northwind Media" in envelope.summary
    assert "$4,500" in envelope.summary
    assert "48 days ago" in envelope.summary
    assert envelope.meta.total_count == 1
    assert envelope.data[0]["match_type"] == "customer"
    assert len(memory_store.calls) == 4


@pytest.mark.asyncio
async def test_meeting_prep_matches_company(memory_store, router_settings, fixed_clock):
    handler = MeetingPrepHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(search_query="atlas"), 'brief me on "atlas"')

    assert envelope.data[0]["id"] == "c-008"


@pytest.mark.asyncio
async def test_meeting_prep_candidate_and_competitor(memory_store, router_settings, fixed_clock):
    handler = MeetingPrepHandler(memory_store, router_settings, fixed_clock)

    candidate = await handler.respond(QueryFilters(name="Maya"), "prep for call with Maya")
    assert "candidate for Senior Backend Engineer" in candidate.summary
    assert candidate.data[0]["match_type"] == "recruit"

    competitor = await handler.respond(QueryFilters(name="PipelineHQ"), "prep for PipelineHQ")
    assert "18.5% market share" in competitor.summary


@pytest.mark.asyncio
async def test_meeting_prep_no_match(memory_store, router_settings, fixed_clock):
    handler = MeetingPrepHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(name="Zed"), "meeting with Zed")

    assert envelope.data == []
    assert "Zed" in envelope.summary
    assert envelope.title != ERROR_TITLE


@pytest.mark.asyncio
async def test_recruitment(memory_store, router_settings, fixed_clock):
    handler = RecruitmentHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(), "Open candidates")

    assert envelope.meta.total_count == 5
    assert "5 candidates" in envelope.summary
    assert "2 are in interview stage" in envelope.insights
    assert envelope.insights[:4] == [
        "1 is in lead stage",
        "1 is in screen stage",
        "2 are in interview stage",
        "1 is in offer stage",
    ]


@pytest.mark.asyncio
async def test_recruitment_by_stage(memory_store, router_settings, fixed_clock):
    handler = RecruitmentByStageHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(stage="interview"), "candidates in interview stage")

    assert _ids(envelope) == ["r-001", "r-005"]
    assert envelope.summary == "2 candidates are in the interview stage."
    assert "Positions: Senior Backend Engineer, Frontend Engineer" in envelope.insights


@pytest.mark.asyncio
async def test_recruitment_by_stage_falls_back_for_sales_stage(memory_store, router_settings, fixed_clock):
    handler = RecruitmentByStageHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(stage="negotiating"), "candidates negotiating")

    assert envelope.title == "Candidates: interview"


@pytest.mark.asyncio
async def test_competitor_intel(memory_store, router_settings, fixed_clock):
    handler = CompetitorIntelHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(), "Competitor intel")

    assert envelope.summary == "Tracking 3 competitors in your market."
    assert _ids(envelope) == ["k-001", "k-002", "k-003"]
    assert "PipelineHQ leads on market share at 18.5%" in envelope.insights
    assert "1 is big player" in envelope.insights


@pytest.mark.asyncio
async def test_prospecting_ranks_by_score(memory_store, router_settings, fixed_clock):
    handler = ProspectingHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(), "who should I contact")

    assert _ids(envelope) == ["c-008", "c-001", "c-002", "c-004", "c-005"]
    assert [row["score"] for row in envelope.data] == [80, 57, 50, 48, 10]
    assert envelope.meta.total_count == 5
    assert envelope.meta.filtered_count == 1
    assert envelope.meta.total_value == 9700
    assert envelope.insights[0].startswith("Noah Fischer (Atlas Marketing): 80/100")


@pytest.mark.asyncio
async def test_customer_health(memory_store, router_settings, fixed_clock):
    handler = CustomerHealthHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(), "customer health")

    assert _ids(envelope) == ["c-003"]
    assert envelope.data[0]["days_since_update"] == 64
    assert envelope.meta.total_count == 2
    assert envelope.meta.filtered_count == 1
    assert envelope.meta.total_value == 12000
    assert "$12,000" in envelope.summary


@pytest.mark.asyncio
async def test_customer_health_custom_window(memory_store, router_settings, fixed_clock):
    handler = CustomerHealthHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(days=90), "at risk customers in 90 days")

    assert envelope.data == []
    assert envelope.summary == "All 2 active customers have been updated in the last 90 days."


@pytest.mark.asyncio
async def test_customer_health_zero_day_window(memory_store, router_settings, fixed_clock):
    handler = CustomerHealthHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(days=0), "customer health in 0 days")

    assert _ids(envelope) == ["c-003", "c-006"]
    assert envelope.meta.filtered_count == 2


@pytest.mark.asyncio
async def test_customer_health_huge_window(memory_store, router_settings, fixed_clock):
    handler = CustomerHealthHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(days=10 ** 12), "at risk customers")

    assert not envelope.is_error
    assert envelope.data == []
    assert envelope.meta.filtered_count == 0


@pytest.mark.asyncio
async def test_general_help(memory_store, router_settings, fixed_clock):
    handler = GeneralHandler(memory_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(), "banana")

    assert envelope.title == "How can I help?"
    assert '"banana"' in envelope.summary
    assert envelope.suggested_actions == ["Show pipeline", "Open candidates", "Meeting prep", "Competitor intel"]
    assert memory_store.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("handler_class", [
    PipelineHandler,
    SilentDealsHandler,
    DealsByStageHandler,
    DealsByValueHandler,
    PipelineAnalyticsHandler,
    RecruitmentHandler,
    RecruitmentByStageHandler,
    CompetitorIntelHandler,
    ProspectingHandler,
    CustomerHealthHandler,
])
async def test_store_failure_becomes_error_envelope(handler_class, failing_store, router_settings, fixed_clock):
    """Test that a failed read is reported as an error envelope, not raised."""
    handler = handler_class(failing_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(), "anything")

    assert envelope.title == ERROR_TITLE
    assert envelope.is_error
    assert envelope.data is None
    assert envelope.summary.startswith("Unable to fetch")
    assert envelope.type == handler_class.intent_type.value
    assert "data" not in envelope.to_dict()


@pytest.mark.asyncio
async def test_meeting_prep_store_failure(failing_store, router_settings, fixed_clock):
    handler = MeetingPrepHandler(failing_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(name="Jordan"), "prep for Jordan")

    assert envelope.is_error
    assert envelope.type == IntentType.MEETING_PREP.value


@pytest.mark.asyncio
async def test_meeting_prep_collects_every_failed_read(failing_store, router_settings, fixed_clock):
    """Test that all concurrent reads finish before the failure is reported."""
    handler = MeetingPrepHandler(failing_store, router_settings, fixed_clock)
    envelope = await handler.respond(QueryFilters(name="Jordan"), "prep for Jordan")

    assert envelope.is_error
    assert len(failing_store.calls) == 4
    assert {q.collection for q in failing_store.calls} == {"customers", "recruits", "competitors"}
