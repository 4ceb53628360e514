"""
Tests for AgentAnalytics
"""

import pytest

from patchbay.models import AnalyticsSnapshot
from patchbay.services import AgentAnalytics


class MemoryStore:
    def __init__(self, snapshot=None, fail=False):
        self.snapshot = snapshot
        self.fail = fail

    def save(self, snapshot):
        if self.fail:
            raise RuntimeError("db down")
        self.snapshot = snapshot.model_copy(deep=True)

    def load(self):
        if self.fail:
            raise RuntimeError("db down")
        return self.snapshot


def test_record_dispatch_tracks_latency():
    analytics = AgentAnalytics()

    analytics.record_dispatch("openai-gpt-5-mini", 100.0)
    analytics.record_dispatch("openai-gpt-5-mini", 300.0)

    report = analytics.get_analytics()
    usage = report.agents["openai-gpt-5-mini"]
    assert report.requests == 2
    assert usage.requests == 2
    assert usage.total_latency_ms == 400.0
    assert usage.average_latency_ms == 200.0


def test_record_usage_prices_tokens():
    analytics = AgentAnalytics()

    analytics.record_usage("anthropic-claude-4.5-sonnet", input_tokens=1_000_000, output_tokens=100_000)

    report = analytics.get_analytics()
    usage = report.agents["anthropic-claude-4.5-sonnet"]
    assert usage.total_tokens == 1_100_000
    assert usage.estimated_cost == pytest.approx(3.0 + 1.5)
    assert report.total_cost == pytest.approx(4.5)


def test_unpriced_agent_costs_nothing():
    analytics = AgentAnalytics()
    analytics.record_usage("claude-web", 500, 500)

    assert analytics.get_analytics().total_cost == 0.0
    assert analytics.get_analytics().agents["claude-web"].total_tokens == 1000


def test_report_is_a_copy():
    analytics = AgentAnalytics()
    analytics.record_dispatch("a", 10.0)

    report = analytics.get_analytics()
    report.agents["a"].requests = 99

    assert analytics.get_analytics().agents["a"].requests == 1


def test_clear_resets_everything():
    analytics = AgentAnalytics()
    analytics.record_dispatch("a", 10.0)
    analytics.record_usage("openai-gpt-5-mini", 10, 10)

    analytics.clear()

    assert analytics.get_analytics() == AnalyticsSnapshot()


def test_persists_and_reloads():
    store = MemoryStore()
    AgentAnalytics(store=store).record_dispatch("a", 50.0)

    reloaded = AgentAnalytics(store=store)

    assert reloaded.get_analytics().agents["a"].requests == 1


def test_store_failures_are_not_fatal():
    analytics = AgentAnalytics(store=MemoryStore(fail=True))
    analytics.record_dispatch("a", 5.0)

    assert analytics.get_analytics().requests == 1
