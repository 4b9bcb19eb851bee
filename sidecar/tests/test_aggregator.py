"""Tests for metric configuration loading and whole-case evaluation."""

import copy
from unittest.mock import MagicMock

import pytest

from api.models import DisplayConfig, Status, TimeStatus
from metadata.client import MetadataFetchError
from rules.aggregator import MetricConfigAggregator
from rules.provenance import ProvenanceRecorder

ON_TIME_PAYLOAD = {
    "times": {"ArrivalInstant": "2025-08-15T10:40:00Z", "IncisionStartInstant": "2025-08-16T02:05:00Z"},
    "clinical": {"neurovascular_compromise": False},
}


@pytest.fixture
def client(complete_config):
    client = MagicMock()
    client.get_complete.return_value = complete_config
    return client


@pytest.fixture
def aggregator(client):
    return MetricConfigAggregator(client=client)


class TestLoad:
    def test_groups_sorted_by_display_order(self, aggregator, client):
        config = aggregator.load("timeliness_sch")
        client.get_complete.assert_called_once_with("timeliness_sch")
        assert [g.group_name for g in config.signal_groups] == ["Core", "Delay Drivers"]
        assert config.metric.version == "2"

    def test_fetch_error_propagates(self, aggregator, client):
        client.get_complete.side_effect = MetadataFetchError("API error: 503", status_code=503)
        with pytest.raises(MetadataFetchError):
            aggregator.load("timeliness_sch")

    def test_close_closes_client(self, aggregator, client):
        aggregator.close()
        client.close.assert_called_once()


class TestEvaluate:
    def test_full_evaluation(self, aggregator):
        config = aggregator.load("timeliness_sch")
        evaluation = aggregator.evaluate(config, ON_TIME_PAYLOAD, followup_values={"delay_documented": "no"})

        assert evaluation.module_id == "timeliness_sch"
        assert evaluation.timing.status == TimeStatus.PASS
        assert evaluation.timing.delta_minutes == 925

        statuses = {r.id: r.status for r in evaluation.results}
        assert statuses == {
            "on_time_19h": Status.PASS,
            "neurovascular_exam": Status.PASS,
            "ortho_consult": Status.INACTIVE,
            "imaging_done": Status.INACTIVE,
        }
        assert [g.group_name for g in evaluation.groups] == ["Core", "Delay Drivers"]
        delay = evaluation.groups[1]
        assert [s.id for s in delay.signals] == ["ortho_consult", "imaging_done"]
        assert delay.counts.inactive == 2
        assert delay.active_count == 0
        # Delay Drivers has only inactive signals
        assert [g.group_name for g in evaluation.active_groups] == ["Core"]
        assert all(r.group == "Core" for r in evaluation.active_groups[0].signals)

        assert [f.followup_name for f in evaluation.followups.visible] == ["delay_documented"]
        assert evaluation.followups.complete is True
        assert evaluation.join_report is None
        assert evaluation.provenance == []

    def test_payload_not_mutated(self, aggregator, complete_config):
        payload = copy.deepcopy(ON_TIME_PAYLOAD)
        payload["mergedSignals"] = [{"id": "SCH_TimelinessBreach", "status": "fail"}]
        snapshot = copy.deepcopy(payload)
        aggregator.evaluate(complete_config, payload)
        assert payload == snapshot

    def test_merged_signals_drive_results_and_join_report(self, aggregator, complete_config):
        payload = {
            **ON_TIME_PAYLOAD,
            "mergedSignals": [
                {"id": "SCH_TimelinessBreach", "status": "fail", "evidence": "incision at 06:00"},
                {"id": "unexpected_signal", "status": "pass"},
            ],
        }
        evaluation = aggregator.evaluate(complete_config, payload)
        on_time = next(r for r in evaluation.results if r.id == "on_time_19h")
        assert on_time.status == Status.FAIL
        assert on_time.source == "server"
        assert on_time.evidence == "incision at 06:00"

        report = evaluation.join_report
        assert report.matched == ["on_time_19h"]
        assert report.extra == ["unexpected_signal"]
        assert set(report.missing) == {"neurovascular_exam", "ortho_consult", "imaging_done"}

    def test_unknown_module_has_no_timing(self, aggregator, complete_config):
        evaluation = aggregator.evaluate(complete_config, ON_TIME_PAYLOAD, module_id="return_or")
        assert evaluation.timing is None

    def test_display_config_and_trace(self, aggregator, complete_config):
        payload = {**ON_TIME_PAYLOAD, "consults": {"ortho": True}}
        display = DisplayConfig(group_order=["Delay Drivers", "Core"])
        recorder = ProvenanceRecorder()
        evaluation = aggregator.evaluate(complete_config, payload, display=display, recorder=recorder)
        assert [g.group_name for g in evaluation.groups] == ["Delay Drivers", "Core"]
        assert [g.group_name for g in evaluation.active_groups] == ["Delay Drivers", "Core"]
        keys = {e.key for e in evaluation.provenance}
        assert "time_rule:timeliness_sch" in keys
        assert "signal:ortho_consult" in keys
        assert "group:Core" in keys

    def test_evaluate_case_loads_then_evaluates(self, aggregator, client):
        evaluation = aggregator.evaluate_case("timeliness_sch", {})
        client.get_complete.assert_called_once_with("timeliness_sch")
        assert evaluation.timing.status == TimeStatus.INACTIVE
        statuses = {r.id: r.status for r in evaluation.results}
        assert statuses["on_time_19h"] == Status.INACTIVE
        assert statuses["neurovascular_exam"] == Status.PASS
        assert [g.group_name for g in evaluation.groups] == ["Core", "Delay Drivers"]
        assert [g.group_name for g in evaluation.active_groups] == ["Core"]
