"""Tests for cronbind/scheduler/materialize.py"""
from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone

from cronbind.jobs.definition import job_definition_builder
from cronbind.jobs.parameters import ParameterKind, text_param
from cronbind.scheduler.binding import JobData
from cronbind.scheduler.materialize import (
    EXECUTE_DATE_KEY,
    Materializer,
    materialize,
)

FIRST = datetime(2026, 1, 1, 2, 0, 0, tzinfo=timezone.utc)


class TestMaterializer:
    def test_adds_execute_date(self, materializer, report_definition):
        request = materializer.materialize(report_definition, fired_at=FIRST)
        param = request.parameters[EXECUTE_DATE_KEY]
        assert param.kind == ParameterKind.DATE
        assert param.value == FIRST
        assert request.fired_at == FIRST

    def test_different_instants_give_different_keys(self, materializer, report_definition):
        one = materializer.materialize(report_definition, fired_at=FIRST)
        two = materializer.materialize(report_definition, fired_at=FIRST + timedelta(seconds=1))

        assert one.key != two.key
        assert one.to_values()["region"] == two.to_values()["region"] == "us-east"

    def test_non_timestamp_parts_identical_to_definition(self, report_definition):
        request = Materializer().materialize(report_definition, fired_at=FIRST)

        assert request.job_name == report_definition.name
        rest = {k: p for k, p in request.parameters.items() if k != EXECUTE_DATE_KEY}
        assert rest == dict(report_definition.parameters)

    def test_same_instant_twice_is_still_unique(self, materializer, report_definition):
        one = materializer.materialize(report_definition, fired_at=FIRST)
        two = materializer.materialize(report_definition, fired_at=FIRST)

        assert two.fired_at == FIRST + timedelta(microseconds=1)
        assert one.key != two.key

    def test_guard_is_per_job(self, materializer, report_definition):
        cleanup = job_definition_builder().set_name("cleanup").build()

        report = materializer.materialize(report_definition, fired_at=FIRST)
        other = materializer.materialize(cleanup, fired_at=FIRST)
        again = materializer.materialize(report_definition, fired_at=FIRST)

        assert report.fired_at == FIRST
        assert other.fired_at == FIRST
        assert again.fired_at == FIRST + timedelta(microseconds=1)

    def test_frozen_clock_is_strictly_monotonic(self, clock, report_definition):
        materializer = Materializer(clock=clock)
        stamps = [materializer.materialize(report_definition).fired_at for _ in range(5)]
        assert stamps == sorted(set(stamps))

    def test_clock_stepping_back_does_not_collide(self, clock, report_definition):
        materializer = Materializer(clock=clock)
        first = materializer.materialize(report_definition).fired_at
        clock.advance(-30)
        second = materializer.materialize(report_definition).fired_at
        assert second > first

    def test_uses_clock_when_no_fired_at(self, clock, materializer, report_definition):
        request = materializer.materialize(report_definition)
        assert request.fired_at == clock.now

    def test_naive_timestamp_becomes_aware(self, report_definition):
        request = Materializer().materialize(report_definition, fired_at=datetime(2026, 1, 1, 2, 0))
        assert request.fired_at.tzinfo is not None

    def test_definition_untouched(self, materializer, report_definition):
        materializer.materialize(report_definition, fired_at=FIRST)
        assert EXECUTE_DATE_KEY not in report_definition.parameters

    def test_user_execute_date_is_replaced(self, materializer):
        definition = (
            job_definition_builder()
            .set_name("job")
            .add_parameter(EXECUTE_DATE_KEY, "yesterday")
            .build()
        )
        request = materializer.materialize(definition, fired_at=FIRST)
        assert request.parameters[EXECUTE_DATE_KEY].value == FIRST

    def test_non_identifying_parameters_not_in_key(self, materializer):
        one = (
            job_definition_builder()
            .set_name("job")
            .add_parameter("note", text_param("a", identifying=False))
            .build()
        )
        two = (
            job_definition_builder()
            .set_name("job")
            .add_parameter("note", text_param("b", identifying=False))
            .build()
        )
        assert (
            Materializer().materialize(one, fired_at=FIRST).key
            == Materializer().materialize(two, fired_at=FIRST).key
        )

    def test_from_job_data(self, materializer, report_definition):
        data = JobData.from_dict(JobData.from_definition(report_definition).as_dict())
        request = materializer.materialize_job_data(data, fired_at=FIRST)
        assert request.job_name == "nightly-report"
        assert request.to_values()["region"] == "us-east"

    def test_concurrent_firings_never_collide(self, report_definition):
        materializer = Materializer(clock=lambda: FIRST)
        keys = []
        lock = threading.Lock()

        def fire():
            for _ in range(50):
                key = materializer.materialize(report_definition).key
                with lock:
                    keys.append(key)

        threads = [threading.Thread(target=fire) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(keys) == 400
        assert len(set(keys)) == 400


def test_module_level_materialize(report_definition):
    one = materialize(report_definition)
    two = materialize(report_definition)
    assert one.key != two.key
    assert two.fired_at > one.fired_at
