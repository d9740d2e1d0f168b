import json
from concurrent.futures import ThreadPoolExecutor

from pixel_collector.models.event import TrackingEvent
from pixel_collector.pipeline.base import PipelineStep
from pixel_collector.pipeline.chain import ChainExecutor, build_default_chain
from pixel_collector.pipeline.steps.decoder import QueryStringDecoder
from pixel_collector.pipeline.steps.publisher import EventPublisher


class RecordingStep(PipelineStep):
    def __init__(self, result=True):
        self.result = result
        self.seen = []

    def apply(self, event):
        self.seen.append((event.raw_query, dict(event.fields), event.ok))
        return self.result


class ExplodingStep(PipelineStep):
    def apply(self, event):
        raise RuntimeError("boom")


def _chain(fake_sink, *extra):
    return ChainExecutor([QueryStringDecoder(), *extra, EventPublisher(lambda: fake_sink)])


def test_default_chain_order():
    chain = build_default_chain()

    assert [step.name for step in chain.steps] == ["QueryStringDecoder", "EventPublisher"]


def test_well_formed_query_is_published_once(fake_sink):
    event = TrackingEvent(raw_query="a=1&b=2&a=3")

    outcome = _chain(fake_sink).run(event)

    assert outcome.success is True
    assert outcome.failed_steps == []
    assert len(fake_sink.published) == 1
    assert json.loads(fake_sink.published[0][0]) == {"a": "3", "b": "2"}


def test_empty_query_publishes_nothing_but_runs_every_step(fake_sink):
    audit = RecordingStep()
    event = TrackingEvent(raw_query="")

    outcome = _chain(fake_sink, audit).run(event)

    assert outcome.success is False
    assert fake_sink.published == []
    assert audit.seen == [("", {}, False)]


def test_raising_step_does_not_stop_the_chain(fake_sink, caplog):
    after = RecordingStep()
    event = TrackingEvent(raw_query="a=1")

    with caplog.at_level("ERROR", logger="pixel_collector.pipeline.chain"):
        outcome = _chain(fake_sink, ExplodingStep(), after).run(event)

    assert outcome.failed_steps == ["ExplodingStep"]
    assert outcome.success is True
    assert after.seen == [("a=1", {"a": "1"}, True)]
    assert len(fake_sink.published) == 1
    assert any("ExplodingStep" in message for message in caplog.messages)


def test_outcome_reflects_last_step():
    event = TrackingEvent(raw_query="a=1")

    assert ChainExecutor([RecordingStep(False), RecordingStep(True)]).run(event).success is True
    assert ChainExecutor([RecordingStep(True), RecordingStep(False)]).run(event).success is False
    assert ChainExecutor([RecordingStep(True), ExplodingStep()]).run(event).success is False
    assert ChainExecutor([]).run(event).success is False


def test_insert_and_append_leave_original_chain_untouched():
    first, second, third = RecordingStep(), RecordingStep(), RecordingStep()
    chain = ChainExecutor([first, third])

    extended = chain.insert(1, second).append(ExplodingStep())

    assert chain.steps == (first, third)
    assert extended.steps[:3] == (first, second, third)
    assert extended.steps[3].name == "ExplodingStep"


def test_concurrent_runs_do_not_mix_fields(fake_sink):
    chain = _chain(fake_sink)

    def _run(i):
        event = TrackingEvent(raw_query=f"id={i}&tag=t{i}")
        chain.run(event)
        return event

    with ThreadPoolExecutor(max_workers=8) as pool:
        events = list(pool.map(_run, range(50)))

    for i, event in enumerate(events):
        assert event.fields == {"id": str(i), "tag": f"t{i}"}
    payloads = sorted(json.loads(payload)["id"] for payload, _ in fake_sink.published)
    assert payloads == sorted(str(i) for i in range(50))
    for payload, _ in fake_sink.published:
        decoded = json.loads(payload)
        assert decoded["tag"] == f"t{decoded['id']}"
