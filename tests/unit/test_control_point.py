"""Unit tests for control-point interception on the engine info stream."""

from __future__ import annotations

import threading

import pytest

from randindex.config import RandomizationConfig
from randindex.control_point import (
    ControlPoint,
    ControlPointInterceptor,
    YieldingControlPoint,
    mock_index_writer,
)
from randindex.interfaces import InfoStream, NullInfoStream
from randindex.policy import RandomPolicy
from tests._mocks import (
    MemoryDirectory,
    MemoryEngine,
    MemoryWriterConfig,
    RecordingInfoStream,
    ScriptedPolicy,
)
from tests.fixtures.sample_documents import make_doc


class _OrderedStream(InfoStream):
    """Delegate that writes into a shared event list to check ordering."""

    def __init__(self, events: list[tuple[str, ...]], enabled: set[str]) -> None:
        self.events = events
        self.enabled = enabled
        self.closed = False

    def message(self, component: str, message: str) -> None:
        self.events.append(("delegate", component, message))

    def is_enabled(self, component: str) -> bool:
        return component in self.enabled

    def close(self) -> None:
        self.closed = True


class _CountingControlPoint(ControlPoint):
    def __init__(self) -> None:
        self.messages: list[str] = []

    def apply(self, message: str) -> None:
        self.messages.append(message)


@pytest.mark.unit
class TestControlPointInterceptor:
    """Dispatch, forwarding and enablement rules."""

    def test_defaults_to_null_delegate(self) -> None:
        interceptor = ControlPointInterceptor(None, lambda _m: None)

        assert isinstance(interceptor.delegate, NullInfoStream)
        assert interceptor.is_enabled("TP")
        assert not interceptor.is_enabled("IW")

    def test_callback_runs_before_forwarding(self) -> None:
        events: list[tuple[str, ...]] = []
        delegate = _OrderedStream(events, enabled={"TP"})
        interceptor = ControlPointInterceptor(
            delegate, lambda m: events.append(("control_point", m))
        )

        interceptor.message("TP", "startCommit")

        assert events == [
            ("control_point", "startCommit"),
            ("delegate", "TP", "startCommit"),
        ]

    def test_control_point_channel_not_forwarded_when_delegate_disabled(self) -> None:
        events: list[tuple[str, ...]] = []
        delegate = _OrderedStream(events, enabled=set())
        point = _CountingControlPoint()
        interceptor = ControlPointInterceptor(delegate, point)

        interceptor.message("TP", "merge start")

        assert point.messages == ["merge start"]
        assert events == []

    def test_other_channels_only_forwarded(self) -> None:
        events: list[tuple[str, ...]] = []
        delegate = _OrderedStream(events, enabled={"IW"})
        point = _CountingControlPoint()
        interceptor = ControlPointInterceptor(delegate, point)

        interceptor.message("IW", "flush")
        interceptor.message("DW", "dropped")

        assert point.messages == []
        assert events == [("delegate", "IW", "flush")]
        assert interceptor.is_enabled("IW")
        assert not interceptor.is_enabled("DW")

    def test_custom_channel(self) -> None:
        point = _CountingControlPoint()
        interceptor = ControlPointInterceptor(None, point, channel="HOOK")

        interceptor.message("TP", "ignored")
        interceptor.message("HOOK", "seen")

        assert point.messages == ["seen"]
        assert interceptor.is_enabled("HOOK")
        assert not interceptor.is_enabled("TP")

    def test_subscribe_adds_named_subscribers_in_order(self) -> None:
        calls: list[str] = []
        interceptor = ControlPointInterceptor(None, lambda m: calls.append(f"tp:{m}"))
        interceptor.subscribe("MERGE", lambda m: calls.append(f"first:{m}"))
        interceptor.subscribe("MERGE", lambda m: calls.append(f"second:{m}"))
        interceptor.subscribe("TP", lambda m: calls.append(f"extra:{m}"))

        interceptor.message("MERGE", "a")
        interceptor.message("TP", "b")

        assert calls == ["first:a", "second:a", "tp:b", "extra:b"]
        assert interceptor.channels == frozenset({"TP", "MERGE"})
        assert interceptor.is_enabled("MERGE")

    def test_rejects_non_callable(self) -> None:
        with pytest.raises(TypeError, match="must be callable"):
            ControlPointInterceptor(None, 42)  # type: ignore[arg-type]

    def test_close_closes_delegate(self) -> None:
        delegate = _OrderedStream([], enabled=set())
        ControlPointInterceptor(delegate, lambda _m: None).close()
        assert delegate.closed

    def test_callback_runs_on_emitting_thread(self) -> None:
        seen: list[str] = []
        interceptor = ControlPointInterceptor(
            None, lambda _m: seen.append(threading.current_thread().name)
        )

        worker = threading.Thread(
            target=interceptor.message, args=("TP", "x"), name="EngineWorker-1"
        )
        worker.start()
        worker.join()

        assert seen == ["EngineWorker-1"]


@pytest.mark.unit
class TestYieldingControlPoint:
    """Randomized thread yield."""

    def test_yields_when_policy_fires(self) -> None:
        sleeps: list[float] = []
        policy = ScriptedPolicy([True, False, True])
        point = YieldingControlPoint(policy, sleep=sleeps.append)

        for _ in range(3):
            point.apply("msg")

        assert sleeps == [0, 0]
        assert policy.requests == [("one_in", (4,))] * 3

    def test_custom_frequency(self) -> None:
        policy = ScriptedPolicy([False])
        YieldingControlPoint(policy, one_in=9, sleep=lambda _s: None).apply("m")
        assert policy.requests == [("one_in", (9,))]

    def test_real_policy_yields_sometimes(self) -> None:
        sleeps: list[float] = []
        point = YieldingControlPoint(RandomPolicy.from_seed(3), sleep=sleeps.append)

        for _ in range(400):
            point.apply("m")

        assert 0 < len(sleeps) < 400


@pytest.mark.unit
class TestMockIndexWriter:
    """Writer construction with an interceptor installed."""

    def test_installs_interceptor_around_existing_stream(self) -> None:
        engine = MemoryEngine()
        stream = RecordingInfoStream(enabled={"TP"})
        config = MemoryWriterConfig(info_stream=stream)
        point = _CountingControlPoint()

        writer = mock_index_writer(engine, MemoryDirectory(), config, point)
        writer.add_document(make_doc(1))

        assert isinstance(config.info_stream, ControlPointInterceptor)
        assert config.info_stream.delegate is stream
        assert engine.writers == [writer]
        assert point.messages == ["DocumentsWriterPerThread addDocument start"]
        assert [m[:2] for m in stream.messages] == [
            ("TP", "DocumentsWriterPerThread addDocument start")
        ]

    def test_policy_installs_yielding_control_point(self) -> None:
        config = MemoryWriterConfig()

        mock_index_writer(
            MemoryEngine(), MemoryDirectory(), config, RandomPolicy.from_seed(1)
        )

        interceptor = config.info_stream
        assert isinstance(interceptor, ControlPointInterceptor)
        assert isinstance(interceptor.delegate, NullInfoStream)
        callback = interceptor._subscribers["TP"][0]
        assert isinstance(callback.__self__, YieldingControlPoint)

    def test_merge_thread_messages_reach_control_point(self) -> None:
        threads: list[str] = []
        config = MemoryWriterConfig(max_buffered_docs=1)
        writer = mock_index_writer(
            MemoryEngine(),
            MemoryDirectory(),
            config,
            lambda _m: threads.append(threading.current_thread().name),
        )
        for i in range(3):
            writer.add_document(make_doc(i))
        threads.clear()

        writer.force_merge(1)

        assert "MemoryMergeThread" in threads
        assert writer.segment_count == 1

    def test_randomization_sets_yield_rate_and_channel(self) -> None:
        config = MemoryWriterConfig()

        mock_index_writer(
            MemoryEngine(),
            MemoryDirectory(),
            config,
            RandomPolicy.from_seed(1),
            randomization=RandomizationConfig(
                control_point_yield_one_in=1, control_point_channel="HOOK"
            ),
        )

        interceptor = config.info_stream
        assert interceptor.channel == "HOOK"
        assert interceptor.channels == frozenset({"HOOK"})
        point = interceptor._subscribers["HOOK"][0].__self__
        assert isinstance(point, YieldingControlPoint)
        assert point._one_in == 1
