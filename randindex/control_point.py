"""Instrumentation hooks on the engine's diagnostic channel.

Engines emit ``(component, message)`` events through their ``InfoStream`` from
whichever thread does the work, including background flush and merge threads.
``ControlPointInterceptor`` sits in front of the configured sink and runs
subscriber callbacks inline for the channels they registered on. The reserved
``"TP"`` channel marks points where varying thread interleavings pays off, and
the default subscriber there is a randomized ``time.sleep(0)`` yield.

Callbacks run on engine threads. They must not take locks or block beyond a
bounded sleep, or the engine can deadlock.
"""

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from loguru import logger

from randindex.config import RandomizationConfig, settings
from randindex.interfaces import (
    IndexEngine,
    IndexWriterInterface,
    InfoStream,
    NullInfoStream,
    WriterConfig,
)
from randindex.policy import RandomPolicy

__all__ = [
    "ControlPoint",
    "ControlPointCallback",
    "ControlPointInterceptor",
    "YieldingControlPoint",
    "mock_index_writer",
]


class ControlPoint(ABC):
    """Callback executed for each message on a control-point channel."""

    @abstractmethod
    def apply(self, message: str) -> None:
        """React to one control-point message.

        Args:
            message: Message text; informational only
        """


ControlPointCallback = ControlPoint | Callable[[str], None]


def _as_callable(callback: ControlPointCallback) -> Callable[[str], None]:
    if isinstance(callback, ControlPoint):
        return callback.apply
    if callable(callback):
        return callback
    raise TypeError(f"Control point must be callable, got {type(callback).__name__}")


class YieldingControlPoint(ControlPoint):
    """Randomly yields the calling thread to mix up thread scheduling.

    Args:
        policy: Policy owned by this control point. Engine threads call
            :meth:`apply` concurrently; numpy generators serialize access
            internally.
        one_in: Yield with probability ``1/one_in``
        sleep: Sleep function, replaceable in tests
    """

    def __init__(
        self,
        policy: RandomPolicy,
        one_in: int | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Store the policy and yield frequency."""
        self._policy = policy
        self._one_in = (
            one_in
            if one_in is not None
            else settings.randomization.control_point_yield_one_in
        )
        self._sleep = sleep

    def apply(self, message: str) -> None:
        del message
        if self._policy.one_in(self._one_in):
            self._sleep(0)


class ControlPointInterceptor(InfoStream):
    """InfoStream wrapper that dispatches control-point channels to callbacks.

    Args:
        delegate: Sink to forward messages to; ``NullInfoStream`` when None
        control_point: Callback for the reserved control-point channel
        channel: Reserved channel name (defaults to ``"TP"``)
    """

    def __init__(
        self,
        delegate: InfoStream | None,
        control_point: ControlPointCallback,
        channel: str | None = None,
    ) -> None:
        """Wrap ``delegate`` and register ``control_point`` on ``channel``."""
        self.delegate: InfoStream = delegate if delegate is not None else NullInfoStream()
        self.channel = channel or settings.randomization.control_point_channel
        # channel -> callbacks; replaced wholesale on subscribe so readers never lock
        self._subscribers: dict[str, tuple[Callable[[str], None], ...]] = {
            self.channel: (_as_callable(control_point),)
        }
        self._subscribe_lock = threading.Lock()

    def subscribe(self, channel: str, callback: ControlPointCallback) -> None:
        """Register an additional callback for ``channel``.

        Args:
            channel: Component name to listen on
            callback: Invoked with the message text, after earlier subscribers
        """
        fn = _as_callable(callback)
        with self._subscribe_lock:
            updated = dict(self._subscribers)
            updated[channel] = (*updated.get(channel, ()), fn)
            self._subscribers = updated

    @property
    def channels(self) -> frozenset[str]:
        """Channels with at least one subscriber."""
        return frozenset(self._subscribers)

    def message(self, component: str, message: str) -> None:
        for callback in self._subscribers.get(component, ()):
            callback(message)
        if self.delegate.is_enabled(component):
            self.delegate.message(component, message)

    def is_enabled(self, component: str) -> bool:
        return component in self._subscribers or self.delegate.is_enabled(component)

    def close(self) -> None:
        self.delegate.close()


def mock_index_writer(
    engine: IndexEngine,
    directory: Any,
    config: WriterConfig,
    control_point: ControlPointCallback | RandomPolicy,
    randomization: RandomizationConfig | None = None,
) -> IndexWriterInterface:
    """Open an engine writer with a control-point interceptor installed.

    Passing a :class:`RandomPolicy` installs a :class:`YieldingControlPoint`
    driven by a child of that policy.

    Args:
        engine: Engine used to open the writer
        directory: Backing storage location
        config: Writer configuration; its ``info_stream`` is replaced
        control_point: Callback for the control-point channel, or a policy
        randomization: Yield rate and channel; ``settings.randomization``
            when None

    Returns:
        The opened writer
    """
    cfg = randomization or settings.randomization
    if isinstance(control_point, RandomPolicy):
        control_point = YieldingControlPoint(
            control_point.spawn(), one_in=cfg.control_point_yield_one_in
        )
    interceptor = ControlPointInterceptor(
        config.info_stream, control_point, channel=cfg.control_point_channel
    )
    config.info_stream = interceptor
    logger.debug("Installed control point interceptor on channel {}", interceptor.channel)
    return engine.open_writer(directory, config)
