"""Infrastructure: forwarding operator signals to the interactive child.

Only the main thread may install handlers, so :func:`forward_signals`
is used by the console-script entry point and never by library code.
"""

from __future__ import annotations

import logging
import signal
from collections.abc import Iterator
from contextlib import contextmanager
from types import FrameType
from typing import Any

from vapor_toolbox.infra.process_runner import ProcessRegistry

logger = logging.getLogger(__name__)

FORWARDED_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


def _make_handler(registry: ProcessRegistry, previous: Any) -> Any:
    def _handler(signum: int, frame: FrameType | None) -> None:
        if registry.send_signal(signum):
            return
        if callable(previous):
            previous(signum, frame)
        elif signum == signal.SIGINT and previous != signal.SIG_IGN:
            raise KeyboardInterrupt
        elif previous == signal.SIG_DFL:
            signal.signal(signum, signal.SIG_DFL)
            signal.raise_signal(signum)

    return _handler


@contextmanager
def forward_signals(
    registry: ProcessRegistry,
    signals: tuple[signal.Signals, ...] = FORWARDED_SIGNALS,
) -> Iterator[None]:
    """Route *signals* to ``registry.current`` while the block runs.

    With no child registered the previously installed handler runs, so
    Ctrl-C outside a child still raises :class:`KeyboardInterrupt`.
    Original handlers are restored on exit.
    """
    previous: dict[signal.Signals, Any] = {}
    for signum in signals:
        previous[signum] = signal.getsignal(signum)
        signal.signal(signum, _make_handler(registry, previous[signum]))
    logger.debug("forwarding %s to interactive children", ", ".join(s.name for s in signals))
    try:
        yield
    finally:
        for signum, handler in previous.items():
            if handler is not None:
                signal.signal(signum, handler)
