# src/financial_projection/core/diagnostics.py
"""
Diagnostics Sink

Every adjustment the engine makes on its own authority (asset anchor,
equity backsolve, cash plug, revolver draws, minimum-cash top-ups) is
reported as a DiagnosticEvent. Callers pass a sink to subscribe; the
default sink forwards to the package logger.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional


logger = logging.getLogger("financial_projection")


@dataclass(frozen=True)
class DiagnosticEvent:
    """A single engine diagnostic."""
    code: str
    message: str
    period: Optional[int] = None
    amount: Optional[float] = None
    level: int = logging.INFO


class DiagnosticsSink:
    """
    Receiver for engine diagnostics.

    Subclasses override emit(). The helpers build the event and hand it
    over so call sites stay one line long.
    """

    def emit(self, event: DiagnosticEvent) -> None:
        raise NotImplementedError

    def info(
        self,
        code: str,
        message: str,
        period: Optional[int] = None,
        amount: Optional[float] = None
    ) -> None:
        self.emit(DiagnosticEvent(code, message, period, amount, logging.INFO))

    def warning(
        self,
        code: str,
        message: str,
        period: Optional[int] = None,
        amount: Optional[float] = None
    ) -> None:
        self.emit(DiagnosticEvent(code, message, period, amount, logging.WARNING))

    def error(
        self,
        code: str,
        message: str,
        period: Optional[int] = None,
        amount: Optional[float] = None
    ) -> None:
        self.emit(DiagnosticEvent(code, message, period, amount, logging.ERROR))


class LoggingDiagnostics(DiagnosticsSink):
    """Forward events to a standard library logger."""

    def __init__(self, target: Optional[logging.Logger] = None):
        self.logger = target or logger

    def emit(self, event: DiagnosticEvent) -> None:
        prefix = f"[{event.code}]"
        if event.period is not None:
            prefix += f" period {event.period}:"
        self.logger.log(event.level, "%s %s", prefix, event.message)


class RecordingDiagnostics(DiagnosticsSink):
    """
    Keep events in memory.

    Args:
        forward_to: Optional sink that also receives every event
    """

    def __init__(self, forward_to: Optional[DiagnosticsSink] = None):
        self.events: List[DiagnosticEvent] = []
        self.forward_to = forward_to

    def emit(self, event: DiagnosticEvent) -> None:
        self.events.append(event)
        if self.forward_to is not None:
            self.forward_to.emit(event)

    def by_code(self, code: str) -> List[DiagnosticEvent]:
        return [event for event in self.events if event.code == code]

    def codes(self) -> List[str]:
        return [event.code for event in self.events]
