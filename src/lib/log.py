"""
Verbosity-gated logging on top of Loguru

LOG() reads the verbosity of the ProgramState connected to the current
context, so compiler and renderer code can log without carrying state
around. Nothing is emitted until a state is connected, which keeps the
library quiet when used from tests or other programs.

Message levels map onto Loguru severities:
    1 → INFO     conversion progress, plugin fallbacks
    2 → DEBUG    per-file and per-pass details (-v)
    3 → TRACE    per-line classification (-vv)

Usage:
    from hikidown.lib.log import LOG, state_connectToLogger

    state_connectToLogger(state)
    LOG("Escaped 12 plugin blocks", level=2)
"""

import sys
from contextvars import ContextVar
from typing import Any, Dict, Optional

from loguru import logger

_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

SEVERITY: Dict[int, str] = {1: "INFO", 2: "DEBUG", 3: "TRACE"}

logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <5}</level> │ "
    "<cyan>{module: <10}</cyan>:<cyan>{function: <20}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()
logger.add(sys.stderr, format=logger_format, level="TRACE")


def state_connectToLogger(state: Any) -> None:
    """
    Make a ProgramState's verbosity govern LOG() in this context.

    Args:
        state: Object with a verbosity attribute (normally ProgramState)
    """
    _program_state.set(state)


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Emit message when the connected verbosity is at least level.

    Args:
        message: Text to log
        level: Verbosity needed to see the message (1, 2 or 3)
        **kwargs: Passed on to Loguru for message formatting
    """
    state = _program_state.get()
    if state is None or getattr(state, 'verbosity', 0) < level:
        return

    severity = SEVERITY.get(level, "TRACE")
    logger.opt(depth=1).log(severity, message, **kwargs)
