from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Protocol, List, Optional

from utils.logging_setup import init_logging


logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    source: Optional[str] = None
    sites: list = field(default_factory=list)
    people: list = field(default_factory=list)
    posts: list = field(default_factory=list)
    meta: dict = field(default_factory=dict)
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])


class Step(Protocol):
    def run(self, ctx: RunContext) -> RunContext:
        ...


class Pipeline:
    def __init__(self, steps: List[Step]):
        self.steps = steps

    def run(self, ctx: RunContext) -> RunContext:
        # Make logging idempotent for any direct runner use
        init_logging()
        for step in self.steps:
            name = type(step).__name__
            started = time.monotonic()
            try:
                ctx = step.run(ctx)
            except Exception as e:
                logger.error(
                    "Step %s failed", name,
                    extra={"op": f"pipeline.{name}", "status": "failed", "error": str(e), "run_id": ctx.run_id},
                )
                raise
            logger.debug(
                "Step %s done", name,
                extra={"op": f"pipeline.{name}", "status": "ok", "run_id": ctx.run_id,
                       "duration_ms": int((time.monotonic() - started) * 1000)},
            )
        return ctx
