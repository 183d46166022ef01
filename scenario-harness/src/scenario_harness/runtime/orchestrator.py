"""Scenario registration and the run loop.

An orchestrator collects named scenarios, then runs them one after another,
each against a fresh `Network` and `Tape`. Everything it observes is written
to a single TAP stream and summarized as `TestStats`.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Set, TextIO

from scenario_harness.config.logger import LoggerConfig, apply_logger_config, remove_logger_config
from scenario_harness.reporting.reporters import Reporter, basic_reporter
from scenario_harness.runtime.network import Network
from scenario_harness.runtime.stats import ScenarioFailure, TestStats
from scenario_harness.runtime.tape import TapWriter, Tape

logger = logging.getLogger(__name__)

TIMEOUT_ENV = "SCENARIO_HARNESS_TIMEOUT_S"

ScenarioFn = Callable[[Network, Tape], Optional[Awaitable[None]]]

MODE_NORMAL = "normal"
MODE_ONLY = "only"
MODE_SKIP = "skip"


@dataclass(frozen=True)
class Scenario:
    description: str
    fn: ScenarioFn
    mode: str = MODE_NORMAL


def timeout_from_env() -> Optional[float]:
    raw = os.environ.get(TIMEOUT_ENV, "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"{TIMEOUT_ENV} must be a number of seconds, got {raw!r}") from e
    return value if value > 0 else None


class Orchestrator:
    def __init__(
        self,
        *,
        reporter: Optional[Reporter] = None,
        stream: Optional[TextIO] = None,
        timeout_s: Optional[float] = None,
        logger_config: Optional[LoggerConfig] = None,
    ) -> None:
        self.reporter: Reporter = reporter or basic_reporter(logger.info)
        self.stream = stream
        self.timeout_s = timeout_s if timeout_s is not None else timeout_from_env()
        self.logger_config = logger_config
        self._scenarios: List[Scenario] = []

    @property
    def scenarios(self) -> List[Scenario]:
        return list(self._scenarios)

    def _register(self, description: str, fn: ScenarioFn, mode: str) -> None:
        if not callable(fn):
            raise TypeError(f"scenario {description!r} must be callable")
        self._scenarios.append(Scenario(description=str(description), fn=fn, mode=mode))

    def register_scenario(self, description: str, fn: ScenarioFn) -> None:
        self._register(description, fn, MODE_NORMAL)

    def register_scenario_only(self, description: str, fn: ScenarioFn) -> None:
        self._register(description, fn, MODE_ONLY)

    def register_scenario_skip(self, description: str, fn: ScenarioFn) -> None:
        self._register(description, fn, MODE_SKIP)

    def _is_selected(self, scenario: Scenario, *, only_mode: bool) -> bool:
        if scenario.mode == MODE_SKIP:
            return False
        if only_mode:
            return scenario.mode == MODE_ONLY
        return True

    def run(self) -> TestStats:
        return asyncio.run(self.run_async())

    async def run_async(self) -> TestStats:
        flt = apply_logger_config(self.logger_config) if self.logger_config else None
        try:
            return await self._run_all()
        finally:
            if flt is not None:
                remove_logger_config(flt)

    async def _run_all(self) -> TestStats:
        writer = TapWriter(self.stream or sys.stdout)
        writer.start()
        stats = TestStats()

        only_mode = any(s.mode == MODE_ONLY for s in self._scenarios)
        selected = [s for s in self._scenarios if self._is_selected(s, only_mode=only_mode)]
        self.reporter.before(len(selected))

        for scenario in self._scenarios:
            if not self._is_selected(scenario, only_mode=only_mode):
                writer.comment(f"SKIP {scenario.description}")
                stats.skipped.append(scenario.description)
                continue

            self.reporter.each(scenario.description)
            writer.comment(scenario.description)
            failures = await self._run_one(scenario, writer)
            if failures:
                stats.errors.append(
                    ScenarioFailure(description=scenario.description, messages=tuple(failures))
                )
            else:
                stats.successes.append(scenario.description)

        writer.finish()
        self.reporter.after(stats)
        return stats

    async def _run_one(self, scenario: Scenario, writer: TapWriter) -> List[str]:
        network = Network(scenario_name=scenario.description)
        tape = Tape(writer, scenario.description)
        tracker = _TaskTracker(asyncio.get_running_loop())
        tracker.install()
        try:
            try:
                await self._drive_with_timeout(scenario, network, tape, tracker)
            except Exception as e:
                logger.debug("scenario %r raised", scenario.description, exc_info=True)
                tape.error(e)
            finally:
                tracker.uninstall()
        finally:
            await tracker.reap(tape)
            if not tape.ended:
                tape.end()
            await network.shutdown()
        return list(tape.failures)

    async def _drive_with_timeout(
        self, scenario: Scenario, network: Network, tape: Tape, tracker: "_TaskTracker"
    ) -> None:
        drive = asyncio.ensure_future(self._drive(scenario, network, tape, tracker))
        tracker.internal.add(drive)
        done, _ = await asyncio.wait({drive}, timeout=self.timeout_s or None)
        if drive in done:
            drive.result()
            return
        drive.cancel()
        await asyncio.gather(drive, return_exceptions=True)
        tape.fail(f"scenario timed out after {self.timeout_s}s")

    async def _drive(
        self, scenario: Scenario, network: Network, tape: Tape, tracker: "_TaskTracker"
    ) -> None:
        result = scenario.fn(network, tape)
        if inspect.isawaitable(result):
            await result
            if not tape.ended:
                tape.end()
            return
        await self._await_end(tape, tracker)

    async def _await_end(self, tape: Tape, tracker: "_TaskTracker") -> None:
        """Wait for a callback-style scenario to call `t.end()`.

        If nothing the scenario spawned is left to run and the tape is still
        open, the scenario can never end and is failed.
        """
        waiter = asyncio.ensure_future(tape.wait_ended())
        tracker.internal.add(waiter)
        try:
            while not tape.ended:
                others = tracker.pending()
                if not others:
                    tape.fail(f"test exited without ending: {tape.description}")
                    return
                done, _ = await asyncio.wait(
                    {waiter, *others}, return_when=asyncio.FIRST_COMPLETED
                )
                for task in done:
                    if task is not waiter:
                        tracker.report(task, tape)
        finally:
            waiter.cancel()


class _TaskTracker:
    """Collects the tasks created on the loop while one scenario runs.

    Installed as the loop's task factory for the duration of the scenario.
    Tasks the orchestrator creates for itself go in `internal` and are never
    reported as scenario failures.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self.loop = loop
        self.tasks: Set[asyncio.Future] = set()
        self.internal: Set[asyncio.Future] = set()
        self._reported: Set[asyncio.Future] = set()
        self._previous: Any = None

    def _factory(self, loop: asyncio.AbstractEventLoop, coro: Any, **kwargs: Any) -> asyncio.Future:
        if self._previous is not None:
            task = self._previous(loop, coro, **kwargs)
        else:
            task = asyncio.Task(coro, loop=loop, **kwargs)
        self.tasks.add(task)
        return task

    def install(self) -> None:
        self._previous = self.loop.get_task_factory()
        self.loop.set_task_factory(self._factory)

    def uninstall(self) -> None:
        self.loop.set_task_factory(self._previous)

    def pending(self) -> Set[asyncio.Future]:
        return {t for t in self.tasks if t not in self.internal and not t.done()}

    def report(self, task: asyncio.Future, tape: Tape) -> None:
        if task in self._reported or task in self.internal or task.cancelled():
            return
        self._reported.add(task)
        exc = task.exception()
        if exc is not None:
            tape.error(exc)

    async def reap(self, tape: Tape) -> None:
        """Cancel whatever the scenario left running and record what failed."""
        leftover = [t for t in self.tasks if not t.done()]
        for task in leftover:
            task.cancel()
        if leftover:
            logger.debug("cancelling %d task(s) left by %r", len(leftover), tape.description)
            await asyncio.gather(*leftover, return_exceptions=True)
        for task in list(self.tasks):
            if task.done():
                self.report(task, tape)
