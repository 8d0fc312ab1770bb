"""Run one operation per package, generation by generation."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, TypeVar

from monopack.graph import DirectedGraph
from monopack.progress import ProgressBroadcaster

logger = logging.getLogger(__name__)

Options = TypeVar("Options")
Result = TypeVar("Result")
Artifact = TypeVar("Artifact")


@dataclass(frozen=True)
class PartialFailure(Generic[Result]):
    """Results of everything that succeeded plus the errors of the failing generation."""
    succeeded: list[Result] = field(default_factory=list)
    failures: list[BaseException] = field(default_factory=list)


class Scheduler:
    """Topological build scheduling with settle-all generations.

    Generations are computed sinks first, so a package only runs once every
    package it embeds has been built.  A failing generation stops the run;
    later generations are never attempted.
    """

    def __init__(self, progress: ProgressBroadcaster | None = None):
        self.progress = progress or ProgressBroadcaster()

    async def _run_one(
        self,
        package_name: str,
        artifacts: list[Artifact],
        execute: Callable[[Options], Awaitable[Result]],
        create_options: Callable[[str, list[Artifact]], Options],
    ) -> Result:
        options = create_options(package_name, list(artifacts))
        return await execute(options)

    async def run_for_each_scheduled_package(
        self,
        package_graph: DirectedGraph,
        execute: Callable[[Options], Awaitable[Result]],
        create_options: Callable[[str, list[Artifact]], Options],
        select_next: Callable[[Result], Artifact],
    ) -> list[Result] | PartialFailure[Result]:
        for package_name in package_graph.node_ids:
            self.progress.emit("scheduled", package_name=package_name)

        artifacts: list[Artifact] = []
        succeeded: list[Result] = []

        for generation in package_graph.get_topological_generations():
            logger.debug("Starting generation: %s", ", ".join(generation))
            outcomes = await asyncio.gather(
                *(self._run_one(name, artifacts, execute, create_options) for name in generation),
                return_exceptions=True,
            )

            generation_results: list[Result] = []
            failures: list[BaseException] = []
            for package_name, outcome in zip(generation, outcomes):
                if isinstance(outcome, BaseException):
                    logger.debug("Package %s failed: %s", package_name, outcome)
                    self.progress.emit("error", package_name=package_name, error=outcome)
                    failures.append(outcome)
                else:
                    generation_results.append(outcome)

            succeeded.extend(generation_results)
            if failures:
                return PartialFailure(succeeded=succeeded, failures=failures)

            artifacts.extend(select_next(result) for result in generation_results)

        return succeeded
