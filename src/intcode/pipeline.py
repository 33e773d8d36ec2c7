"""Intcode Machine Pipelines

Chains of independent CPUs where each stage's output is fed to the next
stage's input. Every stage owns its own copy of the program.
"""

import logging
from typing import Iterable, List, Sequence

from .cpu import CPU, RunStatus

logger = logging.getLogger(__name__)


class PipelineException(Exception):
    """Exception for a pipeline stage that cannot make progress."""
    pass


class Pipeline:
    """A sequence of CPUs, each primed with its own setting value."""

    def __init__(self, program: Sequence[int], settings: Iterable[int], trace: bool = False):
        """Create one stage per setting.

        Args:
            program: Program loaded into every stage (each gets a copy)
            settings: First input value for each stage, in stage order
            trace: Passed through to every stage CPU
        """
        self.stages: List[CPU] = [CPU(program, [setting], trace=trace) for setting in settings]
        if not self.stages:
            raise PipelineException("Pipeline needs at least one stage")

    def run_chain(self, signal: int = 0) -> int:
        """Pass a signal once through every stage, each run to completion.

        Returns:
            Last value output by the final stage
        """
        for index, stage in enumerate(self.stages):
            stage.add_input(signal)
            stage.run_to_halt()
            if not stage.output:
                raise PipelineException(f"Stage {index} halted without output")
            signal = stage.output[-1]
        return signal

    def run_feedback(self, signal: int = 0) -> int:
        """Loop the final stage's output back into the first until a stage halts.

        Returns:
            Last value output by the final stage
        """
        last_output = None
        rounds = 0
        while True:
            for index, stage in enumerate(self.stages):
                stage.add_input(signal)
                result = stage.run_to_next_output()
                if result.halted:
                    logger.debug("Stage %d halted after %d rounds", index, rounds)
                    if last_output is None:
                        raise PipelineException("Feedback loop halted before any output")
                    return last_output
                if result.status is not RunStatus.OUTPUT:
                    raise PipelineException(
                        f"Stage {index} stopped with {result.status.value} and no output")
                signal = result.value
                if index == len(self.stages) - 1:
                    last_output = signal
            rounds += 1


def run_chain(program: Sequence[int], settings: Iterable[int], signal: int = 0) -> int:
    """Convenience function for a one-pass pipeline."""
    return Pipeline(program, settings).run_chain(signal)


def run_feedback(program: Sequence[int], settings: Iterable[int], signal: int = 0) -> int:
    """Convenience function for a feedback-loop pipeline."""
    return Pipeline(program, settings).run_feedback(signal)
