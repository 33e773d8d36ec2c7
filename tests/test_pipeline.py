import pytest

from intcode.pipeline import Pipeline, PipelineException, run_chain, run_feedback
from intcode.program_loader import parse_program

CHAIN_PROGRAM = parse_program("3,15,3,16,1002,16,10,16,1,16,15,15,4,15,99,0,0")
CHAIN_PROGRAM_2 = parse_program(
    "3,23,3,24,1002,24,10,24,1002,23,-1,23,101,5,23,23,1,24,23,23,4,23,99,0,0"
)
FEEDBACK_PROGRAM = parse_program(
    "3,26,1001,26,-4,26,3,27,1002,27,2,27,1,27,26,27,4,27,1001,28,-1,28,1005,28,6,99,0,0,5"
)
FEEDBACK_PROGRAM_2 = parse_program(
    "3,52,1001,52,-5,52,3,53,1,52,56,54,1007,54,5,55,1005,55,26,1001,54,"
    "-5,54,1105,1,12,1,53,54,53,1008,54,0,55,1001,55,1,55,2,53,55,53,4,"
    "53,1001,56,-1,56,1005,56,6,99,0,0,0,0,10"
)


def test_chain_passes_signal_through_every_stage():
    assert run_chain(CHAIN_PROGRAM, [4, 3, 2, 1, 0]) == 43210


def test_chain_with_other_settings():
    assert run_chain(CHAIN_PROGRAM_2, [0, 1, 2, 3, 4]) == 54321


def test_feedback_loop():
    assert run_feedback(FEEDBACK_PROGRAM, [9, 8, 7, 6, 5]) == 139629729


def test_feedback_loop_with_comparisons():
    assert run_feedback(FEEDBACK_PROGRAM_2, [9, 7, 8, 5, 6]) == 18216


def test_stages_do_not_share_memory():
    pipeline = Pipeline(CHAIN_PROGRAM, [4, 3])
    pipeline.run_chain()

    first, second = pipeline.stages
    assert first.memory is not second.memory
    assert first.memory.read(15) == 4
    assert second.memory.read(15) == 43


def test_empty_pipeline_rejected():
    with pytest.raises(PipelineException):
        Pipeline(CHAIN_PROGRAM, [])


def test_stage_without_output_rejected():
    with pytest.raises(PipelineException):
        run_chain(parse_program("3,0,3,0,99"), [1])
