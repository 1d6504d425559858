from linkding_companion.config import PipelineConfig
from linkding_companion.pipeline.graph import FIRST_WAVE, TaskName, follow_ups_for
from linkding_companion.pipeline.results import TaskOutcome

DEFAULT = PipelineConfig()


def test_first_wave_is_autotag_and_readability():
    assert FIRST_WAVE == (TaskName.AUTOTAG, TaskName.READABILITY)


def test_readability_leads_to_summarize_only_when_completed():
    assert follow_ups_for(TaskName.READABILITY, TaskOutcome.COMPLETED, DEFAULT) == [
        TaskName.SUMMARIZE,
        TaskName.SEARCH,
    ]
    assert follow_ups_for(TaskName.READABILITY, TaskOutcome.NO_OP, DEFAULT) == [TaskName.SEARCH]


def test_readability_leads_to_search_whatever_the_outcome():
    for outcome in TaskOutcome:
        assert TaskName.SEARCH in follow_ups_for(TaskName.READABILITY, outcome, DEFAULT)
    assert follow_ups_for(TaskName.READABILITY, TaskOutcome.SKIPPED, DEFAULT) == [TaskName.SEARCH]


def test_autotag_leads_to_search_unless_skipped():
    assert follow_ups_for(TaskName.AUTOTAG, TaskOutcome.COMPLETED, DEFAULT) == [TaskName.SEARCH]
    assert follow_ups_for(TaskName.AUTOTAG, TaskOutcome.NO_OP, DEFAULT) == [TaskName.SEARCH]
    assert follow_ups_for(TaskName.AUTOTAG, TaskOutcome.SKIPPED, DEFAULT) == []


def test_resolved_search_reruns_tagging_and_extraction():
    assert follow_ups_for("search", TaskOutcome.COMPLETED, DEFAULT) == [
        TaskName.AUTOTAG,
        TaskName.READABILITY,
    ]
    assert follow_ups_for("search", TaskOutcome.NO_OP, DEFAULT) == []


def test_search_can_also_resubmit_summarize():
    config = PipelineConfig(search_resubmits_summarize=True)

    assert follow_ups_for(TaskName.SEARCH, TaskOutcome.COMPLETED, config) == [
        TaskName.AUTOTAG,
        TaskName.READABILITY,
        TaskName.SUMMARIZE,
    ]


def test_terminal_tasks_have_no_follow_ups():
    assert follow_ups_for(TaskName.SUMMARIZE, TaskOutcome.COMPLETED, DEFAULT) == []
    assert follow_ups_for(TaskName.SYNC, TaskOutcome.COMPLETED, DEFAULT) == []
