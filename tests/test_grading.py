import pytest

from app.features.judge0.schemas import ExecutionVerdict
from app.features.submissions.grading import aggregate_verdicts, all_accepted
from app.features.submissions.models import SubmissionStatus
from tests.conftest import verdict


def _v(status_id, **kw):
    return ExecutionVerdict.model_validate(verdict(status_id, **kw))


def test_all_accepted_sums_time_and_takes_peak_memory():
    outcome = aggregate_verdicts([
        _v(3, time_s="0.10", memory=900),
        _v(3, time_s="0.25", memory=2048),
        _v(3, time_s="0.05", memory=1500),
    ])
    assert outcome.status is SubmissionStatus.accepted
    assert (outcome.passed, outcome.total) == (3, 3)
    assert outcome.runtime == pytest.approx(0.40)
    assert outcome.memory == 2048
    assert outcome.error_message == ""


def test_status_four_marks_error_and_skips_its_runtime():
    outcome = aggregate_verdicts([
        _v(3, time_s="0.10", memory=100),
        _v(4, time_s="0.90", memory=9999, stderr="bad output"),
    ])
    assert outcome.status is SubmissionStatus.error
    assert (outcome.passed, outcome.total) == (1, 2)
    assert outcome.runtime == pytest.approx(0.10)
    assert outcome.memory == 100
    assert outcome.error_message == "bad output"


def test_other_failures_mark_wrong():
    outcome = aggregate_verdicts([_v(3), _v(6, stderr=None), _v(3)])
    assert outcome.status is SubmissionStatus.wrong
    assert outcome.passed == 2
    assert outcome.error_message == ""


def test_status_and_message_are_last_wins():
    outcome = aggregate_verdicts([
        _v(4, stderr="first"),
        _v(5, stderr="second"),
        _v(3),
    ])
    assert outcome.status is SubmissionStatus.wrong
    assert outcome.error_message == "second"

    flipped = aggregate_verdicts([_v(11, stderr="nzec"), _v(4, stderr="")])
    assert flipped.status is SubmissionStatus.error
    assert flipped.error_message == ""


def test_empty_batch_is_accepted_with_zero_totals():
    outcome = aggregate_verdicts([])
    assert outcome.status is SubmissionStatus.accepted
    assert (outcome.passed, outcome.total, outcome.runtime, outcome.memory) == (0, 0, 0.0, 0)


def test_pending_verdict_is_rejected():
    with pytest.raises(ValueError):
        aggregate_verdicts([_v(3), _v(2)])


def test_all_accepted():
    assert all_accepted([_v(3), _v(3)])
    assert not all_accepted([_v(3), _v(4)])
