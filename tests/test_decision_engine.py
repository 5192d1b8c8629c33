import random
import threading
import time
from unittest.mock import Mock

from services.decision_engine import DecisionEngine
from services.schemas.inspector import CandidateRecord, ClientRecord, Verdict

CANDIDATE = CandidateRecord(id=42, client=ClientRecord(surname="Ivanov", email="a@b.com"))


def test_low_draws_reject_high_draws_approve():
    rng = Mock()
    engine = DecisionEngine(delay=0, rng=rng)

    for draw in range(10):
        rng.randrange.return_value = draw
        decision = engine.check_candidate(CANDIDATE)
        expected = Verdict.REJECT if draw < 3 else Verdict.APPROVE
        assert decision.approve == expected
        assert decision.id == 42

    rng.randrange.assert_called_with(10)


def test_decisions_converge_to_30_70_split():
    engine = DecisionEngine(delay=0, rng=random.Random(1234))
    n = 20000
    decisions = [engine.check_candidate(CANDIDATE).approve for _ in range(n)]

    assert set(decisions) <= {Verdict.REJECT, Verdict.APPROVE}
    reject_ratio = decisions.count(Verdict.REJECT) / n
    assert 0.28 <= reject_ratio <= 0.32


def test_decision_for_candidate_without_client():
    engine = DecisionEngine(delay=0, rng=random.Random(1))
    decision = engine.check_candidate(CandidateRecord(id=0))
    assert decision.id == 0
    assert decision.approve in (-1, 1)


def test_delay_pauses_check():
    engine = DecisionEngine(delay=0.2, rng=random.Random(1))
    started = time.monotonic()
    engine.check_candidate(CANDIDATE)
    assert time.monotonic() - started >= 0.15


def test_stop_event_cuts_delay_short():
    stop = threading.Event()
    stop.set()
    engine = DecisionEngine(delay=30, rng=random.Random(1), stop_event=stop)
    started = time.monotonic()
    engine.check_candidate(CANDIDATE)
    assert time.monotonic() - started < 1.0
