import logging
import random
import threading
from typing import Optional

from services.schemas.inspector import CandidateRecord, DecisionRecord, Verdict

logger = logging.getLogger(__name__)

REJECT_THRESHOLD = 3  # draws 0..2 out of 0..9 reject, roughly 30/70


class DecisionEngine:
    def __init__(
        self,
        delay: float = 3.0,
        rng: Optional[random.Random] = None,
        stop_event: Optional[threading.Event] = None,
    ):
        self.delay = delay
        self.rng = rng if rng is not None else random
        self.stop_event = stop_event if stop_event is not None else threading.Event()

    def _decide(self) -> Verdict:
        if self.rng.randrange(10) < REJECT_THRESHOLD:
            return Verdict.REJECT
        return Verdict.APPROVE

    def check_candidate(self, candidate: CandidateRecord) -> DecisionRecord:
        """
        Simulate a check of the candidate and return the decision to send.
        The pause is cut short when the stop event is set.
        """
        if self.delay > 0:
            self.stop_event.wait(self.delay)

        verdict = self._decide()
        logger.info("Decision for candidate %s: approve=%d", candidate.id, verdict)
        return DecisionRecord(id=candidate.id, approve=verdict)
