import logging
import signal
import threading
from typing import Dict, Optional

from config import InspectorConfig
from services.approval_sender import ApprovalSender
from services.candidate_consumer import CandidateConsumer
from services.decision_engine import DecisionEngine
from services.handoff import HandoffChannel
from services.schemas.inspector import CandidateRecord

logger = logging.getLogger(__name__)

RECEIVE_TIMEOUT = 0.5
JOIN_TIMEOUT = 5.0


class Inspector:
    """
    Lifecycle controller: one reader thread feeding the handoff channel and
    one decider thread draining it, until SIGINT/SIGTERM arrives.
    """

    def __init__(
        self,
        config: InspectorConfig,
        consumer: Optional[CandidateConsumer] = None,
        engine: Optional[DecisionEngine] = None,
        sender: Optional[ApprovalSender] = None,
        channel: Optional[HandoffChannel] = None,
    ):
        self.config = config
        self.stop_event = threading.Event()
        self.channel: HandoffChannel[CandidateRecord] = channel if channel is not None else HandoffChannel()
        self.consumer = consumer if consumer is not None else CandidateConsumer(config)
        self.engine = engine if engine is not None else DecisionEngine(
            delay=config.processing_delay, stop_event=self.stop_event
        )
        self.sender = sender if sender is not None else ApprovalSender(
            config.recipient_host, timeout=config.recipient_timeout
        )
        self._reader: Optional[threading.Thread] = None
        self._decider: Optional[threading.Thread] = None
        self._previous_handlers: Dict[int, object] = {}
        self._shutdown_lock = threading.Lock()
        self._shut_down = False

    def start(self):
        logger.info("Starting consumer...")
        self._reader = threading.Thread(
            target=self.consumer.run,
            args=(self.channel, self.stop_event),
            name="candidate-reader",
            daemon=True,
        )
        self._decider = threading.Thread(
            target=self._decide_loop, name="candidate-decider", daemon=True
        )
        self._reader.start()
        self._decider.start()

    def _decide_loop(self):
        while not self.stop_event.is_set():
            candidate = self.channel.receive(timeout=RECEIVE_TIMEOUT)
            if candidate is None:
                continue
            try:
                decision = self.engine.check_candidate(candidate)
                self.sender.send(decision)
            except Exception as exc:
                logger.exception("Error processing candidate %s: %s", candidate.id, exc)

    def request_stop(self, signum=None, frame=None):
        if signum is not None:
            logger.info("Received signal %s", signal.Signals(signum).name)
        self.stop_event.set()

    def install_signal_handlers(self):
        for sig in (signal.SIGINT, signal.SIGTERM):
            self._previous_handlers[sig] = signal.signal(sig, self.request_stop)

    def _restore_signal_handlers(self):
        for sig, handler in self._previous_handlers.items():
            if handler is not None:
                signal.signal(sig, handler)
        self._previous_handlers.clear()

    def run(self):
        self.install_signal_handlers()
        self.start()
        try:
            self.stop_event.wait()
        finally:
            self.shutdown()

    def shutdown(self):
        with self._shutdown_lock:
            if self._shut_down:
                return
            self._shut_down = True

        logger.info("Shutting down inspector...")
        self.stop_event.set()
        self.channel.close()

        if self._reader is not None:
            self._reader.join(JOIN_TIMEOUT)
            if self._reader.is_alive():
                logger.warning("Reader thread still running after %.1fs", JOIN_TIMEOUT)
        self.consumer.close()

        if self._decider is not None:
            self._decider.join(JOIN_TIMEOUT)
            if self._decider.is_alive():
                logger.warning("Decision in flight abandoned at shutdown")
        self.sender.close()
        self._restore_signal_handlers()
