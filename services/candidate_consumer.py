import logging
import re
import threading
from typing import Optional
from confluent_kafka import Consumer, KafkaError, KafkaException
from pydantic import ValidationError

from config import InspectorConfig
from services.handoff import HandoffChannel
from services.schemas.inspector import CandidateRecord, ClientRecord

logger = logging.getLogger(__name__)

FETCH_MIN_BYTES = 1000  # 1KB
FETCH_MAX_BYTES = 10_000_000  # 10MB
DECIMAL_KEY = re.compile(rb"[+-]?[0-9]+")


class CandidateConsumer:
    def __init__(self, config: InspectorConfig, poll_timeout: float = 1.0):
        self.input_topic = config.topic
        self.poll_timeout = poll_timeout
        self._broken = threading.Event()
        self._closed = False
        self.consumer = Consumer(
            {
                "bootstrap.servers": ",".join(config.brokers),
                "group.id": config.group,
                "auto.offset.reset": "earliest",
                "fetch.min.bytes": FETCH_MIN_BYTES,
                "fetch.max.bytes": FETCH_MAX_BYTES,
                "error_cb": self._on_client_error,
            }
        )

    def _on_client_error(self, err: KafkaError):
        """
        Client-level errors (broker connectivity, authentication, ...).
        A fatal error or losing every broker stops the read loop.
        """
        if err.fatal() or err.code() == KafkaError._ALL_BROKERS_DOWN:
            logger.error("Kafka client error, stopping read loop: %s", err)
            self._broken.set()
        else:
            logger.warning("Kafka client error: %s", err)

    @staticmethod
    def parse_id(key: Optional[bytes]) -> int:
        """Message key is a decimal id; anything else maps to 0."""
        if not key or not DECIMAL_KEY.fullmatch(key):
            return 0
        return int(key)

    def to_candidate(self, msg) -> CandidateRecord:
        client = None
        try:
            client = ClientRecord.model_validate_json(msg.value() or b"")
        except ValidationError as exc:
            logger.error("Error unmarshalling candidate: %s", exc)
        else:
            if not client.surname or not client.email:
                logger.warning("Candidate %r is missing surname or email", msg.key())
        return CandidateRecord(id=self.parse_id(msg.key()), client=client)

    def run(self, channel: HandoffChannel, stop_event: threading.Event):
        """
        Read loop: poll the topic and hand every candidate to the channel,
        blocking until the decision side takes it.
        Exits on a read error, on stop_event or when the channel is closed.
        """
        try:
            self.consumer.subscribe([self.input_topic])
            logger.info("Subscribed to topic: %s", self.input_topic)

            while not stop_event.is_set():
                if self._broken.is_set():
                    break

                msg = self.consumer.poll(self.poll_timeout)
                if msg is None:
                    continue

                err = msg.error()
                if err:
                    if err.code() == KafkaError._PARTITION_EOF:
                        logger.debug("Reached end of partition")
                        continue
                    if err.retriable():
                        logger.warning("Retriable consumer error: %s", err)
                        continue
                    logger.error("Consumer error: %s", err)
                    break

                candidate = self.to_candidate(msg)
                logger.info("Received candidate %s", candidate.id)
                if not channel.send(candidate):
                    logger.info("Handoff channel closed; candidate %s not delivered", candidate.id)
                    break

        except (KafkaException, RuntimeError) as exc:
            logger.error("Failed to read message: %s", exc)
        finally:
            logger.info("Read loop stopped")

    def close(self):
        if self._closed:
            return
        self._closed = True
        try:
            self.consumer.close()
        except (KafkaException, RuntimeError) as exc:
            logger.error("failed to close reader: %s", exc)
