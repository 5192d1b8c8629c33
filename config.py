import argparse
import logging
import os
from typing import List, Mapping, Optional, Sequence
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

load_dotenv(override=True)


class ConfigError(Exception):
    """Raised when a required setting is missing or a value cannot be parsed."""


class InspectorConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    brokers: List[str]
    group: str
    topic: str
    recipient_host: str
    processing_delay: float = 3.0
    recipient_timeout: Optional[float] = 10.0
    log_level: str = "INFO"


# (dest, flag, env var, help, missing message)
REQUIRED_SETTINGS = (
    ("brokers", "--brokers", "KAFKA_BROKERS",
     "Kafka bootstrap brokers to connect to, as a comma separated list",
     "no Kafka bootstrap brokers defined, please set the --brokers flag or KAFKA_BROKERS"),
    ("group", "--group", "CONSUMER_GROUP",
     "Kafka consumer group definition",
     "no Kafka consumer group defined, please set the --group flag or CONSUMER_GROUP"),
    ("topic", "--topic", "KAFKA_TOPIC",
     "Kafka topic to be consumed",
     "no topic given to be consumed, please set the --topic flag or KAFKA_TOPIC"),
    ("host", "--host", "RECIPIENT_HOST",
     "Host of the response recipient",
     "no recipient host defined, please set the --host flag or RECIPIENT_HOST"),
)


def _build_parser(environ: Mapping[str, str]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="candidate-inspector",
        description="Consume candidates from Kafka, decide on them and post the result over HTTP.",
    )
    for dest, flag, env_var, help_text, _ in REQUIRED_SETTINGS:
        parser.add_argument(flag, dest=dest, default=environ.get(env_var, ""), help=help_text)
    parser.add_argument(
        "--delay",
        default=environ.get("PROCESSING_DELAY_SECONDS", "3"),
        help="Seconds spent simulating the candidate check (0 disables it)",
    )
    parser.add_argument(
        "--timeout",
        default=environ.get("RECIPIENT_TIMEOUT_SECONDS", "10"),
        help="HTTP timeout in seconds for the recipient call (0 means wait forever)",
    )
    parser.add_argument("--log-level", dest="log_level", default=environ.get("LOG_LEVEL", "INFO"))
    return parser


def _parse_seconds(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number of seconds, got {raw!r}")
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {raw!r}")
    return value


def load_config(
    argv: Optional[Sequence[str]] = None, environ: Optional[Mapping[str, str]] = None
) -> InspectorConfig:
    """
    Build the inspector configuration from command-line flags, falling back to
    environment variables. Flags take precedence.
    """
    if environ is None:
        environ = os.environ
    args = _build_parser(environ).parse_args(argv)

    for dest, _, _, _, missing_message in REQUIRED_SETTINGS:
        if not (getattr(args, dest) or "").strip():
            raise ConfigError(missing_message)

    brokers = [b.strip() for b in args.brokers.split(",") if b.strip()]
    if not brokers:
        raise ConfigError(REQUIRED_SETTINGS[0][4])

    log_level = args.log_level.strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"unknown log level {args.log_level!r}")

    timeout = _parse_seconds("timeout", args.timeout)
    return InspectorConfig(
        brokers=brokers,
        group=args.group.strip(),
        topic=args.topic.strip(),
        recipient_host=args.host.strip(),
        processing_delay=_parse_seconds("delay", args.delay),
        recipient_timeout=timeout or None,
        log_level=log_level,
    )
