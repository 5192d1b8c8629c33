import logging
from typing import Optional
import requests

from services.schemas.inspector import DecisionRecord

logger = logging.getLogger(__name__)


class ApprovalSender:
    def __init__(
        self,
        recipient_host: str,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.url = f"http://{recipient_host}/approval/"
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    def send(self, decision: DecisionRecord) -> Optional[str]:
        """
        POST the decision to the recipient and return the response body.
        Every failure is logged and None is returned; nothing is retried.
        """
        try:
            body = decision.model_dump_json().encode("utf-8")
        except (TypeError, ValueError) as exc:
            logger.error("Error marshalling decision %s: %s", decision.id, exc)
            return None

        logger.info("Starting client...")

        try:
            request = requests.Request(
                "POST",
                self.url,
                data=body,
                headers={"Content-Type": "application/json"},
            ).prepare()
        except (requests.RequestException, ValueError) as exc:
            logger.error("Error creating HTTP request: %s", exc)
            return None

        try:
            response = self.session.send(request, stream=True, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("Error sending HTTP request: %s", exc)
            return None

        try:
            content = response.content
        except requests.RequestException as exc:
            logger.error("Error reading HTTP response body: %s", exc)
            return None
        finally:
            response.close()

        text = content.decode("utf-8", errors="replace")
        logger.info("response: %s %s", response.status_code, text)
        return text

    def close(self):
        self.session.close()
