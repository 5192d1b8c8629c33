from enum import IntEnum
from typing import Optional
from pydantic import BaseModel, ConfigDict


class Verdict(IntEnum):
    APPROVE = 1
    REJECT = -1


class ClientRecord(BaseModel):
    """
    Schema for candidate messages consumed from the review topic.
    surname and email are expected but not enforced on decode; approve is left
    at 0 until a decision is made.
    """
    model_config = ConfigDict(frozen=True)

    surname: str = ""
    name: str = ""
    patronymic: str = ""
    email: str = ""
    approve: int = 0


class CandidateRecord(BaseModel):
    """
    A consumed message: id comes from the message key, client from the value.
    client is None when the value could not be decoded.
    """
    model_config = ConfigDict(frozen=True)

    id: int = 0
    client: Optional[ClientRecord] = None


class DecisionRecord(BaseModel):
    """
    Payload posted to the recipient's /approval/ endpoint.
    """
    model_config = ConfigDict(frozen=True)

    id: int
    approve: Verdict
