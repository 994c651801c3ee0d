from pydantic import BaseModel


class AttemptPayload(BaseModel):
    identifier: str


class ResetPayload(BaseModel):
    identifier: str
