from pydantic import BaseModel


class InterviewReply(BaseModel):
    question: str | None = None
    answer: str
    audioUrl: str
    sessionId: str | None = None


class ErrorResponse(BaseModel):
    error: str


class TurnOut(BaseModel):
    role: str
    text: str


class HistoryResponse(BaseModel):
    sessionId: str
    turns: list[TurnOut]
