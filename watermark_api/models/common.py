from pydantic import BaseModel


class Message(BaseModel):
    text: str


class ErrorResponse(BaseModel):
    error: str
