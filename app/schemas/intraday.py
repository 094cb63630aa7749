from pydantic import BaseModel


class DailySummarySchema(BaseModel):
    day: str
    lowAverage: float
    highAverage: float
    volume: int


class RootSchema(BaseModel):
    message: str


class ErrorSchema(BaseModel):
    error: str


class ProblemDetailsSchema(BaseModel):
    """RFC 7807 problem body returned for server-side failures."""

    type: str = "https://tools.ietf.org/html/rfc9110#section-15.6.1"
    title: str = "An error occurred while processing your request."
    status: int = 500
    detail: str | None = None
