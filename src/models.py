from pydantic import BaseModel


class URLMapping(BaseModel):
    id: str
    original_url: str


class ShortenRequest(BaseModel):
    original_url: str


class ShortenResponse(URLMapping):
    short_url: str
