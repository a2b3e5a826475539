"""Internal data models for the gateway client.

All models use Pydantic v2.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class HttpResponse(BaseModel):
    """One raw response from the gateway, real or replayed from a fixture.

    The body is undecoded text; callers decide whether to parse it as XML
    or raise based on the status.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    status: int = Field(description="HTTP status code")
    body: str = Field(default="", description="Raw response body text")


class MockRecord(BaseModel):
    """A recorded response fixture as persisted on disk.

    The body is HTML-escaped at write time and unescaped on replay.
    """

    model_config = ConfigDict(extra="forbid")

    status: int = Field(description="HTTP status code")
    body: str = Field(default="", description="HTML-escaped response body")


class MockRequestRecord(BaseModel):
    """Side-car record of the raw request behind a fixture, for inspection."""

    model_config = ConfigDict(extra="forbid")

    url: str = Field(description="Full request URL")
    body: str = Field(default="", description="Raw request body")
