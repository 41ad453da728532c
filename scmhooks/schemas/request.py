"""Transport-neutral view of an inbound webhook request."""

from __future__ import annotations

from collections.abc import AsyncIterable

from pydantic import BaseModel, ConfigDict, Field, field_validator

from scmhooks.errors import PayloadTooLargeError

DEFAULT_MAX_BODY_BYTES = 10_000_000


class HookRequest(BaseModel):
    """Method, headers, query and the fully buffered body of one request.

    The body is read exactly once by whoever builds this object; both
    signature validation and decoding work from the buffered bytes.
    Header names are stored lower-cased so lookups are case-insensitive.
    """

    model_config = ConfigDict(frozen=True)

    method: str = "POST"
    headers: dict[str, str] = Field(default_factory=dict)
    query: dict[str, str] = Field(default_factory=dict)
    body: bytes = b""

    @field_validator("headers")
    @classmethod
    def _lower_header_names(cls, value: dict[str, str]) -> dict[str, str]:
        return {name.lower(): header for name, header in value.items()}

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())

    def query_param(self, name: str) -> str | None:
        return self.query.get(name)

    @classmethod
    async def from_chunks(
        cls,
        chunks: AsyncIterable[bytes],
        *,
        method: str = "POST",
        headers: dict[str, str] | None = None,
        query: dict[str, str] | None = None,
        max_body_bytes: int = DEFAULT_MAX_BODY_BYTES,
    ) -> HookRequest:
        """Buffer a chunked body once, refusing it as soon as it passes ``max_body_bytes``.

        Raises:
            PayloadTooLargeError: If the chunks add up to more than the limit.
        """
        body = bytearray()
        async for chunk in chunks:
            body.extend(chunk)
            if len(body) > max_body_bytes:
                raise PayloadTooLargeError(max_body_bytes)
        return cls(method=method, headers=headers or {}, query=query or {}, body=bytes(body))
