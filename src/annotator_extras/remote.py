"""Client for the remote tag list endpoint.

The endpoint answers ``GET {prefix}{read_url}`` with
``{"ok": true, "tags": [{"_id": ..., "name": ...}, ...]}``.
Transport and shape failures are raised as ``TagFetchError`` /
``TagResponseError``; the tag plugin decides what to do with them.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import aiohttp
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from annotator_extras.errors import TagFetchError, TagResponseError

logger = logging.getLogger(__name__)


class RemoteTag(BaseModel):
    """One tag as returned by the endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id")
    name: str

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> str:
        if isinstance(value, (dict, list)) or value is None:
            msg = "tag _id must be a scalar"
            raise ValueError(msg)
        return str(value)


class TagListResponse(BaseModel):
    """Envelope of the tag list endpoint."""

    model_config = ConfigDict(extra="ignore")

    ok: bool
    tags: list[RemoteTag] = Field(default_factory=list)


def parse_tag_response(url: str, payload: Any) -> dict[str, str] | None:
    """Turn an endpoint payload into a fresh ``id -> name`` mapping.

    Returns:
        The mapping, or None when the endpoint reported ``ok: false`` or
        sent no tags (the caller keeps its current cache).

    Raises:
        TagResponseError: If the payload does not have the expected shape.
    """
    try:
        response = TagListResponse.model_validate(payload)
    except ValidationError as exc:
        raise TagResponseError(url, f"{exc.error_count()} validation error(s)") from exc
    if not response.ok or not response.tags:
        return None
    return {tag.id: tag.name for tag in response.tags}


class TagSource(Protocol):
    """Transport for the tag list endpoint."""

    async def fetch_tags(self, url: str) -> Any:
        """GET ``url`` and return the decoded JSON body.

        Raises:
            TagFetchError: On transport failure or a failure status.
            TagResponseError: If the body is not JSON.
        """
        ...


class AiohttpTagSource:
    """``TagSource`` over aiohttp.

    A session passed in is reused and left open; otherwise a short-lived
    session is opened per request.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session

    async def fetch_tags(self, url: str) -> Any:
        try:
            if self._session is not None:
                return await self._get_json(self._session, url)
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                return await self._get_json(session, url)
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise TagFetchError(url, str(exc) or type(exc).__name__) from exc

    async def _get_json(self, session: aiohttp.ClientSession, url: str) -> Any:
        async with session.get(url, timeout=self._timeout) as resp:
            if resp.status >= 400:
                raise TagFetchError(url, resp.reason or "error status", resp.status)
            try:
                return await resp.json(content_type=None)
            except ValueError as exc:
                raise TagResponseError(url, "body is not JSON") from exc
