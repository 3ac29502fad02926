# src/google_auth_library/gmail_client.py

import asyncio
import logging
from typing import Any, Dict, List, Optional, Union

import httpx

from .error_handler import DownstreamError, extract_error_body

lib_logger = logging.getLogger("google_auth_library")

METADATA_HEADERS = ["From", "Subject", "Date"]


def _header_value(headers: List[Dict[str, Any]], name: str) -> Optional[str]:
    """Case-insensitive lookup in a Gmail `payload.headers` list."""
    wanted = name.lower()
    for header in headers:
        if str(header.get("name", "")).lower() == wanted:
            return header.get("value") or None
    return None


def merge_message(entry: Dict[str, Any], detail: Dict[str, Any]) -> Dict[str, Any]:
    """
    Flatten one list entry and its metadata fetch into the client shape.

    A failed fetch shows up as an `error` key on the item; the remaining
    fields fall back to what the list response already had.
    """
    headers = (detail.get("payload") or {}).get("headers") or []
    merged = {
        "id": entry.get("id"),
        "threadId": entry.get("threadId"),
        "snippet": detail.get("snippet") or entry.get("snippet") or None,
        "from": _header_value(headers, "From"),
        "subject": _header_value(headers, "Subject"),
        "date": _header_value(headers, "Date"),
    }
    if "error" in detail:
        merged["error"] = detail["error"]
    return merged


class GmailClient:
    """
    Thin async wrapper over the Gmail REST API for the signed-in user.

    Only read operations are exposed. Responses are returned as the decoded
    JSON Gmail sent, except for expanded listings which are flattened by
    `merge_message`.
    """

    BASE_URL: str = "https://gmail.googleapis.com/gmail/v1/users/me"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: Optional[str] = None,
        metadata_concurrency: int = 10,
    ):
        self._client = http_client
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.metadata_concurrency = metadata_concurrency

    async def _get(
        self, access_token: str, path: str, params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        try:
            response = await self._client.get(
                f"{self.base_url}/{path}",
                headers={"Authorization": f"Bearer {access_token}"},
                params=params,
            )
        except httpx.RequestError as e:
            lib_logger.error(f"Error Gmail API ({path}): {e}")
            raise DownstreamError(f"Gmail API unreachable: {e}")

        if response.is_error:
            lib_logger.error(
                f"Error Gmail API ({path}, HTTP {response.status_code}): "
                f"{extract_error_body(response)}"
            )
            raise DownstreamError.from_response(response)

        try:
            return response.json()
        except ValueError as e:
            lib_logger.error(f"Error Gmail API ({path}): response was not JSON: {e}")
            raise DownstreamError(f"Invalid JSON from Gmail: {e}", status_code=502)

    async def get_message(
        self, access_token: str, message_id: str, format: str = "full"
    ) -> Dict[str, Any]:
        return await self._get(
            access_token, f"messages/{message_id}", params={"format": format}
        )

    async def _fetch_metadata(
        self,
        access_token: str,
        message_id: str,
        semaphore: Optional[asyncio.Semaphore],
    ) -> Dict[str, Any]:
        params = [("format", "metadata")] + [
            ("metadataHeaders", header) for header in METADATA_HEADERS
        ]
        try:
            if semaphore is None:
                return await self._get(access_token, f"messages/{message_id}", params)
            async with semaphore:
                return await self._get(access_token, f"messages/{message_id}", params)
        except DownstreamError as e:
            return {"id": message_id, "error": e.detail}

    async def list_messages(
        self,
        access_token: str,
        query: Optional[str] = None,
        max_results: Optional[Union[int, str]] = None,
        page_token: Optional[str] = None,
        expand: bool = True,
    ) -> Dict[str, Any]:
        """
        List messages matching a Gmail search query.

        `query` is Gmail search syntax and is passed through untouched. With
        `expand`, metadata (From, Subject, Date) is fetched for every returned
        id concurrently and merged into each entry, in list order.
        """
        params = {"q": query, "maxResults": max_results, "pageToken": page_token}
        params = {key: value for key, value in params.items() if value is not None}
        listing = await self._get(access_token, "messages", params)

        entries = listing.get("messages")
        lib_logger.info(
            f"Expand requested: {expand}, messages count: {len(entries or [])}"
        )
        if not expand or not isinstance(entries, list) or not entries:
            return listing

        semaphore = (
            asyncio.Semaphore(self.metadata_concurrency)
            if self.metadata_concurrency > 0
            else None
        )
        details = await asyncio.gather(
            *(
                self._fetch_metadata(access_token, entry.get("id"), semaphore)
                for entry in entries
            )
        )

        result = {
            "messages": [
                merge_message(entry, detail) for entry, detail in zip(entries, details)
            ],
            "resultSizeEstimate": listing.get("resultSizeEstimate"),
        }
        if listing.get("nextPageToken"):
            result["nextPageToken"] = listing["nextPageToken"]
        return result
