"""Access to GitHub's webhook and webhook-delivery endpoints."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from urllib.parse import parse_qs, urlsplit

import httpx

__all__ = [
    "DEFAULT_BASE_URL",
    "HookDeliveriesAPI",
    "HookDelivery",
    "HooksAPI",
    "make_client",
    "new_hook_deliveries_api",
    "new_hooks_api",
]

DEFAULT_BASE_URL = "https://api.github.com/"


def make_client(token: str = "", base_url: str = DEFAULT_BASE_URL) -> httpx.Client:
    """Create an HTTP client for the GitHub REST API."""
    headers = {"Accept": "application/vnd.github.v3+json"}
    if token:
        headers["Authorization"] = f"token {token}"
    return httpx.Client(base_url=base_url, headers=headers)


def _parse_timestamp(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def _next_cursor(response: httpx.Response) -> str:
    link = response.links.get("next")
    if not link or "url" not in link:
        return ""
    query = parse_qs(urlsplit(link["url"]).query)
    return query.get("cursor", [""])[0]


@dataclass(frozen=True)
class HookDelivery:
    """One delivery of a webhook, as reported by GitHub."""

    id: int
    delivered_at: datetime
    event: str = ""
    raw_payload: bytes = b""

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> HookDelivery:
        request = data.get("request") or {}
        payload = request.get("payload")
        raw = b"" if payload is None else json.dumps(payload).encode()
        return cls(
            id=int(data["id"]),
            delivered_at=_parse_timestamp(data["delivered_at"]),
            event=data.get("event") or "",
            raw_payload=raw,
        )

    def parse_request_payload(self) -> Any:
        """Decode the request payload that was delivered."""
        try:
            return json.loads(self.raw_payload)
        except ValueError as err:
            raise ValueError(f"failed parsing payload of delivery {self.id}: {err}") from err


@dataclass
class HooksAPI:
    """Lists and creates the hooks of one repository or organization."""

    client: httpx.Client
    path: str

    def list_hooks(self) -> list[dict[str, Any]]:
        response = self.client.get(self.path)
        response.raise_for_status()
        return list(response.json())

    def create_hook(self, hook: dict[str, Any]) -> dict[str, Any]:
        response = self.client.post(self.path, json=hook)
        response.raise_for_status()
        return dict(response.json())


@dataclass
class HookDeliveriesAPI:
    """Reads the deliveries of one hook."""

    client: httpx.Client
    path: str

    def list_hook_deliveries(
        self, cursor: str = "", per_page: int = 0
    ) -> tuple[list[HookDelivery], str]:
        """Return one page of deliveries and the cursor of the next page ("" at the end)."""
        params: dict[str, Any] = {}
        if per_page:
            params["per_page"] = per_page
        if cursor:
            params["cursor"] = cursor
        response = self.client.get(self.path, params=params)
        response.raise_for_status()
        deliveries = [HookDelivery.from_json(item) for item in response.json()]
        return deliveries, _next_cursor(response)

    def get_hook_delivery(self, delivery_id: int) -> HookDelivery:
        response = self.client.get(f"{self.path}/{delivery_id}")
        response.raise_for_status()
        return HookDelivery.from_json(response.json())


def new_hooks_api(client: httpx.Client, owner: str, repo: str) -> HooksAPI:
    """Hooks of ``owner/repo``, or of the organization ``owner`` when ``repo`` is empty."""
    if repo:
        return HooksAPI(client, f"/repos/{owner}/{repo}/hooks")
    return HooksAPI(client, f"/orgs/{owner}/hooks")


def new_hook_deliveries_api(
    client: httpx.Client, owner: str, repo: str, hook_id: int
) -> HookDeliveriesAPI:
    """Deliveries of a repository hook, or of an organization hook when ``repo`` is empty."""
    if repo:
        return HookDeliveriesAPI(client, f"/repos/{owner}/{repo}/hooks/{hook_id}/deliveries")
    return HookDeliveriesAPI(client, f"/orgs/{owner}/hooks/{hook_id}/deliveries")