"""Async client for the hosted bridge API."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from ..config import settings


class HostedBridgeProvider:
    """Thin wrapper around the hosted bridge ``/bridge/quote`` and ``/bridge/execute`` endpoints."""

    name = "hosted_bridge"

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        env: Optional[str] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.hosted_bridge_base_url).rstrip("/")
        self.env = env or settings.hosted_bridge_env
        self.timeout_s = timeout_s or settings.request_timeout_seconds
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "accept": "application/json",
            "content-type": "application/json",
            "user-agent": "hfvbridge/0.1",
            "x-hfv-env": self.env,
        }

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_s,
            transport=self._transport,
        ) as client:
            response = await client.post(path, json=payload, headers=self._headers())
            response.raise_for_status()
            data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected hosted bridge response: {data!r}")
        return data

    async def quote(
        self,
        *,
        from_chain: str,
        to_chain: str,
        token: str,
        amount: str,
        recipient: str,
    ) -> Dict[str, Any]:
        """Request a quote.

        Returns the raw payload; callers read ``estimatedOutputAmount``,
        ``estimatedGasUsd`` and ``quoteId`` from it.
        """

        data = await self._post(
            "/bridge/quote",
            {
                "fromChain": from_chain,
                "toChain": to_chain,
                "token": token,
                "amount": amount,
                "recipient": recipient,
            },
        )
        if data.get("estimatedOutputAmount") is None:
            raise ValueError("Hosted quote response missing estimatedOutputAmount")
        return data

    async def bridge(
        self,
        *,
        from_chain: str,
        to_chain: str,
        token: str,
        amount: str,
        recipient: str,
        quote_id: str,
    ) -> Dict[str, Any]:
        data = await self._post(
            "/bridge/execute",
            {
                "fromChain": from_chain,
                "toChain": to_chain,
                "token": token,
                "amount": amount,
                "recipient": recipient,
                "quoteId": quote_id,
            },
        )
        if not (data.get("trackingId") or data.get("txHash")):
            raise ValueError("Hosted bridge response missing trackingId")
        return data
