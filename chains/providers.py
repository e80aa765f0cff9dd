"""
chains/providers.py - JSON-RPC provider with failover.

Provides RPC access for gas price lookups and transaction broadcast with:
- Multiple endpoint failover
- Request timeout handling
- ${VAR} substitution in endpoint URLs
- Latency tracking
"""

import os
import re
import time
from dataclasses import dataclass
from typing import Any

import httpx
from dotenv import load_dotenv

from core.logging import get_logger
from core.exceptions import InfraError

logger = get_logger(__name__)

# Load environment variables
load_dotenv()

ENV_PLACEHOLDER = re.compile(r"\$\{([A-Z0-9_]+)\}")


@dataclass
class RPCStats:
    """Statistics for an RPC endpoint."""
    url: str
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_latency_ms: int = 0
    last_error: str | None = None
    last_success_ts: int | None = None

    @property
    def avg_latency_ms(self) -> int:
        if self.successful_requests == 0:
            return 0
        return self.total_latency_ms // self.successful_requests

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.successful_requests / self.total_requests


@dataclass
class RPCResponse:
    """Response from an RPC call."""
    result: Any
    latency_ms: int
    endpoint_used: str


def resolve_urls(urls: list[str]) -> list[str]:
    """
    Substitute ${VAR} placeholders from the environment.

    URLs referencing an unset or empty variable are dropped.
    """
    resolved = []
    for url in urls:
        missing = [name for name in ENV_PLACEHOLDER.findall(url) if not os.getenv(name)]
        if missing:
            logger.debug(
                "Skipping RPC endpoint with unset variables",
                extra={"context": {"missing": missing}},
            )
            continue
        resolved.append(ENV_PLACEHOLDER.sub(lambda m: os.environ[m.group(1)], url))
    return resolved


class RPCProvider:
    """
    RPC provider with failover support.

    Tries multiple endpoints in order until one succeeds.
    Tracks statistics per endpoint for monitoring.
    """

    def __init__(
        self,
        chain_id: int,
        rpc_urls: list[str],
        timeout_seconds: float = 10,
        client: httpx.AsyncClient | None = None,
    ):
        self.chain_id = chain_id
        self.timeout_seconds = timeout_seconds
        self._client = client
        self._owns_client = client is None
        self._request_id = 0

        self.rpc_urls = resolve_urls(rpc_urls)

        self.stats: dict[str, RPCStats] = {
            url: RPCStats(url=url) for url in self.rpc_urls
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                limits=httpx.Limits(max_connections=10),
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._client and self._owns_client:
            await self._client.aclose()
        self._client = None

    def _next_request_id(self) -> int:
        self._request_id += 1
        return self._request_id

    async def call(
        self,
        method: str,
        params: list | None = None,
    ) -> RPCResponse:
        """
        Make an RPC call with failover.

        Args:
            method: RPC method name
            params: Method parameters

        Returns:
            RPCResponse with result and metadata

        Raises:
            InfraError: If all endpoints fail
        """
        if not self.rpc_urls:
            raise InfraError(
                "No RPC endpoints configured",
                details={"chain_id": self.chain_id},
            )

        client = await self._get_client()
        last_error: Exception | None = None

        for url in self.rpc_urls:
            stats = self.stats[url]
            stats.total_requests += 1

            payload = {
                "jsonrpc": "2.0",
                "method": method,
                "params": params or [],
                "id": self._next_request_id(),
            }

            start_ms = int(time.time() * 1000)

            try:
                resp = await client.post(url, json=payload)
                latency_ms = int(time.time() * 1000) - start_ms

                result = resp.json()

                if "error" in result:
                    error = result["error"]
                    error_msg = error.get("message", str(error)) if isinstance(error, dict) else str(error)
                    stats.failed_requests += 1
                    stats.last_error = error_msg
                    last_error = InfraError(
                        f"RPC error: {error_msg}",
                        details={"url": url, "method": method},
                    )
                    logger.debug(f"RPC error from {url}: {error_msg}")
                    continue

                stats.successful_requests += 1
                stats.total_latency_ms += latency_ms
                stats.last_success_ts = int(time.time() * 1000)

                return RPCResponse(
                    result=result.get("result"),
                    latency_ms=latency_ms,
                    endpoint_used=url,
                )

            except httpx.TimeoutException as e:
                latency_ms = int(time.time() * 1000) - start_ms
                stats.failed_requests += 1
                stats.last_error = f"Timeout after {latency_ms}ms"
                last_error = e
                logger.debug(f"RPC timeout for {url}: {latency_ms}ms")
                continue

            except (httpx.HTTPError, ValueError) as e:
                stats.failed_requests += 1
                stats.last_error = str(e)
                last_error = e
                logger.debug(f"RPC failed for {url}: {e}")
                continue

        raise InfraError(
            f"All RPC endpoints failed for chain {self.chain_id}: {last_error}",
            details={
                "chain_id": self.chain_id,
                "method": method,
                "endpoints_tried": len(self.rpc_urls),
                "last_error": str(last_error),
                "endpoints": self.get_stats_summary(),
            },
        )

    @staticmethod
    def _hex_result(response: RPCResponse, method: str) -> int:
        """
        Decode a hex quantity result.

        Raises:
            InfraError: If the node answered with something other than a hex string
        """
        try:
            return int(response.result, 16)
        except (TypeError, ValueError):
            raise InfraError(
                f"Unexpected {method} result: {response.result!r}",
                details={"method": method, "url": response.endpoint_used},
            )

    async def get_chain_id(self) -> int:
        """Get chain ID from RPC."""
        response = await self.call("eth_chainId")
        return self._hex_result(response, "eth_chainId")

    async def get_gas_price(self) -> int:
        """Get current gas price in wei."""
        response = await self.call("eth_gasPrice")
        return self._hex_result(response, "eth_gasPrice")

    async def get_transaction_count(self, address: str, block: str = "pending") -> int:
        """Get the next nonce for an address."""
        response = await self.call("eth_getTransactionCount", [address, block])
        return self._hex_result(response, "eth_getTransactionCount")

    async def send_raw_transaction(self, raw_tx: str) -> str:
        """
        Broadcast a signed transaction.

        Returns:
            Transaction hash
        """
        response = await self.call("eth_sendRawTransaction", [raw_tx])
        if not isinstance(response.result, str):
            raise InfraError(
                f"Unexpected eth_sendRawTransaction result: {response.result!r}",
                details={"method": "eth_sendRawTransaction", "url": response.endpoint_used},
            )
        return response.result

    def get_stats_summary(self) -> dict:
        """Get statistics summary for all endpoints."""
        return {
            url: {
                "total_requests": s.total_requests,
                "success_rate": round(s.success_rate, 3),
                "avg_latency_ms": s.avg_latency_ms,
                "last_error": s.last_error,
            }
            for url, s in self.stats.items()
        }
