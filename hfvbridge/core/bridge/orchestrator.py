"""BridgeOrchestrator quotes and executes transfers over the hosted or on-chain path."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Optional, Tuple, Union

from ...config import settings
from ...errors import (
    ExecuteFailed,
    InsufficientGasBalance,
    InvalidRequest,
    NoRouterConfigured,
    QuoteFailed,
    RpcError,
    StaleQuote,
)
from ...providers.hosted_bridge import HostedBridgeProvider
from ...providers.rpc import ChainRpcPool, JsonRpcClient
from ...services.evm import from_raw_amount, is_valid_address
from ...services.prices import PriceOracleClient
from ..chains import ChainRegistry, Chain, Token
from ..execution import GasEstimate, PreparedTransaction, TransactionExecutor
from ..wallet import AccountsChanged, Disconnected, WalletEvent, WalletSessionManager
from .constants import BRIDGE_GAS_RESERVE, HOSTED_QUOTE_PREFIX, ONCHAIN_QUOTE_PREFIX
from .models import BridgePath, BridgeQuote, BridgeRequest, BridgeResult
from .router import RouterContract
from .strategy import run_with_fallback


class BridgeOrchestrator:
    """Obtains quotes and executes bridge transfers.

    Holds at most one current quote. A quote is only executable while it is
    the current one, unexpired, and its inputs are unchanged; a successful
    execute consumes it, a failed execute leaves it in place.
    """

    def __init__(
        self,
        wallet: WalletSessionManager,
        *,
        registry: ChainRegistry,
        prices: PriceOracleClient,
        rpc_pool: Optional[ChainRpcPool] = None,
        hosted: Optional[HostedBridgeProvider] = None,
        quote_ttl_s: Optional[float] = None,
        gas_safety_margin: Optional[float] = None,
        confirmation_timeout_s: Optional[float] = None,
        executor_factory: Optional[Callable[[JsonRpcClient], TransactionExecutor]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self.wallet = wallet
        self.registry = registry
        self.prices = prices
        self.rpc_pool = rpc_pool or ChainRpcPool(registry)
        self.hosted = hosted
        self.quote_ttl_s = settings.quote_ttl_seconds if quote_ttl_s is None else quote_ttl_s
        self.gas_safety_margin = settings.gas_safety_margin if gas_safety_margin is None else gas_safety_margin
        self.confirmation_timeout_s = confirmation_timeout_s or settings.confirmation_timeout_seconds
        self._executor_factory = executor_factory or (lambda rpc: TransactionExecutor(rpc))

        self._current_quote: Optional[BridgeQuote] = None
        self._generation = 0

        # A quote belongs to the account that requested it
        self._unsubscribe_wallet = wallet.subscribe(self._on_wallet_event, events=[AccountsChanged, Disconnected])

    def _on_wallet_event(self, event: WalletEvent) -> None:
        self.invalidate()

    def close(self) -> None:
        """Stop following wallet events."""
        self._unsubscribe_wallet()

    # ─────────────────────────────────────────────────────────────────────────
    # Request building and validation
    # ─────────────────────────────────────────────────────────────────────────

    def build_request(
        self,
        source_chain_id: int,
        destination_chain_id: int,
        token: Union[str, Token],
        amount: Union[str, int, float, Decimal],
        recipient: Optional[str] = None,
    ) -> BridgeRequest:
        """Resolve user inputs into a BridgeRequest; raises InvalidRequest on bad input."""

        source = self.registry.get(source_chain_id)
        destination = self.registry.get(destination_chain_id)
        if source is None or destination is None:
            missing = source_chain_id if source is None else destination_chain_id
            raise InvalidRequest(f"Unknown chain {missing}", chain_id=missing)

        if isinstance(token, Token):
            resolved = token
        else:
            resolved = self.registry.find_token(source.chain_id, str(token))
            if resolved is None:
                raise InvalidRequest(f"Unknown token {token!r} on {source.name}", chain_id=source.chain_id)

        try:
            value = Decimal(str(amount))
        except InvalidOperation as exc:
            raise InvalidRequest(f"Invalid amount {amount!r}", cause=exc) from exc

        return BridgeRequest(
            source_chain_id=source.chain_id,
            destination_chain_id=destination.chain_id,
            token=resolved,
            amount=value,
            recipient=recipient or self.wallet.address or "",
        )

    def _validate(self, request: BridgeRequest) -> None:
        if not self.wallet.is_connected:
            raise InvalidRequest("Connect a wallet before requesting a quote")
        if request.source_chain_id == request.destination_chain_id:
            raise InvalidRequest("Source and destination networks must be different", chain_id=request.source_chain_id)
        if not self.registry.is_supported(request.source_chain_id):
            raise InvalidRequest(f"Unsupported source chain {request.source_chain_id}", chain_id=request.source_chain_id)
        if not self.registry.is_supported(request.destination_chain_id):
            raise InvalidRequest(
                f"Unsupported destination chain {request.destination_chain_id}",
                chain_id=request.destination_chain_id,
            )
        if request.token is None or request.token.chain_id != request.source_chain_id:
            raise InvalidRequest("Token must belong to the source chain", chain_id=request.source_chain_id)
        if not request.amount.is_finite() or request.amount <= 0 or request.raw_amount <= 0:
            raise InvalidRequest("Amount must be greater than zero")
        if not is_valid_address(request.recipient):
            raise InvalidRequest(f"Invalid recipient {request.recipient!r}")

    # ─────────────────────────────────────────────────────────────────────────
    # Quote state
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def current_quote(self) -> Optional[BridgeQuote]:
        return self._current_quote

    def invalidate(self) -> None:
        """Inputs changed: drop the current quote and any in-flight quote result."""

        self._generation += 1
        if self._current_quote is not None:
            self._logger.info("Discarding quote %s after input change", self._current_quote.quote_id)
        self._current_quote = None

    def _require_current(self, quote: BridgeQuote) -> None:
        current = self._current_quote
        if current is None or current.quote_id != quote.quote_id or current.fingerprint != quote.fingerprint:
            raise StaleQuote("Quote is no longer current; request a new quote")
        if quote.is_expired():
            raise StaleQuote(f"Quote {quote.quote_id} has expired; request a new quote")

    # ─────────────────────────────────────────────────────────────────────────
    # Quoting
    # ─────────────────────────────────────────────────────────────────────────

    async def get_quote(self, request: BridgeRequest) -> BridgeQuote:
        self._validate(request)

        # Any newer get_quote or invalidate() makes this call's result stale
        self.invalidate()
        generation = self._generation

        primary = (lambda: self._hosted_quote(request)) if self.hosted is not None else None
        outcome = await run_with_fallback(
            primary,
            lambda: self._onchain_quote(request),
            terminal=QuoteFailed,
            operation="quote",
        )

        if generation != self._generation:
            raise StaleQuote("Quote superseded by newer input")

        self._current_quote = outcome.value
        self._logger.info(
            "Bridge quote %s via %s: %s %s -> chain %s",
            outcome.value.quote_id,
            outcome.path.value,
            request.amount_str,
            request.token.symbol,
            request.destination_chain_id,
        )
        return outcome.value

    def _chain_label(self, chain_id: int) -> str:
        chain = self.registry.require(chain_id)
        return chain.key or chain.name

    async def _hosted_quote(self, request: BridgeRequest) -> BridgeQuote:
        data = await self.hosted.quote(
            from_chain=self._chain_label(request.source_chain_id),
            to_chain=self._chain_label(request.destination_chain_id),
            token=request.token.symbol,
            amount=request.amount_str,
            recipient=request.recipient,
        )
        quote_id = str(data.get("quoteId") or f"{HOSTED_QUOTE_PREFIX}-{request.fingerprint()[:16]}")
        return BridgeQuote(
            request=request,
            path=BridgePath.HOSTED,
            quote_id=quote_id,
            estimated_output_amount=Decimal(str(data["estimatedOutputAmount"])),
            estimated_gas_usd=float(data.get("estimatedGasUsd") or 0.0),
            expires_at=BridgeQuote.expiry(self.quote_ttl_s),
            raw=data,
        )

    def _router_for(self, chain: Chain) -> RouterContract:
        address = self.registry.router_address(chain.chain_id)
        if not address:
            raise NoRouterConfigured(f"No bridge router configured for {chain.name}", chain_id=chain.chain_id)
        rpc = self.rpc_pool.get(chain.chain_id)
        if rpc is None:
            raise RpcError(f"No RPC endpoint for {chain.name}", chain_id=chain.chain_id)
        return RouterContract(rpc, address)

    def _destination_decimals(self, request: BridgeRequest) -> int:
        counterpart = self.registry.find_token(request.destination_chain_id, request.token.symbol)
        return counterpart.decimals if counterpart else request.token.decimals

    async def _onchain_quote(self, request: BridgeRequest) -> BridgeQuote:
        router = self._router_for(self.registry.require(request.source_chain_id))
        result = await router.quote_bridge(
            request.token.address,
            request.raw_amount,
            request.destination_chain_id,
            request.recipient,
        )
        return BridgeQuote(
            request=request,
            path=BridgePath.ONCHAIN,
            quote_id=f"{ONCHAIN_QUOTE_PREFIX}-{request.fingerprint()[:16]}",
            estimated_output_amount=from_raw_amount(result.dst_amount, self._destination_decimals(request)),
            estimated_gas_usd=float(result.gas_usd),
            fee_wei=result.fee_amount,
            expires_at=BridgeQuote.expiry(self.quote_ttl_s),
            raw={"dstAmount": str(result.dst_amount), "feeAmount": str(result.fee_amount), "gasUsd": str(result.gas_usd_raw)},
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Execution
    # ─────────────────────────────────────────────────────────────────────────

    async def execute(self, quote: BridgeQuote) -> BridgeResult:
        if not self.wallet.is_connected:
            raise InvalidRequest("Connect a wallet before bridging")
        self._require_current(quote)

        primary = (
            (lambda: self._hosted_execute(quote))
            if quote.path == BridgePath.HOSTED and self.hosted is not None
            else None
        )
        outcome = await run_with_fallback(
            primary,
            lambda: self._onchain_execute(quote),
            terminal=ExecuteFailed,
            operation="execute",
        )

        # Consumed: only this exact quote is cleared
        if self._current_quote is not None and self._current_quote.quote_id == quote.quote_id:
            self._current_quote = None
        self._logger.info("Bridge executed via %s, tracking id %s", outcome.path.value, outcome.value.tracking_id)
        return outcome.value

    async def _hosted_execute(self, quote: BridgeQuote) -> BridgeResult:
        request = quote.request
        data = await self.hosted.bridge(
            from_chain=self._chain_label(request.source_chain_id),
            to_chain=self._chain_label(request.destination_chain_id),
            token=request.token.symbol,
            amount=request.amount_str,
            recipient=request.recipient,
            quote_id=quote.quote_id,
        )
        tracking_id = str(data.get("trackingId") or data.get("txHash"))
        return BridgeResult(
            tracking_id=tracking_id,
            path=BridgePath.HOSTED,
            quote_id=quote.quote_id,
            tx_hash=data.get("txHash"),
        )

    async def _onchain_execute(self, quote: BridgeQuote) -> BridgeResult:
        request = quote.request
        chain = self.registry.require(request.source_chain_id)
        router = self._router_for(chain)
        owner = self.wallet.signer.address

        if self.wallet.chain_id != chain.chain_id:
            await self.wallet.switch_chain(chain.chain_id)

        fee_wei = quote.fee_wei
        if fee_wei is None:
            # Hosted quotes carry no router fee; read it before building the call
            fee_wei = (
                await router.quote_bridge(
                    request.token.address,
                    request.raw_amount,
                    request.destination_chain_id,
                    request.recipient,
                )
            ).fee_amount

        is_native = request.token.is_native
        value = fee_wei + (request.raw_amount if is_native else 0)
        executor = self._executor_factory(router.rpc)

        if not is_native:
            await self._ensure_allowance(router, executor, chain, request, owner, bridge_value=value)

        tx = PreparedTransaction(
            chain_id=chain.chain_id,
            from_address=owner,
            to_address=router.address,
            data=router.bridge_token_calldata(
                request.token.address,
                request.raw_amount,
                request.destination_chain_id,
                request.recipient,
            ),
            value=value,
            description=f"Bridge {request.amount_str} {request.token.symbol} to chain {request.destination_chain_id}",
        )
        receipt_hash, gas = await self._guarded_send(executor, router.rpc, chain, tx)
        return BridgeResult(
            tracking_id=receipt_hash,
            path=BridgePath.ONCHAIN,
            quote_id=quote.quote_id,
            tx_hash=receipt_hash,
            gas=gas,
        )

    async def _ensure_allowance(
        self,
        router: RouterContract,
        executor: TransactionExecutor,
        chain: Chain,
        request: BridgeRequest,
        owner: str,
        bridge_value: int,
    ) -> None:
        """Approve the router when needed.

        The balance check for the approve also covers the bridge call that
        follows (its value plus BRIDGE_GAS_RESERVE gas at the approve's price),
        so nothing is submitted when the pair cannot complete.
        """
        allowance = await router.allowance(request.token.address, owner)
        if allowance >= request.raw_amount:
            return
        self._logger.info("Approving router %s for %s %s", router.address, request.amount_str, request.token.symbol)
        approve = PreparedTransaction(
            chain_id=chain.chain_id,
            from_address=owner,
            to_address=request.token.address,
            data=router.approve_calldata(request.raw_amount),
            description=f"Approve {request.token.symbol} for bridge router",
        )
        await self._guarded_send(
            executor,
            router.rpc,
            chain,
            approve,
            reserve=lambda gas: bridge_value + int(BRIDGE_GAS_RESERVE * gas.gas_price_wei * self.gas_safety_margin),
        )

    async def _guarded_send(
        self,
        executor: TransactionExecutor,
        rpc: JsonRpcClient,
        chain: Chain,
        tx: PreparedTransaction,
        reserve: Optional[Callable[[GasEstimate], int]] = None,
    ) -> Tuple[str, GasEstimate]:
        """Estimate, check the gas balance, send and wait for confirmation.

        ``reserve`` adds wei that must remain after this transaction for a
        follow-up one.
        """

        gas = await executor.estimate_gas(tx)
        native_price = await self.prices.native_price(chain.chain_id)
        gas.estimated_cost_usd = float(from_raw_amount(gas.estimated_cost_wei, chain.native_decimals)) * native_price

        balance = await rpc.get_balance(tx.from_address)
        required = gas.required_balance_wei(self.gas_safety_margin, tx.value)
        if reserve is not None:
            required += reserve(gas)
        if balance < required:
            raise InsufficientGasBalance(
                f"Not enough {chain.symbol} on {chain.name} to cover gas "
                f"(need {from_raw_amount(required, chain.native_decimals)}, have {from_raw_amount(balance, chain.native_decimals)})",
                required_wei=required,
                available_wei=balance,
                chain_id=chain.chain_id,
            )

        tx.gas_estimate = gas
        tx_hash = await self.wallet.send_transaction(tx.to_request())
        receipt = await executor.wait_for_receipt(tx_hash, timeout_s=self.confirmation_timeout_s)
        if not receipt.succeeded:
            raise ExecuteFailed(
                f"Transaction {tx_hash} {receipt.status.value}: {receipt.error}",
                chain_id=chain.chain_id,
                details={"tx_hash": tx_hash},
            )
        return tx_hash, gas

    def state(self) -> Dict[str, Any]:
        return {
            "generation": self._generation,
            "current_quote": self._current_quote.to_dict() if self._current_quote else None,
        }
