"""
Swap Module

Runs one swap through the quote-to-settlement pipeline:

    price -> allowance -> quote -> permit binding -> settlement

Every stage finishes before the next one starts. A failing stage raises
and nothing after it runs.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable, Dict, Optional, Union

from web3 import Web3

from ..config import ApprovalPolicy, Config, config as global_config
from ..errors import ConfigurationError, QuoteError, TransactionError
from ..infra.erc20 import ERC20Token, WrappedNativeToken
from ..infra.evm_signer import ChainAccount, NonceManager, create_evm_signer, sign_and_send
from ..infra.correlation import CorrelationContext
from ..protocols.zeroex import ZeroExAPI, PermitBinder
from ..types import (
    SwapRequest,
    SwapOutcome,
    PriceQuote,
    ExecutableQuote,
    TxResult,
    WRAPPED_NATIVE,
    is_native_token,
    resolve_token_address,
    to_base_units,
)
from .allowance import AllowanceCoordinator
from .settlement import SettlementSubmitter
from . import report

logger = logging.getLogger(__name__)

# Decimals of the native asset, used for display only
_NATIVE_DISPLAY_DECIMALS = 18


class SwapPipeline:
    """
    Quote-to-settlement pipeline for a single account

    Usage:
        pipeline = SwapPipeline.from_config()
        request = pipeline.build_request("WETH", "USDC", Decimal("0.1"))
        outcome = pipeline.run(request)
        print(outcome.tx_hash)

    Only one pipeline per account should be in flight at a time: the
    nonce manager serializes nonces within this process but not across
    processes.
    """

    def __init__(
        self,
        account: ChainAccount,
        api: ZeroExAPI,
        chain_id: int,
        web3: Optional["Web3"] = None,
        approval_policy: ApprovalPolicy = ApprovalPolicy.UNLIMITED,
        receipt_timeout: int = 120,
        explorer_tx_url: Optional[str] = None,
        affiliate_fee_bps: int = 0,
        surplus_collection: bool = False,
        nonce_manager: Optional[NonceManager] = None,
        token_factory: Optional[Callable[[str], ERC20Token]] = None,
    ):
        """
        Args:
            account: Signing identity of the taker
            api: 0x API client
            chain_id: EVM chain ID
            web3: Web3 instance used to build token contracts
            approval_policy: Allowance amount policy
            receipt_timeout: Seconds to wait for approval/wrap receipts
            explorer_tx_url: Block explorer prefix for transaction links
            affiliate_fee_bps: Default affiliate fee for build_request
            surplus_collection: Default surplus collection for build_request
            nonce_manager: Nonce allocator (global manager if None)
            token_factory: Builds token contracts by address (tests inject fakes)
        """
        if token_factory is None and web3 is None:
            raise ConfigurationError.missing("web3 (or token_factory)")

        self._account = account
        self._api = api
        self._chain_id = chain_id
        self._web3 = web3
        self._receipt_timeout = receipt_timeout
        self._affiliate_fee_bps = affiliate_fee_bps
        self._surplus_collection = surplus_collection
        self._nonce_manager = nonce_manager
        self._token_factory = token_factory or self._default_token
        self._tokens: Dict[str, ERC20Token] = {}

        self._allowance = AllowanceCoordinator(
            account,
            policy=approval_policy,
            receipt_timeout=receipt_timeout,
            nonce_manager=nonce_manager,
        )
        self._binder = PermitBinder()
        self._submitter = SettlementSubmitter(
            chain_id,
            explorer_tx_url=explorer_tx_url,
            nonce_manager=nonce_manager,
        )

    @classmethod
    def from_config(cls, cfg: Optional[Config] = None) -> "SwapPipeline":
        """
        Build a pipeline from configuration

        Raises:
            ConfigurationError: If a required secret is missing
        """
        cfg = cfg or global_config
        cfg.validate()

        signer = create_evm_signer(
            cfg.signer.private_key,
            cfg.chain.rpc_url,
            chain_id=cfg.chain.chain_id,
            rpc_timeout=cfg.chain.rpc_timeout,
            gas_limit_multiplier=cfg.chain.gas_limit_multiplier,
        )
        api = ZeroExAPI(
            api_key=cfg.zeroex.api_key,
            base_url=cfg.zeroex.base_url,
            api_version=cfg.zeroex.api_version,
            timeout=cfg.zeroex.timeout,
        )
        return cls(
            signer,
            api,
            chain_id=cfg.chain.chain_id,
            web3=signer.web3,
            approval_policy=cfg.swap.policy,
            receipt_timeout=cfg.swap.approval_receipt_timeout,
            explorer_tx_url=cfg.chain.explorer_tx_url,
            affiliate_fee_bps=cfg.swap.affiliate_fee_bps,
            surplus_collection=cfg.swap.surplus_collection,
        )

    @property
    def account(self) -> ChainAccount:
        return self._account

    @property
    def chain_id(self) -> int:
        return self._chain_id

    def _default_token(self, address: str) -> ERC20Token:
        wrapped = WRAPPED_NATIVE.get(self._chain_id)
        if wrapped and wrapped.lower() == address.lower():
            return WrappedNativeToken(self._web3, address)
        return ERC20Token(self._web3, address)

    def token(self, address: str) -> ERC20Token:
        """Token contract for an address, one instance per address"""
        key = address.lower()
        if key not in self._tokens:
            self._tokens[key] = self._token_factory(address)
        return self._tokens[key]

    def build_request(
        self,
        sell_token: str,
        buy_token: str,
        amount: Union[Decimal, str, int],
        affiliate_fee_bps: Optional[int] = None,
        surplus_collection: Optional[bool] = None,
    ) -> SwapRequest:
        """
        Build a swap request from human-readable inputs

        The sell amount is scaled by the decimals read from the sell token
        contract.

        Args:
            sell_token: Symbol or address of the token to sell
            buy_token: Symbol or address of the token to buy
            amount: Amount of sell token in token units
            affiliate_fee_bps: Overrides the configured affiliate fee
            surplus_collection: Overrides the configured surplus collection

        Returns:
            SwapRequest
        """
        sell_address = resolve_token_address(sell_token, self._chain_id)
        buy_address = resolve_token_address(buy_token, self._chain_id)

        if is_native_token(sell_address):
            raise ConfigurationError.invalid(
                "sell_token", "native asset cannot be sold through Permit2; sell the wrapped token instead"
            )
        if sell_address.lower() == buy_address.lower():
            raise ConfigurationError.invalid("buy_token", "sell and buy token are the same")

        decimals = self.token(sell_address).decimals()
        sell_amount = to_base_units(amount, decimals)

        return SwapRequest(
            chain_id=self._chain_id,
            sell_token=sell_address,
            buy_token=buy_address,
            sell_amount=sell_amount,
            taker_address=self._account.get_address(),
            affiliate_fee_bps=self._affiliate_fee_bps if affiliate_fee_bps is None else affiliate_fee_bps,
            surplus_collection_enabled=self._surplus_collection if surplus_collection is None else surplus_collection,
        )

    def wrap_native(self, request: SwapRequest) -> Optional[TxResult]:
        """
        Wrap native asset to cover the sell amount when selling the wrapped token

        Returns:
            Confirmed deposit, or None when the balance already suffices or
            the sell token is not the wrapped native token

        Raises:
            TransactionError: Deposit reverted or was not confirmed
        """
        token = self.token(request.sell_token)
        if not isinstance(token, WrappedNativeToken):
            return None

        owner = self._account.get_address()
        balance = token.balance_of(owner)
        if balance >= request.sell_amount:
            return None

        shortfall = request.sell_amount - balance
        logger.info(f"Wrapping {shortfall} wei of native asset into {token.address}")
        result = sign_and_send(
            self._account,
            token.build_deposit(shortfall, owner),
            wait_for_receipt=True,
            timeout=self._receipt_timeout,
            nonce_manager=self._nonce_manager,
        )
        if not result.is_success:
            raise TransactionError.reverted(result.tx_hash, "Wrap")
        logger.info(f"Wrapped native asset: {result.tx_hash}")
        return result

    def _check_price(self, request: SwapRequest, price: PriceQuote, cid: str) -> None:
        if not price.liquidity_available:
            raise QuoteError.no_liquidity(request.sell_token, request.buy_token)

        issues = price.issues
        if issues.balance is not None:
            logger.warning(
                f"[{cid}] Balance of {issues.balance.token} is {issues.balance.actual}, "
                f"swap needs {issues.balance.expected}"
            )
        if issues.simulation_incomplete:
            logger.warning(f"[{cid}] Aggregator could not fully simulate the swap")
        if price.estimated_price_impact is not None:
            logger.info(f"[{cid}] Estimated price impact: {price.estimated_price_impact}%")

    def _report(self, request: SwapRequest, quote: ExecutableQuote, cid: str) -> None:
        if is_native_token(request.buy_token):
            decimals, symbol = _NATIVE_DISPLAY_DECIMALS, None
        else:
            buy_token = self.token(request.buy_token)
            decimals, symbol = buy_token.decimals(), buy_token.symbol()

        for line in report.summarize_quote(quote, decimals, symbol):
            logger.info(f"[{cid}] {line}")

    def run(self, request: SwapRequest, wrap: bool = False) -> SwapOutcome:
        """
        Execute one swap

        Args:
            request: Swap parameters
            wrap: Wrap native asset first if the wrapped-token balance is short

        Returns:
            SwapOutcome with the broadcast settlement transaction

        Raises:
            QuoteError: Price or quote could not be fetched, or no liquidity
            TransactionError: Approval, wrap or settlement broadcast failed
            SignerError: Permit or transaction signing failed
            BindingError: Quote had a permit but no calldata or signature
        """
        with CorrelationContext("swap") as cid:
            logger.info(
                f"[{cid}] Swap {request.sell_amount} of {request.sell_token} -> "
                f"{request.buy_token} on chain {request.chain_id} for {request.taker_address}"
            )

            if wrap:
                self.wrap_native(request)

            price = self._api.get_price(request)
            self._check_price(request, price, cid)

            approval = self._allowance.ensure_allowance(
                price,
                self.token(request.sell_token),
                request.sell_amount,
            )

            quote = self._api.get_quote(request)
            self._report(request, quote, cid)

            bound = self._binder.bind(quote, self._account)
            settlement = self._submitter.submit(bound, self._account)

            return SwapOutcome(
                request=request,
                settlement=settlement,
                approval=approval,
                permit_signed=bound.permit_signed,
            )

    def close(self):
        self._api.close()

    def __enter__(self) -> "SwapPipeline":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
