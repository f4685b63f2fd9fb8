"""
Aggregator response records

The 0x price and quote endpoints answer with loosely shaped JSON. These
records pin the fields the pipeline depends on, with optional parts made
explicit. Parsing failures raise ValueError; the API client turns them
into QuoteError.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from web3 import Web3


def _require(data: Dict[str, Any], key: str) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"expected an object containing '{key}', got {type(data).__name__}")
    value = data.get(key)
    if value is None:
        raise ValueError(f"missing field '{key}'")
    return value


def _to_int(value: Any, name: str, default: Optional[int] = None) -> Optional[int]:
    if value is None or value == "":
        return default
    try:
        if isinstance(value, str) and value.startswith("0x"):
            return int(value, 16)
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"field '{name}' is not an integer: {value!r}")


def _to_decimal(value: Any, name: str) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"field '{name}' is not a number: {value!r}")


def _to_bytes(value: Any, name: str) -> bytes:
    if value is None or value == "":
        return b""
    try:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        return Web3.to_bytes(hexstr=value)
    except (TypeError, ValueError):
        raise ValueError(f"field '{name}' is not hex data: {value!r}")


@dataclass(frozen=True)
class AllowanceIssue:
    """
    Missing allowance reported by the aggregator

    Attributes:
        spender: Contract that must be approved (Permit2 on the permit2 flow)
        actual: Allowance the taker currently grants to the spender
    """
    spender: str
    actual: int = 0

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "AllowanceIssue":
        return cls(
            spender=_require(data, "spender"),
            actual=_to_int(data.get("actual", data.get("amount")), "issues.allowance.actual", 0),
        )


@dataclass(frozen=True)
class BalanceIssue:
    """Taker balance below the sell amount"""
    token: str
    actual: int
    expected: int

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "BalanceIssue":
        return cls(
            token=_require(data, "token"),
            actual=_to_int(data.get("actual"), "issues.balance.actual", 0),
            expected=_to_int(data.get("expected"), "issues.balance.expected", 0),
        )


@dataclass(frozen=True)
class QuoteIssues:
    """Issues block shared by price and quote responses"""
    allowance: Optional[AllowanceIssue] = None
    balance: Optional[BalanceIssue] = None
    simulation_incomplete: bool = False

    @classmethod
    def from_response(cls, data: Optional[Dict[str, Any]]) -> "QuoteIssues":
        if not data:
            return cls()
        allowance = data.get("allowance")
        balance = data.get("balance")
        return cls(
            allowance=AllowanceIssue.from_response(allowance) if allowance else None,
            balance=BalanceIssue.from_response(balance) if balance else None,
            simulation_incomplete=bool(data.get("simulationIncomplete", False)),
        )


@dataclass(frozen=True)
class PriceQuote:
    """
    Indicative price (GET /price)

    Only used to decide whether an allowance transaction is needed before
    asking for an executable quote.
    """
    liquidity_available: bool
    issues: QuoteIssues = field(default_factory=QuoteIssues)
    estimated_price_impact: Optional[Decimal] = None
    buy_amount: int = 0
    sell_amount: int = 0
    min_buy_amount: int = 0

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "PriceQuote":
        liquidity = _require(data, "liquidityAvailable")
        return cls(
            liquidity_available=bool(liquidity),
            issues=QuoteIssues.from_response(data.get("issues")),
            estimated_price_impact=_to_decimal(data.get("estimatedPriceImpact"), "estimatedPriceImpact"),
            buy_amount=_to_int(data.get("buyAmount"), "buyAmount", 0),
            sell_amount=_to_int(data.get("sellAmount"), "sellAmount", 0),
            min_buy_amount=_to_int(data.get("minBuyAmount"), "minBuyAmount", 0),
        )


@dataclass(frozen=True)
class QuoteTransaction:
    """Transaction the settlement contract expects, before permit binding"""
    to: str
    data: bytes
    value: int = 0
    gas: Optional[int] = None
    gas_price: Optional[int] = None

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "QuoteTransaction":
        return cls(
            to=_require(data, "to"),
            data=_to_bytes(data.get("data"), "transaction.data"),
            value=_to_int(data.get("value"), "transaction.value", 0),
            gas=_to_int(data.get("gas"), "transaction.gas"),
            gas_price=_to_int(data.get("gasPrice"), "transaction.gasPrice"),
        )


@dataclass(frozen=True)
class Permit2Payload:
    """
    Permit2 authorization to sign

    Attributes:
        eip712: EIP-712 typed data (types, domain, primaryType, message),
            forwarded untouched to the signer
        hash: EIP-712 hash precomputed by the aggregator
    """
    eip712: Dict[str, Any]
    hash: Optional[str] = None

    @classmethod
    def from_response(cls, data: Optional[Dict[str, Any]]) -> Optional["Permit2Payload"]:
        if data is None:
            return None
        # a permit2 block that cannot be signed must not fall through to unsigned calldata
        eip712 = data.get("eip712") if isinstance(data, dict) else None
        if not isinstance(eip712, dict) or not eip712:
            raise ValueError("permit2 block present without eip712 typed data")
        return cls(eip712=eip712, hash=data.get("hash"))


@dataclass(frozen=True)
class Fill:
    """One liquidity source in the route"""
    source: str
    proportion_bps: int
    from_token: Optional[str] = None
    to_token: Optional[str] = None


@dataclass(frozen=True)
class Route:
    fills: List[Fill] = field(default_factory=list)

    @classmethod
    def from_response(cls, data: Optional[Dict[str, Any]]) -> "Route":
        if not data:
            return cls()
        fills = [
            Fill(
                source=_require(fill, "source"),
                proportion_bps=_to_int(fill.get("proportionBps"), "route.fills.proportionBps", 0),
                from_token=fill.get("from"),
                to_token=fill.get("to"),
            )
            for fill in data.get("fills") or []
        ]
        return cls(fills=fills)


@dataclass(frozen=True)
class TokenTaxes:
    """Transfer taxes of a fee-on-transfer token, in basis points"""
    buy_tax_bps: int = 0
    sell_tax_bps: int = 0

    @classmethod
    def from_response(cls, data: Optional[Dict[str, Any]], name: str) -> "TokenTaxes":
        if not data:
            return cls()
        return cls(
            buy_tax_bps=_to_int(data.get("buyTaxBps"), f"{name}.buyTaxBps", 0),
            sell_tax_bps=_to_int(data.get("sellTaxBps"), f"{name}.sellTaxBps", 0),
        )


@dataclass(frozen=True)
class TokenMetadata:
    buy_token: TokenTaxes = field(default_factory=TokenTaxes)
    sell_token: TokenTaxes = field(default_factory=TokenTaxes)

    @classmethod
    def from_response(cls, data: Optional[Dict[str, Any]]) -> "TokenMetadata":
        if not data:
            return cls()
        return cls(
            buy_token=TokenTaxes.from_response(data.get("buyToken"), "tokenMetadata.buyToken"),
            sell_token=TokenTaxes.from_response(data.get("sellToken"), "tokenMetadata.sellToken"),
        )


@dataclass(frozen=True)
class IntegratorFee:
    """Affiliate fee charged on the trade"""
    amount: int
    token: str
    type: str = "volume"

    @classmethod
    def from_response(cls, data: Optional[Dict[str, Any]]) -> Optional["IntegratorFee"]:
        if not data:
            return None
        return cls(
            amount=_to_int(data.get("amount"), "fees.integratorFee.amount", 0),
            token=_require(data, "token"),
            type=data.get("type") or "volume",
        )


@dataclass(frozen=True)
class ExecutableQuote:
    """
    Firm quote (GET /quote)

    The transaction calldata is stored as received. Binding the permit
    signature produces a separate BoundTransaction and never touches this
    record.
    """
    transaction: QuoteTransaction
    permit2: Optional[Permit2Payload] = None
    route: Route = field(default_factory=Route)
    token_metadata: TokenMetadata = field(default_factory=TokenMetadata)
    affiliate_fee: Optional[IntegratorFee] = None
    affiliate_fee_bps: int = 0
    trade_surplus: int = 0
    issues: QuoteIssues = field(default_factory=QuoteIssues)
    liquidity_available: bool = True
    buy_token: Optional[str] = None
    sell_token: Optional[str] = None
    buy_amount: int = 0
    sell_amount: int = 0
    min_buy_amount: int = 0

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "ExecutableQuote":
        transaction = QuoteTransaction.from_response(_require(data, "transaction"))
        fees = data.get("fees") or {}
        return cls(
            transaction=transaction,
            permit2=Permit2Payload.from_response(data.get("permit2")),
            route=Route.from_response(data.get("route")),
            token_metadata=TokenMetadata.from_response(data.get("tokenMetadata")),
            affiliate_fee=IntegratorFee.from_response(fees.get("integratorFee")),
            affiliate_fee_bps=_to_int(data.get("affiliateFeeBps"), "affiliateFeeBps", 0),
            trade_surplus=_to_int(data.get("tradeSurplus"), "tradeSurplus", 0),
            issues=QuoteIssues.from_response(data.get("issues")),
            liquidity_available=bool(data.get("liquidityAvailable", True)),
            buy_token=data.get("buyToken"),
            sell_token=data.get("sellToken"),
            buy_amount=_to_int(data.get("buyAmount"), "buyAmount", 0),
            sell_amount=_to_int(data.get("sellAmount"), "sellAmount", 0),
            min_buy_amount=_to_int(data.get("minBuyAmount"), "minBuyAmount", 0),
        )

    @property
    def requires_permit(self) -> bool:
        return self.permit2 is not None


@dataclass(frozen=True)
class BoundTransaction:
    """
    Quote transaction after the permit signature has been appended

    Attributes:
        to: Settlement contract
        data: Calldata; original || uint256 signature length || signature
            when a permit was signed, the original calldata otherwise
        value: Native value in wei
        gas: Gas limit from the quote, if any
        gas_price: Gas price from the quote, if any
        signature: Permit signature, None for routes without a permit
    """
    to: str
    data: bytes
    value: int = 0
    gas: Optional[int] = None
    gas_price: Optional[int] = None
    signature: Optional[bytes] = None

    @property
    def permit_signed(self) -> bool:
        return self.signature is not None
