"""
Human-readable summaries of a quote

Presentation only. Zero or negative values are left out instead of
being reported.
"""

from decimal import Decimal
from typing import List, Optional

from ..types import ExecutableQuote, Route, TokenMetadata


def _units(amount: int, decimals: int) -> Decimal:
    return Decimal(amount).scaleb(-decimals).normalize()


def _percent(bps: int) -> str:
    return f"{Decimal(bps) / 100:.2f}%"


def liquidity_sources(route: Route) -> List[str]:
    """One line per fill, e.g. 'Uniswap_V3: 60.00%'"""
    if not route.fills:
        return []
    lines = [f"{len(route.fills)} Sources"]
    lines.extend(f"{fill.source}: {_percent(fill.proportion_bps)}" for fill in route.fills)
    return lines


def token_taxes(metadata: TokenMetadata) -> List[str]:
    lines = []
    buy, sell = metadata.buy_token, metadata.sell_token
    if buy.buy_tax_bps > 0:
        lines.append(f"Buy Token Buy Tax: {_percent(buy.buy_tax_bps)}")
    if buy.sell_tax_bps > 0:
        lines.append(f"Buy Token Sell Tax: {_percent(buy.sell_tax_bps)}")
    if sell.buy_tax_bps > 0:
        lines.append(f"Sell Token Buy Tax: {_percent(sell.buy_tax_bps)}")
    if sell.sell_tax_bps > 0:
        lines.append(f"Sell Token Sell Tax: {_percent(sell.sell_tax_bps)}")
    return lines


def affiliate_fee(quote: ExecutableQuote, decimals: int, symbol: Optional[str] = None) -> List[str]:
    """Fee amount from the integrator fee block, rate from affiliateFeeBps"""
    fee = quote.affiliate_fee
    parts = []
    if fee is not None and fee.amount > 0:
        parts.append(f"{_units(fee.amount, decimals):f} {symbol or fee.token}")
    if quote.affiliate_fee_bps > 0:
        rate = _percent(quote.affiliate_fee_bps)
        parts.append(f"({rate})" if parts else rate)
    if not parts:
        return []
    return [f"Affiliate Fee: {' '.join(parts)}"]


def trade_surplus(quote: ExecutableQuote, decimals: int, symbol: Optional[str] = None) -> List[str]:
    if quote.trade_surplus <= 0:
        return []
    return [f"Trade Surplus Collected: {_units(quote.trade_surplus, decimals):f} {symbol or ''}".rstrip()]


def summarize_quote(quote: ExecutableQuote, buy_decimals: int, buy_symbol: Optional[str] = None) -> List[str]:
    """All report lines for a quote, in display order"""
    return (
        liquidity_sources(quote.route)
        + token_taxes(quote.token_metadata)
        + affiliate_fee(quote, buy_decimals, buy_symbol)
        + trade_surplus(quote, buy_decimals, buy_symbol)
    )
