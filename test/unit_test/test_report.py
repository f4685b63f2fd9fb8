"""
Test quote report lines
"""

import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from permit_swap.modules import report
from permit_swap.types import (
    ExecutableQuote,
    QuoteTransaction,
    Route,
    Fill,
    TokenMetadata,
    TokenTaxes,
    IntegratorFee,
)

USDC = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"


def make_quote(**kwargs) -> ExecutableQuote:
    return ExecutableQuote(transaction=QuoteTransaction(to=USDC, data=b"\xaa"), **kwargs)


def test_liquidity_sources():
    """Test one line per fill"""
    print("Testing liquidity sources...")

    route = Route(fills=[Fill("Uniswap_V3", 6000), Fill("Aerodrome", 4000)])
    assert report.liquidity_sources(route) == [
        "2 Sources",
        "Uniswap_V3: 60.00%",
        "Aerodrome: 40.00%",
    ]
    assert report.liquidity_sources(Route()) == []

    print("  liquidity sources: PASSED")


def test_token_taxes_skip_zero():
    """Test zero and negative taxes are not reported"""
    print("Testing token taxes...")

    metadata = TokenMetadata(
        buy_token=TokenTaxes(buy_tax_bps=0, sell_tax_bps=-5),
        sell_token=TokenTaxes(buy_tax_bps=0, sell_tax_bps=150),
    )
    assert report.token_taxes(metadata) == ["Sell Token Sell Tax: 1.50%"]
    assert report.token_taxes(TokenMetadata()) == []

    print("  token taxes: PASSED")


def test_affiliate_fee():
    """Test affiliate fee in buy token units"""
    print("Testing affiliate fee...")

    quote = make_quote(affiliate_fee=IntegratorFee(amount=2_500_000, token=USDC))
    assert report.affiliate_fee(quote, 6, "USDC") == ["Affiliate Fee: 2.5 USDC"]
    assert report.affiliate_fee(make_quote(), 6, "USDC") == []

    # rate only, e.g. a quote without an integratorFee block
    assert report.affiliate_fee(make_quote(affiliate_fee_bps=100), 6, "USDC") == ["Affiliate Fee: 1.00%"]
    both = make_quote(affiliate_fee=IntegratorFee(amount=2_500_000, token=USDC), affiliate_fee_bps=25)
    assert report.affiliate_fee(both, 6, "USDC") == ["Affiliate Fee: 2.5 USDC (0.25%)"]
    assert report.affiliate_fee(make_quote(affiliate_fee_bps=0), 6, "USDC") == []

    print("  affiliate fee: PASSED")


def test_trade_surplus():
    """Test surplus reported only when positive"""
    print("Testing trade surplus...")

    assert report.trade_surplus(make_quote(trade_surplus=1_000_000), 6, "USDC") == [
        "Trade Surplus Collected: 1 USDC"
    ]
    assert report.trade_surplus(make_quote(trade_surplus=0), 6, "USDC") == []

    print("  trade surplus: PASSED")


def test_summarize_quote():
    """Test full report order"""
    print("Testing summarize_quote...")

    quote = make_quote(
        route=Route(fills=[Fill("Aerodrome", 10000)]),
        affiliate_fee=IntegratorFee(amount=1_000_000, token=USDC),
        affiliate_fee_bps=100,
        trade_surplus=500_000,
    )
    assert report.summarize_quote(quote, 6, "USDC") == [
        "1 Sources",
        "Aerodrome: 100.00%",
        "Affiliate Fee: 1 USDC (1.00%)",
        "Trade Surplus Collected: 0.5 USDC",
    ]

    print("  summarize_quote: PASSED")


def main():
    """Run all tests"""
    print("=" * 60)
    print("Report Tests")
    print("=" * 60)

    test_liquidity_sources()
    test_token_taxes_skip_zero()
    test_affiliate_fee()
    test_trade_surplus()
    test_summarize_quote()

    print("=" * 60)
    print("All report tests PASSED!")
    print("=" * 60)


if __name__ == "__main__":
    main()
