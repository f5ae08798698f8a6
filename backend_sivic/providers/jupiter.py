"""
Jupiter adapter: swap-route simulation used as a tradability check.

Quotes a buy (USDC -> token) and a sell (token -> USDC) and reads each
route's price impact as slippage. A token that can be bought but not sold,
or whose sell impact is extreme or far above the buy impact, is reported
as a honeypot.

A missing route is data: Jupiter answers HTTP 400 (or an empty route plan)
when it cannot route a pair. Any other failure (transport error, timeout,
5xx, malformed body) is not evidence about the token, so `slippage()`
returns None and the caller treats the check as unknown.
"""

from __future__ import annotations

import httpx

from backend_sivic.core.exceptions import ProviderError
from backend_sivic.providers.base import ProviderClient
from backend_sivic.providers.models import SlippageReport, SwapQuote
from backend_sivic.sivic_logging import get_logger, short_address

logger = get_logger(__name__)

USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
BUY_AMOUNT_USDC = "100000000"  # 100 USDC in base units
SELL_AMOUNT_TOKEN = "1000000000"  # 1e9 token base units
DEFAULT_SLIPPAGE_BPS = 50
NO_ROUTE_STATUS = 400

# Honeypot heuristics on sell-side price impact (percent)
EXTREME_SELL_IMPACT = 50.0
SELL_TO_BUY_RATIO = 3.0
SELL_RATIO_FLOOR = 10.0


class JupiterClient(ProviderClient):
    name = "jupiter"

    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: str,
        api_key: str = "",
        *,
        timeout_sec: float = 10.0,
    ) -> None:
        headers = {"x-api-key": api_key} if api_key else None
        super().__init__(http, base_url, headers=headers, timeout_sec=timeout_sec)

    async def quote(
        self,
        input_mint: str,
        output_mint: str,
        amount: str,
        slippage_bps: int = DEFAULT_SLIPPAGE_BPS,
    ) -> SwapQuote | None:
        """
        Route quote, or None when Jupiter has no route for the pair.

        Raises ProviderError for every other failure, so callers can tell a
        rejected route from an unreachable service.
        """
        path = "/swap/v1/quote"
        try:
            payload = await self._fetch(
                "GET",
                path,
                params={
                    "inputMint": input_mint,
                    "outputMint": output_mint,
                    "amount": amount,
                    "slippageBps": str(slippage_bps),
                },
            )
        except ProviderError as e:
            if e.status_code == NO_ROUTE_STATUS:
                return None
            raise
        quote = self._validate(SwapQuote, payload)
        if quote is None:
            raise ProviderError(self.name, f"malformed quote for {path}")
        if quote.route_plan is not None and not quote.route_plan:
            return None
        return quote

    async def slippage(self, address: str) -> SlippageReport | None:
        """Buy/sell simulation; None when either quote failed for a non-route reason."""
        short = short_address(address)
        try:
            buy = await self.quote(USDC_MINT, address, BUY_AMOUNT_USDC)
            sell = await self.quote(address, USDC_MINT, SELL_AMOUNT_TOKEN)
        except ProviderError as e:
            logger.warning("jupiter_quote_failed", address=short, error=e.message, status=e.status_code)
            return None
        report = evaluate_routes(buy, sell)
        logger.info(
            "jupiter_slippage",
            address=short,
            buy_slippage=report.buy_slippage_percent,
            sell_slippage=report.sell_slippage_percent,
            honeypot=report.is_honeypot,
            tradeable=report.tradeable,
        )
        return report


def evaluate_routes(buy: SwapQuote | None, sell: SwapQuote | None) -> SlippageReport:
    """
    Turn a buy/sell quote pair into a SlippageReport.

    None means Jupiter rejected that route. Only a rejected sell after a
    successful buy is a honeypot; no buy route at all means the token is
    simply not tradeable through Jupiter.
    """
    if buy is None:
        return SlippageReport(
            sell_slippage_percent=sell.price_impact_pct if sell else 0.0,
            tradeable=False,
            tradeable_reason="No buy route available",
        )
    buy_slip = buy.price_impact_pct
    if sell is None:
        return SlippageReport(
            buy_slippage_percent=buy_slip,
            is_honeypot=True,
            honeypot_reason="Can buy but cannot sell (no sell route)",
            tradeable=False,
            tradeable_reason="No sell route available",
        )

    sell_slip = sell.price_impact_pct
    honeypot_reason: str | None = None
    if sell_slip > EXTREME_SELL_IMPACT:
        honeypot_reason = f"Extreme sell slippage: {sell_slip:.1f}%"
    elif sell_slip > buy_slip * SELL_TO_BUY_RATIO and sell_slip > SELL_RATIO_FLOOR:
        honeypot_reason = (
            f"Sell slippage ({sell_slip:.1f}%) much higher than buy ({buy_slip:.1f}%)"
        )
    return SlippageReport(
        buy_slippage_percent=buy_slip,
        sell_slippage_percent=sell_slip,
        is_honeypot=honeypot_reason is not None,
        honeypot_reason=honeypot_reason,
    )
