"""Client for the Jupiter quote, swap, price, and token-list APIs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Mapping

import httpx
import pydantic
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from solanize.core.config import SOL_MINT
from solanize.core.errors import NetworkError, QuoteError, TokenNotFoundError, TransactionError, ValidationError
from solanize.solana.transaction import parse_address

if TYPE_CHECKING:  # pragma: no cover
    from solanize.core.config import SolanizeConfig

logger = logging.getLogger(__name__)

SOL_DECIMALS = 9
DEFAULT_TOKEN_DECIMALS = 6
DEFAULT_SEARCH_LIMIT = 20


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class RoutePlanStep(_CamelModel):
    swap_info: dict[str, Any] = Field(default_factory=dict)
    percent: int | None = None

    @property
    def label(self) -> str:
        return str(self.swap_info.get("label", "?"))


class Quote(_CamelModel):
    """Priced, time-bounded proposal returned by `/quote`."""

    input_mint: str
    in_amount: str
    output_mint: str
    out_amount: str
    other_amount_threshold: str | None = None
    swap_mode: str = "ExactIn"
    slippage_bps: int = 0
    price_impact_pct: str = "0"
    route_plan: list[RoutePlanStep] = Field(default_factory=list)

    @property
    def out_amount_units(self) -> int:
        return int(self.out_amount)

    @property
    def price_impact(self) -> float:
        try:
            return float(self.price_impact_pct)
        except ValueError:
            return 0.0


class SwapTransaction(_CamelModel):
    swap_transaction: str
    last_valid_block_height: int | None = None
    prioritization_fee_lamports: int | None = None
    simulation_error: Any = None


class TokenInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    address: str
    symbol: str
    name: str
    decimals: int = DEFAULT_TOKEN_DECIMALS
    logo_uri: str | None = Field(default=None, alias="logoURI")
    tags: list[str] = Field(default_factory=list)
    daily_volume: float | None = None

    def matches(self, needle: str) -> bool:
        return (
            needle in self.symbol.lower()
            or needle in self.name.lower()
            or needle in self.address.lower()
        )


@dataclass(frozen=True)
class Price:
    mint: str
    symbol: str
    usd_price: float
    price_change_24h: float | None = None


GetFn = Callable[..., httpx.Response]
PostFn = Callable[..., httpx.Response]


@dataclass
class JupiterClient:
    """Thin wrapper around Jupiter's REST endpoints."""

    api_url: str
    price_api_url: str
    token_list_url: str
    slippage_bps: int = 50
    timeout: float = 15.0
    _get: GetFn | None = None
    _post: PostFn | None = None

    def __post_init__(self) -> None:
        if self._get is None:
            self._get = httpx.get
        if self._post is None:
            self._post = httpx.post

    @classmethod
    def from_config(cls, config: SolanizeConfig, **kwargs: Any) -> JupiterClient:
        return cls(
            api_url=config.jupiter.api_url.rstrip("/"),
            price_api_url=config.jupiter.price_api_url.rstrip("/"),
            token_list_url=config.jupiter.token_list_url,
            slippage_bps=config.jupiter.slippage_bps,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Token resolution
    # ------------------------------------------------------------------
    @staticmethod
    def resolve_mint(token: str, tokens: Mapping[str, str]) -> str:
        """Map a symbol from `tokens` (any case) or a raw mint address to a mint."""
        wanted = token.strip()
        for symbol, address in tokens.items():
            if symbol.lower() == wanted.lower():
                return address
        try:
            parse_address(wanted)
        except ValidationError as exc:
            raise TokenNotFoundError(f"Unknown token: {token}") from exc
        return wanted

    @staticmethod
    def display_symbol(token: str, tokens: Mapping[str, str]) -> str:
        """Return the table symbol for `token`, or the input unchanged when it is a raw mint."""
        wanted = token.strip()
        for symbol in tokens:
            if symbol.lower() == wanted.lower():
                return symbol
        return wanted

    def token_decimals(self, mint: str) -> int:
        if mint == SOL_MINT:
            return SOL_DECIMALS
        return DEFAULT_TOKEN_DECIMALS

    # ------------------------------------------------------------------
    # Quotes and swaps
    # ------------------------------------------------------------------
    def get_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount_units: int,
        slippage_bps: int | None = None,
    ) -> Quote:
        params = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(amount_units),
            "slippageBps": str(self.slippage_bps if slippage_bps is None else slippage_bps),
        }
        logger.info("Getting quote from Jupiter: %s -> %s", input_mint, output_mint)
        response = self._send(self._get, f"{self.api_url}/quote", params=params)
        if 400 <= response.status_code < 500:
            raise QuoteError(f"No route for {input_mint} -> {output_mint}: {_error_text(response)}")
        data = self._json(response, "quote")
        try:
            quote = Quote.model_validate(data)
        except pydantic.ValidationError as exc:
            raise QuoteError(f"Malformed quote response: {exc.error_count()} invalid field(s)") from exc
        if not quote.route_plan:
            raise QuoteError(f"No route for {input_mint} -> {output_mint}")
        return quote

    def get_swap_transaction(self, quote: Quote, user_public_key: str) -> SwapTransaction:
        payload = {
            "quoteResponse": quote.model_dump(by_alias=True, exclude_none=True),
            "userPublicKey": user_public_key,
            "wrapAndUnwrapSol": True,
            "dynamicComputeUnitLimit": True,
            "prioritizationFeeLamports": "auto",
        }
        logger.info("Getting swap transaction from Jupiter")
        response = self._send(self._post, f"{self.api_url}/swap", json=payload)
        if 400 <= response.status_code < 500:
            raise QuoteError(f"Swap request rejected: {_error_text(response)}")
        data = self._json(response, "swap")
        try:
            swap = SwapTransaction.model_validate(data)
        except pydantic.ValidationError as exc:
            raise NetworkError("Malformed swap response; missing swapTransaction") from exc
        if swap.simulation_error:
            raise TransactionError(f"Simulation failed: {swap.simulation_error}")
        return swap

    # ------------------------------------------------------------------
    # Prices and token metadata
    # ------------------------------------------------------------------
    def get_price(self, token: str, tokens: Mapping[str, str]) -> Price:
        mint = self.resolve_mint(token, tokens)
        logger.info("Getting price for token: %s", token)
        response = self._send(self._get, self.price_api_url, params={"ids": mint})
        data = self._json(response, "price")
        # Price v3 maps mint -> {"usdPrice": ..., "priceChange24h": ...}
        entry = data.get(mint) if isinstance(data, dict) else None
        if not isinstance(entry, dict) or entry.get("usdPrice") is None:
            raise TokenNotFoundError(f"Price not found for: {token}")
        return Price(
            mint=mint,
            symbol=self.display_symbol(token, tokens),
            usd_price=float(entry["usdPrice"]),
            price_change_24h=entry.get("priceChange24h"),
        )

    def token_list(self) -> list[TokenInfo]:
        logger.info("Fetching all tokens from Jupiter")
        response = self._send(self._get, self.token_list_url)
        data = self._json(response, "token list")
        if not isinstance(data, list):
            raise NetworkError("Malformed token list response")
        tokens: list[TokenInfo] = []
        for item in data:
            try:
                tokens.append(TokenInfo.model_validate(item))
            except pydantic.ValidationError:
                logger.debug("Skipping malformed token entry: %r", item)
        return tokens

    def search(self, query: str, *, limit: int = DEFAULT_SEARCH_LIMIT) -> list[TokenInfo]:
        """Case-insensitive match on symbol, name, or address; empty when nothing matches."""
        needle = query.strip().lower()
        logger.info("Searching tokens for: %s", query)
        matches = [token for token in self.token_list() if token.matches(needle)]
        matches.sort(
            key=lambda token: (
                token.symbol.lower() != needle,
                not token.symbol.lower().startswith(needle),
                token.symbol.lower(),
            )
        )
        return matches[:limit]

    def token_info(self, query: str) -> TokenInfo | None:
        results = self.search(query)
        wanted = query.strip().lower()
        for token in results:
            if token.symbol.lower() == wanted:
                return token
        for token in results:
            if token.address.lower() == wanted:
                return token
        return results[0] if results else None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _send(self, fn: Callable[..., httpx.Response] | None, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = fn(url, timeout=self.timeout, **kwargs)  # type: ignore[misc]
        except httpx.HTTPError as exc:
            raise NetworkError(f"Jupiter request failed: {exc}") from exc
        if response.status_code >= 500:
            raise NetworkError(f"Jupiter request failed: HTTP {response.status_code} {_error_text(response)}")
        return response

    @staticmethod
    def _json(response: httpx.Response, what: str) -> Any:
        if response.is_error:
            raise NetworkError(f"Failed to fetch {what}: HTTP {response.status_code} {_error_text(response)}")
        try:
            return response.json()
        except ValueError as exc:
            raise NetworkError(f"Invalid JSON in {what} response") from exc


def _error_text(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(data, dict):
        return str(data.get("error") or data.get("message") or data)
    return str(data)[:200]


__all__ = ["JupiterClient", "Price", "Quote", "RoutePlanStep", "SwapTransaction", "TokenInfo"]
