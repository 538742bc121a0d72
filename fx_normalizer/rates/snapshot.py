"""Immutable rate snapshots and the builder that derives them from quotes."""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Sequence, Tuple, Union

from fx_normalizer.ingestion.models import RateQuote
from fx_normalizer.rates.currencies import parse_pair_symbol
from fx_normalizer.utils.logger import get_logger

LOGGER = get_logger(__name__)

PairKey = Tuple[str, str]
QuoteLike = Union[RateQuote, Sequence[object]]


class RateSnapshot(Mapping[PairKey, float]):
    """Read-only ``(FROM, TO) -> rate`` map built for one as-of cutoff.

    Iteration follows insertion order, which is also the order the
    conversion resolver scans when searching for an intermediate currency.
    Cross entries derived by :func:`build_snapshot` remember the two legs
    they were composed from.
    """

    __slots__ = ("_rates", "_legs", "as_of")

    def __init__(
        self,
        rates: Mapping[PairKey, float] | None = None,
        *,
        legs: Mapping[PairKey, tuple[PairKey, PairKey]] | None = None,
        as_of: int | None = None,
    ) -> None:
        self._rates: Mapping[PairKey, float] = MappingProxyType(dict(rates or {}))
        self._legs: Mapping[PairKey, tuple[PairKey, PairKey]] = MappingProxyType(
            dict(legs or {})
        )
        self.as_of = as_of

    @classmethod
    def from_rates(cls, rates: Mapping[str, float], *, as_of: int | None = None) -> "RateSnapshot":
        """Wrap an existing ``"FROM/TO" -> rate`` map without deriving anything."""

        keyed: dict[PairKey, float] = {}
        for symbol, rate in rates.items():
            key = parse_pair_symbol(symbol)
            if key is None:
                LOGGER.debug("Ignoring malformed pair symbol %r", symbol)
                continue
            keyed[key] = float(rate)
        return cls(keyed, as_of=as_of)

    def __getitem__(self, key: PairKey) -> float:
        return self._rates[key]

    def __iter__(self) -> Iterator[PairKey]:
        return iter(self._rates)

    def __len__(self) -> int:
        return len(self._rates)

    def __repr__(self) -> str:
        return f"RateSnapshot(pairs={len(self._rates)}, as_of={self.as_of!r})"

    def rate(self, from_currency: str, to_currency: str) -> float | None:
        return self._rates.get((from_currency, to_currency))

    def is_derived(self, from_currency: str, to_currency: str) -> bool:
        return (from_currency, to_currency) in self._legs

    def legs(self, from_currency: str, to_currency: str) -> tuple[PairKey, PairKey] | None:
        return self._legs.get((from_currency, to_currency))

    def pairs_from(self, currency: str) -> Iterator[tuple[str, float]]:
        """Yield ``(quote_currency, rate)`` for every entry based on ``currency``."""

        for (base, quote), rate in self._rates.items():
            if base == currency:
                yield quote, rate


def _unpack_quote(quote: QuoteLike) -> tuple[str, float]:
    if isinstance(quote, RateQuote):
        return quote.symbol, quote.rate
    symbol, rate = quote[0], quote[1]
    return str(symbol), float(rate)  # type: ignore[arg-type]


def build_snapshot(quotes: Iterable[QuoteLike], *, as_of: int | None = None) -> RateSnapshot:
    """Build a snapshot holding direct, reciprocal and single-hop cross rates.

    ``quotes`` is expected to carry at most one entry per symbol (latest at
    or before the cutoff); when a symbol repeats, the last one wins. Symbols
    without a ``FROM/TO`` shape are skipped.

    The cross pass is quadratic in the number of entries and composes only
    entries that existed before it started, so a derived rate never feeds
    another derivation.
    """

    rates: dict[PairKey, float] = {}
    for quote in quotes:
        symbol, ask = _unpack_quote(quote)
        key = parse_pair_symbol(symbol)
        if key is None:
            LOGGER.debug("Skipping quote with malformed symbol %r", symbol)
            continue
        base, counter = key
        rates[(base, counter)] = ask
        rates[(counter, base)] = 1.0 / ask if ask != 0 else float("inf")

    legs: dict[PairKey, tuple[PairKey, PairKey]] = {}
    direct = list(rates.items())
    for (from1, to1), rate1 in direct:
        for (from2, to2), rate2 in direct:
            if to1 != from2 or from1 == to2:
                continue
            if (from1, to2) in rates:
                continue
            cross = rate1 * rate2
            rates[(from1, to2)] = cross
            rates[(to2, from1)] = 1.0 / cross if cross != 0 else float("inf")
            legs[(from1, to2)] = ((from1, to1), (from2, to2))
            legs[(to2, from1)] = ((to2, from2), (to1, from1))

    LOGGER.debug(
        "Built rate snapshot with %s pairs (%s derived) as of %s", len(rates), len(legs), as_of
    )
    return RateSnapshot(rates, legs=legs, as_of=as_of)


__all__ = ["PairKey", "RateSnapshot", "build_snapshot"]
