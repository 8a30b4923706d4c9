"""Paginated fetching with the delayed-data subscription workaround.

Free Alpaca subscriptions cannot query the most recent 15 minutes of SIP
(consolidated equity) data and, without a signed OPRA agreement, of option
data.  The service reports this as an error on the request.  The first such
error flips a :class:`RestrictionState` flag for the lifetime of the
provider; from then on every stock or option request is narrowed to end
15 minutes before now before its first page is fetched.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum

from alpaca_history.config import DEFAULT_PAGE_SIZE, DEFAULT_RESTRICTED_DELAY_MINUTES
from alpaca_history.exc import APIError, RestrictedWindowError, UnimplementedRequestError, api_error_message
from alpaca_history.logging import get_logger

from .client import Page
from .provider_requests import (
    OptionBarsRequest,
    OptionTradesRequest,
    ProviderRequest,
    StockBarsRequest,
    StockQuotesRequest,
)

_log = get_logger(__name__)

RESTRICTED_DELAY = timedelta(minutes=DEFAULT_RESTRICTED_DELAY_MINUTES)


class DataRestriction(Enum):
    """Subscription restriction reported by Alpaca, keyed by error text."""

    OPRA = ("opra agreement is not signed", "OPRADataRestriction",
            "OPRA agreement is not signed for free subscriptions. Historical data will have a 15-minute delay.")
    SIP = ("subscription does not permit querying recent sip data", "SIPDataRestriction",
           "Real-time SIP data is restricted for free subscriptions. Historical data will have a 15-minute delay.")

    def __init__(self, error_text: str, code: str, warning: str) -> None:
        self.error_text = error_text
        self.code = code
        self.warning = warning

    @classmethod
    def from_message(cls, message: str) -> DataRestriction | None:
        normalized = (message or "").strip().lower()
        for restriction in cls:
            if normalized == restriction.error_text:
                return restriction
        return None


@dataclass
class RestrictionState:
    """Restriction flags owned by one history provider; never reset."""

    sip_restricted: bool = False
    opra_restricted: bool = False

    @property
    def any(self) -> bool:
        return self.sip_restricted or self.opra_restricted

    def mark(self, restriction: DataRestriction) -> None:
        if restriction is DataRestriction.SIP:
            self.sip_restricted = True
        else:
            self.opra_restricted = True


def narrow_restricted_window(
    request: ProviderRequest,
    state: RestrictionState,
    now: datetime,
    delay: timedelta = RESTRICTED_DELAY,
) -> ProviderRequest:
    """Return ``request`` limited to data older than ``now - delay``.

    Raises :class:`RestrictedWindowError` when the request starts inside the
    delayed window, and :class:`UnimplementedRequestError` for request shapes
    without a rule while no restriction is active.
    """
    end = now - delay
    start = request.start
    if start >= end:
        raise RestrictedWindowError(
            f"Invalid time range: the {delay} delay moves the end ({end.isoformat()}) before the start "
            f"({start.isoformat()}); recent data needs a paid subscription."
        )
    narrowed_end = min(request.end, end)
    if isinstance(request, (StockBarsRequest, StockQuotesRequest)) and state.sip_restricted:
        return request.with_window(start, narrowed_end)
    if isinstance(request, (OptionTradesRequest, OptionBarsRequest)) and state.opra_restricted:
        return request.with_window(start, narrowed_end)
    if state.any:
        return request
    raise UnimplementedRequestError(
        f"No restricted-window rule for request type '{type(request).__qualname__}'"
    )


def paginate(
    request: ProviderRequest,
    fetch_page: Callable[[ProviderRequest], Page],
    *,
    state: RestrictionState,
    on_restriction: Callable[[DataRestriction], None],
    clock: Callable[[], datetime],
    page_size: int = DEFAULT_PAGE_SIZE,
    delay: timedelta = RESTRICTED_DELAY,
) -> Iterator[Page]:
    """Yield the non-empty pages of ``request`` in provider order.

    Restriction errors set ``state``, call ``on_restriction`` and retry the
    same logical request without yielding. Other provider errors propagate.
    The caller's ``request`` is not modified.
    """
    request = replace(request)
    retried: set[DataRestriction] = set()
    pages = 0
    while True:
        if state.any and not request.is_crypto and not request.page_token:
            try:
                request = narrow_restricted_window(request, state, clock(), delay)
            except RestrictedWindowError as exc:
                _log.debug(
                    "HISTORY_RESTRICTED_WINDOW_EMPTY",
                    extra={"symbol": request.symbol, "request": type(request).__name__, "detail": str(exc)},
                )
                return

        if request.limit is None:
            request.limit = page_size

        try:
            page = fetch_page(request)
        except APIError as exc:
            restriction = DataRestriction.from_message(api_error_message(exc))
            # a second rejection means the narrowed window did not help
            if restriction is None or restriction in retried:
                raise
            retried.add(restriction)
            state.mark(restriction)
            _log.info(
                "HISTORY_RESTRICTION_DETECTED",
                extra={"symbol": request.symbol, "restriction": restriction.name},
            )
            on_restriction(restriction)
            continue

        if len(page):
            pages += 1
            _log.debug(
                "HISTORY_PAGE_FETCHED",
                extra={"symbol": request.symbol, "page": pages, "records": len(page)},
            )
            yield page

        request.page_token = page.next_page_token
        if not request.page_token:
            return


__all__ = [
    "DataRestriction",
    "RESTRICTED_DELAY",
    "RestrictionState",
    "narrow_restricted_window",
    "paginate",
]
