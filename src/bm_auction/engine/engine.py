"""AuctionEngine - stateful orchestrator for every bond market.

One engine prices all markets. Each market carries a PriceModel tag chosen
at creation (SDA, OFDA, OSDA, FPA) and the engine dispatches on it; there
is no per-model subclass.

Every mutating call:
  1. checks the caller,
  2. loads a detached copy of the market record,
  3. runs all checks and computes the new state on the copy,
  4. saves the copy.
A raised AppError therefore leaves the stored record untouched. Time is
always passed in as `now` (unix seconds); the engine never reads a clock.
"""

import logging
from collections.abc import Callable

from src.bm_aggregator.domain.registry import Aggregator
from src.bm_auction.domain.defaults import AuctionDefaults
from src.bm_auction.domain.params import (
    FixedPriceMarketParams,
    MarketParams,
    OFDAMarketParams,
    OSDAMarketParams,
    SDAMarketParams,
)
from src.bm_auction.engine.debt import current_control_variable, current_debt, decay_and_get_price
from src.bm_auction.engine.pricing import (
    discounted_oracle_price,
    market_price,
    oracle_price,
    oracle_scale,
)
from src.bm_auction.engine.tuning import TuneResult, tune, update_max_payout
from src.bm_common.enums import AuctionEventType, Capability, PriceModel, VestingType
from src.bm_common.errors import (
    AmountLessThanMinimumError,
    InvalidParamsError,
    MaxPayoutExceededError,
    NewMarketsNotAllowedError,
    NotEnoughCapacityError,
    UnauthorizedError,
)
from src.bm_common.fixed_point import ONE_HUNDRED_PERCENT, mul_div, pow10
from src.bm_market.domain.models import (
    AuctionEvent,
    Market,
    MarketInfoForPurchase,
    MarketRecord,
    Metadata,
    Terms,
)
from src.bm_market.domain.repository import MarketStoreProtocol
from src.bm_oracle.domain.oracle import OracleProtocol
from src.bm_risk.rules.authorization import (
    AuthorizePredicate,
    check_capability,
    check_market_owner,
    check_teller,
)
from src.bm_risk.rules.market_params import (
    check_capacity,
    check_debt_buffer,
    check_discounts,
    check_fixed_price,
    check_intervals,
    check_scale_adjustment,
    check_schedule,
    check_sda_prices,
    check_target_interval_discount,
    check_token_decimals,
    check_vesting,
)
from src.bm_risk.rules.market_status import check_market_exists, check_market_live, is_live
from src.bm_teller.domain.fees import TellerProtocol

logger = logging.getLogger(__name__)


def _deny_all(caller: str, capability: Capability) -> bool:
    return False


class AuctionEngine:
    def __init__(
        self,
        store: MarketStoreProtocol,
        aggregator: Aggregator,
        teller: TellerProtocol,
        defaults: AuctionDefaults | None = None,
        authorize: AuthorizePredicate | None = None,
        oracles: dict[str, OracleProtocol] | None = None,
        allow_new_markets: bool = True,
    ) -> None:
        self._store = store
        self._aggregator = aggregator
        self._teller = teller
        self._defaults = defaults or AuctionDefaults()
        self._authorize = authorize or _deny_all
        self._oracles: dict[str, OracleProtocol] = dict(oracles or {})
        self._allow_new_markets = allow_new_markets
        self._callback_authorized: set[str] = set()
        self.events: list[AuctionEvent] = []

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    @property
    def defaults(self) -> AuctionDefaults:
        return self._defaults

    @property
    def allow_new_markets(self) -> bool:
        return self._allow_new_markets

    def require_capability(self, caller: str, capability: Capability) -> None:
        """Raise UnauthorizedError unless `caller` holds `capability`."""
        check_capability(self._authorize, caller, capability)

    def add_oracle(self, name: str, oracle: OracleProtocol) -> None:
        self._oracles[name] = oracle

    def set_defaults(self, caller: str, defaults: AuctionDefaults, now: int) -> None:
        check_capability(self._authorize, caller, Capability.SET_DEFAULTS)
        old = self._defaults
        self._defaults = defaults
        self._emit(
            AuctionEventType.DEFAULTS_UPDATED, None, now, caller=caller, old=old, new=defaults
        )

    def set_allow_new_markets(self, caller: str, allowed: bool, now: int) -> None:
        check_capability(self._authorize, caller, Capability.SET_ALLOW_NEW_MARKETS)
        self._allow_new_markets = allowed
        self._emit(AuctionEventType.ALLOW_NEW_MARKETS_UPDATED, None, now, allowed=allowed)

    def set_callback_auth_status(self, caller: str, address: str, status: bool, now: int) -> None:
        check_capability(self._authorize, caller, Capability.SET_CALLBACK_AUTH)
        if status:
            self._callback_authorized.add(address)
        else:
            self._callback_authorized.discard(address)
        self._emit(
            AuctionEventType.CALLBACK_AUTH_UPDATED, None, now, address=address, status=status
        )

    def is_callback_authorized(self, address: str) -> bool:
        return address in self._callback_authorized

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create_market(self, caller: str, params: MarketParams, now: int) -> int:
        """Validate params, register with the aggregator, store the market."""
        if not self._allow_new_markets:
            raise NewMarketsNotAllowedError()
        if params.callback_addr is not None and caller not in self._callback_authorized:
            raise UnauthorizedError(f"{caller} is not authorized to use callbacks")

        check_token_decimals(params.payout_decimals, params.quote_decimals)
        check_capacity(params.capacity)
        start, conclusion = check_schedule(
            params.start, params.duration, params.deposit_interval, self._defaults, now
        )
        vesting = check_vesting(params.vesting, params.vesting_type, conclusion)

        builders: dict[PriceModel, Callable[..., MarketRecord]] = {
            PriceModel.SDA: self._build_sda,
            PriceModel.FPA: self._build_fixed_price,
            PriceModel.OFDA: self._build_oracle,
            PriceModel.OSDA: self._build_oracle,
        }
        market_id = self._aggregator.market_counter
        record = builders[params.price_model](
            market_id, caller, params, start, conclusion, vesting, now
        )

        registered_id = self._aggregator.register_market(
            params.payout_token, params.quote_token, self
        )
        assert registered_id == market_id, (
            f"aggregator issued {registered_id}, expected {market_id}"
        )
        self._store.save(record)

        self._emit(
            AuctionEventType.MARKET_CREATED,
            market_id,
            now,
            owner=caller,
            price_model=params.price_model.value,
            payout_token=params.payout_token,
            quote_token=params.quote_token,
            vesting=vesting,
        )
        return market_id

    def _base_market(
        self,
        owner: str,
        params: MarketParams,
        scale: int,
        min_price: int,
        max_payout: int,
    ) -> Market:
        return Market(
            owner=owner,
            payout_token=params.payout_token,
            quote_token=params.quote_token,
            callback_addr=params.callback_addr,
            capacity_in_quote=params.capacity_in_quote,
            capacity=params.capacity,
            total_debt=0,
            min_price=min_price,
            max_payout=max_payout,
            scale=scale,
            price_model=params.price_model,
        )

    def _build_sda(
        self,
        market_id: int,
        owner: str,
        params: SDAMarketParams,
        start: int,
        conclusion: int,
        vesting: int,
        now: int,
    ) -> MarketRecord:
        defaults = self._defaults
        check_scale_adjustment(params.scale_adjustment)
        check_sda_prices(params.formatted_initial_price, params.formatted_minimum_price)
        check_debt_buffer(params.debt_buffer, defaults)

        duration = params.duration
        scale = pow10(36 + params.scale_adjustment)
        debt_decay_interval = max(defaults.min_debt_decay_interval, 5 * params.deposit_interval)

        if params.capacity_in_quote:
            capacity_payout = mul_div(params.capacity, scale, params.formatted_initial_price)
        else:
            capacity_payout = params.capacity

        # Debt level that holds the initial price with one decay window of sales
        target_debt = mul_div(capacity_payout, debt_decay_interval, duration)
        if target_debt == 0:
            raise InvalidParamsError("capacity too small for market duration")
        max_payout = mul_div(capacity_payout, params.deposit_interval, duration)

        # Buffer is at least one max payout so a single bond cannot trip the breaker
        debt_buffer = max(params.debt_buffer, mul_div(max_payout, ONE_HUNDRED_PERCENT, target_debt))
        max_debt = target_debt + mul_div(target_debt, debt_buffer, ONE_HUNDRED_PERCENT)

        control_variable = mul_div(params.formatted_initial_price, scale, target_debt)
        if control_variable == 0:
            raise InvalidParamsError("initial price too small for market scale")

        tune_interval = max(params.deposit_interval, defaults.tune_interval)
        tune_interval_capacity = mul_div(params.capacity, tune_interval, duration)
        tune_below_capacity = max(params.capacity - tune_interval_capacity, 0)

        market = self._base_market(
            owner, params, scale, params.formatted_minimum_price, max_payout
        )
        market.total_debt = target_debt
        return MarketRecord(
            id=market_id,
            market=market,
            terms=Terms(
                control_variable=control_variable,
                max_debt=max_debt,
                start=start,
                conclusion=conclusion,
                vesting=vesting,
                vesting_type=params.vesting_type,
                duration=duration,
                deposit_interval=params.deposit_interval,
            ),
            metadata=Metadata(
                last_tune=start,
                last_decay=start,
                length=duration,
                deposit_interval=params.deposit_interval,
                tune_interval=tune_interval,
                tune_adjustment_delay=defaults.tune_adjustment_delay,
                debt_decay_interval=debt_decay_interval,
                tune_interval_capacity=tune_interval_capacity,
                tune_below_capacity=tune_below_capacity,
                last_tune_debt=target_debt,
            ),
        )

    def _build_fixed_price(
        self,
        market_id: int,
        owner: str,
        params: FixedPriceMarketParams,
        start: int,
        conclusion: int,
        vesting: int,
        now: int,
    ) -> MarketRecord:
        check_scale_adjustment(params.scale_adjustment)
        check_fixed_price(params.formatted_price)

        scale = pow10(36 + params.scale_adjustment)
        if params.capacity_in_quote:
            capacity_payout = mul_div(params.capacity, scale, params.formatted_price)
        else:
            capacity_payout = params.capacity
        max_payout = mul_div(capacity_payout, params.deposit_interval, params.duration)

        market = self._base_market(owner, params, scale, params.formatted_price, max_payout)
        return MarketRecord(
            id=market_id,
            market=market,
            terms=Terms(
                control_variable=0,
                max_debt=0,
                start=start,
                conclusion=conclusion,
                vesting=vesting,
                vesting_type=params.vesting_type,
                duration=params.duration,
                deposit_interval=params.deposit_interval,
                fixed_price=params.formatted_price,
            ),
        )

    def _build_oracle(
        self,
        market_id: int,
        owner: str,
        params: OFDAMarketParams | OSDAMarketParams,
        start: int,
        conclusion: int,
        vesting: int,
        now: int,
    ) -> MarketRecord:
        if isinstance(params, OFDAMarketParams):
            discount = params.fixed_discount
            decay_speed = 0
        else:
            discount = params.base_discount
            check_target_interval_discount(params.target_interval_discount)
            decay_speed = mul_div(
                params.duration, params.target_interval_discount, params.deposit_interval
            )
        check_discounts(discount, params.max_discount_from_current)
        oracle = self._get_oracle(params.oracle)

        oracle.register_market(market_id, params.payout_token, params.quote_token)
        raw_price = oracle_price(oracle, market_id, now)
        oracle_decimals = oracle.decimals(market_id)
        if not (6 <= oracle_decimals <= 18):
            raise InvalidParamsError(f"oracle decimals {oracle_decimals} not in [6, 18]")
        scale, conversion = oracle_scale(
            raw_price, oracle_decimals, params.payout_decimals, params.quote_decimals
        )

        price = discounted_oracle_price(raw_price, conversion, discount)
        min_price = discounted_oracle_price(raw_price, conversion, params.max_discount_from_current)
        if min_price == 0:
            raise InvalidParamsError("max discount from current leaves a zero minimum price")

        if params.capacity_in_quote:
            capacity_payout = mul_div(params.capacity, scale, price)
        else:
            capacity_payout = params.capacity
        max_payout = mul_div(capacity_payout, params.deposit_interval, params.duration)

        market = self._base_market(owner, params, scale, min_price, max_payout)
        return MarketRecord(
            id=market_id,
            market=market,
            terms=Terms(
                control_variable=0,
                max_debt=0,
                start=start,
                conclusion=conclusion,
                vesting=vesting,
                vesting_type=params.vesting_type,
                duration=params.duration,
                deposit_interval=params.deposit_interval,
                oracle=params.oracle,
                conversion=conversion,
                base_discount=discount,
                max_discount_from_current=params.max_discount_from_current,
                decay_speed=decay_speed,
            ),
        )

    # ------------------------------------------------------------------
    # Purchase
    # ------------------------------------------------------------------

    def purchase_bond(
        self,
        caller: str,
        market_id: int,
        amount: int,
        min_amount_out: int,
        now: int,
    ) -> int:
        """Sell payout tokens for `amount` quote tokens. Teller only.

        Returns the payout. When the purchase pushes SDA debt above
        max_debt the market is closed and the payout is still returned.
        """
        check_teller(caller, self._teller.address)
        record = check_market_exists(self._store.load_for_update(market_id), market_id)
        check_market_live(record, now)
        market, terms = record.market, record.terms

        if market.price_model == PriceModel.SDA:
            price, payout = decay_and_get_price(record, amount, now)
        else:
            price = market_price(record, now, self._oracle_for(record))
            payout = mul_div(amount, market.scale, price)

        if payout > market.max_payout:
            raise MaxPayoutExceededError(payout, market.max_payout)

        spent_capacity = amount if market.capacity_in_quote else payout
        if spent_capacity > market.capacity:
            raise NotEnoughCapacityError(spent_capacity, market.capacity)
        market.capacity -= spent_capacity
        market.purchased += amount
        market.sold += payout

        if payout < min_amount_out:
            raise AmountLessThanMinimumError(payout, min_amount_out)

        tune_result: TuneResult | None = None
        closed = False
        if market.price_model == PriceModel.SDA:
            # Circuit breaker: close on the purchase that breaches max debt
            if market.total_debt > terms.max_debt:
                logger.warning(
                    "Market %d circuit breaker: debt %d > max debt %d",
                    market_id,
                    market.total_debt,
                    terms.max_debt,
                )
                self._close(record, now)
                closed = True
            else:
                tune_result = tune(record, now, price)
        elif market.capacity > 0:
            update_max_payout(record, now, price)

        self._store.save(record)

        self._emit(
            AuctionEventType.BOND_PURCHASED,
            market_id,
            now,
            amount=amount,
            payout=payout,
            price=price,
        )
        if tune_result is not None:
            self._emit(
                AuctionEventType.TUNED,
                market_id,
                now,
                old_control_variable=tune_result.old_control_variable,
                new_control_variable=tune_result.new_control_variable,
            )
        if closed or market.capacity == 0:
            self._emit(AuctionEventType.MARKET_CLOSED, market_id, now, circuit_breaker=closed)
        return payout

    # ------------------------------------------------------------------
    # Owner operations
    # ------------------------------------------------------------------

    def close_market(self, caller: str, market_id: int, now: int) -> None:
        record = check_market_exists(self._store.load_for_update(market_id), market_id)
        check_market_owner(caller, record)
        self._close(record, now)
        self._store.save(record)
        self._emit(AuctionEventType.MARKET_CLOSED, market_id, now, circuit_breaker=False)

    def _close(self, record: MarketRecord, now: int) -> None:
        terms = record.terms
        terms.conclusion = min(terms.conclusion, now)
        terms.start = min(terms.start, terms.conclusion)
        record.market.capacity = 0
        record.adjustment.active = False
        logger.info("Closed market %d at %d", record.id, now)

    def set_intervals(
        self,
        caller: str,
        market_id: int,
        tune_interval: int,
        tune_adjustment_delay: int,
        debt_decay_interval: int,
        now: int,
    ) -> None:
        """Owner override of an SDA market's tuning cadence and decay window."""
        record = check_market_exists(self._store.load_for_update(market_id), market_id)
        if not is_live(record, now):
            raise InvalidParamsError(f"market {market_id} is not live")
        meta = record.metadata
        if meta is None:
            raise InvalidParamsError(f"market {market_id} has no tuning intervals")
        check_intervals(
            tune_interval,
            tune_adjustment_delay,
            debt_decay_interval,
            meta.deposit_interval,
            self._defaults,
        )
        check_market_owner(caller, record)

        capacity = record.market.capacity
        meta.tune_interval = tune_interval
        # No stored duration left to spread over, so use time remaining
        meta.tune_interval_capacity = mul_div(
            capacity, tune_interval, record.terms.conclusion - now
        )
        meta.tune_below_capacity = max(capacity - meta.tune_interval_capacity, 0)
        meta.tune_adjustment_delay = tune_adjustment_delay
        meta.debt_decay_interval = debt_decay_interval
        self._store.save(record)

        self._emit(
            AuctionEventType.INTERVALS_UPDATED,
            market_id,
            now,
            tune_interval=tune_interval,
            tune_adjustment_delay=tune_adjustment_delay,
            debt_decay_interval=debt_decay_interval,
        )

    def push_ownership(self, caller: str, market_id: int, new_owner: str, now: int) -> None:
        record = check_market_exists(self._store.load_for_update(market_id), market_id)
        check_market_owner(caller, record)
        record.pending_owner = new_owner
        self._store.save(record)
        self._emit(AuctionEventType.OWNERSHIP_PUSHED, market_id, now, new_owner=new_owner)

    def pull_ownership(self, caller: str, market_id: int, now: int) -> None:
        record = check_market_exists(self._store.load_for_update(market_id), market_id)
        if record.pending_owner is None or caller != record.pending_owner:
            raise UnauthorizedError(f"{caller} is not the pending owner of market {market_id}")
        previous = record.market.owner
        record.market.owner = caller
        record.pending_owner = None
        self._store.save(record)
        self._emit(
            AuctionEventType.OWNERSHIP_PULLED, market_id, now, previous=previous, owner=caller
        )

    # ------------------------------------------------------------------
    # Views (no mutation)
    # ------------------------------------------------------------------

    def get_market(self, market_id: int) -> MarketRecord:
        return check_market_exists(self._store.get(market_id), market_id)

    def market_price(self, market_id: int, now: int) -> int:
        record = self.get_market(market_id)
        return market_price(record, now, self._oracle_for(record))

    def current_debt(self, market_id: int, now: int) -> int:
        record = self.get_market(market_id)
        if record.metadata is None:
            return record.market.total_debt
        return current_debt(record.market, record.terms, record.metadata, now)

    def current_control_variable(self, market_id: int, now: int) -> int:
        record = self.get_market(market_id)
        return current_control_variable(record.terms, record.adjustment, now)

    def max_payout(self, market_id: int) -> int:
        return self.get_market(market_id).market.max_payout

    def max_amount_accepted(self, market_id: int, referrer: str | None, now: int) -> int:
        """Largest quote amount (teller fee included) the market will take.

        The fee is estimated on the pre-fee amount, so the true maximum is
        marginally lower.
        """
        record = self.get_market(market_id)
        market = record.market
        price = market_price(record, now, self._oracle_for(record))
        if market.capacity_in_quote:
            quote_capacity = market.capacity
        else:
            quote_capacity = mul_div(market.capacity, price, market.scale)
        max_quote = mul_div(market.max_payout, price, market.scale)
        amount_accepted = min(quote_capacity, max_quote)
        estimated_fee = mul_div(
            amount_accepted, self._teller.get_fee(referrer), ONE_HUNDRED_PERCENT
        )
        return amount_accepted + estimated_fee

    def payout_for(self, amount: int, market_id: int, referrer: str | None, now: int) -> int:
        """Payout the teller would deliver for `amount` after its fee."""
        record = self.get_market(market_id)
        fee = mul_div(amount, self._teller.get_fee(referrer), ONE_HUNDRED_PERCENT)
        price = market_price(record, now, self._oracle_for(record))
        payout = mul_div(amount - fee, record.market.scale, price)
        if payout > record.market.max_payout:
            raise MaxPayoutExceededError(payout, record.market.max_payout)
        return payout

    def is_live(self, market_id: int, now: int) -> bool:
        return is_live(self.get_market(market_id), now)

    def is_empty(self, market_id: int) -> bool:
        """No capacity left: sold out or closed."""
        return self.get_market(market_id).market.capacity == 0

    def is_closing(self, market_id: int, now: int) -> bool:
        """Live and inside its final deposit interval."""
        record = self.get_market(market_id)
        terms = record.terms
        return is_live(record, now) and terms.conclusion - now <= terms.deposit_interval

    def is_instant_swap(self, market_id: int, now: int) -> bool:
        terms = self.get_market(market_id).terms
        if terms.vesting_type == VestingType.FIXED_TERM:
            return terms.vesting == 0
        return terms.vesting <= now

    def vesting_type(self, market_id: int) -> VestingType:
        return self.get_market(market_id).terms.vesting_type

    def current_capacity(self, market_id: int) -> int:
        return self.get_market(market_id).market.capacity

    def get_conclusion(self, market_id: int) -> int:
        return self.get_market(market_id).terms.conclusion

    def owner_of(self, market_id: int) -> str:
        return self.get_market(market_id).market.owner

    def market_scale(self, market_id: int) -> int:
        return self.get_market(market_id).market.scale

    def get_market_info_for_purchase(self, market_id: int) -> MarketInfoForPurchase:
        record = self.get_market(market_id)
        market = record.market
        return MarketInfoForPurchase(
            owner=market.owner,
            callback_addr=market.callback_addr,
            payout_token=market.payout_token,
            quote_token=market.quote_token,
            vesting=record.terms.vesting,
            max_payout=market.max_payout,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get_oracle(self, name: str) -> OracleProtocol:
        oracle = self._oracles.get(name)
        if oracle is None:
            raise InvalidParamsError(f"unknown oracle: {name}")
        return oracle

    def _oracle_for(self, record: MarketRecord) -> OracleProtocol | None:
        if record.terms.oracle is None:
            return None
        return self._get_oracle(record.terms.oracle)

    def _emit(
        self,
        event_type: AuctionEventType,
        market_id: int | None,
        now: int,
        **payload: object,
    ) -> None:
        event = AuctionEvent(
            event_type=event_type.value,
            market_id=market_id,
            timestamp=now,
            payload=payload,
        )
        self.events.append(event)
        logger.info("%s market=%s %s", event.event_type, market_id, payload)
