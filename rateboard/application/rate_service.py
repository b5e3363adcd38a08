"""Rate application service. Transaction boundary: validate, persist, broadcast, audit."""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Collection,
    Dict,
    List,
    Mapping,
    Optional,
    TypeVar,
)

from rateboard.application.broadcaster import (
    RATE_CHANGED_EVENT,
    RateBroadcaster,
    RatesAnnouncer,
    RatesCache,
)
from rateboard.application.exceptions import PersistenceFailureError, PersistenceTimeoutError
from rateboard.application.rate_store import RateStore
from rateboard.domain.exceptions import (
    DomainError,
    DuplicateCodeError,
    RateValidationError,
    RecordNotFoundError,
)
from rateboard.domain.models.activity import ActivityAction, ActivityResource, ActivityStatus
from rateboard.domain.models.currency import CurrencyRate, RateUpdate
from rateboard.domain.schemas.currency import (
    AdminRateView,
    CurrencyStats,
    CurrencyStatsDetail,
    HistoryView,
    RateView,
    SnapshotView,
)
from rateboard.domain.validators.rate_validator import (
    BUY_RATE,
    SELL_RATE,
    coerce_rate,
    normalize_code,
    validate_currency_create,
    validate_rate_batch,
)

if TYPE_CHECKING:
    from rateboard.governance.audit_logger import AuditLogger

T = TypeVar("T")

ROUTING_RATES_UPDATED = "rates.updated"
DEFAULT_HISTORY_LIMIT = 10
DEFAULT_SEARCH_LIMIT = 50


def rates_payload(views: Mapping[str, RateView]) -> Dict[str, Any]:
    """JSON-ready canonical map, as broadcast and cached."""
    return {code: view.model_dump(mode="json") for code, view in views.items()}


def _public_views(rates: List[CurrencyRate]) -> Dict[str, RateView]:
    return {r.code: RateView.from_rate(r) for r in rates if r.is_active and r.is_visible}


def _admin_views(rates: List[CurrencyRate]) -> Dict[str, AdminRateView]:
    return {r.code: AdminRateView.from_rate(r) for r in rates if r.is_active}


def _error_message(error: Exception) -> str:
    return getattr(error, "message", None) or str(error) or type(error).__name__


class RateService:
    """
    Application-layer orchestration only. No HTTP, no FastAPI.
    Transaction strategy: validation runs on the whole batch before anything is written;
    the store is the source of truth; the broadcast follows the commit under one lock so
    subscribers see commits in order; audit, cache and downstream announcements are
    best-effort and never fail the request.
    """

    def __init__(
        self,
        store: RateStore,
        audit_logger: "AuditLogger",
        broadcaster: RateBroadcaster,
        logger: logging.Logger,
        *,
        allowed_codes: Collection[str],
        currency_names: Optional[Mapping[str, str]] = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        persist_timeout: float = 5.0,
        cache: Optional[RatesCache] = None,
        announcer: Optional[RatesAnnouncer] = None,
        rates_exchange: str = "currency_rates",
    ) -> None:
        self._store = store
        self._audit = audit_logger
        self._broadcaster = broadcaster
        self._logger = logger
        self._allowed_codes = frozenset(normalize_code(c) for c in allowed_codes)
        self._names = {normalize_code(k): v for k, v in (currency_names or {}).items()}
        self._history_limit = history_limit
        self._persist_timeout = persist_timeout
        self._cache = cache
        # Set when the cache may hold a pre-commit map that could not be evicted.
        self._cache_untrusted = False
        self._announcer = announcer
        self._rates_exchange = rates_exchange
        self._commit_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Write paths
    # ------------------------------------------------------------------

    async def update_rates(
        self,
        batch: Mapping[str, Any],
        actor: Optional[str],
    ) -> Dict[str, RateView]:
        """
        Single entry point for a batch update. Validates the whole batch (no write at all
        on any violation), persists, broadcasts, audits, returns the public canonical map.
        """
        try:
            known_codes = self._allowed_codes | {r.code for r in await self._store.get_all()}
            violations = validate_rate_batch(batch, allowed_codes=known_codes)
            if violations:
                raise RateValidationError(violations)
            updates = self._to_updates(batch)
            async with self._commit_lock:
                written = await self._persist(self._store.upsert_batch(updates, actor))
                public = await self._publish_committed()
        except Exception as e:
            self._audit_failure(
                actor,
                ActivityAction.RATE_UPDATE,
                details={"attempted_updates": dict(batch)},
                error=e,
            )
            raise

        self._audit.dispatch(
            actor=actor,
            action=ActivityAction.RATE_UPDATE,
            resource=ActivityResource.CURRENCY,
            status=ActivityStatus.SUCCESS,
            details={
                "updated_currencies": [u.code for u in updates],
                "changed_currencies": [r.code for r in written],
                "changes": {
                    u.code: {BUY_RATE: u.buy_rate, SELL_RATE: u.sell_rate} for u in updates
                },
            },
        )
        self._logger.info(
            "rates_updated",
            extra={
                "actor": actor,
                "codes": [u.code for u in updates],
                "changed": [r.code for r in written],
            },
        )
        await self._announce(public)
        return public

    async def create_currency(
        self,
        *,
        code: str,
        name: str,
        buy_rate: Any,
        sell_rate: Any,
        actor: Optional[str],
        is_visible: bool = True,
    ) -> AdminRateView:
        """Create a record for an allow-listed code. DuplicateCodeError if it exists, active or not."""
        normalized = normalize_code(code)
        try:
            violations = validate_currency_create(
                code, name, buy_rate, sell_rate, self._allowed_codes
            )
            if violations:
                raise RateValidationError(violations)
            async with self._commit_lock:
                if await self._store.get_by_code(normalized) is not None:
                    raise DuplicateCodeError(f"Currency with code {normalized} already exists")
                rate = CurrencyRate.create(
                    code=normalized,
                    name=name.strip(),
                    buy_rate=coerce_rate(buy_rate),
                    sell_rate=coerce_rate(sell_rate),
                    created_by=actor or "system",
                    created_at=datetime.now(timezone.utc),
                    history_limit=self._history_limit,
                    is_visible=is_visible,
                )
                created = await self._persist(self._store.create(rate))
                public = await self._publish_committed()
        except Exception as e:
            self._audit_failure(
                actor,
                ActivityAction.RATE_CREATE,
                details={
                    "attempted_code": normalized,
                    "attempted_data": {"name": name, BUY_RATE: buy_rate, SELL_RATE: sell_rate},
                },
                error=e,
            )
            raise

        view = AdminRateView.from_rate(created)
        self._audit.dispatch(
            actor=actor,
            action=ActivityAction.RATE_CREATE,
            resource=ActivityResource.CURRENCY,
            status=ActivityStatus.SUCCESS,
            details={"new_currency": view.model_dump(mode="json")},
        )
        self._logger.info("currency_created", extra={"actor": actor, "code": normalized})
        await self._announce(public)
        return view

    async def set_visibility(
        self, code: str, visible: bool, actor: Optional[str]
    ) -> AdminRateView:
        """Show or hide an active currency on the public read path."""
        return await self._toggle(
            code,
            actor,
            action=ActivityAction.VISIBILITY_TOGGLE,
            details={"is_visible": visible},
            operation=lambda c: self._store.set_visible(c, visible),
        )

    async def set_active(self, code: str, active: bool, actor: Optional[str]) -> AdminRateView:
        """Soft-delete (active=False) or restore a currency."""
        return await self._toggle(
            code,
            actor,
            action=ActivityAction.RATE_RESTORE if active else ActivityAction.RATE_DELETE,
            details={"is_active": active},
            operation=lambda c: self._store.set_active(c, active),
        )

    async def delete_currency(self, code: str, actor: Optional[str]) -> AdminRateView:
        return await self.set_active(code, False, actor)

    async def _toggle(
        self,
        code: str,
        actor: Optional[str],
        *,
        action: ActivityAction,
        details: Dict[str, Any],
        operation,
    ) -> AdminRateView:
        normalized = normalize_code(code)
        details = {"code": normalized, **details}
        try:
            async with self._commit_lock:
                rate = await self._persist(operation(normalized))
                public = await self._publish_committed()
        except Exception as e:
            self._audit_failure(actor, action, details=details, error=e)
            raise

        self._audit.dispatch(
            actor=actor,
            action=action,
            resource=ActivityResource.CURRENCY,
            status=ActivityStatus.SUCCESS,
            details=details,
        )
        self._logger.info(action.value, extra={"actor": actor, **details})
        await self._announce(public)
        return AdminRateView.from_rate(rate)

    # ------------------------------------------------------------------
    # Read paths
    # ------------------------------------------------------------------

    async def get_visible_rates(self) -> Dict[str, RateView]:
        """Public canonical map: active and visible records only."""
        if self._cache is not None and not self._cache_untrusted:
            try:
                cached = await self._cache.get_public_rates()
            except Exception as e:
                self._logger.warning("rates_cache_read_failed", extra={"error": str(e)})
                cached = None
            if cached is not None:
                return {code: RateView.model_validate(v) for code, v in cached.items()}
        views = _public_views(await self._store.get_active())
        await self._refresh_cache(views)
        return views

    async def get_all_rates(self) -> Dict[str, AdminRateView]:
        """Admin canonical map: every active record, visible or not."""
        return _admin_views(await self._store.get_active())

    async def get_rate(self, code: str, include_hidden: bool = False) -> Optional[RateView]:
        rate = await self._readable(code, include_hidden)
        if rate is None:
            return None
        if include_hidden:
            return AdminRateView.from_rate(rate)
        return RateView.from_rate(rate)

    async def get_history(
        self,
        code: str,
        limit: int = DEFAULT_HISTORY_LIMIT,
        include_hidden: bool = False,
    ) -> HistoryView:
        """Current rates plus the most recent `limit` snapshots, oldest first."""
        rate = await self._readable(code, include_hidden)
        if rate is None:
            raise RecordNotFoundError(f"Currency with code {normalize_code(code)} not found")
        limit = max(1, limit)
        return HistoryView(
            code=rate.code,
            name=rate.name,
            current=RateView.from_rate(rate),
            last_updated_at=rate.last_updated_at,
            update_history=[SnapshotView.from_snapshot(s) for s in rate.update_history[-limit:]],
        )

    async def get_stats(self, include_hidden: bool = False) -> CurrencyStats:
        rates = [
            r for r in await self._store.get_active() if include_hidden or r.is_visible
        ]
        details = [
            CurrencyStatsDetail(
                code=r.code,
                name=r.name,
                buy_rate=r.buy_rate,
                sell_rate=r.sell_rate,
                spread=r.spread,
                spread_percentage=float(r.spread_percentage),
                last_updated_at=r.last_updated_at,
                update_count=len(r.update_history),
            )
            for r in rates
        ]
        count = len(details)
        return CurrencyStats(
            total_currencies=count,
            total_updates=sum(d.update_count for d in details),
            average_spread=sum(d.spread for d in details) / count if count else 0.0,
            average_spread_percentage=(
                sum(d.spread_percentage for d in details) / count if count else 0.0
            ),
            last_update=max((d.last_updated_at for d in details), default=None),
            currencies=details,
        )

    async def search(
        self,
        query: Optional[str] = None,
        *,
        is_active: Optional[bool] = None,
        min_buy_rate: Optional[float] = None,
        max_buy_rate: Optional[float] = None,
        min_spread: Optional[float] = None,
        limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> List[AdminRateView]:
        """Case-insensitive match on code or name plus numeric filters, newest update first."""
        needle = (query or "").strip().lower()
        matches = []
        for rate in await self._store.get_all():
            if needle and needle not in rate.code.lower() and needle not in rate.name.lower():
                continue
            if is_active is not None and rate.is_active != is_active:
                continue
            if min_buy_rate is not None and rate.buy_rate < min_buy_rate:
                continue
            if max_buy_rate is not None and rate.buy_rate > max_buy_rate:
                continue
            if min_spread is not None and rate.spread < min_spread:
                continue
            matches.append(rate)
        matches.sort(key=lambda r: r.last_updated_at, reverse=True)
        return [AdminRateView.from_rate(r) for r in matches[: max(1, limit)]]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _readable(self, code: str, include_hidden: bool) -> Optional[CurrencyRate]:
        rate = await self._store.get_by_code(normalize_code(code))
        if rate is None or not rate.is_active:
            return None
        if not include_hidden and not rate.is_visible:
            return None
        return rate

    def _to_updates(self, batch: Mapping[str, Any]) -> List[RateUpdate]:
        updates = []
        for raw_code, data in batch.items():
            code = normalize_code(raw_code)
            updates.append(
                RateUpdate(
                    code=code,
                    buy_rate=coerce_rate(data.get(BUY_RATE)),
                    sell_rate=coerce_rate(data.get(SELL_RATE)),
                    name=self._names.get(code, code),
                )
            )
        return updates

    async def _persist(self, operation: Awaitable[T]) -> T:
        """Bounded persist step. Domain errors pass through; anything else is a persistence failure."""
        try:
            return await asyncio.wait_for(operation, timeout=self._persist_timeout)
        except asyncio.TimeoutError as e:
            self._logger.error(
                "persistence_timeout",
                extra={"timeout_seconds": self._persist_timeout},
            )
            raise PersistenceTimeoutError("Timed out while saving currency rates") from e
        except DomainError:
            raise
        except Exception as e:
            self._logger.error(
                "persistence_failed",
                extra={"error": str(e), "error_type": type(e).__name__},
                exc_info=True,
            )
            raise PersistenceFailureError("Failed to save currency rates") from e

    async def _publish_committed(self) -> Dict[str, RateView]:
        """Read back the committed state, refresh the cache and fan it out. Caller holds the commit lock."""
        active = await self._store.get_active()
        public = _public_views(active)
        await self._refresh_cache(public)
        try:
            delivered = await self._broadcaster.publish(
                RATE_CHANGED_EVENT,
                rates_payload(public),
                admin_payload=rates_payload(_admin_views(active)),
            )
        except Exception as e:
            # Subscribers resynchronize through the read path.
            self._logger.error("broadcast_failed", extra={"error": str(e)})
        else:
            self._logger.info(
                "broadcast_sent",
                extra={"event": RATE_CHANGED_EVENT, "deliveries": delivered},
            )
        return public

    async def _refresh_cache(self, views: Mapping[str, RateView]) -> None:
        if self._cache is None:
            return
        try:
            await self._cache.set_public_rates(rates_payload(views))
        except Exception as e:
            self._logger.warning("rates_cache_write_failed", extra={"error": str(e)})
        else:
            self._cache_untrusted = False
            return
        # A stale map must not outlive the commit: evict it, or stop reading the cache.
        try:
            await self._cache.invalidate()
        except Exception as e:
            self._cache_untrusted = True
            self._logger.error("rates_cache_invalidate_failed", extra={"error": str(e)})
        else:
            self._cache_untrusted = False

    async def _announce(self, public: Mapping[str, RateView]) -> None:
        """Notify downstream consumers; failure does NOT fail the update."""
        if self._announcer is None:
            return
        message_id = str(uuid.uuid4())
        try:
            await self._announcer.publish(
                self._rates_exchange,
                ROUTING_RATES_UPDATED,
                {
                    "event": ROUTING_RATES_UPDATED,
                    "currencies": rates_payload(public),
                    "published_at": datetime.now(timezone.utc).isoformat(),
                },
                message_id,
            )
        except Exception as e:
            self._logger.error(
                "rates_announcement_failed",
                extra={"message_id": message_id, "error": str(e)},
            )

    def _audit_failure(
        self,
        actor: Optional[str],
        action: ActivityAction,
        *,
        details: Dict[str, Any],
        error: Exception,
    ) -> None:
        if isinstance(error, RateValidationError):
            details = {**details, "violations": [v.to_dict() for v in error.violations]}
        self._audit.dispatch(
            actor=actor,
            action=action,
            resource=ActivityResource.CURRENCY,
            status=ActivityStatus.FAILURE,
            details=details,
            error_message=_error_message(error),
        )
        self._logger.warning(
            f"{action.value}_rejected",
            extra={"actor": actor, "error": _error_message(error)},
        )
