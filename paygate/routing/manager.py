"""
Gateway registry and selection.

Holds the named adapters, the factories that build them and the
registrations that rank them. Selection order for
``get_gateway_with_fallback``:
  1. The preferred gateway, if ready
  2. The configured default, if different and ready
  3. Every other ready gateway by descending priority (fallback only)

Equal priorities keep registration order, so the next gateway to be
tried is always predictable.

The manager does no I/O. Writes (register/remove/clear) take a lock;
reads work on snapshots of the maps.
"""

import logging
import threading
from typing import Any, Callable, Iterable, Optional

from paygate.exceptions import PaymentException, configuration_error
from paygate.models.payment import GatewayRegistration
from paygate.providers.base import PaymentGateway

logger = logging.getLogger("paygate.manager")

GatewayFactory = Callable[[dict[str, Any]], PaymentGateway]


def _key(name: str) -> str:
    return name.strip().lower()


class GatewayManager:
    """Named, prioritized payment gateways with default and fallback selection."""

    def __init__(
        self,
        registrations: Optional[Iterable[GatewayRegistration]] = None,
        default_gateway: Optional[str] = None,
        enable_fallback: bool = False,
    ):
        self._gateways: dict[str, PaymentGateway] = {}
        self._factories: dict[str, GatewayFactory] = {}
        self._registrations: dict[str, GatewayRegistration] = {}
        self._default: Optional[str] = _key(default_gateway) if default_gateway else None
        self._fallback_enabled = enable_fallback
        self._lock = threading.Lock()

        for registration in registrations or ():
            self._registrations[_key(registration.name)] = registration

    # ─── Registration ──────────────────────────────────────────────────

    def register_factory(self, name: str, factory: GatewayFactory) -> "GatewayManager":
        """
        Store a factory and build the adapter now if an enabled
        registration for ``name`` exists.

        A factory that raises is logged and skipped; the gateway simply
        stays unregistered.
        """
        key = _key(name)
        with self._lock:
            self._factories[key] = factory
            registration = self._registrations.get(key)
            if registration is None or not registration.enabled:
                return self
            try:
                gateway = factory(dict(registration.config))
            except Exception:
                logger.exception("Failed to initialize gateway '%s'", name)
                return self
            self._gateways[key] = gateway

        logger.info("Registered gateway '%s' (priority=%d)", key, registration.priority)
        return self

    def register_gateway(
        self,
        name: str,
        gateway: PaymentGateway,
        priority: Optional[int] = None,
    ) -> "GatewayManager":
        """Register a ready-made adapter, bypassing factories."""
        key = _key(name)
        with self._lock:
            self._gateways[key] = gateway
            if priority is not None:
                registration = self._registrations.get(key)
                if registration is None:
                    self._registrations[key] = GatewayRegistration(name=key, priority=priority)
                else:
                    registration.priority = priority
        logger.info("Registered gateway '%s'", key)
        return self

    # ─── Lookup ────────────────────────────────────────────────────────

    def get_gateway(self, name: str) -> PaymentGateway:
        """
        Return a usable adapter.

        Raises:
            PaymentException: PAYMENT_CONFIGURATION_ERROR when the gateway is
                unregistered or not ready.
        """
        gateways = dict(self._gateways)
        gateway = gateways.get(_key(name))
        if gateway is None:
            raise configuration_error(
                f"Payment gateway '{name}' is not registered or enabled",
                gateway_name=name,
                available_gateways=list(gateways),
            )
        if not gateway.is_ready():
            raise configuration_error(
                f"Payment gateway '{name}' is not ready. Please check configuration.",
                gateway_name=name,
            )
        return gateway

    def get_default_gateway(self) -> PaymentGateway:
        """The configured default, else the first registered adapter."""
        default = self._default
        if default is not None:
            return self.get_gateway(default)

        gateways = list(self._gateways.values())
        if not gateways:
            raise configuration_error(
                "No default gateway configured and no gateways available",
                available_gateways=[],
            )
        return gateways[0]

    def get_gateway_with_fallback(self, preferred: Optional[str] = None) -> Optional[PaymentGateway]:
        """
        Pick a ready adapter, falling back by priority when enabled.

        With fallback disabled, a preferred or default gateway that is
        unusable raises instead of falling through. Returns None when
        nothing ready is found.
        """
        preferred_key = _key(preferred) if preferred else None
        default = self._default
        fallback = self._fallback_enabled

        candidates = []
        if preferred_key:
            candidates.append(preferred_key)
        if default and default != preferred_key:
            candidates.append(default)

        for name in candidates:
            try:
                return self.get_gateway(name)
            except PaymentException:
                if not fallback:
                    raise
                logger.warning("Gateway '%s' not available, trying fallback", name)

        if not fallback:
            return None

        for name, gateway in self._sorted_gateways():
            if name in candidates:
                continue
            if gateway.is_ready():
                logger.warning("Using fallback gateway: %s", name)
                return gateway

        logger.error("No ready payment gateway available")
        return None

    def get_available_gateways(self) -> list[str]:
        return list(self._gateways)

    def get_ready_gateways(self) -> list[str]:
        return [name for name, gateway in list(self._gateways.items()) if gateway.is_ready()]

    def has_gateway(self, name: str) -> bool:
        return _key(name) in self._gateways

    def is_gateway_ready(self, name: str) -> bool:
        gateway = self._gateways.get(_key(name))
        return gateway is not None and gateway.is_ready()

    @property
    def default_gateway_name(self) -> Optional[str]:
        return self._default

    @property
    def fallback_enabled(self) -> bool:
        return self._fallback_enabled

    def priority_of(self, name: str) -> int:
        registration = self._registrations.get(_key(name))
        return registration.priority if registration else 0

    # ─── Mutation ──────────────────────────────────────────────────────

    def set_default_gateway(self, name: str) -> "GatewayManager":
        key = _key(name)
        with self._lock:
            if key not in self._gateways:
                raise configuration_error(
                    f"Cannot set '{name}' as default gateway. Gateway not registered.",
                    gateway_name=name,
                    available_gateways=list(self._gateways),
                )
            self._default = key
        return self

    def set_fallback_enabled(self, enabled: bool) -> "GatewayManager":
        with self._lock:
            self._fallback_enabled = enabled
        return self

    def remove_gateway(self, name: str) -> "GatewayManager":
        """
        Forget a gateway. Removing the default leaves no default set.

        The adapter is not closed. Fetch it first and ``await gateway.aclose()``
        once nothing else uses it, or call ``aclose()`` on the manager before
        removing anything.
        """
        key = _key(name)
        with self._lock:
            self._gateways.pop(key, None)
            self._factories.pop(key, None)
            self._registrations.pop(key, None)
            if self._default == key:
                self._default = None
        logger.info("Removed gateway '%s'", key)
        return self

    def clear(self) -> "GatewayManager":
        """Forget every gateway without closing them (see ``remove_gateway``)."""
        with self._lock:
            self._gateways.clear()
            self._factories.clear()
            self._registrations.clear()
            self._default = None
        return self

    async def aclose(self) -> None:
        """Close the HTTP clients of every registered adapter."""
        for name, gateway in self._gateways.copy().items():
            await gateway.aclose()
            logger.debug("Closed gateway '%s'", name)

    def _sorted_gateways(self) -> list[tuple[str, PaymentGateway]]:
        # sorted() is stable, so equal priorities keep registration order
        registrations = dict(self._registrations)
        return sorted(
            self._gateways.copy().items(),
            key=lambda item: -(registrations[item[0]].priority if item[0] in registrations else 0),
        )
