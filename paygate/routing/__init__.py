from paygate.routing.lookup import LookupResult, get_across_gateways, verify_across_gateways
from paygate.routing.manager import GatewayManager

__all__ = ["GatewayManager", "LookupResult", "verify_across_gateways", "get_across_gateways"]
