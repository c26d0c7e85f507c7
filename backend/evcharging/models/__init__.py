from evcharging.models.owner import EVOwner, Vehicle
from evcharging.models.session import AuthSession

__all__ = [
    "AuthSession",
    "EVOwner",
    "Vehicle",
]
