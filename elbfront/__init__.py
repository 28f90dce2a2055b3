"""
elbfront - Load-balancing front end reconciler for containerized applications.

Converges, tunes and retires an application load balancer, its target group
and listeners for one application in one region.
"""

from .config import FrontEndSpec, ListenerSpec
from .errors import FrontEndError, ConfigError, RetryBudgetExhausted
from .reconciler import FrontEndReconciler

__version__ = "0.1.0"

__all__ = [
    "FrontEndReconciler",
    "FrontEndSpec",
    "ListenerSpec",
    "FrontEndError",
    "ConfigError",
    "RetryBudgetExhausted",
]
