"""
Error types raised by the front end reconciler.
"""


class FrontEndError(Exception):
    """Base class for reconciler errors."""


class ConfigError(FrontEndError, ValueError):
    """Raised when an elb_v2 definition is malformed."""


class RetryBudgetExhausted(FrontEndError):
    """Raised when a retried operation never succeeded."""

    def __init__(self, description: str, attempts: int):
        self.description = description
        self.attempts = attempts
        super().__init__(f"{description} (gave up after {attempts} attempts)")


class LoadBalancerMissing(FrontEndError):
    """Raised when an operation needs a load balancer that does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"ELBv2 {name} doesn't exist")


class TargetGroupMissing(FrontEndError):
    """Raised when an operation needs a target group that does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Target group {name} doesn't exist")
