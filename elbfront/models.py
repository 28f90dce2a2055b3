"""
Data models for remote ELBv2 entities.
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class LoadBalancer:
    """An application load balancer as reported by the control plane."""
    name: str
    arn: str
    dns_name: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "LoadBalancer":
        return cls(
            name=data["LoadBalancerName"],
            arn=data["LoadBalancerArn"],
            dns_name=data.get("DNSName", ""),
        )


@dataclass(frozen=True)
class TargetGroup:
    """The single target group fronting an application's containers."""
    name: str
    arn: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "TargetGroup":
        return cls(name=data["TargetGroupName"], arn=data["TargetGroupArn"])


@dataclass(frozen=True)
class Listener:
    """A protocol/port binding on a load balancer."""
    arn: str
    port: int
    protocol: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Listener":
        return cls(
            arn=data["ListenerArn"],
            port=int(data["Port"]),
            protocol=data.get("Protocol", ""),
        )
