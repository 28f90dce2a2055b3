"""
Reconciler for an application's load-balancing front end.

Converges a load balancer, its target group and listeners toward the
definition, tunes their attributes, and retires them when the application
is decommissioned. Every remote entity is looked up by name on each call,
so repeated runs are idempotent as long as names are unique remotely.
"""

import logging
from typing import Any, Dict, List, Optional

from .client import Boto3ElbV2Client, ElbV2Client, is_resource_in_use
from .config import FrontEndSpec, target_group_delete_policy
from .errors import LoadBalancerMissing, TargetGroupMissing
from .executor import describe_call, make_executor
from .models import LoadBalancer, TargetGroup
from .retry import RetryPolicy, retry_call
from .tags import to_attribute_pairs, to_tag_list

logger = logging.getLogger(__name__)

# Stands in for an ARN that only exists once a dry-run creation really happens.
UNKNOWN_ARN = "unknown"

TARGET_GROUP_PORT = 80
TARGET_GROUP_PROTOCOL = "HTTP"


class FrontEndReconciler:
    """Manages the ELBv2 front end of one application in one region."""

    def __init__(self, app_id: str, region: str, spec: Optional[FrontEndSpec],
                 dry_run: bool = False, client: Optional[ElbV2Client] = None,
                 retry_policy: Optional[RetryPolicy] = None):
        self.app_id = app_id
        self.region = region
        self.spec = spec
        self.dry_run = dry_run
        self.client = client if client is not None else Boto3ElbV2Client(region)
        self.executor = make_executor(self.client, dry_run)
        self.retry_policy = retry_policy if retry_policy is not None else target_group_delete_policy()

    @property
    def name(self) -> str:
        """Target group name, and load balancer name unless overridden."""
        return f"hako-{self.app_id}"

    @property
    def load_balancer_name(self) -> str:
        if self.spec is not None and self.spec.elb_name:
            return self.spec.elb_name
        return self.name

    def describe_load_balancer(self) -> Optional[LoadBalancer]:
        return self.client.describe_load_balancer(self.load_balancer_name)

    def describe_target_group(self) -> Optional[TargetGroup]:
        return self.client.describe_target_group(self.name)

    def converge(self, front_port: Optional[int] = None) -> bool:
        """
        Create whatever part of the front end is missing.

        Args:
            front_port: Port of the front container (accepted for the
                scheduler's calling convention; listeners come from the definition)

        Returns:
            False when no front end is managed, True once converged
        """
        if self.spec is None:
            return False

        load_balancer = self.describe_load_balancer()
        if load_balancer is None:
            load_balancer = self.executor.call("create_load_balancer", {
                "name": self.load_balancer_name,
                "subnets": list(self.spec.subnets),
                "security_groups": list(self.spec.security_groups),
                "scheme": self.spec.scheme,
                "tags": to_tag_list(self.spec.tags),
            }, done=lambda lb: f"Created ELBv2 {lb.dns_name}")

        target_group = self.describe_target_group()
        if target_group is None:
            target_group = self.executor.call("create_target_group", {
                "name": self.name,
                "port": TARGET_GROUP_PORT,
                "protocol": TARGET_GROUP_PROTOCOL,
                "vpc_id": self.spec.vpc_id,
                "health_check_path": self.spec.health_check_path,
                "target_type": self.spec.target_type,
            }, done=lambda tg: f"Created target group {tg.arn}")

        load_balancer_arn = load_balancer.arn if load_balancer else UNKNOWN_ARN
        target_group_arn = target_group.arn if target_group else UNKNOWN_ARN

        # Listeners are identified by port only; a protocol change on an
        # existing port is not detected.
        listener_ports = set()
        if load_balancer is not None:
            listener_ports = {l.port for l in self.client.describe_listeners(load_balancer_arn)}

        for listener_spec in self.spec.listeners:
            if listener_spec.port in listener_ports:
                continue
            params: Dict[str, Any] = {
                "load_balancer_arn": load_balancer_arn,
                "protocol": listener_spec.protocol,
                "port": listener_spec.port,
                "default_actions": [{"type": "forward", "target_group_arn": target_group_arn}],
            }
            if listener_spec.certificate_arn:
                params["certificates"] = [{"certificate_arn": listener_spec.certificate_arn}]
            self.executor.call("create_listener", params, done=lambda l: f"Created listener {l.arn}")
            listener_ports.add(listener_spec.port)

        return True

    def tune(self) -> None:
        """Apply load balancer and target group attribute overrides."""
        if self.spec is None:
            return None

        if self.spec.load_balancer_attributes is not None:
            attributes = to_attribute_pairs(self.spec.load_balancer_attributes)
            load_balancer = self.describe_load_balancer()
            if load_balancer is None and not self.dry_run:
                raise LoadBalancerMissing(self.load_balancer_name)
            self.executor.call("modify_load_balancer_attributes", {
                "load_balancer_arn": load_balancer.arn if load_balancer else UNKNOWN_ARN,
                "attributes": attributes,
            }, done=lambda _: f"Updated ELBv2 attributes to {attributes}")

        if self.spec.target_group_attributes is not None:
            attributes = to_attribute_pairs(self.spec.target_group_attributes)
            target_group = self.describe_target_group()
            if target_group is None and not self.dry_run:
                raise TargetGroupMissing(self.name)
            self.executor.call("modify_target_group_attributes", {
                "target_group_arn": target_group.arn if target_group else UNKNOWN_ARN,
                "attributes": attributes,
            }, done=lambda _: f"Updated target group attributes to {attributes}")

        return None

    def retire(self) -> bool:
        """
        Tear down the front end.

        Listeners on configured ports are pruned first when the load balancer
        carries a different number of listeners than configured. The load
        balancer itself is only deleted once no listener would remain.

        Returns:
            False when no front end is managed, True otherwise
        """
        if self.spec is None:
            return False

        load_balancer = self.describe_load_balancer()
        if load_balancer is not None:
            listeners = self.client.describe_listeners(load_balancer.arn)
            if len(listeners) != len(self.spec.listeners):
                configured_ports = set(self.spec.listener_ports)
                simulated_deletions = 0
                for listener in listeners:
                    if listener.port not in configured_ports:
                        continue
                    self.executor.call(
                        "delete_listener",
                        {"listener_arn": listener.arn},
                        done=lambda _, l=listener: f"Deleted port {l.port} listener {l.arn}",
                    )
                    if self.executor.dry_run:
                        simulated_deletions += 1

                remaining = len(self.client.describe_listeners(load_balancer.arn)) - simulated_deletions
                if remaining == 0:
                    self._delete_load_balancer(load_balancer)
                else:
                    logger.info(f"ELBv2 {load_balancer.arn} still has {remaining} listeners, so it is not removed")
            else:
                self._delete_load_balancer(load_balancer)
        else:
            logger.info(f"ELBv2 {self.load_balancer_name} doesn't exist")

        target_group = self.describe_target_group()
        if target_group is not None:
            self._delete_target_group(target_group)

        return True

    def _delete_load_balancer(self, load_balancer: LoadBalancer) -> None:
        self.executor.call(
            "delete_load_balancer",
            {"load_balancer_arn": load_balancer.arn},
            done=lambda _: f"Deleted ELBv2 {load_balancer.arn}",
        )

    def _delete_target_group(self, target_group: TargetGroup) -> None:
        # The target group stays in use until in-flight deregistrations drain.
        self.executor.run(
            describe_call("delete_target_group", {"target_group_arn": target_group.arn}),
            lambda: retry_call(
                lambda: self.client.delete_target_group(target_group_arn=target_group.arn),
                is_resource_in_use,
                self.retry_policy,
                f"Cannot delete target group {target_group.arn}",
            ),
            done=lambda _: f"Deleted target group {target_group.arn}",
        )

    def load_balancer_params_for_front_end(self) -> Optional[Dict[str, Any]]:
        """
        Parameters for registering the front container with the ECS service.

        Returns:
            Dict shaped like an ECS ``loadBalancers`` entry, or None when no
            front end is managed

        Raises:
            TargetGroupMissing: If converge hasn't created the target group
        """
        if self.spec is None:
            return None
        target_group = self.describe_target_group()
        if target_group is None:
            raise TargetGroupMissing(self.name)
        return {
            "targetGroupArn": target_group.arn,
            "containerName": self.spec.container_name,
            "containerPort": self.spec.container_port,
        }

    def status_lines(self, container_name: str, container_port: int) -> List[str]:
        """Describe where each listener forwards, one line per listener."""
        if self.spec is None:
            return []
        load_balancer = self.describe_load_balancer()
        if load_balancer is None:
            return []
        return [
            f"{load_balancer.dns_name}:{listener.port} -> {container_name}:{container_port}"
            for listener in self.client.describe_listeners(load_balancer.arn)
        ]
