"""
Shared fixtures: an in-memory ELBv2 control plane and a sample front end.
"""

import pytest
from unittest.mock import Mock

from elbfront.client import ElbV2Client
from elbfront.config import FrontEndSpec
from elbfront.models import Listener, LoadBalancer, TargetGroup
from elbfront.retry import RetryPolicy

MUTATING_CALLS = {
    "create_load_balancer",
    "create_target_group",
    "create_listener",
    "delete_listener",
    "delete_load_balancer",
    "delete_target_group",
    "modify_load_balancer_attributes",
    "modify_target_group_attributes",
}


class FakeElbV2Client(ElbV2Client):
    """Keeps load balancers, target groups and listeners in dicts and records every call."""

    def __init__(self):
        self.load_balancers = {}
        self.target_groups = {}
        self.listeners = {}  # load balancer arn -> [Listener]
        self.attributes = {}
        self.calls = []
        self.delete_target_group_errors = []
        self._seq = 0

    def _arn(self, kind, name):
        self._seq += 1
        return f"arn:aws:elasticloadbalancing:us-west-2:123456789012:{kind}/{name}/{self._seq:04d}"

    def mutating_calls(self):
        return [c for c in self.calls if c[0] in MUTATING_CALLS]

    def calls_to(self, method):
        return [kwargs for name, kwargs in self.calls if name == method]

    # Seeding helpers

    def add_load_balancer(self, name, ports=()):
        lb = LoadBalancer(name=name, arn=self._arn("loadbalancer/app", name), dns_name=f"{name}.elb.amazonaws.com")
        self.load_balancers[name] = lb
        self.listeners[lb.arn] = [
            Listener(arn=self._arn("listener/app", name), port=port, protocol="HTTP") for port in ports
        ]
        return lb

    def add_target_group(self, name):
        tg = TargetGroup(name=name, arn=self._arn("targetgroup", name))
        self.target_groups[name] = tg
        return tg

    # ElbV2Client

    def describe_load_balancer(self, name):
        self.calls.append(("describe_load_balancer", {"name": name}))
        return self.load_balancers.get(name)

    def describe_target_group(self, name):
        self.calls.append(("describe_target_group", {"name": name}))
        return self.target_groups.get(name)

    def describe_listeners(self, load_balancer_arn):
        self.calls.append(("describe_listeners", {"load_balancer_arn": load_balancer_arn}))
        return list(self.listeners.get(load_balancer_arn, []))

    def create_load_balancer(self, name, subnets, security_groups, scheme=None, tags=None):
        self.calls.append(("create_load_balancer", {
            "name": name, "subnets": subnets, "security_groups": security_groups,
            "scheme": scheme, "tags": tags,
        }))
        return self.add_load_balancer(name)

    def create_target_group(self, name, port, protocol, vpc_id, health_check_path=None, target_type=None):
        self.calls.append(("create_target_group", {
            "name": name, "port": port, "protocol": protocol, "vpc_id": vpc_id,
            "health_check_path": health_check_path, "target_type": target_type,
        }))
        return self.add_target_group(name)

    def create_listener(self, load_balancer_arn, protocol, port, default_actions, certificates=None):
        self.calls.append(("create_listener", {
            "load_balancer_arn": load_balancer_arn, "protocol": protocol, "port": port,
            "default_actions": default_actions, "certificates": certificates,
        }))
        listener = Listener(arn=self._arn("listener/app", str(port)), port=port, protocol=protocol)
        self.listeners.setdefault(load_balancer_arn, []).append(listener)
        return listener

    def delete_listener(self, listener_arn):
        self.calls.append(("delete_listener", {"listener_arn": listener_arn}))
        for arn, listeners in self.listeners.items():
            self.listeners[arn] = [l for l in listeners if l.arn != listener_arn]

    def delete_load_balancer(self, load_balancer_arn):
        self.calls.append(("delete_load_balancer", {"load_balancer_arn": load_balancer_arn}))
        for name, lb in list(self.load_balancers.items()):
            if lb.arn == load_balancer_arn:
                del self.load_balancers[name]
        self.listeners.pop(load_balancer_arn, None)

    def delete_target_group(self, target_group_arn):
        self.calls.append(("delete_target_group", {"target_group_arn": target_group_arn}))
        if self.delete_target_group_errors:
            raise self.delete_target_group_errors.pop(0)
        for name, tg in list(self.target_groups.items()):
            if tg.arn == target_group_arn:
                del self.target_groups[name]

    def modify_load_balancer_attributes(self, load_balancer_arn, attributes):
        self.calls.append(("modify_load_balancer_attributes", {
            "load_balancer_arn": load_balancer_arn, "attributes": attributes,
        }))
        self.attributes[load_balancer_arn] = attributes

    def modify_target_group_attributes(self, target_group_arn, attributes):
        self.calls.append(("modify_target_group_attributes", {
            "target_group_arn": target_group_arn, "attributes": attributes,
        }))
        self.attributes[target_group_arn] = attributes


def make_spec(**kw):
    base = dict(
        subnets=["subnet-aaaa", "subnet-bbbb"],
        security_groups=["sg-1234"],
        vpc_id="vpc-5678",
        listeners=[
            {"protocol": "HTTP", "port": 80},
            {"protocol": "HTTPS", "port": 443, "certificate_arn": "arn:aws:acm:us-west-2:123456789012:certificate/abc"},
        ],
    )
    base.update(kw)
    return FrontEndSpec.from_dict(base)


@pytest.fixture
def fake_client():
    return FakeElbV2Client()


@pytest.fixture
def no_sleep_policy():
    return RetryPolicy(max_attempts=30, backoff=1.0, sleep=Mock())
