"""
ELBv2 control-plane client interface and its boto3 implementation.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import ClientError

from .models import Listener, LoadBalancer, TargetGroup

logger = logging.getLogger(__name__)

LOAD_BALANCER_NOT_FOUND = "LoadBalancerNotFound"
TARGET_GROUP_NOT_FOUND = "TargetGroupNotFound"
RESOURCE_IN_USE = "ResourceInUse"


def error_code(exc: Exception) -> Optional[str]:
    """Return the control-plane error code of a ClientError, else None."""
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code")
    return None


def is_resource_in_use(exc: Exception) -> bool:
    """True for the transient failure raised while a resource is still referenced."""
    return error_code(exc) == RESOURCE_IN_USE


class ElbV2Client(ABC):
    """Operations the reconciler needs from the load-balancing control plane."""

    @abstractmethod
    def describe_load_balancer(self, name: str) -> Optional[LoadBalancer]:
        """Look up a load balancer by name; None when it doesn't exist."""

    @abstractmethod
    def describe_target_group(self, name: str) -> Optional[TargetGroup]:
        """Look up a target group by name; None when it doesn't exist."""

    @abstractmethod
    def describe_listeners(self, load_balancer_arn: str) -> List[Listener]:
        """List every listener of a load balancer."""

    @abstractmethod
    def create_load_balancer(self, name: str, subnets: List[str], security_groups: List[str],
                             scheme: Optional[str] = None,
                             tags: Optional[List[Dict[str, str]]] = None) -> LoadBalancer:
        pass

    @abstractmethod
    def create_target_group(self, name: str, port: int, protocol: str, vpc_id: str,
                            health_check_path: Optional[str] = None,
                            target_type: Optional[str] = None) -> TargetGroup:
        pass

    @abstractmethod
    def create_listener(self, load_balancer_arn: str, protocol: str, port: int,
                        default_actions: List[Dict[str, Any]],
                        certificates: Optional[List[Dict[str, str]]] = None) -> Listener:
        pass

    @abstractmethod
    def delete_listener(self, listener_arn: str) -> None:
        pass

    @abstractmethod
    def delete_load_balancer(self, load_balancer_arn: str) -> None:
        pass

    @abstractmethod
    def delete_target_group(self, target_group_arn: str) -> None:
        pass

    @abstractmethod
    def modify_load_balancer_attributes(self, load_balancer_arn: str,
                                        attributes: List[Dict[str, str]]) -> None:
        pass

    @abstractmethod
    def modify_target_group_attributes(self, target_group_arn: str,
                                       attributes: List[Dict[str, str]]) -> None:
        pass


def _without_none(params: Dict[str, Any]) -> Dict[str, Any]:
    # boto3 rejects explicit None for optional parameters
    return {key: value for key, value in params.items() if value is not None}


class Boto3ElbV2Client(ElbV2Client):
    """ElbV2Client backed by a boto3 'elbv2' client for a single region."""

    def __init__(self, region: str, session: Optional[boto3.session.Session] = None):
        self.region = region
        self.session = session
        self.elbv2_client = None

    def _get_client(self):
        """Lazy initialization of the ELBv2 client."""
        if self.elbv2_client is None:
            if self.session is not None:
                self.elbv2_client = self.session.client('elbv2', region_name=self.region)
            else:
                self.elbv2_client = boto3.client('elbv2', region_name=self.region)
        return self.elbv2_client

    def describe_load_balancer(self, name: str) -> Optional[LoadBalancer]:
        try:
            response = self._get_client().describe_load_balancers(Names=[name])
        except ClientError as e:
            if error_code(e) == LOAD_BALANCER_NOT_FOUND:
                logger.debug(f"ELBv2 {name} not found")
                return None
            raise
        load_balancers = response.get('LoadBalancers', [])
        return LoadBalancer.from_api(load_balancers[0]) if load_balancers else None

    def describe_target_group(self, name: str) -> Optional[TargetGroup]:
        try:
            response = self._get_client().describe_target_groups(Names=[name])
        except ClientError as e:
            if error_code(e) == TARGET_GROUP_NOT_FOUND:
                logger.debug(f"Target group {name} not found")
                return None
            raise
        target_groups = response.get('TargetGroups', [])
        return TargetGroup.from_api(target_groups[0]) if target_groups else None

    def describe_listeners(self, load_balancer_arn: str) -> List[Listener]:
        paginator = self._get_client().get_paginator('describe_listeners')
        listeners = []
        for page in paginator.paginate(LoadBalancerArn=load_balancer_arn):
            for listener in page.get('Listeners', []):
                listeners.append(Listener.from_api(listener))
        return listeners

    def create_load_balancer(self, name, subnets, security_groups, scheme=None, tags=None):
        response = self._get_client().create_load_balancer(**_without_none({
            'Name': name,
            'Subnets': list(subnets),
            'SecurityGroups': list(security_groups),
            'Scheme': scheme,
            'Tags': tags,
            'Type': 'application',
        }))
        return LoadBalancer.from_api(response['LoadBalancers'][0])

    def create_target_group(self, name, port, protocol, vpc_id, health_check_path=None, target_type=None):
        response = self._get_client().create_target_group(**_without_none({
            'Name': name,
            'Port': port,
            'Protocol': protocol,
            'VpcId': vpc_id,
            'HealthCheckPath': health_check_path,
            'TargetType': target_type,
        }))
        return TargetGroup.from_api(response['TargetGroups'][0])

    def create_listener(self, load_balancer_arn, protocol, port, default_actions, certificates=None):
        actions = [
            {'Type': action['type'], 'TargetGroupArn': action['target_group_arn']}
            for action in default_actions
        ]
        response = self._get_client().create_listener(**_without_none({
            'LoadBalancerArn': load_balancer_arn,
            'Protocol': protocol,
            'Port': port,
            'DefaultActions': actions,
            'Certificates': [{'CertificateArn': c['certificate_arn']} for c in certificates] if certificates else None,
        }))
        return Listener.from_api(response['Listeners'][0])

    def delete_listener(self, listener_arn):
        self._get_client().delete_listener(ListenerArn=listener_arn)

    def delete_load_balancer(self, load_balancer_arn):
        self._get_client().delete_load_balancer(LoadBalancerArn=load_balancer_arn)

    def delete_target_group(self, target_group_arn):
        self._get_client().delete_target_group(TargetGroupArn=target_group_arn)

    def modify_load_balancer_attributes(self, load_balancer_arn, attributes):
        self._get_client().modify_load_balancer_attributes(
            LoadBalancerArn=load_balancer_arn,
            Attributes=attributes,
        )

    def modify_target_group_attributes(self, target_group_arn, attributes):
        self._get_client().modify_target_group_attributes(
            TargetGroupArn=target_group_arn,
            Attributes=attributes,
        )
