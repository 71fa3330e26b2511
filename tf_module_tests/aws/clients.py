"""Regional boto3 clients built from one shared session."""

import logging
from typing import Any, Dict, Optional

import boto3

logger = logging.getLogger(__name__)


class AwsClientFactory:
    """Builds and caches the boto3 clients the validators need for one region."""

    def __init__(
        self,
        region: str,
        endpoint_url: Optional[str] = None,
        session: Optional[boto3.session.Session] = None,
    ):
        """
        Initialize the factory.

        Args:
            region: AWS region
            endpoint_url: Optional endpoint override (LocalStack)
            session: Optional pre-built session; one is created for the region otherwise
        """
        self.region = region
        self.endpoint_url = endpoint_url
        self.session = session or boto3.session.Session(region_name=region)
        self._clients: Dict[str, Any] = {}

    def client(self, service: str):
        """Return the cached client for a service, creating it on first use."""
        if service not in self._clients:
            client_kwargs = {'region_name': self.region}
            if self.endpoint_url:
                client_kwargs['endpoint_url'] = self.endpoint_url
            logger.debug(f"Creating {service} client for {self.region}")
            self._clients[service] = self.session.client(service, **client_kwargs)
        return self._clients[service]

    @property
    def ec2(self):
        return self.client('ec2')

    @property
    def elbv2(self):
        return self.client('elbv2')

    @property
    def autoscaling(self):
        return self.client('autoscaling')

    @property
    def iam(self):
        return self.client('iam')

    @property
    def sts(self):
        return self.client('sts')

    def account_id(self) -> str:
        """Account the session is authenticated against."""
        return self.sts.get_caller_identity()['Account']
