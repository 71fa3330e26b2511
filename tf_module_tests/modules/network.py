"""Expected network topology of the VPC module."""

import ipaddress
from typing import Dict, List

DEFAULT_VPC_CIDR = "10.0.0.0/16"
DEFAULT_AZ_COUNT = 3
PRODUCTION_ENVIRONMENT = "prod"

PRIVATE_SUBNET_OFFSET = 1
PUBLIC_SUBNET_OFFSET = 101


def expected_nat_gateway_count(environment: str, az_count: int = DEFAULT_AZ_COUNT) -> int:
    """One NAT gateway per AZ in production, a single shared one elsewhere."""
    return az_count if environment == PRODUCTION_ENVIRONMENT else 1


def expected_subnet_layout(vpc_cidr: str = DEFAULT_VPC_CIDR, az_count: int = DEFAULT_AZ_COUNT) -> Dict[str, List[str]]:
    """
    The /24 split of a VPC CIDR into private and public subnets.

    Private subnets take the third-octet slots 1..az_count and public ones
    101..100+az_count, e.g. 10.0.1.0/24 and 10.0.101.0/24 for 10.0.0.0/16.

    Args:
        vpc_cidr: VPC network, /17 or larger
        az_count: Number of availability zones (one subnet of each kind per AZ)

    Returns:
        {"private": [...], "public": [...]}
    """
    network = ipaddress.ip_network(vpc_cidr)
    if network.prefixlen > 23:
        raise ValueError(f"VPC CIDR {vpc_cidr} is too small to split into /24 subnets")

    slots = list(network.subnets(new_prefix=24))
    needed = PUBLIC_SUBNET_OFFSET + az_count
    if len(slots) < needed:
        raise ValueError(f"VPC CIDR {vpc_cidr} has {len(slots)} /24 slots, {needed} needed")

    return {
        "private": [str(slots[PRIVATE_SUBNET_OFFSET + i]) for i in range(az_count)],
        "public": [str(slots[PUBLIC_SUBNET_OFFSET + i]) for i in range(az_count)],
    }


def is_subnet_of(subnet_cidr: str, vpc_cidr: str, prefixlen: int = 24) -> bool:
    """True when subnet_cidr has the given prefix length and lies inside vpc_cidr."""
    subnet = ipaddress.ip_network(subnet_cidr)
    return subnet.prefixlen == prefixlen and subnet.subnet_of(ipaddress.ip_network(vpc_cidr))
