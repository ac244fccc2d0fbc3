"""CIDR Handlers — netmask, range, host and subnets over IPv4 and IPv6.

Invariants:
    - Prefixes may carry host bits ("10.0.0.5/24" means 10.0.0.0/24)
    - cidrrange returns [network address, broadcast/last address]
    - cidrhost fails when the host number falls outside the network
    - cidrsubnets fails when prefix length + newbits exceeds 32 (v4) / 128 (v6);
      otherwise returns 2^newbits subnets in ascending address order
"""

import ipaddress

from hclrender.core.domain_types import Value
from hclrender.core.function_types import FunctionError, FunctionResult
from hclrender.core.values import is_integral


def _network(prefix: str) -> ipaddress.IPv4Network | ipaddress.IPv6Network | FunctionError:
    try:
        return ipaddress.ip_network(prefix, strict=False)
    except ValueError as e:
        return FunctionError(f"invalid CIDR prefix: {e}")


def cidrnetmask(args: list[Value]) -> FunctionResult:
    network = _network(args[0])
    if isinstance(network, FunctionError):
        return network
    return str(network.netmask)


def cidrrange(args: list[Value]) -> FunctionResult:
    network = _network(args[0])
    if isinstance(network, FunctionError):
        return network
    return [str(network.network_address), str(network.broadcast_address)]


def cidrhost(args: list[Value]) -> FunctionResult:
    prefix, host_num = args
    network = _network(prefix)
    if isinstance(network, FunctionError):
        return network
    if not is_integral(host_num):
        return FunctionError("host number must be a whole number")
    host_num = int(host_num)
    if not 0 <= host_num < network.num_addresses:
        return FunctionError(
            f"host number {host_num} is outside {network} "
            f"({network.num_addresses} addresses)",
        )
    return str(network.network_address + host_num)


def cidrsubnets(args: list[Value]) -> FunctionResult:
    prefix, newbits = args
    network = _network(prefix)
    if isinstance(network, FunctionError):
        return network
    if not is_integral(newbits) or newbits < 0:
        return FunctionError("newbits must be a non-negative whole number")
    newbits = int(newbits)
    if network.prefixlen + newbits > network.max_prefixlen:
        return FunctionError(
            f"new prefix length exceeds {network.max_prefixlen} bits",
        )
    return [str(subnet) for subnet in network.subnets(prefixlen_diff=newbits)]
