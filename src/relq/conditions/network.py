"""
``inet`` / ``cidr`` / ``macaddr`` predicates.
"""

from __future__ import annotations

import ipaddress
from typing import TYPE_CHECKING, Any, Mapping

from ..errors import InvalidArgumentError
from .base import Condition, RenderContext

if TYPE_CHECKING:
    from .collector import ConditionCollector

_INET_OPERATORS = {
    "network_contained_by_strict": "<<",
    "network_contained_by_or_equal": "<<=",
    "network_contains_strict": ">>",
    "network_contains_or_equal": ">>=",
    "network_overlaps": "&&",
}

_MASKLEN_OPERATORS = {
    "network_masklen_eq": "=",
    "network_masklen_gt": ">",
    "network_masklen_lt": "<",
}

_MAC_OPERATORS = {
    "network_mac_equals": "=",
    "network_mac_not_equals": "<>",
    "network_mac_gt": ">",
    "network_mac_lt": "<",
}


def network_literal(address: Any) -> str:
    """
    Accepts text, :mod:`ipaddress` objects, or ``{"octets": [...], "mask": n}``.
    """

    if isinstance(address, str):
        return address
    if isinstance(address, (ipaddress.IPv4Address, ipaddress.IPv6Address,
                            ipaddress.IPv4Network, ipaddress.IPv6Network,
                            ipaddress.IPv4Interface, ipaddress.IPv6Interface)):
        return str(address)
    if isinstance(address, Mapping) and "octets" in address:
        ip = ".".join(str(octet) for octet in address["octets"])
        mask = address.get("mask")
        return f"{ip}/{mask}" if mask is not None else ip
    raise InvalidArgumentError(f"Cannot use {address!r} as a network address")


class NetworkConditionCollector:
    def __init__(self, parent: "ConditionCollector") -> None:
        self.parent = parent

    def _add(self, method: str, column: Any, values: Any = None) -> "ConditionCollector":
        return self.parent.add(Condition(f"network_{method}", column, values))

    def contained_by_strict(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("contained_by_strict", column, network_literal(value))

    def contained_by_or_equal(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("contained_by_or_equal", column, network_literal(value))

    def contains_strict(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("contains_strict", column, network_literal(value))

    def contains_or_equal(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("contains_or_equal", column, network_literal(value))

    def overlaps(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("overlaps", column, network_literal(value))

    def same_family(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("same_family", column, network_literal(value))

    def is_ipv4(self, column: Any) -> "ConditionCollector":
        return self._add("is_ipv4", column)

    def is_ipv6(self, column: Any) -> "ConditionCollector":
        return self._add("is_ipv6", column)

    def mask_length_equals(self, column: Any, length: int) -> "ConditionCollector":
        return self._add("masklen_eq", column, length)

    def mask_length_greater_than(self, column: Any, length: int) -> "ConditionCollector":
        return self._add("masklen_gt", column, length)

    def mask_length_less_than(self, column: Any, length: int) -> "ConditionCollector":
        return self._add("masklen_lt", column, length)

    def bitwise_and(self, column: Any, mask: Any, expected: Any) -> "ConditionCollector":
        return self._add("bitwise_and", column, {"mask": network_literal(mask), "expected": network_literal(expected)})

    def bitwise_or(self, column: Any, value: Any, expected: Any) -> "ConditionCollector":
        return self._add("bitwise_or", column, {"value": network_literal(value), "expected": network_literal(expected)})

    def mac_equals(self, column: Any, value: str) -> "ConditionCollector":
        return self._add("mac_equals", column, value)

    def mac_not_equals(self, column: Any, value: str) -> "ConditionCollector":
        return self._add("mac_not_equals", column, value)

    def mac_greater_than(self, column: Any, value: str) -> "ConditionCollector":
        return self._add("mac_gt", column, value)

    def mac_less_than(self, column: Any, value: str) -> "ConditionCollector":
        return self._add("mac_lt", column, value)

    def mac_trunc_equals(self, column: Any, oui: str) -> "ConditionCollector":
        return self._add("mac_trunc_equals", column, oui)

    def host_equals(self, column: Any, value: str) -> "ConditionCollector":
        return self._add("host_equals", column, value)

    def network_equals(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("network_equals", column, network_literal(value))

    def broadcast_equals(self, column: Any, value: Any) -> "ConditionCollector":
        return self._add("broadcast_equals", column, network_literal(value))


def build_network_sql(condition: Condition, ctx: RenderContext) -> str:
    ctx.require_postgres("Network")
    method, values = condition.method, condition.values
    col = ctx.column(condition.column)

    if method in _INET_OPERATORS:
        return f"{col} {_INET_OPERATORS[method]} inet {ctx.text(values)}"
    if method in _MASKLEN_OPERATORS:
        return f"masklen({col}) {_MASKLEN_OPERATORS[method]} {ctx.number(values)}"
    if method in _MAC_OPERATORS:
        return f"{col} {_MAC_OPERATORS[method]} macaddr {ctx.text(values)}"
    if method == "network_same_family":
        return f"inet_same_family({col}, inet {ctx.text(values)})"
    if method == "network_is_ipv4":
        return f"family({col}) = 4"
    if method == "network_is_ipv6":
        return f"family({col}) = 6"
    if method == "network_bitwise_and":
        return f"({col} & inet {ctx.text(values['mask'])}) = inet {ctx.text(values['expected'])}"
    if method == "network_bitwise_or":
        return f"({col} | inet {ctx.text(values['value'])}) = inet {ctx.text(values['expected'])}"
    if method == "network_mac_trunc_equals":
        return f"trunc({col}) = macaddr {ctx.text(values)}"
    if method == "network_host_equals":
        return f"host({col}) = {ctx.text(values)}"
    if method == "network_network_equals":
        return f"network({col}) = cidr {ctx.text(values)}"
    if method == "network_broadcast_equals":
        return f"broadcast({col}) = inet {ctx.text(values)}"
    raise InvalidArgumentError(f"Unknown network condition {method!r}")
