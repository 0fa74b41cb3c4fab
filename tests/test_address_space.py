"""Tests for address-space arithmetic."""

import ipaddress

import pytest

from ipam.exceptions import ValidationError
from ipam.services import address_space


def net(cidr):
    return ipaddress.ip_network(cidr)


def ip(value):
    return ipaddress.ip_address(value)


class TestNextAddress:

    def test_simple_increment(self):
        assert address_space.next_address(ip("10.0.0.1")) == ip("10.0.0.2")

    def test_carries_into_next_octet(self):
        assert address_space.next_address(ip("10.0.0.255")) == ip("10.0.1.0")
        assert address_space.next_address(ip("10.255.255.255")) == ip("11.0.0.0")

    def test_wraps_at_top_of_family(self):
        assert address_space.next_address(ip("255.255.255.255")) == ip("0.0.0.0")

    def test_ipv6(self):
        assert address_space.next_address(ip("2001:db8::ffff")) == ip("2001:db8::1:0")

    def test_keeps_family(self):
        assert address_space.next_address(ip("::")).version == 6
        assert address_space.next_address(ip("0.0.0.0")).version == 4


class TestContains:

    def test_membership(self):
        assert address_space.contains(net("10.0.0.0/24"), ip("10.0.0.200"))
        assert not address_space.contains(net("10.0.0.0/24"), ip("10.0.1.0"))

    def test_mismatched_family_is_not_member(self):
        assert not address_space.contains(net("10.0.0.0/24"), ip("::1"))


class TestCandidates:

    def test_skips_base_and_gateway_keeps_last(self):
        got = [str(a) for a in address_space.candidates(net("10.0.0.0/30"), ip("10.0.0.1"))]
        assert got == ["10.0.0.2", "10.0.0.3"]

    def test_gateway_in_the_middle(self):
        got = [str(a) for a in address_space.candidates(net("10.0.0.0/29"), ip("10.0.0.4"))]
        assert got == ["10.0.0.1", "10.0.0.2", "10.0.0.3", "10.0.0.5", "10.0.0.6", "10.0.0.7"]

    def test_strictly_increasing(self):
        got = list(address_space.candidates(net("192.168.0.0/23"), ip("192.168.0.1")))
        assert all(a < b for a, b in zip(got, got[1:]))
        assert got[0] == ip("192.168.0.2")
        assert got[-1] == ip("192.168.1.255")

    def test_single_address_block_is_empty(self):
        assert list(address_space.candidates(net("10.0.0.5/32"), ip("10.0.0.5"))) == []

    def test_block_at_top_of_space_terminates(self):
        got = [str(a) for a in address_space.candidates(net("255.255.255.252/30"), ip("255.255.255.253"))]
        assert got == ["255.255.255.254", "255.255.255.255"]

    def test_lazy_over_large_ipv6_block(self):
        gen = address_space.candidates(net("2001:db8::/64"), ip("2001:db8::1"))
        assert next(gen) == ip("2001:db8::2")

    def test_restartable(self):
        block, gateway = net("10.0.0.0/29"), ip("10.0.0.1")
        assert list(address_space.candidates(block, gateway)) == list(address_space.candidates(block, gateway))


class TestCapacity:

    @pytest.mark.parametrize(
        "cidr,gateway",
        [
            ("10.0.0.0/30", "10.0.0.1"),
            ("10.0.0.0/29", "10.0.0.7"),
            ("10.0.0.0/24", "10.0.0.1"),
            ("10.0.0.0/31", "10.0.0.1"),
            ("10.0.0.5/32", "10.0.0.5"),
            ("10.0.0.0/30", "10.0.0.0"),
        ],
    )
    def test_matches_candidate_count(self, cidr, gateway):
        block, gw = net(cidr), ip(gateway)
        assert address_space.capacity(block, gw) == len(list(address_space.candidates(block, gw)))


class TestParsing:

    def test_parse_network_masks_host_bits(self):
        assert str(address_space.parse_network("10.0.0.5/24")) == "10.0.0.0/24"

    @pytest.mark.parametrize("value", ["", "10.0.0.0/33", "not-a-cidr", None])
    def test_parse_network_rejects_garbage(self, value):
        with pytest.raises(ValidationError):
            address_space.parse_network(value)

    def test_parse_address_normalizes(self):
        assert str(address_space.parse_address(" 2001:DB8:0:0::1 ")) == "2001:db8::1"

    @pytest.mark.parametrize("value", ["", "10.0.0.256", "10.0.0.0/24", "host"])
    def test_parse_address_rejects_garbage(self, value):
        with pytest.raises(ValidationError):
            address_space.parse_address(value)

    def test_is_allocatable(self):
        block, gateway = net("10.0.0.0/30"), ip("10.0.0.1")
        assert address_space.is_allocatable(block, gateway, ip("10.0.0.3"))
        assert not address_space.is_allocatable(block, gateway, ip("10.0.0.1"))
        assert not address_space.is_allocatable(block, gateway, ip("10.0.0.0"))
        assert not address_space.is_allocatable(block, gateway, ip("10.0.0.4"))
