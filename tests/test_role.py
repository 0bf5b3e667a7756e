"""Tests for ROLE reply parsing."""

from fantastico.role import PeerAddress, Role, RoleDescriptor, SlaveInfo, parse_role


class TestParseRole:
    def test_master(self) -> None:
        descriptor = parse_role(
            ["master", 1234567890, [[1, 2, 1234567890], [2, 3, 1234567890]]]
        )

        assert descriptor == RoleDescriptor(
            role=Role.MASTER,
            offset=1234567890,
            slaves=(
                SlaveInfo(host=1, port=2, offset=1234567890),
                SlaveInfo(host=2, port=3, offset=1234567890),
            ),
        )
        assert descriptor.master is None
        assert descriptor.status is None
        assert descriptor.ready is None

    def test_master_without_slaves(self) -> None:
        descriptor = parse_role(["master", 0, []])

        assert descriptor is not None
        assert descriptor.role == Role.MASTER
        assert descriptor.slaves == ()
        assert descriptor.peers == []

    def test_master_wire_values(self) -> None:
        descriptor = parse_role(
            [b"master", 3129659, [[b"127.0.0.1", b"9001", b"3129242"]]]
        )

        assert descriptor is not None
        assert descriptor.slaves == (SlaveInfo(host="127.0.0.1", port=9001, offset=3129242),)
        assert descriptor.peers == [PeerAddress("127.0.0.1", 9001)]

    def test_slave(self) -> None:
        descriptor = parse_role(["slave", "h", 6379, "connected", 42])

        assert descriptor == RoleDescriptor(
            role=Role.SLAVE,
            master=PeerAddress(host="h", port=6379),
            status="connected",
            offset=42,
            ready=True,
        )
        assert descriptor.slaves is None
        assert descriptor.peers == [PeerAddress("h", 6379)]

    def test_slave_not_connected(self) -> None:
        descriptor = parse_role(["slave", "h", 6379, "sync", -1])

        assert descriptor is not None
        assert descriptor.status == "sync"
        assert descriptor.offset == -1
        assert descriptor.ready is False

    def test_slave_wire_values(self) -> None:
        descriptor = parse_role([b"slave", b"10.0.0.1", 6379, b"connected", 3167038])

        assert descriptor is not None
        assert descriptor.master == PeerAddress("10.0.0.1", 6379)
        assert descriptor.status == "connected"
        assert descriptor.ready is True

    def test_sentinel(self) -> None:
        descriptor = parse_role([b"sentinel", [b"resque-master", b"html-fragments-master"]])

        assert descriptor == RoleDescriptor(
            role=Role.SENTINEL,
            masters=("resque-master", "html-fragments-master"),
        )
        assert descriptor.peers == []

    def test_unknown_tag(self) -> None:
        assert parse_role(["leader", 1, 2]) is None

    def test_empty(self) -> None:
        assert parse_role([]) is None
        assert parse_role(None) is None

    def test_deterministic(self) -> None:
        response = ["master", 7, [["a", 1, 7]]]
        assert parse_role(response) == parse_role(response)
        assert response == ["master", 7, [["a", 1, 7]]]
