"""Tests for the ipvsadm -R rules renderer."""

import pytest
from pydantic import ValidationError

from lvsctl.renderers import make_environment
from lvsctl.renderers.rules import render
from lvsctl.schema import DaemonConfig, Server, Service


def test_empty_table_renders_nothing():
    assert render([]) == ""


def test_service_options():
    svc = Service(host="10.1.1.1", port=443, scheduler="sh", persistence=600, netmask="255.255.255.0")
    assert render([svc]) == "-A -t 10.1.1.1:443 -s sh -p 600 -M 255.255.255.0\n"


def test_fwmark_service_uses_mark_only():
    svc = Service(host="12", type="fwmark", servers=[Server(host="10.0.0.5", forwarder="i")])
    assert render([svc]) == (
        "-A -f 12 -s wlc\n"
        "-a -f 12 -r 10.0.0.5:0 -i -w 1\n"
    )


def test_server_thresholds_and_zero_weight():
    svc = Service(
        host="10.1.1.1",
        port=25,
        servers=[Server(host="10.0.0.1", port=25, weight=0, upper_threshold=50, lower_threshold=5)],
    )
    lines = render([svc], make_environment()).splitlines()
    assert lines[1] == "-a -t 10.1.1.1:25 -r 10.0.0.1:25 -m -w 0 -x 50 -y 5"


def test_one_line_per_rule():
    services = [
        Service(host="10.1.1.1", port=80, servers=[Server(host=f"10.0.0.{i}", port=80) for i in range(1, 4)]),
        Service(host="10.1.1.2", port=80, type="udp"),
    ]
    lines = render(services).splitlines()
    assert len(lines) == 5
    assert [line[:2] for line in lines] == ["-A", "-a", "-a", "-a", "-A"]


@pytest.mark.parametrize(
    "fields",
    [
        {"host": "10.0.0.1\n-C", "port": 80},
        {"host": "10.0.0.1", "port": 80, "scheduler": "wlc -p 99"},
        {"host": "10.0.0.1", "port": 80, "netmask": "255.255.255.0\n-C"},
        {"host": "10.0.0.1", "port": 80, "servers": [{"host": "10.0.0.2 -w 9", "port": 80}]},
        {"host": "", "port": 80},
    ],
)
def test_fields_that_would_split_a_rule_are_rejected(fields):
    with pytest.raises(ValidationError):
        Service.model_validate(fields)


def test_mcast_interface_must_be_one_token():
    with pytest.raises(ValidationError):
        DaemonConfig(mcast_interface="eth0 --syncid 9")
