"""
Virtual-server schema.

Typed description of the services and real servers lvsctl pushes into
ipvsadm, plus runtime configuration. Rules are rendered from these models;
ipvsadm's own output is never parsed back into them.
"""

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field


class Forwarder(str, Enum):
    MASQUERADE = "m"
    GATEWAYING = "g"
    IPIP = "i"


class Protocol(str, Enum):
    TCP = "tcp"
    UDP = "udp"
    FWMARK = "fwmark"


# single token: ipvsadm -R input is split on whitespace and newlines
TOKEN = r"^\S+$"

_SERVICE_FLAGS = {
    Protocol.TCP: "-t",
    Protocol.UDP: "-u",
    Protocol.FWMARK: "-f",
}


class Server(BaseModel):
    """Real server behind a virtual service."""

    host: str = Field(pattern=TOKEN)
    port: int = Field(default=0, ge=0, le=65535)
    forwarder: Forwarder = Forwarder.MASQUERADE
    weight: int = Field(default=1, ge=0)
    upper_threshold: int = Field(default=0, ge=0)
    lower_threshold: int = Field(default=0, ge=0)

    model_config = {"extra": "forbid"}

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    def key(self) -> Tuple[str, int]:
        return (self.host, self.port)


class Service(BaseModel):
    """Virtual service. For fwmark services host holds the mark and port is unused."""

    host: str = Field(pattern=TOKEN)
    port: int = Field(default=0, ge=0, le=65535)
    type: Protocol = Protocol.TCP
    scheduler: str = Field(default="wlc", pattern=TOKEN)
    persistence: int = Field(default=0, ge=0)
    netmask: Optional[str] = Field(default=None, pattern=TOKEN)
    servers: List[Server] = Field(default_factory=list)

    model_config = {"extra": "forbid"}

    @property
    def flag(self) -> str:
        return _SERVICE_FLAGS[self.type]

    @property
    def address(self) -> str:
        if self.type == Protocol.FWMARK:
            return self.host
        return f"{self.host}:{self.port}"

    def key(self) -> Tuple[str, str, int]:
        return (self.type.value, self.host, self.port)

    def find_server(self, server: Server) -> Optional[Server]:
        for s in self.servers:
            if s.key() == server.key():
                return s
        return None


# --- Runtime configuration ---


class Timeouts(BaseModel):
    """Connection timeouts in seconds, as passed to ipvsadm --set."""

    tcp: int = Field(default=900, ge=0)
    tcpfin: int = Field(default=120, ge=0)
    udp: int = Field(default=300, ge=0)

    model_config = {"extra": "forbid"}


class DaemonConfig(BaseModel):
    """Connection synchronization daemon settings."""

    mcast_interface: str = Field(default="eth0", pattern=TOKEN)
    syncid: int = Field(default=0, ge=0, le=255)

    model_config = {"extra": "forbid"}


class IpvsConfig(BaseModel):
    ipvsadm: str = "ipvsadm"
    timeouts: Timeouts = Field(default_factory=Timeouts)
    daemon: DaemonConfig = Field(default_factory=DaemonConfig)

    model_config = {"extra": "forbid"}
