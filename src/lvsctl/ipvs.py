"""
Ipvs facade: named ipvsadm operations built on a CommandExecutor.

Each operation builds an argument vector and hands it to the executor. The
executor is injected; when none is given the process-wide slot in
lvsctl.executor is read at call time. Executor failures come back either as
SubprocessFailure or, where the outcome has a domain meaning, as Conflict,
NotFound, DeleteFailed or ToolMissing.
"""

import os
import sys
from typing import Iterable, List, Optional, Tuple

from . import executor as executor_mod
from .errors import Conflict, DeleteFailed, LvsError, NotFound, SubprocessFailure, ToolMissing
from .executor import CommandExecutor
from .renderers.rules import render as render_rules
from .schema import IpvsConfig, Server, Service

_DEBUG = bool(os.environ.get("LVSCTL_DEBUG", ""))


def _debug(msg: str) -> None:
    if _DEBUG:
        print(f"[lvsctl] ipvs: {msg}", file=sys.stderr)


def _service_args(service: Service) -> List[str]:
    args = [service.flag, service.address, "-s", service.scheduler]
    if service.persistence:
        args += ["-p", str(service.persistence)]
    if service.netmask:
        args += ["-M", service.netmask]
    return args


def _server_args(service: Service, server: Server) -> List[str]:
    args = [
        service.flag, service.address,
        "-r", server.address,
        f"-{server.forwarder.value}",
        "-w", str(server.weight),
    ]
    if server.upper_threshold:
        args += ["-x", str(server.upper_threshold)]
    if server.lower_threshold:
        args += ["-y", str(server.lower_threshold)]
    return args


class Ipvs:
    """Operations on the kernel virtual-server table via ipvsadm.

    Keeps the list of services it has pushed so that add/remove can report
    Conflict and NotFound without reading ipvsadm's output back.
    """

    def __init__(
        self,
        config: Optional[IpvsConfig] = None,
        executor: Optional[CommandExecutor] = None,
    ) -> None:
        self.config = config or IpvsConfig()
        self._executor = executor
        self.services: List[Service] = []

    @property
    def executor(self) -> CommandExecutor:
        if self._executor is not None:
            return self._executor
        return executor_mod.get_backend()

    @property
    def binary(self) -> str:
        return self.config.ipvsadm

    def _ipvsadm(self, *args: str) -> None:
        self.executor.execute(self.binary, *args)

    # --- Whole-table operations ---

    def check(self) -> None:
        """Raise ToolMissing unless ipvsadm is on the command search path."""
        try:
            self.executor.execute("which", self.binary)
        except SubprocessFailure as e:
            _debug(f"lookup failed: {e}")
            raise ToolMissing() from e

    def load(self, services: Optional[Iterable[Service]] = None) -> None:
        """Verify ipvsadm is usable, then push services if any were given."""
        self.check()
        if services is not None:
            self.restore(services)

    def set_timeouts(self) -> None:
        t = self.config.timeouts
        self._ipvsadm("--set", str(t.tcp), str(t.tcpfin), str(t.udp))

    def start_daemon(self) -> Tuple[Optional[LvsError], Optional[LvsError]]:
        """Start master and backup sync daemons. Both are attempted; returns (master_error, backup_error)."""
        d = self.config.daemon
        results = []
        for state in ("master", "backup"):
            try:
                self._ipvsadm(
                    "--start-daemon", state,
                    "--mcast-interface", d.mcast_interface,
                    "--syncid", str(d.syncid),
                )
                results.append(None)
            except SubprocessFailure as e:
                _debug(f"start-daemon {state}: {e}")
                results.append(e)
        return results[0], results[1]

    def stop_daemon(self) -> Tuple[Optional[LvsError], Optional[LvsError]]:
        """Stop master and backup sync daemons. Both are attempted; returns (master_error, backup_error)."""
        results = []
        for state in ("master", "backup"):
            try:
                self._ipvsadm("--stop-daemon", state)
                results.append(None)
            except SubprocessFailure as e:
                _debug(f"stop-daemon {state}: {e}")
                results.append(e)
        return results[0], results[1]

    def clear(self) -> None:
        self._ipvsadm("-C")
        self.services = []

    def restore(self, services: Iterable[Service]) -> None:
        """Replace the whole table with services."""
        services = [s.model_copy(deep=True) for s in services]
        self.clear()
        rules = render_rules(services)
        _debug(f"restoring {len(services)} services")
        self.executor.execute_with_stdin(rules, self.binary, "-R")
        self.services = services

    def save(self) -> str:
        """Return the current table in ipvsadm -S format."""
        output = self.executor.run([self.binary, "-S", "-n"])
        return output.decode("utf-8", errors="replace")

    def zero(self) -> None:
        self._ipvsadm("-Z")

    # --- Services ---

    def find_service(self, service: Service) -> Optional[Service]:
        for s in self.services:
            if s.key() == service.key():
                return s
        return None

    def _require_service(self, service: Service) -> Service:
        found = self.find_service(service)
        if found is None:
            raise NotFound(f"service {service.type.value} {service.address} was not found")
        return found

    def add_service(self, service: Service) -> None:
        if self.find_service(service) is not None:
            raise Conflict(f"service {service.type.value} {service.address} already exists")
        self._ipvsadm("-A", *_service_args(service))
        added = service.model_copy(update={"servers": []}, deep=True)
        self.services.append(added)
        for server in service.servers:
            self.add_server(added, server)

    def remove_service(self, service: Service) -> None:
        found = self._require_service(service)
        try:
            self._ipvsadm("-D", service.flag, service.address)
        except SubprocessFailure as e:
            raise DeleteFailed(f"service {service.type.value} {service.address} was not deleted: {e}") from e
        self.services.remove(found)

    # --- Real servers ---

    def add_server(self, service: Service, server: Server) -> None:
        found = self._require_service(service)
        if found.find_server(server) is not None:
            raise Conflict(f"server {server.address} already exists on {service.address}")
        self._ipvsadm("-a", *_server_args(found, server))
        found.servers.append(server.model_copy(deep=True))

    def remove_server(self, service: Service, server: Server) -> None:
        found = self._require_service(service)
        existing = found.find_server(server)
        if existing is None:
            raise NotFound(f"server {server.address} was not found on {service.address}")
        try:
            self._ipvsadm("-d", found.flag, found.address, "-r", server.address)
        except SubprocessFailure as e:
            raise DeleteFailed(f"server {server.address} was not deleted from {service.address}: {e}") from e
        found.servers.remove(existing)


DEFAULT_IPVS = Ipvs()


def check() -> None:
    DEFAULT_IPVS.check()


def load(services: Optional[Iterable[Service]] = None) -> None:
    DEFAULT_IPVS.load(services)


def set_timeouts() -> None:
    DEFAULT_IPVS.set_timeouts()


def start_daemon() -> Tuple[Optional[LvsError], Optional[LvsError]]:
    return DEFAULT_IPVS.start_daemon()


def stop_daemon() -> Tuple[Optional[LvsError], Optional[LvsError]]:
    return DEFAULT_IPVS.stop_daemon()


def clear() -> None:
    DEFAULT_IPVS.clear()


def restore(services: Iterable[Service]) -> None:
    DEFAULT_IPVS.restore(services)


def save() -> str:
    return DEFAULT_IPVS.save()


def zero() -> None:
    DEFAULT_IPVS.zero()
