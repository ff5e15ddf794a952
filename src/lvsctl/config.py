"""
Runtime configuration: defaults, then LVSCTL_* environment variables, then explicit overrides.
"""

import os
from typing import Any, Dict, Mapping, Optional

from .schema import IpvsConfig

# env var -> (section, field); section None means top level
ENV_VARS = {
    "LVSCTL_IPVSADM": (None, "ipvsadm"),
    "LVSCTL_TCP_TIMEOUT": ("timeouts", "tcp"),
    "LVSCTL_TCPFIN_TIMEOUT": ("timeouts", "tcpfin"),
    "LVSCTL_UDP_TIMEOUT": ("timeouts", "udp"),
    "LVSCTL_MCAST_INTERFACE": ("daemon", "mcast_interface"),
    "LVSCTL_SYNCID": ("daemon", "syncid"),
}


def _set(data: Dict[str, Any], section: Optional[str], field: str, value: Any) -> None:
    if section is None:
        data[field] = value
    else:
        data.setdefault(section, {})[field] = value


def load_config(
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> IpvsConfig:
    """Build an IpvsConfig.

    overrides uses dotted keys ("timeouts.tcp", "ipvsadm"); None values are skipped
    so argparse defaults can be passed straight through. Invalid values raise
    pydantic.ValidationError.
    """
    environ = os.environ if environ is None else environ
    data: Dict[str, Any] = {}
    for var, (section, field) in ENV_VARS.items():
        value = environ.get(var)
        if value:
            _set(data, section, field, value)
    for key, value in (overrides or {}).items():
        if value is None:
            continue
        section, _, field = key.rpartition(".")
        _set(data, section or None, field, value)
    return IpvsConfig.model_validate(data)
