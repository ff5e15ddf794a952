"""
Entry point: python -m lvsctl <command> ...

Exit codes: 0 success, 1 command failure, 2 bad input, 127 ipvsadm missing.
"""

import sys
from typing import List, Optional

from pydantic import ValidationError

from . import executor as executor_mod
from . import ipvs as ipvs_mod
from .cli import config_overrides, load_services, parse_args
from .config import load_config
from .errors import LvsError, ToolMissing


def _err(msg: str) -> None:
    print(f"[lvsctl] {msg}", file=sys.stderr)


def _report_pair(what: str, pair) -> int:
    rc = 0
    for state, error in zip(("master", "backup"), pair):
        if error is not None:
            _err(f"{what} {state}: {error}")
            rc = 1
    return rc


def _dispatch(ipvs: ipvs_mod.Ipvs, args) -> int:
    cmd = args.command
    if cmd == "check":
        ipvs.check()
    elif cmd == "load":
        services = load_services(args.services) if args.services else None
        ipvs.load(services)
    elif cmd == "clear":
        ipvs.clear()
    elif cmd == "restore":
        ipvs.restore(load_services(args.services))
    elif cmd == "save":
        sys.stdout.write(ipvs.save())
    elif cmd == "zero":
        ipvs.zero()
    elif cmd == "set-timeouts":
        ipvs.set_timeouts()
    elif cmd == "start-daemon":
        return _report_pair("start-daemon", ipvs.start_daemon())
    elif cmd == "stop-daemon":
        return _report_pair("stop-daemon", ipvs.stop_daemon())
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    if args.debug:
        executor_mod._DEBUG = True
        ipvs_mod._DEBUG = True
    try:
        config = load_config(config_overrides(args))
        ipvs = ipvs_mod.Ipvs(config)
        return _dispatch(ipvs, args)
    except ToolMissing as e:
        _err(str(e))
        return 127
    except LvsError as e:
        _err(str(e))
        return 1
    except (ValidationError, ValueError, OSError) as e:
        _err(f"invalid input: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
