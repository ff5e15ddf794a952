"""ipvsadm -R renderer: one -A line per service, one -a line per real server."""

from typing import Iterable, Optional

from jinja2 import Environment

from ..schema import Service
from . import make_environment

RULES_TEMPLATE = """\
{% for svc in services %}
-A {{ svc.flag }} {{ svc.address }} -s {{ svc.scheduler }}
{%- if svc.persistence %} -p {{ svc.persistence }}{% endif %}
{%- if svc.netmask %} -M {{ svc.netmask }}{% endif %}

{% for srv in svc.servers %}
-a {{ svc.flag }} {{ svc.address }} -r {{ srv.address }} -{{ srv.forwarder.value }} -w {{ srv.weight }}
{%- if srv.upper_threshold %} -x {{ srv.upper_threshold }}{% endif %}
{%- if srv.lower_threshold %} -y {{ srv.lower_threshold }}{% endif %}

{% endfor %}
{% endfor %}
"""


def render(services: Iterable[Service], env: Optional[Environment] = None) -> str:
    env = env or make_environment()
    return env.from_string(RULES_TEMPLATE).render(services=list(services))
