"""Renderers turn schema models into input for ipvsadm."""

from jinja2 import Environment


def make_environment() -> Environment:
    return Environment(
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
