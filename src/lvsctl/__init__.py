"""lvsctl: run ipvsadm commands and report structured success or failure."""

__version__ = "0.1.0"
