"""Transport layer implementations."""

from .tcp_connection import TcpConnection

__all__ = ["TcpConnection"]
