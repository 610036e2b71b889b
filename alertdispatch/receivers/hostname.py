"""Hostname resolution capability used for default event sources."""

import socket
from abc import ABC, abstractmethod


class HostnameResolver(ABC):

    @abstractmethod
    def hostname(self) -> str:
        """Return the local hostname.

        Raises:
            OSError: If the hostname cannot be determined
        """
        pass


class SocketHostnameResolver(HostnameResolver):

    def hostname(self) -> str:
        name = socket.gethostname()
        if not name:
            raise OSError("hostname is empty")
        return name
