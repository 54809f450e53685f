# sqliradar/scanners/ports.py - Asynchronous TCP connect scanning

import asyncio
from typing import Iterable, List, Optional

from ..utils.logger import setup_logger

logger = setup_logger("ports")


class PortScanner:
    """TCP connect scanner for a single host."""

    def __init__(self, host: str, semaphore: asyncio.Semaphore, timeout: float = 3):
        """
        Initialize the port scanner.

        Args:
            host: Hostname or IP address to scan
            semaphore: Permit pool bounding concurrent connection attempts
            timeout: Connect timeout in seconds
        """
        self.host = host
        self.semaphore = semaphore
        self.timeout = timeout

    async def scan(self, ports: Iterable[int]) -> List[int]:
        """Return the open ports among ``ports``, ascending."""
        results = await asyncio.gather(*(self.check_port(port) for port in ports))
        return sorted(port for port in results if port is not None)

    async def check_port(self, port: int) -> Optional[int]:
        async with self.semaphore:
            try:
                _, writer = await asyncio.wait_for(
                    asyncio.open_connection(self.host, port),
                    timeout=self.timeout,
                )
            except (asyncio.TimeoutError, ConnectionRefusedError, OSError):
                return None

            writer.close()
            try:
                await writer.wait_closed()
            except (ConnectionError, OSError) as e:
                logger.debug(f"Closing {self.host}:{port} failed: {e}")

        logger.info(f"Port {port} is OPEN")
        return port
