"""
apcupsd Network Information Server (NIS) client.

This module provides an asynchronous client for the status port of an
apcupsd daemon. Requests and responses are framed with a two byte
big-endian length; a zero length record ends the response.
"""

import asyncio
import logging
import struct

from ..config import settings
from .errors import NISTransportError
from .models import RawRecord
from .parser import parse_record_line

logger = logging.getLogger(__name__)

STATUS_COMMAND = b"status"


def encode_command(command: bytes) -> bytes:
    """Frame a command as a big-endian unsigned length followed by the payload."""
    return struct.pack(">H", len(command)) + command


class NISClient:
    """
    An asynchronous client for apcupsd NIS servers.

    Every call opens and closes its own TCP connection.
    """

    def __init__(
        self,
        host: str = settings.UPS_HOST,
        port: int = settings.UPS_PORT,
        timeout: float = settings.TIMEOUT,
    ):
        """
        Initialize the NIS client.

        Args:
            host: The apcupsd hostname or IP address.
            port: The NIS port.
            timeout: Upper bound in seconds for one status exchange.
        """
        self.host = host
        self.port = port
        self.timeout = timeout
        logger.info("Initialized NIS client host=%s port=%s timeout=%s", self.host, self.port, self.timeout)

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    async def fetch_status(self) -> RawRecord:
        """
        Query the daemon for its status report.

        Returns:
            A dictionary of record keys to trimmed values.

        Raises:
            NISTransportError: On connect, write, read or framing failures and
                when the exchange exceeds the timeout.
            NISParseError: If a record has no ``:`` separator.
        """
        try:
            return await asyncio.wait_for(self._exchange(), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise NISTransportError(
                f"Timed out after {self.timeout}s querying {self.address}"
            ) from None

    async def _exchange(self) -> RawRecord:
        logger.debug("Connecting to %s", self.address)
        try:
            reader, writer = await asyncio.open_connection(self.host, self.port)
        except OSError as e:
            raise NISTransportError(f"Unable to connect to {self.address}: {e}") from e

        try:
            try:
                writer.write(encode_command(STATUS_COMMAND))
                await writer.drain()
            except OSError as e:
                raise NISTransportError(f"Error writing status command to {self.address}: {e}") from e

            record = await self._read_records(reader)
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError as e:
                logger.debug("Error closing connection to %s: %s", self.address, e)

        logger.debug("NIS status ok from %s (%d records)", self.address, len(record))
        return record

    async def _read_records(self, reader: asyncio.StreamReader) -> RawRecord:
        record: RawRecord = {}
        while True:
            size = struct.unpack(">h", await self._read_exactly(reader, 2, "record size"))[0]
            if size == 0:
                return record
            if size < 0:
                raise NISTransportError(f"Malformed record size {size} from {self.address}")

            data = await self._read_exactly(reader, size, "record data")
            key, value = parse_record_line(data.decode("utf-8", errors="replace"))
            record[key] = value

    async def _read_exactly(self, reader: asyncio.StreamReader, count: int, what: str) -> bytes:
        try:
            return await reader.readexactly(count)
        except asyncio.IncompleteReadError as e:
            raise NISTransportError(
                f"Connection to {self.address} closed while reading {what} "
                f"({len(e.partial)} of {count} bytes)"
            ) from e
        except OSError as e:
            raise NISTransportError(f"Error reading {what} from {self.address}: {e}") from e
