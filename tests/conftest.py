import asyncio
import struct
from typing import Dict, List, Tuple

import pytest
import pytest_asyncio
from click.testing import CliRunner

from apcups_exporter.config import Settings

# Trimmed from a real Back-UPS XS 950U report
SAMPLE_LINES = [
    "APC      : 001,036,0923",
    "DATE     : 2016-08-30 17:12:01 +0200",
    "HOSTNAME : beaker.murf.org",
    "VERSION  : 3.14.10 (13 September 2011) debian",
    "UPSNAME  : backups-950",
    "CABLE    : USB Cable",
    "DRIVER   : USB UPS Driver",
    "UPSMODE  : Stand Alone",
    "MODEL    : Back-UPS XS 950U",
    "STATUS   : ONLINE",
    "LINEV    : 242.0 Volts",
    "LOADPCT  : 5.0 Percent Load Capacity",
    "BCHARGE  : 100.0 Percent",
    "TIMELEFT : 104.6 Minutes",
    "MBATTCHG : 5 Percent",
    "MINTIMEL : 3 Minutes",
    "MAXTIME  : 0 Seconds",
    "SENSE    : Medium",
    "LOTRANS  : 155.0 Volts",
    "HITRANS  : 280.0 Volts",
    "ALARMDEL : 30 seconds",
    "BATTV    : 13.5 Volts",
    "LASTXFER : Unacceptable line voltage changes",
    "NUMXFERS : 0",
    "TONBATT  : 0 seconds",
    "CUMONBATT: 0 seconds",
    "XOFFBATT : N/A",
    "SELFTEST : NO",
    "STATFLAG : 0x07000008 Status Flag",
    "SERIALNO : 3B1443X05291",
    "NOMINV   : 230 Volts",
    "NOMBATTV : 12.0 Volts",
    "NOMPOWER : 480 Watts",
]


def encode_records(lines: List[str]) -> bytes:
    """Frame records the way apcupsd does, including the zero terminator."""
    out = b""
    for line in lines:
        data = (line + "\n").encode()
        out += struct.pack(">h", len(data)) + data
    return out + struct.pack(">h", 0)


def record_from_lines(lines: List[str]) -> Dict[str, str]:
    record = {}
    for line in lines:
        key, _, value = line.partition(":")
        record[key.strip()] = value.strip()
    return record


class FakeNISServer:
    """A local stand-in for the apcupsd NIS port."""

    def __init__(self):
        self.response = encode_records(SAMPLE_LINES)
        self.requests: List[bytes] = []
        self.delay = 0.0
        self.connections = 0
        self._server: asyncio.AbstractServer | None = None

    @property
    def address(self) -> Tuple[str, int]:
        return self._server.sockets[0].getsockname()[:2]

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        self.connections += 1
        try:
            size = struct.unpack(">H", await reader.readexactly(2))[0]
            self.requests.append(await reader.readexactly(size))
            if self.delay:
                await asyncio.sleep(self.delay)
            writer.write(self.response)
            await writer.drain()
        except (asyncio.IncompleteReadError, ConnectionError):
            pass
        finally:
            writer.close()

    async def start(self):
        self._server = await asyncio.start_server(self._handle, "127.0.0.1", 0)

    async def close(self):
        self._server.close()
        await self._server.wait_closed()


@pytest_asyncio.fixture
async def nis_server():
    server = FakeNISServer()
    await server.start()
    yield server
    await server.close()


class RecordingSink:
    """MetricsSink that keeps the last value per (name, labels)."""

    def __init__(self):
        self.values: Dict[Tuple[str, Tuple[Tuple[str, str], ...]], float] = {}
        self.calls: List[Tuple[str, Dict[str, str], float]] = []
        self.removed: List[Tuple[str, Dict[str, str]]] = []

    def set_gauge(self, name, labels, value):
        self.calls.append((name, dict(labels), value))
        self.values[(name, tuple(sorted(labels.items())))] = value

    def remove_gauge(self, name, labels):
        self.removed.append((name, dict(labels)))
        self.values.pop((name, tuple(sorted(labels.items()))), None)

    def get(self, name, **labels):
        return self.values.get((name, tuple(sorted(labels.items()))))


@pytest.fixture
def sample_lines():
    return list(SAMPLE_LINES)


@pytest.fixture
def sample_record():
    return record_from_lines(SAMPLE_LINES)


@pytest.fixture
def recording_sink():
    return RecordingSink()


@pytest.fixture
def test_settings():
    return Settings(POLL_INTERVAL=1, TIMEOUT=2.0)


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture
def frame_records():
    return encode_records
