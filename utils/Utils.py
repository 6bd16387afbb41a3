import binascii
import io
import json
import struct
import logging
import os
from typing import (
    Mapping, Union, BinaryIO)

from utils.Errors import TxDecodeError

logging.basicConfig(
    level=getattr(logging, os.environ.get('CF_LOG_LEVEL', 'INFO')),
    format='[%(asctime)s][%(module)s:%(lineno)d] %(levelname)s %(message)s')
logger = logging.getLogger(__name__)


class Utils(object):

    @classmethod
    def serialize(cls, obj) -> str:
        """NamedTuple-flavored serialization to JSON, for logging fixtures."""
        def contents_to_primitive(o):
            if hasattr(o, '_asdict'):
                o = {**o._asdict(), '_type': type(o).__name__}
            elif isinstance(o, (list, tuple)):
                return [contents_to_primitive(i) for i in o]
            elif isinstance(o, bytes):
                return binascii.hexlify(o).decode()
            elif not isinstance(o, (dict, bytes, str, int, bool, type(None))):
                raise ValueError(f"Can't serialize {o}")
            if isinstance(o, Mapping):
                for k, v in o.items():
                    o[k] = contents_to_primitive(v)
            return o
        return json.dumps(contents_to_primitive(obj), sort_keys=True, separators=(',', ':'))

    # ————————————————binary helpers——————————————————

    @classmethod
    def encode_varint(cls, n: int) -> bytes:
        """Bitcoin CompactSize unsigned integer."""
        if n < 0xfd:
            return struct.pack('<B', n)
        elif n <= 0xffff:
            return b'\xfd' + struct.pack('<H', n)
        elif n <= 0xffffffff:
            return b'\xfe' + struct.pack('<L', n)
        else:
            return b'\xff' + struct.pack('<Q', n)

    @classmethod
    def encode_bytes(cls, data: bytes) -> bytes:
        return cls.encode_varint(len(data)) + data

    @classmethod
    def read_exact(cls, stream: BinaryIO, size: int) -> bytes:
        data = stream.read(size)
        if len(data) != size:
            raise TxDecodeError(f'expected {size} bytes, got {len(data)}')
        return data

    @classmethod
    def read_varint(cls, stream: BinaryIO) -> int:
        prefix = cls.read_exact(stream, 1)[0]
        if prefix < 0xfd:
            return prefix
        size, fmt = {0xfd: (2, '<H'), 0xfe: (4, '<L'), 0xff: (8, '<Q')}[prefix]
        return struct.unpack(fmt, cls.read_exact(stream, size))[0]

    @classmethod
    def read_bytes(cls, stream: BinaryIO) -> bytes:
        return cls.read_exact(stream, cls.read_varint(stream))

    @classmethod
    def read_uint32(cls, stream: BinaryIO) -> int:
        return struct.unpack('<L', cls.read_exact(stream, 4))[0]

    @classmethod
    def read_uint64(cls, stream: BinaryIO) -> int:
        return struct.unpack('<Q', cls.read_exact(stream, 8))[0]

    @classmethod
    def as_stream(cls, data: Union[bytes, BinaryIO]) -> BinaryIO:
        return io.BytesIO(data) if isinstance(data, (bytes, bytearray)) else data
