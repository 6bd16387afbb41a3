import struct
from typing import (
    List, NamedTuple, Union, BinaryIO)

from utils.Errors import TxDecodeError
from utils.Utils import Utils
from params.Params import Params
from ds.TxIn import TxIn
from ds.TxOut import TxOut

from script import scriptUtils

import logging
import os


logging.basicConfig(
    level=getattr(logging, os.environ.get('CF_LOG_LEVEL', 'INFO')),
    format='[%(asctime)s][%(module)s:%(lineno)d] %(levelname)s %(message)s')
logger = logging.getLogger(__name__)

# BIP144 marker and flag following the version of a witness txn
WITNESS_MARKER = 0x00
WITNESS_FLAG = 0x01


class Transaction(NamedTuple):
    version: int
    txins: List[TxIn]
    txouts: List[TxOut]

    # One stack of opaque items per txin, or empty for a legacy txn.
    witness: List[List[bytes]]

    locktime: int

    @property
    def has_witness(self) -> bool:
        return len(self.witness) > 0

    def serialize(self, include_witness: bool = True) -> bytes:
        """Network serialization; witness txns use the BIP144 layout."""
        with_witness = include_witness and self.has_witness
        if with_witness and len(self.witness) != len(self.txins):
            raise ValueError(
                f'witness count {len(self.witness)} does not match txin count {len(self.txins)}')

        data = struct.pack('<L', self.version)
        if with_witness:
            data += bytes([WITNESS_MARKER, WITNESS_FLAG])
        data += Utils.encode_varint(len(self.txins))
        data += b''.join(txin.serialize() for txin in self.txins)
        data += Utils.encode_varint(len(self.txouts))
        data += b''.join(txout.serialize() for txout in self.txouts)
        if with_witness:
            for stack in self.witness:
                data += Utils.encode_varint(len(stack))
                data += b''.join(Utils.encode_bytes(item) for item in stack)
        data += struct.pack('<L', self.locktime)
        return data

    @classmethod
    def deserialize(cls, data: Union[bytes, BinaryIO]) -> 'Transaction':
        stream = Utils.as_stream(data)
        version = Utils.read_uint32(stream)

        # A legacy txn with no inputs and a single output starts with the same
        # two bytes as the witness marker and flag.
        start = stream.tell()
        head = stream.read(2)
        with_witness = len(head) == 2 and head[0] == WITNESS_MARKER and head[1] == WITNESS_FLAG
        if not with_witness:
            stream.seek(start)

        txins = [TxIn.deserialize(stream) for _ in range(Utils.read_varint(stream))]
        txouts = [TxOut.deserialize(stream) for _ in range(Utils.read_varint(stream))]

        witness = []
        if with_witness:
            for _ in txins:
                witness.append([Utils.read_bytes(stream) for _ in range(Utils.read_varint(stream))])

        locktime = Utils.read_uint32(stream)
        if stream.read(1):
            raise TxDecodeError('trailing bytes after txn locktime')
        return cls(version=version, txins=txins, txouts=txouts,
                   witness=witness, locktime=locktime)

    @property
    def hash(self) -> bytes:
        """txid in internal byte order."""
        return scriptUtils.sha256d(self.serialize(include_witness=False))

    @property
    def id(self) -> str:
        return self.hash[::-1].hex()

    @classmethod
    def unsigned(cls, txins, txouts, version=Params.DEFAULT_TX_VERSION, locktime=0):
        return cls(version=version, txins=list(txins), txouts=list(txouts),
                   witness=[], locktime=locktime)
