import struct
from typing import NamedTuple, BinaryIO

from utils.Utils import Utils


class OutPoint(NamedTuple):
    """A specific output of a previous transaction."""

    # txid in internal byte order (the reverse of the displayed hex)
    txid: bytes
    txout_idx: int

    def serialize(self) -> bytes:
        return self.txid + struct.pack('<L', self.txout_idx)

    @classmethod
    def deserialize(cls, stream: BinaryIO) -> 'OutPoint':
        txid = Utils.read_exact(stream, 32)
        return cls(txid=txid, txout_idx=Utils.read_uint32(stream))

    def __str__(self):
        return f'{self.txid[::-1].hex()}:{self.txout_idx}'
