import struct
from typing import NamedTuple, BinaryIO

from utils.Utils import Utils


class TxOut(NamedTuple):
    """Outputs from a Transaction."""
    # The number of satoshi this awards.
    value: int

    # scriptPubKey
    pk_script: bytes

    def serialize(self) -> bytes:
        return struct.pack('<Q', self.value) + Utils.encode_bytes(self.pk_script)

    @classmethod
    def deserialize(cls, stream: BinaryIO) -> 'TxOut':
        value = Utils.read_uint64(stream)
        return cls(value=value, pk_script=Utils.read_bytes(stream))
