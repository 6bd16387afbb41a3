import struct
from typing import NamedTuple, BinaryIO

from ds.OutPoint import OutPoint
from utils.Utils import Utils


class TxIn(NamedTuple):
    """Inputs to a Transaction."""

    # A reference to the output we're spending.
    to_spend: OutPoint

    # the scriptSig which unlocks the TxOut for spending. Empty while the
    # input is still unsigned.
    signature_script: bytes

    # A sender-defined sequence number which allows us replacement of the txn
    # if desired.
    sequence: int

    def serialize(self) -> bytes:
        return (self.to_spend.serialize() + Utils.encode_bytes(self.signature_script)
                + struct.pack('<L', self.sequence))

    @classmethod
    def deserialize(cls, stream: BinaryIO) -> 'TxIn':
        to_spend = OutPoint.deserialize(stream)
        signature_script = Utils.read_bytes(stream)
        return cls(to_spend=to_spend, signature_script=signature_script,
                   sequence=Utils.read_uint32(stream))
