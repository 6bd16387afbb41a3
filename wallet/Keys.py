import hashlib
from typing import NamedTuple, Tuple

import ecdsa
from ecdsa.der import UnexpectedDER
from ecdsa.util import sigencode_der_canonize, sigdecode_der


# order of the secp256k1 group
CURVE_ORDER = ecdsa.SECP256k1.order


class PublicKey(NamedTuple):
    """A SEC encoded secp256k1 public key."""

    sec: bytes

    @property
    def compressed(self) -> bool:
        return len(self.sec) == 33

    def to_bytes(self) -> bytes:
        return self.sec

    @property
    def verifying_key(self) -> ecdsa.VerifyingKey:
        return ecdsa.VerifyingKey.from_string(self.sec, curve=ecdsa.SECP256k1)

    @classmethod
    def from_bytes(cls, data: bytes) -> 'PublicKey':
        """Parse and check a SEC public key; raises ValueError when off the curve."""
        if not ((len(data) == 33 and data[0] in (2, 3)) or (len(data) == 65 and data[0] == 4)):
            raise ValueError(f'not a SEC encoded public key: {data.hex()}')
        try:
            ecdsa.VerifyingKey.from_string(data, curve=ecdsa.SECP256k1)
        except ecdsa.MalformedPointError as e:
            raise ValueError(f'public key is not on secp256k1: {data.hex()}') from e
        return cls(sec=bytes(data))

    def verify(self, signature: bytes, digest: bytes) -> bool:
        """Check a DER signature (without sighash byte) over a 32 byte digest."""
        try:
            return self.verifying_key.verify_digest(signature, digest, sigdecode=sigdecode_der)
        except (ecdsa.BadSignatureError, UnexpectedDER):
            return False

    def __str__(self):
        return self.sec.hex()


class PrivateKey(NamedTuple):
    """A secp256k1 secret exponent and the encoding of its public key."""

    secret_exponent: int
    compressed: bool = True

    @property
    def signing_key(self) -> ecdsa.SigningKey:
        return ecdsa.SigningKey.from_secret_exponent(self.secret_exponent, curve=ecdsa.SECP256k1)

    @property
    def public_key(self) -> PublicKey:
        encoding = 'compressed' if self.compressed else 'uncompressed'
        return PublicKey(sec=self.signing_key.get_verifying_key().to_string(encoding))

    def sign(self, digest: bytes) -> bytes:
        """Deterministic (RFC6979) low-S DER signature of a 32 byte digest."""
        return self.signing_key.sign_digest_deterministic(
            digest, hashfunc=hashlib.sha256, sigencode=sigencode_der_canonize)


def key_pair(secret_exponent: int, compressed: bool = True) -> Tuple[PrivateKey, PublicKey]:
    if not 1 <= secret_exponent < CURVE_ORDER:
        raise ValueError(f"secret exponent must be in [1, {CURVE_ORDER - 1}]")
    prv = PrivateKey(secret_exponent=secret_exponent, compressed=compressed)
    return prv, prv.public_key
