from enum import Enum
from typing import NamedTuple

from base58 import b58encode_check, b58decode_check

from params.Params import Network
from script import scriptBuild
from script import scriptUtils
from script.scriptBuild import PayPKHash, PayScriptHash, ScriptOutput
from utils.Errors import AddressError
from wallet.Keys import PublicKey


class AddressKind(Enum):
    PUBKEY_HASH = 'pubkey-hash'
    SCRIPT_HASH = 'script-hash'


class Address(NamedTuple):
    """A base58check address: a 160 bit hash tagged with its network."""

    kind: AddressKind
    hash160: bytes
    network: Network

    @property
    def prefix(self) -> int:
        if self.kind is AddressKind.PUBKEY_HASH:
            return self.network.addr_prefix
        return self.network.script_prefix

    def to_string(self) -> str:
        address = b58encode_check(bytes([self.prefix]) + self.hash160)
        address = address if isinstance(address, str) else str(address, encoding="utf-8")
        return address

    @classmethod
    def from_string(cls, network: Network, address: str) -> 'Address':
        try:
            payload = b58decode_check(address)
        except ValueError as e:
            raise AddressError(f'bad base58check address {address}: {e}') from e
        if len(payload) != 21:
            raise AddressError(f'address {address} does not carry a 160 bit hash')
        if payload[0] == network.addr_prefix:
            kind = AddressKind.PUBKEY_HASH
        elif payload[0] == network.script_prefix:
            kind = AddressKind.SCRIPT_HASH
        else:
            raise AddressError(f'address {address} does not belong to network {network.name}')
        return cls(kind=kind, hash160=payload[1:], network=network)

    def __str__(self):
        return self.to_string()


def pubkey_to_address(network: Network, pubkey: PublicKey) -> Address:
    return Address(kind=AddressKind.PUBKEY_HASH,
                   hash160=scriptUtils.hash160(pubkey.to_bytes()), network=network)


def script_to_address(network: Network, script: ScriptOutput) -> Address:
    """P2SH address of a redeem script."""
    if isinstance(script, PayScriptHash):
        raise AddressError('a pay-to-script-hash script can not be wrapped again')
    return Address(kind=AddressKind.SCRIPT_HASH,
                   hash160=scriptBuild.script_hash(script), network=network)


def address_to_output(address: Address) -> ScriptOutput:
    if address.kind is AddressKind.PUBKEY_HASH:
        return PayPKHash(hash160=address.hash160)
    return PayScriptHash(hash160=address.hash160)


def output_to_address(network: Network, script: ScriptOutput) -> Address:
    if isinstance(script, PayPKHash):
        return Address(kind=AddressKind.PUBKEY_HASH, hash160=script.hash160, network=network)
    if isinstance(script, PayScriptHash):
        return Address(kind=AddressKind.SCRIPT_HASH, hash160=script.hash160, network=network)
    raise AddressError(f'{type(script).__name__} output has no address')
