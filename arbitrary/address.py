from hypothesis import strategies as st

from params.Params import Network
from wallet.Wallet import Address, AddressKind

from .primitives import hash160s


def pubkey_addresses(network: Network):
    return hash160s().map(
        lambda h: Address(kind=AddressKind.PUBKEY_HASH, hash160=h, network=network))


def script_addresses(network: Network):
    return hash160s().map(
        lambda h: Address(kind=AddressKind.SCRIPT_HASH, hash160=h, network=network))


def addresses(network: Network):
    """Pay-to-pubkey-hash or pay-to-script-hash address."""
    return st.one_of(pubkey_addresses(network), script_addresses(network))
