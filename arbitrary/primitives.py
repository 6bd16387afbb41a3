"""Random scalars and byte strings."""
from hypothesis import strategies as st

from ds.OutPoint import OutPoint
from params.Params import Params


def hash160s():
    return st.binary(min_size=20, max_size=20)


def hash256s():
    return st.binary(min_size=32, max_size=32)


# Hash of a transaction that does not exist.
tx_hashes = hash256s


def byte_strings(max_size=Params.MAX_WITNESS_ITEM_SIZE):
    """Possibly empty opaque bytes."""
    return st.binary(max_size=max_size)


def uint32s():
    return st.integers(min_value=0, max_value=Params.UINT32_MAX)


versions = uint32s
sequences = uint32s
lock_times = uint32s


def out_points():
    return st.builds(OutPoint, txid=tx_hashes(), txout_idx=uint32s())
