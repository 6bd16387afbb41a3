from hypothesis import strategies as st

from wallet.Keys import CURVE_ORDER, key_pair


def secret_exponents():
    return st.integers(min_value=1, max_value=CURVE_ORDER - 1)


@st.composite
def key_pairs(draw, compressed=None):
    """(PrivateKey, PublicKey); the encoding is drawn unless `compressed` is given."""
    secret_exponent = draw(secret_exponents())
    if compressed is None:
        compressed = draw(st.booleans())
    return key_pair(secret_exponent, compressed)


def compressed_key_pairs():
    return key_pairs(compressed=True)


def public_keys():
    return key_pairs().map(lambda pair: pair[1])


def compressed_public_keys():
    return compressed_key_pairs().map(lambda pair: pair[1])


def distinct_key_pairs(n, compressed=None):
    """n key pairs with pairwise different secrets (and so different public keys)."""
    return st.lists(key_pairs(compressed), min_size=n, max_size=n,
                    unique_by=lambda pair: pair[0].secret_exponent)
