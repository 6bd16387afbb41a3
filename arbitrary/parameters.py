from hypothesis import strategies as st

from params.Params import Params, Network


@st.composite
def multisig_params(draw):
    """(m, n) with 1 <= m <= n <= MAX_MULTISIG_KEYS."""
    n = draw(st.integers(min_value=1, max_value=Params.MAX_MULTISIG_KEYS))
    m = draw(st.integers(min_value=1, max_value=n))
    return m, n


def valid_sig_hashes(network: Network):
    return st.sampled_from(network.valid_sig_hashes)


def satoshis(network: Network):
    return st.integers(min_value=1, max_value=network.max_satoshi)
