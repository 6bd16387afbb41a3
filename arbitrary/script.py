"""
Random output and input script descriptors.

Every descriptor built here is standard: it encodes with scriptBuild and
decodes back to itself. Signatures are real DER signatures over random
digests, so they parse like any signature found on chain but do not commit
to any particular transaction.
"""
from hypothesis import strategies as st

from params.Params import Network
from script.scriptBuild import (
    PayPK, PayPKHash, PayMulSig, PayScriptHash,
    SpendPK, SpendPKHash, SpendMulSig, ScriptHashInput,
    TxSignature, EMPTY_SIGNATURE, RedeemScript)
from wallet.Wallet import script_to_address

from .keys import key_pairs, public_keys, distinct_key_pairs
from .parameters import multisig_params, valid_sig_hashes
from .primitives import hash160s, hash256s


# ————————————————————outputs———————————————————————

def pay_pk_outputs():
    return public_keys().map(lambda pubkey: PayPK(pubkey=pubkey))


def pay_pkhash_outputs():
    return hash160s().map(lambda h: PayPKHash(hash160=h))


@st.composite
def pay_multisig_outputs(draw, compressed=None, params=None):
    """m-of-n over n distinct keys; (m, n) drawn from `params` when given."""
    m, n = draw(params if params is not None else multisig_params())
    pairs = draw(distinct_key_pairs(n, compressed))
    return PayMulSig(pubkeys=[pub for (_, pub) in pairs], required=m)


def pay_script_hash(network: Network, redeem: RedeemScript) -> PayScriptHash:
    return PayScriptHash(hash160=script_to_address(network, redeem).hash160)


def redeem_scripts(compressed=None):
    """Descriptors a pay-to-script-hash output may commit to."""
    return st.one_of(
        key_pairs(compressed).map(lambda pair: PayPK(pubkey=pair[1])),
        pay_pkhash_outputs(),
        pay_multisig_outputs(compressed))


def pay_script_hash_outputs(network: Network):
    return redeem_scripts().map(lambda redeem: pay_script_hash(network, redeem))


def script_outputs(network: Network):
    return st.one_of(pay_pk_outputs(), pay_pkhash_outputs(),
                     pay_multisig_outputs(), pay_script_hash_outputs(network))


# ————————————————————signatures———————————————————————

@st.composite
def signatures(draw, network: Network):
    prv, _ = draw(key_pairs())
    digest = draw(hash256s())
    sighash = draw(valid_sig_hashes(network))
    return TxSignature(sig=prv.sign(digest), sighash=sighash)


def empty_or_signatures(network: Network):
    """A signature or the OP_0 placeholder of a missing one."""
    return st.one_of(st.just(EMPTY_SIGNATURE), signatures(network))


def _signatures(network, full):
    return signatures(network) if full else empty_or_signatures(network)


# ————————————————————inputs———————————————————————

def spend_pk_inputs(network: Network, full=False):
    return _signatures(network, full).map(lambda sig: SpendPK(signature=sig))


def spend_pkhash_inputs(network: Network, full=False, compressed=None):
    return st.builds(SpendPKHash,
                     signature=_signatures(network, full),
                     pubkey=key_pairs(compressed).map(lambda pair: pair[1]))


@st.composite
def spend_multisig_inputs(draw, network: Network, full=False, required=None):
    if required is None:
        required, _ = draw(multisig_params())
    sigs = draw(st.lists(_signatures(network, full), min_size=required, max_size=required))
    return SpendMulSig(signatures=sigs)


def simple_inputs(network: Network):
    return st.one_of(spend_pk_inputs(network), spend_pkhash_inputs(network),
                     spend_multisig_inputs(network))


def _spends_of(network, redeem, full=False, compressed=None):
    if isinstance(redeem, PayPK):
        return spend_pk_inputs(network, full)
    if isinstance(redeem, PayPKHash):
        return spend_pkhash_inputs(network, full, compressed)
    return spend_multisig_inputs(network, full, required=redeem.required)


@st.composite
def script_hash_inputs(draw, network: Network):
    redeem = draw(redeem_scripts())
    spend = draw(_spends_of(network, redeem))
    return ScriptHashInput(spend=spend, redeem=redeem)


def script_inputs(network: Network):
    return st.one_of(simple_inputs(network), script_hash_inputs(network))


# Address-only variants: compressed keys only, as wallets produce them.

def pkhash_inputs(network: Network):
    return spend_pkhash_inputs(network, compressed=True)


def pkhash_inputs_full(network: Network):
    return spend_pkhash_inputs(network, full=True, compressed=True)


@st.composite
def multisig_sh_inputs(draw, network: Network, full=False):
    redeem = draw(pay_multisig_outputs(compressed=True))
    spend = draw(spend_multisig_inputs(network, full, required=redeem.required))
    return ScriptHashInput(spend=spend, redeem=redeem)


def multisig_sh_inputs_full(network: Network):
    return multisig_sh_inputs(network, full=True)
