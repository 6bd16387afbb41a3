"""
Random transactions and the data needed to sign them.

No generated transaction spends the same outpoint twice: inputs are
deduplicated by outpoint, keeping the first occurrence and the input order.
"""
import logging
import os
from typing import Callable, Iterable, List, TypeVar

from hypothesis import strategies as st

from ds.OutPoint import OutPoint
from ds.SigInput import SigInput
from ds.Transaction import Transaction
from ds.TxIn import TxIn
from ds.TxOut import TxOut
from params.Params import Params, Network
from script import scriptBuild
from script.scriptBuild import PayPK, PayPKHash, PayMulSig
from utils.Errors import GenerationError, TxSignError
from wallet.Signer import sign_tx
from wallet.Wallet import pubkey_to_address

from .keys import key_pairs, distinct_key_pairs
from .parameters import multisig_params, satoshis, valid_sig_hashes
from .primitives import byte_strings, lock_times, out_points, sequences, versions
from .script import (
    pay_pkhash_outputs, pay_script_hash, pay_script_hash_outputs,
    pkhash_inputs, pkhash_inputs_full, multisig_sh_inputs, multisig_sh_inputs_full,
    script_inputs, script_outputs)

logging.basicConfig(
    level=getattr(logging, os.environ.get('CF_LOG_LEVEL', 'INFO')),
    format='[%(asctime)s][%(module)s:%(lineno)d] %(levelname)s %(message)s')
logger = logging.getLogger(__name__)

T = TypeVar('T')


def unique_by_outpoint(items: Iterable[T], outpoint_of: Callable[[T], OutPoint]) -> List[T]:
    seen = set()
    unique = []
    for item in items:
        outpoint = outpoint_of(item)
        if outpoint in seen:
            continue
        seen.add(outpoint)
        unique.append(item)
    return unique


def _unique_txins(txins: List[TxIn]) -> List[TxIn]:
    unique = unique_by_outpoint(txins, lambda txin: txin.to_spend)
    if len(unique) != len(txins):
        logger.debug(f'[gen] dropped {len(txins) - len(unique)} txins spending a repeated outpoint')
    return unique


# ————————————————————inputs and outputs———————————————————————

@st.composite
def _txouts_of(draw, network, scripts):
    value = draw(satoshis(network))
    return TxOut(value=value, pk_script=scriptBuild.encode_output(draw(scripts)))


@st.composite
def _txins_of(draw, spends):
    to_spend = draw(out_points())
    signature_script = scriptBuild.encode_input(draw(spends))
    return TxIn(to_spend=to_spend, signature_script=signature_script, sequence=draw(sequences()))


def tx_outs(network: Network):
    return _txouts_of(network, script_outputs(network))


def tx_ins(network: Network):
    return _txins_of(script_inputs(network))


def addr_only_tx_outs(network: Network):
    return _txouts_of(network, st.one_of(pay_pkhash_outputs(), pay_script_hash_outputs(network)))


def addr_only_tx_ins(network: Network):
    """Pay-to-pubkey-hash or P2SH multisig spends, possibly missing signatures."""
    return _txins_of(st.one_of(pkhash_inputs(network), multisig_sh_inputs(network)))


def addr_only_tx_ins_full(network: Network):
    return _txins_of(st.one_of(pkhash_inputs_full(network), multisig_sh_inputs_full(network)))


# ————————————————————transactions———————————————————————

def _counts(max_size, min_size=0):
    return st.integers(min_value=min_size, max_value=max_size)


@st.composite
def _legacy_txs_of(draw, network, txins, txouts):
    version = draw(versions())
    ni = draw(_counts(Params.MAX_TX_INPUTS))
    # With no inputs a single output would serialize as "00 01" after the
    # version, which reads as the witness marker and flag.
    min_outputs = Params.MIN_OUTPUTS_WITHOUT_INPUTS if ni == 0 else 0
    no = draw(_counts(Params.MAX_TX_OUTPUTS, min_outputs))
    inputs = draw(st.lists(txins, min_size=ni, max_size=ni))
    outputs = draw(st.lists(txouts, min_size=no, max_size=no))
    return Transaction(version=version, txins=_unique_txins(inputs), txouts=outputs,
                       witness=[], locktime=draw(lock_times()))


def legacy_txs(network: Network):
    return _legacy_txs_of(network, tx_ins(network), tx_outs(network))


@st.composite
def witness_txs(draw, network: Network):
    """Transaction with one witness stack per input."""
    version = draw(versions())
    ni = draw(_counts(Params.MAX_TX_INPUTS))
    no = draw(_counts(Params.MAX_TX_OUTPUTS))
    txins = _unique_txins(draw(st.lists(tx_ins(network), min_size=ni, max_size=ni)))
    txouts = draw(st.lists(tx_outs(network), min_size=no, max_size=no))
    stack = st.lists(byte_strings(), max_size=Params.MAX_WITNESS_ITEMS)
    witness = [draw(stack) for _ in txins]
    return Transaction(version=version, txins=txins, txouts=txouts,
                       witness=witness, locktime=draw(lock_times()))


def txs(network: Network):
    return st.one_of(legacy_txs(network), witness_txs(network))


def addr_only_txs(network: Network):
    return _legacy_txs_of(network, addr_only_tx_ins(network), addr_only_tx_outs(network))


def addr_only_txs_full(network: Network):
    return _legacy_txs_of(network, addr_only_tx_ins_full(network), addr_only_tx_outs(network))


@st.composite
def empty_txs(draw, network: Network):
    """Unsigned transaction: every input has an empty signature script."""
    version = draw(versions())
    no = draw(_counts(Params.MAX_TX_OUTPUTS, 1))
    ni = draw(_counts(Params.MAX_TX_INPUTS, 1))
    txouts = draw(st.lists(tx_outs(network), min_size=no, max_size=no))
    outpoints = unique_by_outpoint(
        draw(st.lists(out_points(), min_size=ni, max_size=ni)), lambda op: op)
    locktime = draw(lock_times())
    sequence = draw(sequences())
    txins = [TxIn(to_spend=op, signature_script=b'', sequence=sequence) for op in outpoints]
    return Transaction(version=version, txins=txins, txouts=txouts,
                       witness=[], locktime=locktime)


# ————————————————————signing data———————————————————————

@st.composite
def pk_sig_inputs(draw, network: Network):
    prv, pub = draw(key_pairs())
    value = draw(satoshis(network))
    outpoint = draw(out_points())
    sighash = draw(valid_sig_hashes(network))
    return SigInput(script=PayPK(pubkey=pub), value=value, outpoint=outpoint, sighash=sighash), [prv]


@st.composite
def pkhash_sig_inputs(draw, network: Network):
    prv, pub = draw(key_pairs())
    script = PayPKHash(hash160=pubkey_to_address(network, pub).hash160)
    value = draw(satoshis(network))
    outpoint = draw(out_points())
    sighash = draw(valid_sig_hashes(network))
    return SigInput(script=script, value=value, outpoint=outpoint, sighash=sighash), [prv]


@st.composite
def _multisig_keys(draw, params=None, nprv=None):
    """
    (PayMulSig, private keys) for n fresh key pairs. The private keys are a
    random subset of size `nprv(m, n)` (m by default) of the n key pairs.
    """
    m, n = draw(params if params is not None else multisig_params())
    pairs = draw(distinct_key_pairs(n))
    count = m if nprv is None else draw(nprv(m, n))
    chosen = draw(st.permutations(pairs))[:count]
    script = PayMulSig(pubkeys=[pub for (_, pub) in pairs], required=m)
    return script, [prv for (prv, _) in chosen]


@st.composite
def multisig_sig_inputs(draw, network: Network, params=None):
    """m-of-n multisig sig input and exactly m of its private keys."""
    script, keys = draw(_multisig_keys(params))
    value = draw(satoshis(network))
    outpoint = draw(out_points())
    sighash = draw(valid_sig_hashes(network))
    return SigInput(script=script, value=value, outpoint=outpoint, sighash=sighash), keys


@st.composite
def script_hash_sig_inputs(draw, network: Network, redeem_sig_inputs=None):
    """Wrap a pay-to-pubkey, pay-to-pubkey-hash or multisig sig input in P2SH."""
    if redeem_sig_inputs is None:
        redeem_sig_inputs = st.one_of(pk_sig_inputs(network), pkhash_sig_inputs(network),
                                      multisig_sig_inputs(network))
    (sig_input, keys) = draw(redeem_sig_inputs)
    redeem = sig_input.script
    sig_input = sig_input._replace(script=pay_script_hash(network, redeem), redeem=redeem)
    return sig_input, keys


def sig_inputs(network: Network):
    return st.one_of(pk_sig_inputs(network), pkhash_sig_inputs(network),
                     multisig_sig_inputs(network), script_hash_sig_inputs(network))


@st.composite
def signing_data(draw, network: Network):
    """
    (unsigned txn, sig inputs, private keys) such that signing the txn with
    the keys completes every input.
    """
    version = draw(versions())
    ni = draw(_counts(Params.MAX_TX_INPUTS, Params.MIN_SIGNING_INPUTS))
    no = draw(_counts(Params.MAX_TX_OUTPUTS, 1))
    pairs = draw(st.lists(sig_inputs(network), min_size=ni, max_size=ni))
    pairs = unique_by_outpoint(pairs, lambda pair: pair[0].outpoint)

    txins = [TxIn(to_spend=sig_input.outpoint, signature_script=b'', sequence=draw(sequences()))
             for (sig_input, _) in pairs]
    txins = list(draw(st.permutations(txins)))
    txouts = draw(st.lists(tx_outs(network), min_size=no, max_size=no))
    tx = Transaction(version=version, txins=txins, txouts=txouts,
                     witness=[], locktime=draw(lock_times()))

    keys = [prv for (_, prvs) in pairs for prv in prvs]
    return tx, [sig_input for (sig_input, _) in pairs], keys


@st.composite
def partial_txs(draw, network: Network):
    """
    Singly-signed copies of one unsigned txn, and the coins they spend.

    Every input spends a multisig (bare or P2SH) coin; for each of them
    between m and n of its keys sign a copy of the txn on their own. Returns
    ([Transaction], [(script, value, outpoint, m, n)]).
    """
    tx = draw(empty_txs(network))
    candidates = []
    coins = []
    for txin in tx.txins:
        outpoint = txin.to_spend
        multisig, keys = draw(_multisig_keys(
            nprv=lambda m, n: st.integers(min_value=m, max_value=n)))
        script, redeem = draw(st.sampled_from([
            (multisig, None), (pay_script_hash(network, multisig), multisig)]))
        value = draw(satoshis(network))

        for prv in keys:
            sig_input = SigInput(script=script, value=value, outpoint=outpoint,
                                 sighash=draw(valid_sig_hashes(network)), redeem=redeem)
            try:
                candidates.append(sign_tx(network, tx, [sig_input], [prv]))
            except TxSignError as e:
                logger.exception(f'[gen] signer rejected generated sig input for {outpoint}')
                raise GenerationError(f'could not sign generated input {outpoint}: {e.msg}') from e

        logger.debug(f'[gen] {len(keys)} partial signatures of a {multisig.required}-of-'
                     f'{len(multisig.pubkeys)} multisig for {outpoint}')
        coins.append((script, value, outpoint, multisig.required, len(multisig.pubkeys)))

    return candidates, coins
