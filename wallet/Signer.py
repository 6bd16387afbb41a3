import struct
import logging
import os
from typing import (
    Dict, Iterable, List, Optional, Tuple)

from ds.OutPoint import OutPoint
from ds.SigInput import SigInput
from ds.Transaction import Transaction
from ds.TxOut import TxOut
from params.Params import Params, Network
from script import scriptBuild
from script import scriptUtils
from script.scriptBuild import (
    PayPK, PayPKHash, PayMulSig, PayScriptHash,
    SpendPK, SpendPKHash, SpendMulSig, ScriptHashInput,
    TxSignature, EMPTY_SIGNATURE, ScriptOutput, RedeemScript)
from utils.Errors import TxSignError, ScriptDecodeError
from utils.Utils import Utils
from wallet.Keys import PrivateKey, PublicKey

logging.basicConfig(
    level=getattr(logging, os.environ.get('CF_LOG_LEVEL', 'INFO')),
    format='[%(asctime)s][%(module)s:%(lineno)d] %(levelname)s %(message)s')
logger = logging.getLogger(__name__)

# Digest "signed" by SIGHASH_SINGLE when the input has no matching output.
SIGHASH_SINGLE_BUG = (1).to_bytes(32, 'little')

ZERO_HASH = bytes(32)

# value of the blanked outputs committed to by SIGHASH_SINGLE
NEGATIVE_SATOSHI = 0xffffffffffffffff


# ————————————————————signature hash———————————————————————

def _base_type(sighash: int) -> int:
    return sighash & 0x1f


def _anyone_can_pay(sighash: int) -> bool:
    return bool(sighash & Params.SIGHASH_ANYONECANPAY)


def _legacy_sig_hash(tx: Transaction, subscript: bytes, index: int, sighash: int) -> bytes:
    base = _base_type(sighash)
    if base == Params.SIGHASH_SINGLE and index >= len(tx.txouts):
        return SIGHASH_SINGLE_BUG

    txins = []
    for (i, txin) in enumerate(tx.txins):
        script = subscript if i == index else b''
        sequence = txin.sequence
        if i != index and base in (Params.SIGHASH_NONE, Params.SIGHASH_SINGLE):
            sequence = 0
        txins.append(txin._replace(signature_script=script, sequence=sequence))

    txouts = list(tx.txouts)
    if base == Params.SIGHASH_NONE:
        txouts = []
    elif base == Params.SIGHASH_SINGLE:
        txouts = [TxOut(value=NEGATIVE_SATOSHI, pk_script=b'')] * index + [tx.txouts[index]]

    if _anyone_can_pay(sighash):
        txins = [txins[index]]

    tx_copy = tx._replace(txins=txins, txouts=txouts, witness=[])
    return scriptUtils.sha256d(tx_copy.serialize(include_witness=False) + struct.pack('<L', sighash))


def _fork_id_sig_hash(tx: Transaction, subscript: bytes, value: int, index: int, sighash: int) -> bytes:
    """BIP143 style digest used by fork-id chains."""
    base = _base_type(sighash)

    hash_prevouts = ZERO_HASH
    if not _anyone_can_pay(sighash):
        hash_prevouts = scriptUtils.sha256d(b''.join(t.to_spend.serialize() for t in tx.txins))

    hash_sequence = ZERO_HASH
    if not _anyone_can_pay(sighash) and base not in (Params.SIGHASH_NONE, Params.SIGHASH_SINGLE):
        hash_sequence = scriptUtils.sha256d(b''.join(struct.pack('<L', t.sequence) for t in tx.txins))

    hash_outputs = ZERO_HASH
    if base not in (Params.SIGHASH_NONE, Params.SIGHASH_SINGLE):
        hash_outputs = scriptUtils.sha256d(b''.join(o.serialize() for o in tx.txouts))
    elif base == Params.SIGHASH_SINGLE and index < len(tx.txouts):
        hash_outputs = scriptUtils.sha256d(tx.txouts[index].serialize())

    txin = tx.txins[index]
    preimage = (
        struct.pack('<L', tx.version)
        + hash_prevouts
        + hash_sequence
        + txin.to_spend.serialize()
        + Utils.encode_bytes(subscript)
        + struct.pack('<Q', value)
        + struct.pack('<L', txin.sequence)
        + hash_outputs
        + struct.pack('<L', tx.locktime)
        + struct.pack('<L', sighash)
    )
    return scriptUtils.sha256d(preimage)


def tx_sig_hash(network: Network, tx: Transaction, subscript: ScriptOutput,
                value: int, index: int, sighash: int) -> bytes:
    """Digest signed by input `index` spending `subscript` with flag `sighash`."""
    script = scriptBuild.encode_output(subscript)
    if network.sig_hash_fork_id is not None and sighash & Params.SIGHASH_FORKID:
        full_type = (sighash & 0xff) | (network.sig_hash_fork_id << 8)
        return _fork_id_sig_hash(tx, script, value, index, full_type)
    return _legacy_sig_hash(tx, script, index, sighash)


# ————————————————————signing———————————————————————

def _input_index(tx: Transaction, outpoint: OutPoint) -> int:
    for (index, txin) in enumerate(tx.txins):
        if txin.to_spend == outpoint:
            return index
    raise TxSignError(f'outpoint {outpoint} is not spent by txn {tx.id}', outpoint=outpoint)


def _redeem_of(sig_input: SigInput) -> RedeemScript:
    """The script whose conditions the input signature must satisfy."""
    if not isinstance(sig_input.script, PayScriptHash):
        return sig_input.script
    redeem = sig_input.redeem
    if redeem is None or isinstance(redeem, PayScriptHash):
        raise TxSignError(f'missing redeem script for {sig_input.outpoint}',
                          outpoint=sig_input.outpoint)
    if scriptBuild.script_hash(redeem) != sig_input.script.hash160:
        raise TxSignError(f'redeem script does not match the script hash of {sig_input.outpoint}',
                          outpoint=sig_input.outpoint)
    return redeem


def _signs_for(pubkey: PublicKey, script: RedeemScript) -> bool:
    if isinstance(script, PayPK):
        return pubkey == script.pubkey
    if isinstance(script, PayPKHash):
        return scriptUtils.hash160(pubkey.to_bytes()) == script.hash160
    return pubkey in script.pubkeys


def _existing_signatures(signature_script: bytes) -> List[Tuple[TxSignature, Optional[PublicKey]]]:
    if not signature_script:
        return []
    try:
        spend = scriptBuild.decode_input(signature_script)
    except ScriptDecodeError:
        logger.debug(f'[wallet] ignoring undecodable input script {signature_script.hex()}')
        return []
    if isinstance(spend, ScriptHashInput):
        spend = spend.spend
    if isinstance(spend, SpendMulSig):
        return [(s, None) for s in spend.signatures if not s.is_empty]
    return []


def _order_multisig(network: Network, tx: Transaction, index: int, script: PayMulSig, value: int,
                    signatures: Iterable[Tuple[TxSignature, Optional[PublicKey]]]) -> List[TxSignature]:
    """
    Keep one verifying signature per public key, in public key order, padded
    to m with empty placeholders. A signature paired with its public key is
    trusted; an unpaired one is matched by verifying it.
    """
    candidates = []
    for (signature, pubkey) in signatures:
        if all(signature != s for (s, _) in candidates):
            candidates.append((signature, pubkey))

    digests: Dict[int, bytes] = {}

    def verifies(signature: TxSignature, pubkey: PublicKey) -> bool:
        if signature.sighash not in digests:
            digests[signature.sighash] = tx_sig_hash(network, tx, script, value, index, signature.sighash)
        return pubkey.verify(signature.sig, digests[signature.sighash])

    ordered = []
    for pubkey in script.pubkeys:
        for candidate in candidates:
            (signature, signer) = candidate
            if signer == pubkey or (signer is None and verifies(signature, pubkey)):
                ordered.append(signature)
                candidates.remove(candidate)
                break
        if len(ordered) == script.required:
            break

    return ordered + [EMPTY_SIGNATURE] * (script.required - len(ordered))


def _sign_input(network: Network, tx: Transaction, index: int,
                sig_input: SigInput, keys: List[PrivateKey]) -> bytes:
    redeem = _redeem_of(sig_input)
    signers = [(prv, prv.public_key) for prv in keys]
    signers = [(prv, pub) for (prv, pub) in signers if _signs_for(pub, redeem)]
    if not signers:
        raise TxSignError(f'no private key can sign for {sig_input.outpoint}',
                          outpoint=sig_input.outpoint)

    digest = tx_sig_hash(network, tx, redeem, sig_input.value, index, sig_input.sighash)
    signatures = [TxSignature(sig=prv.sign(digest), sighash=sig_input.sighash)
                  for (prv, _) in signers]

    if isinstance(redeem, PayPK):
        spend = SpendPK(signature=signatures[0])
    elif isinstance(redeem, PayPKHash):
        spend = SpendPKHash(signature=signatures[0], pubkey=signers[0][1])
    else:
        previous = _existing_signatures(tx.txins[index].signature_script)
        spend = SpendMulSig(signatures=_order_multisig(
            network, tx, index, redeem, sig_input.value,
            previous + [(s, pub) for (s, (_, pub)) in zip(signatures, signers)]))

    if isinstance(sig_input.script, PayScriptHash):
        return scriptBuild.encode_input(ScriptHashInput(spend=spend, redeem=redeem))
    return scriptBuild.encode_input(spend)


def sign_tx(network: Network, tx: Transaction, sig_inputs: Iterable[SigInput],
            keys: Iterable[PrivateKey]) -> Transaction:
    """
    Sign every input described by `sig_inputs` with the matching `keys`.

    Raises TxSignError when a sig input spends an outpoint missing from `tx`,
    carries an inconsistent redeem script, or has no matching key.
    """
    keys = list(keys)
    txins = list(tx.txins)
    for sig_input in sig_inputs:
        try:
            index = _input_index(tx, sig_input.outpoint)
            script = _sign_input(network, tx, index, sig_input, keys)
        except TxSignError as e:
            logger.error(f'[wallet] rejected sig input {Utils.serialize(sig_input)}: {e.msg}')
            raise
        txins[index] = txins[index]._replace(signature_script=script)
        logger.debug(f'[wallet] signed input {index} spending {sig_input.outpoint}')
    return tx._replace(txins=txins)


# ————————————————————merging partial signatures———————————————————————

def _unsigned(tx: Transaction) -> Transaction:
    return tx._replace(txins=[t._replace(signature_script=b'') for t in tx.txins])


def merge_txs(network: Network, txs: List[Transaction],
              coins: Iterable[Tuple[ScriptOutput, int, OutPoint]]) -> Transaction:
    """
    Combine signatures of several signed copies of one unsigned txn.

    `coins` gives the output script and value of each outpoint to merge.
    """
    if not txs:
        raise TxSignError('nothing to merge')
    skeleton = _unsigned(txs[0])
    if any(_unsigned(tx) != skeleton for tx in txs[1:]):
        raise TxSignError('can only merge signatures of the same transaction')

    txins = list(skeleton.txins)
    for (script, value, outpoint) in coins:
        index = _input_index(skeleton, outpoint)
        scripts = [tx.txins[index].signature_script for tx in txs if tx.txins[index].signature_script]
        if not scripts:
            continue

        redeem = script
        if isinstance(script, PayScriptHash):
            spend = scriptBuild.decode_input(scripts[0])
            if not isinstance(spend, ScriptHashInput):
                raise TxSignError(f'input {index} does not reveal its redeem script', outpoint=outpoint)
            redeem = spend.redeem

        if not isinstance(redeem, PayMulSig):
            txins[index] = txins[index]._replace(signature_script=scripts[0])
            continue

        signatures = []
        for signature_script in scripts:
            signatures += _existing_signatures(signature_script)
        spend = SpendMulSig(signatures=_order_multisig(network, skeleton, index, redeem, value, signatures))
        if isinstance(script, PayScriptHash):
            spend = ScriptHashInput(spend=spend, redeem=redeem)
        txins[index] = txins[index]._replace(signature_script=scriptBuild.encode_input(spend))

    return skeleton._replace(txins=txins)


# ————————————————————checking———————————————————————

def verify_input_signatures(network: Network, tx: Transaction, sig_input: SigInput) -> int:
    """Number of signatures in the input spending `sig_input.outpoint` that
    verify against the keys of its script. Not a script interpreter."""
    index = _input_index(tx, sig_input.outpoint)
    signature_script = tx.txins[index].signature_script
    if not signature_script:
        return 0
    redeem = _redeem_of(sig_input)
    spend = scriptBuild.decode_input(signature_script)
    if isinstance(spend, ScriptHashInput):
        if spend.redeem != redeem:
            return 0
        spend = spend.spend

    def verifies(signature: TxSignature, pubkey: PublicKey) -> bool:
        if signature.is_empty:
            return False
        digest = tx_sig_hash(network, tx, redeem, sig_input.value, index, signature.sighash)
        return pubkey.verify(signature.sig, digest)

    if isinstance(redeem, PayPK) and isinstance(spend, SpendPK):
        return int(verifies(spend.signature, redeem.pubkey))
    if isinstance(redeem, PayPKHash) and isinstance(spend, SpendPKHash):
        if not _signs_for(spend.pubkey, redeem):
            return 0
        return int(verifies(spend.signature, spend.pubkey))
    if isinstance(redeem, PayMulSig) and isinstance(spend, SpendMulSig):
        count = 0
        pubkeys = list(redeem.pubkeys)
        for signature in spend.signatures:
            while pubkeys and not verifies(signature, pubkeys[0]):
                pubkeys.pop(0)
            if not pubkeys:
                break
            pubkeys.pop(0)
            count += 1
        return count
    return 0
