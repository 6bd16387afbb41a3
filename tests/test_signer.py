"""
Signing fixtures end to end: the generated signing data must be accepted by
the signer and yield verifying signatures.
"""
from unittest.mock import patch

import pytest
from hypothesis import given, strategies as st

from arbitrary import transaction as gen
from ds.OutPoint import OutPoint
from ds.SigInput import SigInput
from ds.Transaction import Transaction
from ds.TxIn import TxIn
from ds.TxOut import TxOut
from params.Params import Params
from script import scriptBuild
from script.scriptBuild import (
    PayPK, PayPKHash, PayMulSig, PayScriptHash, ScriptHashInput, SpendMulSig)
from utils.Errors import GenerationError, TxSignError
from wallet.Keys import key_pair
from wallet.Signer import (
    SIGHASH_SINGLE_BUG, merge_txs, sign_tx, tx_sig_hash, verify_input_signatures)
from wallet.Wallet import pubkey_to_address, script_to_address

NETWORKS = st.sampled_from(Params.NETWORKS)


def required_signatures(sig_input):
    script = sig_input.redeem if isinstance(sig_input.script, PayScriptHash) else sig_input.script
    return script.required if isinstance(script, PayMulSig) else 1


def spend_of(tx, outpoint):
    [txin] = [t for t in tx.txins if t.to_spend == outpoint]
    return txin.signature_script


def make_tx(*outpoints, outputs=1):
    txins = [TxIn(to_spend=op, signature_script=b'', sequence=Params.SEQUENCE_FINAL)
             for op in outpoints]
    txouts = [TxOut(value=1000 + i, pk_script=scriptBuild.make_pk_script(bytes(20)))
              for i in range(outputs)]
    return Transaction.unsigned(txins, txouts)


OP_A = OutPoint(txid=b'\xaa' * 32, txout_idx=0)
OP_B = OutPoint(txid=b'\xbb' * 32, txout_idx=1)
KEYS = [key_pair(secret) for secret in (1, 2, 3)]
MULTISIG = PayMulSig(pubkeys=[pub for (_, pub) in KEYS], required=2)


class TestSigningData:

    @given(data=st.data(), network=NETWORKS)
    def test_signing_completes_every_input(self, data, network):
        tx, sig_inputs, keys = data.draw(gen.signing_data(network))
        assert Params.MIN_SIGNING_INPUTS <= len(sig_inputs) <= Params.MAX_TX_INPUTS
        assert sorted(outpoint for outpoint in (t.to_spend for t in tx.txins)) == \
            sorted(s.outpoint for s in sig_inputs)

        signed = sign_tx(network, tx, sig_inputs, keys)
        assert all(txin.signature_script for txin in signed.txins)
        for sig_input in sig_inputs:
            assert verify_input_signatures(network, signed, sig_input) == \
                required_signatures(sig_input)

    @given(data=st.data(), network=NETWORKS)
    def test_multisig_returns_m_member_keys(self, data, network):
        sig_input, keys = data.draw(gen.multisig_sig_inputs(network))
        script = sig_input.script
        assert 1 <= script.required <= len(script.pubkeys) <= Params.MAX_MULTISIG_KEYS
        assert len(keys) == script.required
        assert all(prv.public_key in script.pubkeys for prv in keys)
        assert len(set(keys)) == len(keys)

    @given(data=st.data(), network=NETWORKS)
    def test_pkhash_commits_to_key(self, data, network):
        sig_input, [prv] = data.draw(gen.pkhash_sig_inputs(network))
        assert sig_input.script.hash160 == pubkey_to_address(network, prv.public_key).hash160

    @given(data=st.data(), network=NETWORKS)
    def test_script_hash_commits_to_redeem(self, data, network):
        sig_input, _ = data.draw(gen.script_hash_sig_inputs(network))
        assert isinstance(sig_input.script, PayScriptHash)
        assert sig_input.script.hash160 == script_to_address(network, sig_input.redeem).hash160

    @given(data=st.data(), network=NETWORKS)
    def test_two_of_three_script_hash(self, data, network):
        multisig = gen.multisig_sig_inputs(network, params=st.just((2, 3)))
        sig_input, keys = data.draw(gen.script_hash_sig_inputs(network, redeem_sig_inputs=multisig))
        redeem = sig_input.redeem
        assert (redeem.required, len(redeem.pubkeys)) == (2, 3)
        assert len(keys) == 2
        assert {prv.public_key for prv in keys} <= set(redeem.pubkeys)


class TestPartialTxs:

    @given(data=st.data(), network=NETWORKS)
    def test_one_candidate_per_signing_key(self, data, network):
        candidates, coins = data.draw(gen.partial_txs(network))
        assert coins
        for (script, value, outpoint, m, n) in coins:
            signed = [tx for tx in candidates if spend_of(tx, outpoint)]
            assert m <= len(signed) <= n
            assert len({spend_of(tx, outpoint) for tx in signed}) == len(signed)
            for tx in signed:
                # only this input carries a signature
                assert all(not txin.signature_script for txin in tx.txins if txin.to_spend != outpoint)
                spend = scriptBuild.decode_input(spend_of(tx, outpoint))
                redeem = spend.redeem if isinstance(spend, ScriptHashInput) else script
                spend = spend.spend if isinstance(spend, ScriptHashInput) else spend
                assert isinstance(spend, SpendMulSig)
                assert len(spend.signatures) == m
                assert sum(not s.is_empty for s in spend.signatures) == 1
                sig_input = SigInput(script=script, value=value, outpoint=outpoint,
                                     sighash=Params.SIGHASH_ALL,
                                     redeem=redeem if isinstance(script, PayScriptHash) else None)
                assert verify_input_signatures(network, tx, sig_input) == 1
        assert len(candidates) == sum(
            len([tx for tx in candidates if spend_of(tx, op)]) for (_, _, op, _, _) in coins)

    @given(data=st.data(), network=NETWORKS)
    def test_merge_completes_threshold(self, data, network):
        candidates, coins = data.draw(gen.partial_txs(network))
        merged = merge_txs(network, candidates, [(s, v, op) for (s, v, op, _, _) in coins])
        for (script, value, outpoint, m, _) in coins:
            spend = scriptBuild.decode_input(spend_of(merged, outpoint))
            redeem = spend.redeem if isinstance(spend, ScriptHashInput) else None
            sig_input = SigInput(script=script, value=value, outpoint=outpoint,
                                 sighash=Params.SIGHASH_ALL, redeem=redeem)
            assert verify_input_signatures(network, merged, sig_input) == m

    def test_signer_failure_is_a_generation_error(self):
        @given(data=st.data())
        def draw_partial(data):
            data.draw(gen.partial_txs(Params.BTC))

        with patch('arbitrary.transaction.sign_tx', side_effect=TxSignError('rejected')):
            with pytest.raises(GenerationError):
                draw_partial()


class TestSigner:

    def test_multisig_signatures_accumulate(self):
        tx = make_tx(OP_A)
        sig_input = SigInput(script=MULTISIG, value=5000, outpoint=OP_A, sighash=Params.SIGHASH_ALL)
        once = sign_tx(Params.BTC, tx, [sig_input], [KEYS[2][0]])
        assert verify_input_signatures(Params.BTC, once, sig_input) == 1
        twice = sign_tx(Params.BTC, once, [sig_input], [KEYS[0][0]])
        assert verify_input_signatures(Params.BTC, twice, sig_input) == 2
        spend = scriptBuild.decode_input(spend_of(twice, OP_A))
        assert len(spend.signatures) == 2

    def test_signs_pay_to_script_hash(self):
        tx = make_tx(OP_A, OP_B, outputs=2)
        redeem = PayPK(pubkey=KEYS[1][1])
        script = PayScriptHash(hash160=scriptBuild.script_hash(redeem))
        sig_inputs = [
            SigInput(script=script, value=1, outpoint=OP_A, sighash=Params.SIGHASH_ALL, redeem=redeem),
            SigInput(script=PayPKHash(hash160=pubkey_to_address(Params.BTC, KEYS[0][1]).hash160),
                     value=2, outpoint=OP_B, sighash=Params.SIGHASH_SINGLE | Params.SIGHASH_ANYONECANPAY),
        ]
        signed = sign_tx(Params.BTC, tx, sig_inputs, [KEYS[0][0], KEYS[1][0]])
        assert [verify_input_signatures(Params.BTC, signed, s) for s in sig_inputs] == [1, 1]

    def test_fork_id_signatures(self):
        tx = make_tx(OP_A)
        sighash = Params.SIGHASH_ALL | Params.SIGHASH_FORKID
        sig_input = SigInput(script=PayPK(pubkey=KEYS[0][1]), value=7, outpoint=OP_A, sighash=sighash)
        signed = sign_tx(Params.BCH, tx, [sig_input], [KEYS[0][0]])
        assert verify_input_signatures(Params.BCH, signed, sig_input) == 1
        # the amount is committed to
        assert verify_input_signatures(Params.BCH, signed, sig_input._replace(value=8)) == 0

    def test_sighash_single_without_output(self):
        tx = make_tx(OP_A, OP_B, outputs=1)
        digest = tx_sig_hash(Params.BTC, tx, MULTISIG, 1, 1, Params.SIGHASH_SINGLE)
        assert digest == SIGHASH_SINGLE_BUG

    def test_missing_outpoint(self):
        sig_input = SigInput(script=MULTISIG, value=1, outpoint=OP_B, sighash=Params.SIGHASH_ALL)
        with pytest.raises(TxSignError) as e:
            sign_tx(Params.BTC, make_tx(OP_A), [sig_input], [KEYS[0][0]])
        assert e.value.outpoint == OP_B

    def test_missing_or_wrong_redeem(self):
        script = PayScriptHash(hash160=scriptBuild.script_hash(MULTISIG))
        for redeem in (None, PayPK(pubkey=KEYS[0][1])):
            sig_input = SigInput(script=script, value=1, outpoint=OP_A,
                                 sighash=Params.SIGHASH_ALL, redeem=redeem)
            with pytest.raises(TxSignError):
                sign_tx(Params.BTC, make_tx(OP_A), [sig_input], [KEYS[0][0]])

    def test_no_matching_key(self):
        sig_input = SigInput(script=PayPK(pubkey=KEYS[0][1]), value=1, outpoint=OP_A,
                             sighash=Params.SIGHASH_ALL)
        with pytest.raises(TxSignError):
            sign_tx(Params.BTC, make_tx(OP_A), [sig_input], [KEYS[1][0]])

    def test_merge_rejects_different_txs(self):
        with pytest.raises(TxSignError):
            merge_txs(Params.BTC, [], [])
        with pytest.raises(TxSignError):
            merge_txs(Params.BTC, [make_tx(OP_A), make_tx(OP_B)], [])
