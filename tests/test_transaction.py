"""
Transaction assembly and the wire codec.
"""
import pytest
from hypothesis import assume, given, strategies as st

from arbitrary import transaction as gen
from ds.OutPoint import OutPoint
from ds.Transaction import Transaction
from ds.TxIn import TxIn
from ds.TxOut import TxOut
from params.Params import Params
from script import scriptBuild
from script.scriptBuild import PayPKHash, PayScriptHash, ScriptHashInput, SpendPKHash
from utils.Errors import TxDecodeError

NETWORKS = st.sampled_from(Params.NETWORKS)


def outpoints(tx):
    return [txin.to_spend for txin in tx.txins]


class TestAssembler:

    @given(data=st.data(), network=NETWORKS)
    def test_inputs_spend_distinct_outpoints(self, data, network):
        strategy = data.draw(st.sampled_from([
            gen.legacy_txs, gen.witness_txs, gen.txs, gen.addr_only_txs,
            gen.addr_only_txs_full, gen.empty_txs]))
        tx = data.draw(strategy(network))
        assert len(set(outpoints(tx))) == len(tx.txins)
        assert len(tx.txins) <= Params.MAX_TX_INPUTS
        assert len(tx.txouts) <= Params.MAX_TX_OUTPUTS

    @given(data=st.data(), network=NETWORKS)
    def test_legacy_without_inputs_has_two_outputs(self, data, network):
        tx = data.draw(gen.legacy_txs(network))
        assert not tx.has_witness
        if not tx.txins:
            assert len(tx.txouts) >= 2

    @given(data=st.data(), network=NETWORKS)
    def test_one_witness_stack_per_input(self, data, network):
        tx = data.draw(gen.witness_txs(network))
        assert len(tx.witness) == len(tx.txins)
        for stack in tx.witness:
            assert len(stack) <= Params.MAX_WITNESS_ITEMS

    @given(data=st.data(), network=NETWORKS)
    def test_empty_txs(self, data, network):
        tx = data.draw(gen.empty_txs(network))
        assert 1 <= len(tx.txins) and 1 <= len(tx.txouts)
        assert all(txin.signature_script == b'' for txin in tx.txins)
        assert len({txin.sequence for txin in tx.txins}) == 1

    @given(data=st.data(), network=NETWORKS)
    def test_outputs_decode(self, data, network):
        txout = data.draw(gen.tx_outs(network))
        assert 1 <= txout.value <= network.max_satoshi
        scriptBuild.decode_output(txout.pk_script)

    @given(data=st.data(), network=NETWORKS)
    def test_address_only_txs(self, data, network):
        tx = data.draw(gen.addr_only_txs_full(network))
        for txout in tx.txouts:
            assert isinstance(scriptBuild.decode_output(txout.pk_script), (PayPKHash, PayScriptHash))
        for txin in tx.txins:
            spend = scriptBuild.decode_input(txin.signature_script)
            assert isinstance(spend, (SpendPKHash, ScriptHashInput))

    def test_unique_by_outpoint_keeps_first(self):
        a, b = OutPoint(txid=b'\x01' * 32, txout_idx=0), OutPoint(txid=b'\x02' * 32, txout_idx=0)
        items = [(a, 'first'), (b, 'b'), (a, 'second')]
        assert gen.unique_by_outpoint(items, lambda item: item[0]) == [(a, 'first'), (b, 'b')]


class TestSerialization:

    @given(data=st.data(), network=NETWORKS)
    def test_legacy_round_trip(self, data, network):
        tx = data.draw(st.one_of(gen.legacy_txs(network), gen.addr_only_txs(network)))
        assert Transaction.deserialize(tx.serialize()) == tx

    @given(data=st.data(), network=NETWORKS)
    def test_witness_round_trip(self, data, network):
        tx = data.draw(gen.witness_txs(network))
        # without inputs there is nothing to carry a witness
        assume(tx.txins)
        raw = tx.serialize()
        assert raw[4:6] == b'\x00\x01'
        assert Transaction.deserialize(raw) == tx

    @given(data=st.data(), network=NETWORKS)
    def test_id_ignores_witness(self, data, network):
        tx = data.draw(gen.witness_txs(network))
        stripped = tx._replace(witness=[])
        assert tx.id == stripped.id
        assert len(bytes.fromhex(tx.id)) == 32
        assert tx.serialize(include_witness=False) == stripped.serialize()

    def test_zero_input_single_output_reads_as_witness_marker(self):
        tx = Transaction.unsigned([], [TxOut(value=1, pk_script=b'')])
        assert tx.serialize()[4:6] == b'\x00\x01'

    def test_witness_count_mismatch(self):
        txin = TxIn(to_spend=OutPoint(txid=bytes(32), txout_idx=0), signature_script=b'',
                    sequence=Params.SEQUENCE_FINAL)
        tx = Transaction(version=1, txins=[txin], txouts=[], witness=[[b'a'], [b'b']], locktime=0)
        with pytest.raises(ValueError):
            tx.serialize()

    def test_truncated(self):
        tx = Transaction.unsigned([], [TxOut(value=1, pk_script=b''), TxOut(value=2, pk_script=b'')])
        raw = tx.serialize()
        with pytest.raises(TxDecodeError):
            Transaction.deserialize(raw[:-1])
        with pytest.raises(TxDecodeError):
            Transaction.deserialize(raw + b'\x00')
