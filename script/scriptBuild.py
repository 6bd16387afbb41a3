from typing import List, NamedTuple, Union

from . import opcodes
from . import scriptUtils
from .script import (
    Tokenizer,
    SCRIPT_FORM_PAY_TO_PUBKEY,
    SCRIPT_FORM_PAY_TO_PUBKEY_HASH,
    SCRIPT_FORM_PAY_TO_SCRIPT_HASH,
    SCRIPT_FORM_PAY_TO_MULTISIG)

from params.Params import Params
from utils.Errors import ScriptDecodeError
from wallet.Keys import PublicKey


# ——————————————output script descriptors————————————————

class PayPK(NamedTuple):
    pubkey: PublicKey


class PayPKHash(NamedTuple):
    hash160: bytes


class PayMulSig(NamedTuple):
    pubkeys: List[PublicKey]
    required: int


class PayScriptHash(NamedTuple):
    hash160: bytes


ScriptOutput = Union[PayPK, PayPKHash, PayMulSig, PayScriptHash]

# descriptors that may serve as the redeem script of a PayScriptHash
RedeemScript = Union[PayPK, PayPKHash, PayMulSig]


# ——————————————input script descriptors————————————————

class TxSignature(NamedTuple):
    """DER signature and the sighash flag appended to it."""
    sig: bytes
    sighash: int

    @property
    def is_empty(self) -> bool:
        return not self.sig

    def to_bytes(self) -> bytes:
        if self.is_empty:
            return b''
        return self.sig + bytes([self.sighash & 0xff])

    @classmethod
    def from_bytes(cls, data: bytes) -> 'TxSignature':
        if not data:
            return EMPTY_SIGNATURE
        return cls(sig=data[:-1], sighash=data[-1])


# placeholder for a signature not produced yet (pushed as OP_0)
EMPTY_SIGNATURE = TxSignature(sig=b'', sighash=0)


class SpendPK(NamedTuple):
    signature: TxSignature


class SpendPKHash(NamedTuple):
    signature: TxSignature
    pubkey: PublicKey


class SpendMulSig(NamedTuple):
    signatures: List[TxSignature]


SimpleInput = Union[SpendPK, SpendPKHash, SpendMulSig]


class ScriptHashInput(NamedTuple):
    spend: SimpleInput
    redeem: RedeemScript


ScriptInput = Union[SpendPK, SpendPKHash, SpendMulSig, ScriptHashInput]


# ——————————————————encoding——————————————————————

def push_data(data: bytes) -> bytes:
    """Minimal push of `data`; the empty string is pushed with OP_0."""
    size = len(data)
    if size == 0:
        return bytes([opcodes.OP_0])
    if size < opcodes.OP_PUSHDATA1:
        return bytes([size]) + data
    if size <= 0xff:
        return bytes([opcodes.OP_PUSHDATA1]) + size.to_bytes(1, 'little') + data
    if size <= 0xffff:
        return bytes([opcodes.OP_PUSHDATA2]) + size.to_bytes(2, 'little') + data
    if size <= 0xffffffff:
        return bytes([opcodes.OP_PUSHDATA4]) + size.to_bytes(4, 'little') + data
    raise ValueError('Can not add OP_PUSHDATA to the script.')


def make_pk_script(pk_hash: bytes) -> bytes:
    return (bytes([opcodes.OP_DUP, opcodes.OP_HASH160]) + push_data(pk_hash)
            + bytes([opcodes.OP_EQUALVERIFY, opcodes.OP_CHECKSIG]))


def get_redeem_script(pubkeys: List[PublicKey], required: int) -> bytes:

    if not 1 <= len(pubkeys) <= Params.MAX_MULTISIG_KEYS:
        raise ValueError(f"a multisig script takes 1 to {Params.MAX_MULTISIG_KEYS} public keys")

    if not 1 <= required <= len(pubkeys):
        raise ValueError("required signatures must be between 1 and the number of public keys")

    redeem_script = bytes([opcodes.small_int_opcode(required)])
    for pubkey in pubkeys:
        redeem_script += push_data(pubkey.to_bytes())
    redeem_script += bytes([opcodes.small_int_opcode(len(pubkeys)), opcodes.OP_CHECKMULTISIG])

    return redeem_script


def get_p2sh_script(p2sh_hash: bytes) -> bytes:
    return bytes([opcodes.OP_HASH160]) + push_data(p2sh_hash) + bytes([opcodes.OP_EQUAL])


def encode_output(script: ScriptOutput) -> bytes:
    """Binary pk_script of an output script descriptor."""
    if isinstance(script, PayPK):
        return push_data(script.pubkey.to_bytes()) + bytes([opcodes.OP_CHECKSIG])
    if isinstance(script, PayPKHash):
        return make_pk_script(script.hash160)
    if isinstance(script, PayMulSig):
        return get_redeem_script(script.pubkeys, script.required)
    if isinstance(script, PayScriptHash):
        return get_p2sh_script(script.hash160)
    raise TypeError(f'not an output script descriptor: {script!r}')


def _encode_simple_input(spend: SimpleInput) -> bytes:
    if isinstance(spend, SpendPK):
        return push_data(spend.signature.to_bytes())
    if isinstance(spend, SpendPKHash):
        return push_data(spend.signature.to_bytes()) + push_data(spend.pubkey.to_bytes())
    if isinstance(spend, SpendMulSig):
        # extra OP_0 consumed by the off-by-one pop of OP_CHECKMULTISIG
        return bytes([opcodes.OP_0]) + b''.join(push_data(s.to_bytes()) for s in spend.signatures)
    raise TypeError(f'not a simple input descriptor: {spend!r}')


def encode_input(script: ScriptInput) -> bytes:
    """Binary signature_script of an input script descriptor."""
    if isinstance(script, ScriptHashInput):
        return _encode_simple_input(script.spend) + push_data(encode_output(script.redeem))
    return _encode_simple_input(script)


def script_hash(script: ScriptOutput) -> bytes:
    """hash160 committed to by a P2SH output redeemed by `script`."""
    return scriptUtils.hash160(encode_output(script))


# ——————————————————decoding——————————————————————

def _tokenize(data: bytes) -> Tokenizer:
    try:
        return Tokenizer(data)
    except ValueError as e:
        raise ScriptDecodeError(f'malformed script {data.hex()}: {e}') from e


def _pubkey(data: bytes) -> PublicKey:
    try:
        return PublicKey.from_bytes(data)
    except ValueError as e:
        raise ScriptDecodeError(str(e)) from e


def decode_output(data: bytes) -> ScriptOutput:
    """Output script descriptor of a standard pk_script."""
    tokens = _tokenize(data)
    form = tokens.script_form()

    if form == SCRIPT_FORM_PAY_TO_PUBKEY:
        return PayPK(pubkey=_pubkey(tokens.get_value(0)))
    if form == SCRIPT_FORM_PAY_TO_PUBKEY_HASH:
        return PayPKHash(hash160=tokens.get_value(2))
    if form == SCRIPT_FORM_PAY_TO_SCRIPT_HASH:
        return PayScriptHash(hash160=tokens.get_value(1))
    if form == SCRIPT_FORM_PAY_TO_MULTISIG:
        pubkeys = [_pubkey(tokens.get_value(i)) for i in range(1, len(tokens) - 2)]
        required = opcodes.small_int_value(tokens.get_bytes(0)[0])
        return PayMulSig(pubkeys=pubkeys, required=required)

    raise ScriptDecodeError(f'non-standard output script: {data.hex()}')


def _decode_simple_input(pushes: List[bytes]) -> SimpleInput:
    if len(pushes) == 2 and pushes[1]:
        try:
            pubkey = PublicKey.from_bytes(pushes[1])
        except ValueError:
            pass
        else:
            return SpendPKHash(signature=TxSignature.from_bytes(pushes[0]), pubkey=pubkey)
    if len(pushes) >= 2 and pushes[0] == b'':
        return SpendMulSig(signatures=[TxSignature.from_bytes(p) for p in pushes[1:]])
    if len(pushes) == 1:
        return SpendPK(signature=TxSignature.from_bytes(pushes[0]))
    raise ScriptDecodeError(f'unknown spend of {len(pushes)} pushes')


def _spends(spend: SimpleInput, redeem: RedeemScript) -> bool:
    if isinstance(redeem, PayPK):
        return isinstance(spend, SpendPK)
    if isinstance(redeem, PayPKHash):
        return isinstance(spend, SpendPKHash)
    return isinstance(spend, SpendMulSig) and len(spend.signatures) == redeem.required


def _decode_script_hash_input(pushes: List[bytes]) -> Union[ScriptHashInput, None]:
    if len(pushes) < 2:
        return None
    try:
        redeem = decode_output(pushes[-1])
        spend = _decode_simple_input(pushes[:-1])
    except ScriptDecodeError:
        return None
    if isinstance(redeem, PayScriptHash) or not _spends(spend, redeem):
        return None
    return ScriptHashInput(spend=spend, redeem=redeem)


def decode_input(data: bytes) -> ScriptInput:
    """Input script descriptor of a push-only signature_script."""
    tokens = _tokenize(data)
    if not len(tokens) or not tokens.is_push_only():
        raise ScriptDecodeError(f'not a push-only input script: {data.hex()}')
    # OP_1 .. OP_16 and OP_1NEGATE never appear in a standard spend
    if any(len(tokens.get_bytes(i)) == 1 and tokens.get_bytes(i)[0] != opcodes.OP_0
           for i in range(len(tokens))):
        raise ScriptDecodeError(f'unexpected small integer in input script: {data.hex()}')

    pushes = [tokens.get_value(i) for i in range(len(tokens))]
    script_hash_input = _decode_script_hash_input(pushes)
    if script_hash_input is not None:
        return script_hash_input
    return _decode_simple_input(pushes)
