# Script opcodes used by the script codec.
# See: https://en.bitcoin.it/wiki/Script

OP_0 = OP_FALSE = 0x00
OP_PUSHDATA1 = 0x4c
OP_PUSHDATA2 = 0x4d
OP_PUSHDATA4 = 0x4e
OP_1NEGATE = 0x4f
OP_RESERVED = 0x50
OP_1 = OP_TRUE = 0x51
OP_16 = 0x60

OP_NOP = 0x61
OP_VERIFY = 0x69
OP_RETURN = 0x6a

OP_DUP = 0x76

OP_EQUAL = 0x87
OP_EQUALVERIFY = 0x88

OP_NUMEQUAL = 0x9c
OP_NUMEQUALVERIFY = 0x9d

OP_RIPEMD160 = 0xa6
OP_SHA1 = 0xa7
OP_SHA256 = 0xa8
OP_HASH160 = 0xa9
OP_HASH256 = 0xaa
OP_CODESEPARATOR = 0xab
OP_CHECKSIG = 0xac
OP_CHECKSIGVERIFY = 0xad
OP_CHECKMULTISIG = 0xae
OP_CHECKMULTISIGVERIFY = 0xaf

_NAMED = {
    OP_0: 'OP_0',
    OP_PUSHDATA1: 'OP_PUSHDATA1',
    OP_PUSHDATA2: 'OP_PUSHDATA2',
    OP_PUSHDATA4: 'OP_PUSHDATA4',
    OP_1NEGATE: 'OP_1NEGATE',
    OP_RESERVED: 'OP_RESERVED',
    OP_NOP: 'OP_NOP',
    OP_VERIFY: 'OP_VERIFY',
    OP_RETURN: 'OP_RETURN',
    OP_DUP: 'OP_DUP',
    OP_EQUAL: 'OP_EQUAL',
    OP_EQUALVERIFY: 'OP_EQUALVERIFY',
    OP_NUMEQUAL: 'OP_NUMEQUAL',
    OP_NUMEQUALVERIFY: 'OP_NUMEQUALVERIFY',
    OP_RIPEMD160: 'OP_RIPEMD160',
    OP_SHA1: 'OP_SHA1',
    OP_SHA256: 'OP_SHA256',
    OP_HASH160: 'OP_HASH160',
    OP_HASH256: 'OP_HASH256',
    OP_CODESEPARATOR: 'OP_CODESEPARATOR',
    OP_CHECKSIG: 'OP_CHECKSIG',
    OP_CHECKSIGVERIFY: 'OP_CHECKSIGVERIFY',
    OP_CHECKMULTISIG: 'OP_CHECKMULTISIG',
    OP_CHECKMULTISIGVERIFY: 'OP_CHECKMULTISIGVERIFY',
}
for _n in range(1, 17):
    _NAMED[OP_1 + _n - 1] = f'OP_{_n}'


def get_opcode_name(opcode: int) -> str:
    return _NAMED.get(opcode, f'OP_UNKNOWN_{opcode:#04x}')


def small_int_opcode(n: int) -> int:
    """OP_1 .. OP_16 for 1 <= n <= 16."""
    if not 1 <= n <= 16:
        raise ValueError(f'{n} has no small integer opcode')
    return OP_1 + n - 1


def small_int_value(opcode: int) -> int:
    if not OP_1 <= opcode <= OP_16:
        raise ValueError(f'{opcode:#04x} is not a small integer opcode')
    return opcode - OP_1 + 1
