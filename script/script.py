from . import opcodes

# two main classes in this package
__all__ = ['Tokenizer', 'Templates']


# ————————————————————tool functions———————————————————————

# check whether the token is a SEC encoded public key for P2PK
def _is_pubkey(opcode, bytes, data) -> bool:
    if opcode != Tokenizer.OP_LITERAL:
        return False
    if len(data) == 33:
        return data[0] in (0x02, 0x03)
    if len(data) == 65:
        return data[0] == 0x04
    return False


# check whether the token is a hash160 value for P2PKH and P2SH
def _is_hash160(opcode, bytes, data) -> bool:
    if opcode != Tokenizer.OP_LITERAL:
        return False
    if len(data) != 20:
        return False
    return True


# OP_1 .. OP_16 (not a data push that happens to hold a small number)
def _is_small_int(opcode, bytes, data) -> bool:
    if opcode != Tokenizer.OP_LITERAL or len(bytes) != 1:
        return False
    return opcodes.OP_1 <= bytes[0] <= opcodes.OP_16


# —————————————————————Script templates——————————————————————

SCRIPT_FORM_NON_STANDARD = 'non-standard'
SCRIPT_FORM_PAY_TO_PUBKEY_HASH = 'pay-to-pubkey-hash'  # P2PKH
SCRIPT_FORM_PAY_TO_PUBKEY = 'pay-to-pubkey'  # P2PK
SCRIPT_FORM_PAY_TO_SCRIPT_HASH = 'pay-to-script-hash'  # P2SH
SCRIPT_FORM_PAY_TO_MULTISIG = 'pay-to-multisig'  # bare m-of-n

# pk_script template for P2PKH
TEMPLATE_PAY_TO_PUBKEY_HASH = (lambda t: len(t) == 5, opcodes.OP_DUP,
                               opcodes.OP_HASH160, _is_hash160, opcodes.OP_EQUALVERIFY,
                               opcodes.OP_CHECKSIG)

# pk_script template for P2PK
TEMPLATE_PAY_TO_PUBKEY = (lambda t: len(t) == 2, _is_pubkey,
                          opcodes.OP_CHECKSIG)

# pk_script template for P2SH
TEMPLATE_PAY_TO_SCRIPT_HASH = (lambda t: len(t) == 3, opcodes.OP_HASH160,
                               _is_hash160, opcodes.OP_EQUAL)


def _match_multisig(tokens) -> bool:
    # OP_m <pubkey> ... <pubkey> OP_n OP_CHECKMULTISIG
    if len(tokens) < 4 or tokens[-1] != opcodes.OP_CHECKMULTISIG:
        return False
    m_token, n_token = tokens.token(0), tokens.token(-2)
    if not (_is_small_int(*m_token) and _is_small_int(*n_token)):
        return False
    m, n = opcodes.small_int_value(m_token[1][0]), opcodes.small_int_value(n_token[1][0])
    if n != len(tokens) - 3 or not 1 <= m <= n:
        return False
    return all(_is_pubkey(*tokens.token(i)) for i in range(1, len(tokens) - 2))


# a list of the templates for searching
Templates = [

    (SCRIPT_FORM_PAY_TO_PUBKEY_HASH, TEMPLATE_PAY_TO_PUBKEY_HASH),

    (SCRIPT_FORM_PAY_TO_PUBKEY, TEMPLATE_PAY_TO_PUBKEY),

    (SCRIPT_FORM_PAY_TO_SCRIPT_HASH, TEMPLATE_PAY_TO_SCRIPT_HASH),

]


# ————————————————————tool class producing tokens[]——————————————————————————

# test examples:
# txid: 370b0e8298cf00b47a61ebac3381d38f38f62b065ef5d8dd3cfd243e4b6e9137 (input# 0)
# >>> pk_script = b'v\xa9\x14\xd6Kqr\x9aPM#\xd9H\x88\xd3\xf7\x12\xd5WS\xd5\xd6"\x88\xac'
# >>> print(Tokenizer(pk_script))
# OP_DUP OP_HASH160 d64b71729a504d23d94888d3f712d55753d5d622 OP_EQUALVERIFY OP_CHECKSIG


class Tokenizer(object):
    """
    Tokenize a script into (opcode, bytes, value) tokens.
    """

    OP_LITERAL = 0x1ff

    ### Init part
    def __init__(self, script: bytes):
        self._script = script
        self._tokens = []
        self._process(script)

    # Given a template, return True if this script matches
    def match_template(self, template) -> bool:

        if not template[0](self):
            return False

        # ((opcode, bytes, value), template_target)
        for ((o, b, v), t) in zip(self._tokens, template[1:]):

            # callable, check the value
            if callable(t):
                if not t(o, b, v):
                    return False

            # otherwise, compare opcode
            elif t != o:
                return False

        return True

    def script_form(self) -> str:
        for (sf, template) in Templates:
            if self.match_template(template):
                return sf
        if _match_multisig(self):
            return SCRIPT_FORM_PAY_TO_MULTISIG
        return SCRIPT_FORM_NON_STANDARD

    def is_push_only(self) -> bool:
        return all(opcode == Tokenizer.OP_LITERAL for (opcode, _, _) in self._tokens)

    def token(self, index):
        return self._tokens[index]

    # Get the original bytes used for the opcode and value
    def get_bytes(self, index) -> bytes:
        return self._tokens[index][1]

    # Get the value for a literal.
    def get_value(self, index) -> bytes:
        return self._tokens[index][2]

    # Internal function which parse the script into tokens
    def _process(self, script):
        """Parse the script into tokens.
        :param script: The script to parse
        """
        while script:
            opcode = script[0]
            opcode_bytes = script[0].to_bytes(1, 'big')
            script = script[1:]
            value = None

            if opcode == opcodes.OP_0:
                value = b''
                opcode = Tokenizer.OP_LITERAL

            elif 1 <= opcode <= opcodes.OP_PUSHDATA4:
                pushdata_length = opcode
                if opcodes.OP_PUSHDATA1 <= opcode <= opcodes.OP_PUSHDATA4:
                    op_length = [1, 2, 4][opcode - opcodes.OP_PUSHDATA1]
                    if len(script) < op_length:
                        raise ValueError('The pushdata opcode is missing its length')
                    pushdata_length = int.from_bytes(script[:op_length], 'little')
                    opcode_bytes += script[:op_length]
                    script = script[op_length:]

                # The data to be pushed
                value = script[:pushdata_length]
                opcode_bytes += value
                # Remove the data to be pushed from the script
                script = script[pushdata_length:]
                if len(value) != pushdata_length:
                    raise ValueError('The pushdata opcode does not match the length of the data to be pushed')
                opcode = Tokenizer.OP_LITERAL

            elif opcode == opcodes.OP_1NEGATE:
                opcode = Tokenizer.OP_LITERAL
                value = int(-1).to_bytes(1, 'big', signed=True)

            elif opcodes.OP_1 <= opcode <= opcodes.OP_16:
                value = int(opcode - opcodes.OP_1 + 1).to_bytes(1, 'big')
                opcode = Tokenizer.OP_LITERAL

            self._tokens.append((opcode, opcode_bytes, value))

    def __len__(self):
        return len(self._tokens)

    def __getitem__(self, name):
        return self._tokens[name][0]

    def __iter__(self):
        for (opcode, bytes, value) in self._tokens:
            yield opcode

    def __str__(self):
        output = []
        for (opcode, bytes, value) in self._tokens:
            if opcode == Tokenizer.OP_LITERAL:
                if len(bytes) == 1 and opcodes.OP_1 <= bytes[0] <= opcodes.OP_16:
                    output.append(opcodes.get_opcode_name(bytes[0]))
                else:
                    output.append(value.hex() if value else 'OP_0')
            else:
                output.append(opcodes.get_opcode_name(opcode))
        return " ".join(output)
