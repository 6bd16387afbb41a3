from typing import (
    Iterable, NamedTuple, Dict, Union, Tuple)


class Network(NamedTuple):
    """A chain variant the fixtures are generated for."""

    name: str

    # version bytes of base58check addresses
    addr_prefix: int
    script_prefix: int

    # The maximum number of satoshi that will ever exist on this chain.
    max_satoshi: int

    # None for chains without the fork-id signature hash scheme.
    sig_hash_fork_id: Union[int, None] = None

    @property
    def valid_sig_hashes(self) -> Tuple[int, ...]:
        """Signature hash flags accepted when producing a valid signature."""
        flags = []
        for base in (Params.SIGHASH_ALL, Params.SIGHASH_NONE, Params.SIGHASH_SINGLE):
            for anyone_can_pay in (0, Params.SIGHASH_ANYONECANPAY):
                flag = base | anyone_can_pay
                if self.sig_hash_fork_id is not None:
                    flag |= Params.SIGHASH_FORKID | (self.sig_hash_fork_id << 8)
                flags.append(flag)
        return tuple(flags)


class Params:
    # The number of satoshi per coin. #realname COIN
    SATOSHI_PER_COIN = int(100e6)

    TOTAL_COINS = int(21_000_000)

    # The maximum number of satoshi that will ever be found.
    MAX_MONEY = SATOSHI_PER_COIN * TOTAL_COINS

    # Largest n of an m-of-n bare multisig script.
    MAX_MULTISIG_KEYS = int(16)

    # Bounds of the generated transaction shapes.
    MAX_TX_INPUTS = int(5)
    MAX_TX_OUTPUTS = int(5)
    MIN_SIGNING_INPUTS = int(1)

    # A zero-input legacy txn needs this many outputs so that its serialized
    # form cannot start with the witness marker and flag.
    MIN_OUTPUTS_WITHOUT_INPUTS = int(2)

    MAX_WITNESS_ITEMS = int(8)
    MAX_WITNESS_ITEM_SIZE = int(80)

    DEFAULT_TX_VERSION = int(1)

    # #realname SIGHASH_*
    SIGHASH_ALL = 0x01
    SIGHASH_NONE = 0x02
    SIGHASH_SINGLE = 0x03
    SIGHASH_FORKID = 0x40
    SIGHASH_ANYONECANPAY = 0x80

    SEQUENCE_FINAL = 0xffffffff
    UINT32_MAX = 0xffffffff

    BTC = Network(
        name='btc', addr_prefix=0x00, script_prefix=0x05,
        max_satoshi=MAX_MONEY)

    BTC_TEST = Network(
        name='btc-test', addr_prefix=0x6f, script_prefix=0xc4,
        max_satoshi=MAX_MONEY)

    BCH = Network(
        name='bch', addr_prefix=0x00, script_prefix=0x05,
        max_satoshi=MAX_MONEY, sig_hash_fork_id=0)

    BCH_TEST = Network(
        name='bch-test', addr_prefix=0x6f, script_prefix=0xc4,
        max_satoshi=MAX_MONEY, sig_hash_fork_id=0)

    NETWORKS: Iterable[Network] = (BTC, BTC_TEST, BCH, BCH_TEST)

    @classmethod
    def get_network(cls, name: str) -> Network:
        networks: Dict[str, Network] = {net.name: net for net in cls.NETWORKS}
        try:
            return networks[name]
        except KeyError:
            raise ValueError(f'unknown network: {name}') from None
