from typing import NamedTuple, Union

from ds.OutPoint import OutPoint


class SigInput(NamedTuple):
    """Everything needed to sign the input spending `outpoint`."""

    # output script of the coin being spent (script descriptor)
    script: object

    value: int

    outpoint: OutPoint

    sighash: int

    # descriptor of the redeem script when `script` is pay-to-script-hash
    redeem: Union[object, None] = None
