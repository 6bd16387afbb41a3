

class BaseError(Exception):
    def __init__(self, msg):
        super().__init__(msg)
        self.msg = msg

class ScriptDecodeError(BaseError):
    pass

class TxDecodeError(BaseError):
    pass

class AddressError(BaseError):
    pass

class TxSignError(BaseError):
    def __init__(self, *args, outpoint=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.outpoint = outpoint

class GenerationError(BaseError):
    """The generator composed a fixture that its own collaborators reject."""
    pass
