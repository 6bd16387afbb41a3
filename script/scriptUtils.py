import hashlib

from Crypto.Hash import RIPEMD160

__all__ = ['sha256', 'sha256d', 'ripemd160', 'hash160']


# ————————————————Hash Utils——————————————————
def sha256(data):
    return hashlib.sha256(data).digest()


def sha256d(data):
    return sha256(sha256(data))


def ripemd160(data):
    return RIPEMD160.new(data).digest()


def hash160(data):
    return ripemd160(sha256(data))
