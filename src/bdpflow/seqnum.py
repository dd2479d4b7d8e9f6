SEQ_MODULUS = 2**32
SEQ_MASK = SEQ_MODULUS - 1


def _check(value: int) -> int:
    if value < 0 or value > SEQ_MASK:
        raise ValueError("Sequence number out of range: %d" % value)
    return value


def relative_to(value: int, base: int) -> int:
    """
    Return `value` relative to `base`, both being 32-bit sequence numbers.

    The subtraction is performed modulo 2^32, so a sequence number which
    wrapped once past `base` is still reported as a positive offset.
    """
    return (_check(value) - _check(base)) & SEQ_MASK


def advance(value: int, size: int) -> int:
    """
    Return the sequence number `size` bytes after `value`.
    """
    if size < 0:
        raise ValueError("Cannot advance by a negative size: %d" % size)
    return (_check(value) + size) & SEQ_MASK
