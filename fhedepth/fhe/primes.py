"""
Search for NTT-friendly primes.

A prime ``p`` supports batching/NTT at ring degree ``n`` when ``p = 1 mod 2n``.
Primes are taken from the top of the bit-size range downwards, so the same
request always yields the same primes.
"""

from collections import Counter
from typing import Dict, List, Sequence

import sympy

MAX_PRIME_BITS = 60
MIN_PRIME_BITS = 2


def find_ntt_primes(bit_size: int, ring_degree: int, count: int) -> List[int]:
    """
    Find the ``count`` largest primes of exactly ``bit_size`` bits with ``p = 1 mod 2n``.

    Args:
        bit_size: Bit length of every returned prime
        ring_degree: Polynomial ring dimension n
        count: Number of distinct primes required

    Returns:
        Primes in descending order

    Raises:
        ValueError: If the bit size is out of range or not enough primes exist
    """
    if bit_size < MIN_PRIME_BITS or bit_size > MAX_PRIME_BITS:
        raise ValueError(f"Prime bit size {bit_size} outside [{MIN_PRIME_BITS}, {MAX_PRIME_BITS}]")
    factor = 2 * ring_degree
    lower = 1 << (bit_size - 1)
    value = ((1 << bit_size) - 1) // factor * factor + 1
    primes: List[int] = []
    while value > lower and len(primes) < count:
        if sympy.isprime(value):
            primes.append(value)
        value -= factor
    if len(primes) < count:
        raise ValueError(
            f"failed to find enough qualifying primes: wanted {count} of {bit_size} bits "
            f"for ring degree {ring_degree}, found {len(primes)}"
        )
    return primes


def create_coeff_moduli(ring_degree: int, bit_sizes: Sequence[int]) -> List[int]:
    """Distinct primes for a chain of bit sizes, in chain order."""
    pools: Dict[int, List[int]] = {
        size: find_ntt_primes(size, ring_degree, needed)
        for size, needed in Counter(bit_sizes).items()
    }
    moduli = []
    for size in bit_sizes:
        moduli.append(pools[size].pop(0))
    return moduli


def batching_plain_modulus(ring_degree: int, bit_size: int) -> int:
    """Largest batching-friendly prime of the given size."""
    return find_ntt_primes(bit_size, ring_degree, 1)[0]
