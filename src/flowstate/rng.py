from dataclasses import dataclass, field
from typing import List, Sequence, TypeVar

T = TypeVar("T")

MASK32 = 0xFFFFFFFF
HASH_BASIS = 0xDEADBEEF
HASH_PRIME = 2654435761
MULBERRY_STEP = 0x6D2B79F5


def imul32(a: int, b: int) -> int:
    """32-bit wrapping multiply (JavaScript Math.imul, unsigned result)."""
    return ((a & MASK32) * (b & MASK32)) & MASK32


def utf16_units(text: str) -> List[int]:
    # Seeds are hashed per UTF-16 code unit so non-BMP characters fold the
    # same way as in the browser client.
    raw = text.encode("utf-16-le")
    return [raw[i] | (raw[i + 1] << 8) for i in range(0, len(raw), 2)]


def hash_seed(seed: str) -> int:
    h = HASH_BASIS
    for unit in utf16_units(seed):
        h = imul32(h ^ unit, HASH_PRIME)
    return (h ^ (h >> 16)) & MASK32


def mulberry32_next(state: int):
    """Advance a Mulberry32 state once; return (new_state, output32)."""
    state = (state + MULBERRY_STEP) & MASK32
    t = state
    t = imul32(t ^ (t >> 15), t | 1)
    t ^= (t + imul32(t ^ (t >> 7), t | 61)) & MASK32
    return state, (t ^ (t >> 14)) & MASK32


@dataclass
class SeededRng:
    seed: str
    state: int = field(init=False)

    def __post_init__(self) -> None:
        self.state = hash_seed(self.seed)

    def next(self) -> float:
        self.state, out = mulberry32_next(self.state)
        return out / 4294967296

    def range(self, lo: int, hi: int) -> int:
        """Random int in [lo, hi], both ends included."""
        assert hi >= lo
        return int(self.next() * (hi - lo + 1)) + lo

    def chance(self, p: float) -> bool:
        return self.next() < p

    def pick(self, seq: Sequence[T]) -> T:
        assert len(seq) > 0
        return seq[self.range(0, len(seq) - 1)]

    def shuffle(self, items: List[T]) -> None:
        # Fisher-Yates, in place
        for i in range(len(items) - 1, 0, -1):
            j = self.range(0, i)
            items[i], items[j] = items[j], items[i]
