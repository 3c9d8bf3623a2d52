from dataclasses import dataclass, field
from typing import Tuple

GRID_SIZE = 8


@dataclass(frozen=True)
class GeneratorConfig:
    # Daily puzzles must reproduce exactly for every player, so the defaults
    # below are part of the puzzle contract.
    size: int = GRID_SIZE
    max_attempts: int = 30
    path_max_iterations: int = 600
    path_slack: int = 6

    diode_chance: float = 0.35
    capacitor_chance: float = 0.7
    side_quest_tries: int = 6
    side_quest_max: int = 3
    side_quest_long_chance: float = 0.6
    decoy_count: int = 2
    decoy_max_len: int = 3
    lock_chance: float = 0.4

    # (type name, weight) for decorative filler tiles
    fill_weights: Tuple[Tuple[str, float], ...] = field(default=(
        ("ELBOW", 0.55),
        ("STRAIGHT", 0.20),
        ("TEE", 0.20),
        ("DIODE", 0.05),
    ))

    # Cosmetic only; nothing reads flow_delay for game logic.
    flow_delay_step: int = 75


# Global config (can be swapped by a launcher or a test)
DEFAULT_CONFIG = GeneratorConfig()
