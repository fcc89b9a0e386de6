import random
from typing import Optional, Sequence

from autotile.core import config
from autotile.core.tileset import Material, NoiseRule


class NoiseSampler:
    """Rolls at most one decorative overlay for a freshly painted cell.

    Pass a seeded ``random.Random`` to make rolls reproducible.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def sample(self, material: Material, rules: Sequence[NoiseRule]) -> Optional[str]:
        candidates = [rule for rule in rules if rule.base_material == material.id]
        if material.noise_probability <= 0 or not candidates:
            return None
        roll = self.rng.random() * config.NOISE_ROLL_SCALE
        if roll >= material.noise_probability:
            return None
        return self.rng.choice(candidates).id
