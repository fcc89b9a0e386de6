import random
import unittest

from autotile.core.tileset import Material, NoiseRule, SpriteRect
from autotile.grid.noise import NoiseSampler

SPRITE = SpriteRect(0, 0, 16, 16)


def grass(probability):
    return Material("grass", "Grass", SPRITE, noise_probability=probability)


RULES = [
    NoiseRule("flowers", "grass", SPRITE),
    NoiseRule("pebbles", "grass", SPRITE),
    NoiseRule("ripples", "water", SPRITE),
]


class TestNoiseSampler(unittest.TestCase):
    def test_zero_probability_never_rolls_for_any_seed(self):
        for seed in range(200):
            sampler = NoiseSampler(random.Random(seed))
            self.assertIsNone(sampler.sample(grass(0), RULES))

    def test_no_matching_rules_means_no_overlay(self):
        sampler = NoiseSampler(random.Random(1))
        water_only = [rule for rule in RULES if rule.base_material == "water"]
        self.assertIsNone(sampler.sample(grass(100), water_only))

    def test_full_probability_always_picks_a_matching_rule(self):
        sampler = NoiseSampler(random.Random(3))
        picks = {sampler.sample(grass(100), RULES) for _ in range(200)}
        self.assertEqual(picks, {"flowers", "pebbles"})

    def test_same_seed_same_rolls(self):
        first = NoiseSampler(random.Random(42))
        second = NoiseSampler(random.Random(42))
        rolls_a = [first.sample(grass(35), RULES) for _ in range(50)]
        rolls_b = [second.sample(grass(35), RULES) for _ in range(50)]
        self.assertEqual(rolls_a, rolls_b)
        self.assertIn(None, rolls_a)

    def test_roll_is_compared_on_a_0_to_100_scale(self):
        class FixedRandom(random.Random):
            def __init__(self, value):
                super().__init__(0)
                self.value = value

            def random(self):
                return self.value

        # r = 49.9 < 50 picks, r = 50.0 does not.
        self.assertIsNotNone(NoiseSampler(FixedRandom(0.499)).sample(grass(50), RULES))
        self.assertIsNone(NoiseSampler(FixedRandom(0.5)).sample(grass(50), RULES))


if __name__ == "__main__":
    unittest.main()
