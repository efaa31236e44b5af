"""Deterministic perturbation noise for hex geometry.

A :class:`NoiseSource` is a seeded, three-channel noise field sampled
on the world ``(x, z)`` plane.  Channel *x* and *z* jitter vertex
positions horizontally (:meth:`NoiseSource.perturb`); channel *y*
jitters cell heights.  There is **no** process-wide shared instance:
a grid builds one from its :class:`~config.GridConfig` seed and passes
it to everything that needs it.

Functions
---------
- :class:`NoiseSource` — seeded 3-channel field
- :func:`fbm` — Fractal Brownian Motion over any 2-D noise function
"""

from __future__ import annotations

from typing import Callable, Sequence

from opensimplex import OpenSimplex

from .geometry import Vec3

# The perturbation field tiles a 16 × 16 noise domain across world
# positions scaled by NOISE_SCALE.
NOISE_DOMAIN_SIZE = 16.0
NOISE_SCALE = 0.003


# ═══════════════════════════════════════════════════════════════════
# Fractal Brownian Motion
# ═══════════════════════════════════════════════════════════════════

def fbm(
    noise2: Callable[[float, float], float],
    x: float,
    y: float,
    *,
    octaves: int = 1,
    lacunarity: float = 2.0,
    persistence: float = 0.5,
) -> float:
    """Fractal Brownian Motion — layered multi-octave noise.

    Sums several octaves of *noise2*, each at higher frequency and
    lower amplitude.  With ``octaves=1`` this is just ``noise2(x, y)``.

    Returns
    -------
    float
        A value in approximately ``[−1, 1]``.
    """
    value = 0.0
    amplitude = 1.0
    freq = 1.0
    max_amp = 0.0

    for _ in range(octaves):
        value += amplitude * noise2(x * freq, y * freq)
        max_amp += amplitude
        amplitude *= persistence
        freq *= lacunarity

    return value / max_amp if max_amp > 0 else 0.0


# ═══════════════════════════════════════════════════════════════════
# Noise source
# ═══════════════════════════════════════════════════════════════════

class NoiseSource:
    """Seeded three-channel noise field.

    Parameters
    ----------
    seed : int
        Base seed; the three channels use ``seed``, ``seed + 1`` and
        ``seed + 2``.
    scale : float
        World-to-noise scale factor.
    octaves : int
        Octaves summed per channel (see :func:`fbm`).
    cell_perturb_strength : float
        Horizontal jitter amplitude applied by :meth:`perturb`.
    """

    def __init__(
        self,
        seed: int = 42,
        *,
        scale: float = NOISE_SCALE,
        octaves: int = 1,
        cell_perturb_strength: float = 0.5,
    ) -> None:
        if octaves < 1:
            raise ValueError("octaves must be >= 1")
        self.seed = seed
        self.scale = scale
        self.octaves = octaves
        self.cell_perturb_strength = cell_perturb_strength
        self._channels = tuple(OpenSimplex(seed=seed + i) for i in range(3))

    def sample(self, position: Sequence[float]) -> Vec3:
        """Sample all three channels at a world position.

        Only the horizontal ``(x, z)`` components of *position* are
        used.  Each channel is in approximately ``[−1, 1]``.
        """
        u = position[0] * self.scale * NOISE_DOMAIN_SIZE
        v = position[2] * self.scale * NOISE_DOMAIN_SIZE
        x, y, z = (
            fbm(channel.noise2, u, v, octaves=self.octaves)
            for channel in self._channels
        )
        return (x, y, z)

    def perturb(self, position: Sequence[float]) -> Vec3:
        """Jitter *position* horizontally; its y is left unchanged."""
        if self.cell_perturb_strength == 0.0:
            return (position[0], position[1], position[2])
        sample = self.sample(position)
        return (
            position[0] + sample[0] * self.cell_perturb_strength,
            position[1],
            position[2] + sample[2] * self.cell_perturb_strength,
        )
