import random
from typing import Dict, Mapping, Optional

from tileroom.models import RESOURCES, MapTemplate, Tile


def generate_map(radius: int, map_id: str, rng: Optional[random.Random] = None) -> MapTemplate:
    """Build a diamond-shaped board template.

    Covers every (x, y) in [-radius, radius] with |x| + |y| <= 2 * radius.
    Ids are assigned in scan order (x ascending, then y ascending) so they
    are reproducible; only the resources depend on ``rng``.
    """
    if radius < 1:
        raise ValueError(f'radius must be >= 1, got {radius}')
    rng = rng or random
    tiles = []
    next_id = 0
    for x in range(-radius, radius + 1):
        for y in range(-radius, radius + 1):
            if abs(x) + abs(y) <= radius * 2:
                tiles.append(Tile(id=next_id, x=x, y=y, resource=rng.choice(RESOURCES)))
                next_id += 1
    return MapTemplate(map_id=map_id, radius=radius, tiles=tuple(tiles))


def build_map_templates(radii: Mapping[str, int], rng: Optional[random.Random] = None) -> Dict[str, MapTemplate]:
    """Generate one template per named map, in the given order."""
    return {map_id: generate_map(radius, map_id, rng=rng) for map_id, radius in radii.items()}
