from dataclasses import dataclass, field
from typing import Dict, List, NewType, Optional, Tuple

# Transport session id; treated as opaque everywhere.
ConnectionId = NewType('ConnectionId', str)

RESOURCES = ('wood', 'brick', 'sheep', 'wheat', 'ore', 'desert')
DEFAULT_PLAYER_NAME = 'Player'


@dataclass
class Tile:
    id: int
    x: int
    y: int
    resource: str
    owner_id: Optional[ConnectionId] = None

    def to_dict(self):
        return {
            'id': self.id,
            'x': self.x,
            'y': self.y,
            'resource': self.resource,
            'ownerId': self.owner_id,
        }


@dataclass
class Player:
    id: ConnectionId
    name: str = DEFAULT_PLAYER_NAME
    score: int = 0

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'score': self.score,
        }


@dataclass(frozen=True)
class MapTemplate:
    """Immutable prototype board. Rooms copy its tiles, never share them."""

    map_id: str
    radius: int
    tiles: Tuple[Tile, ...]

    def to_dict(self):
        return {
            'mapId': self.map_id,
            'radius': self.radius,
            'tiles': len(self.tiles),
        }


@dataclass
class Room:
    code: str
    map_id: str
    board: List[Tile]
    players: Dict[ConnectionId, Player] = field(default_factory=dict)

    def find_tile(self, tile_id: int) -> Optional[Tile]:
        for tile in self.board:
            if tile.id == tile_id:
                return tile
        return None

    def to_dict(self):
        return {
            'mapId': self.map_id,
            'players': [p.to_dict() for p in self.players.values()],
            'board': [t.to_dict() for t in self.board],
        }
