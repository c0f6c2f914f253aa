"""
Physical ROM layout for assembled programs.

Maps each machine word onto the block grid of the target ROM. A 10-bit
address is split into three parts, MSB first:

  ┌──────────────┬──────┬────────┐
  │ page address │ side │  page  │
  │    5 bits    │ 1 bit│ 4 bits │
  └──────────────┴──────┴────────┘

The page address selects a column pair along x (mirrored to -x for side 1),
the page selects a row along z. A word is written as a vertical column,
LSB at the bottom: a repeater for a 1 bit, wool for a 0 bit, each bit
standing on a wool block. Bits are two blocks apart on y.

The result is a plain placement list, exported as JSON.
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, NamedTuple, Sequence, Union

from .errors import LayoutError
from .instructions import INSTRUCTION_SIZE
from .number_utils import max_uint, read_bits

__all__ = [
    'ADDRESS_STRUCTURE', 'MAX_INSTRUCTION_COUNT', 'Position', 'Block', 'Layout',
    'read_address_parts', 'instruction_position', 'build_layout', 'write_layout',
]

logger = logging.getLogger(__name__)

ONE_BLOCK = 'minecraft:repeater[facing=north,locked=false,powered=false]'
ZERO_BLOCK = 'minecraft:magenta_wool'
SUPPORT_BLOCK = ZERO_BLOCK

INSTRUCTION_BITS_Y_SPACE = 2
ADDRESSES_X_SPACE = 2
ADDRESSES_X_OFFSET = 4
PAGES_Z_SPACE = 6

PAGE_ADDRESS_SIZE = 5
SIDE_SIZE = 1
PAGE_SIZE = 4
ADDRESS_STRUCTURE = (PAGE_ADDRESS_SIZE, SIDE_SIZE, PAGE_SIZE)
MAX_INSTRUCTION_COUNT = max_uint(sum(ADDRESS_STRUCTURE)) + 1


class Position(NamedTuple):
    x: int
    y: int
    z: int

    def offset(self, dx: int, dy: int, dz: int) -> Position:
        return Position(self.x + dx, self.y + dy, self.z + dz)


# Bounding box and placement offsets of the target schematic
AREA = Position(133, 32, 91)
BASE_OFFSET = Position(-66, -1, 0)
FINAL_OFFSET = Position(0, -32, 2)


@dataclass(frozen=True)
class Block:
    position: Position
    block: str


@dataclass
class Layout:
    """Placement list for one program."""
    area: Position = AREA
    offset: Position = BASE_OFFSET.offset(*FINAL_OFFSET)
    instruction_count: int = 0
    blocks: List[Block] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'area': list(self.area),
            'offset': list(self.offset),
            'instruction_count': self.instruction_count,
            'blocks': [{'position': list(b.position), 'block': b.block} for b in self.blocks],
        }


def read_address_parts(address: int, structure: Sequence[int] = ADDRESS_STRUCTURE) -> List[int]:
    """Split an address into parts of the given bit sizes, MSB part first.

    read_address_parts(0b1101011010, (5, 1, 4)) → [0b11010, 0b1, 0b1010]
    """
    parts = []
    offset = 0
    for size in reversed(structure):
        parts.insert(0, read_bits(address, size, offset))
        offset += size
    return parts


def instruction_position(page_address: int, side: int, page: int) -> Position:
    """Bottom block of the column holding one instruction."""
    x = page_address * ADDRESSES_X_SPACE + ADDRESSES_X_OFFSET
    z = page * PAGES_Z_SPACE
    return Position(x if side == 0 else -x, 0, z)


def _instruction_blocks(position: Position, word: int) -> List[Block]:
    blocks = []
    bit_position = position
    for _ in range(INSTRUCTION_SIZE):
        blocks.append(Block(bit_position, ONE_BLOCK if word & 1 else ZERO_BLOCK))
        blocks.append(Block(bit_position.offset(0, -1, 0), SUPPORT_BLOCK))
        bit_position = bit_position.offset(0, INSTRUCTION_BITS_Y_SPACE, 0)
        word >>= 1
    return blocks


def build_layout(words: Sequence[int]) -> Layout:
    """Place every word of the program on the ROM grid."""
    if len(words) > MAX_INSTRUCTION_COUNT:
        raise LayoutError(f"Too many instructions ({len(words)}/{MAX_INSTRUCTION_COUNT}), "
                          f"cannot generate layout.")
    layout = Layout(instruction_count=len(words))
    for address, word in enumerate(words):
        page_address, side, page = read_address_parts(address)
        layout.blocks.extend(_instruction_blocks(instruction_position(page_address, side, page), word))
        logger.debug(f"Instruction {address + 1}/{len(words)} placed")
    return layout


def write_layout(words: Sequence[int], path: Union[str, Path], indent: int = 2) -> Path:
    """Build the layout and write it as JSON."""
    path = Path(path)
    layout = build_layout(words)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(layout.to_dict(), f, indent=indent)
    logger.info(f"Wrote layout: {path} ({len(layout.blocks)} blocks)")
    return path
