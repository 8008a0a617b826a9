"""
Sparse block-bucketed voxel grid.

The grid maps block indices to fixed-size blocks of ``voxels_per_side ** 3``
voxel records. Blocks are allocated lazily on first write; a voxel inside an
unallocated block is absent and classifies as unknown.
"""

import logging
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from mapeval.index import (
    BlockIndex,
    GlobalIndex,
    block_and_voxel_index_from_global,
    index_from_point,
    linear_index_from_voxel_index,
    voxel_indices_from_linear_indices,
)
from mapeval.voxel import TSDF_VOXEL, VoxelKind

logger = logging.getLogger(__name__)


class Block:
    """A cube of voxels stored as one flat structured array."""

    def __init__(self, block_index: Sequence[int], voxels_per_side: int, dtype: np.dtype):
        self.block_index: BlockIndex = tuple(int(c) for c in block_index)  # type: ignore
        self.voxels_per_side = voxels_per_side
        self.num_voxels = voxels_per_side**3
        self.voxels = np.zeros(self.num_voxels, dtype=dtype)
        self.has_data = False

    def voxel_by_linear_index(self, linear_index: int):
        return self.voxels[linear_index]

    def voxel_by_voxel_index(self, voxel_index: Sequence[int]):
        return self.voxels[linear_index_from_voxel_index(voxel_index, self.voxels_per_side)]

    def global_indices(self, linear_indices: np.ndarray) -> np.ndarray:
        """
        Global voxel indices for a set of linear indices in this block.

        Args:
            linear_indices: 1D integer array of linear indices

        Returns:
            (N, 3) int64 array of global indices
        """
        local = voxel_indices_from_linear_indices(linear_indices, self.voxels_per_side)
        origin = np.asarray(self.block_index, dtype=np.int64) * self.voxels_per_side
        return local + origin

    def __repr__(self) -> str:
        return f"Block(index={self.block_index}, has_data={self.has_data})"


class VoxelGrid:
    """
    Sparse voxel grid of a single voxel kind.

    Attributes:
        voxel_size: Edge length of one voxel in world units
        voxels_per_side: Voxels along one block edge
        voxels_per_block: ``voxels_per_side ** 3``
        block_size: Edge length of one block in world units
        voxel_kind: Classification capability for this grid's records
    """

    def __init__(
        self,
        voxel_size: float,
        voxels_per_side: int,
        voxel_kind: VoxelKind = TSDF_VOXEL,
    ):
        if not voxel_size > 0:
            raise ValueError(f"voxel_size must be positive, got {voxel_size}")
        if int(voxels_per_side) != voxels_per_side or voxels_per_side <= 0:
            raise ValueError(f"voxels_per_side must be a positive integer, got {voxels_per_side}")

        self.voxel_size = float(voxel_size)
        self.voxels_per_side = int(voxels_per_side)
        self.voxels_per_block = self.voxels_per_side**3
        self.block_size = self.voxel_size * self.voxels_per_side
        self.voxel_kind = voxel_kind

        self._blocks: Dict[BlockIndex, Block] = {}

    def allocate_block(self, block_index: Sequence[int]) -> Block:
        """Return the block at ``block_index``, creating it if needed."""
        key = tuple(int(c) for c in block_index)
        block = self._blocks.get(key)  # type: ignore[arg-type]
        if block is None:
            block = Block(key, self.voxels_per_side, self.voxel_kind.dtype)
            self._blocks[key] = block  # type: ignore[index]
            logger.debug(f"Allocated block {key}")
        return block

    def allocate_block_by_point(self, point: Sequence[float]) -> Block:
        """Allocate the block containing a world-space point."""
        return self.allocate_block(index_from_point(point, self.block_size))

    def get_block(self, block_index: Sequence[int]) -> Optional[Block]:
        """Block at ``block_index`` or ``None``. Never allocates."""
        return self._blocks.get(tuple(int(c) for c in block_index))  # type: ignore[arg-type]

    def allocated_blocks(self) -> List[BlockIndex]:
        """Indices of blocks holding at least one written voxel, in allocation order."""
        return [index for index, block in self._blocks.items() if block.has_data]

    def iter_blocks(self) -> Iterator[Tuple[BlockIndex, Block]]:
        """Iterate ``(block_index, block)`` over blocks holding data."""
        for index, block in self._blocks.items():
            if block.has_data:
                yield index, block

    @property
    def num_allocated_blocks(self) -> int:
        return sum(1 for block in self._blocks.values() if block.has_data)

    def voxel_at(self, index: Sequence[int]):
        """
        Look up the voxel record at a global index.

        Args:
            index: Global voxel index

        Returns:
            The voxel record, or ``None`` if its block is not allocated
        """
        block_index, voxel_index = block_and_voxel_index_from_global(
            index, self.voxels_per_side
        )
        block = self._blocks.get(block_index)
        if block is None:
            return None
        return block.voxel_by_voxel_index(voxel_index)

    def set_voxel(self, index: Sequence[int], **fields: float) -> None:
        """
        Write fields of the voxel at a global index, allocating its block.

        Args:
            index: Global voxel index
            **fields: Record fields to assign, e.g. ``distance=0.0, weight=1.0``
        """
        unknown = set(fields) - set(self.voxel_kind.dtype.names)
        if unknown:
            raise ValueError(
                f"Fields {sorted(unknown)} not valid for {self.voxel_kind.name} voxels"
            )

        block_index, voxel_index = block_and_voxel_index_from_global(
            index, self.voxels_per_side
        )
        block = self.allocate_block(block_index)
        linear_index = linear_index_from_voxel_index(voxel_index, self.voxels_per_side)
        for name, value in fields.items():
            block.voxels[name][linear_index] = value
        block.has_data = True

    def classify(self, index: Sequence[int]):
        """Classification of the voxel at a global index."""
        return self.voxel_kind.classify(self.voxel_at(index), self.voxel_size)

    def index_bounds(self) -> Optional[Tuple[GlobalIndex, GlobalIndex]]:
        """
        Inclusive global index extent covered by blocks holding data.

        Returns:
            ``(min_index, max_index)`` or ``None`` for an empty grid
        """
        blocks = self.allocated_blocks()
        if not blocks:
            return None
        block_array = np.asarray(blocks, dtype=np.int64)
        lower = block_array.min(axis=0) * self.voxels_per_side
        upper = (block_array.max(axis=0) + 1) * self.voxels_per_side - 1
        return (
            tuple(int(c) for c in lower),  # type: ignore[return-value]
            tuple(int(c) for c in upper),
        )

    def __repr__(self) -> str:
        return (
            f"VoxelGrid(voxel_size={self.voxel_size}, voxels_per_side={self.voxels_per_side}, "
            f"kind={self.voxel_kind.name}, blocks={self.num_allocated_blocks})"
        )
