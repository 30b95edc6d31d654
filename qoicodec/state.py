from typing import Optional

from .pixel import Pixel, qoi_hash


class State:
    """
    Mutable context for one encode or decode call.

    Holds the 64 entry cache of previously seen pixels (indexed by their hash),
    the previously encoded/decoded pixel, and the length of the current run.
    """

    def __init__(self):
        self.cache = [Pixel(0, 0, 0, 0)] * 64
        self.prev_pixel = Pixel(0, 0, 0, 255)
        self.run_count = 0

    def cache_insert(self, pixel: Pixel) -> None:
        """Store ``pixel`` at its slot, overwriting whatever was there."""
        self.cache[qoi_hash(pixel)] = pixel

    def cache_match_or_replace(self, pixel: Pixel) -> Optional[int]:
        """
        Return the slot index if ``pixel`` is already cached there. Otherwise
        replace the slot's pixel with ``pixel`` and return None.
        """
        index = qoi_hash(pixel)

        if self.cache[index] == pixel:
            return index

        self.cache[index] = pixel
        return None
