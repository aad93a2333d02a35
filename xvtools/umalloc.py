"""First-fit free-list allocator over a simulated break-extended heap."""

from __future__ import annotations

from dataclasses import dataclass

UNIT = 16  # bytes in one header, the allocation granule
_MIN_CORE = 4096  # least number of units requested from sbrk
_BASE = -UNIT  # address of the empty list head, below any heap address


@dataclass(slots=True)
class _Header:
    size: int  # in units, header included
    ptr: int | None  # next free block


class Heap:
    """An address space grown with :meth:`sbrk` and managed by malloc/free.

    Addresses are plain integers; the heap starts at 0 and may grow up to
    ``limit`` bytes.
    """

    def __init__(self, limit: int = 64 * 1024 * 1024) -> None:
        if limit < 0:
            raise ValueError("limit must not be negative")
        self.limit = limit
        self.brk = 0
        self._hdr: dict[int, _Header] = {}
        self._allocated: set[int] = set()
        self._freep: int | None = None

    def sbrk(self, n: int) -> int:
        """Move the break by ``n`` bytes and return the old break."""
        old = self.brk
        new = old + n
        if new < 0 or new > self.limit:
            raise MemoryError(f"sbrk({n}) out of range")
        self.brk = new
        return old

    def malloc(self, nbytes: int) -> int:
        """Allocate ``nbytes`` and return the block's address."""
        if nbytes < 0:
            raise ValueError("size must not be negative")
        nunits = (nbytes + UNIT - 1) // UNIT + 1
        h = self._hdr
        if self._freep is None:
            h[_BASE] = _Header(0, _BASE)
            self._freep = _BASE
        prevp = self._freep
        p = h[prevp].ptr
        while True:
            block = h[p]
            if block.size >= nunits:
                if block.size == nunits:
                    h[prevp].ptr = block.ptr
                else:
                    block.size -= nunits
                    p += block.size * UNIT
                    h[p] = _Header(nunits, None)
                self._freep = prevp
                self._allocated.add(p)
                return p + UNIT
            if p == self._freep:
                grown = self._morecore(nunits)
                if grown is None:
                    raise MemoryError(f"cannot allocate {nbytes} bytes")
                p = grown
            prevp, p = p, h[p].ptr

    def free(self, ptr: int) -> None:
        """Return a block obtained from :meth:`malloc`."""
        bp = ptr - UNIT
        if bp not in self._allocated:
            raise ValueError(f"address {ptr} was not allocated")
        self._allocated.remove(bp)
        self._insert(bp)

    def _morecore(self, nu: int) -> int | None:
        nu = max(nu, _MIN_CORE)
        try:
            addr = self.sbrk(nu * UNIT)
        except MemoryError:
            return None
        self._hdr[addr] = _Header(nu, None)
        self._insert(addr)
        return self._freep

    def _insert(self, bp: int) -> None:
        h = self._hdr
        p = self._freep
        while not (p < bp < h[p].ptr):
            if p >= h[p].ptr and (bp > p or bp < h[p].ptr):
                break
            p = h[p].ptr
        nxt = h[p].ptr
        if bp + h[bp].size * UNIT == nxt:
            h[bp].size += h[nxt].size
            h[bp].ptr = h[nxt].ptr
            del h[nxt]
        else:
            h[bp].ptr = nxt
        if p + h[p].size * UNIT == bp:
            h[p].size += h[bp].size
            h[p].ptr = h[bp].ptr
            del h[bp]
        else:
            h[p].ptr = bp
        self._freep = p