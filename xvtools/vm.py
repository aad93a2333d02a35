"""Simulated Sv39 three-level page tables over a pool of physical pages.

Page-table pages hold 512 little-endian 64-bit PTEs. Addresses are plain
integers; physical pages start at ``KERNBASE``.
"""

from __future__ import annotations

import errno

PGSIZE = 4096  # bytes per page
PGSHIFT = 12  # bits of offset within a page
PTES_PER_PAGE = 512
PTE_SIZE = 8

PTE_V = 1 << 0  # valid
PTE_R = 1 << 1
PTE_W = 1 << 2
PTE_X = 1 << 3
PTE_U = 1 << 4  # user can access

# One bit less than the most Sv39 allows, so that addresses need no sign
# extension.
MAXVA = 1 << (9 + 9 + 9 + 12 - 1)
KERNBASE = 0x80000000

_MASK64 = 0xFFFFFFFFFFFFFFFF
_PXMASK = 0x1FF
_ZERO_PAGE = bytes(PGSIZE)


class VMPanic(RuntimeError):
    """An invariant of the page-table code was violated."""


class OutOfMemory(MemoryError):
    """No physical page was free."""


class PhysicalMemory:
    """A contiguous pool of ``npages`` physical pages starting at KERNBASE."""

    def __init__(self, npages: int) -> None:
        if npages < 0:
            raise ValueError("npages must not be negative")
        self.base = KERNBASE
        self.npages = npages
        self._data = bytearray(npages * PGSIZE)
        # Pop from the end so that the lowest page is handed out first.
        self.free_pages: list[int] = [self.base + i * PGSIZE for i in reversed(range(npages))]

    def kalloc(self) -> int:
        """Allocate one page and return its physical address."""
        if not self.free_pages:
            raise OutOfMemory("out of physical pages")
        return self.free_pages.pop()

    def kfree(self, pa: int) -> None:
        """Return the page at ``pa`` to the pool."""
        if pa % PGSIZE != 0 or not self.base <= pa < self.base + self.npages * PGSIZE:
            raise VMPanic("kfree")
        if pa in self.free_pages:
            raise VMPanic("kfree: page already free")
        self.free_pages.append(pa)

    def _offset(self, pa: int, n: int) -> int:
        off = pa - self.base
        if n < 0 or off < 0 or off + n > len(self._data):
            raise ValueError(f"physical range {pa:#x}+{n} out of bounds")
        return off

    def read(self, pa: int, n: int) -> bytes:
        """Return ``n`` bytes at physical address ``pa``."""
        off = self._offset(pa, n)
        return bytes(self._data[off:off + n])

    def write(self, pa: int, data: bytes) -> None:
        """Store ``data`` at physical address ``pa``."""
        off = self._offset(pa, len(data))
        self._data[off:off + len(data)] = data


def pgroundup(sz: int) -> int:
    """Round ``sz`` up to a page boundary."""
    return (sz + PGSIZE - 1) & ~(PGSIZE - 1)


def pgrounddown(a: int) -> int:
    """Round ``a`` down to a page boundary."""
    return a & ~(PGSIZE - 1)


def _px(level: int, va: int) -> int:
    return (va >> (PGSHIFT + 9 * level)) & _PXMASK


def _pa2pte(pa: int) -> int:
    return (pa >> 12) << 10


def _pte2pa(pte: int) -> int:
    return (pte >> 10) << 12


def _pte_flags(pte: int) -> int:
    return pte & 0x3FF


def _load(mem: PhysicalMemory, addr: int) -> int:
    return int.from_bytes(mem.read(addr, PTE_SIZE), "little")


def _store(mem: PhysicalMemory, addr: int, pte: int) -> None:
    mem.write(addr, (pte & _MASK64).to_bytes(PTE_SIZE, "little"))


def _fault(va: int) -> OSError:
    return OSError(errno.EFAULT, f"bad address {va:#x}")


def walk(mem: PhysicalMemory, pagetable: int, va: int, alloc: bool = False) -> int | None:
    """Return the physical address of the level-0 PTE for ``va``.

    Missing page-table pages are created when ``alloc`` is true; otherwise
    None is returned for them. Raises OutOfMemory if one cannot be created.
    """
    if va >= MAXVA:
        raise VMPanic("walk")
    for level in (2, 1):
        addr = pagetable + _px(level, va) * PTE_SIZE
        pte = _load(mem, addr)
        if pte & PTE_V:
            pagetable = _pte2pa(pte)
        else:
            if not alloc:
                return None
            pagetable = mem.kalloc()
            mem.write(pagetable, _ZERO_PAGE)
            _store(mem, addr, _pa2pte(pagetable) | PTE_V)
    return pagetable + _px(0, va) * PTE_SIZE


def walkaddr(mem: PhysicalMemory, pagetable: int, va: int) -> int | None:
    """Return the physical address a user page maps to, or None if not mapped."""
    if va >= MAXVA:
        return None
    addr = walk(mem, pagetable, va, False)
    if addr is None:
        return None
    pte = _load(mem, addr)
    if not pte & PTE_V or not pte & PTE_U:
        return None
    return _pte2pa(pte)


def mappages(mem: PhysicalMemory, pagetable: int, va: int, size: int, pa: int, perm: int) -> None:
    """Map ``size`` bytes at ``va`` to physical memory at ``pa``.

    ``va`` and ``size`` must be page-aligned. Raises OutOfMemory if a
    page-table page cannot be allocated.
    """
    if va % PGSIZE != 0:
        raise VMPanic("mappages: va not aligned")
    if size % PGSIZE != 0:
        raise VMPanic("mappages: size not aligned")
    if size == 0:
        raise VMPanic("mappages: size")
    for offset in range(0, size, PGSIZE):
        addr = walk(mem, pagetable, va + offset, True)
        if _load(mem, addr) & PTE_V:
            raise VMPanic("mappages: remap")
        _store(mem, addr, _pa2pte(pa + offset) | perm | PTE_V)


def uvmunmap(mem: PhysicalMemory, pagetable: int, va: int, npages: int, do_free: bool) -> None:
    """Remove ``npages`` existing mappings from ``va``, optionally freeing the pages."""
    if va % PGSIZE != 0:
        raise VMPanic("uvmunmap: not aligned")
    for a in range(va, va + npages * PGSIZE, PGSIZE):
        addr = walk(mem, pagetable, a, False)
        if addr is None:
            raise VMPanic("uvmunmap: walk")
        pte = _load(mem, addr)
        if not pte & PTE_V:
            raise VMPanic("uvmunmap: not mapped")
        if _pte_flags(pte) == PTE_V:
            raise VMPanic("uvmunmap: not a leaf")
        if do_free:
            mem.kfree(_pte2pa(pte))
        _store(mem, addr, 0)


def uvmcreate(mem: PhysicalMemory) -> int:
    """Create an empty user page table and return its physical address."""
    pagetable = mem.kalloc()
    mem.write(pagetable, _ZERO_PAGE)
    return pagetable


def uvmfirst(mem: PhysicalMemory, pagetable: int, src: bytes) -> None:
    """Load ``src``, shorter than a page, at address 0 of ``pagetable``."""
    if len(src) >= PGSIZE:
        raise VMPanic("uvmfirst: more than a page")
    page = mem.kalloc()
    mem.write(page, _ZERO_PAGE)
    mappages(mem, pagetable, 0, PGSIZE, page, PTE_W | PTE_R | PTE_X | PTE_U)
    mem.write(page, bytes(src))


def uvmalloc(mem: PhysicalMemory, pagetable: int, oldsz: int, newsz: int, xperm: int) -> int:
    """Grow a process from ``oldsz`` to ``newsz`` bytes and return the new size.

    On failure the pages added so far are released and OutOfMemory is raised.
    """
    if newsz < oldsz:
        return oldsz
    oldsz = pgroundup(oldsz)
    for a in range(oldsz, newsz, PGSIZE):
        try:
            page = mem.kalloc()
        except OutOfMemory:
            uvmdealloc(mem, pagetable, a, oldsz)
            raise
        mem.write(page, _ZERO_PAGE)
        try:
            mappages(mem, pagetable, a, PGSIZE, page, PTE_R | PTE_U | xperm)
        except OutOfMemory:
            mem.kfree(page)
            uvmdealloc(mem, pagetable, a, oldsz)
            raise
    return newsz


def uvmdealloc(mem: PhysicalMemory, pagetable: int, oldsz: int, newsz: int) -> int:
    """Shrink a process from ``oldsz`` to ``newsz`` bytes and return the new size."""
    if newsz >= oldsz:
        return oldsz
    if pgroundup(newsz) < pgroundup(oldsz):
        npages = (pgroundup(oldsz) - pgroundup(newsz)) // PGSIZE
        uvmunmap(mem, pagetable, pgroundup(newsz), npages, True)
    return newsz


def freewalk(mem: PhysicalMemory, pagetable: int) -> None:
    """Free page-table pages recursively; all leaf mappings must be gone."""
    for i in range(PTES_PER_PAGE):
        addr = pagetable + i * PTE_SIZE
        pte = _load(mem, addr)
        if pte & PTE_V and not pte & (PTE_R | PTE_W | PTE_X):
            freewalk(mem, _pte2pa(pte))
            _store(mem, addr, 0)
        elif pte & PTE_V:
            raise VMPanic("freewalk: leaf")
    mem.kfree(pagetable)


def uvmfree(mem: PhysicalMemory, pagetable: int, sz: int) -> None:
    """Free ``sz`` bytes of user memory, then the page table itself."""
    if sz > 0:
        uvmunmap(mem, pagetable, 0, pgroundup(sz) // PGSIZE, True)
    freewalk(mem, pagetable)


def uvmcopy(mem: PhysicalMemory, old: int, new: int, sz: int) -> None:
    """Copy ``sz`` bytes of memory and mappings from ``old`` into ``new``.

    On failure the pages copied so far are freed and OutOfMemory is raised.
    """
    for i in range(0, sz, PGSIZE):
        addr = walk(mem, old, i, False)
        if addr is None:
            raise VMPanic("uvmcopy: pte should exist")
        pte = _load(mem, addr)
        if not pte & PTE_V:
            raise VMPanic("uvmcopy: page not present")
        pa = _pte2pa(pte)
        flags = _pte_flags(pte)
        try:
            page = mem.kalloc()
        except OutOfMemory:
            uvmunmap(mem, new, 0, i // PGSIZE, True)
            raise
        mem.write(page, mem.read(pa, PGSIZE))
        try:
            mappages(mem, new, i, PGSIZE, page, flags)
        except OutOfMemory:
            mem.kfree(page)
            uvmunmap(mem, new, 0, i // PGSIZE, True)
            raise


def uvmclear(mem: PhysicalMemory, pagetable: int, va: int) -> None:
    """Mark the PTE for ``va`` invalid for user access."""
    addr = walk(mem, pagetable, va, False)
    if addr is None:
        raise VMPanic("uvmclear")
    _store(mem, addr, _load(mem, addr) & ~PTE_U)


def copyout(mem: PhysicalMemory, pagetable: int, dstva: int, data: bytes) -> None:
    """Copy ``data`` to user address ``dstva``; raises OSError(EFAULT) on a bad page."""
    view = memoryview(bytes(data))
    while view:
        va0 = pgrounddown(dstva)
        if va0 >= MAXVA:
            raise _fault(dstva)
        addr = walk(mem, pagetable, va0, False)
        if addr is None:
            raise _fault(dstva)
        pte = _load(mem, addr)
        if not pte & PTE_V or not pte & PTE_U or not pte & PTE_W:
            raise _fault(dstva)
        n = min(PGSIZE - (dstva - va0), len(view))
        mem.write(_pte2pa(pte) + (dstva - va0), bytes(view[:n]))
        view = view[n:]
        dstva = va0 + PGSIZE


def copyin(mem: PhysicalMemory, pagetable: int, srcva: int, length: int) -> bytes:
    """Copy ``length`` bytes from user address ``srcva``; raises OSError(EFAULT)."""
    out = bytearray()
    while length > 0:
        va0 = pgrounddown(srcva)
        pa0 = walkaddr(mem, pagetable, va0)
        if pa0 is None:
            raise _fault(srcva)
        n = min(PGSIZE - (srcva - va0), length)
        out += mem.read(pa0 + (srcva - va0), n)
        length -= n
        srcva = va0 + PGSIZE
    return bytes(out)


def copyinstr(mem: PhysicalMemory, pagetable: int, srcva: int, max: int) -> bytes:
    """Copy a NUL-terminated string of at most ``max`` bytes, NUL included.

    Returns the string without its NUL. Raises OSError(EFAULT) on a bad page
    or when no NUL is found within ``max`` bytes.
    """
    out = bytearray()
    while max > 0:
        va0 = pgrounddown(srcva)
        pa0 = walkaddr(mem, pagetable, va0)
        if pa0 is None:
            raise _fault(srcva)
        n = min(PGSIZE - (srcva - va0), max)
        chunk = mem.read(pa0 + (srcva - va0), n)
        nul = chunk.find(b"\0")
        if nul >= 0:
            return bytes(out + chunk[:nul])
        out += chunk
        max -= n
        srcva = va0 + PGSIZE
    raise OSError(errno.EFAULT, "string not terminated")