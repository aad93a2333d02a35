# xvtools

A set of small, dependency-free tools in the spirit of a minimal Unix
system:

- command-line utilities: `cat`, `echo`, `grep`, `wc`, `ls`, `mkdir`,
  `rm`, `ln`, `kill`;
- a shell command-line parser that produces a tree of command objects;
- a builder for simple file-system disk images (`mkfs`);
- models of a three-level page table with user-memory copy routines, the
  virtio ring and block-request layouts, a first-fit heap allocator and a
  Park–Miller random number generator.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Command-line tools

Each tool is installed under an `xv-` prefix so it does not shadow the
commands already on your system. Each returns exit status 0 on success
and 1 on a usage error or a fatal failure.

| Command    | What it does                                                                  |
|------------|-------------------------------------------------------------------------------|
| `xv-cat`   | Copy files (or standard input) to standard output.                            |
| `xv-echo`  | Print its arguments separated by spaces, followed by a newline.               |
| `xv-grep`  | Print lines matching a pattern; supports only `^`, `.`, `*` and `$`.          |
| `xv-wc`    | Print line, word and byte counts followed by the name.                        |
| `xv-ls`    | List paths as `name type inode size`; a directory lists `.`, `..` and its entries. |
| `xv-mkdir` | Create directories; reports and stops at the first failure.                   |
| `xv-rm`    | Remove files or empty directories; reports and stops at the first failure.    |
| `xv-ln`    | Create a hard link: `xv-ln old new`. A failure is reported, not fatal.        |
| `xv-kill`  | Send SIGKILL (SIGTERM where that is missing) to each positive pid given.      |
| `xv-mkfs`  | Build a file-system image: `xv-mkfs fs.img files...`.                         |

In `xv-ls` output the type is 1 for a directory, 2 for a regular file and
3 for anything else. `xv-grep` examines only newline-terminated lines.

Examples:

```
xv-echo hello world
xv-grep '^def ' xvtools/grep.py
xv-wc README.md
xv-mkfs fs.img README.md
```

`xv-mkfs` creates a root directory holding `.`, `..` and one entry per
file. A leading `user/` is dropped from each path and then a leading `_`
from the name, so `user/_cat` appears in the image as `cat`; any other
`/` in a name is an error, as is a name longer than 14 bytes.

## Library use

### Formatted output

`xvtools.fmt` provides `format_string`, `fprintf` and `printf`. They
understand `%d`, `%u`, `%x` (with `l` and `ll` forms), `%p`, `%s` and
`%%`; integers are treated as 32-bit values, hexadecimal digits are upper
case, `%p` prints 16 digits, `None` for `%s` prints `(null)`, and unknown
sequences are echoed as they are.

```python
from xvtools.fmt import format_string, printf

text = format_string("%d items at %x", 3, 255)   # "3 items at FF"
printf("%s\n", text)
```

### Pattern matching

```python
from xvtools.grep import match

match("^ab*c$", "abbbc")   # True
match("x.z", "wxyz")       # True
match("^b", "abc")         # False
```

`grep(pattern, stream, out)` writes the matching lines of a text stream.

### Parsing shell command lines

`xvtools.sh.parsecmd` turns a command line into a tree of `ExecCmd`,
`RedirCmd`, `PipeCmd`, `ListCmd` and `BackCmd` objects and raises
`ShellSyntaxError` on malformed input (a missing `)`, a redirection
without a file, ten or more arguments, or leftover text).

```python
from xvtools.sh import parsecmd

tree = parsecmd("cat < in | grep x > out; echo done &")
```

The lower-level `gettoken` and `peek` functions are available too.

### File-system images

```python
from xvtools.mkfs import build_image

with open("fs.img", "w+b") as image:
    build_image(image, ["README.md"])
```

`Geometry` fixes the layout (block size 1024, 2000 blocks, 200 inodes,
30 log blocks by default). For finer control, `FsImage` offers sector
reads and writes (`rsect`, `wsect`), inode reads and writes (`rinode`,
`winode`), `ialloc`, `iappend` and `balloc`; `SuperBlock`, `Dinode` and
`Dirent` pack to and unpack from their little-endian on-disk form.
Failures raise `MkfsError`.

### Virtual memory

`xvtools.vm` models physical pages (`PhysicalMemory`) and a three-level
page table: `walk`, `walkaddr`, `mappages`, `uvmcreate`, `uvmfirst`,
`uvmalloc`, `uvmdealloc`, `uvmcopy`, `uvmclear`, `uvmunmap`, `uvmfree`,
`freewalk`, and the user-memory copy routines `copyin`, `copyout` and
`copyinstr`. Broken invariants raise `VMPanic`, running out of pages
raises `OutOfMemory`, and a bad user address raises `OSError` with
`EFAULT`.

```python
from xvtools.vm import PTE_W, PhysicalMemory, copyin, copyout, uvmalloc, uvmcreate

mem = PhysicalMemory(64)
pagetable = uvmcreate(mem)
uvmalloc(mem, pagetable, 0, 8192, PTE_W)
copyout(mem, pagetable, 100, b"hello")
copyin(mem, pagetable, 100, 5)   # b"hello"
```

### Other pieces

- `xvtools.virtio`: register offsets and flags, and `VirtqDesc`,
  `VirtqAvail`, `VirtqUsedElem`, `VirtqUsed` and `BlkRequest` with
  `pack()` / `unpack()`.
- `xvtools.umalloc.Heap`: a first-fit free-list allocator over a
  growable arena, with `sbrk`, `malloc` and `free`; exhaustion raises
  `MemoryError`.
- `xvtools.rng`: `do_rand` and the `Rand` generator.
- `xvtools.ulib`: `atoi`, `strcmp`, `gets`, `stat`, plus `Stat` and
  `FileType`.

## What this package does not do

- The shell module only parses command lines; there is no interactive
  shell and nothing that runs the parsed commands.
- There is no kernel, disk driver or process model: the page-table,
  virtio and allocator modules model data structures in memory and do
  not touch real hardware or real process memory.
- `xv-mkfs` writes images but there is no tool to read files back out
  of one.