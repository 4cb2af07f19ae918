"""Build a file-system image holding a root directory and a set of files.

Disk layout, one block per sector:
boot block | superblock | log | inode blocks | free bitmap | data blocks
"""

from __future__ import annotations

import os
import struct
import sys
from dataclasses import dataclass, field
from typing import IO, Iterable

from xvutils.ls import FileType

ROOTINO = 1
FSMAGIC = 0x10203040
_UINT = struct.Struct("<I")


@dataclass(frozen=True)
class FsLayout:
    """Sizes that fix where everything lives in an image."""

    block_size: int = 1024
    fs_size: int = 1000
    ninodes: int = 200
    nlog: int = 30
    ndirect: int = 12
    dirsiz: int = 14
    magic: int = FSMAGIC

    def __post_init__(self) -> None:
        if min(self.block_size, self.fs_size, self.ninodes, self.ndirect, self.dirsiz) <= 0:
            raise ValueError("layout sizes must be positive")
        if self.nlog < 0:
            raise ValueError("log size must not be negative")
        if self.block_size % self.dinode_size:
            raise ValueError("block size must be a multiple of the inode size")
        if self.block_size % self.dirent_size:
            raise ValueError("block size must be a multiple of the directory entry size")
        if self.nblocks <= 0:
            raise ValueError("no room left for data blocks")

    @property
    def dinode_format(self) -> str:
        return f"<hhhhI{self.ndirect + 1}I"

    @property
    def dinode_size(self) -> int:
        return struct.calcsize(self.dinode_format)

    @property
    def dirent_format(self) -> str:
        return f"<H{self.dirsiz}s"

    @property
    def dirent_size(self) -> int:
        return struct.calcsize(self.dirent_format)

    @property
    def inodes_per_block(self) -> int:
        return self.block_size // self.dinode_size

    @property
    def nindirect(self) -> int:
        return self.block_size // _UINT.size

    @property
    def maxfile(self) -> int:
        """Largest file size, in blocks."""
        return self.ndirect + self.nindirect

    @property
    def nbitmap(self) -> int:
        return self.fs_size // (self.block_size * 8) + 1

    @property
    def ninodeblocks(self) -> int:
        return self.ninodes // self.inodes_per_block + 1

    @property
    def nmeta(self) -> int:
        """Blocks used by the boot block, superblock, log, inodes and bitmap."""
        return 2 + self.nlog + self.ninodeblocks + self.nbitmap

    @property
    def nblocks(self) -> int:
        """Number of data blocks."""
        return self.fs_size - self.nmeta


@dataclass(frozen=True)
class Superblock:
    """The on-disk description of the image's layout."""

    FORMAT = "<8I"

    magic: int
    size: int
    nblocks: int
    ninodes: int
    nlog: int
    logstart: int
    inodestart: int
    bmapstart: int

    @classmethod
    def from_layout(cls, layout: FsLayout) -> "Superblock":
        return cls(
            magic=layout.magic,
            size=layout.fs_size,
            nblocks=layout.nblocks,
            ninodes=layout.ninodes,
            nlog=layout.nlog,
            logstart=2,
            inodestart=2 + layout.nlog,
            bmapstart=2 + layout.nlog + layout.ninodeblocks,
        )

    def pack(self) -> bytes:
        return struct.pack(
            self.FORMAT,
            self.magic,
            self.size,
            self.nblocks,
            self.ninodes,
            self.nlog,
            self.logstart,
            self.inodestart,
            self.bmapstart,
        )

    @classmethod
    def unpack(cls, data: bytes) -> "Superblock":
        size = struct.calcsize(cls.FORMAT)
        if len(data) < size:
            raise ValueError(f"superblock needs {size} bytes, got {len(data)}")
        return cls(*struct.unpack(cls.FORMAT, bytes(data[:size])))


@dataclass
class Dinode:
    """An on-disk inode."""

    type: int = 0
    major: int = 0
    minor: int = 0
    nlink: int = 0
    size: int = 0
    addrs: list[int] = field(default_factory=list)

    def pack(self, ndirect: int) -> bytes:
        addrs = list(self.addrs) or [0] * (ndirect + 1)
        if len(addrs) != ndirect + 1:
            raise ValueError(f"inode needs {ndirect + 1} block addresses")
        return struct.pack(
            f"<hhhhI{ndirect + 1}I",
            int(self.type),
            self.major,
            self.minor,
            self.nlink,
            self.size,
            *addrs,
        )

    @classmethod
    def unpack(cls, data: bytes, ndirect: int) -> "Dinode":
        fmt = f"<hhhhI{ndirect + 1}I"
        size = struct.calcsize(fmt)
        if len(data) < size:
            raise ValueError(f"inode needs {size} bytes, got {len(data)}")
        itype, major, minor, nlink, isize, *addrs = struct.unpack(fmt, bytes(data[:size]))
        return cls(itype, major, minor, nlink, isize, list(addrs))


class ImageBuilder:
    """Writes a fresh image into a seekable binary stream.

    Creating a builder zeroes the whole image, writes the superblock and
    creates the root directory with its ``.`` and ``..`` entries.
    """

    def __init__(self, image: IO[bytes], layout: FsLayout | None = None) -> None:
        self.image = image
        self.layout = layout or FsLayout()
        self.superblock = Superblock.from_layout(self.layout)
        self.free_inode = 1
        self.free_block = self.layout.nmeta
        bs = self.layout.block_size
        zeroes = bytes(bs)
        for sec in range(self.layout.fs_size):
            self._wsect(sec, zeroes)
        self._wsect(1, self.superblock.pack().ljust(bs, b"\0"))
        root = self.ialloc(FileType.DIR)
        if root != ROOTINO:
            raise RuntimeError(f"root directory got inode {root}")
        self.iappend(root, self._dirent(root, "."))
        self.iappend(root, self._dirent(root, ".."))

    def _wsect(self, sec: int, data: bytes) -> None:
        bs = self.layout.block_size
        if len(data) != bs:
            raise ValueError(f"sector data must be {bs} bytes")
        self.image.seek(sec * bs)
        written = self.image.write(data)
        if written is not None and written != bs:
            raise OSError(f"write: short write at sector {sec}")

    def _rsect(self, sec: int) -> bytes:
        bs = self.layout.block_size
        self.image.seek(sec * bs)
        data = self.image.read(bs)
        if len(data) != bs:
            raise OSError(f"read: short read at sector {sec}")
        return data

    def _iblock(self, inum: int) -> int:
        return inum // self.layout.inodes_per_block + self.superblock.inodestart

    def _dirent(self, inum: int, name: str) -> bytes:
        encoded = os.fsencode(name).split(b"\0", 1)[0][: self.layout.dirsiz]
        return struct.pack(self.layout.dirent_format, inum, encoded)

    def _alloc_block(self) -> int:
        block = self.free_block
        self.free_block += 1
        return block

    def rinode(self, inum: int) -> Dinode:
        """Read inode ``inum`` from the image."""
        buf = self._rsect(self._iblock(inum))
        off = (inum % self.layout.inodes_per_block) * self.layout.dinode_size
        return Dinode.unpack(buf[off:off + self.layout.dinode_size], self.layout.ndirect)

    def winode(self, inum: int, dinode: Dinode) -> None:
        """Write ``dinode`` as inode ``inum``."""
        bn = self._iblock(inum)
        buf = bytearray(self._rsect(bn))
        off = (inum % self.layout.inodes_per_block) * self.layout.dinode_size
        buf[off:off + self.layout.dinode_size] = dinode.pack(self.layout.ndirect)
        self._wsect(bn, bytes(buf))

    def ialloc(self, itype: int) -> int:
        """Allocate the next inode with the given type and return its number."""
        inum = self.free_inode
        self.free_inode += 1
        self.winode(inum, Dinode(type=int(itype), nlink=1, size=0))
        return inum

    def iappend(self, inum: int, data: bytes) -> None:
        """Append ``data`` to the contents of inode ``inum``."""
        layout = self.layout
        bs = layout.block_size
        din = self.rinode(inum)
        off = din.size
        view = memoryview(bytes(data))
        while view:
            fbn = off // bs
            if fbn >= layout.maxfile:
                raise ValueError(f"inode {inum} would exceed {layout.maxfile} blocks")
            if fbn < layout.ndirect:
                if din.addrs[fbn] == 0:
                    din.addrs[fbn] = self._alloc_block()
                block = din.addrs[fbn]
            else:
                if din.addrs[layout.ndirect] == 0:
                    din.addrs[layout.ndirect] = self._alloc_block()
                ind_block = din.addrs[layout.ndirect]
                indirect = list(struct.unpack(f"<{layout.nindirect}I", self._rsect(ind_block)))
                slot = fbn - layout.ndirect
                if indirect[slot] == 0:
                    indirect[slot] = self._alloc_block()
                    self._wsect(ind_block, struct.pack(f"<{layout.nindirect}I", *indirect))
                block = indirect[slot]
            n1 = min(len(view), (fbn + 1) * bs - off)
            buf = bytearray(self._rsect(block))
            start = off - fbn * bs
            buf[start:start + n1] = view[:n1]
            self._wsect(block, bytes(buf))
            view = view[n1:]
            off += n1
        din.size = off
        self.winode(inum, din)

    def add_file(self, path: str | os.PathLike[str]) -> int:
        """Copy the file at ``path`` into the root directory and return its inode.

        A leading ``user/`` is dropped from the name, as is a leading
        underscore; the rest must not contain a slash.
        """
        path = os.fsdecode(os.fspath(path))
        shortname = path[5:] if path.startswith("user/") else path
        if "/" in shortname:
            raise ValueError(f"{path}: only files directly in the root are supported")
        with open(path, "rb") as src:
            if shortname.startswith("_"):
                shortname = shortname[1:]
            inum = self.ialloc(FileType.FILE)
            self.iappend(ROOTINO, self._dirent(inum, shortname))
            while chunk := src.read(self.layout.block_size):
                self.iappend(inum, chunk)
        return inum

    def finish(self) -> int:
        """Round the root directory up to whole blocks and write the free bitmap.

        Returns the number of blocks marked as in use.
        """
        bs = self.layout.block_size
        root = self.rinode(ROOTINO)
        root.size = (root.size // bs + 1) * bs
        self.winode(ROOTINO, root)

        used = self.free_block
        if used >= bs * 8:
            raise ValueError(f"{used} used blocks do not fit in one bitmap block")
        bitmap = bytearray(bs)
        for i in range(used):
            bitmap[i // 8] |= 1 << (i % 8)
        self._wsect(self.superblock.bmapstart, bytes(bitmap))
        return used


def build_image(
    image: str | os.PathLike[str],
    files: Iterable[str | os.PathLike[str]],
    layout: FsLayout | None = None,
) -> int:
    """Create the image file ``image`` holding ``files``; return the used block count."""
    with open(image, "w+b") as out:
        builder = ImageBuilder(out, layout)
        for path in files:
            builder.add_file(path)
        return builder.finish()


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        sys.stderr.write("Usage: mkfs fs.img files...\n")
        return 1
    layout = FsLayout()
    sys.stdout.write(
        f"nmeta {layout.nmeta} (boot, super, log blocks {layout.nlog} "
        f"inode blocks {layout.ninodeblocks}, bitmap blocks {layout.nbitmap}) "
        f"blocks {layout.nblocks} total {layout.fs_size}\n"
    )
    try:
        used = build_image(args[0], args[1:], layout)
    except OSError as exc:
        name = exc.filename if exc.filename is not None else "mkfs"
        sys.stderr.write(f"{name}: {exc.strerror or exc}\n")
        return 1
    except ValueError as exc:
        sys.stderr.write(f"mkfs: {exc}\n")
        return 1
    sys.stdout.write(f"balloc: first {used} blocks have been allocated\n")
    sys.stdout.write(
        f"balloc: write bitmap block at sector {Superblock.from_layout(layout).bmapstart}\n"
    )
    return 0