"""Unix-style tools, a shell parser, a file-system image builder and models of page tables, virtio rings and a heap."""

__version__ = "0.1.0"