"""Filesystem and external-process I/O: segment files and client imports."""
