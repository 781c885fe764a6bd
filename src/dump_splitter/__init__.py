"""
dump-splitter - split large SQL dumps into one file per table.

Streams a MySQL-style dump once, routes every CREATE TABLE / INSERT INTO body
to a per-table ``<table>.sql`` file according to exclude / create-only
patterns, and optionally imports the produced files with an external client.
"""

__version__ = "0.1.0"
