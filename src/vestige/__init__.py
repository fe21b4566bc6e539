"""
Vestige: Department Page Archiver

Fetches a fixed list of pages under one origin, stores the raw bytes in a
run-stamped directory tree, downloads the files and images referenced from
each page's content region, and writes a report of what was archived.
"""

__version__ = "1.0"
__author__ = "Vestige Project"
__description__ = "Department Page Archiver"
