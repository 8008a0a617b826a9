"""
Map Evaluation Scripts

Grid file I/O, point-cloud publishing and the command-line evaluation driver
built on the ``mapeval`` library.
"""
