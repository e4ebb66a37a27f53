"""Low-level numerical routines for the mode-coupling kernels.

This subpackage contains the performance-critical interaction fill and
Bengtzelius recurrence, in a Numba-accelerated and a plain numpy flavour with
identical signatures.
"""
