"""
Core domain models, fixed-point mathematical primitives, and contracts.

This module contains the foundational building blocks shared by the pricing
engine and the GWAV oracle; nothing here performs I/O.
"""
