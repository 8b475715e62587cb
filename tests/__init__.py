"""
Test suite for optcore

Contains:
- tests/unit/          : Unit tests for math primitives, pricing engine, GWAV oracle,
                         domain models, contracts and logging setup
"""
