"""Explicit run states of a jiragit invocation.

A run moves through a small, fixed set of states; every transition is checked
so the control flow stays deterministic and inspectable in tests.
"""

__all__: list[str] = []
