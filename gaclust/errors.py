"""
Error kinds raised by gaclust.
"""

from __future__ import annotations


class InputError(ValueError):
    """Invalid dataset, reference vector, k, or configuration.

    Raised at invocation time, before any population is created.
    """
