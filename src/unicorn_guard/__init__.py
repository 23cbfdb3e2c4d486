# Copyright 2020 Least Authority TFA GmbH
# See COPYING for details.

"""
Guard against saving a live record over a serialized snapshot which has
changed underneath it.
"""

__all__ = [
    "__version__",
]

from ._version import (
    __version__,
)
