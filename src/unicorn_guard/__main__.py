# Copyright (c) Least Authority TFA GmbH.
# See COPYING.* for details.

if __name__ == '__main__':
    from .cli import _entry

    _entry()
