# Copyright 2021 The Magic-Folder Developers
# See COPYING for details.

import yaml


def load_yaml(stream):
    """
    Parse the first YAML document in a stream.

    Returns string values as :py:`unicode`.
    """
    return yaml.load(stream, yaml.SafeLoader)


def load_yaml_text(stream):
    """
    Parse the first YAML document in a stream without resolving any
    implicit scalar types: ``100``, ``true`` and ``2015-01-01`` all come
    back exactly as written, as text.
    """
    return yaml.load(stream, yaml.BaseLoader)
