"""
Synchronization profile configuration.

Profiles are described in a YAML file::

    profiles:
      - name: Foundation.Core
        snapshot_path: serialization/core
        include:
          - database: master
            path: /sitecore/templates/Foundation
            exclude:
              - /sitecore/templates/Foundation/Legacy
        excluded_fields:
          - "{B1E16562-F3F9-4DDD-84CA-6E099950ECC0}"

``snapshot_path`` is relative to the configuration file. A profile
without ``include`` rules manages every record.
"""

__all__ = [
    "ProfileRegistry",
    "load_configuration",
    "parse_configuration",
    "default_config_path",
]

import os

from appdirs import (
    user_config_dir,
)

import attr

from twisted.python.filepath import (
    FilePath,
)

from .common import (
    ConfigurationError,
    parse_guid,
)
from .profile import (
    ExcludedFieldsFilter,
    IncludeEverything,
    PathPredicate,
    PathRule,
    SynchronizationProfile,
)
from .store import (
    FilesystemSnapshotStore,
)
from .util.encoding import (
    load_yaml,
)

CONFIG_FILENAME = u"unicorn-guard.yml"


def default_config_path():
    """
    :returns FilePath: where the configuration lives if no other
        location is given
    """
    return FilePath(user_config_dir("unicorn-guard")).child(CONFIG_FILENAME)


@attr.s(frozen=True)
class ProfileRegistry(object):
    """
    Every configured synchronization profile, in configuration order.
    """
    profiles = attr.ib(converter=tuple)

    def __iter__(self):
        return iter(self.profiles)

    def __len__(self):
        return len(self.profiles)


def _text(data, key, where):
    try:
        value = data[key]
    except KeyError:
        raise ConfigurationError(u"{}: '{}' is required".format(where, key))
    if not isinstance(value, str) or not value:
        raise ConfigurationError(u"{}: '{}' must be non-empty text".format(where, key))
    return value


def _list(data, key, where):
    value = data.get(key) or []
    if not isinstance(value, list):
        raise ConfigurationError(u"{}: '{}' must be a list".format(where, key))
    return value


def _predicate(data, where):
    include = _list(data, u"include", where)
    if not include:
        return IncludeEverything()
    rules = []
    for index, rule in enumerate(include):
        rule_where = u"{} include #{}".format(where, index + 1)
        if not isinstance(rule, dict):
            raise ConfigurationError(u"{}: must be a mapping".format(rule_where))
        exclude = _list(rule, u"exclude", rule_where)
        if not all(isinstance(path, str) for path in exclude):
            raise ConfigurationError(u"{}: 'exclude' must list paths".format(rule_where))
        rules.append(
            PathRule(
                database=_text(rule, u"database", rule_where),
                path=_text(rule, u"path", rule_where),
                exclude=exclude,
            )
        )
    return PathPredicate(rules)


def _field_filter(data, where):
    excluded = []
    for field_id in _list(data, u"excluded_fields", where):
        try:
            excluded.append(parse_guid(field_id))
        except ValueError:
            raise ConfigurationError(
                u"{}: invalid field ID {!r}".format(where, field_id)
            )
    return ExcludedFieldsFilter(excluded)


def _profile(data, basedir, index):
    where = u"profile #{}".format(index + 1)
    if not isinstance(data, dict):
        raise ConfigurationError(u"{}: must be a mapping".format(where))
    name = _text(data, u"name", where)
    where = u"profile '{}'".format(name)
    snapshot_path = FilePath(
        os.path.abspath(os.path.join(basedir.path, _text(data, u"snapshot_path", where)))
    )
    return SynchronizationProfile(
        name=name,
        predicate=_predicate(data, where),
        store=FilesystemSnapshotStore(snapshot_path),
        field_filter=_field_filter(data, where),
    )


def parse_configuration(data, basedir):
    """
    :param dict data: the parsed configuration document

    :param FilePath basedir: relative snapshot paths start here

    :raises ConfigurationError: if ``data`` doesn't describe profiles

    :returns ProfileRegistry:
    """
    if not isinstance(data, dict):
        raise ConfigurationError(u"configuration must be a mapping")
    profiles = [
        _profile(profile, basedir, index)
        for index, profile in enumerate(_list(data, u"profiles", u"configuration"))
    ]
    seen = set()
    for profile in profiles:
        if profile.name in seen:
            raise ConfigurationError(
                u"profile '{}' is configured more than once".format(profile.name)
            )
        seen.add(profile.name)
    return ProfileRegistry(profiles)


def load_configuration(path):
    """
    :param FilePath path: the configuration file

    :raises ConfigurationError: if the file is missing or invalid

    :returns ProfileRegistry:
    """
    if not path.isfile():
        raise ConfigurationError(u"no configuration at '{}'".format(path.path))
    with path.open("r") as f:
        try:
            data = load_yaml(f)
        except Exception as e:
            raise ConfigurationError(u"cannot parse '{}': {}".format(path.path, e))
    return parse_configuration(data, path.parent())
