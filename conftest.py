# Test-collection plumbing: ``SyncTestCase`` is a base class imported into
# each test module; it is not itself a test and must not be collected.


def pytest_pycollect_makeitem(collector, name, obj):
    from unicorn_guard.test.common import SyncTestCase

    if obj is SyncTestCase:
        return []
    return None
