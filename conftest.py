# -*- coding: utf-8 -*-
"""Let `pytest` drive the `runtests()` functions of the test modules.

The test modules use the `test[]` macros of `unpythonic.syntax`, so they must be
imported through the `mcpyrate` import hook. `pytest`'s assertion rewriting
would bypass that hook, so it is disabled in `pytest.ini` (`--assert=plain`).

Each test module becomes one test item, which runs the module's `runtests()`
inside an `unpythonic` test session, and fails if any test in it failed or
errored. The detailed report is the session's own output.
"""

from importlib import import_module

import pytest

import mcpyrate.activate  # noqa: F401

from unpythonic.collections import unbox
from unpythonic.test.fixtures import session, tests_errored, tests_failed

class TestSessionFailure(Exception):
    """Raised when an `unpythonic` test session had failures or errors."""

def pytest_pycollect_makemodule(module_path, parent):
    return RunTestsModule.from_parent(parent, path=module_path)

class RunTestsModule(pytest.File):
    def collect(self):
        yield RunTestsItem.from_parent(self, name="runtests")

    @property
    def modname(self):
        relative = self.path.relative_to(self.config.rootpath).with_suffix("")
        return ".".join(relative.parts)

class RunTestsItem(pytest.Item):
    def runtest(self):
        failed_before = unbox(tests_failed)
        errored_before = unbox(tests_errored)
        module = import_module(self.parent.modname)
        with session(self.parent.modname):
            module.runtests()
        failed = unbox(tests_failed) - failed_before
        errored = unbox(tests_errored) - errored_before
        if failed or errored:
            raise TestSessionFailure(f"{failed} failed, {errored} errored")

    def repr_failure(self, excinfo):
        if isinstance(excinfo.value, TestSessionFailure):
            return f"{self.parent.modname}: {excinfo.value} (see captured output for details)"
        return super().repr_failure(excinfo)

    def reportinfo(self):
        return self.path, None, f"{self.parent.modname}.runtests"
