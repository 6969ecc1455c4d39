"""
Tool option default accessors tests.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import pathlib
import unittest
from unittest import TestCase

from toolbind import ConfigStore, defaults, install


class TestFallbacks(TestCase):
    """Accessors on an empty store return the documented fallbacks."""

    def setUp(self):
        self.store = ConfigStore()

    def testScalars(self):
        self.assertIsNone(defaults.encoding(self.store))
        self.assertIsNone(defaults.mavenoverrides(self.store))
        self.assertEqual(defaults.timeout(self.store), 20000)
        self.assertEqual(defaults.resourceroot(self.store), "ROOT")
        self.assertEqual(defaults.runtoolcompile(self.store), "never")
        self.assertEqual(defaults.testtoolcompile(self.store), "once")

    def testFlagsDefaultToFalse(self):
        for accessor in (defaults.offline, defaults.noosgi, defaults.nopom, defaults.pack200):
            with self.subTest(accessor=accessor.__name__):
                self.assertIs(accessor(self.store), False)

    def testDirectories(self):
        self.assertEqual(defaults.sourcedirs(self.store), [pathlib.Path("source")])
        self.assertEqual(defaults.resourcedirs(self.store), [pathlib.Path("resource")])
        self.assertEqual(defaults.scriptdirs(self.store), [pathlib.Path("script")])
        self.assertEqual(defaults.docdirs(self.store), [pathlib.Path("doc")])


class TestConfigured(TestCase):
    """Accessors read the well-known keys."""

    def setUp(self):
        self.store = ConfigStore()

    def testValues(self):
        self.store.set("defaults.encoding", "UTF-8")
        self.store.set("defaults.offline", "on")
        self.store.set("defaults.timeout", "5000")
        self.store.set("compiler.pack200", "yes")
        self.assertEqual(defaults.encoding(self.store), "UTF-8")
        self.assertTrue(defaults.offline(self.store))
        self.assertEqual(defaults.timeout(self.store), 5000)
        self.assertTrue(defaults.pack200(self.store))

    def testMalformedTimeoutFallsBack(self):
        self.store.set("defaults.timeout", "later")
        self.assertEqual(defaults.timeout(self.store), 20000)

    def testMultipleDirectories(self):
        self.store.setall("compiler.source", ["src", "gen/src"])
        self.assertEqual(defaults.sourcedirs(self.store), [pathlib.Path("src"), pathlib.Path("gen/src")])


class TestProcessWideStore(TestCase):
    """Without an explicit store the process-wide one is read."""

    def tearDown(self):
        install(None)

    def testReadsInstalledStore(self):
        store = ConfigStore()
        store.set("compiler.resourceroot", "RES")
        install(store)
        self.assertEqual(defaults.resourceroot(), "RES")


if __name__ == "__main__":
    unittest.main()
