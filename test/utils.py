"""
Utilities module tests (sentinel, naming, timestamps, flag normalization).
"""
from __future__ import annotations

import datetime
import unittest
from unittest import TestCase

from scaffold.utils import Unset, UnsetType, normalize, nullify, rename, timestamp


class TestUnset(TestCase):

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsyButNotNone(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertEqual(repr(Unset), "Unset")

    def testSubclassingRejected(self):
        with self.assertRaises(TypeError):
            class Other(UnsetType):  # NOQA: F-841
                pass

    def testNullifyPreservesFalseyValues(self):
        self.assertEqual(nullify(Unset, "fallback"), "fallback")
        self.assertIsNone(nullify(Unset))
        self.assertEqual(nullify(0, "fallback"), 0)
        self.assertIsNone(nullify(None, "fallback"))


class TestRename(TestCase):

    def testFunctionForm(self):
        def work():
            pass

        rename(work, "do_work")
        self.assertEqual(work.__name__, "do_work")
        self.assertEqual(work.__qualname__, "do_work")

    def testDecoratorForm(self):
        @rename("do_work")
        def work():
            pass

        self.assertEqual(work.__name__, "do_work")

    def testWrongArity(self):
        with self.assertRaises(TypeError):
            rename()


class TestTimestamp(TestCase):

    def testNaiveMomentFormatted(self):
        moment = datetime.datetime(2026, 10, 18, 13, 15, 7, 999999)
        self.assertEqual(timestamp(moment), "2026-10-18 13:15:07 UTC")

    def testAwareMomentConvertedToUtc(self):
        zone = datetime.timezone(datetime.timedelta(hours=2))
        moment = datetime.datetime(2026, 10, 18, 15, 0, 0, tzinfo=zone)
        self.assertEqual(timestamp(moment), "2026-10-18 13:00:00 UTC")

    def testCurrentMomentShape(self):
        self.assertRegex(timestamp(), r"^\d{4}-\d\d-\d\d \d\d:\d\d:\d\d UTC$")

    def testRejectsNonDatetime(self):
        with self.assertRaises(TypeError):
            timestamp("2026-10-18")


class TestNormalize(TestCase):

    def testFullWidthCollapses(self):
        self.assertEqual(normalize("ｄｅｂｕｇ"), "debug")

    def testPlainUnchanged(self):
        self.assertEqual(normalize("no-color"), "no-color")


if __name__ == "__main__":
    unittest.main()
