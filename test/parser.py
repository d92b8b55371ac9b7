"""
Parser module behavioral tests (argv + OptionSpec table → Options).

Scope
- Value shapes: scalar (last wins), ordered sequences, counters, defaults.
- Token forms: spaced/inline long options, attached and bundled shorts, `--`.
- Usage faults: unknown, malformed, missing values, flag assignment, required.
"""
from __future__ import annotations

import unittest
from unittest import TestCase

from scaffold import (
    RESERVED,
    FlagAssignmentError,
    MalformedTokenError,
    MissingRequiredError,
    MissingValueError,
    OptionSpec,
    Options,
    UnknownSwitchError,
    UsageExit,
    parse,
)
from scaffold.parser import _ordinal

FILE = OptionSpec("f", "file", "arg", required=True, description="Filename to process. Required.")
X = OptionSpec("x", None, None, repeatable=True, description="Increase the magic. Can be repeated.")
INPUT = OptionSpec("i", None, "arg", repeatable=True, description="Input file. Can be repeated.")
TEMP = OptionSpec("t", "temp", "arg", default="/tmp/bar", description='Location. Default="/tmp/bar"')
QUIET = OptionSpec("q", "quiet", None, description="Quiet.")
TAGS = OptionSpec(None, "tag", "name", default="all", repeatable=True, description="Tag. Can be repeated.")

SPECS = RESERVED + (FILE, X, INPUT)


class TestScenarios(TestCase):

    def testCounterAndScalar(self):
        self.assertEqual(parse(["-x", "-x", "-x", "-f", "a.txt"], SPECS), {"file": "a.txt", "x": 3})

    def testRepeatedValuesKeepOrder(self):
        options = parse(["-i", "one.csv", "-i", "two.csv", "-f", "out.txt"], SPECS)
        self.assertEqual(options, {"file": "out.txt", "i": ["one.csv", "two.csv"]})

    def testDuplicatesPreserved(self):
        options = parse(["-i", "a", "-i", "b", "-i", "a", "-f", "o"], SPECS)
        self.assertEqual(options["i"], ["a", "b", "a"])

    def testCounterEqualsOccurrences(self):
        for count in range(6):
            with self.subTest(count=count):
                options = parse(["-x"] * count + ["-f", "o"], SPECS)
                if count:
                    self.assertEqual(options["x"], count)
                else:
                    self.assertNotIn("x", options)

    def testLastScalarWins(self):
        self.assertEqual(parse(["-f", "a", "--file", "b"], SPECS)["file"], "b")


class TestForms(TestCase):

    def testInlineLongValue(self):
        self.assertEqual(parse(["--file=a=b.txt"], SPECS)["file"], "a=b.txt")

    def testEmptyInlineValue(self):
        self.assertEqual(parse(["--file="], SPECS)["file"], "")

    def testAttachedShortValue(self):
        self.assertEqual(parse(["-fa.txt"], SPECS)["file"], "a.txt")

    def testBundledShorts(self):
        self.assertEqual(parse(["-xxx", "-f", "o"], SPECS)["x"], 3)

    def testBundleEndingInValueOption(self):
        self.assertEqual(parse(["-xxf", "a.txt"], SPECS), {"x": 2, "file": "a.txt"})

    def testValueMayLookLikeAFlag(self):
        self.assertEqual(parse(["-f", "-x"], SPECS), {"file": "-x"})

    def testDoubleDashEndsOptions(self):
        options = parse(["-f", "o", "--", "-x", "rest"], SPECS)
        self.assertEqual(options, {"file": "o"})
        self.assertEqual(options.arguments, ("-x", "rest"))

    def testFirstPositionalEndsOptions(self):
        options = parse(["-f", "o", "data.bin", "-x"], SPECS)
        self.assertEqual(options, {"file": "o"})
        self.assertEqual(options.arguments, ("data.bin", "-x"))

    def testLoneDashIsPositional(self):
        options = parse(["-f", "o", "-"], SPECS)
        self.assertEqual(options.arguments, ("-",))

    def testSingleFlagIsOne(self):
        self.assertEqual(parse(["-q", "--quiet"], RESERVED + (QUIET,))["quiet"], 1)

    def testNormalizedSpelling(self):
        self.assertEqual(parse(["--ｆｉｌｅ", "o"], SPECS)["file"], "o")

    def testReservedFlagsParsed(self):
        options = parse(["-d", "-v", "--no-color", "-h", "-f", "o"], SPECS)
        self.assertEqual(options, {"debug": 1, "v": 1, "no-color": 1, "help": 1, "file": "o"})


class TestDefaults(TestCase):

    def testDefaultWhenAbsent(self):
        self.assertEqual(parse([], RESERVED + (TEMP,)), {"temp": "/tmp/bar"})

    def testObservedBeatsDefault(self):
        self.assertEqual(parse(["-t", "/var/tmp"], RESERVED + (TEMP,)), {"temp": "/var/tmp"})

    def testRepeatableDefaultIsSequence(self):
        self.assertEqual(parse([], RESERVED + (TAGS,)), {"tag": ["all"]})
        self.assertEqual(parse(["--tag", "a"], RESERVED + (TAGS,)), {"tag": ["a"]})

    def testRequiredNeverDefaulted(self):
        spec = FILE._replace(default="fallback.txt")
        with self.assertRaises(UsageExit) as caught:
            parse([], RESERVED + (spec,))
        self.assertIsInstance(caught.exception.exceptions[0], MissingRequiredError)


class TestFaults(TestCase):

    def faults(self, argv, specs=SPECS):
        with self.assertRaises(UsageExit) as caught:
            parse(argv, specs)
        return caught.exception

    def testMissingRequired(self):
        group = self.faults(["-x"])
        self.assertEqual(len(group.exceptions), 1)
        self.assertIsInstance(group.exceptions[0], MissingRequiredError)
        self.assertIn("-f (--file) is required", group.exceptions[0].message)
        self.assertEqual(group.options, {"x": 1})

    def testUnknownShort(self):
        group = self.faults(["-z", "-f", "o"])
        self.assertIsInstance(group.exceptions[0], UnknownSwitchError)
        self.assertIn("'-z' at first position", group.exceptions[0].message)

    def testUnknownLong(self):
        group = self.faults(["-f", "o", "--nope=1"])
        self.assertIsInstance(group.exceptions[0], UnknownSwitchError)
        self.assertIn("'--nope' at third position", group.exceptions[0].message)

    def testUnknownInsideBundle(self):
        group = self.faults(["-xzx", "-f", "o"])
        self.assertIsInstance(group.exceptions[0], UnknownSwitchError)
        self.assertEqual(group.options["x"], 1)

    def testMalformedLong(self):
        group = self.faults(["--bad_name", "-f", "o"])
        self.assertIsInstance(group.exceptions[0], MalformedTokenError)

    def testMissingValueReportedOnce(self):
        group = self.faults(["-f"])
        self.assertEqual(len(group.exceptions), 1)
        self.assertIsInstance(group.exceptions[0], MissingValueError)
        self.assertIn("requires an argument", group.exceptions[0].message)

    def testFlagAssignment(self):
        group = self.faults(["--debug=yes", "-f", "o"])
        self.assertIsInstance(group.exceptions[0], FlagAssignmentError)

    def testReservedFlagsSeenAfterFault(self):
        group = self.faults(["--bogus", "--no-color", "-d"])
        self.assertEqual(group.options.get("no-color"), 1)
        self.assertEqual(group.options.get("debug"), 1)

    def testAllFaultsCollected(self):
        group = self.faults(["-z", "--nope"])
        self.assertEqual([type(fault) for fault in group.exceptions], [
            UnknownSwitchError, UnknownSwitchError, MissingRequiredError
        ])

    def testDuplicateSpecsRejected(self):
        with self.assertRaises(ValueError):
            parse([], SPECS + (OptionSpec("f", "force"),))

    def testSharedKeysRejected(self):
        for spec in (OptionSpec(None, "x", "arg"), OptionSpec(None, "v", "arg", required=True)):
            with self.subTest(spec=spec):
                with self.assertRaises(ValueError):
                    parse(["-x", "--x", "a"], SPECS + (spec,))

    def testNonStringToken(self):
        with self.assertRaises(TypeError):
            parse(["-f", 1], SPECS)


class TestOrdinal(TestCase):

    def testLabels(self):
        for number, label in ((1, "first"), (3, "third"), (10, "tenth"), (11, "11th"), (12, "12th"),
                              (21, "21st"), (22, "22nd"), (23, "23rd"), (111, "111th"), (0, "0th")):
            with self.subTest(number=number):
                self.assertEqual(_ordinal(number), label)


class TestOptions(TestCase):

    def testReadOnlyMapping(self):
        options = Options({"i": ["a"]}, ["rest"])
        options["i"].append("b")
        self.assertEqual(options["i"], ["a"])
        with self.assertRaises(TypeError):
            options["i"] = ["c"]  # type: ignore[index]

    def testEqualityWithDict(self):
        self.assertEqual(Options({"x": 2}), {"x": 2})
        self.assertNotEqual(Options({"x": 2}), {"x": 3})
        self.assertEqual(len(Options({"x": 2, "file": "a"})), 2)


if __name__ == "__main__":
    unittest.main()
