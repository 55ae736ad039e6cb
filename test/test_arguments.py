"""
Arguments module behavioral tests (parser construction and matching).

Scope
- Validate public parsers (Flag, Option, Operand, ArrayOperand): construction,
  normalization and metadata constraints.
- Validate parse() on each parser in isolation: claiming units, necessity
  policy, mapping and fault recording (never raising).

Conventions
- Test method names follow CamelCase per project convention.
- Parsers run against tokenize() output and a fresh ParsingResult.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from commandant import (
    Flag,
    Option,
    Operand,
    ArrayOperand,
    Necessity,
    ParsingResult,
    ScriptedPrompter,
    GroupingError,
    MissingValueError,
    ValueMappingError,
    tokenize,
)
from commandant.mappers import integer, choice
from commandant.utils import Unset


def run(parser, tokens, *, names=(), valued=(), prompter=Unset):
    arguments = tokenize(tokens, names=names, valued=valued)
    result = ParsingResult(1)
    parser.parse(0, arguments, result, prompter)
    return result, arguments


class TestParserConstruction(TestCase):
    """Metadata sanitization."""

    def testOptionRequiresAtLeastOneName(self):
        with self.assertRaises(TypeError):
            Option()

    def testOptionNamesMustBeShellStyle(self):
        with self.assertRaises(ValueError):
            Option("name")

    def testOptionNamesRejectDuplicates(self):
        with self.assertRaises(ValueError):
            Option("-n", "-n")

    def testOptionNamesAreNormalizedToSet(self):
        self.assertEqual(Option(" -n ", "--name").names, {"-n", "--name"})

    def testOptionAcceptsDigitSuffixedNames(self):
        self.assertEqual(Option("--a3", "-a3").names, {"--a3", "-a3"})

    def testMetavarDefaultsToMapperName(self):
        self.assertEqual(Option("-n", mapper=integer).metavar, "INTEGER")

    def testMetavarDefaultsForIdentityMapper(self):
        self.assertEqual(Option("-n").metavar, "VALUE")
        self.assertEqual(Operand(2).metavar, "ARG2")
        self.assertEqual(ArrayOperand().metavar, "ARGS")

    def testMetavarMustBeNonEmpty(self):
        with self.assertRaises(ValueError):
            Operand(0, metavar="  ")

    def testPromptDefaultsToMetavar(self):
        self.assertEqual(Operand(0, metavar="FILE").prompt, "FILE: ")

    def testDescrDefaultsToNone(self):
        self.assertIsNone(Flag("-v").descr)

    def testDescrEmptyRejected(self):
        with self.assertRaises(ValueError):
            Flag("-v", descr=" ")

    def testMapperMustBeCallable(self):
        with self.assertRaises(TypeError):
            Option("-n", mapper="int")

    def testNecessityMustBeMember(self):
        with self.assertRaises(TypeError):
            Option("-n", necessity="required")

    def testOperandPositionMustBeNonNegativeInteger(self):
        with self.assertRaises(ValueError):
            Operand(-1)
        with self.assertRaises(TypeError):
            Operand("0")
        with self.assertRaises(TypeError):
            Operand(True)

    def testOperandIsRequiredByDefault(self):
        self.assertIs(Operand(0).necessity, Necessity.REQUIRED)
        self.assertIs(Option("-n").necessity, Necessity.OPTIONAL)

    def testFlagValueMustBeNonEmpty(self):
        with self.assertRaises(ValueError):
            Flag("-f", value="")

    def testReprUsesTypename(self):
        self.assertTrue(repr(ArrayOperand()).startswith("array-operand("))
        self.assertTrue(repr(Flag("-v")).startswith("flag("))

    def testIntrospectedNamesAreCopies(self):
        option = Option("-n")
        option.names.add("-m")
        self.assertEqual(option.names, {"-n"})


class TestFlagParsing(TestCase):
    """Flag.parse()."""

    def testPresentFlagYieldsTrue(self):
        result, arguments = run(Flag("-v"), ["-v"], names={"-v"})
        self.assertEqual(result.values, (True,))
        self.assertEqual(arguments, [])

    def testPresentFlagYieldsMappedValue(self):
        result, _ = run(Flag("-f", value="Option-On"), ["-f"], names={"-f"})
        self.assertEqual(result.values, ("Option-On",))

    def testAbsentFlagYieldsDefaultNotMissing(self):
        result, _ = run(Flag("-f", value="Option-On"), [])
        self.assertEqual(result.values, (None,))
        self.assertEqual(result.missing, ())
        self.assertTrue(result.valid)

    def testAbsentFlagDefaultIsNotMapped(self):
        result, _ = run(Flag("-f", value="1", default="off", mapper=integer), [])
        self.assertEqual(result.values, ("off",))

    def testFlagValueMappingFailureNamesPosition(self):
        result, _ = run(Flag("-f", value="abc", mapper=integer), ["x", "-f"], names={"-f"})
        error, = result.errors
        self.assertIsInstance(error, ValueMappingError)
        self.assertIn("for -f at second position", error.message)
        self.assertNotIn("from prompt", error.message)
        self.assertEqual(error.options["argument"].text, "-f")

    def testFlagClaimsOnlyOneOccurrence(self):
        result, arguments = run(Flag("-v"), ["-v", "-v"], names={"-v"})
        self.assertEqual(result.values, (True,))
        self.assertEqual([argument.text for argument in arguments], ["-v"])


class TestOptionParsing(TestCase):
    """Option.parse()."""

    def testOptionValueIsMapped(self):
        result, _ = run(Option("--port", mapper=integer), ["--port", "8080"], names={"--port"}, valued={"--port"})
        self.assertEqual(result.values, (8080,))

    def testAbsentOptionalUsesDefaultAsIs(self):
        result, _ = run(Option("--port", mapper=integer, default="auto"), [])
        self.assertEqual(result.values, ("auto",))

    def testAbsentRequiredIsMissing(self):
        option = Option("--port", necessity=Necessity.REQUIRED)
        result, _ = run(option, [])
        self.assertEqual(result.missing, (option,))
        self.assertFalse(result.valid)

    def testMisplacedOptionRecordsGroupingError(self):
        result, _ = run(Option("-r"), ["-rf", "value"], names={"-r", "-f"}, valued={"-r"})
        error, = result.errors
        self.assertIsInstance(error, GroupingError)
        self.assertIn("-rf", error.message)

    def testOptionWithoutValueRecordsMissingValue(self):
        result, _ = run(Option("-r"), ["-r"], names={"-r"}, valued={"-r"})
        error, = result.errors
        self.assertIsInstance(error, MissingValueError)

    def testMappingFailureIsRecordedWithCause(self):
        result, _ = run(Option("-n", mapper=integer), ["-n", "abc"], names={"-n"}, valued={"-n"})
        error, = result.errors
        self.assertIsInstance(error, ValueMappingError)
        self.assertIsInstance(error.__cause__, ValueError)
        self.assertEqual(error.options["raw"], "abc")

    def testMappingFailureHintListsChoices(self):
        result, _ = run(Option("-m", mapper=choice("a", "b")), ["-m", "c"], names={"-m"}, valued={"-m"})
        self.assertIn("'a', 'b'", result.errors[0].hint)

    def testRepeatedOptionLeavesSecondOccurrence(self):
        result, arguments = run(Option("-v"), ["-v", "1", "-v", "2"], names={"-v"}, valued={"-v"})
        self.assertEqual(result.values, ("1",))
        self.assertEqual([(argument.text, argument.value) for argument in arguments], [("-v", "2")])

    def testPromptedValueIsMapped(self):
        prompter = ScriptedPrompter("42")
        result, _ = run(Option("-p", mapper=integer, necessity=Necessity.PROMPT, prompt="port: "), [], prompter=prompter)
        self.assertEqual(result.values, (42,))
        self.assertEqual(prompter.prompts, (("port: ", False),))

    def testMaskedPromptDoesNotEcho(self):
        prompter = ScriptedPrompter("hunter2")
        result, _ = run(Option("--password", necessity=Necessity.MASKED_PROMPT), [], prompter=prompter)
        self.assertEqual(result.values, ("hunter2",))
        self.assertEqual(prompter.prompts, (("VALUE: ", True),))

    def testPromptSkippedWhenGiven(self):
        prompter = ScriptedPrompter("unused")
        result, _ = run(Option("-p", necessity=Necessity.PROMPT), ["-p", "x"], names={"-p"}, valued={"-p"}, prompter=prompter)
        self.assertEqual(result.values, ("x",))
        self.assertEqual(prompter.prompts, ())


class TestOperandParsing(TestCase):
    """Operand.parse() and ArrayOperand.parse()."""

    def testOperandClaimsItsPosition(self):
        result, arguments = run(Operand(1), ["a", "b", "c"])
        self.assertEqual(result.values, ("b",))
        self.assertEqual([argument.text for argument in arguments], ["a", "c"])

    def testAbsentOperandIsMissing(self):
        operand = Operand(0)
        result, _ = run(operand, [])
        self.assertEqual(result.missing, (operand,))

    def testArrayClaimsEveryOperand(self):
        result, arguments = run(ArrayOperand(mapper=integer), ["1", "-v", "2"], names={"-v"})
        self.assertEqual(result.values, ((1, 2),))
        self.assertEqual([argument.text for argument in arguments], ["-v"])

    def testAbsentArrayDefaultsToEmptyTuple(self):
        result, _ = run(ArrayOperand(), [])
        self.assertEqual(result.values, ((),))

    def testArrayReportsEveryBadItem(self):
        result, _ = run(ArrayOperand(mapper=integer), ["1", "x", "y"])
        self.assertEqual(len(result.errors), 2)
        self.assertIs(result.values[0], Unset)

    def testPromptedArrayIsSplitOnWhitespace(self):
        result, _ = run(ArrayOperand(mapper=integer, necessity=Necessity.PROMPT), [], prompter=ScriptedPrompter("1 2  3"))
        self.assertEqual(result.values, ((1, 2, 3),))


if __name__ == "__main__":
    unittest.main()
