import unittest
from dataclasses import dataclass
from typing import Annotated, Any, ClassVar, Optional, Sequence

from structeq import (ComparerConfigurationError, DeepCompare, Ignore,
                      MemberKind, element_type_of, extract_members)
from structeq.errors import SequenceConfigurationError
from structeq.markers import has_marker
from structeq.members import unwrap_type
from test.samples import (SomeObject, SomeObjectWithCollection, Temperature,
                              Unit, NestedValueObject)


class Base:
    first: int
    _private: int
    shared: str
    LIMIT: ClassVar[int] = 5

    @property
    def computed(self) -> float:
        return 1.0

    @property
    def _hidden(self) -> int:
        return 0


class Derived(Base):
    second: bytes
    shared: Annotated[str, Ignore]  # Redefined: keeps position, new marker

    @property
    def more(self):
        return None


class WriteOnly:
    value = property(None, lambda self, v: None)


class NoMembers:
    def __init__(self, x):
        self.x = x
        self._y = x


@dataclass
class OnlyIgnored:
    scratch: Annotated[int, Ignore]


@dataclass
class BadSequence:
    name: Annotated[str, DeepCompare]


@dataclass
class BothMarkers:
    items: Annotated[list[int], DeepCompare, Ignore]


class TestExtractMembers(unittest.TestCase):
    def test_dataclass_field_order(self):
        members = extract_members(SomeObject)
        self.assertEqual(['name', 'age', 'not_used'], [m.name for m in members])

    def test_dataclass_classification(self):
        name, age, not_used = extract_members(SomeObject)
        self.assertIs(MemberKind.PLAIN, name.kind)
        self.assertIs(str, name.declared_type)
        self.assertTrue(name.nullable)
        self.assertFalse(name.is_value_kind)
        self.assertIs(MemberKind.PLAIN, age.kind)
        self.assertTrue(age.is_value_kind)
        self.assertIs(MemberKind.IGNORED, not_used.kind)
        self.assertFalse(not_used.is_compared)

    def test_sequence_member(self):
        hobbies = extract_members(SomeObjectWithCollection)[2]
        self.assertIs(MemberKind.SEQUENCE, hobbies.kind)
        self.assertEqual(str | None, hobbies.element_type)
        self.assertEqual(list[str | None], hobbies.declared_type)
        self.assertTrue(hobbies.nullable)

    def test_mro_order(self):
        # Base-most class first, annotations before properties in each class
        self.assertEqual(['first', 'shared', 'computed', 'second', 'more'],
                         [m.name for m in extract_members(Derived)])

    def test_most_derived_definition_wins(self):
        by_name = {m.name: m for m in extract_members(Derived)}
        self.assertIs(MemberKind.IGNORED, by_name['shared'].kind)
        self.assertIs(float, by_name['computed'].declared_type)
        self.assertIs(Any, by_name['more'].declared_type)

    def test_skips_private_and_classvar(self):
        names = {m.name for m in extract_members(Derived)}
        self.assertNotIn('_private', names)
        self.assertNotIn('_hidden', names)
        self.assertNotIn('LIMIT', names)

    def test_properties(self):
        degrees, unit, note = extract_members(Temperature)
        self.assertEqual(('degrees', float, MemberKind.PLAIN),
                         (degrees.name, degrees.declared_type, degrees.kind))
        self.assertTrue(degrees.is_nan_aware)
        self.assertIs(Unit, unit.declared_type)
        self.assertTrue(unit.is_value_kind)
        self.assertIs(MemberKind.IGNORED, note.kind)

    def test_write_only_property(self):
        with self.assertRaises(ComparerConfigurationError):
            extract_members(WriteOnly)

    def test_no_members(self):
        with self.assertRaises(ComparerConfigurationError) as ctx:
            extract_members(NoMembers)
        self.assertIn('NoMembers has no members', str(ctx.exception))

    def test_only_ignored_members(self):
        members = extract_members(OnlyIgnored)
        self.assertEqual(['scratch'], [m.name for m in members])
        self.assertFalse(members[0].is_compared)

    def test_not_a_class(self):
        with self.assertRaises(ComparerConfigurationError):
            extract_members(SomeObject(name='Jefke', age=43))  # noqa

    def test_sequence_without_element_type(self):
        with self.assertRaises(SequenceConfigurationError) as ctx:
            extract_members(BadSequence)
        self.assertIs(BadSequence, ctx.exception.owner)
        self.assertEqual('name', ctx.exception.member)
        self.assertIsInstance(ctx.exception, ComparerConfigurationError)

    def test_ignore_wins(self):
        self.assertIs(MemberKind.IGNORED, extract_members(BothMarkers)[0].kind)

    def test_repeatable(self):
        self.assertEqual(extract_members(NestedValueObject),
                         extract_members(NestedValueObject))

    def test_unresolvable_annotation(self):
        @dataclass
        class Local:
            thing: 'DoesNotExist'  # noqa: F821

        with self.assertRaises(ComparerConfigurationError):
            extract_members(Local)


class TestElementType(unittest.TestCase):
    def test_homogeneous_tuple(self):
        self.assertIs(int, element_type_of(tuple[int, ...]))

    def test_first_type_param(self):
        self.assertIs(str, element_type_of(list[str]))
        self.assertIs(float, element_type_of(Sequence[float]))
        self.assertIs(int, element_type_of(tuple[int, str]))

    def test_strips_optional_and_annotated(self):
        self.assertIs(str, element_type_of(Optional[list[str]]))
        self.assertIs(str, element_type_of(Annotated[list[str], DeepCompare]))

    def test_not_a_sequence(self):
        self.assertIsNone(element_type_of(str))
        self.assertIsNone(element_type_of(list))
        self.assertIsNone(element_type_of(int))
        self.assertIsNone(element_type_of(tuple[()]))

    def test_unordered_not_a_sequence(self):
        self.assertIsNone(element_type_of(set[int]))
        self.assertIsNone(element_type_of(frozenset[int]))
        self.assertIsNone(element_type_of(dict[str, int]))


class TestUnwrap(unittest.TestCase):
    def test_optional(self):
        self.assertEqual((int, (), True), unwrap_type(Optional[int]))
        self.assertEqual((int, (), True), unwrap_type(int | None))

    def test_annotated_inside_optional(self):
        self.assertEqual((int, (Ignore,), True),
                         unwrap_type(Optional[Annotated[int, Ignore]]))

    def test_multi_union_kept(self):
        tp, _, nullable = unwrap_type(int | str | None)
        self.assertTrue(nullable)
        self.assertEqual(int | str, tp)

    def test_has_marker(self):
        self.assertTrue(has_marker((Ignore,), Ignore))
        self.assertTrue(has_marker(('doc', Ignore()), Ignore))
        self.assertFalse(has_marker((DeepCompare,), Ignore))


if __name__ == '__main__':
    unittest.main()
