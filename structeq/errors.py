from __future__ import annotations

__all__ = ['ComparerError', 'ComparerConfigurationError', 'MemberError',
           'SequenceConfigurationError', 'UnsupportedMemberTypeError',
           'ComparerMisuseError']


class ComparerError(Exception):
    pass


class ComparerConfigurationError(ComparerError, TypeError):
    """The type (or one of its members) is set up in a way that we can't
    build a comparer for. Raised once, when the type is first used."""


class MemberError(ComparerError):
    def __init__(self, msg: str, owner: type, member: str):
        super().__init__(msg)
        self.msg = msg
        self.owner = owner
        self.member = member

    def __reduce__(self):
        # Default one only passes self.args (just the message) to __init__
        return type(self), (self.msg, self.owner, self.member)

    def __str__(self):
        return f'{super().__str__()}\n{self.describe_member(self.owner, self.member)}'

    @classmethod
    def describe_member(cls, owner: type, member: str) -> str:
        return f'  in member {member!r} of {owner.__module__}.{owner.__qualname__}'


class SequenceConfigurationError(MemberError, ComparerConfigurationError):
    """A member marked ``DeepCompare`` has no discoverable element type"""


class UnsupportedMemberTypeError(MemberError, TypeError):
    """A member's type has no usable equality (or hash) of its own"""


class ComparerMisuseError(ComparerError, TypeError):
    """The comparer object itself was used where a value was expected,
    e.g. ``hash(comparer)`` instead of ``comparer.hash_of(value)``."""
