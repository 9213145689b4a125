from .markers import Ignore, DeepCompare
from .errors import *
from .members import MemberKind, MemberDescriptor, extract_members, element_type_of
from .hashing import (HashCombiner, combine, hash_value, hash_sequence,
                      is_nan, nan_equal)
from .synthesis import synthesize_predicate, synthesize_hasher, sequence_equal
from .comparer import (ValueObjectComparer, StructComparer, comparer_for,
                       struct_comparer_for)
from .value_object import ValueObject, value_object, struct_value
from .config import Settings, get_settings
