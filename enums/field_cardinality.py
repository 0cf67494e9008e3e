from enum import Enum


class FieldKind(str, Enum):
    RELATION = "relation"   # Value holds catalog entry id(s) to be resolved
    SCALAR = "scalar"       # Value is shown as-is


class FieldCardinality(str, Enum):
    SINGLE = "single"
    MANY = "many"
