"""
Go identifier naming, matching what protoc-gen-go produces.

The field-number table has to use exactly the names the generated
message code uses, so these follow protogen's rules rather than any
general-purpose camel-casing.
"""

from __future__ import annotations

from collections.abc import Iterable

from google.protobuf.descriptor_pb2 import DescriptorProto

# Method names of a generated message; fields may not shadow them.
RESERVED_MESSAGE_NAMES = frozenset({
    "Reset",
    "String",
    "ProtoMessage",
    "Marshal",
    "Unmarshal",
    "ExtensionRangeArray",
    "ExtensionMap",
    "Descriptor",
})


def _is_lower(c: str) -> bool:
    return "a" <= c <= "z"


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def go_camel_case(s: str) -> str:
    """Camel-case a protobuf name into a Go identifier.

    ``foo_bar`` → ``FooBar``, ``Outer.Inner`` → ``Outer_Inner``,
    ``_x`` → ``XX``.  A lowercase letter after ``.`` or ``_`` starts
    a new word; the separator itself is dropped.
    """
    out: list[str] = []
    i = 0
    n = len(s)
    while i < n:
        c = s[i]
        if c == "." and i + 1 < n and _is_lower(s[i + 1]):
            pass
        elif c == ".":
            out.append("_")
        elif c == "_" and (i == 0 or s[i - 1] == "."):
            out.append("X")
        elif c == "_" and i + 1 < n and _is_lower(s[i + 1]):
            pass
        elif _is_digit(c):
            out.append(c)
        else:
            out.append(c.upper() if _is_lower(c) else c)
            while i + 1 < n and _is_lower(s[i + 1]):
                i += 1
                out.append(s[i])
        i += 1
    return "".join(out)


class _NameScope:
    """Names already taken inside one generated message type."""

    def __init__(self, reserved: Iterable[str] = RESERVED_MESSAGE_NAMES):
        self._used: dict[str, bool] = dict.fromkeys(reserved, True)

    def unique(self, name: str, has_getter: bool) -> str:
        while self._used.get(name) or (has_getter and self._used.get("Get" + name)):
            name += "_"
        self._used[name] = True
        self._used["Get" + name] = has_getter
        return name


def field_go_names(message: DescriptorProto) -> list[str]:
    """Go names of ``message``'s fields, in declaration order.

    Conflicts with reserved method names, with ``Get``-prefixed getters,
    and with oneof wrapper names are resolved by appending ``_``.
    """
    scope = _NameScope()
    seen_oneofs: set[int] = set()
    names: list[str] = []
    for field in message.field:
        names.append(scope.unique(go_camel_case(field.name), has_getter=True))
        if field.HasField("oneof_index") and field.oneof_index not in seen_oneofs:
            seen_oneofs.add(field.oneof_index)
            oneof = message.oneof_decl[field.oneof_index]
            scope.unique(go_camel_case(oneof.name), has_getter=False)
    return names
