"""
=============================================================================
JSON PATCH (RFC 6902) FOR FLAT DOCUMENTS
=============================================================================

PATCH /api/users/:userId takes a list of operations applied in order to
the user's update document:

    [
        {"op": "replace", "path": "/firstName", "value": "Alice"},
        {"op": "test",    "path": "/login",     "value": "alice"},
        {"op": "remove",  "path": "/lastName"}
    ]

    {"login": "alice", "firstName": "A", "lastName": "Smith"}
                            │
                            ▼
    {"login": "alice", "firstName": "Alice", "lastName": null}

=============================================================================
SUPPORTED OPERATIONS
=============================================================================

    add / replace   set the property to "value"
    remove          reset the property to null
    test            fail unless the property equals "value"
    copy            set "path" to the value at "from"
    move            copy, then reset "from" to null

The target is a fixed set of properties, so "remove" cannot delete a key:
it clears it and validation afterwards decides if that is acceptable.

Paths name one top-level property ("/firstName"), matched
case-insensitively. Nested paths and unknown properties fail.

=============================================================================
TWO KINDS OF FAILURE
=============================================================================

    PatchDocument.decode()  body is not a patch document       → 400
    PatchDocument.apply_to() an operation cannot be applied     → 422

apply_to() works on a copy and stops at the first failing operation, so a
failed patch never leaves a half-updated document behind.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import copy


SUPPORTED_OPS = ("add", "remove", "replace", "move", "copy", "test")

_MISSING = object()


class PatchError(Exception):
    """
    A patch document that cannot be decoded or applied.

    Attributes:
        path: The operation path at fault ("" when the document as a
              whole is malformed). Used as the key of the 422 error map.
    """

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


@dataclass
class PatchOperation:
    op: str
    path: str
    value: Any = None
    from_: Optional[str] = None


@dataclass
class PatchDocument:
    """An ordered list of patch operations."""

    operations: List[PatchOperation] = field(default_factory=list)

    @classmethod
    def decode(cls, data: Any) -> "PatchDocument":
        """
        Build a document from decoded JSON.

        Raises:
            PatchError: If data is not a list of well-formed operations.
        """
        if not isinstance(data, list):
            raise PatchError("A patch document must be a JSON array of operations")

        operations = []
        for index, raw in enumerate(data):
            if not isinstance(raw, dict):
                raise PatchError(f"Operation {index} is not an object")

            op = raw.get("op")
            path = raw.get("path")

            if not isinstance(op, str) or op.lower() not in SUPPORTED_OPS:
                raise PatchError(f"Operation {index}: unsupported op {op!r}")
            if not isinstance(path, str):
                raise PatchError(f"Operation {index}: 'path' must be a string")

            op = op.lower()
            value = raw.get("value", _MISSING)
            from_ = raw.get("from")

            if op in ("add", "replace", "test") and value is _MISSING:
                raise PatchError(f"Operation {index}: '{op}' requires 'value'", path)
            if op in ("copy", "move") and not isinstance(from_, str):
                raise PatchError(f"Operation {index}: '{op}' requires 'from'", path)

            operations.append(PatchOperation(
                op=op,
                path=path,
                value=None if value is _MISSING else value,
                from_=from_,
            ))

        return cls(operations)

    def apply_to(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply every operation to a copy of document.

        Returns:
            The patched copy. The input is never modified.

        Raises:
            PatchError: On the first operation that cannot be applied.
        """
        result = copy.deepcopy(document)

        for operation in self.operations:
            target = _resolve(result, operation.path)

            if operation.op in ("add", "replace"):
                result[target] = operation.value

            elif operation.op == "remove":
                result[target] = None

            elif operation.op == "test":
                if result[target] != operation.value:
                    raise PatchError(
                        f"The current value {result[target]!r} at path '{operation.path}' "
                        f"is not equal to the test value {operation.value!r}",
                        operation.path,
                    )

            elif operation.op in ("copy", "move"):
                source = _resolve(result, operation.from_)
                value = copy.deepcopy(result[source])
                if operation.op == "move" and source != target:
                    result[source] = None
                result[target] = value

        return result

    def __len__(self) -> int:
        return len(self.operations)


def _resolve(document: Dict[str, Any], path: str) -> str:
    """
    Map "/firstName" (any case) to the document key it names.

    Raises:
        PatchError: For nested, empty or unknown paths.
    """
    name = path[1:] if path.startswith("/") else path
    if not name or "/" in name:
        raise PatchError(f"The path '{path}' does not name a property", path)

    name = name.replace("~1", "/").replace("~0", "~")
    for key in document:
        if key.lower() == name.lower():
            return key

    raise PatchError(f"The target location specified by path '{path}' was not found", path)
