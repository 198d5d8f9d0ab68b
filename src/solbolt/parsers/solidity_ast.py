"""
Helpers over the compiler's JSON AST (``sources[file].ast``).

Only two things are read from the AST: the ContractDefinition range, whose
bookkeeping instructions are excluded from the mapping, and the
FunctionDefinition nodes used to name function-level gas.
"""

from collections import deque
from dataclasses import dataclass
from typing import Iterator, List, Optional

from solbolt.core.mapping import SourceRange
from solbolt.utils.exceptions import MalformedInputError

DATA_LOCATIONS = (" storage", " memory", " calldata")


def iter_nodes(ast: dict) -> Iterator[dict]:
    """Breadth-first walk over ``nodes`` and the other child containers of the AST."""
    if not isinstance(ast, dict):
        return
    queue = deque([ast])
    seen = set()
    while queue:
        node = queue.popleft()
        if id(node) in seen:
            continue
        seen.add(id(node))
        yield node
        for value in node.values():
            if isinstance(value, dict) and "nodeType" in value:
                queue.append(value)
            elif isinstance(value, list):
                queue.extend(v for v in value if isinstance(v, dict) and "nodeType" in v)


def _node_range(node: dict) -> SourceRange:
    src = node.get("src")
    path = f"ast.{node.get('nodeType', '?')}.src"
    if not src:
        raise MalformedInputError(
            f"{node.get('nodeType', 'AST node')} has no src attribute",
            path=path,
        )
    return SourceRange.from_src(src, path)


def find_contract_definition(ast: dict, name: Optional[str] = None) -> Optional[SourceRange]:
    """
    Locate the ContractDefinition node and return its source range.

    When ``name`` is given only the node with that name matches; otherwise
    the first ContractDefinition in breadth-first order is used.
    """
    for node in iter_nodes(ast):
        if node.get("nodeType") != "ContractDefinition":
            continue
        if name is None or node.get("name") == name:
            return _node_range(node)
    return None


@dataclass(frozen=True)
class FunctionDefinition:
    """A function, constructor, fallback or receive definition found in the AST."""
    name: str
    kind: str
    visibility: str
    source_range: SourceRange
    parameter_types: tuple

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.parameter_types)})"

    @property
    def is_externally_callable(self) -> bool:
        return self.kind == "function" and self.visibility in ("public", "external")


def _canonical_type(parameter: dict) -> str:
    type_string = (parameter.get("typeDescriptions") or {}).get("typeString", "")
    for location in DATA_LOCATIONS:
        if type_string.endswith(location):
            type_string = type_string[: -len(location)]
    if type_string.startswith("contract "):
        return "address"
    if type_string.startswith("enum "):
        return "uint8"
    return type_string


def find_function_definitions(ast: dict) -> List[FunctionDefinition]:
    functions = []
    for node in iter_nodes(ast):
        if node.get("nodeType") != "FunctionDefinition":
            continue
        kind = node.get("kind", "function")
        name = node.get("name") or kind
        parameters = (node.get("parameters") or {}).get("parameters", [])
        functions.append(FunctionDefinition(
            name=name,
            kind=kind,
            visibility=node.get("visibility", ""),
            source_range=_node_range(node),
            parameter_types=tuple(_canonical_type(p) for p in parameters),
        ))
    return functions
