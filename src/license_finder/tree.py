from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Union

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE = "│   "
SPACE = "    "


@dataclass
class ReportTree:
    label: str
    nodes: List[Union[str, "ReportTree"]] = field(default_factory=list)


Node = Union[str, ReportTree]


def _draw(node: Node, lead: str, indent: str) -> Iterator[str]:
    if isinstance(node, ReportTree):
        label, children = node.label, node.nodes
    else:
        label, children = node, []

    first, *continued = label.split("\n")
    yield lead + first
    # Extra label lines stay aligned with the children of this node.
    continuation = indent + (PIPE if children else SPACE)
    for line in continued:
        yield continuation + line

    for index, child in enumerate(children):
        last = index == len(children) - 1
        yield from _draw(
            child,
            indent + (LAST_BRANCH if last else BRANCH),
            indent + (SPACE if last else PIPE),
        )


def render_tree(tree: Node) -> str:
    """Draw ``tree`` as an indented outline, one node per line.

    Children keep their input order and each line ends with a newline,
    including the last one.
    """

    return "\n".join(_draw(tree, "", "")) + "\n"
