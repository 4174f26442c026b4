"""
Abstraction de requêtes sur le HTML
NodeSet: ensemble ordonné de noeuds BeautifulSoup interrogé par sélecteurs CSS
"""

from typing import Iterable, Iterator, List, Optional, Union
from bs4 import BeautifulSoup, Tag


class NodeSet:
    """
    Ensemble de noeuds sans doublons, dans l'ordre du document.

    Une sélection vide n'est jamais une erreur: text() renvoie '' et
    attr() la valeur par défaut.
    """

    __slots__ = ("_nodes",)

    def __init__(self, nodes: Iterable[Tag] = ()):
        seen = set()
        unique: List[Tag] = []
        for node in nodes:
            if id(node) not in seen:
                seen.add(id(node))
                unique.append(node)
        self._nodes = unique

    @classmethod
    def parse(cls, html: Union[str, bytes]) -> "NodeSet":
        return cls([BeautifulSoup(html or "", "lxml")])

    def __len__(self) -> int:
        return len(self._nodes)

    def __bool__(self) -> bool:
        return bool(self._nodes)

    def __iter__(self) -> Iterator["NodeSet"]:
        for node in self._nodes:
            yield NodeSet([node])

    def __repr__(self) -> str:
        return f"NodeSet({len(self._nodes)} nodes)"

    @property
    def nodes(self) -> List[Tag]:
        return list(self._nodes)

    def find(self, selector: str) -> "NodeSet":
        """Descendants correspondant au sélecteur, pour tous les noeuds"""
        found: List[Tag] = []
        for node in self._nodes:
            found.extend(node.select(selector))
        return NodeSet(found)

    def first(self) -> "NodeSet":
        return NodeSet(self._nodes[:1])

    def last(self) -> "NodeSet":
        return NodeSet(self._nodes[-1:])

    def eq(self, index: int) -> "NodeSet":
        if -len(self._nodes) <= index < len(self._nodes):
            return NodeSet([self._nodes[index]])
        return NodeSet()

    def next(self, selector: Optional[str] = None) -> "NodeSet":
        """Elément frère suivant immédiat, filtré par le sélecteur éventuel"""
        siblings = []
        for node in self._nodes:
            sibling = node.find_next_sibling()
            if sibling is None:
                continue
            if selector is None or sibling.css.match(selector):
                siblings.append(sibling)
        return NodeSet(siblings)

    def text(self) -> str:
        """Texte concaténé de tous les noeuds, sans espaces en bordure"""
        return "".join(node.get_text() for node in self._nodes).strip()

    def attr(self, name: str, default: str = "") -> str:
        """Attribut du premier noeud"""
        if not self._nodes:
            return default
        value = self._nodes[0].get(name)
        if value is None:
            return default
        if isinstance(value, list):
            return " ".join(value)
        return value

    def has_class(self, name: str) -> bool:
        return any(name in (node.get("class") or []) for node in self._nodes)

    def is_checked(self) -> bool:
        return any(node.has_attr("checked") for node in self._nodes)
