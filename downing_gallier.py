"""
downing_gallier.py

Closure of attribute sets under implications, after Downing and Gallier.

An implication is a pair (premise, conclusion) of finite sets. The closure of
a set under a collection of implications is the least superset which contains
the conclusion of every implication whose premise it contains.

Instead of rescanning all implications until nothing changes, the implications
are indexed once:
- where_in_premise: attribute -> indices of implications whose premise has it
- premise_sizes: index -> size of that premise

Each closure call then keeps a counter of missing premise attributes per
implication and a queue of implications whose counter reached zero. Every
implication fires at most once, so a call costs O(total size of all premises
and conclusions).

The index is read-only after construction and may be shared between calls;
counters and queue belong to a single call.
"""

from collections import deque


# ============================================================================
# SECTION 1: IMPLICATIONS
# ============================================================================

class Implication:
    """
    An implication premise -> conclusion over opaque, hashable attributes.

    Premise and conclusion are stored as frozensets; they need not be disjoint.
    """

    def __init__(self, premise, conclusion):
        self.premise = frozenset(premise)
        self.conclusion = frozenset(conclusion)

    def __repr__(self):
        return f"Implication({self.to_string()!r})"

    def __str__(self):
        return self.to_string()

    def __hash__(self):
        return hash((self.premise, self.conclusion))

    def __eq__(self, other):
        if not isinstance(other, Implication):
            return False
        return self.premise == other.premise and self.conclusion == other.conclusion

    def holds_in(self, attributes):
        """True iff attributes respects this implication."""
        return not self.premise <= attributes or self.conclusion <= attributes

    def to_string(self):
        """
        Convert to string format: "a b -> c".

        Attributes are sorted by their string form.
        """
        def side(attributes):
            return " ".join(sorted(str(a) for a in attributes))
        return f"{side(self.premise)} -> {side(self.conclusion)}".strip()

    @classmethod
    def from_string(cls, string):
        """
        Parse an implication from "a b -> c d".

        Attributes are whitespace-separated strings; either side may be empty.
        """
        if string.count("->") != 1:
            raise ValueError(f"Invalid Implication format: {string}")
        premise, conclusion = string.split("->")
        return cls(premise.split(), conclusion.split())


def make_implication(premise, conclusion):
    """Create an implication from premise and conclusion."""
    return Implication(premise, conclusion)


def premise(implication):
    """Return the premise of an implication."""
    return implication.premise


def conclusion(implication):
    """Return the conclusion of an implication."""
    return implication.conclusion


def as_implication(thing):
    """
    Convert an Implication or a (premise, conclusion) pair to an Implication.
    """
    if isinstance(thing, Implication):
        return thing
    try:
        first, second = thing
    except (TypeError, ValueError):
        raise TypeError(f"Expected Implication or (premise, conclusion) pair, got {thing!r}") from None
    return Implication(first, second)


def parse_implications(strings):
    """
    Parse multiple implications from strings.

    Args:
        strings: list of implication strings

    Returns:
        list of Implication
    """
    return [Implication.from_string(s) for s in strings]


# ============================================================================
# SECTION 2: IMPLICATION GRAPH
# ============================================================================

class ImplicationGraph:
    """
    Precomputed index of a collection of implications.

    Attributes:
        implications: list of Implication, position = implication index
        where_in_premise: dict attribute -> list of implication indices
        premise_sizes: list of premise cardinalities
    """

    def __init__(self, implications):
        self.implications = [as_implication(impl) for impl in implications]
        self.where_in_premise = {}
        self.premise_sizes = []

        for index, impl in enumerate(self.implications):
            for attribute in impl.premise:
                self.where_in_premise.setdefault(attribute, []).append(index)
            self.premise_sizes.append(len(impl.premise))

    def __len__(self):
        return len(self.implications)

    def close(self, input_set):
        """Close input_set under the indexed implications."""
        return close_with_downing_gallier(self, input_set)


def implication_graph(implications):
    """Build the ImplicationGraph of a collection of implications."""
    return ImplicationGraph(implications)


# ============================================================================
# SECTION 3: CLOSURE
# ============================================================================

def close_with_downing_gallier(graph, input_set):
    """
    Close input_set under the implications indexed by graph.

    Args:
        graph: ImplicationGraph
        input_set: iterable of attributes

    Returns:
        frozenset, the least superset of input_set closed under the implications
    """
    result = set(input_set)
    where_in_premise = graph.where_in_premise

    missing = list(graph.premise_sizes)
    for attribute in result:
        for index in where_in_premise.get(attribute, ()):
            missing[index] -= 1

    queue = deque(index for index, count in enumerate(missing) if count == 0)

    while queue:
        index = queue.popleft()
        new = graph.implications[index].conclusion - result
        for attribute in new:
            for other in where_in_premise.get(attribute, ()):
                missing[other] -= 1
                if missing[other] == 0:
                    queue.append(other)
        result |= new

    return frozenset(result)


def clop_by_implications(implications):
    """
    Return the closure operator given by a collection of implications.

    The implication graph is built once and reused by every call.
    """
    graph = implication_graph(implications)

    def clop(input_set):
        return close_with_downing_gallier(graph, input_set)

    return clop


def close_under_implications(implications, input_set):
    """Close input_set under implications (one-shot form)."""
    return clop_by_implications(implications)(input_set)


def close_by_fixpoint_iteration(implications, input_set):
    """
    Close input_set under implications by rescanning until nothing changes.

    Quadratic in the number of implications; kept as a reference for
    close_with_downing_gallier.
    """
    implications = [as_implication(impl) for impl in implications]
    result = set(input_set)

    changed = True
    while changed:
        changed = False
        for impl in implications:
            if impl.premise <= result and not impl.conclusion <= result:
                result |= impl.conclusion
                changed = True

    return frozenset(result)
