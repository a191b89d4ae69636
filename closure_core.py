"""
closure_core.py

Core data structures and operations for enumerating closed sets.

This module implements Ganter's Next-Closure algorithm over a finite ground
set equipped with a closure operator:
- The ground set is an ordered sequence; positions define the basic order
- Closed sets are enumerated in lectic order, each exactly once
- Closure operators are plain callables (monotone, extensive, idempotent)

Closed sets are returned as frozensets. The closure operator axioms are a
caller contract and are never checked.
"""

import sys
from functools import cmp_to_key
from itertools import product, takewhile
import networkx as nx
from tqdm import tqdm


# ============================================================================
# SECTION 0: DEFAULTS
# ============================================================================

BASE_ORDER_STRATEGIES = ('improve', 'as_given')

# Global default (module-level)
_base_order_strategy = None


def get_base_order_strategy():
    """Get the strategy used to order unordered ground sets."""
    if _base_order_strategy is None:
        return 'improve'
    return _base_order_strategy


def set_base_order_strategy(name):
    """
    Set the strategy used to order unordered ground sets.

    Args:
        name: 'improve' (sort with improve_basic_order) or
              'as_given' (keep the set's iteration order)
    """
    global _base_order_strategy
    if name not in BASE_ORDER_STRATEGIES:
        raise ValueError(
            f"Unknown base order strategy: {name} (valid: {', '.join(BASE_ORDER_STRATEGIES)})"
        )
    _base_order_strategy = name


def reset_base_order_strategy():
    """Reset to default."""
    global _base_order_strategy
    _base_order_strategy = None


# ============================================================================
# SECTION 1: SET ALGEBRA
# ============================================================================

def cross_product(*sets):
    """
    Return the cross product of the given sets as a set of tuples.

    With no arguments this is {()}, the identity of the product. Any empty
    input gives the empty set.
    """
    return set(product(*sets))


def disjoint_union(*sets):
    """
    Compute the disjoint union of sets.

    Every element of the i-th set is tagged as (element, i), so equal
    elements from different sets stay apart.
    """
    result = set()
    for index, s in enumerate(sets):
        result.update((x, index) for x in s)
    return result


def set_of_range(start, end=None, step=1):
    """Return the set of numbers from start up to (not including) end."""
    if end is None:
        start, end = 0, start
    return set(range(start, end, step))


def transitive_closure(pairs):
    """
    Compute the transitive closure of a set of pairs.

    Only pairs added in the previous round are joined against the input
    relation, until a round adds nothing.

    Args:
        pairs: iterable of (x, y) pairs

    Returns:
        set of (x, y) tuples
    """
    pairs = {tuple(p) for p in pairs}

    successors = {}
    for (z, y) in pairs:
        successors.setdefault(z, set()).add(y)

    closure = set(pairs)
    frontier = set(pairs)
    while frontier:
        new_pairs = set()
        for (x, z) in frontier:
            for y in successors.get(z, ()):
                if (x, y) not in closure:
                    new_pairs.add((x, y))
        closure |= new_pairs
        frontier = new_pairs

    return closure


def graph_of_function(relation, source, target):
    """Return True iff relation is the graph of a function from source to target."""
    relation = {tuple(p) for p in relation}
    return ({x for (x, _) in relation} == set(source) and
            {y for (_, y) in relation} <= set(target) and
            len(relation) == len(set(source)))


# ============================================================================
# SECTION 2: LECTIC ORDER
# ============================================================================

def subelts(G, i, positions=None):
    """
    Return the elements of G strictly before i.

    If i does not occur in G the whole sequence is returned.

    Args:
        G: ground sequence
        i: pivot element
        positions: optional dict element -> index in G, used to slice
                   instead of scanning
    """
    if positions is not None:
        if i in positions:
            return G[:positions[i]]
        return list(G)
    return list(takewhile(lambda x: x != i, G))


def lectic_lt_i(G, i, A, B, positions=None):
    """
    Lectic < at position i: B branches off from A exactly at i.

    True iff i is in B, i is not in A, and A and B agree on every element
    before i in G.
    """
    if i not in B or i in A:
        return False
    return all((j in A) == (j in B) for j in subelts(G, i, positions))


def lectic_lt(G, A, B, positions=None):
    """
    Lectic order on subsets of G.

    The order of elements in G is interpreted as the increasing basic order.
    """
    return any(lectic_lt_i(G, i, A, B, positions) for i in G)


def oplus(G, clop, A, i, positions=None):
    """
    The oplus step of Next-Closure.

    Returns clop({j in A : j before i} | {i}) as a frozenset.
    """
    truncated = {j for j in subelts(G, i, positions) if j in A}
    truncated.add(i)
    return frozenset(clop(frozenset(truncated)))


def improve_basic_order(base, clop):
    """
    Reorder base so that Next-Closure rejects candidates sooner.

    Elements with larger singleton closures come first; incomparable
    closures are ordered lectically with respect to base. Elements with
    equal closures keep their relative order.

    Args:
        base: iterable of elements
        clop: closure operator

    Returns:
        list with the elements of base
    """
    base = list(base)
    closures = {}

    def singleton_closure(x):
        if x not in closures:
            closures[x] = frozenset(clop(frozenset([x])))
        return closures[x]

    def before(x, y):
        cx, cy = singleton_closure(x), singleton_closure(y)
        return cy <= cx or (not cx <= cy and lectic_lt(base, cy, cx))

    def compare(x, y):
        if singleton_closure(x) == singleton_closure(y):
            return 0
        if before(x, y):
            return -1
        if before(y, x):
            return 1
        return 0

    return sorted(base, key=cmp_to_key(compare))


# ============================================================================
# SECTION 3: NEXT CLOSURE
# ============================================================================

def _ground_sequence(G, clop):
    """Fix the basic order of G and reject duplicate elements."""
    if isinstance(G, (set, frozenset)):
        if get_base_order_strategy() == 'improve':
            return improve_basic_order(G, clop)
        return list(G)

    G = list(G)
    if len(set(G)) != len(G):
        raise ValueError(f"Ground sequence contains duplicate elements: {G}")
    return G


def _next_closed_set(predicate, G, clop, A, positions):
    # Fresh per call, keyed by pivot
    candidates = {}

    for i in reversed(G):
        if i in A:
            continue
        if i not in candidates:
            candidates[i] = oplus(G, clop, A, i, positions)
        B = candidates[i]
        if lectic_lt_i(G, i, A, B, positions) and predicate(B):
            return B

    return None


def next_closed_set_in_family(predicate, G, clop, A):
    """
    Compute the next closed set after A which satisfies predicate.

    predicate has to describe a family F compatible with the truncation step:
    if A is in F and i is in G, then clop(A restricted to the elements before
    i) is in F. Otherwise members of F may be skipped silently.

    Args:
        predicate: callable on frozensets
        G: ground sequence (order = basic order)
        clop: closure operator
        A: current closed set

    Returns:
        frozenset, or None if A is the last member of the family
    """
    G = list(G)
    positions = {x: k for k, x in enumerate(G)}
    return _next_closed_set(predicate, G, clop, frozenset(A), positions)


def next_closed_set(G, clop, A):
    """
    Compute the next closed set after A with the Next-Closure algorithm.

    The order of elements in G, interpreted as increasing, is taken to be the
    basic order.

    Returns:
        frozenset, or None if A is lectically maximal
    """
    return next_closed_set_in_family(lambda _: True, G, clop, A)


class NextClosure:
    """
    Iterator over the closed sets of a closure operator in lectic order.

    The iterator is single-pass: it holds the current closed set and advances
    from it, so it cannot be restarted or replayed.
    """

    def __init__(self, G, clop, initial=(), predicate=None, verbose=False):
        """
        Set up an enumeration.

        Args:
            G: ground sequence, or a set (ordered with improve_basic_order)
            clop: closure operator
            initial: first set; the enumeration starts at clop(initial)
            predicate: optional family restriction (see next_closed_set_in_family)
            verbose: If True, print progress to stderr
        """
        self.ground = _ground_sequence(G, clop)
        self.clop = clop
        self.predicate = predicate if predicate is not None else (lambda _: True)
        self.verbose = verbose
        self.current = None
        self.count = 0

        self._positions = {x: k for k, x in enumerate(self.ground)}
        self._pending = frozenset(clop(frozenset(initial)))
        self._exhausted = False

    def advance(self):
        """
        Move to the next closed set.

        Returns:
            frozenset, or None once the enumeration is over
        """
        if self._exhausted:
            return None

        if self._pending is not None:
            following, self._pending = self._pending, None
        else:
            following = _next_closed_set(self.predicate, self.ground, self.clop,
                                         self.current, self._positions)

        if following is None:
            self._exhausted = True
            if self.verbose:
                print(f"\nEnumerated {self.count} closed sets", file=sys.stderr)
            return None

        self.current = following
        self.count += 1
        if self.verbose:
            print(f"{self.count}: {format_set(following, self.ground)}",
                  file=sys.stderr, end="\r")
        return following

    def stop(self):
        """End the enumeration; later calls to advance() return None."""
        self._pending = None
        self._exhausted = True

    def __iter__(self):
        return self

    def __next__(self):
        following = self.advance()
        if following is None:
            raise StopIteration
        return following


def all_closed_sets(G, clop, initial=(), verbose=False):
    """
    Enumerate all closed sets of clop on G in lectic order.

    Args:
        G: ground sequence, or a set (ordered with improve_basic_order)
        clop: closure operator
        initial: the first closed set is clop(initial)
        verbose: If True, print progress to stderr

    Returns:
        NextClosure iterator of frozensets
    """
    return NextClosure(G, clop, initial, verbose=verbose)


def all_closed_sets_in_family(predicate, G, clop, initial=(), verbose=False):
    """
    Enumerate all closed sets of clop on G which satisfy predicate.

    The enumeration starts at the lectically first closed set, not before
    clop(initial), that satisfies predicate. See next_closed_set_in_family
    for the condition predicate has to meet.

    Returns:
        NextClosure iterator of frozensets (empty if no closed set qualifies)
    """
    ground = _ground_sequence(G, clop)
    start = next((closed for closed in all_closed_sets(ground, clop, initial)
                  if predicate(closed)), None)

    if start is None:
        enumeration = NextClosure(ground, clop, initial, predicate=predicate, verbose=verbose)
        enumeration.stop()
        return enumeration
    return NextClosure(ground, clop, start, predicate=predicate, verbose=verbose)


def subsets(s):
    """Return all subsets of s as a list of frozensets."""
    return list(all_closed_sets(list(s), lambda x: x))


def format_set(closed_set, ground=None):
    """
    Convert a set to a readable string, e.g. "{3, 2, 1}".

    Elements are listed in ground order when ground is given.
    """
    if ground is not None:
        elements = [x for x in ground if x in closed_set]
    else:
        elements = sorted(closed_set, key=repr)
    return "{" + ", ".join(str(x) for x in elements) + "}"


# ============================================================================
# SECTION 4: POSET CONSTRUCTION
# ============================================================================

class ClosedSetPoset:
    """
    The closed sets of a closure operator, ordered by inclusion.

    Wraps a NetworkX DiGraph whose nodes are indices into closed_sets and
    whose edges i -> j mean closed_sets[i] is a proper subset of closed_sets[j].
    """

    def __init__(self, closed_sets, ground=None, verbose=False):
        """
        Build the poset.

        Args:
            closed_sets: iterable of sets (e.g. from all_closed_sets)
            ground: optional ground sequence, used for display only
            verbose: If True, print progress to stderr
        """
        self.closed_sets = [frozenset(s) for s in closed_sets]
        self.ground = list(ground) if ground is not None else None

        self.graph = nx.DiGraph()
        for i in range(len(self.closed_sets)):
            self.graph.add_node(i)

        if verbose:
            print("Building inclusion poset...", file=sys.stderr)
        indices = range(len(self.closed_sets))
        for i in (tqdm(indices) if verbose else indices):
            for j in range(len(self.closed_sets)):
                if i != j and self.closed_sets[i] < self.closed_sets[j]:
                    self.graph.add_edge(i, j)

        if verbose:
            print(f"Poset built: {len(self.closed_sets)} nodes, {self.graph.number_of_edges()} edges",
                  file=sys.stderr)

    def __len__(self):
        return len(self.closed_sets)

    def transitive_reduction(self):
        """
        Return the transitive reduction (Hasse diagram) of this poset.

        Returns:
            ClosedSetPoset with reduced graph
        """
        reduced = ClosedSetPoset.__new__(ClosedSetPoset)
        reduced.closed_sets = self.closed_sets
        reduced.ground = self.ground
        reduced.graph = nx.transitive_reduction(self.graph)
        return reduced

    def get_closed_set(self, node_id):
        """Get the closed set associated with a node ID"""
        return self.closed_sets[node_id]

    def predecessors(self, node_id):
        """Get predecessor node IDs (smaller closed sets)"""
        return list(self.graph.predecessors(node_id))

    def successors(self, node_id):
        """Get successor node IDs"""
        return list(self.graph.successors(node_id))

    def bottom(self):
        """Return the node ID of the least closed set."""
        if not self.closed_sets:
            raise ValueError("Cannot compute bottom of empty poset")
        return min(range(len(self.closed_sets)), key=lambda i: len(self.closed_sets[i]))

    def top(self):
        """Return the node ID of the greatest closed set."""
        if not self.closed_sets:
            raise ValueError("Cannot compute top of empty poset")
        return max(range(len(self.closed_sets)), key=lambda i: len(self.closed_sets[i]))

    def label(self, node_id):
        """Readable label of a node."""
        return format_set(self.closed_sets[node_id], self.ground)


def closed_set_poset(G, clop, initial=(), verbose=False):
    """
    Enumerate the closed sets of clop on G and order them by inclusion.

    Returns:
        ClosedSetPoset
    """
    enumeration = all_closed_sets(G, clop, initial, verbose=verbose)
    closed_sets = list(enumeration)
    return ClosedSetPoset(closed_sets, ground=enumeration.ground, verbose=verbose)
