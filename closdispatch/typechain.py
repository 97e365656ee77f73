# -*- coding: utf-8; -*-
"""Specificity chains: which type tags a runtime value can be dispatched on.

For each argument of a call, the dispatcher needs the list of type tags the
argument matches, from most to least specific. We call this the *type chain*
of the value::

    class Animal: ...
    class Dog(Animal): ...

    chain_for(Dog()).tags   # -> ("mymodule.Dog", "mymodule.Animal", "*")
    chain_for(42).tags      # -> ("int", "*")

Built-in values get just their own type name, followed by the wildcard.
Everything else is asked from an *introspector*, a callable that describes the
concrete type, its ancestors and its interfaces. The default one, `describe_type`,
reads the MRO. The classes along the first-base line of inheritance, and all
classes that are not abstract base classes, are ancestors. The remaining
abstract base classes (anything built on `abc.ABCMeta`, which includes
`typing.Protocol` classes) are interfaces::

    class IA(ABC): ...
    class IB(ABC): ...
    class CA(IA, IB): ...   # IA and IB are peer interfaces

    class Animal(ABC): ...
    class Mammal(Animal): ...  # Mammal, then Animal, are ancestors of Dog
    class Dog(Mammal): ...

An interface that extends another interface is more specific than it.
"""

__all__ = ["wildcard", "TypeChain", "TypeDescription",
           "type_name", "isinterface", "describe_type", "chain_for"]

from collections import namedtuple
import abc
import typing

wildcard = "*"

TypeChain = namedtuple("TypeChain", ["tags", "tiers"])
TypeChain.__doc__ = """Type chain of one value.

`tags`: tuple of str, most specific first, always ending in `wildcard`.
`tiers`: tuple of int, the specificity tier of each tag.

Tags that share a tier are peers: e.g. two unrelated interfaces of a class are
on the same tier, since neither is more specific than the other. The tiers are
what the dispatch policy looks at when deciding whether two `primary` methods
are tied.
"""

TypeDescription = namedtuple("TypeDescription", ["name", "ancestors", "interfaces", "interface_ranks"],
                             defaults=(None,))
TypeDescription.__doc__ = """What an introspector reports about the type of a value.

`name`: str, the concrete type name.
`ancestors`: sequence of str, ancestor type names, nearest first.
`interfaces`: sequence of str, implemented interface names, in declaration order.
`interface_ranks`: sequence of int, one per interface, or `None` (all 0). Rank 0
                   is the most specific; an interface ranks higher than every
                   interface that extends it. Peers share a rank.
"""

# Values of exactly these types are dispatched on their type name only.
_builtin_types = frozenset((bool, int, float, complex, str, bytes, bytearray,
                            list, tuple, dict, set, frozenset, type(None)))

# Bookkeeping classes that appear in MROs, but are not meaningful dispatch targets.
# `object` is covered by the wildcard.
_skipped_bases = frozenset((object, abc.ABC, typing.Generic, typing.Protocol))

def type_name(cls):
    """Return the type tag for the class `cls`.

    Built-in classes are known by their bare name (`"int"`, `"NoneType"`);
    other classes by their fully qualified name, `"{module}.{qualname}"`.

    `object` is the root of everything, so its tag is `wildcard`.
    """
    if cls is object:
        return wildcard
    if not cls.__module__ or cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"

def isinterface(cls):
    """Return whether the class `cls` is an ABC, i.e. may count as an interface for dispatching purposes.

    Whether it actually does depends on where it sits in the MRO of the
    dispatched value; see `describe_type`.
    """
    return isinstance(cls, abc.ABCMeta)

def _primary_line(cls):
    """Return the classes on the primary inheritance line of `cls`, nearest first.

    The line follows the first base, unless that base is an ABC and the class
    also has other bases (then all of them are peer interfaces).
    """
    line = []
    while True:
        bases = [base for base in cls.__bases__ if base not in _skipped_bases]
        if not bases:
            return line
        first = bases[0]
        if isinterface(first) and len(bases) > 1:
            return line
        line.append(first)
        cls = first

def _interface_ranks(interfaces):
    """Rank `interfaces` (classes, in MRO order) by the subclass relation among them.

    Rank 0 is the most specific. An interface extended by another one in the
    list ranks one higher than the highest-ranking one extending it.
    """
    ranks = []
    for k, iface in enumerate(interfaces):
        # In MRO order, every subclass comes before its bases.
        below = [rank for other, rank in zip(interfaces[:k], ranks) if issubclass(other, iface)]
        ranks.append(max(below) + 1 if below else 0)
    return ranks

def describe_type(value):
    """Default introspector. Describe the type of `value` based on its MRO.

    Returns a `TypeDescription`, or `None` if the type cannot be classified.
    """
    cls = type(value)
    mro = getattr(cls, "__mro__", None)
    if not mro:  # pragma: no cover, every Python class has an MRO.
        return None
    line = set(_primary_line(cls))
    bases = [base for base in mro[1:] if base not in _skipped_bases]
    ancestors = [base for base in bases if base in line or not isinterface(base)]
    interfaces = [base for base in bases if base not in line and isinterface(base)]
    return TypeDescription(type_name(cls),
                           [type_name(base) for base in ancestors],
                           [type_name(base) for base in interfaces],
                           _interface_ranks(interfaces))

def chain_for(value, introspect=describe_type):
    """Return the `TypeChain` of `value`.

    `introspect`: callable, `value -> TypeDescription or None`. Called only for
                  values that are not of a built-in type. If it returns `None`,
                  the value is unclassifiable, and matches only the wildcard.
    """
    cls = type(value)
    if cls in _builtin_types:
        return TypeChain((type_name(cls), wildcard), (0, 1))

    description = introspect(value)
    if description is None:
        return TypeChain((wildcard,), (0,))

    name, ancestors, interfaces, ranks = description
    ancestors = list(ancestors)
    interfaces = list(interfaces)
    ranks = list(ranks) if ranks is not None else [0] * len(interfaces)
    if len(ranks) != len(interfaces):
        raise ValueError(f"Type description of {name!r} has {len(interfaces)} interface(s) but {len(ranks)} rank(s)")
    interface_tier = len(ancestors) + 1
    tags = []
    tiers = []
    def add(tag, tier):
        if tag != wildcard and tag not in tags:
            tags.append(tag)
            tiers.append(tier)
    add(name, 0)
    for tier, ancestor in enumerate(ancestors, start=1):
        add(ancestor, tier)
    for rank, interface in sorted(zip(ranks, interfaces), key=lambda item: item[0]):
        add(interface, interface_tier + rank)
    tags.append(wildcard)
    tiers.append(max(tiers) + 1 if tiers else 0)
    return TypeChain(tuple(tags), tuple(tiers))
