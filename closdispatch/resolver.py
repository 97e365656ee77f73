# -*- coding: utf-8; -*-
"""Resolve a call into a plan: which methods run, and in which order.

Given the arguments of a call, we compute the type chain of each argument, and
walk the cross product of the chains, most specific first. The first argument
is the dominant one: for a fixed tag of the first argument, all combinations of
tags of the later arguments are tried before moving on to the next tag of the
first argument. E.g. for `(Dog(), Cat())`::

    (Dog, Cat), (Dog, Animal), (Dog, *),
    (Animal, Cat), (Animal, Animal), (Animal, *),
    (*, Cat), (*, Animal), (*, *)

Every signature along the walk that has methods registered contributes all of
its `before`, `after` and `around` methods. Of the `primary` methods found,
the dispatch policy picks one.

The walk collects from most to least specific. The plan then orders them
for execution:

  - `befores`: least specific first,
  - `afters`: most specific first,
  - `arounds`: least specific first, i.e. outermost; the most specific one
    is the innermost wrapper, nearest to the primary method.
"""

__all__ = ["ResolvedPlan", "candidate_keys", "resolve",
           "UnresolvedDispatch"]

from collections import namedtuple
from itertools import product

from .policy import last_wins, canonize_policy, supersedes
from .typechain import chain_for, describe_type, type_name

class UnresolvedDispatch(TypeError):
    """Raised when no primary method is applicable to the arguments of a call.

    The `types` attribute holds the concrete type names of the arguments.
    """
    def __init__(self, msg, types=()):
        super().__init__(msg)
        self.types = tuple(types)

ResolvedPlan = namedtuple("ResolvedPlan", ["primary", "befores", "afters", "arounds", "signature"])
ResolvedPlan.__doc__ = """The methods that run for one particular call, in execution order.

`primary`: `HandlerEntry` of the primary method.
`befores`, `afters`: tuples of `HandlerEntry`, in the order they run.
`arounds`: tuple of `HandlerEntry`, outermost first.
`signature`: the signature key the primary method was found under.
"""

def candidate_keys(chains):
    """Enumerate candidate signature keys for the given type chains.

    `chains`: sequence of `TypeChain`, one per argument.

    Yields `(key, tiers)`, where `key` is a tuple of type tags, and `tiers`
    the corresponding tuple of specificity tiers. The last argument position
    varies fastest.
    """
    positions = [tuple(zip(chain.tags, chain.tiers)) for chain in chains]
    for combination in product(*positions):
        key = tuple(tag for tag, tier in combination)
        tiers = tuple(tier for tag, tier in combination)
        yield key, tiers

def resolve(table, args, policy=last_wins, introspect=describe_type):
    """Compute the `ResolvedPlan` for calling the methods in `table` with `args`.

    `table`: a `MethodTable`.
    `args`: sequence, the positional arguments of the call.
    `policy`: `first_wins` or `last_wins`; how to break ties between
              primary methods on the same specificity tier.
    `introspect`: type introspector, see `closdispatch.typechain.chain_for`.

    This only reads `table`. Nothing is called except the introspector.

    Raises `UnresolvedDispatch` if there is no applicable primary method.
    """
    policy = canonize_policy(policy)
    chains = [chain_for(arg, introspect) for arg in args]

    befores = []
    afters = []
    arounds = []
    winner = None
    winner_key = None
    winner_tiers = None
    for key, tiers in candidate_keys(chains):
        bucket = table.lookup(key)
        if bucket is None:
            continue
        befores.extend(bucket.befores)
        afters.extend(bucket.afters)
        arounds.extend(bucket.arounds)
        if bucket.primary is not None and supersedes(policy, winner_tiers, tiers):
            winner, winner_key, winner_tiers = bucket.primary, key, tiers

    if winner is None:
        types = [type_name(type(arg)) for arg in args]
        raise UnresolvedDispatch(f"No primary method for types: ({', '.join(types)})", types)

    return ResolvedPlan(primary=winner,
                        befores=tuple(reversed(befores)),
                        afters=tuple(afters),
                        arounds=tuple(reversed(arounds)),
                        signature=winner_key)
