# -*- coding: utf-8; -*-
"""Dispatch policy: tie-breaking between competing primary methods.

When an argument has several type tags on the same specificity tier, e.g. a
class that implements two interfaces `IA` and `IB`, methods registered for
`IA` and for `IB` are equally applicable. The policy decides which `primary`
method runs:

  - `first_wins`: the first one found during the candidate walk (`IA`,
    the interface declared first).
  - `last_wins`: the last one found on the same tier (`IB`).

The policy never makes a less specific method beat a more specific one; e.g.
a method on the concrete class always beats a method on an interface.

`before`, `after` and `around` methods are not affected by the policy; all
applicable ones always run.
"""

__all__ = ["first_wins", "last_wins", "policies",
           "canonize_policy", "supersedes"]

from unpythonic.symbol import sym

first_wins = sym("first-wins")
last_wins = sym("last-wins")
policies = (first_wins, last_wins)

def canonize_policy(policy):
    """Return the policy symbol corresponding to `policy`.

    Accepts the symbols themselves, and their names as strings, with either
    a hyphen or an underscore (`"first-wins"`, `"first_wins"`).
    """
    if isinstance(policy, str):
        policy = sym(policy.replace("_", "-"))
    if isinstance(policy, sym) and policy in policies:
        return policy
    raise ValueError(f"Unknown dispatch policy {policy!r}; expected one of {', '.join(str(x) for x in policies)}")

def supersedes(policy, held_tiers, candidate_tiers):
    """Return whether a newly found primary method replaces the one held so far.

    `held_tiers`: tuple of int, the per-argument specificity tiers of the
                  signature of the primary method held so far, or `None`
                  if none has been found yet.
    `candidate_tiers`: same, for the primary method just found.

    Candidates arrive in walk order, so the held one is never less specific
    than the candidate.
    """
    if held_tiers is None:
        return True
    if policy is first_wins:
        return False
    return candidate_tiers == held_tiers
