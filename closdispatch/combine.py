# -*- coding: utf-8; -*-
"""Method combination: run a resolved plan.

The standard method combination of CLOS, for one call::

    around (outermost)
      around
        ...
          before, before, ...
          primary              <- its return value is the result
          after, after, ...

Each `around` method receives a continuation as its first argument, followed by
the arguments of the call. Calling the continuation runs the next layer inward,
and returns what it returns::

    def logged(call_next, x):
        print("enter")
        result = call_next(x)
        print("exit")
        return result

An `around` method may call its continuation zero times (replacing the whole
inner chain by its own return value), once, or many times. The continuation
can be called with different arguments; calling it with no arguments passes on
the arguments the `around` method itself received, like `call-next-method` in
Common Lisp.

Each layer is a closure over its own part of the plan, so dispatching again
from inside a method, even on the same dispatcher, is safe.
"""

__all__ = ["invoke", "ArityMismatch"]

from unpythonic.arity import arities, UnknownArity

from .table import around

class ArityMismatch(TypeError):
    """Raised when a method cannot accept the number of arguments it is about to be called with.

    Typically, an `around` method that has no parameter for the continuation.
    """

def invoke(plan, args):
    """Run the `ResolvedPlan` `plan` with the positional arguments `args`. Return the result."""
    def core(*args):
        for entry in plan.befores:
            _call(entry, args)
        result = _call(plan.primary, args)
        for entry in plan.afters:
            _call(entry, args)
        return result

    chain = core
    for entry in reversed(plan.arounds):  # innermost first
        chain = _wrap(entry, chain)
    return chain(*args)

def _wrap(entry, inner):
    """Make a layer that runs the `around` method `entry`, with `inner` as its continuation."""
    def layer(*args):
        def call_next(*newargs):
            return inner(*(newargs or args))
        return _call(entry, args, call_next)
    return layer

def _call(entry, args, *injected):
    """Call the method in `entry` with `injected` arguments first, then `args`."""
    allargs = injected + tuple(args)
    _check_arity(entry, len(allargs))
    return entry.handler(*allargs)

def _check_arity(entry, n):
    try:
        min_arity, max_arity = arities(entry.handler)
    except UnknownArity:  # can't tell; let the call itself decide.
        return
    if min_arity <= n <= max_arity:
        return
    if max_arity == float("+inf"):
        accepts = f"at least {min_arity}"
    elif min_arity == max_arity:
        accepts = f"{min_arity}"
    else:
        accepts = f"{min_arity} to {max_arity}"
    hint = " (the continuation, then the call arguments)" if entry.role is around else ""
    name = getattr(entry.handler, "__qualname__", repr(entry.handler))
    raise ArityMismatch(f"{entry.role} method {name} accepts {accepts} positional argument(s), "
                        f"but would be called with {n}{hint}")
