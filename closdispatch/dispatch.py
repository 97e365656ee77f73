# -*- coding: utf-8; -*-
"""Multiple dispatch with CLOS-style method combination.

Terminology:

  - A *dispatcher* is a callable that supports many call signatures, like a
    *generic function* in CLOS or Julia.
  - The implementations registered to it are *methods*. Each method has a
    *role*: `primary`, `before`, `after` or `around`.

The types of **all** positional arguments of a call, as well as their number,
are used for dispatching. Example::

    from closdispatch import multidispatch, around

    class Animal: ...
    class Dog(Animal): ...
    class Cat(Animal): ...

    fight = multidispatch("fight")
    fight.register([Dog, Dog], "primary", lambda a, b: "Dog vs Dog")
    fight.register([Animal, Animal], "primary", lambda a, b: "Animal fight")

    fight(Dog(), Dog())  # -> "Dog vs Dog"
    fight(Cat(), Dog())  # -> "Animal fight"

    @fight.method(Dog, Dog, role=around)
    def loudly(call_next, a, b):
        return call_next(a, b).upper()

    fight(Dog(), Dog())  # -> "DOG VS DOG"

**Method lookup**:

Unlike `unpythonic.dispatch.generic`, where the first matching multimethod
wins, here the most specific applicable `primary` method wins. Each argument
matches its concrete type, then its ancestors (nearest first), then its
interfaces, then the wildcard `"*"`. The first argument is the dominant one
when comparing signatures. See `closdispatch.resolver`.

All applicable `before`, `after` and `around` methods run; see
`closdispatch.combine` for the execution order.

When several equally specific `primary` methods apply (typically, methods for
two interfaces that the same class implements), the dispatch policy decides;
see `closdispatch.policy`.

**Thread safety**:

There is none built in. Registration, unregistration and policy changes
mutate the dispatcher; dispatching only reads it. If a dispatcher is shared
between threads, either complete all registration before dispatching
concurrently, or guard all of these operations with a single lock.
"""

__all__ = ["Dispatcher", "multidispatch",
           "methods", "format_methods", "list_methods"]

import inspect
import typing

from unpythonic.arity import getfunc

from .combine import invoke
from .policy import last_wins, canonize_policy
from .resolver import resolve
from .table import MethodTable, InvalidRegistration, primary, around, canonize_role, signature_key
from .typechain import describe_type

class Dispatcher:
    """A multiple-dispatch dispatcher with CLOS-style method combination.

    `name`: str, optional. Human-readable name, used in messages.
    `policy`: `first_wins` or `last_wins` (default). See `closdispatch.policy`.
    `introspect`: type introspector, see `closdispatch.typechain.chain_for`.

    Each dispatcher owns its methods; there is no global registry.

    The dispatcher supports the mapping protocol for its signatures::

        [Dog, Dog] in fight      # same as fight.exists([Dog, Dog])
        fight[[Dog, Dog]]        # the RoleBucket for that signature
        del fight[[Dog, Dog]]    # same as fight.unregister([Dog, Dog])
    """
    def __init__(self, name=None, *, policy=last_wins, introspect=describe_type):
        self.name = name
        self.introspect = introspect
        self._table = MethodTable()
        self._policy = canonize_policy(policy)

    # registration

    def register(self, signature, role, handler):
        """Register the callable `handler` for `signature` in the given `role`.

        `signature`: sequence of type tags, one per positional argument. A tag
                     is a class, a type name string, `None` (for `NoneType`),
                     or `"*"`/`object`/`typing.Any` for "anything".
        `role`: `primary`, `before`, `after` or `around` (or the name of one).

        A `primary` method replaces any earlier one for the same signature.
        Other roles accumulate, in registration order.

        An `around` method is called as `handler(call_next, *args)`; others
        as `handler(*args)`. The return values of `before` and `after` methods
        are discarded.
        """
        self._table.register(signature, role, handler)

    def unregister(self, signature):
        """Remove all methods registered for exactly `signature`."""
        self._table.unregister(signature)

    def exists(self, signature):
        """Return whether any methods are registered for exactly `signature`."""
        return self._table.exists(signature)

    def method(self, *signature, role=primary):
        """Parametric decorator. Register the decorated function as a method.

        If no `signature` is given, it is read from the type annotations of the
        decorated function's positional parameters. For an `around` method, the
        first parameter receives the continuation, so it is not part of the
        signature, and needs no annotation. Use `typing.Any` for "anything".

        The decorated function is returned as-is::

            @fight.method(Dog, Dog)
            def dogfight(a, b):
                ...

            @fight.method(role=before)
            def announce(a: Animal, b: Animal):
                ...
        """
        role = canonize_role(role)
        def register_method(f):
            thesignature = signature or _signature_from_annotations(f, role)
            self.register(thesignature, role, f)
            return f
        return register_method

    # policy

    @property
    def dispatch_policy(self):
        """The current dispatch policy. Assignable; affects dispatches that start after the change."""
        return self._policy
    @dispatch_policy.setter
    def dispatch_policy(self, policy):
        self._policy = canonize_policy(policy)

    def set_dispatch_policy(self, policy):
        """Set the dispatch policy. Same as assigning to `dispatch_policy`."""
        self.dispatch_policy = policy

    # dispatching

    def resolve(self, *args):
        """Return the `ResolvedPlan` for a call with `args`, without running it."""
        return resolve(self._table, args, self._policy, self.introspect)

    def dispatch(self, *args):
        """Call the applicable methods with `args`, and return the result."""
        plan = resolve(self._table, args, self._policy, self.introspect)
        return invoke(plan, args)

    def __call__(self, *args):
        return self.dispatch(*args)

    # mapping protocol

    def __contains__(self, signature):
        return self._table.exists(signature)

    def __getitem__(self, signature):
        return self._table[signature]

    def __delitem__(self, signature):
        self._table.unregister(signature)

    def __repr__(self):
        name = f" {self.name!r}" if self.name is not None else ""
        return f"<Dispatcher{name} with {len(self._table)} signature(s), policy {self._policy}>"

def multidispatch(name=None, **kwargs):
    """Create a new `Dispatcher`. Arguments are passed through."""
    return Dispatcher(name, **kwargs)

def methods(dispatcher):
    """Print, to stdout, a human-readable list of methods registered to `dispatcher`.

    For introspection in the REPL. See `format_methods`.
    """
    print(format_methods(dispatcher))

def format_methods(dispatcher):
    """Format, as a string, a human-readable list of methods registered to `dispatcher`.

    Example output::

        Methods for dispatcher 'fight':
          (mymodule.Dog, mymodule.Dog) primary: dogfight(a, b) from mymodule.py:12
          (*, *) before: announce(a, b) from mymodule.py:20
    """
    described = [f"  ({', '.join(signature)}) {role}: {_format_callable(handler)}"
                 for signature, role, handler in list_methods(dispatcher)]
    methods_str = "\n".join(described) if described else "  <no methods registered>"
    name = repr(dispatcher.name) if dispatcher.name is not None else "<anonymous>"
    return f"Methods for dispatcher {name}:\n{methods_str}"

def list_methods(dispatcher):
    """Return a list of the methods registered to `dispatcher`.

    Each item is `(signature, role, handler)`. Signatures appear in the order
    they were first registered; within a signature, methods appear in
    registration order.
    """
    return [(key, entry.role, entry.handler)
            for key, bucket in dispatcher._table
            for entry in bucket.entries()]

# --------------------------------------------------------------------------------

def _signature_from_annotations(f, role):
    """Read the dispatch signature of the method `f` from its type annotations."""
    function, kind = getfunc(f)
    poskinds = (inspect.Parameter.POSITIONAL_ONLY,
                inspect.Parameter.POSITIONAL_OR_KEYWORD)
    parameters = [p.name for p in inspect.signature(function).parameters.values()
                  if p.kind in poskinds]
    if kind in ("instancemethod", "classmethod"):
        parameters = parameters[1:]  # self or cls, already bound
    if role is around:
        parameters = parameters[1:]  # the continuation
    try:
        type_signature = typing.get_type_hints(function)
    except (NameError, SyntaxError, TypeError) as err:  # unresolvable forward reference, or not an expression at all
        raise InvalidRegistration(f"Method {function.__qualname__} has type annotations that cannot be evaluated: {err}") from err

    failures = [name for name in parameters if name not in type_signature]
    if failures:
        plural = "s" if len(failures) > 1 else ""
        repr_str = ", ".join(repr(x) for x in failures)
        raise InvalidRegistration(f"Method {function.__qualname__} missing type annotation for parameter{plural}: {repr_str}")
    return signature_key([type_signature[name] for name in parameters])

def _format_callable(thecallable):
    """Format, as a string, a human-readable description of a callable.

    Includes the call signature, and the source filename and starting line
    number when they can be found.
    """
    name = getattr(thecallable, "__qualname__", None) or repr(thecallable)
    try:
        thesignature = str(inspect.signature(thecallable))
    except (TypeError, ValueError):  # uninspectable builtin
        thesignature = "(...)"
    try:
        function, _ = getfunc(thecallable)
        filename = inspect.getsourcefile(function)
        _, firstlineno = inspect.getsourcelines(function)
    except (TypeError, OSError):  # builtin, or source not available
        return f"{name}{thesignature}"
    return f"{name}{thesignature} from {filename}:{firstlineno}"
