# -*- coding: utf-8; -*-
"""Method table: the registered methods of one dispatcher, by type signature.

A *signature* is a sequence of type tags, one per argument position. Each
signature maps to a `RoleBucket`, which holds the methods registered for that
exact signature, by role:

  - `primary`: at most one. Registering again for the same signature replaces it.
  - `before`, `after`, `around`: any number. Registering again appends,
    in registration order.

The roles are the method-combination categories of CLOS (the Common Lisp
Object System).
"""

__all__ = ["primary", "before", "after", "around", "roles",
           "HandlerEntry", "RoleBucket", "MethodTable",
           "signature_key", "canonize_role",
           "InvalidRegistration"]

from collections import namedtuple
from itertools import count
import typing

from unpythonic.symbol import sym

from .typechain import wildcard, type_name

primary = sym("primary")
before = sym("before")
after = sym("after")
around = sym("around")
roles = (primary, before, after, around)

class InvalidRegistration(ValueError):
    """Raised when a method cannot be registered (malformed signature, unknown role, ...)."""

HandlerEntry = namedtuple("HandlerEntry", ["handler", "role", "seq"])
HandlerEntry.__doc__ = """A registered method.

`handler`: the callable.
`role`: one of `primary`, `before`, `after`, `around`.
`seq`: int, registration sequence number, increasing within one `MethodTable`.
"""

class RoleBucket:
    """The methods registered for one exact signature."""
    __slots__ = ("primary", "befores", "afters", "arounds")

    def __init__(self):
        self.primary = None  # HandlerEntry or None
        self.befores = []
        self.afters = []
        self.arounds = []

    def entries(self):
        """Return all entries in this bucket, in registration order."""
        everything = self.befores + self.afters + self.arounds
        if self.primary is not None:
            everything.append(self.primary)
        return sorted(everything, key=lambda entry: entry.seq)

    def __repr__(self):  # pragma: no cover
        return (f"<RoleBucket primary={self.primary!r}, "
                f"{len(self.befores)} before, {len(self.afters)} after, {len(self.arounds)} around>")

def canonize_role(role):
    """Return the role symbol corresponding to `role`.

    Accepts the role symbols themselves, and their names as strings,
    optionally with a CL-style leading colon (`"before"`, `":before"`).
    """
    if isinstance(role, str):
        role = sym(role[1:] if role.startswith(":") else role)
    if isinstance(role, sym) and role in roles:
        return role
    raise InvalidRegistration(f"Unknown method role {role!r}; expected one of {', '.join(str(x) for x in roles)}")

def _canonize_tag(tag):
    if tag is None:
        return type_name(type(None))
    if tag is typing.Any:
        return wildcard
    if isinstance(tag, type):
        return type_name(tag)
    if isinstance(tag, str):
        if not tag:
            raise InvalidRegistration("Empty type tag in signature")
        return tag
    raise InvalidRegistration(f"Cannot use {tag!r} as a type tag; expected a class, a type name, or '{wildcard}'")

def signature_key(signature):
    """Canonize `signature` into a signature key (a tuple of str).

    A bare tag (a type name or a class) is accepted as a one-element signature.
    """
    if isinstance(signature, (str, type)):
        signature = (signature,)
    try:
        tags = tuple(signature)
    except TypeError:
        raise InvalidRegistration(f"A signature must be a sequence of type tags, got {signature!r}")
    if not tags:
        raise InvalidRegistration("A signature must have at least one type tag")
    return tuple(_canonize_tag(tag) for tag in tags)

class MethodTable:
    """Mapping of signature keys to `RoleBucket`s.

    Mutated only by `register` and `unregister`. During dispatch, the resolver
    only reads it, via `lookup`.

    Not thread-safe. If the table is shared between threads, the caller must
    make registration mutually exclusive with other registrations and with
    dispatching.
    """
    def __init__(self):
        self._buckets = {}
        self._seq = count()

    def register(self, signature, role, handler):
        """Register `handler` under `signature` in the given `role`."""
        key = signature_key(signature)
        role = canonize_role(role)
        if not callable(handler):
            raise InvalidRegistration(f"Method for {key} must be callable, got {handler!r}")
        entry = HandlerEntry(handler, role, next(self._seq))
        bucket = self._buckets.setdefault(key, RoleBucket())
        if role is primary:
            bucket.primary = entry
        elif role is before:
            bucket.befores.append(entry)
        elif role is after:
            bucket.afters.append(entry)
        else:
            bucket.arounds.append(entry)

    def unregister(self, signature):
        """Remove all methods registered under `signature`. No-op if there are none."""
        self._buckets.pop(signature_key(signature), None)

    def exists(self, signature):
        """Return whether any methods are registered under `signature`."""
        return signature_key(signature) in self._buckets

    def lookup(self, key):
        """Return the bucket for the canonical signature key `key`, or `None`."""
        return self._buckets.get(key)

    def __getitem__(self, signature):
        key = signature_key(signature)
        try:
            return self._buckets[key]
        except KeyError:
            raise KeyError(f"No methods registered for signature {key}") from None

    def __contains__(self, signature):
        return self.exists(signature)

    def __len__(self):
        return len(self._buckets)

    def __iter__(self):
        """Iterate over `(key, bucket)` pairs, in the order the keys were first registered."""
        return iter(list(self._buckets.items()))
