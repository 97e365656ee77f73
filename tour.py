#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Multiple dispatch with method combination for Python.

Tour of the features.
"""

from abc import ABC

from closdispatch import (multidispatch, methods,
                          primary, before, after, around,
                          first_wins, UnresolvedDispatch)

class IA(ABC):
    pass
class IB(ABC):
    pass
class CA(IA, IB):
    pass

class Animal:
    pass
class Dog(Animal):
    pass
class Cat(Animal):
    pass

def main():
    # classic multiple dispatch
    #
    fn = multidispatch("fn")
    fn.register([IA], primary, lambda a: "Handler for IA")
    fn.register([IB], primary, lambda a: "Handler for IB")
    fn.register(["*"], primary, lambda a: "Default handler")

    # CA implements both interfaces; the policy breaks the tie.
    assert fn(CA()) == "Handler for IB"  # last-wins, the default
    fn.set_dispatch_policy(first_wins)
    assert fn(CA()) == "Handler for IA"
    assert fn([]) == "Default handler"

    # built-in types
    scalar = multidispatch("scalar")
    scalar.register([int, str], primary, lambda x, y: f"Int: {x}, String: {y}")
    assert scalar(42, "foo") == "Int: 42, String: foo"
    try:
        scalar("foo", 42)
    except UnresolvedDispatch:  # it's also a TypeError
        pass

    # all arguments participate in dispatching
    battle = multidispatch("battle")
    battle.register([Dog, Dog], primary, lambda a, b: "Dog vs Dog fight!")
    battle.register([Animal, Animal], primary, lambda a, b: "Generic Animal fight")
    assert battle(Dog(), Dog()) == "Dog vs Dog fight!"
    assert battle(Cat(), Dog()) == "Generic Animal fight"

    # method combination: before, after, around
    #
    events = []
    clos = multidispatch("clos")
    clos.register([CA], before, lambda a: events.append("before"))
    clos.register([CA], primary, lambda a: events.append("primary") or "Result from primary")
    clos.register([CA], after, lambda a: events.append("after"))

    @clos.method(CA, role=around)
    def wrapped(call_next, a):
        events.append("around (enter)")
        result = call_next(a)  # continue the chain
        events.append("around (exit)")
        return f"[Wrapped: {result}]"

    assert clos(CA()) == "[Wrapped: Result from primary]"
    assert events == ["around (enter)", "before", "primary", "after", "around (exit)"]

    # stacked around methods, like nested Russian dolls
    stacked = multidispatch("stacked")
    stacked.register([CA], around, lambda call_next, a: f"I:{call_next()}")
    stacked.register([CA], around, lambda call_next, a: f"O:{call_next()}")
    stacked.register([CA], primary, lambda a: "main")
    assert stacked(CA()) == "O:I:main"

    # signatures from type annotations
    greet = multidispatch("greet")

    @greet.method()
    def greet_animal(a: Animal):
        return "hello"

    @greet.method()
    def greet_dog(d: Dog):
        return "woof"

    assert greet(Cat()) == "hello"
    assert greet(Dog()) == "woof"

    methods(greet)

if __name__ == '__main__':
    main()
