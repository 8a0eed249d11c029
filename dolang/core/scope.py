"""Binding frames. A Scope maps names to RuntimeValues and optionally points at a parent Scope, forming the chain used
for lexical lookup. Scopes also back objects: an ObjectValue's members live in its own Scope.

Parent links only point outward, so a chain can never loop.
"""

from dolang.lang.error import DuplicateBinding, UndefinedVariable


class Scope:
    """A single frame of bindings with an optional parent frame."""

    def __init__(self, parent=None):
        self.parent = parent
        self.bindings = {}

    def define(self, name, value):
        """Binds name in this frame only. Shadowing a binding in a parent frame is allowed."""
        if name in self.bindings:
            raise DuplicateBinding("'{}' is already defined in this scope", exprs=name)
        self.bindings[name] = value

    def resolve(self, name, current_only=False):
        """Returns the value bound to name, searching only this frame if current_only, otherwise walking the parent
        chain. Returns None if name is not bound.
        """
        scope = self
        while scope is not None:
            if name in scope.bindings:
                return scope.bindings[name]
            if current_only:
                break
            scope = scope.parent
        return None

    def assign(self, name, value):
        """Rebinds name in the nearest frame that defines it."""
        scope = self
        while scope is not None:
            if name in scope.bindings:
                scope.bindings[name] = value
                return
            scope = scope.parent
        raise UndefinedVariable("'{}' is not defined", exprs=name)

    def bind(self, name, value):
        """Creates or overwrites name in this frame. Used for object property writes."""
        self.bindings[name] = value

    def child(self):
        """Returns a new, empty Scope whose parent is this one."""
        return Scope(self)

    def __contains__(self, name):
        return self.resolve(name) is not None

    def __repr__(self):
        return f"Scope({list(self.bindings)}, parent={self.parent!r})"
