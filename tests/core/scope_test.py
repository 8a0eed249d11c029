import unittest

from dolang.core.scope import Scope
from dolang.core.values import Primitive
from dolang.lang.error import DuplicateBinding, UndefinedVariable


class ScopeTestCase(unittest.TestCase):

    def setUp(self):
        self.parent = Scope()
        self.parent.define("outer", Primitive(1))
        self.scope = self.parent.child()

    def test_define(self):
        self.scope.define("name", Primitive("value"))
        self.assertEqual(Primitive("value"), self.scope.resolve("name"))
        self.assertIsNone(self.parent.resolve("name"))

        self.assertRaises(DuplicateBinding, self.scope.define, "name", Primitive("again"))

    def test_shadowing(self):
        self.scope.define("outer", Primitive(2))
        self.assertEqual(Primitive(2), self.scope.resolve("outer"))
        self.assertEqual(Primitive(1), self.parent.resolve("outer"))

    def test_resolve(self):
        self.assertEqual(Primitive(1), self.scope.resolve("outer"))
        self.assertIsNone(self.scope.resolve("outer", True))
        self.assertEqual(Primitive(1), self.parent.resolve("outer", True))
        self.assertIsNone(self.scope.resolve("missing"))

    def test_assign(self):
        self.scope.assign("outer", Primitive(3))
        self.assertEqual(Primitive(3), self.parent.resolve("outer", True))
        self.assertNotIn("outer", self.scope.bindings)

        self.assertRaises(UndefinedVariable, self.scope.assign, "missing", Primitive(0))

    def test_assign_nearest(self):
        self.scope.define("outer", Primitive(2))
        self.scope.assign("outer", Primitive(4))
        self.assertEqual(Primitive(4), self.scope.resolve("outer"))
        self.assertEqual(Primitive(1), self.parent.resolve("outer"))

    def test_bind(self):
        self.scope.bind("field", Primitive(1))
        self.scope.bind("field", Primitive(2))
        self.assertEqual(Primitive(2), self.scope.resolve("field", True))


if __name__ == '__main__':
    unittest.main()
