import unittest

from svdoc.events import source_registry
from svdoc.recorded import RecordedSource
from svdoc.registry import Registry


class TestRegistry(unittest.TestCase):
    """Registration and lookup of event source classes."""

    def setUp(self):
        self.registry = Registry("source")

        @self.registry.register("replay")
        class ReplaySource(RecordedSource):
            pass

        self.replay_cls = ReplaySource

    def test_register_returns_class_unchanged(self):
        """The decorator should hand the class back to the module."""
        self.assertTrue(issubclass(self.replay_cls, RecordedSource))
        self.assertIs(self.registry.get("replay"), self.replay_cls)

    def test_registered_class_builds_sources(self):
        """A looked-up class should be usable through its constructors."""
        src = self.registry.get("replay").from_text("[]", name="empty.json")
        self.assertIsInstance(src, self.replay_cls)
        self.assertEqual(src.name, "empty.json")

    def test_unknown_key(self):
        """The KeyError message should name the key and list the registered ones."""
        with self.assertRaises(KeyError) as ctx:
            self.registry.get("verilator")
        self.assertIn("verilator", str(ctx.exception))
        self.assertIn("replay", str(ctx.exception))

    def test_duplicate_key(self):
        """A key cannot be registered twice."""
        with self.assertRaises(ValueError) as ctx:
            @self.registry.register("replay")
            class Other(RecordedSource):
                pass
        self.assertIn("already registered", str(ctx.exception))
        self.assertIn("ReplaySource", str(ctx.exception))

    def test_keys_contains_len(self):
        self.assertEqual(self.registry.keys(), ["replay"])
        self.assertIn("replay", self.registry)
        self.assertNotIn("slang", self.registry)
        self.assertEqual(len(self.registry), 1)


class TestSourceRegistry(unittest.TestCase):
    """The package registers its event sources on import."""

    def test_source_registry_has_slang(self):
        import svdoc.slang_source  # noqa: F401
        self.assertIn("slang", source_registry)

    def test_source_registry_has_recorded(self):
        self.assertIs(source_registry.get("recorded"), RecordedSource)


if __name__ == '__main__':
    unittest.main()
