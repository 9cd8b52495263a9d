import unittest

from application.services.registry import ClassRegistry
from domain.entities import IndexedDocument
from domain.errors import ClassAlreadyRegistered, ClassNotRegistered


class TestClassRegistry(unittest.TestCase):
    def test_register_builds_immutable_configuration(self):
        registry = ClassRegistry()
        registration = registry.register(
            "Post", "title", "body", "title", server="search.local", port=9306, idsize=16, attributes=["author_id"]
        )
        configuration = registration.configuration

        self.assertEqual(configuration.fields, ("title", "body"))
        self.assertEqual(configuration.attributes, ("author_id",))
        self.assertEqual(configuration.id_bits, 16)
        self.assertEqual(configuration.id_space, 65536)
        self.assertEqual(configuration.index_name, "post")
        self.assertEqual((configuration.server, configuration.port), ("search.local", 9306))
        with self.assertRaises(AttributeError):
            configuration.id_bits = 8  # type: ignore[misc]

    def test_defaults(self):
        configuration = ClassRegistry().register("Post", "title").configuration
        self.assertEqual(configuration.id_bits, 32)
        self.assertEqual(configuration.server, "localhost")
        self.assertEqual(configuration.port, 9312)

    def test_duplicate_and_missing_classes(self):
        registry = ClassRegistry()
        registry.register("Post", "title")
        with self.assertRaises(ClassAlreadyRegistered):
            registry.register("Post", "body")
        with self.assertRaises(ClassNotRegistered):
            registry.get("Comment")
        self.assertIn("Post", registry)
        self.assertEqual(len(registry), 1)

    def test_rejects_invalid_settings(self):
        registry = ClassRegistry()
        with self.assertRaises(ValueError):
            registry.register("Post")
        with self.assertRaises(ValueError):
            registry.register("Post", "title", idsize=0)
        with self.assertRaises(ValueError):
            registry.register("Post", "title", idsize=64)

    def test_factory_materializes_documents(self):
        registry = ClassRegistry()
        registry.register("Post", "title", factory=lambda document: document.fields["title"])
        document = IndexedDocument(class_tag="Post", identifier=1, fields={"title": "Hello"})
        self.assertEqual(registry.get("Post").materialize(document), "Hello")


if __name__ == "__main__":
    unittest.main()
