import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from infrastructure.config import ContainerConfig, build_default_container
from infrastructure.daemon.http_search_client import HttpSearchDaemonClient
from infrastructure.repositories.sqlite_document_store import SqliteDocumentStore
from infrastructure.storage.in_memory_document_store import InMemoryDocumentStore


class TestContainerConfig(unittest.TestCase):
    def test_reads_environment(self):
        env = {
            "SPHINXBRIDGE_STORE": "memory",
            "SPHINXBRIDGE_DAEMON_SERVER": "search.internal",
            "SPHINXBRIDGE_DAEMON_PORT": "9308",
            "SPHINXBRIDGE_DEFAULT_INDEX": "everything",
            "SPHINXBRIDGE_DAEMON_TIMEOUT": "1.5",
        }
        with mock.patch.dict(os.environ, env):
            cfg = ContainerConfig.from_env()
        self.assertEqual(cfg.store, "memory")
        self.assertEqual((cfg.daemon_server, cfg.daemon_port), ("search.internal", 9308))
        self.assertEqual(cfg.default_index, "everything")
        self.assertEqual(cfg.daemon_timeout, 1.5)

    def test_rejects_unknown_store(self):
        with mock.patch.dict(os.environ, {"SPHINXBRIDGE_STORE": "mongo"}):
            with self.assertRaises(ValueError):
                ContainerConfig.from_env()


class TestBuildDefaultContainer(unittest.TestCase):
    def test_sqlite_store(self):
        with tempfile.TemporaryDirectory() as tmp:
            container = build_default_container(ContainerConfig(db_path=Path(tmp) / "sphinxbridge.db"))
            self.assertIsInstance(container.store, SqliteDocumentStore)

    def test_client_factory_uses_class_endpoint(self):
        container = build_default_container(
            ContainerConfig(store="memory", daemon_server="default.local", daemon_port=9400)
        )
        self.assertIsInstance(container.store, InMemoryDocumentStore)
        configuration = container.registry.register("Post", "title", server="posts.local", port=9306).configuration

        default_client = container.client_factory(None)
        post_client = container.client_factory(configuration)

        self.assertIsInstance(post_client, HttpSearchDaemonClient)
        self.assertEqual(default_client.base_url, "http://default.local:9400")
        self.assertEqual(post_client.base_url, "http://posts.local:9306")
        self.assertIs(container.client_factory(configuration), post_client)

    def test_query_builder_uses_default_index(self):
        container = build_default_container(ContainerConfig(store="memory", default_index="all_docs"))
        self.assertEqual(container.query_builder.build(None, "q").index, "all_docs")


if __name__ == "__main__":
    unittest.main()
