import io
import os
import unittest
from contextlib import redirect_stdout
from unittest import mock

from application.services.attribute_codec import CLASS_ATTRIBUTE, AttributeCodec
from domain.entities import DaemonResult, IndexedDocument, RawMatch
from domain.interfaces import SearchDaemonClient
from infrastructure.config import ContainerConfig, build_default_container


class StubDaemonClient(SearchDaemonClient):
    def __init__(self) -> None:
        self.result = DaemonResult()
        self.requests = []

    def query(self, request):
        self.requests.append(request)
        return self.result


class TestSearchScript(unittest.TestCase):
    def setUp(self) -> None:
        self.daemon = StubDaemonClient()
        self.container = build_default_container(ContainerConfig(store="memory"))
        self.container.client_factory = lambda configuration: self.daemon
        self.container.store.insert_or_replace(IndexedDocument(class_tag="Post", identifier=7, fields={"title": "seven"}))
        env = mock.patch.dict(os.environ, {"SPHINXBRIDGE_STORE": "memory", "SPHINXBRIDGE_LOG_FILE": ""})
        env.start()
        self.addCleanup(env.stop)

    def _run(self, argv):
        from scripts import search as script

        out = io.StringIO()
        with mock.patch.object(script, "build_default_container", return_value=self.container), redirect_stdout(out):
            code = script.main(argv)
        return code, out.getvalue()

    def _post_match(self):
        code = AttributeCodec(self.container.registry).encode("Post")
        return DaemonResult(status=0, total_found=1, matches=[RawMatch(document_id=7, attributes={CLASS_ATTRIBUTE: code})])

    def test_scoped_search_prints_documents(self):
        self.daemon.result = self._post_match()
        code, output = self._run(["hello", "--class", "Post", "--field", "title", "--page-size", "5"])
        self.assertEqual(code, 0)
        self.assertIn("found 1, page 1/1", output)
        self.assertIn('"seven"', output)
        self.assertEqual(self.daemon.requests[0].limit, 5)

    def test_raw_output(self):
        self.daemon.result = self._post_match()
        code, output = self._run(["hello", "--class", "Post", "--raw"])
        self.assertEqual(code, 0)
        self.assertEqual(output.strip(), "[7]")


if __name__ == "__main__":
    unittest.main()
