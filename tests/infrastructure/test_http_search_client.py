import unittest
from unittest import mock

import requests

from domain.entities import AttributeFilter, QueryRequest
from domain.errors import DaemonUnavailable
from infrastructure.daemon.http_search_client import HttpSearchDaemonClient, parse_sort_by


def _response(status_code=200, payload=None):
    response = mock.Mock()
    response.status_code = status_code
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload or {}
    return response


class TestRequestBody(unittest.TestCase):
    def test_extended_query_with_filters_and_sort(self):
        request = QueryRequest(
            text="hello @classname Post",
            index="post",
            limit=10,
            offset=20,
            max_matches=500,
            sort_mode="extended",
            sort_by="@weight DESC, created_at ASC",
            filters=(
                AttributeFilter(attribute="author_id", values=(3,)),
                AttributeFilter(attribute="status", values=(1, 2)),
                AttributeFilter(attribute="hidden", values=(1,), exclude=True),
            ),
        )
        body = HttpSearchDaemonClient.build_body(request)

        self.assertEqual(body["index"], "post")
        self.assertEqual((body["limit"], body["offset"], body["max_matches"]), (10, 20, 500))
        self.assertEqual(
            body["query"]["bool"]["must"],
            [
                {"query_string": "hello @classname Post"},
                {"equals": {"author_id": 3}},
                {"in": {"status": [1, 2]}},
            ],
        )
        self.assertEqual(body["query"]["bool"]["must_not"], [{"equals": {"hidden": 1}}])
        self.assertEqual(body["sort"], [{"_score": "desc"}, {"created_at": "asc"}])

    def test_match_modes(self):
        self.assertEqual(
            HttpSearchDaemonClient.build_body(QueryRequest(text="a b", match_mode="any"))["query"]["bool"]["must"][0],
            {"match": {"*": {"query": "a b", "operator": "or"}}},
        )
        self.assertEqual(
            HttpSearchDaemonClient.build_body(QueryRequest(text="a b", match_mode="phrase"))["query"]["bool"]["must"][0],
            {"match_phrase": {"*": "a b"}},
        )

    def test_optional_keys_are_omitted(self):
        body = HttpSearchDaemonClient.build_body(QueryRequest(text="a"))
        self.assertNotIn("sort", body)
        self.assertNotIn("max_matches", body)
        self.assertNotIn("must_not", body["query"]["bool"])

    def test_parse_sort_by(self):
        self.assertEqual(parse_sort_by("@id asc,title"), [{"id": "asc"}, {"title": "asc"}])
        with self.assertRaises(ValueError):
            parse_sort_by("title sideways")


class TestQuery(unittest.TestCase):
    def setUp(self) -> None:
        self.session = mock.Mock(spec=requests.Session)
        self.client = HttpSearchDaemonClient("search.local", 9308, session=self.session, timeout=2.5)

    def test_hits_become_ranked_matches(self):
        self.session.post.return_value = _response(
            payload={
                "took": 12,
                "hits": {
                    "total": 2,
                    "hits": [
                        {"_id": "7", "_score": 2500, "_source": {"csphinx-class": [80, 111, 115, 116]}},
                        {"_id": 3, "_score": 1500, "_source": {"csphinx-class": [80, 111, 115, 116]}},
                    ],
                },
            }
        )
        result = self.client.query(QueryRequest(text="hello"))

        self.session.post.assert_called_once()
        args, kwargs = self.session.post.call_args
        self.assertEqual(args[0], "http://search.local:9308/search")
        self.assertEqual(kwargs["timeout"], 2.5)
        self.assertEqual(result.status, 0)
        self.assertEqual(result.total_found, 2)
        self.assertEqual([match.document_id for match in result.matches], ["7", 3])
        self.assertEqual(result.matches[0].weight, 2500.0)
        self.assertAlmostEqual(result.time, 0.012)

    def test_query_error_is_a_status_not_an_exception(self):
        self.session.post.return_value = _response(400, {"error": "unknown local index 'nope'"})
        result = self.client.query(QueryRequest(text="hello", index="nope"))
        self.assertEqual(result.status, 1)
        self.assertIn("nope", result.error)
        self.assertFalse(result.succeeded)

    def test_warning_keeps_matches(self):
        self.session.post.return_value = _response(
            payload={"warning": {"reason": "index outdated"}, "hits": {"total": 1, "hits": [{"_id": 1}]}}
        )
        result = self.client.query(QueryRequest(text="hello"))
        self.assertEqual(result.status, 3)
        self.assertTrue(result.succeeded)
        self.assertEqual(result.warning, "index outdated")

    def test_transport_failures_raise(self):
        self.session.post.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(DaemonUnavailable):
            self.client.query(QueryRequest(text="hello"))

        self.session.post.side_effect = None
        self.session.post.return_value = _response(503, {})
        with self.assertRaises(DaemonUnavailable):
            self.client.query(QueryRequest(text="hello"))

        self.session.post.return_value = _response(200, ValueError("no json"))
        with self.assertRaises(DaemonUnavailable):
            self.client.query(QueryRequest(text="hello"))


if __name__ == "__main__":
    unittest.main()
