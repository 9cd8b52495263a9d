import unittest

from application.services.attribute_codec import CLASS_ATTRIBUTE, AttributeCodec
from application.services.registry import ClassRegistry
from application.services.result_decoder import MAX_IDENTIFIER, ResultDecoder, parse_identifier
from domain.entities import RawMatch


class TestResultDecoder(unittest.TestCase):
    def setUp(self) -> None:
        registry = ClassRegistry()
        registry.register("Post", "title")
        registry.register("Comment", "body")
        self.codec = AttributeCodec(registry)
        self.decoder = ResultDecoder(self.codec)

    def _match(self, document_id, class_tag=None, **attributes):
        if class_tag is not None:
            attributes[CLASS_ATTRIBUTE] = self.codec.encode(class_tag)
        return RawMatch(document_id=document_id, weight=1.0, attributes=attributes)

    def test_preserves_rank_order(self):
        decoded = self.decoder.decode([self._match(7, "Post"), self._match(3, "Post"), self._match(9, "Post")])
        self.assertEqual(decoded.identifiers, [7, 3, 9])
        self.assertEqual(decoded.class_tag, "Post")

    def test_mixed_classes_are_grouped(self):
        decoded = self.decoder.decode(
            [self._match(7, "Post"), self._match(7, "Comment"), self._match(2, "Post")]
        )
        self.assertEqual(decoded.entries, [("Post", 7), ("Comment", 7), ("Post", 2)])
        self.assertEqual(decoded.groups(), {"Post": [7, 2], "Comment": [7]})
        self.assertEqual(decoded.class_tag, "Post")

    def test_skips_undecodable_identifiers(self):
        decoded = self.decoder.decode(
            [self._match("x", "Post"), self._match(-1, "Post"), self._match("12", "Post"), self._match(None, "Post")]
        )
        self.assertEqual(decoded.identifiers, [12])

    def test_skips_unknown_classes(self):
        decoded = self.decoder.decode([self._match(1, "Invoice"), self._match(2, "Post")])
        self.assertEqual(decoded.entries, [("Post", 2)])

    def test_missing_attribute_uses_class_scope(self):
        matches = [self._match(4), self._match(5, "Post")]
        self.assertEqual(self.decoder.decode(matches, class_scope="Post").identifiers, [4, 5])
        self.assertEqual(self.decoder.decode(matches).identifiers, [5])

    def test_parse_identifier(self):
        self.assertEqual(parse_identifier("42"), 42)
        self.assertEqual(parse_identifier(42.0), 42)
        self.assertIsNone(parse_identifier(4.5))
        self.assertIsNone(parse_identifier(True))
        self.assertIsNone(parse_identifier(-2))
        self.assertIsNone(parse_identifier(2**64))
        self.assertIsNone(parse_identifier(float("inf")))
        self.assertEqual(parse_identifier(MAX_IDENTIFIER), MAX_IDENTIFIER)

    def test_skips_identifiers_beyond_the_store_range(self):
        decoded = self.decoder.decode([self._match(2**64, "Post"), self._match(3, "Post")])
        self.assertEqual(decoded.identifiers, [3])

    def test_skips_identifiers_outside_the_class_space(self):
        registry = ClassRegistry()
        registry.register("Tag", "name", idsize=8)
        codec = AttributeCodec(registry)
        matches = [
            RawMatch(document_id=256, attributes={CLASS_ATTRIBUTE: codec.encode("Tag")}),
            RawMatch(document_id=255, attributes={CLASS_ATTRIBUTE: codec.encode("Tag")}),
        ]
        self.assertEqual(ResultDecoder(codec).decode(matches).identifiers, [255])
        self.assertEqual(ResultDecoder(codec).decode([RawMatch(document_id=300)], class_scope="Tag").identifiers, [])


if __name__ == "__main__":
    unittest.main()
