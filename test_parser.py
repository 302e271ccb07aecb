"""
End-to-end tests for the Parser: HTML text in, items out, through lxml.
"""

import json

import pytest
from lxml import etree

from schemaorg_parser import (
    Parser,
    DefaultListener,
    ItemTreeBuilder,
    Format,
    InputError,
    DocumentError,
    parse_html,
    parse_html_file,
)


HTML_WITH_MICRODATA = (
    '<div itemscope itemtype="http://schema.org/FoodEstablishmentReservation">'
    '<meta itemprop="reservationNumber" content="OT12345"/>'
    '<link itemprop="reservationStatus" href="http://schema.org/Confirmed"/>'
    '<div itemprop="underName" itemscope itemtype="http://schema.org/Person">'
    ' <meta itemprop="name" content="John Smith"/>'
    '</div>'
    '<div itemprop="reservationFor" itemscope itemtype="http://schema.org/FoodEstablishment">'
    ' <meta itemprop="name" content="Wagamama"/>'
    ' <div itemprop="address" itemscope itemtype="http://schema.org/PostalAddress">'
    '  <meta itemprop="streetAddress" content="1 Tavistock Street"/>'
    '  <meta itemprop="addressLocality" content="London"/>'
    '  <meta itemprop="addressRegion" content="Greater London"/>'
    '  <meta itemprop="postalCode" content="WC2E 7PG"/>'
    '  <meta itemprop="addressCountry" content="United Kingdom"/>'
    ' </div>'
    '</div>'
    '<meta itemprop="startTime" content="2017-04-10T08:00:00+00:00"/>'
    '<meta itemprop="partySize" content="2"/>'
    '</div>'
)

EXPECTED_MICRODATA_ITEM = {
    "type": ["FoodEstablishmentReservation"],
    "reservationNumber": ["OT12345"],
    "reservationStatus": ["http://schema.org/Confirmed"],
    "underName": [{"type": ["Person"], "name": ["John Smith"]}],
    "reservationFor": [{
        "type": ["FoodEstablishment"],
        "name": ["Wagamama"],
        "address": [{
            "type": ["PostalAddress"],
            "streetAddress": ["1 Tavistock Street"],
            "addressLocality": ["London"],
            "addressRegion": ["Greater London"],
            "postalCode": ["WC2E 7PG"],
            "addressCountry": ["United Kingdom"],
        }],
    }],
    "startTime": ["2017-04-10T08:00:00+00:00"],
    "partySize": ["2"],
}

RESERVATION_JSON = (
    '{\r\n  "@context": "http://schema.org",\r\n  "@type": "FoodEstablishmentReservation",\r\n'
    '  "reservationNumber": "OT12345",\r\n  "reservationStatus": "http://schema.org/Confirmed",\r\n'
    '  "underName": {\r\n    "@type": "Person",\r\n    "name": "John Smith"\r\n  },\r\n'
    '  "reservationFor": {\r\n    "@type": "FoodEstablishment",\r\n    "name": "Wagamama",\r\n'
    '    "address": {\r\n      "@type": "PostalAddress",\r\n      "streetAddress": "1 Tavistock Street",\r\n'
    '      "addressLocality": "London",\r\n      "addressRegion": "Greater London",\r\n'
    '      "postalCode": "WC2E 7PG",\r\n      "addressCountry": "United Kingdom"\r\n    }\r\n  },\r\n'
    '  "startTime": "2017-04-10T08:00:00+00:00",\r\n  "partySize": "2"\r\n}'
)

# Same reservation with the "{" before reservationFor's "@type" missing
MALFORMED_RESERVATION_JSON = RESERVATION_JSON.replace(
    '"reservationFor": {', '"reservationFor": '
)


def script(text):
    return f'<script type="application/ld+json">\r\n{text}\r\n</script>'


HTML_WITH_JSON = script(RESERVATION_JSON)


def run(html, parser=None):
    parser = parser or Parser()
    listener = DefaultListener()
    parser.register_listener(listener)
    parser.parse(html)
    return listener


# ---------------------------------------------------------------------------
# Microdata
# ---------------------------------------------------------------------------

def test_microdata_type_count():
    listener = run(HTML_WITH_MICRODATA)
    assert listener.total_itemtypes == 4

def test_microdata_single_top_level_item():
    listener = run(HTML_WITH_MICRODATA)
    assert listener.items == [EXPECTED_MICRODATA_ITEM]
    assert [t.name for t in listener.itemtypes] == [
        "FoodEstablishmentReservation", "Person", "FoodEstablishment", "PostalAddress",
    ]
    assert all(t.format is Format.MICRODATA for t in listener.itemtypes)

def test_microdata_itemtype_with_trailing_slash():
    listener = run(
        '<div itemscope itemtype="http://schema.org/Person/">'
        '<span itemprop="email">v</span></div>'
    )
    assert listener.items == [{"type": ["Person"], "email": ["v"]}]
    assert [t.name for t in listener.itemtypes] == ["Person"]

def test_microdata_in_full_page():
    html = (
        "<!DOCTYPE html><html><head><title>Movie</title></head><body>"
        '<div itemscope itemtype="http://schema.org/Movie">'
        '<h1 itemprop="name">Sin City: A Dame to Kill For</h1>'
        '<img itemprop="image" src="poster.jpg" alt="poster">'
        '<span itemprop="genre">Action</span>, <span itemprop="genre">Crime</span>'
        '<p itemprop="description">  Some <b>bold</b> words  </p>'
        '<a itemprop="url" href="/title/tt0458481/">link</a>'
        "</div>"
        "</body></html>"
    )
    listener = run(html)
    assert listener.items == [{
        "type": ["Movie"],
        "name": ["Sin City: A Dame to Kill For"],
        "image": ["poster.jpg"],
        "genre": ["Action", "Crime"],
        "description": ["Some bold words"],
        "url": ["/title/tt0458481/"],
    }]

def test_uppercase_markup():
    html = '<DIV ITEMSCOPE ITEMTYPE="http://schema.org/Person"><SPAN ITEMPROP="name">Jane</SPAN></DIV>'
    listener = run(html)
    assert listener.items == [{"type": ["Person"], "name": ["Jane"]}]


# ---------------------------------------------------------------------------
# JSON-LD
# ---------------------------------------------------------------------------

def test_json_type_count():
    listener = run(HTML_WITH_JSON)
    assert listener.total_itemtypes == 4

def test_json_item_is_the_parsed_block():
    listener = run(HTML_WITH_JSON)
    assert listener.items == [json.loads(RESERVATION_JSON)]

def test_json_person_scenario():
    listener = run('<script type="application/ld+json">{"@type":"Person","name":"John Smith"}</script>')
    assert listener.itemtypes[0].name == "Person"
    assert listener.itemtypes[0].format is Format.JSONLD
    assert listener.items == [{"@type": "Person", "name": "John Smith"}]
    assert listener.total_itemtypes == 1

@pytest.mark.parametrize("blocks", [
    [RESERVATION_JSON, MALFORMED_RESERVATION_JSON],
    [MALFORMED_RESERVATION_JSON, RESERVATION_JSON],
], ids=["second-malformed", "first-malformed"])
def test_malformed_block_is_skipped(blocks):
    listener = run("".join(script(b) for b in blocks))
    assert len(listener.items) == 1
    assert listener.items[0] == json.loads(RESERVATION_JSON)
    assert listener.total_itemtypes == 4
    assert listener.is_parsing_finished()

def test_json_types_in_arrays():
    block = json.dumps({
        "@context": "http://schema.org",
        "@type": "ItemList",
        "itemListElement": [
            {"@type": "ListItem", "item": {"@type": "Recipe"}},
            {"@type": "ListItem", "item": {"@type": "Recipe"}},
        ],
    })
    listener = run(script(block))
    assert [t.name for t in listener.itemtypes] == ["ItemList", "ListItem", "Recipe", "ListItem", "Recipe"]
    assert listener.total_itemtypes == 5

def test_json_and_microdata_together():
    html = (
        "<html><head>" + script('{"@type": "Organization", "name": "ACME"}') + "</head><body>"
        '<div itemscope itemtype="http://schema.org/Person"><span itemprop="name">Jane</span></div>'
        "</body></html>"
    )
    listener = run(html)
    assert listener.items == [
        {"@type": "Organization", "name": "ACME"},
        {"type": ["Person"], "name": ["Jane"]},
    ]
    assert listener.total_itemtypes == 2

def test_plain_scripts_are_ignored():
    listener = run('<script>var item = {"@type": "Person"};</script><p>text</p>')
    assert listener.items == []
    assert listener.total_itemtypes == 0


# ---------------------------------------------------------------------------
# Driver contract
# ---------------------------------------------------------------------------

def test_empty_html():
    listener = run("")
    assert listener.items == []
    assert listener.total_itemtypes == 0
    assert listener.is_parsing_finished()

def test_whitespace_html():
    listener = run("   \n ")
    assert listener.items == []
    assert listener.is_parsing_finished()

def test_html_without_annotations():
    listener = run("<html><body><p>Nothing to see</p></body></html>")
    assert listener.items == []
    assert listener.total_itemtypes == 0
    assert listener.is_parsing_finished()

def test_none_html_raises_before_any_event():
    parser = Parser()
    listener = DefaultListener()
    parser.register_listener(listener)
    with pytest.raises(InputError):
        parser.parse(None)
    assert listener.items == []
    assert not listener.is_parsing_finished()

def test_non_string_html_raises():
    with pytest.raises(InputError):
        Parser().parse(b"<div></div>")

def test_input_error_is_a_value_error():
    with pytest.raises(ValueError):
        Parser().parse(None)

def test_parse_is_idempotent():
    html = HTML_WITH_MICRODATA + HTML_WITH_JSON
    first = run(html)
    second = run(html)
    assert json.dumps(first.items) == json.dumps(second.items)
    assert first.total_itemtypes == second.total_itemtypes == 8

def test_parser_reuse_with_same_listener():
    parser = Parser()
    listener = DefaultListener()
    parser.register_listener(listener)
    parser.parse(HTML_WITH_JSON)
    parser.parse(HTML_WITH_JSON)
    # Items accumulate in the listener; the count is per document
    assert len(listener.items) == 2
    assert listener.total_itemtypes == 4

def test_multiple_listeners_see_the_same_items():
    parser = Parser()
    first, second = DefaultListener(), DefaultListener()
    parser.register_listener(first)
    parser.register_listener(second)
    parser.parse(HTML_WITH_MICRODATA)
    assert first.items == second.items == [EXPECTED_MICRODATA_ITEM]
    assert parser.listeners == [first, second]

def test_custom_handler_factory():
    created = []

    def factory(listeners):
        builder = ItemTreeBuilder(listeners)
        created.append(builder)
        return builder

    parser = Parser(handler_factory=factory)
    run(HTML_WITH_JSON, parser=parser)
    run(HTML_WITH_JSON, parser=parser)
    assert len(created) == 2
    assert created[0] is not created[1]

def test_tokenizer_failure_does_not_finish_parsing():
    class FailingOnParagraph(ItemTreeBuilder):
        def on_tag_open(self, name, attributes):
            if name == "p":
                raise etree.ParserError("tokenizer gave up")
            super().on_tag_open(name, attributes)

    parser = Parser(handler_factory=FailingOnParagraph)
    listener = DefaultListener()
    parser.register_listener(listener)

    with pytest.raises(DocumentError):
        parser.parse(
            '<html><body>'
            '<script type="application/ld+json">{"@type": "Event"}</script>'
            '<p>after the block</p>'
            '</body></html>'
        )

    assert listener.items == [{"@type": "Event"}]
    assert listener.parsing_finished is False
    assert listener.total_itemtypes == 0

def test_listener_errors_propagate():
    class Exploding(DefaultListener):
        def found_item(self, item):
            raise RuntimeError("boom")

    parser = Parser()
    parser.register_listener(Exploding())
    with pytest.raises(RuntimeError):
        parser.parse(HTML_WITH_JSON)


# ---------------------------------------------------------------------------
# Convenience functions and files
# ---------------------------------------------------------------------------

def test_parse_html():
    result = parse_html(HTML_WITH_MICRODATA)
    assert result.items == [EXPECTED_MICRODATA_ITEM]
    assert result.total_itemtypes == 4
    assert result.finished is True

def test_parse_html_file(tmp_path):
    path = tmp_path / "page.html"
    path.write_bytes(
        b'<html><head><meta charset="utf-8"></head><body>'
        b'<div itemscope itemtype="http://schema.org/Person">'
        b'<span itemprop="name">Jos\xc3\xa9</span></div></body></html>'
    )
    result = parse_html_file(path)
    assert result.items == [{"type": ["Person"], "name": ["José"]}]

def test_parse_file_uses_declared_charset(tmp_path):
    path = tmp_path / "latin.html"
    path.write_bytes(
        b'<html><head><meta charset="iso-8859-1"></head><body>'
        b'<div itemscope itemtype="http://schema.org/Place">'
        b'<span itemprop="name">Caf\xe9</span></div></body></html>'
    )
    result = parse_html_file(path)
    assert result.items == [{"type": ["Place"], "name": ["Café"]}]

def test_parse_missing_file(tmp_path):
    with pytest.raises(DocumentError):
        Parser().parse_file(tmp_path / "missing.html")
