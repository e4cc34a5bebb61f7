"""
Tag Steganographer Plugin - Hides Bacon's cipher in HTML-like tags

Letters of the public text are wrapped in an A tag or a B tag, e.g.
"T<b>h</b>i<b>s</b> <b>is</b> a ..." with only the B tag defined.
On reveal the text is parsed into an element tree and every text run is
classified by its nearest enclosing element.

DelimiterSteganographer, Marker, ParsedElement, ElementKind and
register_steganographer are injected by the plugin loader.
"""

from html.parser import HTMLParser

# Tags are markers whose delimiters are element tags, e.g. Tag("<b>", "</b>")
Tag = Marker

# Elements that never hold text and have no end tag
VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
})


class Node:
    """Element (with `tag`) or text leaf (with `text`) of a parsed document."""

    def __init__(self, tag=None, text=None):
        self.tag = tag
        self.text = text
        self.children = []


class TreeBuilder(HTMLParser):
    """
    Builds a Node tree out of the html.parser token stream.

    Stray end tags are ignored; elements left open close at end of input.
    """

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.root = Node(tag="#document")
        self._stack = [self.root]

    def handle_starttag(self, tag, attrs):
        node = Node(tag=tag)
        self._stack[-1].children.append(node)
        if tag not in VOID_ELEMENTS:
            self._stack.append(node)

    def handle_startendtag(self, tag, attrs):
        self._stack[-1].children.append(Node(tag=tag))

    def handle_endtag(self, tag):
        for depth in range(len(self._stack) - 1, 0, -1):
            if self._stack[depth].tag == tag:
                del self._stack[depth:]
                return

    def handle_data(self, data):
        self._stack[-1].children.append(Node(text=data))


def parse_document(text: str) -> Node:
    builder = TreeBuilder()
    builder.feed(text)
    builder.close()
    return builder.root


@register_steganographer
class SimpleTagSteganographer(DelimiterSteganographer):
    """
    Wraps letters in tags such as <i>..</i> (A) and <b>..</b> (B).

    Text under any other element, or under no element at all, belongs to
    the undefined tag when one of the tags is left empty and is ignored
    otherwise. Pass `optimize_disguise=False` to keep one tag pair per
    letter in the disguised output.
    """

    name = "tags"
    description = "Wraps letters in HTML-like tags, e.g. <b>b</b> for B (A or B may be left untagged)."

    DEFAULT_B_MARKER = Tag("<b>", "</b>")

    def parse(self, text: str):
        elements = []
        self._collect(parse_document(text), elements, ElementKind.OTHER)
        return elements

    def _kind_of(self, tag: str):
        name = f"<{tag}>"
        if self.a_marker.is_defined() and name == self.a_marker.start.lower():
            return ElementKind.A
        if self.b_marker.is_defined() and name == self.b_marker.start.lower():
            return ElementKind.B
        return ElementKind.OTHER

    def _collect(self, node, elements, parent_kind):
        if node.text is not None:
            kind = parent_kind
            if kind is ElementKind.OTHER:
                kind = self.undefined_kind
            if kind is not None:
                elements.append(ParsedElement(node.text, kind))
            return

        kind = parent_kind if node.tag == "#document" else self._kind_of(node.tag)
        for child in node.children:
            self._collect(child, elements, kind)
