from md_render.composer import HtmlComposer, extract_title


def test_hello_world_document() -> None:
    document = HtmlComposer().compose("# Hello\n\nWorld")

    assert "<h1>Hello</h1>" in document.html
    assert "<p>World</p>" in document.html
    assert document.html.startswith("<!DOCTYPE html>")
    assert "<title>Hello</title>" in document.html
    assert document.title == "Hello"


def test_stylesheet_rules_are_embedded() -> None:
    html = HtmlComposer().compose("text").html

    assert "font-family: monospace" in html
    assert "background: #f6f8fa" in html
    assert "color: #0b3d91" in html
    assert "max-width: 100%" in html


def test_compose_is_deterministic() -> None:
    source = "# Notes\n\n```python\nprint('hi')\n```\n\n| a | b |\n|---|---|\n| 1 | 2 |\n"
    first = HtmlComposer().compose(source).html
    second = HtmlComposer().compose(source).html

    assert first == second
    assert "<table>" in first
    assert "<pre><code" in first


def test_body_html_is_not_sanitized_but_title_is_escaped() -> None:
    document = HtmlComposer().compose("# Fish & <Chips>\n\n<div class=\"raw\">kept</div>")

    assert '<div class="raw">kept</div>' in document.html
    assert "<title>Fish &amp; &lt;Chips&gt;</title>" in document.html


def test_custom_parser_is_used() -> None:
    composer = HtmlComposer(parser=lambda text: f"<article>{text.upper()}</article>")
    assert "<article>SHOUT</article>" in composer.compose("shout").html


def test_extract_title_preference_order() -> None:
    assert extract_title("intro\n## Sub\n# Main #\n") == "Main"
    assert extract_title("Setext Title\n=====\n\nbody") == "Setext Title"
    assert extract_title("no headings here", fallback="notes.md") == "notes.md"
