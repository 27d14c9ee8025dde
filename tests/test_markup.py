"""Tests for the Markdown body renderer."""

from blogsite.markup import render_body, split_more


def test_rendering_is_idempotent():
    text = (
        "# Title\n\nSome *emphasis* and a [link](https://example.com).\n\n"
        "## Section\n\n```python\nprint('hi')\n```\n\nNote[^1].\n\n[^1]: A footnote.\n"
    )
    first = render_body(text)
    second = render_body(text)

    assert first == second
    assert first.html == second.html


def test_inline_constructs():
    rendered = render_body("Some *emphasis*, a [link](https://example.com) and ![alt](img.png).")

    assert "<em>emphasis</em>" in rendered.html
    assert '<a href="https://example.com">link</a>' in rendered.html
    assert 'src="img.png"' in rendered.html
    assert 'alt="alt"' in rendered.html


def test_headings_get_ids_and_toc():
    rendered = render_body("## First Section\n\nText\n\n### Detail\n\nMore")

    assert '<h2 id="first-section">First Section</h2>' in rendered.html
    assert "first-section" in rendered.toc


def test_footnotes():
    rendered = render_body("Claim[^1].\n\n[^1]: Source.\n")

    assert 'class="footnote"' in rendered.html
    assert "Source." in rendered.html


def test_fenced_code_is_literal():
    rendered = render_body("```\n# not a heading\n*not emphasis*\n```\n")

    assert "<h1" not in rendered.html
    assert "<em>" not in rendered.html
    assert "not a heading" in rendered.html


def test_unclosed_fence_runs_to_end_of_document():
    text = "Intro paragraph.\n\n```python\nx = 1\n# not a heading\n\nStill *code*.\n"
    rendered = render_body(text)

    assert "<p>Intro paragraph.</p>" in rendered.html
    assert "<h1" not in rendered.html
    assert "<em>" not in rendered.html
    assert "not a heading" in rendered.html
    assert "Still" in rendered.html
    assert "codehilite" in rendered.html
    assert "<p><div" not in rendered.html


def test_runnable_block_passes_through():
    text = "```python runnable\nif 1 < 2:\n    print('ok')\n```\n"
    rendered = render_body(text)

    assert '<pre><code class="language-python runnable">if 1 &lt; 2:\n    print(&#x27;ok&#x27;)\n</code></pre>' in (
        rendered.html
    )
    assert "codehilite" not in rendered.html


def test_unclosed_runnable_block():
    rendered = render_body("```runnable\nx = 1\n")
    assert '<pre><code class="runnable">x = 1\n</code></pre>' in rendered.html
    assert "<p><pre" not in rendered.html


def test_unclosed_runnable_block_after_paragraph():
    rendered = render_body("Intro.\n\n```python runnable\nx = 1\n")

    assert "<p>Intro.</p>" in rendered.html
    assert '<pre><code class="language-python runnable">x = 1\n</code></pre>' in rendered.html
    assert "<p><pre" not in rendered.html


def test_more_marker_splits_excerpt():
    rendered = render_body("Intro para.\n\n<!--more-->\n\nRest para.\n")

    assert rendered.has_more is True
    assert rendered.excerpt_html == "<p>Intro para.</p>"
    assert "<p>Intro para.</p>" in rendered.html
    assert "<p>Rest para.</p>" in rendered.html
    assert "more" not in rendered.html


def test_more_marker_inside_fence_is_code():
    text = "```\n<!--more-->\n```\n\nAfter."
    before, after = split_more(text)
    rendered = render_body(text)

    assert after is None
    assert before == text
    assert rendered.has_more is False
    assert rendered.excerpt_html == rendered.html
