from django.template import Context, Template

DOCUMENT = "<!--category-- Alpha, Beta -->\n# One\n## Two\n![x](pic.png)"


def _render(template, **context):
    return Template("{% load markdown_tags %}" + template).render(Context(context))


def test_display_markdown_filter():
    output = _render("{{ doc|display_markdown|safe }}", doc=DOCUMENT)
    assert output == "# One\n## Two\n![x](pic.png)"


def test_display_markdown_with_base_url():
    output = _render('{{ doc|display_markdown:"https://host/posts"|safe }}', doc=DOCUMENT)
    assert "![x](https://host/posts/pic.png)" in output


def test_document_categories_filter():
    output = _render("{% for c in doc|document_categories %}[{{ c }}]{% endfor %}", doc=DOCUMENT)
    assert output == "[Alpha][Beta]"


def test_document_headings_tag():
    output = _render(
        "{% document_headings doc as toc %}"
        "{% for h in toc %}{{ h.slug }}:{% for c in h.children %}{{ c.text }}{% endfor %}{% endfor %}",
        doc=DOCUMENT,
    )
    assert output == "one:Two"
