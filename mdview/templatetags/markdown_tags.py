# mdview/templatetags/markdown_tags.py

from django import template

from mdview.markdown.metadata import extract_metadata
from mdview.markdown.preprocessors.image_paths import ImageBase
from mdview.markdown.renderer import process_markdown
from mdview.markdown.toc_extractor import extract_headings

register = template.Library()


@register.filter(name="display_markdown")
def display_markdown_filter(value, base_url=None):
    """Processed display markdown; the optional argument is a base URL for images."""
    context = {"image_base": ImageBase.from_url(base_url)} if base_url else {}
    return process_markdown(value, context=context)


@register.filter(name="document_categories")
def document_categories_filter(value):
    return list(extract_metadata(value).categories)


@register.simple_tag
def document_headings(value):
    """Heading tree for a navigation panel"""
    return extract_headings(value)
