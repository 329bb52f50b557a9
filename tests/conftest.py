import django
import pytest
from django.conf import settings


def pytest_configure(config):
    if not settings.configured:
        settings.configure(
            INSTALLED_APPS=["mdview"],
            DATABASES={},
            TEMPLATES=[
                {
                    "BACKEND": "django.template.backends.django.DjangoTemplates",
                    "APP_DIRS": True,
                }
            ],
        )
    django.setup()


SIMPLE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="120" height="60" viewBox="0 0 120 60">'
    '<rect x="10" y="10" width="100" height="40" style="fill:#ECECFF;stroke:#9370DB"/>'
    '<g class="label" transform="translate(20, 20)">'
    '<foreignObject width="80" height="24">'
    '<div xmlns="http://www.w3.org/1999/xhtml" style="display: table-cell;">'
    '<span class="nodeLabel"><p>Start</p></span></div>'
    "</foreignObject></g>"
    "</svg>"
)


class FakeRenderer:
    """Stands in for the Mermaid CLI: records sources, returns fixed SVG or raises."""

    def __init__(self, svg=SIMPLE_SVG, error=None):
        self.svg = svg
        self.error = error
        self.sources = []

    def __call__(self, source):
        self.sources.append(source)
        if self.error is not None:
            raise self.error
        return self.svg


class FakeRasterizer:
    def __init__(self):
        self.calls = []

    def __call__(self, svg_text, scale):
        self.calls.append((svg_text, scale))
        return b"\x89PNG\r\n\x1a\nfake"


@pytest.fixture
def fake_renderer():
    return FakeRenderer()


@pytest.fixture
def fake_rasterizer():
    return FakeRasterizer()
