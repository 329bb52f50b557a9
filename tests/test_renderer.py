import re
import threading
from pathlib import Path

from conftest import FakeRasterizer, FakeRenderer
from mdview.markdown.diagrams.exceptions import DiagramRenderError
from mdview.markdown.preprocessors.image_paths import ImageBase
from mdview.markdown.renderer import DocumentProcessor, count_words, process_markdown

IMAGE_REF = re.compile(r"!\[[^\]]*\]\(([^)]+)\)")

ARTICLE = """<!--category-- Testing, Mermaid -->
<datetime class="hidden">2026-01-12T14:00</datetime>

# Title

**[Read the guide](guide.md)**

![Screenshot](images/shot.png)

```mermaid
flowchart LR
    A --> B
```

## Lists

- Item 1
- Item 2
  - Nested
1. Numbered
2. List

| Column 1 | Column 2 |
|----------|----------|
| Data 1   | Data 2   |
"""


def _context(tmp_path, **extra):
    context = {
        "asset_directory": tmp_path,
        "diagram_renderer": FakeRenderer(),
        "rasterizer": FakeRasterizer(),
    }
    context.update(extra)
    return context


def test_process_full_document(tmp_path):
    result = process_markdown(ARTICLE, _context(tmp_path, image_base=ImageBase.from_path("/docs")))

    assert "<!--category--" not in result
    assert "<datetime" not in result
    assert result.startswith("# Title")
    assert "[**Read the guide**](guide.md)" in result
    assert "![Screenshot](file:///docs/images/shot.png)" in result
    assert "```mermaid" not in result
    assert "- Nested" in result and "1. Numbered" in result
    assert "| Data 1   | Data 2   |" in result
    assert result == result.strip()


def test_process_preserves_regular_code_blocks(tmp_path):
    content = "# Code Test\n\n```csharp\npublic class Test { }\n```\n\n```javascript\nconsole.log('hello');\n```"
    assert process_markdown(content, _context(tmp_path)) == content


def test_process_is_idempotent(tmp_path):
    once = process_markdown(ARTICLE, _context(tmp_path, image_base=ImageBase.from_url("https://host/posts")))
    renderer = FakeRenderer()
    twice = process_markdown(once, _context(tmp_path, diagram_renderer=renderer, image_base=ImageBase.from_url("https://host/posts")))
    assert twice == once
    assert renderer.sources == []


def test_diagram_images_are_not_rewritten_by_image_paths(tmp_path):
    result = process_markdown(ARTICLE, _context(tmp_path, image_base=ImageBase.from_url("https://host/posts")))
    diagram = [p for p in IMAGE_REF.findall(result) if p.endswith("mermaid_0.png")]
    assert diagram and Path(diagram[0]).is_absolute()


def test_failed_diagram_keeps_source(tmp_path):
    context = _context(tmp_path, diagram_renderer=FakeRenderer(error=DiagramRenderError("Parse error on line 1")))
    result = process_markdown(ARTICLE, context)
    assert "```mermaid\nflowchart LR\n    A --> B\n```" in result
    assert "parse error" in result


def test_process_empty_text(tmp_path):
    assert process_markdown("", _context(tmp_path)) == ""
    assert process_markdown("  \n\n  ", _context(tmp_path)) == ""


def test_process_without_context_uses_defaults():
    assert process_markdown("  # Heading\n\n![x](a.png)\n") == "# Heading\n\n![x](a.png)"


def test_count_words():
    assert count_words("one two\nthree\t four") == 4
    assert count_words("") == 0


def test_processor_base_modes_are_exclusive(tmp_path):
    processor = DocumentProcessor(asset_root=tmp_path)
    processor.set_base_path("/docs")
    processor.set_base_url("https://host/posts/")
    assert processor.image_base == ImageBase(base_url="https://host/posts")
    processor.set_base_path("/docs")
    assert processor.image_base == ImageBase(base_path="/docs")


def test_processor_creates_temp_directory_once(tmp_path):
    processor = DocumentProcessor(asset_root=tmp_path, diagram_renderer=FakeRenderer(), rasterizer=FakeRasterizer())
    assert processor.temp_directory.is_dir()
    assert processor.temp_directory.parent == tmp_path
    processor.process(ARTICLE)
    processor.process(ARTICLE)
    assert [p.parent for p in tmp_path.iterdir()] == [tmp_path]


def test_processor_counter_resets_per_document(tmp_path):
    processor = DocumentProcessor(asset_root=tmp_path, diagram_renderer=FakeRenderer(), rasterizer=FakeRasterizer())
    first = IMAGE_REF.findall(processor.process(ARTICLE))
    second = IMAGE_REF.findall(processor.process(ARTICLE))
    assert Path(first[-1]).name == Path(second[-1]).name == "mermaid_0.png"
    assert first[-1] != second[-1]
    assert Path(first[-1]).exists() and Path(second[-1]).exists()


def test_processor_dark_mode(tmp_path):
    rasterizer = FakeRasterizer()
    processor = DocumentProcessor(asset_root=tmp_path, diagram_renderer=FakeRenderer(), rasterizer=rasterizer)
    processor.set_dark_mode(True)
    processor.process(ARTICLE)
    assert "#e6edf3" in rasterizer.calls[0][0]


def test_processor_concurrent_documents(tmp_path):
    processor = DocumentProcessor(asset_root=tmp_path, diagram_renderer=FakeRenderer(), rasterizer=FakeRasterizer())
    document = "\n\n".join(f"```mermaid\ngraph TD\n  N{i} --> M{i}\n```" for i in range(5))
    results = []

    def worker():
        results.append(IMAGE_REF.findall(processor.process(document)))

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 4
    for paths in results:
        assert [Path(p).name for p in paths] == [f"mermaid_{i}.png" for i in range(5)]
    all_paths = [p for paths in results for p in paths]
    assert len(set(all_paths)) == len(all_paths)


def test_processor_metadata_and_headings(tmp_path):
    processor = DocumentProcessor(asset_root=tmp_path)
    assert list(processor.extract_metadata(ARTICLE).categories) == ["Testing", "Mermaid"]
    headings = processor.extract_headings(ARTICLE)
    assert [h.text for h in headings] == ["Title"]
    assert [h.text for h in headings[0].children] == ["Lists"]


def test_reused_context_starts_each_document_at_zero(tmp_path):
    context = _context(tmp_path, image_base=ImageBase.from_url("https://host/posts"))
    first = IMAGE_REF.findall(process_markdown(ARTICLE, context))
    second = IMAGE_REF.findall(process_markdown(ARTICLE, context))
    assert Path(first[-1]).name == Path(second[-1]).name == "mermaid_0.png"
    assert first[-1] != second[-1]
    assert "diagram_run" not in context


def test_process_is_idempotent_with_base_path(tmp_path):
    once = process_markdown(ARTICLE, _context(tmp_path, image_base=ImageBase.from_path("/docs")))
    twice = process_markdown(once, _context(tmp_path, image_base=ImageBase.from_path("/docs")))
    assert twice == once
