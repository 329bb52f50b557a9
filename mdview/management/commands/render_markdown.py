"""
Management command to render a markdown document for display.

Prints the processed markdown (metadata tags removed, images resolved,
Mermaid diagrams rasterized) and optionally the metadata and heading tree.
"""

import json
from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from mdview.documents import DocumentLoadError, load_document
from mdview.markdown.renderer import DocumentProcessor, count_words
from mdview.markdown.toc_extractor import flatten_headings


class Command(BaseCommand):
    help = 'Render a markdown file or URL into display markdown'

    def add_arguments(self, parser):
        parser.add_argument(
            'source',
            help='Path or http(s) URL of the markdown document',
        )
        base = parser.add_mutually_exclusive_group()
        base.add_argument(
            '--base-path',
            help='Resolve relative images against this directory',
        )
        base.add_argument(
            '--base-url',
            help='Resolve relative images against this URL',
        )
        parser.add_argument(
            '--dark',
            action='store_true',
            help='Render diagram labels for a dark background',
        )
        parser.add_argument(
            '--metadata',
            action='store_true',
            help='Show categories and publication date',
        )
        parser.add_argument(
            '--headings',
            action='store_true',
            help='Show the heading tree',
        )
        parser.add_argument(
            '--json',
            action='store_true',
            help='Emit markdown, metadata and headings as JSON',
        )
        parser.add_argument(
            '--output',
            type=str,
            help='Write the processed markdown to this file',
        )

    def handle(self, *args, **options):
        try:
            document = load_document(options['source'])
        except DocumentLoadError as e:
            raise CommandError(str(e))

        processor = DocumentProcessor(dark_mode=options.get('dark', False))
        processor.set_image_base(document.image_base)
        if options.get('base_path'):
            processor.set_base_path(options['base_path'])
        elif options.get('base_url'):
            processor.set_base_url(options['base_url'])

        metadata = processor.extract_metadata(document.content)
        headings = processor.extract_headings(document.content)
        processed = processor.process(document.content)

        if options.get('json'):
            payload = {
                'markdown': processed,
                'metadata': metadata.to_dict(),
                'headings': [heading.to_dict() for heading in headings],
            }
            self.stdout.write(json.dumps(payload, indent=2))
            return

        if options.get('metadata'):
            self._write_metadata(metadata)

        if options.get('headings'):
            self.stdout.write(self.style.MIGRATE_HEADING('Headings'))
            for heading in flatten_headings(headings):
                self.stdout.write(f'  {heading.display_text}  (#{heading.slug}, line {heading.line + 1})')
            self.stdout.write('')

        output = options.get('output')
        if output:
            Path(output).write_text(processed + '\n', encoding='utf-8')
            self.stdout.write(
                self.style.SUCCESS(
                    f'Wrote {output} ({count_words(processed):,} words)'
                )
            )
        else:
            self.stdout.write(processed)

    def _write_metadata(self, metadata):
        self.stdout.write(self.style.MIGRATE_HEADING('Metadata'))
        if not metadata.has_metadata:
            self.stdout.write(self.style.WARNING('  No metadata found'))
        if metadata.categories:
            self.stdout.write(f"  Categories: {', '.join(metadata.categories)}")
        if metadata.publication_date:
            self.stdout.write(
                f"  Published:  {metadata.publication_date.strftime('%B')} "
                f"{metadata.publication_date.day}, {metadata.publication_date.year}"
            )
        self.stdout.write('')
