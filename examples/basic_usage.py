#!/usr/bin/env python3
"""
Basic usage example for loom.

This example transforms inline template text and a template file with an
include, shows the generated unit, and demonstrates how failures are
reported against template lines.
"""

from pathlib import Path

import loom

TEMPLATES = Path(__file__).parent / "templates"


def main():
    """Demonstrate basic loom usage."""
    print("loom Text Templates - Basic Usage Example")
    print("=" * 60)

    # Inline template text
    print("\n1. Transforming inline text...")
    transformer = loom.TextTemplateTransformer()
    print(transformer.transform_text('Hello <#= "World" #>!', "greeting.tt"))

    # Template file with properties and an include
    print("\n2. Transforming a template file...")
    transformer = loom.TextTemplateTransformer(base_directory=TEMPLATES)
    entries = [("ada", 96), ("grace", 81), ("linus", 64)]
    print(transformer.transform_file("report.tt", "Scores", entries))

    # Inspect the generated unit without running it
    print("\n3. Generated unit:")
    transformer = loom.TextTemplateTransformer(base_directory=TEMPLATES)
    print(transformer.generate_file("report.tt"))

    # Failures point at the template line
    print("\n4. Error reporting:")
    try:
        loom.TextTemplateTransformer().transform_text("ok\n<# 1 / 0 #>\n", "broken.tt")
    except loom.TemplateExecutionError as e:
        print(f"✓ Caught {e} at {e.source_reference}")

    print(f"\nloom version: {loom.__version__}")


if __name__ == "__main__":
    main()
