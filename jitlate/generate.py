"""
Translation file generation.

Reads a source JSON message catalog and writes one translated catalog per
target language next to it (or into an output directory):

    messages/en.json -> messages/es.json, messages/fr.json, ...

Strings that need disambiguation can carry a context hint. The hint goes to
the backend as translation context and is dropped from the output:

    {"save": {"$t": "Save", "$ctx": "button: save file to disk"}}

Usage:
    # From code
    stats = await generate_translations(translator, "messages/en.json", ["es", "fr"])

    # From command line
    jitlate-generate -i messages/en.json -l es,fr,de
    jitlate-generate -i messages/en.json -o dist/i18n -l ja --flat
    jitlate-generate -i messages/en.json -l es,fr --dry-run
"""

from __future__ import annotations

import argparse
import asyncio
import json
import math
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

from jitlate.config import get_settings
from jitlate.core.errors import ConfigurationError, JitlateError
from jitlate.languages import get_language_name, is_language_supported, normalize_locale
from jitlate.messages import (
    CatalogEntry,
    extract_entries,
    flatten,
    rebuild,
    resolve_entries,
    translations_by_path,
)
from jitlate.translator import Translator

BATCH_SIZE = 50
CHARS_PER_TOKEN = 4


@dataclass
class GenerateStats:
    """Outcome of generating one language file."""

    language: str
    total_strings: int
    translated_strings: int
    cached_strings: int
    output_file: Path
    duration: float  # Seconds


# =============================================================================
# Helpers
# =============================================================================


def load_catalog(input_file: str | Path) -> Any:
    """
    Read a source catalog.

    Raises:
        FileNotFoundError: input file missing
        ConfigurationError: input file is not valid JSON
    """
    path = Path(input_file)
    if not path.is_file():
        raise FileNotFoundError(f"Input file not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e


def write_catalog(catalog: Any, output_file: Path) -> None:
    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(catalog, f, ensure_ascii=False, indent=2)
        f.write("\n")


def split_list(value: str | None) -> list[str]:
    """Split a comma-separated option: "es, fr,,de" -> ["es", "fr", "de"]."""
    return [v.strip() for v in (value or "").split(",") if v.strip()]


def target_languages(languages: Sequence[str]) -> list[str]:
    """Normalize target locale codes, warning about ones the language table lacks."""
    codes: list[str] = []
    for lang in languages:
        code = normalize_locale(lang)
        if not is_language_supported(code) and get_language_name(code) == code:
            print(f"⚠️  Language '{lang}' is not in the supported list, translating anyway")
        if code not in codes:
            codes.append(code)
    return codes


def estimate_tokens(entries: Sequence[CatalogEntry], language_count: int) -> tuple[int, int]:
    """
    Rough backend usage for a run, at about four characters per token.

    Returns:
        (input tokens per language, total tokens for all languages counting output)
    """
    per_language = math.ceil(sum(len(e.text) for e in entries) / CHARS_PER_TOKEN)
    return per_language, per_language * language_count * 2


def progress_bar(done: int, total: int, width: int = 30) -> str:
    fraction = done / total if total else 1.0
    filled = round(fraction * width)
    return f"[{'█' * filled}{'░' * (width - filled)}] {round(fraction * 100)}%"


def _output_dir(input_file: str | Path, output_dir: str | Path | None) -> Path:
    return Path(output_dir) if output_dir else Path(input_file).parent


# =============================================================================
# Generation
# =============================================================================


def plan_generation(
    input_file: str | Path,
    languages: Sequence[str],
    output_dir: str | Path | None = None,
) -> tuple[int, int]:
    """Print what a run would write and its estimated token usage, without calling the backend."""
    entries = extract_entries(load_catalog(input_file))
    codes = target_languages(languages)
    out = _output_dir(input_file, output_dir)

    print("\n🔍 Dry run, nothing will be translated\n")
    for code in codes:
        print(f"Would generate: {out / f'{code}.json'}")
        print(f"  Language: {get_language_name(code)}")
        print(f"  Strings: {len(entries)}")

    per_language, total = estimate_tokens(entries, len(codes))
    print("\n📈 Estimated usage:")
    print(f"  Input tokens per language: ~{per_language:,}")
    print(f"  Total tokens (all languages): ~{total:,}")
    return per_language, total


async def generate_translations(
    translator: Translator,
    input_file: str | Path,
    languages: Sequence[str],
    output_dir: str | Path | None = None,
    flat: bool = False,
    verbose: bool = False,
    batch_size: int = BATCH_SIZE,
) -> list[GenerateStats]:
    """
    Translate a source catalog into one {language}.json file per language.

    Args:
        translator: Translator whose provider, cache and hints are used
        input_file: Source JSON catalog
        languages: Target locale codes
        output_dir: Where to write files (default: the input file's directory)
        flat: Write {"nav.home": "..."} instead of the source nesting
        verbose: Print a preview of the extracted strings
        batch_size: Strings per backend request

    Returns:
        Stats for each language that was written. A language whose
        translation fails is reported and skipped.
    """
    catalog = load_catalog(input_file)
    entries = extract_entries(catalog)
    codes = target_languages(languages)
    out = _output_dir(input_file, output_dir)

    print(f"\n📄 Source: {input_file}")
    print(f"📊 Found {len(entries)} translatable strings")
    print(f"🌍 Target languages: {', '.join(codes)}")
    hinted = sum(1 for e in entries if e.context)
    if hinted:
        print(f"💡 {hinted} strings have context hints")

    if verbose:
        print("\nSample strings:")
        for entry in entries[:5]:
            hint = f" [{entry.context}]" if entry.context else ""
            print(f"  {entry.key}: \"{entry.text[:50]}\"{hint}")
        if len(entries) > 5:
            print(f"  ... and {len(entries) - 5} more")

    out.mkdir(parents=True, exist_ok=True)
    print()

    stats: list[GenerateStats] = []
    for code in codes:
        name = get_language_name(code)
        started = time.monotonic()

        def show(done: int, total: int) -> None:
            print(f"\r{name}: {progress_bar(done, total)}", end="", flush=True)

        try:
            result = await resolve_entries(translator, entries, code, batch_size, on_progress=show)
        except JitlateError as e:
            print(f"\r{name}: ✗ {e}")
            continue

        translated = rebuild(catalog, translations_by_path(entries, result))
        output_file = out / f"{code}.json"
        write_catalog(flatten(translated) if flat else translated, output_file)

        duration = time.monotonic() - started
        print(f"\r{name}: {progress_bar(1, 1)} ✓ ({duration:.1f}s)")
        stats.append(GenerateStats(
            language=code,
            total_strings=len(entries),
            translated_strings=result.translated_count,
            cached_strings=result.cached_count,
            output_file=output_file,
            duration=duration,
        ))

    if stats:
        print("\n✅ Generated:")
        for s in stats:
            print(
                f"  {s.output_file} ({s.translated_strings} translated, "
                f"{s.cached_strings} cached, {s.duration:.1f}s)"
            )
    return stats


# =============================================================================
# CLI Entry Point
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jitlate-generate",
        description="Generate translated JSON message catalogs from a source catalog",
    )
    parser.add_argument(
        "--input", "-i",
        required=True,
        help="Source JSON catalog (e.g. messages/en.json)",
    )
    parser.add_argument(
        "--output", "-o",
        help="Output directory (default: same as input)",
    )
    parser.add_argument(
        "--languages", "-l",
        required=True,
        help="Comma-separated target languages (e.g. es,fr,de)",
    )
    parser.add_argument(
        "--context", "-c",
        help="Translation context for the whole catalog",
    )
    parser.add_argument(
        "--exclude", "-e",
        help="Comma-separated terms to keep untranslated",
    )
    parser.add_argument(
        "--flat",
        action="store_true",
        help="Write flat dot-notation keys instead of nested objects",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be generated and an estimated token count",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show sample strings",
    )
    return parser


async def _run(args: argparse.Namespace, languages: list[str]) -> list[GenerateStats]:
    config = get_settings().translation_config()
    update: dict[str, Any] = {}
    if args.context:
        update["translation_context"] = args.context
    if args.exclude:
        update["excluded_terms"] = [*config.excluded_terms, *split_list(args.exclude)]

    async with Translator(config.model_copy(update=update)) as translator:
        return await generate_translations(
            translator,
            args.input,
            languages,
            output_dir=args.output,
            flat=args.flat,
            verbose=args.verbose,
        )


def main(argv: list[str] | None = None) -> int:
    """Generate translation files from command line."""
    parser = build_parser()
    args = parser.parse_args(argv)
    languages = split_list(args.languages)
    if not languages:
        parser.error("at least one target language is required")

    try:
        if args.dry_run:
            plan_generation(args.input, languages, args.output)
            return 0

        settings = get_settings()
        if settings.provider_type == "openai" and not (
            settings.provider_api_key or os.getenv("OPENAI_API_KEY")
        ):
            print("❌ OPENAI_API_KEY (or JITLATE_PROVIDER_API_KEY) is required")
            return 1

        stats = asyncio.run(_run(args, languages))
    except (OSError, JitlateError) as e:
        print(f"❌ {e}")
        return 1

    # Non-zero when any language failed
    return 0 if len(stats) == len({normalize_locale(lang) for lang in languages}) else 1


if __name__ == "__main__":
    raise SystemExit(main())
