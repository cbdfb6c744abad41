"""
Cache warming for translations.

Pre-translates known strings (message catalogs, UI strings) into priority
languages so users never hit a cold cache.

Run on:
- Deploy (recommended, with a Redis cache)
- Cron job (to catch new strings)

Usage:
    # Warm all priority languages
    await warm_translation_cache(translator, texts)

    # CLI
    jitlate-warmup --messages-dir messages/en -l es fr de
"""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any, Iterable

import yaml

from jitlate.config import get_settings
from jitlate.core.errors import JitlateError
from jitlate.core.models import TranslatableItem
from jitlate.languages import WARM_UP_LANGUAGES, get_language_name
from jitlate.messages import extract_entries
from jitlate.translator import Translator


# =============================================================================
# Content Loaders
# =============================================================================


def load_message_files(messages_dir: str | Path) -> list[str]:
    """Load every string from the YAML / JSON message catalogs in a directory."""
    texts: list[str] = []
    path = Path(messages_dir)

    if not path.exists():
        print(f"⚠️  Messages directory not found: {messages_dir}")
        return texts

    for file in sorted(path.iterdir()):
        if file.suffix not in {".yaml", ".yml", ".json"}:
            continue
        try:
            with open(file, encoding="utf-8") as f:
                data = json.load(f) if file.suffix == ".json" else yaml.safe_load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            print(f"  ⚠️  Error loading {file}: {e}")
            continue

        # Strings with a context hint are fingerprinted with it, so they are left
        # to jitlate-generate
        texts.extend(e.text for e in extract_entries(data) if e.context is None)
        print(f"  ✓ Loaded {file.name}")

    return texts


def unique_texts(texts: Iterable[str]) -> list[str]:
    """Drop blanks and duplicates (by fingerprint), keeping first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for text in texts:
        if not text or not text.strip():
            continue
        item = TranslatableItem.from_text(text)
        if item.fingerprint not in seen:
            seen.add(item.fingerprint)
            result.append(item.text)
    return result


# =============================================================================
# Cache Warming
# =============================================================================


async def warm_translation_cache(
    translator: Translator,
    texts: Iterable[str],
    languages: Iterable[str] | None = None,
    batch_size: int = 20,
    verbose: bool = True,
) -> dict[str, Any]:
    """
    Pre-warm the translator's cache.

    Args:
        translator: Translator whose cache should be filled
        texts: Source strings
        languages: Target languages (defaults to WARM_UP_LANGUAGES)
        batch_size: Texts per backend request
        verbose: Print progress

    Returns:
        Stats dict with counts
    """
    lang_codes = list(languages) if languages else list(WARM_UP_LANGUAGES)
    all_texts = unique_texts(texts)

    if verbose:
        print("=" * 60)
        print(f"🔥 Warming jitlate cache ({len(all_texts)} strings)")
        print("=" * 60)
        print(f"\nLanguages: {' '.join(lang_codes)}")
        print(f"📊 Unique texts: {len(all_texts)} × {len(lang_codes)} languages")

    stats = {
        "languages": len(lang_codes),
        "texts": len(all_texts),
        "translations": 0,
        "cached": 0,
        "errors": 0,
    }

    for lang in lang_codes:
        if verbose:
            print(f"\n🌍 {get_language_name(lang)} ({lang})")

        for i in range(0, len(all_texts), batch_size):
            batch = [TranslatableItem.from_text(t) for t in all_texts[i:i + batch_size]]
            try:
                result = await translator.translate_batch(batch, lang)
            except JitlateError as e:
                stats["errors"] += 1
                if verbose:
                    print(f"   ⚠️  Batch {i // batch_size + 1} failed: {e}")
                continue

            stats["cached"] += result.cached_count
            stats["translations"] += result.translated_count
            if verbose:
                progress = min(i + batch_size, len(all_texts))
                print(f"   {progress}/{len(all_texts)}", end="\r")

        if verbose:
            print(f"   ✓ {lang} done")

    if verbose:
        print("\n" + "=" * 60)
        print("✅ Cache warm")
        print("=" * 60)
        print(f"   Hits: {stats['cached']}")
        print(f"   Translated: {stats['translations']}")
        print(f"   Failed batches: {stats['errors']}")

    return stats


# =============================================================================
# CLI Entry Point
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Pre-translate message catalogs into the jitlate cache"
    )
    parser.add_argument(
        "--messages-dir", "-m",
        required=True,
        help="Directory of YAML/JSON source message catalogs",
    )
    parser.add_argument(
        "--languages", "-l",
        nargs="+",
        help="Specific languages to warm (default: priority languages)",
    )
    parser.add_argument(
        "--batch-size", "-b",
        type=int,
        default=20,
        help="Texts per backend request",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Minimal output",
    )
    return parser


async def _run(args: argparse.Namespace) -> dict[str, Any]:
    texts = load_message_files(args.messages_dir)
    async with Translator(get_settings().translation_config()) as translator:
        return await warm_translation_cache(
            translator,
            texts,
            languages=args.languages,
            batch_size=args.batch_size,
            verbose=not args.quiet,
        )


def main(argv: list[str] | None = None) -> int:
    """Run cache warm-up from command line."""
    args = build_parser().parse_args(argv)
    stats = asyncio.run(_run(args))
    return 1 if stats["errors"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
